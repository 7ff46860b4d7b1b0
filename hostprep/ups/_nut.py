# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import logging
import re
from pathlib import Path
from typing import List

from hostprep import _console
from hostprep._config_files import BackupFiles
from hostprep._config_files import WriteFile
from hostprep._core import BestEffortRun
from hostprep._core import Command
from hostprep._core import CompositeCommand
from hostprep._core import Run
from hostprep._packages import AptInstall
from hostprep.ups._mode import UpsMode
from hostprep.ups._templates import UPSSCHED_CMD
from hostprep.ups._templates import nut_conf
from hostprep.ups._templates import render_monitoring_files
from hostprep.ups._templates import ups_conf_header
from hostprep.ups._templates import upsd_conf
from hostprep.ups._templates import upsd_users

_SERVER_FILES = ['nut.conf', 'upsd.conf', 'upsd.users', 'ups.conf', 'upsmon.conf', 'upssched.conf', UPSSCHED_CMD]
_CLIENT_FILES = ['nut.conf', 'upsmon.conf', 'upssched.conf', UPSSCHED_CMD]


def backed_up_files(mode: UpsMode, config_dir: Path) -> List[Path]:
    names = _SERVER_FILES if mode.is_server() else _CLIENT_FILES
    return [config_dir / name for name in names]


def packages(mode: UpsMode) -> List[str]:
    """
    >>> packages(UpsMode.server())
    ['nut']
    >>> packages(UpsMode.client('nas'))
    ['nut-client']
    """
    return ['nut'] if mode.is_server() else ['nut-client']


class ScanUpsDriver(Command):
    """Detect USB UPS devices and name the driver section after the UPS."""

    def __init__(self, config_dir: Path, ups_name: str):
        self._ups_conf = config_dir / 'ups.conf'
        self._ups_name = ups_name

    def __repr__(self):
        return f'{ScanUpsDriver.__name__}({str(self._ups_conf)!r}, {self._ups_name!r})'

    def run(self, shell):
        _console.step("Scanning for USB UPS devices...")
        r = shell.run(['nut-scanner', '-U'])
        sections = rename_sections(r.stdout, self._ups_name)
        if not sections.strip():
            _console.warning("nut-scanner found no USB UPS devices")
        WriteFile(self._ups_conf, ups_conf_header() + sections).run(shell)
        _logger.info("Driver sections: %s", sections)
        Run('upsdrvctl', 'start').run(shell)


def rename_sections(scanner_output: str, ups_name: str) -> str:
    """Give every section the same name, like sed 's/\\[.*\\]/[ups]/g'.

    >>> rename_sections('[nutdev1]\\n\\tdriver = "usbhid-ups"\\n', 'ups')
    '[ups]\\n\\tdriver = "usbhid-ups"\\n'
    """
    return re.sub(r'\[.*\]', f'[{ups_name}]', scanner_output)


class WriteMonitoringConfig(CompositeCommand):
    """Write upsmon.conf, upssched.conf and upssched-cmd from the same mode, always together."""

    def __init__(self, mode: UpsMode, config_dir: Path, ups_name: str):
        files = render_monitoring_files(mode, config_dir, ups_name)
        super().__init__([
            WriteFile(config_dir / name, content, 0o755 if name == UPSSCHED_CMD else None)
            for name, content in files.items()
            ])
        self._repr = f'{WriteMonitoringConfig.__name__}({mode.nut_mode!r}, {mode.server_host!r}, {str(config_dir)!r})'

    def __repr__(self):
        return self._repr


class RestartNut(CompositeCommand):
    """Core daemons must restart. The driver bounce is best-effort."""

    def __init__(self, mode: UpsMode):
        if mode.is_server():
            commands = [
                Run('service', 'nut-server', 'restart'),
                Run('service', 'nut-client', 'restart'),
                Run('systemctl', 'restart', 'nut-monitor'),
                BestEffortRun('upsdrvctl', 'stop'),
                BestEffortRun('upsdrvctl', 'start'),
                ]
        else:
            commands = [
                Run('service', 'nut-client', 'restart'),
                Run('systemctl', 'restart', 'nut-monitor'),
                ]
        super().__init__(commands)
        self._repr = f'{RestartNut.__name__}({mode.nut_mode!r})'

    def __repr__(self):
        return self._repr

    def run(self, shell):
        _console.step("Restarting NUT services...")
        super().run(shell)


def nut_plan(mode: UpsMode, config_dir: Path, ups_name: str, backup_suffix: str) -> List[Command]:
    plan = [
        AptInstall(*packages(mode)),
        BackupFiles(backed_up_files(mode, config_dir), backup_suffix),
        WriteFile(config_dir / 'nut.conf', nut_conf(mode)),
        ]
    if mode.is_server():
        plan.extend([
            ScanUpsDriver(config_dir, ups_name),
            WriteFile(config_dir / 'upsd.conf', upsd_conf()),
            WriteFile(config_dir / 'upsd.users', upsd_users(mode)),
            ])
    plan.extend([
        WriteMonitoringConfig(mode, config_dir, ups_name),
        RestartNut(mode),
        ])
    return plan


_logger = logging.getLogger(__name__)
