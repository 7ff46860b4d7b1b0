# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
"""Contents of NUT configuration files.

See: https://networkupstools.org/docs/man/upsmon.conf.html
See: https://networkupstools.org/docs/man/upssched.conf.html
"""
from pathlib import PurePosixPath
from typing import Mapping

from hostprep.ups._mode import UpsMode

UPSMON_CONF = 'upsmon.conf'
UPSSCHED_CONF = 'upssched.conf'
UPSSCHED_CMD = 'upssched-cmd'


def nut_conf(mode: UpsMode) -> str:
    """
    >>> nut_conf(UpsMode.client('nas'))
    'MODE=netclient\\n'
    """
    return f'MODE={mode.nut_mode}\n'


def ups_conf_header() -> str:
    # Driver sections are appended by nut-scanner.
    return (
        'pollinterval = 15\n'
        'maxretry = 3\n'
        'offdelay = 180\n'
        'ondelay = 300\n'
        )


def upsd_conf() -> str:
    return (
        'LISTEN 0.0.0.0 3493\n'
        'LISTEN :: 3493\n'
        )


def upsd_users(mode: UpsMode) -> str:
    return (
        '[upsadmin]\n'
        '# Administrative user\n'
        'password = upsadmin\n'
        '# Allow changing values of certain variables in the UPS.\n'
        'actions = SET\n'
        '# Allow setting the "Forced Shutdown" flag in the UPS.\n'
        'actions = FSD\n'
        '# Allow all instant commands\n'
        'instcmds = ALL\n'
        f'upsmon {mode.monitor_role}\n'
        '\n'
        '[upsuser]\n'
        '# Normal user\n'
        'password = upsuser\n'
        'upsmon slave\n'
        )


def upsmon_conf(mode: UpsMode, ups_name: str) -> str:
    """
    >>> upsmon_conf(UpsMode.client('nas.lan'), 'ups').splitlines()[1]
    'MONITOR ups@nas.lan 1 upsuser upsuser slave'
    """
    return (
        'RUN_AS_USER root\n'
        f'MONITOR {ups_name}@{mode.server_host} 1 {mode.user} {mode.password} {mode.monitor_role}\n'
        '\n'
        'MINSUPPLIES 1\n'
        'SHUTDOWNCMD "/sbin/shutdown -h"\n'
        'NOTIFYCMD /usr/sbin/upssched\n'
        'POLLFREQ 2\n'
        'POLLFREQALERT 1\n'
        'HOSTSYNC 15\n'
        'DEADTIME 15\n'
        'MAXAGE 24\n'
        'POWERDOWNFLAG /etc/killpower\n'
        '\n'
        'NOTIFYMSG ONLINE "UPS %s on line power"\n'
        'NOTIFYMSG ONBATT "UPS %s on battery"\n'
        'NOTIFYMSG LOWBATT "UPS %s battery is low"\n'
        'NOTIFYMSG FSD "UPS %s: forced shutdown in progress"\n'
        'NOTIFYMSG COMMOK "Communications with UPS %s established"\n'
        'NOTIFYMSG COMMBAD "Communications with UPS %s lost"\n'
        'NOTIFYMSG SHUTDOWN "Auto logout and shutdown proceeding"\n'
        'NOTIFYMSG REPLBATT "UPS %s battery needs to be replaced"\n'
        'NOTIFYMSG NOCOMM "UPS %s is unavailable"\n'
        'NOTIFYMSG NOPARENT "upsmon parent process died - shutdown impossible"\n'
        '\n'
        'NOTIFYFLAG ONLINE   SYSLOG+WALL+EXEC\n'
        'NOTIFYFLAG ONBATT   SYSLOG+WALL+EXEC\n'
        'NOTIFYFLAG LOWBATT  SYSLOG+WALL+EXEC\n'
        'NOTIFYFLAG FSD      SYSLOG+WALL+EXEC\n'
        'NOTIFYFLAG COMMOK   SYSLOG+WALL+EXEC\n'
        'NOTIFYFLAG COMMBAD  SYSLOG+WALL+EXEC\n'
        'NOTIFYFLAG SHUTDOWN SYSLOG+WALL+EXEC\n'
        'NOTIFYFLAG REPLBATT SYSLOG+WALL\n'
        'NOTIFYFLAG NOCOMM   SYSLOG+WALL+EXEC\n'
        'NOTIFYFLAG NOPARENT SYSLOG+WALL\n'
        '\n'
        'RBWARNTIME 43200\n'
        'NOCOMMWARNTIME 600\n'
        '\n'
        'FINALDELAY 5\n'
        )


def upssched_conf(config_dir: PurePosixPath) -> str:
    return (
        f'CMDSCRIPT {config_dir / UPSSCHED_CMD}\n'
        f'PIPEFN {config_dir / "upssched.pipe"}\n'
        f'LOCKFN {config_dir / "upssched.lock"}\n'
        '\n'
        'AT ONBATT * START-TIMER earlyshutdown 30\n'
        'AT ONLINE * CANCEL-TIMER earlyshutdown online\n'
        'AT LOWBATT * EXECUTE criticalshutdown\n'
        'AT COMMBAD * START-TIMER upsgone 30\n'
        'AT COMMOK * CANCEL-TIMER upsgone commok\n'
        'AT NOCOMM * EXECUTE upsgone\n'
        'AT SHUTDOWN * EXECUTE powerdown\n'
        )


def upssched_cmd() -> str:
    return (
        '#!/bin/sh\n'
        'case $1 in\n'
        '      earlyshutdown)\n'
        '         logger -t upssched-cmd "UPS on battery too long, early shutdown"\n'
        '         /usr/sbin/upsmon -c fsd\n'
        '         ;;\n'
        '      criticalshutdown)\n'
        '         logger -t upssched-cmd "UPS on battery critical, forced shutdown"\n'
        '         /usr/sbin/upsmon -c fsd\n'
        '         ;;\n'
        '      upsgone)\n'
        '         logger -t upssched-cmd "UPS has been gone too long, can\'t reach"\n'
        '         ;;\n'
        '      powerdown)\n'
        '         logger -t upssched-cmd "Powering down"\n'
        '         ;;\n'
        '      *)\n'
        '         logger -t upssched-cmd "Unrecognized command: $1"\n'
        '         ;;\n'
        'esac\n'
        )


def render_monitoring_files(mode: UpsMode, config_dir: PurePosixPath, ups_name: str) -> Mapping[str, str]:
    """Render the three coupled files together from the same mode."""
    return {
        UPSMON_CONF: upsmon_conf(mode, ups_name),
        UPSSCHED_CONF: upssched_conf(config_dir),
        UPSSCHED_CMD: upssched_cmd(),
        }
