# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import logging
import platform
from pathlib import Path
from typing import Mapping
from typing import NamedTuple

from hostprep import _console
from hostprep._core import ProvisioningError


class UnsupportedPlatform(ProvisioningError):
    pass


class Platform(NamedTuple):
    system: str
    arch: str
    distro_id: str = ''
    distro_like: str = ''

    def is_macos(self) -> bool:
        return self.system == 'macos'

    def is_linux(self) -> bool:
        return self.system == 'linux'

    def is_debian_like(self) -> bool:
        """Tell if apt is the native package manager.

        >>> Platform('linux', 'x86_64', 'ubuntu').is_debian_like()
        True
        >>> Platform('linux', 'aarch64', 'raspbian', 'debian').is_debian_like()
        True
        >>> Platform('linux', 'x86_64', 'fedora').is_debian_like()
        False
        """
        if self.distro_id in ('ubuntu', 'debian'):
            return True
        return 'ubuntu' in self.distro_like or 'debian' in self.distro_like


def detect_platform(os_release: Path = Path('/etc/os-release')) -> Platform:
    _console.step("Detecting operating system...")
    system = platform.system()
    arch = platform.machine()
    if system == 'Darwin':
        result = Platform('macos', arch)
        if arch != 'arm64':
            _console.warning(f"Detected macOS on {arch} (optimized for ARM)")
    elif system == 'Linux':
        if os_release.exists():
            release = parse_os_release(os_release.read_text())
        else:
            release = {}
        result = Platform('linux', arch, release.get('ID', ''), release.get('ID_LIKE', ''))
        if release and not result.is_debian_like():
            _console.warning(f"Detected {result.distro_id or 'unknown'} - optimized for Ubuntu/Debian")
    else:
        raise UnsupportedPlatform(f"Unsupported operating system: {system}")
    _logger.info("Detected %r", result)
    _console.success(f"Detected OS: {result.system} ({arch})")
    return result


def parse_os_release(text: str) -> Mapping[str, str]:
    """Parse os-release(5) KEY=value lines, dropping quotes.

    >>> parse_os_release('ID=ubuntu\\nID_LIKE="debian"\\n# comment\\n')
    {'ID': 'ubuntu', 'ID_LIKE': 'debian'}
    """
    result = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith('#'):
            continue
        key, sep, value = line.partition('=')
        if not sep:
            continue
        result[key] = value.strip().strip('"\'')
    return result


def pinentry_program(current: Platform, shell: 'Shell') -> str:
    if current.is_macos():
        for candidate in ('/opt/homebrew/bin/pinentry-mac', '/usr/local/bin/pinentry-mac'):
            if Path(candidate).exists():
                return candidate
        # Intel Macs have Homebrew under /usr/local.
        return '/usr/local/bin/pinentry-mac'
    if Path('/usr/bin/pinentry-tty').exists():
        return '/usr/bin/pinentry-tty'
    return shell.which('pinentry-tty') or shell.which('pinentry') or '/usr/bin/pinentry'


_logger = logging.getLogger(__name__)
