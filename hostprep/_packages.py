# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import logging
from typing import NamedTuple
from typing import Sequence

from hostprep import _console
from hostprep._core import Command
from hostprep._core import ProvisioningError
from hostprep._core import Run

_HOMEBREW_INSTALL = (
    '/bin/bash -c "$(curl -fsSL '
    'https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh)"')


class MissingPackageManager(ProvisioningError):
    pass


class Requirement(NamedTuple):
    """Package that provides any of the executables."""

    package: str
    executables: Sequence[str]

    def is_satisfied(self, shell) -> bool:
        return any(shell.which(name) for name in self.executables)


class InstallMissing(Command):
    """Install packages with the platform package manager, only the missing ones."""

    def __init__(self, platform: 'Platform', requirements: Sequence[Requirement]):
        self._platform = platform
        self._requirements = requirements

    def __repr__(self):
        packages = [r.package for r in self._requirements]
        return f'{InstallMissing.__name__}({self._platform.system!r}, {packages!r})'

    def run(self, shell):
        missing = [r.package for r in self._requirements if not r.is_satisfied(shell)]
        if not missing:
            _console.success("All prerequisites are already installed")
            return
        _console.step(f"Missing packages: {' '.join(missing)}")
        if self._platform.is_macos():
            if not shell.which('brew'):
                raise MissingPackageManager(
                    "Homebrew is not installed. Please install it first:\n"
                    f"  {_HOMEBREW_INSTALL}")
            _console.step("Installing packages via Homebrew...")
            shell.run_attached(['brew', 'install', *missing])
        else:
            _console.step("Installing packages via apt...")
            shell.run_attached(['sudo', 'apt', 'update'])
            shell.run_attached(['sudo', 'apt', 'install', '-y', *missing])
        _logger.info("Installed: %s", missing)
        _console.success("Prerequisites installed successfully")


class AptInstall(Run):
    """Install with apt as the current (root) user. Installed packages are kept as is."""

    def __init__(self, *packages: str):
        super().__init__('apt', 'install', '-y', *packages)
        self._packages = packages

    def __repr__(self):
        return f'{AptInstall.__name__}({", ".join(repr(p) for p in self._packages)})'

    def run(self, shell):
        _console.step(f"Installing {' '.join(self._packages)}...")
        shell.run_attached(self._args)


_logger = logging.getLogger(__name__)
