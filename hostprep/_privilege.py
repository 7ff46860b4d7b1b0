# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
"""Capability check at process entry.

A procedure that needs root checks it before doing anything.
If not root, the same module is started again via sudo (or doas)
with the same arguments, replacing the current process.
Nothing privileged is ever attempted without root.
"""
import logging
import os
import shutil
import sys
from typing import Callable
from typing import List
from typing import Optional
from typing import Sequence

from hostprep._core import ProvisioningError

_ELEVATORS = ('sudo', 'doas')


class CannotElevate(ProvisioningError):
    pass


def is_root() -> bool:
    return os.geteuid() == 0


def elevation_command(
        module: str,
        argv: Sequence[str],
        which: Optional[Callable[[str], Optional[str]]] = None,
        ) -> List[str]:
    """Build the command that re-runs the module as root.

    >>> elevation_command('hostprep.ups', ['client', '--host', 'nas'], {'sudo': '/usr/bin/sudo'}.get)[2:]
    ['-m', 'hostprep.ups', 'client', '--host', 'nas']
    >>> elevation_command('hostprep.ups', ['server'], {'doas': '/usr/bin/doas'}.get)[0]
    '/usr/bin/doas'
    """
    if which is None:
        which = shutil.which
    for name in _ELEVATORS:
        path = which(name)
        if path is not None:
            return [path, sys.executable, '-m', module, *argv]
    raise CannotElevate(
        "Root privileges are required, but neither sudo nor doas is available. "
        "Run as root")


def ensure_root(module: str, argv: Sequence[str]):
    if is_root():
        _logger.debug("Running as root")
        return
    command = elevation_command(module, argv)
    _logger.info("Not root, re-run: %s", command)
    print(f"Root privileges are required, re-running via {os.path.basename(command[0])}", flush=True)
    os.execvp(command[0], command)


_logger = logging.getLogger(__name__)
