# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import logging
import os
import shlex
import shutil
import subprocess
from subprocess import CalledProcessError
from subprocess import CompletedProcess
from typing import Mapping
from typing import Optional
from typing import Sequence

from hostprep._core import ProvisioningError

_TIMEOUT_SEC = 600


class Secret(str):
    """Argument that must not appear in logs.

    >>> _loggable(['ssh-keygen', '-N', Secret('hunter2')])
    'ssh-keygen -N ***'
    >>> Secret('hunter2') == 'hunter2'
    True
    """


class CommandFailed(CalledProcessError):

    def __str__(self):
        stderr = (self.stderr or '')[:5000].strip()
        return f"Command {_loggable(self.cmd)} died with exit status {self.returncode}: {stderr}"


class ExecutableNotFound(ProvisioningError):

    def __init__(self, name):
        super().__init__(f"Executable not found: {name}")


class CommandTimedOut(ProvisioningError):

    def __init__(self, args, timeout):
        super().__init__(f"Command {_loggable(args)} did not finish in {timeout} seconds")


class Shell:
    """Run commands on the local machine, blocking until they exit.

    Output is decoded as text. Standard input is closed unless data is given,
    so a command that unexpectedly waits for input fails instead of hanging.
    """

    def __init__(self, env: Optional[Mapping[str, str]] = None):
        self._env = dict(env or {})

    def __repr__(self):
        return f'{Shell.__name__}({self._env!r})'

    def with_env(self, **env: str) -> 'Shell':
        return self.__class__({**self._env, **env})

    def run(self, args: Sequence[str], *, input: Optional[str] = None) -> CompletedProcess:  # noqa PyShadowingBuiltins
        r = self.run_still(args, input=input)
        if r.returncode != 0:
            _logger.info("Failed with %d: %s: %s", r.returncode, _loggable(args), r.stderr.strip())
            raise CommandFailed(r.returncode, list(args), r.stdout, r.stderr)
        return r

    def run_still(self, args: Sequence[str], *, input: Optional[str] = None) -> CompletedProcess:  # noqa PyShadowingBuiltins
        _logger.info("Run: %s", _loggable(args))
        try:
            r = subprocess.run(
                [str(arg) for arg in args],
                input=input,
                # It may hang waiting for input when no input is actually needed.
                stdin=subprocess.DEVNULL if input is None else None,
                capture_output=True,
                text=True,
                env=self._environ(),
                timeout=_TIMEOUT_SEC,
                )
        except FileNotFoundError:
            raise ExecutableNotFound(args[0])
        except subprocess.TimeoutExpired:
            _logger.info("Timed out after %d seconds: %s", _TIMEOUT_SEC, _loggable(args))
            raise CommandTimedOut(args, _TIMEOUT_SEC)
        _logger.debug("Exit status %d: %s", r.returncode, _loggable(args))
        return r

    def run_attached(self, args: Sequence[str]):
        """Run with the terminal attached, for commands that talk to the operator."""
        _logger.info("Run attached: %s", _loggable(args))
        try:
            r = subprocess.run([str(arg) for arg in args], env=self._environ())
        except FileNotFoundError:
            raise ExecutableNotFound(args[0])
        if r.returncode != 0:
            raise CommandFailed(r.returncode, list(args))

    def which(self, name: str) -> Optional[str]:
        return shutil.which(name, path=self._environ().get('PATH') if self._env else None)

    def environ(self) -> Mapping[str, str]:
        return self._environ() or os.environ

    def _environ(self):
        if not self._env:
            return None
        return {**os.environ, **self._env}


def _loggable(args) -> str:
    if isinstance(args, str):
        return args
    return ' '.join('***' if isinstance(arg, Secret) else shlex.quote(str(arg)) for arg in args)


_logger = logging.getLogger(__name__)
