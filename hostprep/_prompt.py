# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import getpass
import logging
from typing import Callable

from hostprep._core import ProvisioningError
from hostprep._core import SetupCancelled


class InvalidInput(ProvisioningError):
    pass


class Prompter:
    """Ask the operator. Secrets are never echoed and never logged."""

    def __init__(
            self,
            read_line: Callable[[str], str] = input,
            read_secret: Callable[[str], str] = getpass.getpass,
            ):
        self._read_line = read_line
        self._read_secret = read_secret

    def ask(self, prompt: str, default: str = '') -> str:
        if default:
            question = f"{prompt} [{default}]: "
        else:
            question = f"{prompt}: "
        answer = self._read(self._read_line, question).strip()
        result = answer or default
        _logger.debug("Asked %r, got %r", prompt, result)
        return result

    def ask_secret(self, prompt: str) -> str:
        secret = self._read(self._read_secret, f"{prompt}: ")
        _logger.debug("Asked secret %r, got %s", prompt, 'non-empty' if secret else 'empty')
        return secret

    def ask_secret_confirmed(self, prompt: str, mismatch_message: str) -> str:
        secret = self.ask_secret(prompt)
        if secret:
            confirmation = self.ask_secret(f"Confirm {prompt}")
            if secret != confirmation:
                raise InvalidInput(mismatch_message)
        return secret

    def confirm(self, prompt: str, default: bool) -> bool:
        answer = self.ask(f"{prompt} (y/n)", 'y' if default else 'n')
        return answer in ('y', 'Y')

    @staticmethod
    def _read(read, question):
        try:
            return read(question)
        except EOFError:
            print()
            raise SetupCancelled()


def require(value: str, message: str) -> str:
    """Reject empty required values.

    >>> require('octocat', "GitHub username is required")
    'octocat'
    >>> require('', "GitHub username is required")
    Traceback (most recent call last):
    ...
    hostprep._prompt.InvalidInput: GitHub username is required
    """
    if not value:
        raise InvalidInput(message)
    return value


_logger = logging.getLogger(__name__)
