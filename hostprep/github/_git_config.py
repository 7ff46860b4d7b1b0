# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import logging

from hostprep import _console
from hostprep._core import Command
from hostprep._core import CompositeCommand
from hostprep._core import Run
from hostprep.github._gpg import KeyExportFailed
from hostprep.github._gpg import find_signing_key


class GitConfigUnset(Command):
    """Unset a global key. An absent key is fine."""

    def __init__(self, key: str):
        self._key = key

    def __repr__(self):
        return f'{GitConfigUnset.__name__}({self._key!r})'

    def run(self, shell):
        r = shell.run_still(['git', 'config', '--global', '--unset', self._key])
        # Exit status 5 means the key is not set.
        if r.returncode not in (0, 5):
            _logger.info("Cannot unset %s: %s", self._key, r.stderr.strip())


class GitConfigSet(Run):

    def __init__(self, key: str, value: str):
        super().__init__('git', 'config', '--global', key, value)


class ConfigureGitIdentity(CompositeCommand):

    def __init__(self, full_name: str, email: str):
        super().__init__([
            # Signing key is a GPG key; another format would override it.
            GitConfigUnset('gpg.format'),
            GitConfigSet('user.name', full_name),
            GitConfigSet('user.email', email),
            GitConfigSet('commit.gpgSign', 'true'),
            GitConfigSet('tag.gpgSign', 'true'),
            ])

    def run(self, shell):
        _console.step("Configuring Git global settings...")
        super().run(shell)
        _console.success("Git global configuration complete")


class SetSigningKey(Command):

    def __init__(self, email: str):
        self._email = email

    def __repr__(self):
        return f'{SetSigningKey.__name__}({self._email!r})'

    def run(self, shell):
        _console.step("Configuring Git to use GPG key...")
        key_id = find_signing_key(shell, self._email)
        if key_id is None:
            raise KeyExportFailed(f"No GPG key for {self._email}")
        GitConfigSet('user.signingkey', key_id).run(shell)
        _console.success("Git configured with GPG signing key")


_logger = logging.getLogger(__name__)
