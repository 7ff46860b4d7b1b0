# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import logging
import os
import sys
import tempfile
from pathlib import Path
from typing import Optional

from hostprep import _console
from hostprep._config_files import AppendBlockOnce
from hostprep._config_files import EnsureDirectory
from hostprep._config_files import WriteFile
from hostprep._core import Command
from hostprep._core import CompositeCommand
from hostprep._core import ProvisioningError
from hostprep.github._gh import ALREADY_EXISTS
from hostprep.github._gh import GhCli


class KeyGenerationFailed(ProvisioningError):
    pass


class KeyExportFailed(ProvisioningError):
    pass


class WriteGpgConfig(CompositeCommand):

    def __init__(self, home: Path, platform: 'Platform', pinentry: str, cache_ttl: int):
        gnupg = home / '.gnupg'
        agent_conf = [
            f'default-cache-ttl {cache_ttl}',
            f'max-cache-ttl {cache_ttl}',
            f'pinentry-program {pinentry}',
            ]
        if platform.is_linux():
            # Terminal-only Linux: key generation uses loopback pinentry.
            agent_conf.append('allow-loopback-pinentry')
        super().__init__([
            EnsureDirectory(gnupg, 0o700),
            WriteFile(gnupg / 'gpg.conf', 'use-agent\n', 0o600),
            WriteFile(gnupg / 'gpg-agent.conf', '\n'.join(agent_conf) + '\n', 0o600),
            _ReloadAgent(),
            ])
        self._repr = f'{WriteGpgConfig.__name__}({str(gnupg)!r}, {pinentry!r})'

    def __repr__(self):
        return self._repr


class _ReloadAgent(Command):
    """Stop gpg-agent so the next gpg call starts it with the new config."""

    def __repr__(self):
        return f'{_ReloadAgent.__name__}()'

    def run(self, shell):
        r = shell.run_still(['gpgconf', '--kill', 'gpg-agent'])
        if r.returncode != 0:
            _logger.info("gpg-agent was not stopped: %s", r.stderr.strip())


class ConfigureGpgTty(AppendBlockOnce):
    """Terminal pinentry needs GPG_TTY in every interactive shell."""

    def __init__(self, home: Path, login_shell: str):
        super().__init__(
            shell_rc_file(home, login_shell),
            'GPG_TTY',
            "# GPG TTY for terminal pinentry (added by hostprep)\n"
            "export GPG_TTY=$(tty)\n",
            )

    def run(self, shell):
        _console.step("Setting up GPG_TTY environment variable...")
        if self.append(self._path, self._marker, self._block):
            _console.success(f"Added GPG_TTY to {self._path}")
        else:
            _console.success(f"GPG_TTY already configured in {self._path}")


def shell_rc_file(home: Path, login_shell: str) -> Path:
    """Pick the rc file of the login shell.

    >>> shell_rc_file(Path('/home/u'), '/usr/bin/zsh').name
    '.zshrc'
    >>> shell_rc_file(Path('/home/u'), '/bin/bash').name
    '.bashrc'
    >>> shell_rc_file(Path('/home/u'), '/usr/bin/fish').name
    '.profile'
    """
    name = Path(login_shell).name
    if name == 'zsh':
        return home / '.zshrc'
    if name == 'bash':
        return home / '.bashrc'
    return home / '.profile'


def find_signing_key(shell, email: str) -> Optional[str]:
    """Return fingerprint of the newest usable secret key for the email, if any."""
    r = shell.run_still(['gpg', '--list-secret-keys', '--with-colons', '--keyid-format', 'LONG', f'<{email}>'])
    if r.returncode != 0:
        _logger.info("No secret keys for %s: %s", email, r.stderr.strip())
        return None
    return newest_secret_key(r.stdout)


def newest_secret_key(colons_listing: str) -> Optional[str]:
    """Pick the newest secret key which is neither revoked nor expired.

    >>> listing = '\\n'.join([
    ...     'sec:u:4096:1:AAAA1111AAAA1111:1600000000:::u:::scESC:::+:::23::0:',
    ...     'fpr:::::::::0000000000000000000000000000AAAA1111AAAA1111:',
    ...     'uid:u::::1600000000::HASH::Jane <jane@example.com>::::::::::0:',
    ...     'sec:e:4096:1:BBBB2222BBBB2222:1500000000:1550000000::u:::scESC:::+:::23::0:',
    ...     'fpr:::::::::0000000000000000000000000000BBBB2222BBBB2222:',
    ...     'sec:u:4096:1:CCCC3333CCCC3333:1700000000:::u:::scESC:::+:::23::0:',
    ...     'fpr:::::::::0000000000000000000000000000CCCC3333CCCC3333:',
    ...     'ssb:u:4096:1:DDDD4444DDDD4444:1700000000::::::e:::+:::23:',
    ...     'fpr:::::::::0000000000000000000000000000DDDD4444DDDD4444:',
    ...     ])
    >>> newest_secret_key(listing)
    '0000000000000000000000000000CCCC3333CCCC3333'
    >>> newest_secret_key('') is None
    True
    """
    candidates = []
    pending = None
    for line in colons_listing.splitlines():
        fields = line.split(':')
        if fields[0] == 'sec':
            validity = fields[1]
            created = int(fields[5] or 0)
            pending = None if validity in ('r', 'e', 'd', 'i') else created
        elif fields[0] == 'fpr' and pending is not None:
            candidates.append((pending, len(candidates), fields[9]))
            pending = None
        elif fields[0] != 'fpr':
            pending = None
    if not candidates:
        return None
    [*_, (_created, _index, fingerprint)] = sorted(candidates)
    return fingerprint


def gpg_batch(settings: 'GithubSettings', key_type: str, key_length: int) -> str:
    lines = [
        '%echo Generating GPG key',
        f'Key-Type: {key_type}',
        f'Key-Length: {key_length}',
        'Key-Usage: sign',
        f'Name-Real: {settings.full_name}',
        f'Name-Email: {settings.email}',
        f'Expire-Date: {settings.gpg_expiration}',
        ]
    if settings.gpg_passphrase:
        lines.append(f'Passphrase: {settings.gpg_passphrase}')
    else:
        lines.append('%no-protection')
    lines.append('%commit')
    lines.append('%echo GPG key generation complete')
    return '\n'.join(lines) + '\n'


class EnsureGpgKey(Command):

    def __init__(self, settings: 'GithubSettings', prompter: 'Prompter', key_type: str = 'RSA', key_length: int = 4096):
        self._settings = settings
        self._prompter = prompter
        self._key_type = key_type
        self._key_length = key_length

    def __repr__(self):
        return f'{EnsureGpgKey.__name__}({self._settings.email!r}, {self._key_type!r}, {self._key_length!r})'

    def run(self, shell):
        shell = _with_gpg_tty(shell)
        existing = find_signing_key(shell, self._settings.email)
        if existing is not None:
            _console.warning(f"GPG key already exists for {self._settings.email}")
            if not self._prompter.confirm("Overwrite existing key?", default=False):
                _console.step(f"Using existing GPG key: {existing}")
                return
        _console.step("Generating new GPG key...")
        self._generate(shell)
        key_id = find_signing_key(shell, self._settings.email)
        if key_id is None or key_id == existing:
            raise KeyGenerationFailed("Failed to generate GPG key")
        _console.success(f"GPG key generated: {key_id}")
        _console.step("Testing GPG signing...")
        r = shell.run_still(['gpg', '--clearsign', '--local-user', key_id], input='test\n')
        if r.returncode == 0:
            _console.success("GPG signing works correctly")
        else:
            _logger.info("Signing test failed: %s", r.stderr.strip())
            _console.warning("GPG signing test had issues (may still work for commits)")

    def _generate(self, shell):
        command = ['gpg', '--batch']
        if self._settings.platform.is_linux():
            command.extend(['--pinentry-mode', 'loopback'])
        # The batch file contains the passphrase. Directory is private and removed.
        with tempfile.TemporaryDirectory() as temp_dir:
            batch_file = Path(temp_dir) / 'key.batch'
            batch_file.touch(mode=0o600)
            batch_file.write_text(gpg_batch(self._settings, self._key_type, self._key_length))
            shell.run([*command, '--generate-key', str(batch_file)])


def _with_gpg_tty(shell):
    if shell.environ().get('GPG_TTY') or not sys.stdin.isatty():
        return shell
    return shell.with_env(GPG_TTY=os.ttyname(sys.stdin.fileno()))


class UploadGpgKey(Command):

    def __init__(self, email: str, host: str = 'github.com'):
        self._email = email
        self._host = host

    def __repr__(self):
        return f'{UploadGpgKey.__name__}({self._email!r})'

    def run(self, shell):
        _console.step("Uploading GPG public key to GitHub...")
        key_id = find_signing_key(shell, self._email)
        if key_id is None:
            raise KeyExportFailed(f"No GPG key for {self._email}")
        exported = shell.run(['gpg', '--armor', '--export', key_id]).stdout
        if not exported.strip():
            raise KeyExportFailed("Failed to export GPG public key")
        gh = GhCli(shell, self._host)
        if key_id[-16:].upper() in gh.gpg_key_ids():
            _console.success("GPG key already exists on GitHub")
            return
        with tempfile.TemporaryDirectory() as temp_dir:
            key_file = Path(temp_dir) / f'{key_id}.asc'
            key_file.write_text(exported)
            result = gh.add_gpg_key(key_file)
        if result == ALREADY_EXISTS:
            _console.success("GPG key already exists on GitHub")
        else:
            _console.success("GPG key uploaded to GitHub")


_logger = logging.getLogger(__name__)
