# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import logging
from pathlib import Path
from typing import NamedTuple

from hostprep import _console
from hostprep._core import SetupCancelled
from hostprep._platform import Platform
from hostprep._prompt import InvalidInput
from hostprep._prompt import Prompter
from hostprep._prompt import require
from hostprep.github._gh import GhCli

_RESERVED_SSH_NAMES = frozenset([
    'authorized_keys',
    'authorized_keys2',
    'config',
    'environment',
    'known_hosts',
    'known_hosts.old',
    'rc',
    ])


class GithubSettings(NamedTuple):
    """Everything the procedure needs, collected once and passed to every step."""

    username: str
    full_name: str
    email: str
    ssh_key_name: str
    ssh_passphrase: str
    gpg_expiration: str
    gpg_passphrase: str
    home: Path
    platform: Platform

    def ssh_key_path(self) -> Path:
        return self.home / '.ssh' / self.ssh_key_name

    def ssh_pub_key_path(self) -> Path:
        return self.home / '.ssh' / f'{self.ssh_key_name}.pub'

    def __repr__(self):
        # Passphrases must not leak into logs.
        return (
            f'{GithubSettings.__name__}('
            f'{self.username!r}, {self.full_name!r}, {self.email!r}, {self.ssh_key_name!r}, '
            f'{self.gpg_expiration!r}, {str(self.home)!r}, {self.platform.system!r})')


def collect_username(gh: GhCli, prompter: Prompter) -> str:
    _console.note("Please enter your GitHub username to authenticate:")
    username = prompter.ask("GitHub username", gh.current_login())
    return require(username, "GitHub username is required")


def collect_settings(
        shell: 'Shell',
        prompter: Prompter,
        username: str,
        platform: Platform,
        home: Path,
        default_expiration: str,
        ) -> GithubSettings:
    _console.note("Please provide the following information for Git and GPG setup:")
    full_name = prompter.ask("Full name (for git commits)", _git_global(shell, 'user.name'))
    require(full_name, "Name is required")
    _console.note("Tip: Use your GitHub noreply email for privacy:")
    _console.note(f"     {username}@users.noreply.github.com")
    email = prompter.ask("Email address", _git_global(shell, 'user.email'))
    require(email, "Email is required")
    ssh_key_name = prompter.ask("SSH key name", username)
    check_key_name(require(ssh_key_name, "SSH key name is required"))
    _console.note("SSH passphrase (press Enter for no passphrase)")
    ssh_passphrase = prompter.ask_secret_confirmed("SSH Passphrase", "SSH passphrases do not match")
    _console.note("GPG key expiration (e.g., 1y, 2y, 0 for no expiration)")
    gpg_expiration = prompter.ask("GPG key expiration", default_expiration)
    _console.note("GPG passphrase (press Enter for no passphrase)")
    gpg_passphrase = prompter.ask_secret_confirmed("GPG Passphrase", "Passphrases do not match")
    settings = GithubSettings(
        username=username,
        full_name=full_name,
        email=email,
        ssh_key_name=ssh_key_name,
        ssh_passphrase=ssh_passphrase,
        gpg_expiration=gpg_expiration,
        gpg_passphrase=gpg_passphrase,
        home=home,
        platform=platform,
        )
    _logger.info("Collected %r", settings)
    _console.success("Configuration collected")
    _console.detail("Name:", full_name)
    _console.detail("Email:", email)
    _console.detail("SSH Key Name:", ssh_key_name)
    _console.detail("SSH Passphrase:", '[set]' if ssh_passphrase else '[none]', dim=not ssh_passphrase)
    _console.detail("GPG Expiration:", gpg_expiration)
    _console.detail("GPG Passphrase:", '[set]' if gpg_passphrase else '[none]', dim=not gpg_passphrase)
    if not prompter.confirm("Continue with these settings?", default=True):
        raise SetupCancelled()
    return settings


def check_key_name(name: str) -> str:
    """Reject names which would clash with other files in ~/.ssh.

    >>> check_key_name('octocat.work')
    'octocat.work'
    >>> check_key_name('known_hosts')
    Traceback (most recent call last):
    ...
    hostprep._prompt.InvalidInput: SSH key name 'known_hosts' is reserved in ~/.ssh
    """
    if '/' in name:
        raise InvalidInput("SSH key name must be a file name, not a path")
    if name.startswith('.'):
        raise InvalidInput("SSH key name must not start with a dot")
    if name in _RESERVED_SSH_NAMES or name.endswith('.pub'):
        raise InvalidInput(f"SSH key name {name!r} is reserved in ~/.ssh")
    return name

def _git_global(shell, key):
    r = shell.run_still(['git', 'config', '--global', key])
    if r.returncode != 0:
        return ''
    return r.stdout.strip()


_logger = logging.getLogger(__name__)
