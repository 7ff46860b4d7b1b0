# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import logging
import os
from pathlib import Path
from typing import List
from typing import Mapping

from hostprep import _console
from hostprep._core import Command
from hostprep._core import Machine
from hostprep._packages import InstallMissing
from hostprep._packages import Requirement
from hostprep._platform import Platform
from hostprep._platform import pinentry_program
from hostprep._prompt import Prompter
from hostprep.github._auth import EnsureGhAuth
from hostprep.github._gh import GhCli
from hostprep.github._git_config import ConfigureGitIdentity
from hostprep.github._git_config import SetSigningKey
from hostprep.github._gpg import ConfigureGpgTty
from hostprep.github._gpg import EnsureGpgKey
from hostprep.github._gpg import UploadGpgKey
from hostprep.github._gpg import WriteGpgConfig
from hostprep.github._gpg import find_signing_key
from hostprep.github._scopes import parse_scopes
from hostprep.github._settings import GithubSettings
from hostprep.github._settings import collect_settings
from hostprep.github._settings import collect_username
from hostprep.github._ssh_key import AddToAgent
from hostprep.github._ssh_key import CheckSshConnection
from hostprep.github._ssh_key import EnsureSshKey
from hostprep.github._ssh_key import TrustGithubHostKeys
from hostprep.github._ssh_key import UploadSshKey
from hostprep.github._summary import print_summary


def prerequisites(platform: Platform) -> List[Requirement]:
    result = [
        Requirement('git', ['git']),
        Requirement('gnupg', ['gpg']),
        Requirement('gh', ['gh']),
        ]
    if platform.is_macos():
        result.append(Requirement('pinentry-mac', ['pinentry-mac']))
    else:
        result.append(Requirement('pinentry-tty', ['pinentry-tty', 'pinentry']))
    return result


def ssh_commands(settings: GithubSettings, prompter: Prompter, config: Mapping[str, str]) -> List[Command]:
    host = config['github_host']
    return [
        EnsureSshKey(settings, prompter, config['ssh_key_type']),
        AddToAgent(settings),
        UploadSshKey(settings, host),
        TrustGithubHostKeys(settings, host),
        CheckSshConnection(host),
        ]


def gpg_commands(
        settings: GithubSettings,
        prompter: Prompter,
        config: Mapping[str, str],
        pinentry: str,
        login_shell: str,
        ) -> List[Command]:
    result = [WriteGpgConfig(settings.home, settings.platform, pinentry, int(config['gpg_cache_ttl']))]
    if settings.platform.is_linux():
        result.append(ConfigureGpgTty(settings.home, login_shell))
    result.extend([
        EnsureGpgKey(settings, prompter, config['gpg_key_type'], int(config['gpg_key_length'])),
        SetSigningKey(settings.email),
        UploadGpgKey(settings.email, config['github_host']),
        ])
    return result


def run_procedure(
        machine: Machine,
        shell: 'Shell',
        prompter: Prompter,
        platform: Platform,
        home: Path,
        config: Mapping[str, str],
        ) -> GithubSettings:
    host = config['github_host']
    _console.header("Installing Prerequisites")
    machine.run([InstallMissing(platform, prerequisites(platform))])

    _console.header("GitHub Account")
    username = collect_username(GhCli(shell, host), prompter)

    _console.header("GitHub CLI Authentication")
    machine.run([EnsureGhAuth(username, parse_scopes(config['github_required_scopes']), host)])

    _console.header("User Information")
    settings = collect_settings(shell, prompter, username, platform, home, config['gpg_default_expiration'])

    _console.header("SSH Key Setup")
    machine.run(ssh_commands(settings, prompter, config))

    _console.header("GPG Key Setup")
    _console.step("Setting up GPG configuration...")
    login_shell = os.environ.get('SHELL', '')
    machine.run(gpg_commands(settings, prompter, config, pinentry_program(platform, shell), login_shell))

    _console.header("Git Global Configuration")
    machine.run([ConfigureGitIdentity(settings.full_name, settings.email)])

    _console.header("Setup Verification")
    print_summary(shell, settings, find_signing_key(shell, settings.email), host)
    _logger.info("Done: %r", settings)
    return settings


_logger = logging.getLogger(__name__)
