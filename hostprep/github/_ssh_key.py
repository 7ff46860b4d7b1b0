# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import logging
import re
import socket
from datetime import date

import requests

from hostprep import _console
from hostprep._config_files import AppendBlockOnce
from hostprep._config_files import EnsureDirectory
from hostprep._core import Command
from hostprep._pubkey import HomePubKey
from hostprep._pubkey import PubKey
from hostprep._shell import CommandFailed
from hostprep._shell import Secret
from hostprep.github._gh import ALREADY_EXISTS
from hostprep.github._gh import GhCli

_GITHUB_COM = 'github.com'


class EnsureSshKey(Command):
    """Reuse the key pair if it exists and the operator agrees; otherwise generate it."""

    def __init__(self, settings: 'GithubSettings', prompter: 'Prompter', key_type: str = 'ed25519'):
        self._settings = settings
        self._prompter = prompter
        self._key_type = key_type

    def __repr__(self):
        return f'{EnsureSshKey.__name__}({str(self._settings.ssh_key_path())!r})'

    def run(self, shell):
        key_path = self._settings.ssh_key_path()
        EnsureDirectory(key_path.parent, 0o700).run(shell)
        pub_path = self._settings.ssh_pub_key_path()
        if key_path.exists():
            _console.warning(f"SSH key already exists at {key_path}")
            if self._prompter.confirm("Overwrite existing key?", default=False):
                _logger.info("Delete %s as requested", key_path)
                key_path.unlink()
                pub_path.unlink(missing_ok=True)
            else:
                _console.step("Using existing SSH key")
        if not key_path.exists():
            _console.step(f"Generating new {self._key_type.upper()} SSH key...")
            shell.run([
                'ssh-keygen',
                '-q',
                '-t', self._key_type,
                '-C', self._settings.email,
                '-f', str(key_path),
                '-N', Secret(self._settings.ssh_passphrase),
                ])
            _console.success(f"SSH key generated at {key_path}")
        elif not pub_path.exists():
            _console.step(f"Restoring public key {pub_path}...")
            r = shell.run([
                'ssh-keygen', '-y',
                '-P', Secret(self._settings.ssh_passphrase),
                '-f', str(key_path),
                ])
            pub_path.write_text(r.stdout.strip() + '\n')


class AddToAgent(Command):

    def __init__(self, settings: 'GithubSettings'):
        self._settings = settings

    def __repr__(self):
        return f'{AddToAgent.__name__}({str(self._settings.ssh_key_path())!r})'

    def run(self, shell):
        _console.step("Adding SSH key to ssh-agent...")
        key_path = str(self._settings.ssh_key_path())
        agent_shell = _agent_shell(shell)
        if self._settings.platform.is_macos():
            try:
                agent_shell.run_attached(['ssh-add', '--apple-use-keychain', key_path])
            except CommandFailed:
                _logger.info("Keychain is not available for ssh-add, add without it")
                agent_shell.run_attached(['ssh-add', key_path])
            ssh_config = self._settings.home / '.ssh' / 'config'
            if AppendBlockOnce.append(ssh_config, 'Host github.com', _keychain_block(key_path)):
                _console.step("Updated SSH config for keychain integration")
        else:
            agent_shell.run_attached(['ssh-add', key_path])


def _agent_shell(shell):
    if shell.environ().get('SSH_AUTH_SOCK'):
        return shell
    r = shell.run(['ssh-agent', '-s'])
    env = parse_agent_env(r.stdout)
    _logger.info("Started ssh-agent: %s", env)
    return shell.with_env(**env)


def parse_agent_env(output: str):
    """Parse Bourne shell commands printed by ssh-agent -s.

    >>> parse_agent_env('SSH_AUTH_SOCK=/tmp/ssh-X/agent.1; export SSH_AUTH_SOCK;\\nSSH_AGENT_PID=2; export SSH_AGENT_PID;\\necho Agent pid 2;')
    {'SSH_AUTH_SOCK': '/tmp/ssh-X/agent.1', 'SSH_AGENT_PID': '2'}
    """
    return dict(re.findall(r'(SSH_AUTH_SOCK|SSH_AGENT_PID)=([^;]+);', output))


def _keychain_block(key_path):
    return '\n'.join([
        "# GitHub SSH config (added by hostprep)",
        "Host github.com",
        "    AddKeysToAgent yes",
        "    UseKeychain yes",
        f'    IdentityFile "{key_path}"',
        ])


class TrustGithubHostKeys(Command):
    """Add published host keys to known_hosts, so the first connection does not ask."""

    def __init__(self, settings: 'GithubSettings', host: str = _GITHUB_COM):
        self._known_hosts = settings.home / '.ssh' / 'known_hosts'
        self._host = host

    def __repr__(self):
        return f'{TrustGithubHostKeys.__name__}({str(self._known_hosts)!r}, {self._host!r})'

    def run(self, shell):
        _console.step("Adding GitHub host keys to known_hosts...")
        try:
            response = requests.get(meta_url(self._host), timeout=10)
            response.raise_for_status()
            published = response.json()['ssh_keys']
        except (requests.RequestException, ValueError, KeyError) as e:
            _console.warning(f"Cannot get {self._host} host keys, skipped: {e}")
            return
        known = self._known_hosts.read_text() if self._known_hosts.exists() else ''
        missing = []
        for line in published:
            try:
                key = PubKey(line.encode())
            except ValueError as e:
                _logger.warning("Skip published host key %r: %s", line, e)
                continue
            if key.body.decode() not in known:
                missing.append(f'{self._host} {line.strip()}')
        if missing:
            with self._known_hosts.open('a') as f:
                if known and not known.endswith('\n'):
                    f.write('\n')
                f.write(''.join(entry + '\n' for entry in missing))
        _logger.info("Added %d of %d GitHub host keys", len(missing), len(published))
        _console.success(f"GitHub host keys are known ({len(missing)} added)")


def meta_url(host: str) -> str:
    """Where the host publishes its SSH host keys.

    >>> meta_url('github.com')
    'https://api.github.com/meta'
    >>> meta_url('ghe.example.com')
    'https://ghe.example.com/api/v3/meta'
    """
    if host == _GITHUB_COM:
        return 'https://api.github.com/meta'
    return f'https://{host}/api/v3/meta'


class UploadSshKey(Command):

    def __init__(self, settings: 'GithubSettings', host: str = 'github.com'):
        self._settings = settings
        self._host = host

    def __repr__(self):
        return f'{UploadSshKey.__name__}({self._settings.ssh_key_name!r})'

    def run(self, shell):
        _console.step("Uploading SSH key to GitHub...")
        gh = GhCli(shell, self._host)
        local = HomePubKey(self._settings.ssh_key_name, self._settings.home)
        if any(local.equal(registered) for registered in gh.ssh_keys()):
            _console.success("SSH key already exists on GitHub")
            return
        title = f'{self._settings.ssh_key_name}-{socket.gethostname()}-{date.today():%Y%m%d}'
        pub_path = self._settings.ssh_pub_key_path()
        result = gh.add_ssh_key(pub_path, title)
        if result == ALREADY_EXISTS:
            _console.success("SSH key already exists on GitHub")
        else:
            _console.success(f"SSH key uploaded to GitHub as {title!r}")


class CheckSshConnection(Command):

    def __init__(self, host: str = 'github.com'):
        self._host = host

    def __repr__(self):
        return f'{CheckSshConnection.__name__}({self._host!r})'

    def run(self, shell):
        _console.step("Testing SSH connection to GitHub...")
        r = shell.run_still(['ssh', '-T', '-o', 'BatchMode=yes', f'git@{self._host}'])
        output = (r.stdout + r.stderr).strip()
        # Exit status is 1 even on success: GitHub does not provide shell access.
        if re.search('successfully authenticated', output, re.IGNORECASE):
            _console.success("SSH authentication successful!")
        else:
            _console.warning(f"SSH test result: {output}")


_logger = logging.getLogger(__name__)
