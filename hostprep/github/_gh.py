# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import json
import logging
import re
from pathlib import Path
from typing import Collection
from typing import List
from typing import NamedTuple
from typing import Set

from hostprep._core import ProvisioningError
from hostprep._pubkey import PubKey
from hostprep.github._scopes import parse_scopes

UPLOADED = 'uploaded'
ALREADY_EXISTS = 'already_exists'

_already_exists_re = re.compile(r'already exists|already been added', re.IGNORECASE)


class UploadFailed(ProvisioningError):
    pass


class GhAccount(NamedTuple):
    login: str
    active: bool
    protocol: str = ''
    scopes: Collection[str] = ()


class GhCli:
    """Thin wrapper over the gh command; every call is a blocking subprocess."""

    def __init__(self, shell: 'Shell', host: str = 'github.com'):
        self._shell = shell
        self._host = host

    def __repr__(self):
        return f'{GhCli.__name__}({self._host!r})'

    def accounts(self) -> List[GhAccount]:
        # Exit status is non-zero if any of the accounts has a problem.
        r = self._shell.run_still(['gh', 'auth', 'status', '--hostname', self._host])
        return parse_auth_status(r.stdout + r.stderr, self._host)

    def token_scopes(self) -> List[str]:
        r = self._shell.run_still(['gh', 'api', '--hostname', self._host, '-i', '/'])
        if r.returncode != 0:
            _logger.info("Cannot get token scopes: %s", r.stderr.strip())
            return []
        return parse_scopes_header(r.stdout)

    def current_login(self) -> str:
        r = self._shell.run_still(['gh', 'api', '--hostname', self._host, 'user', '--jq', '.login'])
        if r.returncode != 0:
            _logger.info("No current login: %s", r.stderr.strip())
            return ''
        return r.stdout.strip()

    def switch(self, user: str):
        self._shell.run(['gh', 'auth', 'switch', '--hostname', self._host, '--user', user])

    def switch_quietly(self, user: str):
        r = self._shell.run_still(['gh', 'auth', 'switch', '--hostname', self._host, '--user', user])
        if r.returncode != 0:
            _logger.info("Switch to %s failed, ignored: %s", user, r.stderr.strip())

    def refresh(self, scopes: Collection[str]):
        self._shell.run_attached(['gh', 'auth', 'refresh', '--hostname', self._host, '-s', ','.join(scopes)])

    def login(self, scopes: Collection[str]):
        self._shell.run_attached([
            'gh', 'auth', 'login',
            '--hostname', self._host,
            '--web',
            '--git-protocol', 'https',
            '-s', ','.join(scopes),
            ])

    def setup_git(self):
        self._shell.run(['gh', 'auth', 'setup-git', '--hostname', self._host])

    def set_git_protocol(self, protocol: str):
        self._shell.run(['gh', 'config', 'set', '-h', self._host, 'git_protocol', protocol])

    def ssh_keys(self) -> List[PubKey]:
        r = self._shell.run_still(['gh', 'api', '--hostname', self._host, 'user/keys'])
        if r.returncode != 0:
            _logger.info("Cannot list SSH keys: %s", r.stderr.strip())
            return []
        result = []
        for entry in json.loads(r.stdout or '[]'):
            try:
                result.append(PubKey(entry['key'].encode()))
            except ValueError as e:
                _logger.debug("Skip registered key %s: %s", entry.get('id'), e)
        return result

    def gpg_key_ids(self) -> Set[str]:
        r = self._shell.run_still(['gh', 'api', '--hostname', self._host, 'user/gpg_keys'])
        if r.returncode != 0:
            _logger.info("Cannot list GPG keys: %s", r.stderr.strip())
            return set()
        result = set()
        for entry in json.loads(r.stdout or '[]'):
            result.add(entry['key_id'].upper())
            for subkey in entry.get('subkeys', []):
                result.add(subkey['key_id'].upper())
        return result

    def add_ssh_key(self, path: Path, title: str) -> str:
        return self._upload('SSH', ['gh', 'ssh-key', 'add', str(path), '--title', title])

    def add_gpg_key(self, path: Path) -> str:
        return self._upload('GPG', ['gh', 'gpg-key', 'add', str(path)])

    def _upload(self, kind, args):
        r = self._shell.run_still(args)
        output = (r.stdout + r.stderr).strip()
        if r.returncode == 0:
            return UPLOADED
        if _already_exists_re.search(output):
            _logger.info("%s key is already on %s: %s", kind, self._host, output)
            return ALREADY_EXISTS
        raise UploadFailed(f"Failed to upload {kind} key: {output}")


def parse_auth_status(text: str, host: str) -> List[GhAccount]:
    """Parse human-readable output of gh auth status.

    >>> text = '''github.com
    ...   ✓ Logged in to github.com account octocat (keyring)
    ...   - Active account: true
    ...   - Git operations protocol: https
    ...   - Token: gho_************************************
    ...   - Token scopes: 'gist', 'repo'
    ...
    ...   ✓ Logged in to github.com account hubot (keyring)
    ...   - Active account: false
    ... '''
    >>> [[a.login, a.active, a.protocol, a.scopes] for a in parse_auth_status(text, 'github.com')]
    [['octocat', True, 'https', ['gist', 'repo']], ['hubot', False, '', []]]
    """
    result = []
    current = None
    for line in text.splitlines():
        logged_in = re.search(r'Logged in to (\S+) account (\S+)', line)
        if logged_in is not None:
            if current is not None:
                result.append(current)
            if logged_in.group(1) == host:
                current = {'login': logged_in.group(2), 'active': False, 'protocol': '', 'scopes': []}
            else:
                current = None
            continue
        if current is None:
            continue
        [_, sep, value] = line.partition(':')
        if not sep:
            continue
        value = value.strip()
        if 'Active account' in line:
            current['active'] = value.lower() == 'true'
        elif 'Git operations protocol' in line:
            current['protocol'] = value
        elif 'Token scopes' in line:
            current['scopes'] = parse_scopes(value.replace("'", ''))
    if current is not None:
        result.append(current)
    return [GhAccount(**a) for a in result]


def parse_scopes_header(response: str) -> List[str]:
    """Extract scopes from the response headers printed by gh api -i.

    >>> parse_scopes_header('HTTP/2.0 200 OK\\nX-Oauth-Scopes: repo, write:gpg_key\\n\\n{}')
    ['repo', 'write:gpg_key']
    >>> parse_scopes_header('HTTP/2.0 200 OK\\n\\n{"x-oauth-scopes: admin:org"}')
    []
    """
    for line in response.splitlines():
        if not line.strip():
            break
        [name, sep, value] = line.partition(':')
        if sep and name.strip().lower() == 'x-oauth-scopes':
            return parse_scopes(value)
    return []


_logger = logging.getLogger(__name__)
