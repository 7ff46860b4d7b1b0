# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
from typing import Collection
from typing import List


def parse_scopes(value: str) -> List[str]:
    """Parse scopes as listed in X-OAuth-Scopes header or config.

    >>> parse_scopes('repo, write:gpg_key,admin:public_key')
    ['repo', 'write:gpg_key', 'admin:public_key']
    >>> parse_scopes('')
    []
    """
    return [s.strip() for s in value.split(',') if s.strip()]


def missing_scopes(granted: Collection[str], required: Collection[str]) -> List[str]:
    """List required scopes which the granted ones do not cover.

    The "admin:" scope includes "write:" and "read:"; "write:" includes "read:".

    >>> missing_scopes(['repo', 'admin:gpg_key'], ['repo', 'write:gpg_key', 'write:public_key'])
    ['write:public_key']
    >>> missing_scopes(['repo', 'write:gpg_key', 'write:public_key'], ['read:public_key'])
    []
    >>> missing_scopes(['read:gpg_key'], ['write:gpg_key'])
    ['write:gpg_key']
    """
    return [scope for scope in required if not _is_granted(scope, granted)]


def _is_granted(scope, granted):
    if scope in granted:
        return True
    level, sep, resource = scope.partition(':')
    if not sep:
        return False
    if level == 'read':
        return f'write:{resource}' in granted or f'admin:{resource}' in granted
    if level == 'write':
        return f'admin:{resource}' in granted
    return False
