# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import base64
import hashlib
import logging
from pathlib import Path

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.serialization import Encoding
from cryptography.hazmat.primitives.serialization import PublicFormat
from cryptography.hazmat.primitives.serialization import load_ssh_public_key


class PubKey:
    """OpenSSH public key line: algorithm, base64 body and optional comment."""

    def __init__(self, data: bytes, comment=None):
        self._data = data.strip()
        self.raw = self._data + b'\n'
        try:
            [self.algo, self.body, *rest] = self._data.split(maxsplit=2)
        except ValueError:
            raise ValueError(f"Unexpected key format: {self._data[:40]!r}")
        try:
            key = load_ssh_public_key(self.algo + b' ' + self.body)
        except (ValueError, UnsupportedAlgorithm) as e:
            raise ValueError(f"Invalid public key {self.algo!r}: {e}")
        # Re-encoded body is canonical; the one from a file might be padded differently.
        [_, self.body] = key.public_bytes(Encoding.OpenSSH, PublicFormat.OpenSSH).split()
        if comment:
            self._comment = comment
        elif rest:
            [self._comment] = rest
        else:
            self._comment = b''

    def equal(self, other: 'PubKey'):
        return (self.algo, self.body) == (other.algo, other.body)

    def fingerprint(self) -> str:
        """Same as ssh-keygen -l: SHA256 of the key blob, base64 without padding."""
        digest = hashlib.sha256(base64.b64decode(self.body)).digest()
        return 'SHA256:' + base64.b64encode(digest).decode().rstrip('=')

    def __repr__(self):
        if not self._comment:
            return f'{PubKey.__name__}({self._data!r})'
        return f'{PubKey.__name__}({self._data!r}, {self._comment!r})'


class HomePubKey(PubKey):

    def __init__(self, name: str, home: Path):
        self._name = name
        path = home / '.ssh' / f'{name}.pub'
        data = path.read_bytes()
        if not data.startswith((b'ssh-', b'ecdsa-')):
            raise ValueError(f"Unexpected key format {path}")
        super().__init__(data)

    def __repr__(self):
        return f'{HomePubKey.__name__}({self._name!r})'


_logger = logging.getLogger(__name__)
