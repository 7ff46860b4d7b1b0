# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import logging
import os
from pathlib import Path
from typing import Optional
from typing import Sequence

from hostprep._core import Command


class WriteFile(Command):
    """Replace the file content entirely. Parent directories are created."""

    def __init__(self, path: Path, content: str, mode: Optional[int] = None):
        self._path = Path(path)
        self._content = content
        self._mode = mode

    def __repr__(self):
        if self._mode is None:
            return f'{WriteFile.__name__}({str(self._path)!r})'
        return f'{WriteFile.__name__}({str(self._path)!r}, mode=0o{self._mode:o})'

    def run(self, shell):
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(self._content)
        if self._mode is not None:
            self._path.chmod(self._mode)
        _logger.info("Written %s: %d bytes", self._path, len(self._content))


class BackupFiles(Command):
    """Rename files aside so that a failed run can be recovered manually.

    Absent files are skipped. Earlier backups are kept: the first one is
    "name.suffix", later ones are "name.suffix.1", "name.suffix.2" and so on.
    """

    def __init__(self, paths: Sequence[Path], suffix: str):
        self._paths = [Path(p) for p in paths]
        self._suffix = suffix

    def __repr__(self):
        return f'{BackupFiles.__name__}({[str(p) for p in self._paths]!r}, {self._suffix!r})'

    def run(self, shell):
        for path in self._paths:
            if not path.exists():
                _logger.debug("Nothing to back up: %s", path)
                continue
            backup = _free_backup_path(path, self._suffix)
            os.rename(path, backup)
            _logger.info("Backed up %s to %s", path, backup)


def _free_backup_path(path: Path, suffix: str) -> Path:
    backup = path.with_name(path.name + suffix)
    generation = 0
    while backup.exists():
        generation += 1
        backup = path.with_name(f'{path.name}{suffix}.{generation}')
    return backup


class AppendBlockOnce(Command):
    """Append a block of lines unless the marker is already in the file."""

    def __init__(self, path: Path, marker: str, block: str):
        self._path = Path(path)
        self._marker = marker
        self._block = block

    def __repr__(self):
        return f'{AppendBlockOnce.__name__}({str(self._path)!r}, {self._marker!r})'

    def run(self, shell):
        self.append(self._path, self._marker, self._block)

    @staticmethod
    def append(path: Path, marker: str, block: str) -> bool:
        if path.exists() and marker in path.read_text():
            _logger.info("%s: already has %r", path, marker)
            return False
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open('a') as f:
            f.write('\n' + block.rstrip('\n') + '\n')
        _logger.info("%s: appended block with %r", path, marker)
        return True


class EnsureDirectory(Command):

    def __init__(self, path: Path, mode: int):
        self._path = Path(path)
        self._mode = mode

    def __repr__(self):
        return f'{EnsureDirectory.__name__}({str(self._path)!r}, 0o{self._mode:o})'

    def run(self, shell):
        self._path.mkdir(parents=True, exist_ok=True)
        # Mode passed to mkdir() is affected by umask; set it explicitly.
        self._path.chmod(self._mode)


_logger = logging.getLogger(__name__)
