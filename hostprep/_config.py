# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import fnmatch
import logging
import socket
from configparser import ConfigParser
from pathlib import Path
from typing import Mapping

_logger = logging.getLogger(__name__)


def _read_config(*paths: Path, host=None) -> Mapping[str, str]:
    """Read and resolve overrides according to versions.

    Sections other than "[defaults]" are host masks, like "[nas-*]".
    Optionally add ";v123" to sections like "[nas-*;v45]".
    If not specified, "v0" is assumed.
    Higher versions override lower versions.
    At the same version, the per-user file overrides the packaged one.
    """
    if host is None:
        host = socket.gethostname()
    config_parts = []
    for path_i, path in enumerate(paths):
        config_parser = ConfigParser(interpolation=None)
        config_parser.read(path)
        sections = config_parser.sections()
        for section_i, section in enumerate(sections):
            mask, version = _parse_section_header(section)
            if fnmatch.fnmatch(host, mask):
                _logger.info("Config %s: section %s: read", path, section)
                items = config_parser.items(section)
                config_parts.append((version, path_i, section_i, items))
            else:
                _logger.debug("Config %s: section %s: skip", path, section)
    config_parts.sort(key=lambda part: part[:3])
    config = {}
    for _version, _path_i, _section_i, items in config_parts:
        config.update(items)
    return config


def _parse_section_header(section):
    """Split section name into host mask and version.

    >>> _parse_section_header('defaults')
    ('*', 0)
    >>> _parse_section_header('ups-*;v3')
    ('ups-*', 3)
    >>> _parse_section_header('ups-*')
    ('ups-*', 0)
    """
    if section == 'defaults':
        return '*', 0
    else:
        mask, semicolon, extra = section.partition(';')
        if not extra:
            return mask, 0
        elif extra.startswith('v'):
            try:
                return mask, int(extra[1:])
            except ValueError:
                raise ValueError(f"Cannot parse {extra} in {section}")
        else:
            raise ValueError(f"Unknown {extra} in {section}")


global_config = _read_config(
    Path(__file__).with_name('config.ini'),
    Path('~/.config/hostprep.ini').expanduser(),
    )

if __name__ == '__main__':
    for k, v in global_config.items():
        print(k + '=' + v)
