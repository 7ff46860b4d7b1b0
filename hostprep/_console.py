# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
"""Operator-facing status lines.

Logging goes to a file; these lines go to the terminal. Each line is
also logged so that the file tells the whole story.
"""
import logging
import os
import sys

_RED = '\033[0;31m'
_GREEN = '\033[0;32m'
_YELLOW = '\033[1;33m'
_BLUE = '\033[0;34m'
_CYAN = '\033[0;36m'
_RESET = '\033[0m'

_RULE = '═' * 62


def header(title: str):
    _logger.debug("Header: %s", title)
    print()
    print(_paint(_CYAN, _RULE))
    print(_paint(_CYAN, f"  {title}"))
    print(_paint(_CYAN, _RULE))
    print()


def step(message: str):
    _logger.debug("Step: %s", message)
    print(_paint(_BLUE, f"▶ {message}"), flush=True)


def success(message: str):
    _logger.debug("Success: %s", message)
    print(_paint(_GREEN, f"✔ {message}"), flush=True)


def warning(message: str):
    _logger.debug("Warning: %s", message)
    print(_paint(_YELLOW, f"⚠ {message}"), flush=True)


def error(message: str):
    _logger.debug("Error: %s", message)
    print(_paint(_RED, f"✖ {message}"), file=sys.stderr, flush=True)


def detail(label: str, value: str, *, dim: bool = False):
    _logger.debug("Detail: %s %s", label, value)
    print(f"  {label:<16}{_paint(_YELLOW if dim else _GREEN, value)}")


def note(message: str):
    _logger.debug("Note: %s", message)
    print(_paint(_CYAN, message))


def _paint(color, text):
    if not _colors_enabled():
        return text
    return f'{color}{text}{_RESET}'


def _colors_enabled():
    if os.getenv('NO_COLOR'):
        return False
    return sys.stdout.isatty()


_logger = logging.getLogger(__name__)
