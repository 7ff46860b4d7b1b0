# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import logging
import logging.handlers
from pathlib import Path


def init_logging(procedure_name: str):
    logging.getLogger().setLevel(logging.DEBUG)
    _init_file_logging(procedure_name + '.log')
    _init_stream_logging()


def _init_file_logging(log_file_name: str):
    log_dir = Path('~/.cache/hostprep_logs').expanduser()
    log_dir.mkdir(exist_ok=True, parents=True)
    log_file = log_dir / log_file_name
    file_handler = logging.handlers.RotatingFileHandler(
        log_file, maxBytes=20 * 1024**2, backupCount=6)
    file_handler.setFormatter(logging.Formatter('%(asctime)s %(name)s %(levelname)s %(message)s'))
    file_handler.setLevel(logging.DEBUG)
    logging.getLogger().addHandler(file_handler)


def _init_stream_logging():
    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(logging.WARNING)
    logging.getLogger().addHandler(stream_handler)
