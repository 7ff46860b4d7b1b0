# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import logging
import sys
from pathlib import Path
from typing import Sequence

from hostprep import _console
from hostprep._config import global_config
from hostprep._core import Machine
from hostprep._core import ProvisioningError
from hostprep._core import SetupCancelled
from hostprep._logging import init_logging
from hostprep._privilege import ensure_root
from hostprep._shell import CommandFailed
from hostprep._shell import Shell
from hostprep.ups._mode import parse_args
from hostprep.ups._nut import nut_plan


def main(args: Sequence[str]) -> int:
    mode = parse_args(args)
    try:
        ensure_root('hostprep.ups', args)
    except ProvisioningError as e:
        _console.error(str(e))
        return 1
    init_logging('ups')
    _logger.info("Mode: %r", mode)
    print(f"setting up NUT as {mode.nut_mode}", flush=True)
    ups_name = global_config['ups_name']
    plan = nut_plan(
        mode,
        Path(global_config['nut_config_dir']),
        ups_name,
        global_config['ups_backup_suffix'],
        )
    try:
        Machine(Shell()).run(plan)
    except SetupCancelled:
        _console.warning("Setup cancelled")
        return 0
    except (ProvisioningError, CommandFailed) as e:
        _logger.info("Failed", exc_info=True)
        _console.error(str(e))
        return 1
    print(f"done. you can test with: upsc {ups_name}@{mode.server_host}", flush=True)
    return 0


def cli():
    exit(main(sys.argv[1:]))


_logger = logging.getLogger(__name__)

if __name__ == '__main__':
    cli()
