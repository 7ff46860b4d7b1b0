# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import logging
import sys
from argparse import ArgumentParser
from pathlib import Path
from typing import Sequence

from hostprep import _console
from hostprep._config import global_config
from hostprep._core import Machine
from hostprep._core import ProvisioningError
from hostprep._core import SetupCancelled
from hostprep._logging import init_logging
from hostprep._platform import detect_platform
from hostprep._prompt import Prompter
from hostprep._shell import CommandFailed
from hostprep._shell import Shell
from hostprep.github._procedure import run_procedure


def main(args: Sequence[str]) -> int:
    parser = ArgumentParser(
        prog='hostprep-github',
        description=(
            "set up GitHub CLI authentication, an SSH key and GPG commit signing; "
            "interactive, safe to run again"))
    parser.parse_args(args)
    init_logging('github')
    _console.header("GitHub Setup")
    _console.note("This will set up GitHub CLI, SSH keys, and GPG commit signing")
    shell = Shell()
    try:
        platform = detect_platform()
        run_procedure(Machine(shell), shell, Prompter(), platform, Path.home(), global_config)
    except SetupCancelled:
        _console.warning("Setup cancelled")
        return 0
    except (ProvisioningError, CommandFailed) as e:
        _logger.info("Failed", exc_info=True)
        _console.error(str(e))
        return 1
    return 0


def cli():
    exit(main(sys.argv[1:]))


_logger = logging.getLogger(__name__)

if __name__ == '__main__':
    cli()
