# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import logging
import os
from abc import ABCMeta
from abc import abstractmethod
from typing import Sequence

from hostprep import _console


class ProvisioningError(Exception):
    """Expected fatal failure; the procedure stops and exits with non-zero status."""


class SetupCancelled(Exception):
    """The operator declined to continue; nothing is wrong."""


class Command(metaclass=ABCMeta):

    @abstractmethod
    def run(self, shell: 'Shell'):
        pass


class Run(Command):

    def __init__(self, *args: str):
        self._args = args

    def __repr__(self):
        return f'{self.__class__.__name__}({", ".join(repr(a) for a in self._args)})'

    def run(self, shell):
        shell.run(self._args)


class BestEffortRun(Run):
    """Run a command whose failure does not abort the procedure.

    >>> BestEffortRun('upsdrvctl', 'stop')
    BestEffortRun('upsdrvctl', 'stop')
    """

    def run(self, shell):
        r = shell.run_still(self._args)
        if r.returncode != 0:
            _console.warning(f"{' '.join(self._args)} exited with status {r.returncode}, continuing")
            _logger.info("Ignored failure of %r: %s", self, r.stderr.strip())


class CompositeCommand(Command):

    def __init__(self, commands: Sequence[Command]):
        self._commands: Sequence[Command] = commands

    def __repr__(self):
        return f'<{self.__class__.__name__} with {len(self._commands)} commands>'

    def run(self, shell):
        for command in self._commands:
            command.run(shell)


class Machine:
    """The local machine. The only place where commands are run."""

    def __init__(self, shell: 'Shell'):
        self._shell = shell

    def run(self, commands: Sequence[Command]):
        questionnaire = Questionnaire("Run")
        for command in commands:
            _logger.info("Command %r", command)
            print(f"Command {command!r}", flush=True)
            if questionnaire.user_agrees_with(repr(command)):
                command.run(self._shell)
            else:
                _logger.info("Skipped by operator: %r", command)


class Questionnaire:

    def __init__(self, prompt):
        self._user_agrees = None
        self._should_ask_user = True
        self._prompt = prompt

    def user_agrees_with(self, question):
        if not os.getenv('HOSTPREP_ASK_FOR_CONFIRMATION', ''):
            return True
        prompt = f"{self._prompt} {question} [y,n,a,d]? "
        if self._should_ask_user:
            while True:
                try:
                    answer = input(prompt)
                except EOFError:
                    raise SetupCancelled()
                answer = answer[:1]
                answer = answer.lower()
                if answer == 'y':
                    self._user_agrees = True
                    self._should_ask_user = True
                elif answer == 'n':
                    self._user_agrees = False
                    self._should_ask_user = True
                elif answer == 'a':
                    self._user_agrees = True
                    self._should_ask_user = False
                elif answer == 'd':
                    self._user_agrees = False
                    self._should_ask_user = False
                else:
                    self._user_agrees = None
                if self._user_agrees is not None:
                    break
        else:
            assert self._user_agrees is not None
            answer = 'a' if self._user_agrees else 'd'
            print(prompt + answer, flush=True)
        return self._user_agrees


_logger = logging.getLogger(__name__)
