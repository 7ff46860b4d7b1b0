# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
"""Workstation and server provisioning procedures and tools for that.

A procedure is a linear sequence of steps run on the local machine:
detect the environment, install what is missing, ask the operator for
parameters, materialize keys and configuration files, register public
artifacts remotely and restart what has to be restarted.

Every action is formulated in terms of a command.
In most cases, it is a Run object
or an instance of a subclass of CompositeCommand.
It is desirable that commands be written in the most raw form,
so that it is clear what is being run and it is easy to copy.

Commands must be idempotent.
The second run must not "accumulate" changes.
Running it multiple times must be safe.
A command checks the current state first. If the state is already
as desired, it does nothing. If it is partially as desired, it does
the minimal corrective action. Only missing artifacts are created.

Commands should not be executed directly. Only via a machine.
This allows for logging and interaction with the user.

There is no resume. If a procedure fails, the operator must
investigate the problem and run it again from the top.
"""
from hostprep._core import BestEffortRun
from hostprep._core import Command
from hostprep._core import CompositeCommand
from hostprep._core import Machine
from hostprep._core import ProvisioningError
from hostprep._core import Run
from hostprep._shell import CommandFailed
from hostprep._shell import Shell

__all__ = [
    'BestEffortRun',
    'Command',
    'CommandFailed',
    'CompositeCommand',
    'Machine',
    'ProvisioningError',
    'Run',
    'Shell',
    ]
