# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
from subprocess import CompletedProcess
from typing import Callable
from typing import Collection
from typing import List
from typing import Mapping
from typing import Optional
from typing import Sequence
from typing import Tuple

from hostprep._prompt import Prompter
from hostprep._shell import CommandFailed
from hostprep._shell import Shell


class FakeShell(Shell):
    """Record commands instead of running them; answer with scripted responses.

    A response is chosen by the longest matching prefix of the command.
    Queued responses are consumed in order; the last one stays.
    A command without a response succeeds with empty output.
    """

    def __init__(
            self,
            installed: Collection[str] = (),
            env: Optional[Mapping[str, str]] = None,
            bin_dir: str = '/usr/bin',
            ):
        super().__init__()
        self._installed = set(installed)
        self._bin_dir = bin_dir
        self._fake_env = dict(env or {})
        self._responses = {}
        self.calls: List[Tuple[str, ...]] = []
        self.inputs: List[Tuple[Tuple[str, ...], str]] = []

    def respond(
            self,
            prefix: Sequence[str],
            stdout: str = '',
            stderr: str = '',
            returncode: int = 0,
            effect: Optional[Callable[[Tuple[str, ...]], None]] = None,
            ):
        queue = self._responses.setdefault(tuple(prefix), [])
        queue.append(_Response(stdout, stderr, returncode, effect))

    def run_still(self, args, *, input=None):  # noqa PyShadowingBuiltins
        call = self._record(args)
        if input is not None:
            self.inputs.append((call, input))
        response = self._respond(call)
        return CompletedProcess(list(args), response.returncode, response.stdout, response.stderr)

    def run_attached(self, args):
        call = self._record(args)
        response = self._respond(call)
        if response.returncode != 0:
            raise CommandFailed(response.returncode, list(args))

    def which(self, name):
        if name in self._installed:
            return f'{self._bin_dir}/{name}'
        return None

    def with_env(self, **env):
        self._fake_env.update(env)
        return self

    def environ(self):
        return self._fake_env

    def ran(self, *prefix: str) -> bool:
        return any(call[:len(prefix)] == prefix for call in self.calls)

    def count(self, *prefix: str) -> int:
        return sum(1 for call in self.calls if call[:len(prefix)] == prefix)

    def _record(self, args):
        call = tuple(str(a) for a in args)
        self.calls.append(call)
        return call

    def _respond(self, call):
        matching = [p for p in self._responses if call[:len(p)] == p]
        if not matching:
            return _Response('', '', 0, None)
        prefix = max(matching, key=len)
        queue = self._responses[prefix]
        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if response.effect is not None:
            response.effect(call)
        return response


class _Response:

    def __init__(self, stdout, stderr, returncode, effect):
        self.stdout = stdout
        self.stderr = stderr
        self.returncode = returncode
        self.effect = effect


def scripted_prompter(answers: Sequence[str], secrets: Sequence[str] = ()) -> Prompter:
    """Answer prompts in order; running out of answers is like closed stdin."""
    answers = list(answers)
    secrets = list(secrets)

    def read_line(_question):
        if not answers:
            raise EOFError()
        return answers.pop(0)

    def read_secret(_question):
        if not secrets:
            raise EOFError()
        return secrets.pop(0)

    return Prompter(read_line, read_secret)
