"""
Shared fixtures: a recording command runner and an isolated filesystem layout
"""

import os
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Union

import pytest

from config.settings import PathsConfig, RetryConfig, Settings
from crisp_bootstrap.core.environment import Environment, SearchPath
from crisp_bootstrap.core.runner import CommandRunner
from crisp_bootstrap.models.command import CommandResult


def make_executable(directory: Path, name: str) -> Path:
    """Create an executable file, as an installer would."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text("#!/bin/sh\nexit 0\n")
    path.chmod(0o755)
    return path


class Call:
    """One recorded command invocation"""

    def __init__(self, args, env, cwd, extra_env, input, capture):
        self.args = list(args)
        self.env = env
        self.cwd = cwd
        self.extra_env = dict(extra_env or {})
        self.input = input
        self.capture = capture

    def __repr__(self):
        return f"Call({' '.join(self.args)})"


Handler = Union[int, List[int], Callable[[Call], int]]


class FakeRunner(CommandRunner):
    """
    CommandRunner that records calls instead of spawning processes.

    Handlers are keyed by an argv prefix. An int is a fixed exit code, a list
    is consumed one exit code per call (the last one repeats), a callable
    receives the call and returns the exit code.
    """

    def __init__(self, handlers: Optional[Dict[Sequence[str], Handler]] = None,
                 download: bytes = b"#!/bin/sh\nexit 0\n"):
        self.sleeps: List[float] = []
        super().__init__(sleep=self.sleeps.append)
        self.calls: List[Call] = []
        self.handlers = {tuple(k): v for k, v in (handlers or {}).items()}
        self.download = download

    def on(self, prefix: Sequence[str], handler: Handler) -> None:
        self.handlers[tuple(prefix)] = handler

    def _handler_for(self, args: List[str]) -> Optional[Handler]:
        best = None
        for prefix, handler in self.handlers.items():
            if tuple(args[:len(prefix)]) == prefix:
                if best is None or len(prefix) > len(best[0]):
                    best = (prefix, handler)
        return best[1] if best else None

    def run(self, args, env, cwd=None, extra_env=None, input=None, capture=False):
        call = Call(args, env, cwd, extra_env, input, capture)
        self.calls.append(call)

        handler = self._handler_for(call.args)
        if handler is None:
            code = 0
        elif isinstance(handler, int):
            code = handler
        elif isinstance(handler, list):
            code = handler.pop(0) if len(handler) > 1 else handler[0]
        else:
            code = handler(call)

        stdout = self.download if capture and code == 0 else (b"" if capture else None)
        return CommandResult(args=call.args, returncode=code, stdout=stdout)

    def commands(self) -> List[List[str]]:
        return [c.args for c in self.calls]

    def matching(self, *prefix: str) -> List[Call]:
        return [c for c in self.calls if tuple(c.args[:len(prefix)]) == prefix]


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def system_bin(tmp_path):
    path = tmp_path / "usr" / "bin"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def env(system_bin):
    """Environment whose search path holds only an empty test directory."""
    return Environment(search_path=SearchPath(entries=(str(system_bin),)))


@pytest.fixture
def settings(tmp_path):
    return Settings(
        paths=PathsConfig(home=tmp_path / "home", workspace=tmp_path / "workspace"),
        retry=RetryConfig(attempts=3, delay_seconds=5),
    )


@pytest.fixture
def real_env():
    """Environment with the interpreter's own PATH, for real subprocesses."""
    return Environment(search_path=SearchPath.parse(os.environ.get("PATH", "/usr/bin:/bin")))
