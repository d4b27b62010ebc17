"""Shared fixtures: an in-memory runtime that scripts exec behaviour."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from rexec.models import ExecOutcome, Frame


class ScriptedRuntime:
    """ExecRuntime double driven by per-command scripts.

    ``script`` maps the first command token to a dict with optional keys:

    * ``frames``: list of ``(StreamType, bytes)`` delivered on start,
    * ``running_polls``: inspections reporting ``running=True`` before finishing,
    * ``exit_code``: exit code reported once finished (may be ``None``).

    Every call is recorded in ``calls`` as ``(name, args...)``.
    """

    def __init__(self, script: dict[str, dict[str, Any]] | None = None) -> None:
        self.script = script or {}
        self.calls: list[tuple[Any, ...]] = []
        self._execs: dict[str, dict[str, Any]] = {}

    async def create_exec(
        self,
        container_id: str,
        command: list[str],
        *,
        attach_stdout: bool = True,
        attach_stderr: bool = True,
        user: str | None = None,
        working_dir: str | None = None,
    ) -> str:
        exec_id = f"exec-{len(self._execs)}"
        self.calls.append(("create", container_id, list(command), attach_stdout, attach_stderr, user, working_dir))
        entry = dict(self.script.get(command[0], {}))
        entry["polls"] = 0
        self._execs[exec_id] = entry
        return exec_id

    async def start_exec(self, exec_id: str, callback: Callable[[Frame], None]) -> None:
        self.calls.append(("start", exec_id))
        for stream_type, payload in self._execs[exec_id].get("frames", []):
            callback(Frame(payload=payload, stream_type=stream_type))

    async def inspect_exec(self, exec_id: str) -> ExecOutcome:
        self.calls.append(("inspect", exec_id))
        entry = self._execs[exec_id]
        entry["polls"] += 1
        running_polls = entry.get("running_polls", 0)
        if running_polls < 0 or entry["polls"] <= running_polls:
            return ExecOutcome(exec_id=exec_id, running=True)
        return ExecOutcome(exec_id=exec_id, running=False, exit_code=entry.get("exit_code", 0))

    def join_streams(self, timeout: float | None = None) -> None:
        self.calls.append(("join",))

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)


class RecordingSleep:
    """Async stand-in for :func:`asyncio.sleep` that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def fake_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def make_runtime() -> Callable[..., ScriptedRuntime]:
    return ScriptedRuntime
