"""Shared error types for remote exec sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rexec.models import ExecOutcome, ProbeConfig


class RexecError(Exception):
    """Base error for all rexec failures."""


class RuntimeAdapterError(RexecError):
    """The container runtime rejected or failed a create/start/inspect call."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__("Runtime error" + (f": {detail}" if detail else ""))


class StreamHandlerError(RexecError):
    """A per-frame output handler failed.

    Handlers may raise this (or anything else); the router contains it at the
    frame boundary and keeps delivering.
    """


class ExecSessionError(RexecError):
    """A command reached a fatal terminal state and aborted the session."""

    def __init__(self, message: str, *, command: list[str], index: int) -> None:
        self.command = command
        self.index = index
        super().__init__(f"Command #{index} {command!r} failed: {message}")


class ExecTimeoutError(ExecSessionError):
    """The liveness probe exhausted its budget while the exec was still running."""

    def __init__(self, *, command: list[str], index: int, probe: ProbeConfig) -> None:
        self.probe = probe
        super().__init__(
            f"exec did not finish in a timely fashion: {probe}",
            command=command,
            index=index,
        )


class ExitCodeValidationError(ExecSessionError):
    """The exec finished with an exit code outside the allowed set."""

    def __init__(
        self,
        *,
        exit_code: int,
        allowed: list[int],
        command: list[str],
        index: int,
        response: ExecOutcome | None = None,
    ) -> None:
        self.exit_code = exit_code
        self.allowed = allowed
        self.response = response
        super().__init__(
            f"{exit_code} is not a successful exit code. "
            f"Valid values are {allowed}, response={response}",
            command=command,
            index=index,
        )


class ExecProbeError(ExecSessionError):
    """The poll loop was interrupted by an unexpected error."""

    def __init__(self, *, command: list[str], index: int, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(f"liveness probe aborted: {cause}", command=command, index=index)
