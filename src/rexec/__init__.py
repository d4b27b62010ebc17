"""rexec — sequential command execution inside running containers."""

from __future__ import annotations

from rexec.errors import (
    ExecProbeError,
    ExecSessionError,
    ExecTimeoutError,
    ExitCodeValidationError,
    RexecError,
    RuntimeAdapterError,
    StreamHandlerError,
)
from rexec.models import ExecOutcome, ExecSpec, Frame, ProbeConfig, StreamType
from rexec.session import ExecSession

__version__ = "0.1.0"

__all__ = [
    "ExecOutcome",
    "ExecProbeError",
    "ExecSession",
    "ExecSessionError",
    "ExecSpec",
    "ExecTimeoutError",
    "ExitCodeValidationError",
    "Frame",
    "ProbeConfig",
    "RexecError",
    "RuntimeAdapterError",
    "StreamHandlerError",
    "StreamType",
]
