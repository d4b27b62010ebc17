"""Data models for remote exec sessions."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_POLL_TIMEOUT_MS = 60_000
DEFAULT_POLL_INTERVAL_MS = 2_000


class StreamType(str, Enum):
    """Stream classification attached to every output frame."""

    STDOUT = "stdout"
    STDERR = "stderr"
    RAW = "raw"
    OTHER = "other"


class ProbeState(str, Enum):
    """Terminal (and initial) states of the liveness probe."""

    RUNNING = "running"
    FINISHED = "finished"
    TIMED_OUT = "timed_out"
    ERRORED = "errored"


class ExecSpec(BaseModel):
    """Immutable description of one command to run inside a container."""

    model_config = ConfigDict(frozen=True)

    command: tuple[str, ...] = Field(..., description="Command tokens; empty commands are skipped.")
    user: str | None = Field(
        default=None,
        description="User or UID with optional group, formatted '<name|uid>[:<group|gid>]'.",
    )
    working_dir: str | None = Field(default=None, description="Working directory inside the container.")
    attach_stdout: bool = Field(default=True, description="Attach the exec's standard output.")
    attach_stderr: bool = Field(default=True, description="Attach the exec's standard error.")


class ProbeConfig(BaseModel):
    """Poll policy for the liveness probe, in milliseconds."""

    model_config = ConfigDict(frozen=True)

    poll_timeout: int = Field(default=DEFAULT_POLL_TIMEOUT_MS, ge=0, description="Total poll budget (ms).")
    poll_interval: int = Field(default=DEFAULT_POLL_INTERVAL_MS, ge=0, description="Wait between polls (ms).")

    def __str__(self) -> str:
        return f"ProbeConfig(poll_timeout={self.poll_timeout}ms, poll_interval={self.poll_interval}ms)"


class ExecOutcome(BaseModel):
    """Point-in-time inspection result for an exec handle."""

    exec_id: str
    running: bool
    exit_code: int | None = Field(default=None, description="Only meaningful once running is False.")


class Frame(BaseModel):
    """A chunk of exec output tagged with its stream."""

    payload: bytes
    stream_type: StreamType


class ProbeResult(BaseModel):
    """What the liveness probe observed before it stopped."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    state: ProbeState
    poll_count: int = 0
    last_outcome: ExecOutcome | None = None
    error: Exception | None = None
