"""ExecPlan YAML schema and loader consumed by ``rexec run``."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from rexec.errors import RexecError
from rexec.models import ExecSpec, ProbeConfig

if TYPE_CHECKING:
    from pathlib import Path


class PlanValidationError(RexecError):
    """Raised when a plan YAML fails parsing or validation."""


class TelemetrySettings(BaseModel):
    """Optional tracing configuration for a plan run."""

    enabled: bool = False
    service_name: str = "rexec"
    export_to_console: bool = True
    otlp_endpoint: str | None = None


class ExecPlan(BaseModel):
    """A whole session: target container, commands and shared exec options."""

    version: str = "1"
    container: str = Field(..., min_length=1, description="ID or name of the running container.")
    commands: list[list[str]] = Field(default_factory=list, description="Commands, run in order.")
    attach_stdout: bool = True
    attach_stderr: bool = True
    user: str | None = None
    working_dir: str | None = None
    success_on_exit_codes: list[int] = Field(
        default_factory=list,
        description="Allowed exit codes; empty accepts any.",
    )
    probe: ProbeConfig | None = None
    telemetry: TelemetrySettings | None = None

    def to_specs(self) -> list[ExecSpec]:
        """Build one :class:`ExecSpec` per non-empty command."""
        return [
            ExecSpec(
                command=tuple(cmd),
                user=self.user,
                working_dir=self.working_dir,
                attach_stdout=self.attach_stdout,
                attach_stderr=self.attach_stderr,
            )
            for cmd in self.commands
            if cmd
        ]


class PlanLoader:
    """Load and validate a plan YAML file into an :class:`ExecPlan`."""

    def __init__(self, path: Path) -> None:
        self._path = path

    def load(self) -> ExecPlan:
        """Read YAML, interpolate env vars, and validate.

        Environment variables in the form ``${VAR}`` or ``$VAR`` are expanded
        using :func:`os.path.expandvars` before YAML parsing.

        Raises:
            PlanValidationError: On read errors, YAML parse errors or schema violations.
        """
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise PlanValidationError(f"Cannot read {self._path}: {exc}") from exc

        expanded = os.path.expandvars(raw)

        try:
            data: Any = yaml.safe_load(expanded)
        except yaml.YAMLError as exc:
            raise PlanValidationError(f"YAML parse error: {exc}") from exc

        if not isinstance(data, dict):
            raise PlanValidationError("Plan YAML must be a mapping")

        try:
            return ExecPlan.model_validate(data)
        except ValidationError as exc:
            raise PlanValidationError(str(exc)) from exc
