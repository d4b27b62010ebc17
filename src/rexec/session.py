"""ExecSession — runs an ordered list of commands inside one container.

Per command: create → start-with-stream → poll → validate → record.  Each
command reaches a terminal, validated state before the next one is created,
and the first fatal failure stops the whole run.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence
from typing import TYPE_CHECKING

from rexec.errors import ExecProbeError, ExecTimeoutError
from rexec.models import ExecSpec, ProbeConfig, ProbeState
from rexec.probe import LivenessProbe, ProgressCallback
from rexec.routing import FrameHandler, FrameRouter
from rexec.utils.telemetry import (
    ATTR_COMMAND,
    ATTR_COMMAND_COUNT,
    ATTR_COMMAND_INDEX,
    ATTR_CONTAINER_ID,
    ATTR_EXEC_ID,
    ATTR_EXIT_CODE,
    ATTR_POLL_COUNT,
    ATTR_POLL_INTERVAL,
    ATTR_POLL_TIMEOUT,
    ATTR_PROBE_STATE,
    get_tracer,
)
from rexec.validation import ExitCodeValidator

if TYPE_CHECKING:
    from rexec.runtime.base import ExecRuntime

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

ExecutionLedger = list[str]


class ExecSession:
    """Drive a sequence of execs against a single running container.

    Session-level defaults (probe, allowed exit codes, output handler) can be
    overridden per :meth:`run` call.  :attr:`ledger` holds the exec ids of
    commands that completed successfully in the most recent run, in
    submission order, and stays readable after a run fails.
    """

    def __init__(
        self,
        runtime: ExecRuntime,
        container_id: str,
        *,
        probe: ProbeConfig | None = None,
        success_on_exit_codes: Iterable[int] | None = None,
        output_handler: FrameHandler | None = None,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self._runtime = runtime
        self._container_id = container_id
        self._probe = probe
        self._success_on_exit_codes = list(success_on_exit_codes or [])
        self._output_handler = output_handler
        self._sleep = sleep
        self._on_progress = on_progress
        self._commands: list[ExecSpec] = []
        self.ledger: ExecutionLedger = []

    @property
    def container_id(self) -> str:
        return self._container_id

    @property
    def commands(self) -> list[ExecSpec]:
        return list(self._commands)

    def with_command(
        self,
        command: Sequence[str],
        *,
        user: str | None = None,
        working_dir: str | None = None,
        attach_stdout: bool = True,
        attach_stderr: bool = True,
    ) -> ExecSession:
        """Queue a command for :meth:`run_collected`; empty commands are dropped."""
        if command:
            self._commands.append(
                ExecSpec(
                    command=tuple(command),
                    user=user,
                    working_dir=working_dir,
                    attach_stdout=attach_stdout,
                    attach_stderr=attach_stderr,
                )
            )
        return self

    def exec_probe(self, poll_timeout: int, poll_interval: int) -> ProbeConfig:
        """Set the session's default probe (milliseconds) and return it."""
        self._probe = ProbeConfig(poll_timeout=poll_timeout, poll_interval=poll_interval)
        return self._probe

    async def run_collected(self) -> ExecutionLedger:
        """Run every command queued with :meth:`with_command`."""
        return await self.run(self._commands)

    async def run(
        self,
        commands: Sequence[ExecSpec],
        *,
        probe: ProbeConfig | None = None,
        success_on_exit_codes: Iterable[int] | None = None,
        output_handler: FrameHandler | None = None,
    ) -> ExecutionLedger:
        """Execute *commands* one after another and return the ledger.

        Raises:
            ExecTimeoutError: A command was still running when the probe budget ran out.
            ExitCodeValidationError: A command exited with a code outside the allowed set.
            ExecProbeError: The poll loop was interrupted.
            RuntimeAdapterError: The runtime failed to create, start or inspect an exec.
        """
        allowed = self._success_on_exit_codes if success_on_exit_codes is None else list(success_on_exit_codes)
        validator = ExitCodeValidator(allowed)
        router = FrameRouter(output_handler or self._output_handler)

        self.ledger = []
        logger.info("Executing on container with ID '%s'.", self._container_id)

        with _tracer.start_as_current_span("rexec.session") as span:
            span.set_attribute(ATTR_CONTAINER_ID, self._container_id)
            span.set_attribute(ATTR_COMMAND_COUNT, len(commands))

            for index, spec in enumerate(commands):
                if not spec.command:
                    logger.warning("Skipping empty command #%d", index)
                    continue

                effective_probe = probe or self._probe or ProbeConfig()
                exec_id = await self._run_one(index, spec, effective_probe, validator, router)
                self.ledger.append(exec_id)

        return self.ledger

    async def _run_one(
        self,
        index: int,
        spec: ExecSpec,
        probe_config: ProbeConfig,
        validator: ExitCodeValidator,
        router: FrameRouter,
    ) -> str:
        command = list(spec.command)

        with _tracer.start_as_current_span("rexec.command") as span:
            span.set_attribute(ATTR_COMMAND_INDEX, index)
            span.set_attribute(ATTR_COMMAND, " ".join(command))
            span.set_attribute(ATTR_POLL_TIMEOUT, probe_config.poll_timeout)
            span.set_attribute(ATTR_POLL_INTERVAL, probe_config.poll_interval)

            exec_id = await self._runtime.create_exec(
                self._container_id,
                command,
                attach_stdout=spec.attach_stdout,
                attach_stderr=spec.attach_stderr,
                user=spec.user,
                working_dir=spec.working_dir,
            )
            span.set_attribute(ATTR_EXEC_ID, exec_id)
            logger.debug("Created exec %s for command #%d %s", exec_id, index, command)

            await self._runtime.start_exec(exec_id, router)

            probe = LivenessProbe(probe_config, sleep=self._sleep, on_progress=self._on_progress)
            result = await probe.wait(self._runtime, exec_id)
            span.set_attribute(ATTR_PROBE_STATE, result.state.value)
            span.set_attribute(ATTR_POLL_COUNT, result.poll_count)

            if result.state == ProbeState.TIMED_OUT:
                raise ExecTimeoutError(command=command, index=index, probe=probe_config)
            if result.state == ProbeState.ERRORED:
                assert result.error is not None
                raise ExecProbeError(command=command, index=index, cause=result.error) from result.error

            assert result.last_outcome is not None
            span.set_attribute(ATTR_EXIT_CODE, result.last_outcome.exit_code or 0)
            validator.check(result.last_outcome, command=command, index=index)

        return exec_id
