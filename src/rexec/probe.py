"""LivenessProbe — bounded polling of an exec handle until it stops running.

The runtime only exposes point-in-time inspection of an exec, never a
blocking join, so completion is detected by polling.  The total budget keeps
a hung command from stalling the caller indefinitely.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from rexec.models import ProbeConfig, ProbeResult, ProbeState

if TYPE_CHECKING:
    from rexec.runtime.base import ExecRuntime

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], object]


class LivenessProbe:
    """Poll an exec until it finishes or the poll budget is exhausted.

    At least one inspection always happens.  Each still-running inspection
    consumes one ``poll_interval`` from the budget; the probe only sleeps if
    budget remains afterwards, and times out without re-inspecting once it
    reaches zero.
    """

    def __init__(
        self,
        config: ProbeConfig | None = None,
        *,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self._config = config or ProbeConfig()
        self._sleep = sleep
        self._on_progress = on_progress

    @property
    def config(self) -> ProbeConfig:
        return self._config

    async def wait(self, runtime: ExecRuntime, exec_id: str) -> ProbeResult:
        """Inspect *exec_id* until it is no longer running or time runs out.

        Errors from ``inspect_exec`` propagate.  An error raised while
        waiting between polls ends the probe in ``ERRORED``.
        """
        interval = self._config.poll_interval
        remaining = self._config.poll_timeout
        poll_count = 0

        while True:
            outcome = await runtime.inspect_exec(exec_id)
            if not outcome.running:
                return ProbeResult(state=ProbeState.FINISHED, poll_count=poll_count, last_outcome=outcome)

            poll_count += 1
            self._report_progress(poll_count)

            # A zero interval still consumes budget so the loop stays bounded.
            remaining -= max(interval, 1)
            if remaining <= 0:
                return ProbeResult(state=ProbeState.TIMED_OUT, poll_count=poll_count, last_outcome=outcome)

            try:
                await self._sleep(interval / 1000)
            except Exception as exc:
                logger.error("Liveness probe for exec %s interrupted: %s", exec_id, exc)
                return ProbeResult(
                    state=ProbeState.ERRORED,
                    poll_count=poll_count,
                    last_outcome=outcome,
                    error=exc,
                )

    def _report_progress(self, poll_count: int) -> None:
        total_minutes = (poll_count * self._config.poll_interval) // 60_000
        message = f"Executing for {total_minutes}m..."
        logger.debug(message)
        if self._on_progress is not None:
            self._on_progress(message)
