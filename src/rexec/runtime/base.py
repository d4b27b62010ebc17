"""ExecRuntime protocol — the three container-runtime primitives rexec builds on."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from rexec.models import ExecOutcome, Frame


@runtime_checkable
class ExecRuntime(Protocol):
    """Creates, starts and inspects execs inside a running container.

    ``start_exec`` must return once the runtime acknowledges the start, and
    deliver output frames to *callback* from its own execution context until
    the process completes.
    """

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
        """Create an exec and return its id."""
        ...

    async def start_exec(self, exec_id: str, callback: Callable[[Frame], None]) -> None:
        """Start the exec in attached (non-detached) streaming mode."""
        ...

    async def inspect_exec(self, exec_id: str) -> ExecOutcome:
        """Return the exec's current running state and exit code."""
        ...
