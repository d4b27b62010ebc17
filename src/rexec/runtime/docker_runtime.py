"""DockerRuntime — ExecRuntime backed by the low-level docker SDK ``APIClient``.

Blocking SDK calls run in worker threads via :func:`asyncio.to_thread`.  The
attach stream of a started exec is pumped on a daemon thread, which is the
execution context output frames are delivered on.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable, Iterator
from typing import Any

import docker
from docker.errors import DockerException

from rexec.errors import RuntimeAdapterError
from rexec.models import ExecOutcome, Frame, StreamType

logger = logging.getLogger(__name__)

STREAM_DRAIN_TIMEOUT = 10.0


class DockerRuntime:
    """Docker Engine exec primitives.

    Satisfies the :class:`~rexec.runtime.base.ExecRuntime` protocol.
    """

    def __init__(self, client: docker.APIClient | None = None, *, tty: bool = False) -> None:
        self._client = client
        self._tty = tty
        self._pumps: dict[str, threading.Thread] = {}

    @classmethod
    def from_env(cls, *, tty: bool = False) -> DockerRuntime:
        """Build a runtime from ``DOCKER_HOST`` and friends."""
        try:
            client = docker.from_env().api
        except DockerException as exc:
            raise RuntimeAdapterError(f"Cannot connect to docker: {exc}") from exc
        return cls(client, tty=tty)

    @property
    def client(self) -> docker.APIClient:
        if self._client is None:
            self._client = docker.APIClient()
        return self._client

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
        kwargs: dict[str, Any] = {
            "stdout": attach_stdout,
            "stderr": attach_stderr,
            "tty": self._tty,
        }
        if user:
            kwargs["user"] = user
        if working_dir:
            kwargs["workdir"] = working_dir

        response = await self._call("exec_create", container_id, command, **kwargs)
        return response["Id"]

    async def start_exec(self, exec_id: str, callback: Callable[[Frame], None]) -> None:
        stream = await self._call(
            "exec_start",
            exec_id,
            detach=False,
            tty=self._tty,
            stream=True,
            demux=not self._tty,
        )
        pump = threading.Thread(
            target=self._pump,
            args=(exec_id, stream, callback),
            name=f"rexec-stream-{exec_id[:12]}",
            daemon=True,
        )
        self._pumps[exec_id] = pump
        pump.start()

    async def inspect_exec(self, exec_id: str) -> ExecOutcome:
        info = await self._call("exec_inspect", exec_id)
        return ExecOutcome(
            exec_id=exec_id,
            running=bool(info.get("Running")),
            exit_code=info.get("ExitCode"),
        )

    def join_stream(self, exec_id: str, timeout: float | None = None) -> None:
        """Block until the output pump for *exec_id* has drained."""
        pump = self._pumps.pop(exec_id, None)
        if pump is not None:
            pump.join(timeout)

    def join_streams(self, timeout: float | None = None) -> None:
        """Drain every output pump still running, waiting up to *timeout* for each."""
        for exec_id in list(self._pumps):
            self.join_stream(exec_id, timeout)

    def _pump(self, exec_id: str, stream: Iterator[Any], callback: Callable[[Frame], None]) -> None:
        try:
            for chunk in stream:
                for frame in self._frames(chunk):
                    callback(frame)
        except Exception as exc:
            logger.error("Output stream for exec %s broke: %s", exec_id, exc)
        finally:
            self._pumps.pop(exec_id, None)

    def _frames(self, chunk: Any) -> list[Frame]:
        if self._tty:
            return [Frame(payload=chunk, stream_type=StreamType.RAW)] if chunk else []

        out, err = chunk
        frames: list[Frame] = []
        if out:
            frames.append(Frame(payload=out, stream_type=StreamType.STDOUT))
        if err:
            frames.append(Frame(payload=err, stream_type=StreamType.STDERR))
        return frames

    async def _call(self, op: str, *args: Any, **kwargs: Any) -> Any:
        fn = getattr(self.client, op)
        try:
            return await asyncio.to_thread(fn, *args, **kwargs)
        except DockerException as exc:
            raise RuntimeAdapterError(f"docker {op} failed: {exc}") from exc
