"""FrameRouter — dispatches exec output frames to a handler or the console."""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from typing import BinaryIO

from rexec.models import Frame, StreamType

logger = logging.getLogger(__name__)

FrameHandler = Callable[[Frame], object]


class FrameRouter:
    """Route each frame of one exec's output stream.

    With a *handler*, every frame is forwarded to it and any exception it
    raises is logged and contained, so later frames still arrive.  Without
    one, stdout/raw frames go to standard output and stderr frames to
    standard error, each flushed immediately.

    The router is invoked from the runtime's delivery thread and holds no
    state besides its sinks.
    """

    def __init__(
        self,
        handler: FrameHandler | None = None,
        *,
        stdout: BinaryIO | None = None,
        stderr: BinaryIO | None = None,
    ) -> None:
        self._handler = handler
        self._stdout = stdout
        self._stderr = stderr

    def __call__(self, frame: Frame | None) -> None:
        self.route(frame)

    def route(self, frame: Frame | None) -> None:
        """Deliver a single frame."""
        if frame is None:
            return

        if self._handler is not None:
            try:
                self._handler(frame)
            except Exception:
                logger.exception("Failed to handle %s frame", frame.stream_type.value)
            return

        if frame.stream_type in (StreamType.STDOUT, StreamType.RAW):
            _write(self._stdout or sys.stdout.buffer, frame.payload)
        elif frame.stream_type == StreamType.STDERR:
            _write(self._stderr or sys.stderr.buffer, frame.payload)
        else:
            logger.error("unknown stream type: %s", frame.stream_type.value)


def _write(sink: BinaryIO, payload: bytes) -> None:
    sink.write(payload)
    sink.flush()
