"""Tests for FrameRouter."""

from __future__ import annotations

import io
import logging

import pytest

from rexec.errors import StreamHandlerError
from rexec.models import Frame, StreamType
from rexec.routing import FrameRouter


def _frame(stream_type: StreamType, payload: bytes = b"data") -> Frame:
    return Frame(payload=payload, stream_type=stream_type)


class TestDefaultSink:
    def test_stdout_frame_goes_to_stdout(self) -> None:
        out, err = io.BytesIO(), io.BytesIO()
        FrameRouter(stdout=out, stderr=err).route(_frame(StreamType.STDOUT, b"hello"))

        assert out.getvalue() == b"hello"
        assert err.getvalue() == b""

    def test_raw_frame_goes_to_stdout(self) -> None:
        out, err = io.BytesIO(), io.BytesIO()
        FrameRouter(stdout=out, stderr=err).route(_frame(StreamType.RAW, b"\x1b[0mraw"))

        assert out.getvalue() == b"\x1b[0mraw"

    def test_stderr_frame_goes_to_stderr(self) -> None:
        out, err = io.BytesIO(), io.BytesIO()
        FrameRouter(stdout=out, stderr=err).route(_frame(StreamType.STDERR, b"boom"))

        assert out.getvalue() == b""
        assert err.getvalue() == b"boom"

    def test_unknown_stream_type_is_logged_not_written(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        out, err = io.BytesIO(), io.BytesIO()
        with caplog.at_level(logging.ERROR, logger="rexec.routing"):
            FrameRouter(stdout=out, stderr=err).route(_frame(StreamType.OTHER))

        assert out.getvalue() == b""
        assert err.getvalue() == b""
        assert "unknown stream type" in caplog.text

    def test_process_streams_used_when_no_sink_given(
        self, capsysbinary: pytest.CaptureFixture[bytes]
    ) -> None:
        router = FrameRouter()
        router.route(_frame(StreamType.STDOUT, b"to-out"))
        router.route(_frame(StreamType.STDERR, b"to-err"))

        captured = capsysbinary.readouterr()
        assert captured.out == b"to-out"
        assert captured.err == b"to-err"

    def test_frames_written_in_order(self) -> None:
        out = io.BytesIO()
        router = FrameRouter(stdout=out, stderr=io.BytesIO())
        for chunk in (b"a", b"b", b"c"):
            router(_frame(StreamType.STDOUT, chunk))

        assert out.getvalue() == b"abc"

    def test_none_frame_is_ignored(self) -> None:
        out = io.BytesIO()
        FrameRouter(stdout=out, stderr=io.BytesIO()).route(None)
        assert out.getvalue() == b""


class TestCustomHandler:
    def test_handler_replaces_default_sink(self) -> None:
        out = io.BytesIO()
        seen: list[Frame] = []
        router = FrameRouter(seen.append, stdout=out)

        router.route(_frame(StreamType.STDOUT, b"x"))

        assert [f.payload for f in seen] == [b"x"]
        assert out.getvalue() == b""

    def test_handler_receives_unknown_stream_types(self) -> None:
        seen: list[Frame] = []
        FrameRouter(seen.append).route(_frame(StreamType.OTHER))
        assert len(seen) == 1

    def test_failing_frame_does_not_stop_delivery(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        delivered: list[bytes] = []

        def handler(frame: Frame) -> None:
            delivered.append(frame.payload)
            if frame.payload == b"2":
                raise StreamHandlerError("bad chunk")

        router = FrameRouter(handler)
        with caplog.at_level(logging.ERROR, logger="rexec.routing"):
            for i in range(1, 6):
                router.route(_frame(StreamType.STDOUT, str(i).encode()))

        assert delivered == [b"1", b"2", b"3", b"4", b"5"]
        assert "Failed to handle stdout frame" in caplog.text

    def test_arbitrary_handler_exception_is_contained(self) -> None:
        calls = 0

        def handler(frame: Frame) -> None:
            nonlocal calls
            calls += 1
            raise ValueError("nope")

        router = FrameRouter(handler)
        router.route(_frame(StreamType.STDOUT))
        router.route(_frame(StreamType.STDERR))

        assert calls == 2
