"""Unit tests for the source reader stage."""

from __future__ import annotations

import io
import threading

import pytest

from core.constants import DEFAULT_MAX_LINE_BYTES
from core.errors import LineTooLongError
from core.types import ChannelState
from pipeline.channel import HandoffChannel
from pipeline.source_reader import SourceReader, iter_lines


class _FakeLogger:
    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, object]]] = []

    def info(self, event: str, **fields: object) -> None:
        self.events.append((event, fields))

    def error(self, event: str, **fields: object) -> None:
        self.events.append((event, fields))


class _FailingStream:
    """Binary stream that returns some lines, then fails."""

    def __init__(self, lines: list[bytes]) -> None:
        self._lines = list(lines)

    def readline(self, size: int = -1) -> bytes:
        if self._lines:
            return self._lines.pop(0)
        raise OSError("Input/output error")


def _collect(reader: SourceReader) -> tuple[list[bytes], HandoffChannel[bytes]]:
    channel: HandoffChannel[bytes] = HandoffChannel("lines")
    received: list[bytes] = []
    consumer = threading.Thread(target=lambda: received.extend(channel), daemon=True)
    consumer.start()
    reader.run(channel)
    consumer.join(timeout=5)
    return received, channel


def test_iter_lines_strips_lf_and_crlf_terminators() -> None:
    """Reader should drop LF and a CR directly before it."""
    stream = io.BytesIO(b"alpha\nbeta\r\n\ngamma\r")

    lines = list(iter_lines(stream, DEFAULT_MAX_LINE_BYTES))

    assert lines == [b"alpha", b"beta", b"", b"gamma"]


def test_iter_lines_keeps_unterminated_final_line() -> None:
    """A final line without newline should still be emitted once."""
    lines = list(iter_lines(io.BytesIO(b"one\ntwo"), DEFAULT_MAX_LINE_BYTES))

    assert lines == [b"one", b"two"]


def test_iter_lines_supports_one_mebibyte_lines() -> None:
    """Lines up to the limit should pass through without truncation."""
    long_line = b"x" * DEFAULT_MAX_LINE_BYTES
    stream = io.BytesIO(long_line + b"\r\nshort\n")

    lines = list(iter_lines(stream, DEFAULT_MAX_LINE_BYTES))

    assert lines == [long_line, b"short"]


def test_iter_lines_raises_for_line_over_limit() -> None:
    """Lines longer than the limit should raise a source error."""
    stream = io.BytesIO(b"ok\n" + b"y" * 17 + b"\n")

    with pytest.raises(LineTooLongError):
        list(iter_lines(stream, 16))


def test_iter_lines_without_limit_reads_any_length() -> None:
    """A zero limit should disable the line length check."""
    long_line = b"z" * (DEFAULT_MAX_LINE_BYTES + 10)

    lines = list(iter_lines(io.BytesIO(long_line + b"\n"), 0))

    assert lines == [long_line]


def test_source_reader_forwards_lines_and_closes_channel() -> None:
    """Reader should push each line and close the channel at EOF."""
    reader = SourceReader(stream=io.BytesIO(b"a\nb\nc\n"), max_line_bytes=DEFAULT_MAX_LINE_BYTES)

    received, channel = _collect(reader)

    assert received == [b"a", b"b", b"c"]
    assert reader.lines_read == 3 and channel.state is ChannelState.CLOSED


def test_source_reader_treats_read_error_as_end_of_input(monkeypatch) -> None:
    """Lines read before an I/O error should be kept and the error logged."""
    fake_logger = _FakeLogger()
    monkeypatch.setattr("pipeline.source_reader._LOGGER", fake_logger)
    reader = SourceReader(stream=_FailingStream([b"first\n", b"second\n"]), max_line_bytes=0)

    received, channel = _collect(reader)

    assert received == [b"first", b"second"]
    assert channel.state is ChannelState.CLOSED
    assert fake_logger.events[0][0] == "source_read_failed"
    assert fake_logger.events[0][1]["lines_read"] == 2


def test_source_reader_reports_overlong_line(monkeypatch) -> None:
    """An overlong line should end input after the lines before it."""
    fake_logger = _FakeLogger()
    monkeypatch.setattr("pipeline.source_reader._LOGGER", fake_logger)
    stream = io.BytesIO(b"fits\n" + b"q" * 9 + b"\nnever\n")
    reader = SourceReader(stream=stream, max_line_bytes=8)

    received, _ = _collect(reader)

    assert received == [b"fits"]
    assert [event for event, _ in fake_logger.events] == ["source_read_failed"]


def test_source_reader_stops_when_cancelled() -> None:
    """A set cancel token should stop reading before the next send."""
    cancel_event = threading.Event()
    cancel_event.set()
    reader = SourceReader(
        stream=io.BytesIO(b"a\nb\n"),
        max_line_bytes=DEFAULT_MAX_LINE_BYTES,
        cancel_event=cancel_event,
    )

    received, channel = _collect(reader)

    assert received == [] and channel.state is ChannelState.CLOSED
