"""Integration tests for end-to-end streaming trims."""

from __future__ import annotations

import io
import threading
import time
from pathlib import Path

from core.config import CutConfig
from core.types import OutputTarget
from pipeline.controller import run_pipeline
from pipeline.transformer import trim_line
from tests.fixture_paths import fixture_path


class _ThrottledStream:
    """Output stream that sleeps on writes and records concurrent access."""

    def __init__(self, delay_seconds: float) -> None:
        self._delay_seconds = delay_seconds
        self._buffer = io.BytesIO()
        self._lock = threading.Lock()
        self.closed = False

    def write(self, data: bytes) -> int:
        time.sleep(self._delay_seconds)
        with self._lock:
            return self._buffer.write(data)

    def flush(self) -> None:
        return None

    def close(self) -> None:
        self.closed = True

    def getvalue(self) -> bytes:
        return self._buffer.getvalue()


def test_fixture_log_trims_timestamps_off_every_line(tmp_path: Path) -> None:
    """Dropping the timestamp column should keep one row per input row."""
    source_bytes = fixture_path("access_log_sample.txt").read_bytes()
    output_path = tmp_path / "requests.txt"
    config = CutConfig(leading_bytes=21, outfile=str(output_path))

    report = run_pipeline(config, input_stream=io.BytesIO(source_bytes))

    expected = [line[21:] for line in source_bytes.splitlines()]
    assert output_path.read_bytes().splitlines() == expected
    assert report.lines_read == report.lines_written == len(expected)


def test_identity_trim_round_trips_input(tmp_path: Path) -> None:
    """Zero offsets should reproduce the newline-normalized input."""
    source_bytes = b"first\r\nsecond\n\nlast-without-newline"
    output_path = tmp_path / "copy.txt"

    run_pipeline(CutConfig(outfile=str(output_path)), input_stream=io.BytesIO(source_bytes))

    assert output_path.read_bytes() == b"first\nsecond\n\nlast-without-newline\n"


def test_slow_output_delays_but_keeps_every_line_in_order() -> None:
    """A throttled sink should only slow completion, never drop or reorder."""
    lines = [f"{index:05d}-payload".encode() for index in range(300)]
    stream = _ThrottledStream(delay_seconds=0.0005)
    target = OutputTarget(stream=stream, name="throttled", owns_stream=True)
    config = CutConfig(leading_bytes=1, trailing_bytes=5)

    report = run_pipeline(
        config,
        input_stream=io.BytesIO(b"\n".join(lines) + b"\n"),
        target=target,
        install_signal_handlers=False,
    )

    expected = [trim_line(line, 1, 5) for line in lines]
    assert stream.getvalue().splitlines() == expected
    assert report.lines_written == 300 and stream.closed


def test_large_lines_pass_through_pipeline(tmp_path: Path) -> None:
    """Lines near the 1 MiB limit should be trimmed without truncation."""
    big_line = b"k" * (1024 * 1024)
    output_path = tmp_path / "big.txt"
    config = CutConfig(leading_bytes=10, outfile=str(output_path))

    run_pipeline(config, input_stream=io.BytesIO(big_line + b"\nsmall\n"))

    assert output_path.read_bytes() == big_line[10:] + b"\n\n"


def test_skip_policy_omits_short_lines_end_to_end(tmp_path: Path) -> None:
    """Short lines should be dropped under skip while the rest flow through."""
    output_path = tmp_path / "skipped.txt"
    config = CutConfig(
        leading_bytes=2, trailing_bytes=5, overflow_policy="skip", outfile=str(output_path)
    )

    report = run_pipeline(config, input_stream=io.BytesIO(b"abcdefg\nab\nhijklmn\n"))

    assert output_path.read_bytes() == b"cde\njkl\n"
    assert report.lines_skipped == 1 and report.lines_written == 2
