"""Source reader stage.

This module reads newline-delimited records from a binary stream and
hands each one to the line channel. It runs on the controller's thread.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import BinaryIO, Iterator

from core.constants import CARRIAGE_RETURN, LINE_TERMINATOR
from core.errors import LineTooLongError, PipelineInterrupted
from core.logging_config import get_logger
from pipeline.channel import HandoffChannel

_LOGGER = get_logger(__name__)


def iter_lines(stream: BinaryIO, max_line_bytes: int) -> Iterator[bytes]:
    """Yield lines from a binary stream with terminators stripped.

    A ``\\r`` directly before the terminator is dropped as well, and so is a
    trailing ``\\r`` on an unterminated final line.

    Args:
        stream: Binary input stream.
        max_line_bytes: Longest accepted line, 0 for no limit.

    Yields:
        One immutable line per record.

    Raises:
        LineTooLongError: If a line exceeds ``max_line_bytes``.
        OSError: If the stream fails mid-read.
    """
    line_number = 0
    read_limit = max_line_bytes + len(CARRIAGE_RETURN + LINE_TERMINATOR) if max_line_bytes else -1
    while True:
        raw_line = stream.readline(read_limit)
        if not raw_line:
            return
        line_number += 1
        line = _strip_terminator(raw_line)
        if max_line_bytes and len(line) > max_line_bytes:
            raise LineTooLongError(
                f"Input line {line_number} exceeds the {max_line_bytes} byte limit. "
                "Raise -maxlinebytes or pass 0 to disable the limit."
            )
        yield line


@dataclass
class SourceReader:
    """Push every input line onto the line channel, then close it.

    Read failures are reported and treated as end of input; lines already
    forwarded are kept. Setting ``cancel_event`` stops reading between lines.
    """

    stream: BinaryIO
    max_line_bytes: int
    cancel_event: threading.Event | None = None
    lines_read: int = 0

    def run(self, line_channel: HandoffChannel[bytes]) -> None:
        """Read until end of input, a read error, or cancellation."""
        try:
            for line in iter_lines(self.stream, self.max_line_bytes):
                if self.cancel_event is not None and self.cancel_event.is_set():
                    break
                line_channel.send(line)
                self.lines_read += 1
        except PipelineInterrupted:
            _LOGGER.info("source_read_interrupted", lines_read=self.lines_read)
        except (OSError, LineTooLongError) as error:
            _LOGGER.error("source_read_failed", lines_read=self.lines_read, error=str(error))
        finally:
            line_channel.close()


def _strip_terminator(raw_line: bytes) -> bytes:
    if raw_line.endswith(LINE_TERMINATOR):
        raw_line = raw_line[: -len(LINE_TERMINATOR)]
    if raw_line.endswith(CARRIAGE_RETURN):
        raw_line = raw_line[: -len(CARRIAGE_RETURN)]
    return raw_line
