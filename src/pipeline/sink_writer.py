"""Sink writer stage.

This module opens the output target and writes trimmed lines to it,
one per row, through a bounded write buffer.
"""

from __future__ import annotations

import os
import sys
import threading
from dataclasses import dataclass
from pathlib import Path

from core.config import CutConfig
from core.constants import LINE_TERMINATOR, OUTPUT_FILE_MODE
from core.errors import BytecutConfigError, BytecutSinkError
from core.logging_config import get_logger
from core.types import OutputTarget
from pipeline.channel import HandoffChannel

_LOGGER = get_logger(__name__)


def open_output_target(config: CutConfig) -> OutputTarget:
    """Open the configured output destination.

    Args:
        config: Runtime configuration naming the destination.

    Returns:
        Standard output, or a created/truncated file owned by the sink.

    Raises:
        BytecutConfigError: If the file cannot be opened for writing.
    """
    if config.writes_to_stdout:
        return OutputTarget(stream=sys.stdout.buffer, name="<stdout>", owns_stream=False)
    output_path = Path(config.outfile).expanduser()
    try:
        file_descriptor = os.open(
            output_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, OUTPUT_FILE_MODE
        )
    except OSError as error:
        raise BytecutConfigError(
            f"Could not open {output_path} for writing: {error.strerror}. "
            "Check that the parent directory exists and is writable."
        ) from error
    stream = os.fdopen(file_descriptor, "wb", buffering=config.write_buffer_size)
    return OutputTarget(stream=stream, name=str(output_path), owns_stream=True)


@dataclass
class SinkWriter:
    """Write every received line plus a newline, then flush and signal.

    ``lines_written`` counts lines accepted by the target stream; when
    ``write_failed`` is set, some of them may never have been delivered.
    A write failure sets ``cancel_event`` so the reader stops, while the
    sink keeps draining its channel until upstream closes it.
    """

    target: OutputTarget
    cancel_event: threading.Event | None = None
    lines_written: int = 0
    write_failed: bool = False

    def run(
        self,
        trimmed_channel: HandoffChannel[bytes],
        completion: threading.Event,
    ) -> None:
        """Drain ``trimmed_channel`` into the target and set ``completion``."""
        try:
            for line in trimmed_channel:
                if self.write_failed:
                    continue
                try:
                    self._write_line(line)
                except BytecutSinkError as error:
                    self._stop_writing("output_write_failed", error)
            self._flush()
        finally:
            self._close()
            completion.set()

    def _write_line(self, line: bytes) -> None:
        try:
            self.target.stream.write(line)
            self.target.stream.write(LINE_TERMINATOR)
        except (OSError, ValueError) as error:
            raise BytecutSinkError(f"Failed to write to {self.target.name}: {error}") from error
        self.lines_written += 1

    def _flush(self) -> None:
        if self.write_failed:
            return
        try:
            self.target.stream.flush()
        except (OSError, ValueError) as error:
            self._stop_writing("output_flush_failed", error)

    def _stop_writing(self, event: str, error: Exception) -> None:
        self.write_failed = True
        if self.cancel_event is not None:
            self.cancel_event.set()
        _LOGGER.error(
            event,
            target=self.target.name,
            lines_written=self.lines_written,
            error=str(error),
        )

    def _close(self) -> None:
        try:
            self.target.close()
        except (OSError, ValueError) as error:
            _LOGGER.error("output_close_failed", target=self.target.name, error=str(error))
