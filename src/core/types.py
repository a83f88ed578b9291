"""Shared typed models.

This module defines the value types passed between the CLI, the
lifecycle controller and the pipeline stages.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO


class ChannelState(Enum):
    """Lifecycle of one handoff channel.

    ``OPEN`` accepts values, ``DRAINING`` means the producer closed the
    channel but the consumer has not yet observed the end, and ``CLOSED``
    means the consumer has observed it.
    """

    OPEN = "open"
    DRAINING = "draining"
    CLOSED = "closed"


class LifecycleState(Enum):
    """Lifecycle of the pipeline as seen by the controller."""

    IDLE = "idle"
    RUNNING = "running"
    INTERRUPTED = "interrupted"
    TERMINATED = "terminated"


@dataclass(frozen=True)
class OutputTarget:
    """Binary destination owned by the sink writer.

    Attributes:
        stream: Writable binary stream.
        name: Display name used in log events.
        owns_stream: Whether the sink must close the stream when done.
    """

    stream: BinaryIO
    name: str
    owns_stream: bool

    def close(self) -> None:
        """Close the stream when it is owned by this target."""
        if self.owns_stream and not self.stream.closed:
            self.stream.close()


@dataclass(frozen=True)
class TrimResult:
    """Outcome of trimming one line.

    Attributes:
        line: Trimmed bytes, or None when the line was skipped.
        skipped: Whether the overflow policy dropped the line.
    """

    line: bytes | None
    skipped: bool = False


@dataclass(frozen=True)
class PipelineReport:
    """Summary of one pipeline run.

    Attributes:
        lines_read: Lines pushed by the source reader.
        lines_forwarded: Lines pushed by the transformer.
        lines_skipped: Lines dropped by the skip overflow policy.
        lines_written: Lines accepted by the target stream. After an output
            failure some of them may not have been delivered.
        state: Final lifecycle state.
        interrupted: Whether a termination signal was received.
        output_failed: Whether a write or flush to the target failed.
    """

    lines_read: int
    lines_forwarded: int
    lines_skipped: int
    lines_written: int
    state: LifecycleState
    interrupted: bool
    output_failed: bool = False
