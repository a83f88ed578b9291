"""Transformer stage.

This module applies the leading/trailing byte trim to each line and
forwards the result. Out-of-range offsets never abort the pipeline:
they are clamped or the line is skipped, depending on policy.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.config import CutConfig
from core.constants import OVERFLOW_CLAMP, OVERFLOW_SKIP
from core.errors import BytecutTrimError
from core.logging_config import get_logger
from core.types import TrimResult
from pipeline.channel import HandoffChannel

_LOGGER = get_logger(__name__)


def trim_line(
    line: bytes,
    leading_bytes: int,
    trailing_bytes: int,
    overflow_policy: str = OVERFLOW_CLAMP,
) -> bytes:
    """Return ``line[leading_bytes:trailing_bytes]`` with bounds checks.

    The trailing offset is an end boundary measured from the start of the
    line, so it still applies after the leading bytes are dropped.

    Args:
        line: Input line without terminator.
        leading_bytes: Bytes to drop from the front, 0 to keep all.
        trailing_bytes: End boundary offset, 0 to keep everything.
        overflow_policy: ``clamp`` to shorten silently, ``skip`` to raise.

    Returns:
        The trimmed line.

    Raises:
        BytecutTrimError: If an offset is out of range under ``skip``.
    """
    if overflow_policy == OVERFLOW_SKIP:
        _check_bounds(line, leading_bytes, trailing_bytes)
    end = trailing_bytes if trailing_bytes > 0 else len(line)
    start = leading_bytes if leading_bytes > 0 else 0
    return line[start:end]


def _check_bounds(line: bytes, leading_bytes: int, trailing_bytes: int) -> None:
    if leading_bytes > len(line):
        raise BytecutTrimError(
            f"leading trim of {leading_bytes} bytes exceeds line length {len(line)}"
        )
    if trailing_bytes > len(line):
        raise BytecutTrimError(
            f"trailing boundary {trailing_bytes} exceeds line length {len(line)}"
        )
    if 0 < trailing_bytes < leading_bytes:
        raise BytecutTrimError(
            f"trailing boundary {trailing_bytes} falls before leading trim {leading_bytes}"
        )


@dataclass
class Transformer:
    """Consume lines, trim them, and forward the results."""

    config: CutConfig
    lines_forwarded: int = 0
    lines_skipped: int = 0

    def apply(self, line: bytes, line_number: int) -> TrimResult:
        """Trim one line, turning a trim error into a skip result."""
        try:
            trimmed = trim_line(
                line,
                self.config.leading_bytes,
                self.config.trailing_bytes,
                self.config.overflow_policy,
            )
        except BytecutTrimError as error:
            _LOGGER.warning("line_trim_skipped", line_number=line_number, reason=str(error))
            return TrimResult(line=None, skipped=True)
        return TrimResult(line=trimmed)

    def run(
        self,
        line_channel: HandoffChannel[bytes],
        trimmed_channel: HandoffChannel[bytes],
    ) -> None:
        """Drain ``line_channel`` into ``trimmed_channel`` and close it."""
        try:
            for line_number, line in enumerate(line_channel, 1):
                result = self.apply(line, line_number)
                if result.skipped or result.line is None:
                    self.lines_skipped += 1
                    continue
                trimmed_channel.send(result.line)
                self.lines_forwarded += 1
        finally:
            trimmed_channel.close()
