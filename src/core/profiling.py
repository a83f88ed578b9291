"""Optional CPU profile capture.

This module wraps ``cProfile`` behind a start/stop pair so the lifecycle
controller and the interrupt handler can share one capture.
"""

from __future__ import annotations

import cProfile
from pathlib import Path

from core.errors import BytecutConfigError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


class ProfileCapture:
    """Profile the controller thread and dump stats to a file on stop."""

    def __init__(self, output_path: str) -> None:
        self._output_path = Path(output_path).expanduser()
        self._profile: cProfile.Profile | None = None

    @property
    def active(self) -> bool:
        """Return whether the capture is currently running."""
        return self._profile is not None

    @property
    def output_path(self) -> Path:
        """Return where the stats file is written."""
        return self._output_path

    def start(self) -> None:
        """Check the output path and begin profiling.

        Raises:
            BytecutConfigError: If the profile file cannot be created.
        """
        try:
            self._output_path.touch()
        except OSError as error:
            raise BytecutConfigError(
                f"Could not create CPU profile at {self._output_path}: {error.strerror}. "
                "Pass an existing, writable directory to -cpuprofile."
            ) from error
        profile = cProfile.Profile()
        profile.enable()
        self._profile = profile

    def stop(self) -> None:
        """Disable profiling and write the stats file. Safe to call twice."""
        profile, self._profile = self._profile, None
        if profile is None:
            return
        profile.disable()
        profile.dump_stats(str(self._output_path))
        _LOGGER.info("profile_written", path=str(self._output_path))
