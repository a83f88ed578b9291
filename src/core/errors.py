"""bytecut exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each pipeline stage raises a specific error type for debuggability.
"""

from __future__ import annotations


class BytecutError(Exception):
    """Base exception for all bytecut failures."""


class BytecutConfigError(BytecutError):
    """Raised for invalid runtime configuration or unopenable targets."""


class BytecutSourceError(BytecutError):
    """Raised for input stream read failures."""


class LineTooLongError(BytecutSourceError):
    """Raised when an input line exceeds the configured line limit."""


class BytecutTrimError(BytecutError):
    """Raised when trim offsets fall outside a line."""


class BytecutSinkError(BytecutError):
    """Raised for output target write failures."""


class ChannelClosedError(BytecutError):
    """Raised when sending on a handoff channel that was already closed."""


class PipelineInterrupted(BytecutError):
    """Raised on the reader thread to break out of a blocked read or send."""
