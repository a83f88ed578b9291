"""Structured logging configuration.

This module initializes a logger with a stable structured format.
Events are rendered as JSON lines on stderr so that standard output
stays reserved for trimmed lines.
"""

from __future__ import annotations

import sys
from typing import Any

import structlog


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A structlog logger with structured output on stderr.
    """
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=_stderr_logger_factory,
        cache_logger_on_first_use=False,
    )
    return structlog.get_logger(name)


def _stderr_logger_factory(*args: Any) -> structlog.PrintLogger:
    """Build a print logger bound to the current ``sys.stderr``.

    The stream is looked up on every call so redirected or captured
    stderr streams are honored.
    """
    return structlog.PrintLogger(file=sys.stderr)


def flush_diagnostics() -> None:
    """Flush the diagnostic stream before an immediate process exit."""
    try:
        sys.stderr.flush()
    except (OSError, ValueError):
        # Diagnostic stream already gone; nothing left to report to.
        return
