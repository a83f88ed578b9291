"""Core constants used across bytecut modules.

This module centralizes non-domain-specific constants.
Keeping values here avoids magic literals in stage logic.
"""

from __future__ import annotations

STDOUT_TARGET = "-"
DEFAULT_OUTFILE = STDOUT_TARGET
DEFAULT_LEADING_BYTES = 0
DEFAULT_TRAILING_BYTES = 0
DEFAULT_MAX_LINE_BYTES = 1024 * 1024
DEFAULT_WRITE_BUFFER_SIZE = 64 * 1024
OUTPUT_FILE_MODE = 0o644
LINE_TERMINATOR = b"\n"
CARRIAGE_RETURN = b"\r"
OVERFLOW_CLAMP = "clamp"
OVERFLOW_SKIP = "skip"
SUPPORTED_OVERFLOW_POLICIES = (OVERFLOW_CLAMP, OVERFLOW_SKIP)
DEFAULT_OVERFLOW_POLICY = OVERFLOW_CLAMP
INTERRUPT_DRAIN = "drain"
INTERRUPT_ABORT = "abort"
SUPPORTED_INTERRUPT_POLICIES = (INTERRUPT_DRAIN, INTERRUPT_ABORT)
DEFAULT_INTERRUPT_POLICY = INTERRUPT_DRAIN
SIGNAL_EXIT_CODE_BASE = 128
CONFIG_ERROR_EXIT_CODE = 1
ENV_OUTFILE = "BYTECUT_OUTFILE"
ENV_CPU_PROFILE = "BYTECUT_CPU_PROFILE"
ENV_LEADING_BYTES = "BYTECUT_LEADING_BYTES"
ENV_TRAILING_BYTES = "BYTECUT_TRAILING_BYTES"
ENV_MAX_LINE_BYTES = "BYTECUT_MAX_LINE_BYTES"
ENV_OVERFLOW_POLICY = "BYTECUT_OVERFLOW_POLICY"
ENV_INTERRUPT_POLICY = "BYTECUT_INTERRUPT_POLICY"
ENV_WRITE_BUFFER_SIZE = "BYTECUT_WRITE_BUFFER_SIZE"
