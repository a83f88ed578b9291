"""Runtime configuration model for bytecut.

This module owns all environment variable parsing and validation.
Stages consume a typed config object instead of raw env reads or flags.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
import os
from typing import Any, Mapping

from core.constants import (
    DEFAULT_INTERRUPT_POLICY,
    DEFAULT_LEADING_BYTES,
    DEFAULT_MAX_LINE_BYTES,
    DEFAULT_OUTFILE,
    DEFAULT_OVERFLOW_POLICY,
    DEFAULT_TRAILING_BYTES,
    DEFAULT_WRITE_BUFFER_SIZE,
    ENV_CPU_PROFILE,
    ENV_INTERRUPT_POLICY,
    ENV_LEADING_BYTES,
    ENV_MAX_LINE_BYTES,
    ENV_OUTFILE,
    ENV_OVERFLOW_POLICY,
    ENV_TRAILING_BYTES,
    ENV_WRITE_BUFFER_SIZE,
    STDOUT_TARGET,
    SUPPORTED_INTERRUPT_POLICIES,
    SUPPORTED_OVERFLOW_POLICIES,
)
from core.errors import BytecutConfigError


@dataclass(frozen=True)
class CutConfig:
    """Validated runtime configuration.

    Attributes:
        leading_bytes: Bytes stripped from the start of every line.
        trailing_bytes: End boundary offset applied after the leading strip.
        outfile: Output destination, ``-`` for standard output.
        cpu_profile: Optional path for a CPU profile capture.
        max_line_bytes: Longest supported input line, 0 for no limit.
        overflow_policy: ``clamp`` or ``skip`` for out-of-range offsets.
        interrupt_policy: ``drain`` or ``abort`` on SIGINT/SIGTERM.
        write_buffer_size: Buffer size used for file output targets.
    """

    leading_bytes: int = DEFAULT_LEADING_BYTES
    trailing_bytes: int = DEFAULT_TRAILING_BYTES
    outfile: str = DEFAULT_OUTFILE
    cpu_profile: str | None = None
    max_line_bytes: int = DEFAULT_MAX_LINE_BYTES
    overflow_policy: str = DEFAULT_OVERFLOW_POLICY
    interrupt_policy: str = DEFAULT_INTERRUPT_POLICY
    write_buffer_size: int = DEFAULT_WRITE_BUFFER_SIZE

    def __post_init__(self) -> None:
        _require_non_negative("leading_bytes", self.leading_bytes)
        _require_non_negative("trailing_bytes", self.trailing_bytes)
        _require_non_negative("max_line_bytes", self.max_line_bytes)
        if self.write_buffer_size <= 0:
            raise BytecutConfigError(
                f"Invalid write_buffer_size: expected a positive integer, "
                f"got {self.write_buffer_size}."
            )
        _require_choice("overflow_policy", self.overflow_policy, SUPPORTED_OVERFLOW_POLICIES)
        _require_choice("interrupt_policy", self.interrupt_policy, SUPPORTED_INTERRUPT_POLICIES)
        if not self.outfile:
            raise BytecutConfigError(
                "Invalid outfile: expected a file path or "
                f"'{STDOUT_TARGET}' for standard output, got an empty value."
            )

    @property
    def writes_to_stdout(self) -> bool:
        """Return whether output goes to the standard output stream."""
        return self.outfile == STDOUT_TARGET

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "CutConfig":
        """Build config from process environment variables.

        Args:
            environ: Optional mapping used instead of ``os.environ``.

        Returns:
            A validated config object.

        Raises:
            BytecutConfigError: If environment values are invalid.
        """
        env = os.environ if environ is None else environ
        return cls(
            leading_bytes=_parse_int(env, ENV_LEADING_BYTES, DEFAULT_LEADING_BYTES),
            trailing_bytes=_parse_int(env, ENV_TRAILING_BYTES, DEFAULT_TRAILING_BYTES),
            outfile=env.get(ENV_OUTFILE, DEFAULT_OUTFILE),
            cpu_profile=env.get(ENV_CPU_PROFILE) or None,
            max_line_bytes=_parse_int(env, ENV_MAX_LINE_BYTES, DEFAULT_MAX_LINE_BYTES),
            overflow_policy=env.get(ENV_OVERFLOW_POLICY, DEFAULT_OVERFLOW_POLICY),
            interrupt_policy=env.get(ENV_INTERRUPT_POLICY, DEFAULT_INTERRUPT_POLICY),
            write_buffer_size=_parse_int(env, ENV_WRITE_BUFFER_SIZE, DEFAULT_WRITE_BUFFER_SIZE),
        )

    def with_overrides(self, **overrides: Any) -> "CutConfig":
        """Return a copy with every non-None override applied.

        Args:
            overrides: Field values, usually parsed CLI flags.

        Returns:
            A new validated config object.
        """
        changes = {name: value for name, value in overrides.items() if value is not None}
        if "cpu_profile" in changes and not changes["cpu_profile"]:
            changes["cpu_profile"] = None
        return replace(self, **changes)


def _parse_int(env: Mapping[str, str], name: str, default: int) -> int:
    """Parse an integer environment value.

    Args:
        env: Environment mapping.
        name: Variable name.
        default: Value used when the variable is unset.

    Returns:
        Parsed integer.

    Raises:
        BytecutConfigError: If value cannot be parsed into int.
    """
    raw_value = env.get(name)
    if raw_value is None or raw_value == "":
        return default
    try:
        return int(raw_value)
    except ValueError as error:
        raise BytecutConfigError(
            f"Invalid {name} value: expected integer, got '{raw_value}'. "
            f"Set {name} to a numeric value."
        ) from error


def _require_non_negative(field_name: str, value: int) -> None:
    if value < 0:
        raise BytecutConfigError(
            f"Invalid {field_name}: expected a non-negative integer, got {value}."
        )


def _require_choice(field_name: str, value: str, choices: tuple[str, ...]) -> None:
    if value not in choices:
        raise BytecutConfigError(
            f"Invalid {field_name}: expected one of {', '.join(choices)}, got '{value}'."
        )
