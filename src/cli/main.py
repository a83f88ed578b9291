"""bytecut CLI entry point.

This module parses command-line flags into a validated config and runs
the trimming pipeline over standard input. Flags use single-dash long
names; double-dash spellings are accepted as aliases.
"""

from __future__ import annotations

import argparse
from typing import Sequence

from core.config import CutConfig
from core.constants import (
    CONFIG_ERROR_EXIT_CODE,
    SUPPORTED_INTERRUPT_POLICIES,
    SUPPORTED_OVERFLOW_POLICIES,
)
from core.errors import BytecutConfigError
from core.logging_config import get_logger
from pipeline.controller import run_pipeline

_LOGGER = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="bytecut",
        description="Trim leading/trailing bytes from every line of standard input",
    )
    parser.add_argument(
        "-outfile",
        "--outfile",
        help="Location to save trimmed lines, '-' for standard output",
    )
    parser.add_argument(
        "-cpuprofile",
        "--cpuprofile",
        dest="cpu_profile",
        help="Write a CPU profile to this path",
    )
    parser.add_argument(
        "-leadingbytes",
        "--leadingbytes",
        dest="leading_bytes",
        type=int,
        help="Number of leading bytes to trim",
    )
    parser.add_argument(
        "-trailingbytes",
        "--trailingbytes",
        dest="trailing_bytes",
        type=int,
        help="Byte offset marking the end of each line after the leading trim",
    )
    parser.add_argument(
        "-maxlinebytes",
        "--maxlinebytes",
        dest="max_line_bytes",
        type=int,
        help="Longest supported input line in bytes, 0 for no limit",
    )
    parser.add_argument(
        "-overflow",
        "--overflow",
        dest="overflow_policy",
        choices=SUPPORTED_OVERFLOW_POLICIES,
        help="Clamp or skip lines shorter than the trim offsets",
    )
    parser.add_argument(
        "-oninterrupt",
        "--oninterrupt",
        dest="interrupt_policy",
        choices=SUPPORTED_INTERRUPT_POLICIES,
        help="Drain in-flight lines or exit immediately on SIGINT/SIGTERM",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the bytecut CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = build_config(args)
        run_pipeline(config)
    except BytecutConfigError as error:
        _LOGGER.error("config_error", error=str(error))
        return CONFIG_ERROR_EXIT_CODE
    return 0


def build_config(args: argparse.Namespace) -> CutConfig:
    """Layer parsed flags over environment defaults.

    Args:
        args: Parsed CLI args.

    Returns:
        Validated runtime configuration.

    Raises:
        BytecutConfigError: If any value is invalid.
    """
    return CutConfig.from_env().with_overrides(
        outfile=args.outfile,
        cpu_profile=args.cpu_profile,
        leading_bytes=args.leading_bytes,
        trailing_bytes=args.trailing_bytes,
        max_line_bytes=args.max_line_bytes,
        overflow_policy=args.overflow_policy,
        interrupt_policy=args.interrupt_policy,
    )
