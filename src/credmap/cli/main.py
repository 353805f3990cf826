"""
credmap command-line entry point.

Usage:
    credmap <command> [args]
"""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

import pydantic

from credmap import __version__
from credmap.cli.export import handle_export_command, register_export_parser
from credmap.cli.keyword import handle_keyword_command, register_keyword_parser
from credmap.config.settings import LOG_LEVELS, get_settings
from credmap.core.errors import ExitCode
from credmap.logging import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="credmap",
        description="Combine credential detector hosts and secret regex rules",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=get_settings().log_level,
        help="Log level for structured logs on stderr (default: WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command")

    register_export_parser(subparsers)
    register_keyword_parser(subparsers)
    return parser


def run(argv: Sequence[str] | None = None) -> int:
    """Parse arguments and run a command, returning its exit code."""
    try:
        parser = build_parser()
    except pydantic.ValidationError as e:
        # Settings defaults come from CREDMAP_* variables
        print(f"error: invalid CREDMAP_* setting: {e}", file=sys.stderr)
        return ExitCode.CONFIG_ERROR

    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.command == "export":
        return handle_export_command(args)
    if args.command == "keyword":
        return handle_keyword_command(args)

    parser.print_help()
    return 1


def main(argv: Sequence[str] | None = None) -> None:
    sys.exit(run(argv))
