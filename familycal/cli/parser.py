"""Command-line argument parsing for familycal.

This module builds the argument parser for the maintenance commands,
including the shared logging options.
"""

import argparse
from datetime import datetime
from pathlib import Path

from ..utils.helpers import ensure_utc, parse_iso_datetime

LOG_LEVELS = ["DEBUG", "VERBOSE", "INFO", "WARNING", "ERROR", "CRITICAL"]


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 timestamp for command-line arguments.

    Naive timestamps are read as UTC.

    Args:
        value: Timestamp such as ``2025-03-01T06:00:00Z``

    Returns:
        Timezone-aware UTC datetime

    Raises:
        argparse.ArgumentTypeError: If the timestamp cannot be parsed

    Example:
        >>> parse_timestamp("2025-03-01")
        datetime.datetime(2025, 3, 1, 0, 0, tzinfo=datetime.timezone.utc)
    """
    parsed = parse_iso_datetime(value)
    if parsed is None:
        raise argparse.ArgumentTypeError(
            f"Invalid timestamp: {value}. Use ISO 8601, e.g. 2025-03-01T06:00:00Z"
        )
    return ensure_utc(parsed)


def _add_logging_arguments(parser: argparse.ArgumentParser) -> None:
    logging_group = parser.add_argument_group("logging", "Logging configuration options")

    logging_group.add_argument(
        "--log-level", choices=LOG_LEVELS, help="Set both console and file log levels"
    )

    logging_group.add_argument(
        "--console-level", choices=LOG_LEVELS, help="Set console log level specifically"
    )

    logging_group.add_argument(
        "--file-level", choices=LOG_LEVELS, help="Set file log level specifically"
    )

    logging_group.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )

    logging_group.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Only show errors on console (sets console level to ERROR)",
    )

    logging_group.add_argument(
        "--log-dir", type=Path, help="Write log files to this directory (enables file logging)"
    )

    logging_group.add_argument(
        "--no-file-logging", action="store_true", help="Disable file logging completely"
    )

    logging_group.add_argument(
        "--max-log-files", type=int, help="Maximum number of log files to keep (default: 5)"
    )

    logging_group.add_argument(
        "--no-console-logging", action="store_true", help="Disable console logging completely"
    )

    logging_group.add_argument(
        "--no-log-colors", action="store_true", help="Disable colored console output"
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the command line argument parser.

    Returns:
        argparse.ArgumentParser with the ``extend`` and ``init-db`` commands

    Example:
        >>> parser = create_parser()
        >>> args = parser.parse_args(["extend", "--now", "2025-03-01T00:00:00Z"])
        >>> args.command
        'extend'
    """
    parser = argparse.ArgumentParser(
        prog="familycal",
        description="familycal - recurring event maintenance for the household calendar",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s init-db                          # Create the database schema
  %(prog)s extend                           # Extend recurring series due now
  %(prog)s extend --now 2025-03-01T06:00Z   # Extend as of a given instant
  %(prog)s --verbose extend                 # Extend with verbose logging
        """,
    )

    _add_logging_arguments(parser)

    database_parent = argparse.ArgumentParser(add_help=False)
    database_parent.add_argument(
        "--database",
        type=Path,
        help="SQLite database file (default: <data_dir>/familycal.db)",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    extend_parser = subparsers.add_parser(
        "extend",
        parents=[database_parent],
        help="Generate occurrences for recurring series whose horizon is running out",
    )
    extend_parser.add_argument(
        "--now",
        type=parse_timestamp,
        help="Reference instant in ISO 8601 (default: current UTC time)",
    )

    subparsers.add_parser(
        "init-db",
        parents=[database_parent],
        help="Create the database schema if it does not exist",
    )

    return parser


__all__ = ["create_parser", "parse_timestamp"]
