"""CLI module for familycal.

Provides argument parsing, settings overrides and command execution.
"""

from typing import Optional

from .config import apply_cli_overrides
from .modes import get_mode_handler, run_extend_mode, run_init_db_mode
from .parser import create_parser, parse_timestamp


async def main_entry(argv: Optional[list[str]] = None) -> int:
    """Main entry point with argument parsing.

    Args:
        argv: Arguments to parse, ``sys.argv[1:]`` when omitted

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    handler = get_mode_handler(args.command)
    return await handler(args)


__all__ = [
    "apply_cli_overrides",
    "create_parser",
    "main_entry",
    "parse_timestamp",
    "run_extend_mode",
    "run_init_db_mode",
]
