"""Entry point for `python -m familycal` command.

Delegates to the CLI module; also used as the console script entry point.
"""

import asyncio
import sys

from familycal.cli import main_entry


def main() -> None:
    """Entry point for python -m familycal."""
    try:
        exit_code = asyncio.run(main_entry())
        sys.exit(exit_code)
    except KeyboardInterrupt:
        print("Operation cancelled by user")
        sys.exit(130)


if __name__ == "__main__":
    main()
