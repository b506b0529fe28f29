"""Extend command: run the recurring series extension job once.

Intended to be triggered by an external scheduler such as cron.
"""

from typing import Any

from familycal.jobs.extend_recurring_events import extend_recurring_events
from familycal.store.database import EventStore

from ._shared import prepare_settings


async def run_extend_mode(args: Any) -> int:
    """Run one extension pass over the configured database.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    updated_settings, logger = prepare_settings(args)

    try:
        store = EventStore(updated_settings.database_file)
        result = await extend_recurring_events(
            store, now=getattr(args, "now", None), settings=updated_settings
        )
    except Exception:
        logger.exception("Recurring event extension failed")
        return 1

    print(result.summary)
    return 0
