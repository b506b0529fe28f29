"""Init-db command: create the database schema."""

from typing import Any

from familycal.store.database import EventStore

from ._shared import prepare_settings


async def run_init_db_mode(args: Any) -> int:
    """Create the schema in the configured database.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    updated_settings, logger = prepare_settings(args)

    try:
        store = EventStore(updated_settings.database_file)
    except OSError:
        logger.exception("Could not prepare database location")
        return 1

    if not await store.initialize():
        logger.error(f"Database initialization failed: {store.database_path}")
        return 1

    print(f"Database ready: {store.database_path}")
    return 0
