"""Settings overrides taken from the command line."""

import logging
from typing import Any

from ..config.settings import FamilyCalSettings

logger = logging.getLogger(__name__)


def apply_cli_overrides(settings: FamilyCalSettings, args: Any) -> FamilyCalSettings:
    """Apply non-logging command-line overrides to settings.

    Args:
        settings: Current settings object
        args: Parsed command line arguments

    Returns:
        Updated settings object
    """
    database = getattr(args, "database", None)
    if database:
        settings.database_path = database
        logger.debug(f"Using database from command line: {database}")
    return settings


__all__ = ["apply_cli_overrides"]
