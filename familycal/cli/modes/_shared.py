"""Setup shared by all CLI commands."""

import logging
from typing import Any

from familycal.config.settings import FamilyCalSettings, get_settings
from familycal.utils.logging import apply_command_line_overrides, setup_logging

from ..config import apply_cli_overrides


def prepare_settings(args: Any) -> tuple[FamilyCalSettings, logging.Logger]:
    """Apply command-line overrides to the global settings and set up logging.

    Args:
        args: Parsed command line arguments

    Returns:
        Tuple of the updated settings and the configured application logger
    """
    updated_settings = apply_command_line_overrides(get_settings(), args)
    updated_settings = apply_cli_overrides(updated_settings, args)
    logger = setup_logging(updated_settings)
    return updated_settings, logger
