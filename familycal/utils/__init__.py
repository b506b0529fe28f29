"""Utility functions and helpers package."""

from .helpers import ensure_utc, generate_id, parse_iso_datetime, to_storage_string, utc_now
from .logging import setup_logging

__all__ = [
    "ensure_utc",
    "generate_id",
    "parse_iso_datetime",
    "setup_logging",
    "to_storage_string",
    "utc_now",
]
