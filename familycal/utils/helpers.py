"""Helper functions shared across familycal modules."""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

logger = logging.getLogger(__name__)

UTC = timezone.utc


def utc_now() -> datetime:
    """Get the current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime) -> datetime:
    """Normalize a datetime to timezone-aware UTC.

    Naive datetimes are assumed to already be in UTC.

    Args:
        dt: Datetime to normalize

    Returns:
        Timezone-aware UTC datetime
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def to_storage_string(dt: datetime) -> str:
    """Serialize a datetime to the ISO form stored in SQLite.

    All stored instants share the UTC offset so string order matches time order.
    """
    return ensure_utc(dt).isoformat(timespec="microseconds")


def parse_iso_datetime(dt_string: Optional[str]) -> Optional[datetime]:
    """Parse ISO datetime string with error handling.

    Args:
        dt_string: ISO datetime string

    Returns:
        Parsed datetime or None if parsing fails
    """
    if dt_string is None:
        return None

    try:
        if dt_string.endswith("Z"):
            dt_string = dt_string.replace("Z", "+00:00")

        return datetime.fromisoformat(dt_string)
    except (ValueError, TypeError) as e:
        logger.debug(f"Failed to parse datetime '{dt_string}': {e}")
        return None


def generate_id() -> str:
    """Generate a collision-resistant record identifier."""
    return uuid.uuid4().hex
