"""Occurrence date generation for recurring series.

Expands a recurrence rule into the ordered start instants of its
occurrences. Month and year steps are not fixed-duration, so generation
steps one occurrence at a time with ``dateutil.relativedelta``, which
clamps to the last day of shorter months (Jan 31 + 1 month = Feb 28) and
maps Feb 29 to Feb 28 in non-leap years. Wall-clock time of day is kept.

Everything here is pure: no I/O and no clock reads.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional, Union

from dateutil.relativedelta import relativedelta

from .exceptions import InvalidRecurrenceError
from .models import RecurrenceEndType, RecurrenceFrequency, RecurrenceRule

logger = logging.getLogger(__name__)

# Hard cap per invocation, bounds work for near-unbounded horizons
MAX_OCCURRENCES = 365

FrequencyLike = Union[RecurrenceFrequency, str]
EndTypeLike = Union[RecurrenceEndType, str]


def _coerce_frequency(frequency: FrequencyLike) -> RecurrenceFrequency:
    try:
        return RecurrenceFrequency(frequency)
    except ValueError as e:
        raise InvalidRecurrenceError(f"Unsupported frequency: {frequency!r}") from e


def _coerce_end_type(end_type: EndTypeLike) -> RecurrenceEndType:
    try:
        return RecurrenceEndType(end_type)
    except ValueError as e:
        raise InvalidRecurrenceError(f"Unsupported end type: {end_type!r}") from e


def _step(frequency: RecurrenceFrequency, interval: int) -> relativedelta:
    if frequency == RecurrenceFrequency.DAILY:
        return relativedelta(days=interval)
    if frequency == RecurrenceFrequency.WEEKLY:
        return relativedelta(weeks=interval)
    if frequency == RecurrenceFrequency.MONTHLY:
        return relativedelta(months=interval)
    return relativedelta(years=interval)


def calculate_next_occurrence(
    current: datetime, frequency: FrequencyLike, interval: int
) -> datetime:
    """Calculate the occurrence following ``current``.

    Args:
        current: Start instant of the current occurrence
        frequency: daily, weekly, monthly or yearly
        interval: Positive step multiplier

    Returns:
        Start instant of the next occurrence, clamped to month end when needed

    Raises:
        InvalidRecurrenceError: If frequency is unknown or interval < 1
    """
    if interval < 1:
        raise InvalidRecurrenceError(f"Interval must be at least 1, got {interval}")
    return current + _step(_coerce_frequency(frequency), interval)


def _check_comparable(*values: Optional[datetime]) -> None:
    awareness = {value.tzinfo is not None for value in values if value is not None}
    if len(awareness) > 1:
        raise InvalidRecurrenceError("Cannot mix naive and timezone-aware datetimes")


def generate_occurrence_dates(
    start_date: datetime,
    frequency: FrequencyLike,
    interval: int,
    end_type: EndTypeLike,
    end_count: Optional[int] = None,
    end_date: Optional[datetime] = None,
    *,
    until_date: datetime,
) -> list[datetime]:
    """Generate the start instants of a recurring series.

    Generation starts at ``start_date`` and stops at the first of:
    ``end_count`` instants (end type ``count``), the next instant passing
    ``end_date`` (end type ``date``) or ``until_date``, or
    ``MAX_OCCURRENCES`` instants. Both date bounds are inclusive.

    Args:
        start_date: First candidate instant
        frequency: daily, weekly, monthly or yearly
        interval: Positive step multiplier
        end_type: never, count or date
        end_count: Occurrence limit, required for end type ``count``
        end_date: Series end, required for end type ``date``
        until_date: Generation horizon of this invocation

    Returns:
        Strictly increasing list of instants

    Raises:
        InvalidRecurrenceError: If the arguments violate the rule contract
    """
    frequency = _coerce_frequency(frequency)
    end_type = _coerce_end_type(end_type)

    if interval < 1:
        raise InvalidRecurrenceError(f"Interval must be at least 1, got {interval}")
    if end_type == RecurrenceEndType.COUNT and (end_count is None or end_count < 1):
        raise InvalidRecurrenceError("end_count must be a positive integer for end type 'count'")
    if end_type == RecurrenceEndType.DATE and end_date is None:
        raise InvalidRecurrenceError("end_date is required for end type 'date'")
    _check_comparable(start_date, end_date, until_date)

    effective_end = until_date
    if end_type == RecurrenceEndType.DATE and end_date is not None:
        effective_end = min(end_date, until_date)

    max_count = MAX_OCCURRENCES
    if end_type == RecurrenceEndType.COUNT and end_count:
        max_count = min(end_count, MAX_OCCURRENCES)

    step = _step(frequency, interval)
    dates: list[datetime] = []
    current = start_date

    while len(dates) < max_count and current <= effective_end:
        dates.append(current)
        current = current + step

    if len(dates) == MAX_OCCURRENCES and current <= effective_end:
        logger.debug(
            f"Occurrence generation hit the {MAX_OCCURRENCES} cap before {effective_end.isoformat()}"
        )

    return dates


def generate_rule_occurrences(
    rule: RecurrenceRule, start_date: datetime, until_date: datetime
) -> list[datetime]:
    """Generate occurrence instants for a validated rule.

    Args:
        rule: Recurrence rule of the series
        start_date: First candidate instant
        until_date: Generation horizon of this invocation

    Returns:
        Strictly increasing list of instants
    """
    return generate_occurrence_dates(
        start_date,
        rule.frequency,
        rule.interval,
        rule.end_type,
        end_count=rule.end_count,
        end_date=rule.end_date,
        until_date=until_date,
    )


def get_event_duration(start_time: datetime, end_time: datetime) -> timedelta:
    """Canonical duration of a series, taken from one occurrence."""
    return end_time - start_time


def apply_duration(occurrence_date: datetime, duration: timedelta) -> datetime:
    """End instant of an occurrence starting at ``occurrence_date``."""
    return occurrence_date + duration
