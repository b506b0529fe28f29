"""Recurrence rules and occurrence date generation."""

from .exceptions import InvalidRecurrenceError, RecurrenceError
from .generator import (
    MAX_OCCURRENCES,
    apply_duration,
    calculate_next_occurrence,
    generate_occurrence_dates,
    generate_rule_occurrences,
    get_event_duration,
)
from .models import RecurrenceEndType, RecurrenceFrequency, RecurrenceRule

__all__ = [
    "MAX_OCCURRENCES",
    "InvalidRecurrenceError",
    "RecurrenceEndType",
    "RecurrenceError",
    "RecurrenceFrequency",
    "RecurrenceRule",
    "apply_duration",
    "calculate_next_occurrence",
    "generate_occurrence_dates",
    "generate_rule_occurrences",
    "get_event_duration",
]
