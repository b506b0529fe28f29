"""Scheduled maintenance jobs."""

from .extend_recurring_events import (
    ExtensionResult,
    RecurringEventExtender,
    extend_recurring_events,
)

__all__ = ["ExtensionResult", "RecurringEventExtender", "extend_recurring_events"]
