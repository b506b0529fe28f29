"""Recurring series creation and lookup."""

from .service import CreatedSeries, NewRecurringEvent, RecurringSeriesService

__all__ = ["CreatedSeries", "NewRecurringEvent", "RecurringSeriesService"]
