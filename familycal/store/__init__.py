"""Persistence for recurring series, their occurrences and participants."""

from .database import EventStore
from .exceptions import StoreError, StoreInitializationError, StoreReadError, StoreWriteError
from .models import EventParticipant, EventRecord, RecurringPattern

__all__ = [
    "EventParticipant",
    "EventRecord",
    "EventStore",
    "RecurringPattern",
    "StoreError",
    "StoreInitializationError",
    "StoreReadError",
    "StoreWriteError",
]
