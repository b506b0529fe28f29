"""Event store exceptions for error handling."""

from typing import Optional


class StoreError(Exception):
    """Base exception for event store errors."""

    def __init__(self, message: str, pattern_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.pattern_id = pattern_id


class StoreInitializationError(StoreError):
    """Exception raised when the database schema cannot be created."""


class StoreReadError(StoreError):
    """Exception raised when a lookup against the database fails."""


class StoreWriteError(StoreError):
    """Exception raised when a write transaction fails and is rolled back."""
