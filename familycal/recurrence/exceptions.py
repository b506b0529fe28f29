"""Recurrence-specific exceptions for error handling."""


class RecurrenceError(Exception):
    """Base exception for recurrence-related errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRecurrenceError(RecurrenceError, ValueError):
    """Exception raised when a recurrence rule violates its input contract."""
