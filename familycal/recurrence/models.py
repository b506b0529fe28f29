"""Data models for recurrence rules."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Upper bounds accepted from event forms
MAX_INTERVAL = 99
MAX_END_COUNT = 365


class RecurrenceFrequency(str, Enum):
    """Supported step units for a recurring series."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class RecurrenceEndType(str, Enum):
    """Mutually exclusive termination modes for a recurring series."""

    NEVER = "never"
    COUNT = "count"
    DATE = "date"


class RecurrenceRule(BaseModel):
    """Validated recurrence rule shared by every occurrence of a series."""

    frequency: RecurrenceFrequency
    interval: int = Field(default=1, ge=1, le=MAX_INTERVAL, description="Step multiplier")
    end_type: RecurrenceEndType = RecurrenceEndType.NEVER
    end_count: Optional[int] = Field(
        default=None, ge=1, le=MAX_END_COUNT, description="Total occurrences of the series"
    )
    end_date: Optional[datetime] = Field(
        default=None, description="Inclusive upper bound of the series"
    )

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_end_condition(self) -> "RecurrenceRule":
        """Require the end field matching the end type.

        Returns:
            The validated RecurrenceRule instance

        Raises:
            ValueError: If end_count or end_date is missing for its end type
        """
        if self.end_type == RecurrenceEndType.COUNT and not self.end_count:
            raise ValueError("end_count is required when end_type is 'count'")
        if self.end_type == RecurrenceEndType.DATE and self.end_date is None:
            raise ValueError("end_date is required when end_type is 'date'")
        return self
