"""Database models for recurring series and their occurrences."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_serializer

from ..recurrence.models import RecurrenceEndType, RecurrenceFrequency, RecurrenceRule
from ..utils.helpers import generate_id, to_storage_string, utc_now


class RecurringPattern(BaseModel):
    """Recurrence rule plus generation bookkeeping shared by a series."""

    id: str = Field(default_factory=generate_id)
    family_id: str

    frequency: RecurrenceFrequency
    interval: int = 1
    end_type: RecurrenceEndType = RecurrenceEndType.NEVER
    end_count: Optional[int] = None
    end_date: Optional[datetime] = None

    # Horizon up to which occurrences are materialized
    generated_until: datetime
    created_at: datetime = Field(default_factory=utc_now)

    @field_serializer("end_date", "generated_until", "created_at")
    def serialize_datetime(self, dt: Optional[datetime]) -> Optional[str]:
        """Serialize datetime fields to the stored ISO format."""
        return to_storage_string(dt) if dt is not None else None

    @property
    def rule(self) -> RecurrenceRule:
        """Recurrence rule of this pattern."""
        return RecurrenceRule(
            frequency=self.frequency,
            interval=self.interval,
            end_type=self.end_type,
            end_count=self.end_count,
            end_date=self.end_date,
        )


class EventRecord(BaseModel):
    """Concrete calendar event, possibly one occurrence of a series."""

    id: str = Field(default_factory=generate_id)
    family_id: str

    # Display fields copied from the series template
    title: str
    description: Optional[str] = None
    location: Optional[str] = None
    all_day: bool = False
    color: Optional[str] = None
    category: Optional[str] = None
    event_type: Optional[str] = None

    # Time information
    start_time: datetime
    end_time: datetime

    # Recurrence
    recurring_pattern_id: Optional[str] = None
    occurrence_date: Optional[datetime] = None

    # Sync metadata
    sync_status: str = "synced"
    local_updated_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utc_now)

    @field_serializer("start_time", "end_time", "occurrence_date", "local_updated_at", "created_at")
    def serialize_datetime(self, dt: Optional[datetime]) -> Optional[str]:
        """Serialize datetime fields to the stored ISO format."""
        return to_storage_string(dt) if dt is not None else None

    @property
    def duration_minutes(self) -> int:
        """Get event duration in minutes."""
        delta = self.end_time - self.start_time
        return int(delta.total_seconds() / 60)

    def copy_for_occurrence(
        self, occurrence_date: datetime, end_time: datetime, **overrides: Any
    ) -> "EventRecord":
        """Build a new occurrence carrying this event's display fields.

        Args:
            occurrence_date: Start instant of the new occurrence
            end_time: End instant of the new occurrence
            **overrides: Field values replacing the copied ones

        Returns:
            New EventRecord with a fresh id
        """
        values: dict[str, Any] = {
            "family_id": self.family_id,
            "title": self.title,
            "description": self.description,
            "location": self.location,
            "all_day": self.all_day,
            "color": self.color,
            "category": self.category,
            "event_type": self.event_type,
            "start_time": occurrence_date,
            "end_time": end_time,
            "recurring_pattern_id": self.recurring_pattern_id,
            "occurrence_date": occurrence_date,
            "sync_status": "synced",
        }
        values.update(overrides)
        return EventRecord(**values)


class EventParticipant(BaseModel):
    """Family member attached to an event."""

    id: str = Field(default_factory=generate_id)
    event_id: str
    family_member_id: str
    is_owner: bool = False
    created_at: datetime = Field(default_factory=utc_now)

    @field_serializer("created_at")
    def serialize_datetime(self, dt: datetime) -> str:
        """Serialize datetime fields to the stored ISO format."""
        return to_storage_string(dt)
