"""Creation of recurring series with their first batch of occurrences."""

import logging
from datetime import datetime
from typing import Optional

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, Field, ValidationError, model_validator

from ..config.settings import FamilyCalSettings, get_settings
from ..recurrence.exceptions import InvalidRecurrenceError, RecurrenceError
from ..recurrence.generator import apply_duration, generate_rule_occurrences, get_event_duration
from ..recurrence.models import RecurrenceRule
from ..store.database import EventStore
from ..store.models import EventParticipant, EventRecord, RecurringPattern
from ..utils.helpers import ensure_utc, utc_now

logger = logging.getLogger(__name__)


class NewRecurringEvent(BaseModel):
    """Input for a new recurring series."""

    title: str = Field(min_length=1)
    description: Optional[str] = None
    location: Optional[str] = None
    start_time: datetime
    end_time: datetime
    all_day: bool = False
    color: Optional[str] = None
    category: str = "family"
    event_type: str = "event"
    participant_ids: list[str] = Field(default_factory=list)
    recurrence: RecurrenceRule

    @model_validator(mode="after")
    def validate_times(self) -> "NewRecurringEvent":
        """Require the event to end no earlier than it starts."""
        if ensure_utc(self.end_time) < ensure_utc(self.start_time):
            raise ValueError("end_time must not be before start_time")
        return self


class CreatedSeries(BaseModel):
    """Identifier and size of a newly created series."""

    pattern_id: str
    event_count: int


class RecurringSeriesService:
    """Creates and looks up recurring series."""

    def __init__(self, store: EventStore, settings: Optional[FamilyCalSettings] = None):
        self.store = store
        self.settings = settings or get_settings()

    async def create_recurring_event(
        self,
        family_id: str,
        event: NewRecurringEvent,
        creator_member_id: str,
        now: Optional[datetime] = None,
    ) -> CreatedSeries:
        """Create a recurring series and materialize its first occurrences.

        Occurrences are generated from the event's start up to the initial
        horizon. The pattern, its events and their participants are written
        in one transaction.

        Args:
            family_id: Family owning the series
            event: Event data and recurrence rule
            creator_member_id: Member flagged as owner on each occurrence
            now: Reference instant, current UTC time when omitted

        Returns:
            CreatedSeries with the pattern id and number of occurrences

        Raises:
            InvalidRecurrenceError: If the recurrence rule is invalid
            RecurrenceError: If the rule yields no occurrences
            StoreWriteError: If the series cannot be stored
        """
        now = ensure_utc(now) if now is not None else utc_now()
        horizon = now + relativedelta(years=self.settings.initial_horizon_years)

        # Events built with model_construct carry an unchecked rule
        try:
            rule = RecurrenceRule.model_validate(event.recurrence.model_dump())
        except ValidationError as e:
            raise InvalidRecurrenceError(f"Invalid recurrence rule: {e}") from e

        if rule.end_date is not None:
            rule = rule.model_copy(update={"end_date": ensure_utc(rule.end_date)})

        start_time = ensure_utc(event.start_time)
        occurrences = generate_rule_occurrences(rule, start_time, horizon)
        if not occurrences:
            raise RecurrenceError("No occurrences generated for recurring event")

        duration = get_event_duration(start_time, ensure_utc(event.end_time))

        pattern = RecurringPattern(
            family_id=family_id,
            frequency=rule.frequency,
            interval=rule.interval,
            end_type=rule.end_type,
            end_count=rule.end_count,
            end_date=rule.end_date,
            generated_until=horizon,
        )

        events: list[EventRecord] = []
        participants: list[EventParticipant] = []
        for occurrence in occurrences:
            record = EventRecord(
                family_id=family_id,
                title=event.title,
                description=event.description,
                location=event.location,
                all_day=event.all_day,
                color=event.color,
                category=event.category,
                event_type=event.event_type,
                start_time=occurrence,
                end_time=apply_duration(occurrence, duration),
                recurring_pattern_id=pattern.id,
                occurrence_date=occurrence,
                local_updated_at=now,
            )
            events.append(record)
            participants.extend(
                EventParticipant(
                    event_id=record.id,
                    family_member_id=member_id,
                    is_owner=member_id == creator_member_id,
                )
                for member_id in event.participant_ids
            )

        await self.store.create_pattern_with_events(pattern, events, participants)

        logger.info(
            f"Created recurring pattern {pattern.id} with {len(events)} events "
            f"until {horizon.isoformat()}"
        )
        return CreatedSeries(pattern_id=pattern.id, event_count=len(events))

    async def get_recurring_pattern(
        self, pattern_id: str, family_id: str
    ) -> Optional[RecurringPattern]:
        """Get a family's recurring pattern by ID."""
        return await self.store.get_pattern(pattern_id, family_id)
