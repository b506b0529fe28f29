"""Shared fixtures for familycal tests."""

from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

import pytest

from familycal.config.settings import FamilyCalSettings, reset_settings
from familycal.recurrence.models import RecurrenceEndType, RecurrenceFrequency
from familycal.store.database import EventStore
from familycal.store.models import EventParticipant, EventRecord, RecurringPattern


@pytest.fixture(autouse=True)
def _reset_global_settings():
    """Keep the lazy global settings from leaking between tests."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def test_settings(tmp_path: Path) -> FamilyCalSettings:
    """Settings rooted in a temporary directory."""
    return FamilyCalSettings(
        data_dir=tmp_path / "data",
        config_dir=tmp_path / "config",
        database_path=tmp_path / "data" / "familycal.db",
    )


@pytest.fixture
def store(tmp_path: Path) -> EventStore:
    """Event store backed by a temporary SQLite file."""
    return EventStore(tmp_path / "events.db")


SeedPattern = Callable[..., Awaitable[RecurringPattern]]


@pytest.fixture
def seed_pattern(store: EventStore) -> SeedPattern:
    """Store a pattern with an optional template occurrence and participants."""

    async def _seed(
        generated_until: datetime,
        frequency: RecurrenceFrequency = RecurrenceFrequency.DAILY,
        interval: int = 1,
        end_type: RecurrenceEndType = RecurrenceEndType.NEVER,
        end_count: Optional[int] = None,
        end_date: Optional[datetime] = None,
        template_start: Optional[datetime] = None,
        duration: timedelta = timedelta(hours=1),
        member_ids: tuple[str, ...] = ("member-owner", "member-guest"),
        family_id: str = "family-1",
    ) -> RecurringPattern:
        pattern = RecurringPattern(
            family_id=family_id,
            frequency=frequency,
            interval=interval,
            end_type=end_type,
            end_count=end_count,
            end_date=end_date,
            generated_until=generated_until,
        )
        events: list[EventRecord] = []
        participants: list[EventParticipant] = []
        if template_start is not None:
            template = EventRecord(
                family_id=family_id,
                title="Swimming lesson",
                description="Bring towels",
                location="Community pool",
                color="#3366ff",
                category="kids",
                event_type="event",
                start_time=template_start,
                end_time=template_start + duration,
                recurring_pattern_id=pattern.id,
                occurrence_date=template_start,
            )
            events.append(template)
            participants = [
                EventParticipant(
                    event_id=template.id,
                    family_member_id=member_id,
                    is_owner=index == 0,
                )
                for index, member_id in enumerate(member_ids)
            ]
        await store.create_pattern_with_events(pattern, events, participants)
        return pattern

    return _seed
