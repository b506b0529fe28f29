"""Unit tests for the SQLite event store."""

import sqlite3
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import patch

import aiosqlite
import pytest

from familycal.recurrence.models import RecurrenceEndType, RecurrenceFrequency
from familycal.store.database import EventStore
from familycal.store.exceptions import StoreInitializationError, StoreReadError, StoreWriteError
from familycal.store.models import EventParticipant, EventRecord, RecurringPattern

UTC = timezone.utc


def make_pattern(generated_until: datetime, **kwargs) -> RecurringPattern:
    return RecurringPattern(
        family_id=kwargs.pop("family_id", "family-1"),
        frequency=kwargs.pop("frequency", RecurrenceFrequency.WEEKLY),
        generated_until=generated_until,
        **kwargs,
    )


def make_event(pattern: RecurringPattern, start: datetime, title: str = "Piano") -> EventRecord:
    return EventRecord(
        family_id=pattern.family_id,
        title=title,
        start_time=start,
        end_time=start + timedelta(minutes=45),
        recurring_pattern_id=pattern.id,
        occurrence_date=start,
    )


class TestEventStoreInitialization:
    """Test schema creation and initialization failures."""

    @pytest.mark.asyncio
    async def test_initialize_when_new_database_then_creates_tables(self, tmp_path: Path) -> None:
        store = EventStore(tmp_path / "nested" / "events.db")

        assert await store.initialize() is True

        async with aiosqlite.connect(str(store.database_path)) as db:
            cursor = await db.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
            tables = {row[0] for row in await cursor.fetchall()}

        assert {"recurring_event_patterns", "events", "event_participants"} <= tables

    @pytest.mark.asyncio
    async def test_initialize_when_called_twice_then_idempotent(self, store: EventStore) -> None:
        assert await store.initialize() is True
        assert await store.initialize() is True

    @pytest.mark.asyncio
    async def test_initialize_when_connection_fails_then_returns_false(
        self, store: EventStore
    ) -> None:
        with patch("aiosqlite.connect", side_effect=sqlite3.Error("Connection failed")):
            assert await store.initialize() is False

    @pytest.mark.asyncio
    async def test_read_when_initialization_fails_then_raises(self, store: EventStore) -> None:
        with patch("aiosqlite.connect", side_effect=PermissionError("Permission denied")):
            with pytest.raises(StoreInitializationError):
                await store.get_template_event("missing")


class TestEventStoreReads:
    """Test pattern and event lookups."""

    @pytest.mark.asyncio
    async def test_get_patterns_due_when_horizon_within_threshold_then_selected(
        self, store: EventStore
    ) -> None:
        threshold = datetime(2025, 4, 1, tzinfo=UTC)
        due_late = make_pattern(datetime(2025, 3, 20, tzinfo=UTC))
        due_early = make_pattern(datetime(2025, 2, 1, tzinfo=UTC))
        on_threshold = make_pattern(threshold)
        not_due = make_pattern(datetime(2025, 9, 1, tzinfo=UTC))
        for pattern in (due_late, due_early, on_threshold, not_due):
            await store.create_pattern_with_events(pattern, [], [])

        due = await store.get_patterns_due_for_extension(threshold)

        assert [pattern.id for pattern in due] == [due_early.id, due_late.id, on_threshold.id]

    @pytest.mark.asyncio
    async def test_get_patterns_due_when_offsets_differ_then_compares_instants(
        self, store: EventStore
    ) -> None:
        plus_two = timezone(timedelta(hours=2))
        # 2025-04-01T01:00+02:00 is 2025-03-31T23:00Z
        pattern = make_pattern(datetime(2025, 4, 1, 1, 0, tzinfo=plus_two))
        await store.create_pattern_with_events(pattern, [], [])

        due = await store.get_patterns_due_for_extension(datetime(2025, 3, 31, 23, 30, tzinfo=UTC))

        assert [p.id for p in due] == [pattern.id]

    @pytest.mark.asyncio
    async def test_get_pattern_round_trips_rule_fields(self, store: EventStore) -> None:
        end_date = datetime(2025, 12, 31, 18, 0, tzinfo=UTC)
        pattern = make_pattern(
            datetime(2025, 6, 1, tzinfo=UTC),
            frequency=RecurrenceFrequency.MONTHLY,
            interval=3,
            end_type=RecurrenceEndType.DATE,
            end_date=end_date,
        )
        await store.create_pattern_with_events(pattern, [], [])

        loaded = await store.get_pattern(pattern.id)

        assert loaded is not None
        assert loaded.frequency == RecurrenceFrequency.MONTHLY
        assert loaded.interval == 3
        assert loaded.end_type == RecurrenceEndType.DATE
        assert loaded.end_date == end_date
        assert loaded.generated_until == pattern.generated_until

    @pytest.mark.asyncio
    async def test_get_pattern_when_other_family_then_none(self, store: EventStore) -> None:
        pattern = make_pattern(datetime(2025, 6, 1, tzinfo=UTC))
        await store.create_pattern_with_events(pattern, [], [])

        assert await store.get_pattern(pattern.id, "family-2") is None
        assert await store.get_pattern(pattern.id, "family-1") is not None

    @pytest.mark.asyncio
    async def test_get_template_event_returns_earliest_by_start(self, store: EventStore) -> None:
        pattern = make_pattern(datetime(2025, 6, 1, tzinfo=UTC))
        later = make_event(pattern, datetime(2025, 5, 8, 16, tzinfo=UTC), title="Later")
        earliest = make_event(pattern, datetime(2025, 5, 1, 16, tzinfo=UTC), title="Earliest")
        await store.create_pattern_with_events(pattern, [later, earliest], [])

        template = await store.get_template_event(pattern.id)

        assert template is not None
        assert template.id == earliest.id
        assert template.title == "Earliest"

    @pytest.mark.asyncio
    async def test_get_template_event_when_no_events_then_none(self, store: EventStore) -> None:
        pattern = make_pattern(datetime(2025, 6, 1, tzinfo=UTC))
        await store.create_pattern_with_events(pattern, [], [])

        assert await store.get_template_event(pattern.id) is None

    @pytest.mark.asyncio
    async def test_get_event_participants_returns_rows_of_event(self, store: EventStore) -> None:
        pattern = make_pattern(datetime(2025, 6, 1, tzinfo=UTC))
        event = make_event(pattern, datetime(2025, 5, 1, 16, tzinfo=UTC))
        participants = [
            EventParticipant(event_id=event.id, family_member_id="parent", is_owner=True),
            EventParticipant(event_id=event.id, family_member_id="child"),
        ]
        await store.create_pattern_with_events(pattern, [event], participants)

        loaded = await store.get_event_participants(event.id)

        assert {(p.family_member_id, p.is_owner) for p in loaded} == {
            ("parent", True),
            ("child", False),
        }

    @pytest.mark.asyncio
    async def test_read_when_query_fails_then_raises_store_read_error(
        self, store: EventStore
    ) -> None:
        await store.initialize()

        with patch("aiosqlite.Connection.execute", side_effect=sqlite3.OperationalError("locked")):
            with pytest.raises(StoreReadError):
                await store.get_patterns_due_for_extension(datetime(2025, 1, 1, tzinfo=UTC))


class TestEventStoreWrites:
    """Test transactional writes."""

    @pytest.mark.asyncio
    async def test_extend_pattern_stores_events_and_advances_horizon(
        self, store: EventStore
    ) -> None:
        pattern = make_pattern(datetime(2025, 5, 1, tzinfo=UTC))
        await store.create_pattern_with_events(pattern, [], [])
        new_event = make_event(pattern, datetime(2025, 5, 8, 16, tzinfo=UTC))
        participant = EventParticipant(event_id=new_event.id, family_member_id="parent")
        new_horizon = datetime(2026, 3, 1, tzinfo=UTC)

        await store.extend_pattern(pattern.id, [new_event], [participant], new_horizon)

        loaded = await store.get_pattern(pattern.id)
        events = await store.get_events_for_pattern(pattern.id)
        assert loaded is not None
        assert loaded.generated_until == new_horizon
        assert [event.id for event in events] == [new_event.id]
        assert len(await store.get_event_participants(new_event.id)) == 1

    @pytest.mark.asyncio
    async def test_extend_pattern_when_insert_fails_then_rolls_back_everything(
        self, store: EventStore
    ) -> None:
        original_horizon = datetime(2025, 5, 1, tzinfo=UTC)
        pattern = make_pattern(original_horizon)
        existing = make_event(pattern, datetime(2025, 4, 24, 16, tzinfo=UTC))
        await store.create_pattern_with_events(pattern, [existing], [])
        fresh = make_event(pattern, datetime(2025, 5, 8, 16, tzinfo=UTC))
        duplicate = existing.model_copy()

        with pytest.raises(StoreWriteError) as exc_info:
            await store.extend_pattern(
                pattern.id, [fresh, duplicate], [], datetime(2026, 3, 1, tzinfo=UTC)
            )

        assert exc_info.value.pattern_id == pattern.id
        loaded = await store.get_pattern(pattern.id)
        assert loaded is not None
        assert loaded.generated_until == original_horizon
        assert [event.id for event in await store.get_events_for_pattern(pattern.id)] == [
            existing.id
        ]

    @pytest.mark.asyncio
    async def test_extend_pattern_when_pattern_missing_then_rolls_back(
        self, store: EventStore
    ) -> None:
        orphan = make_pattern(datetime(2025, 5, 1, tzinfo=UTC))
        event = make_event(orphan, datetime(2025, 5, 8, 16, tzinfo=UTC))

        with pytest.raises(StoreWriteError):
            await store.extend_pattern(orphan.id, [event], [], datetime(2026, 1, 1, tzinfo=UTC))

        assert await store.get_events_for_pattern(orphan.id) == []

    @pytest.mark.asyncio
    async def test_update_generated_until_advances_horizon_only(self, store: EventStore) -> None:
        pattern = make_pattern(datetime(2025, 5, 1, tzinfo=UTC))
        await store.create_pattern_with_events(pattern, [], [])
        new_horizon = datetime(2026, 3, 1, 12, tzinfo=UTC)

        await store.update_generated_until(pattern.id, new_horizon)

        loaded = await store.get_pattern(pattern.id)
        assert loaded is not None
        assert loaded.generated_until == new_horizon
        assert await store.get_events_for_pattern(pattern.id) == []

    @pytest.mark.asyncio
    async def test_update_generated_until_when_pattern_missing_then_raises(
        self, store: EventStore
    ) -> None:
        await store.initialize()

        with pytest.raises(StoreWriteError, match="does not exist"):
            await store.update_generated_until("missing", datetime(2026, 1, 1, tzinfo=UTC))

    @pytest.mark.asyncio
    async def test_create_pattern_with_events_when_participant_fails_then_nothing_stored(
        self, store: EventStore
    ) -> None:
        pattern = make_pattern(datetime(2026, 1, 1, tzinfo=UTC))
        event = make_event(pattern, datetime(2025, 5, 1, 16, tzinfo=UTC))
        participant = EventParticipant(event_id=event.id, family_member_id="parent")
        clash = participant.model_copy()

        with pytest.raises(StoreWriteError):
            await store.create_pattern_with_events(pattern, [event], [participant, clash])

        assert await store.get_pattern(pattern.id) is None
        assert await store.get_events_for_pattern(pattern.id) == []

    @pytest.mark.asyncio
    async def test_deleting_event_cascades_to_participants(self, store: EventStore) -> None:
        pattern = make_pattern(datetime(2026, 1, 1, tzinfo=UTC))
        event = make_event(pattern, datetime(2025, 5, 1, 16, tzinfo=UTC))
        participant = EventParticipant(event_id=event.id, family_member_id="parent")
        await store.create_pattern_with_events(pattern, [event], [participant])

        async with aiosqlite.connect(str(store.database_path)) as db:
            await db.execute("PRAGMA foreign_keys=ON")
            await db.execute("DELETE FROM events WHERE id = ?", (event.id,))
            await db.commit()

        assert await store.get_event_participants(event.id) == []
