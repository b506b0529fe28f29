"""SQLite persistence for recurring series, events and participants."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Union

import aiosqlite

from ..utils.helpers import to_storage_string
from .exceptions import StoreInitializationError, StoreReadError, StoreWriteError
from .models import EventParticipant, EventRecord, RecurringPattern

logger = logging.getLogger(__name__)

SCHEMA_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS recurring_event_patterns (
        id TEXT PRIMARY KEY,
        family_id TEXT NOT NULL,
        frequency TEXT NOT NULL,
        interval INTEGER NOT NULL DEFAULT 1,
        end_type TEXT NOT NULL DEFAULT 'never',
        end_count INTEGER,
        end_date TEXT,
        generated_until TEXT NOT NULL,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_patterns_generated_until
    ON recurring_event_patterns(generated_until)
    """,
    """
    CREATE TABLE IF NOT EXISTS events (
        id TEXT PRIMARY KEY,
        family_id TEXT NOT NULL,
        title TEXT NOT NULL,
        description TEXT,
        location TEXT,
        start_time TEXT NOT NULL,
        end_time TEXT NOT NULL,
        all_day INTEGER NOT NULL DEFAULT 0,
        color TEXT,
        category TEXT,
        event_type TEXT,
        recurring_pattern_id TEXT,
        occurrence_date TEXT,
        sync_status TEXT DEFAULT 'synced',
        local_updated_at TEXT,
        created_at TEXT NOT NULL,
        FOREIGN KEY (recurring_pattern_id)
            REFERENCES recurring_event_patterns(id) ON DELETE SET NULL
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_events_pattern_start
    ON events(recurring_pattern_id, start_time)
    """,
    """
    CREATE TABLE IF NOT EXISTS event_participants (
        id TEXT PRIMARY KEY,
        event_id TEXT NOT NULL,
        family_member_id TEXT NOT NULL,
        is_owner INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        FOREIGN KEY (event_id) REFERENCES events(id) ON DELETE CASCADE
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_participants_event_id
    ON event_participants(event_id)
    """,
]

EVENT_COLUMNS = [
    "id",
    "family_id",
    "title",
    "description",
    "location",
    "start_time",
    "end_time",
    "all_day",
    "color",
    "category",
    "event_type",
    "recurring_pattern_id",
    "occurrence_date",
    "sync_status",
    "local_updated_at",
    "created_at",
]

PARTICIPANT_COLUMNS = ["id", "event_id", "family_member_id", "is_owner", "created_at"]

PATTERN_COLUMNS = [
    "id",
    "family_id",
    "frequency",
    "interval",
    "end_type",
    "end_count",
    "end_date",
    "generated_until",
    "created_at",
]


def _insert_sql(table: str, columns: list[str]) -> str:
    placeholders = ", ".join("?" for _ in columns)
    return f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})"


def _row_values(model: Any, columns: list[str]) -> tuple:
    data = model.model_dump(mode="json")
    return tuple(data[column] for column in columns)


class EventStore:
    """Manages SQLite operations for recurring series and their occurrences.

    Every write that belongs to one pattern runs in a single transaction:
    either all rows and the horizon update commit together, or none do.
    """

    def __init__(self, database_path: Union[Path, str]):
        """Initialize the event store.

        Args:
            database_path: Path to SQLite database file
        """
        self.database_path = Path(database_path)
        self.database_path.parent.mkdir(parents=True, exist_ok=True)
        self._initialized = False
        self._initialization_lock: Optional[asyncio.Lock] = None

        logger.debug(f"Event store created (lazy): {self.database_path}")

    async def initialize(self) -> bool:
        """Create the database schema if needed.

        Returns:
            True if initialization was successful, False otherwise
        """
        return await self._ensure_initialized()

    async def _ensure_initialized(self) -> bool:
        if self._initialized:
            return True

        if self._initialization_lock is None:
            self._initialization_lock = asyncio.Lock()

        async with self._initialization_lock:
            if self._initialized:
                return True

            try:
                async with aiosqlite.connect(str(self.database_path)) as db:
                    await db.execute("PRAGMA journal_mode=WAL")
                    await db.execute("PRAGMA foreign_keys=ON")
                    for statement in SCHEMA_STATEMENTS:
                        await db.execute(statement)
                    await db.commit()
            except (aiosqlite.Error, OSError):
                logger.exception("Failed to initialize database")
                return False

            self._initialized = True
            logger.info(f"Database schema initialized: {self.database_path}")
            return True

    @asynccontextmanager
    async def _connect(self) -> AsyncIterator[aiosqlite.Connection]:
        """Open a connection to an initialized database."""
        if not await self._ensure_initialized():
            raise StoreInitializationError(
                f"Database could not be initialized: {self.database_path}"
            )

        async with aiosqlite.connect(str(self.database_path)) as db:
            db.row_factory = aiosqlite.Row
            await db.execute("PRAGMA foreign_keys=ON")
            yield db

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def _fetch_all(self, query: str, params: tuple, description: str) -> list[dict]:
        try:
            async with self._connect() as db:
                cursor = await db.execute(query, params)
                rows = await cursor.fetchall()
                return [dict(row) for row in rows]
        except (aiosqlite.Error, OSError) as e:
            logger.exception(f"Failed to {description}")
            raise StoreReadError(f"Failed to {description}: {e}") from e

    async def get_patterns_due_for_extension(self, threshold: datetime) -> list[RecurringPattern]:
        """Get patterns whose generated horizon is at or before ``threshold``.

        Args:
            threshold: Latest horizon still considered due

        Returns:
            Due patterns, earliest horizon first
        """
        rows = await self._fetch_all(
            """
            SELECT * FROM recurring_event_patterns
            WHERE generated_until <= ?
            ORDER BY generated_until ASC
            """,
            (to_storage_string(threshold),),
            "load patterns due for extension",
        )
        patterns = [RecurringPattern(**row) for row in rows]
        logger.debug(f"Found {len(patterns)} patterns with horizon before {threshold.isoformat()}")
        return patterns

    async def get_pattern(
        self, pattern_id: str, family_id: Optional[str] = None
    ) -> Optional[RecurringPattern]:
        """Get a pattern by ID, optionally scoped to a family.

        Args:
            pattern_id: Pattern ID to retrieve
            family_id: Family the pattern must belong to

        Returns:
            RecurringPattern if found, None otherwise
        """
        query = "SELECT * FROM recurring_event_patterns WHERE id = ?"
        params: tuple = (pattern_id,)
        if family_id is not None:
            query += " AND family_id = ?"
            params = (pattern_id, family_id)

        rows = await self._fetch_all(query, params, f"load pattern {pattern_id}")
        return RecurringPattern(**rows[0]) if rows else None

    async def get_template_event(self, pattern_id: str) -> Optional[EventRecord]:
        """Get the earliest occurrence of a pattern by start time.

        Args:
            pattern_id: Pattern whose template is wanted

        Returns:
            Earliest EventRecord of the series, None if it has no events
        """
        rows = await self._fetch_all(
            """
            SELECT * FROM events
            WHERE recurring_pattern_id = ?
            ORDER BY start_time ASC
            LIMIT 1
            """,
            (pattern_id,),
            f"load template event for pattern {pattern_id}",
        )
        return EventRecord(**rows[0]) if rows else None

    async def get_events_for_pattern(self, pattern_id: str) -> list[EventRecord]:
        """Get all occurrences of a pattern ordered by start time."""
        rows = await self._fetch_all(
            """
            SELECT * FROM events
            WHERE recurring_pattern_id = ?
            ORDER BY start_time ASC
            """,
            (pattern_id,),
            f"load events for pattern {pattern_id}",
        )
        return [EventRecord(**row) for row in rows]

    async def get_event_participants(self, event_id: str) -> list[EventParticipant]:
        """Get the participants of an event.

        Args:
            event_id: Event whose participants are wanted

        Returns:
            Participant rows of the event
        """
        rows = await self._fetch_all(
            "SELECT * FROM event_participants WHERE event_id = ? ORDER BY created_at ASC, id ASC",
            (event_id,),
            f"load participants for event {event_id}",
        )
        return [EventParticipant(**row) for row in rows]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @staticmethod
    async def _insert_events(
        db: aiosqlite.Connection,
        events: list[EventRecord],
        participants: list[EventParticipant],
    ) -> None:
        if events:
            await db.executemany(
                _insert_sql("events", EVENT_COLUMNS),
                [_row_values(event, EVENT_COLUMNS) for event in events],
            )
        if participants:
            await db.executemany(
                _insert_sql("event_participants", PARTICIPANT_COLUMNS),
                [_row_values(participant, PARTICIPANT_COLUMNS) for participant in participants],
            )

    @staticmethod
    async def _set_generated_until(
        db: aiosqlite.Connection, pattern_id: str, generated_until: datetime
    ) -> None:
        cursor = await db.execute(
            "UPDATE recurring_event_patterns SET generated_until = ? WHERE id = ?",
            (to_storage_string(generated_until), pattern_id),
        )
        if cursor.rowcount == 0:
            raise StoreWriteError(f"Pattern {pattern_id} does not exist", pattern_id=pattern_id)

    @asynccontextmanager
    async def _transaction(self, description: str, pattern_id: str) -> AsyncIterator[aiosqlite.Connection]:
        """Run the block in one transaction, rolling back on any error."""
        async with self._connect() as db:
            try:
                yield db
                await db.commit()
            except StoreWriteError:
                await db.rollback()
                logger.error(f"Rolled back {description} for pattern {pattern_id}")
                raise
            except (aiosqlite.Error, OSError) as e:
                await db.rollback()
                logger.exception(f"Failed to {description} for pattern {pattern_id}")
                raise StoreWriteError(
                    f"Failed to {description}: {e}", pattern_id=pattern_id
                ) from e
            except BaseException:
                await db.rollback()
                raise

    async def create_pattern_with_events(
        self,
        pattern: RecurringPattern,
        events: list[EventRecord],
        participants: list[EventParticipant],
    ) -> None:
        """Store a new pattern together with its first batch of occurrences.

        Args:
            pattern: Pattern to create
            events: Occurrences belonging to the pattern
            participants: Participant rows of those occurrences

        Raises:
            StoreWriteError: If the transaction fails; nothing is stored
        """
        async with self._transaction("create recurring series", pattern.id) as db:
            await db.execute(
                _insert_sql("recurring_event_patterns", PATTERN_COLUMNS),
                _row_values(pattern, PATTERN_COLUMNS),
            )
            await self._insert_events(db, events, participants)

        logger.debug(f"Created pattern {pattern.id} with {len(events)} events")

    async def extend_pattern(
        self,
        pattern_id: str,
        events: list[EventRecord],
        participants: list[EventParticipant],
        generated_until: datetime,
    ) -> None:
        """Store new occurrences of a pattern and advance its horizon atomically.

        Args:
            pattern_id: Pattern being extended
            events: New occurrences of the pattern
            participants: Participant rows of the new occurrences
            generated_until: New horizon of the pattern

        Raises:
            StoreWriteError: If the transaction fails; nothing is stored
        """
        async with self._transaction("extend recurring series", pattern_id) as db:
            await self._insert_events(db, events, participants)
            await self._set_generated_until(db, pattern_id, generated_until)

        logger.debug(
            f"Extended pattern {pattern_id} with {len(events)} events "
            f"until {generated_until.isoformat()}"
        )

    async def update_generated_until(self, pattern_id: str, generated_until: datetime) -> None:
        """Advance a pattern's horizon without adding occurrences.

        Args:
            pattern_id: Pattern to update
            generated_until: New horizon of the pattern

        Raises:
            StoreWriteError: If the update fails
        """
        async with self._transaction("update generated horizon", pattern_id) as db:
            await self._set_generated_until(db, pattern_id, generated_until)
