"""Periodic extension of recurring series.

Series are materialized only up to a rolling horizon. This job finds every
pattern whose horizon is about to run out, generates the occurrences that
follow it, and advances the horizon. Each pattern is handled on its own: a
failing pattern is logged and rolled back without stopping the others.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, Field

from ..config.settings import FamilyCalSettings, get_settings
from ..recurrence.generator import apply_duration, generate_occurrence_dates, get_event_duration
from ..store.database import EventStore
from ..store.models import EventParticipant, EventRecord, RecurringPattern
from ..utils.helpers import ensure_utc, utc_now

logger = logging.getLogger(__name__)

# Resume point after the stored horizon
RESUME_OFFSET = timedelta(days=1)


class ExtensionResult(BaseModel):
    """Counters reported by one extension run.

    ``patterns_visited`` is every pattern selected as due, whether or not its
    extension committed. ``patterns_extended`` only counts committed advances.
    """

    patterns_extended: int = Field(default=0, description="Patterns whose horizon advance committed")
    events_created: int = Field(default=0, description="Occurrences committed in this run")
    patterns_visited: int = Field(default=0, description="Patterns selected as due")
    patterns_skipped: int = Field(default=0, description="Patterns without a template event")
    patterns_failed: int = Field(default=0, description="Patterns whose transaction was rolled back")

    @property
    def summary(self) -> str:
        """Human readable one-line summary."""
        return f"Extended {self.patterns_extended} patterns, created {self.events_created} events"


class PatternSkippedError(Exception):
    """Raised internally when a pattern has nothing to extend from."""


class RecurringEventExtender:
    """Extends the materialized horizon of due recurring series."""

    def __init__(self, store: EventStore, settings: Optional[FamilyCalSettings] = None):
        """Initialize the extender.

        Args:
            store: Event store holding patterns and occurrences
            settings: Application settings, global settings when omitted
        """
        self.store = store
        self.settings = settings or get_settings()

    def extension_threshold(self, now: datetime) -> datetime:
        """Latest horizon that still makes a pattern due at ``now``."""
        return now + timedelta(days=self.settings.extension_threshold_days)

    def extension_horizon(self, now: datetime) -> datetime:
        """Horizon a due pattern is extended to at ``now``."""
        return now + relativedelta(years=self.settings.extension_horizon_years)

    async def extend(self, now: Optional[datetime] = None) -> ExtensionResult:
        """Run one extension pass over every due pattern.

        Args:
            now: Reference instant, current UTC time when omitted

        Returns:
            ExtensionResult with the counts of this run

        Raises:
            StoreError: If the due patterns cannot be selected
        """
        now = ensure_utc(now) if now is not None else utc_now()
        threshold = self.extension_threshold(now)
        new_horizon = self.extension_horizon(now)

        patterns = await self.store.get_patterns_due_for_extension(threshold)
        result = ExtensionResult(patterns_visited=len(patterns))

        logger.info(f"Found {len(patterns)} recurring patterns to extend")

        for pattern in patterns:
            try:
                created = await self._extend_pattern(pattern, new_horizon, now)
            except PatternSkippedError as e:
                logger.warning(str(e))
                result.patterns_skipped += 1
                continue
            except Exception:
                logger.exception(f"Failed to extend recurring pattern {pattern.id}")
                result.patterns_failed += 1
                continue

            result.patterns_extended += 1
            result.events_created += created

        logger.info(result.summary)
        if result.patterns_skipped or result.patterns_failed:
            logger.warning(
                f"Skipped {result.patterns_skipped} and failed {result.patterns_failed} "
                f"of {result.patterns_visited} patterns"
            )
        return result

    async def _extend_pattern(
        self, pattern: RecurringPattern, new_horizon: datetime, now: datetime
    ) -> int:
        """Extend one pattern up to ``new_horizon``.

        Returns:
            Number of occurrences committed for the pattern
        """
        template = await self.store.get_template_event(pattern.id)
        if template is None:
            raise PatternSkippedError(f"No template event found for pattern {pattern.id}")

        template_participants = await self.store.get_event_participants(template.id)

        start_date = pattern.generated_until + RESUME_OFFSET
        # Stored values go to the generator as-is, form limits only apply on creation
        occurrences = generate_occurrence_dates(
            start_date,
            pattern.frequency,
            pattern.interval,
            pattern.end_type,
            end_count=pattern.end_count,
            end_date=pattern.end_date,
            until_date=new_horizon,
        )

        if not occurrences:
            logger.info(f"No new occurrences for pattern {pattern.id}, advancing horizon only")
            await self.store.update_generated_until(pattern.id, new_horizon)
            return 0

        duration = get_event_duration(template.start_time, template.end_time)
        events: list[EventRecord] = []
        participants: list[EventParticipant] = []

        for occurrence in occurrences:
            event = template.copy_for_occurrence(
                occurrence,
                apply_duration(occurrence, duration),
                recurring_pattern_id=pattern.id,
                local_updated_at=now,
            )
            events.append(event)
            participants.extend(
                EventParticipant(
                    event_id=event.id,
                    family_member_id=participant.family_member_id,
                    is_owner=participant.is_owner,
                )
                for participant in template_participants
            )

        await self.store.extend_pattern(pattern.id, events, participants, new_horizon)
        logger.verbose(  # type: ignore[attr-defined]
            f"Extended pattern {pattern.id} with {len(events)} events "
            f"until {new_horizon.isoformat()}"
        )
        return len(events)


async def extend_recurring_events(
    store: EventStore,
    now: Optional[datetime] = None,
    settings: Optional[FamilyCalSettings] = None,
) -> ExtensionResult:
    """Extend every recurring series whose horizon is within the threshold.

    Args:
        store: Event store holding patterns and occurrences
        now: Reference instant, current UTC time when omitted
        settings: Application settings, global settings when omitted

    Returns:
        ExtensionResult with the counts of this run
    """
    return await RecurringEventExtender(store, settings).extend(now)
