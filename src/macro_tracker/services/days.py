"""Day snapshot service."""

import asyncio
import logging
from dataclasses import dataclass

from macro_tracker.domain.days import DayRecord, DayTargets, DayTotals
from macro_tracker.domain.errors import InvalidDateKeyError, require_user_id
from macro_tracker.services.dates import DateKeyResolver, parse_date_key
from macro_tracker.services.targets import TargetResolver
from macro_tracker.services.totals import DayRepository, TotalsEngine

logger = logging.getLogger(__name__)

MAX_HISTORY_DAYS = 366


@dataclass
class DayService:
    """Creates day rows lazily and reads day history."""

    repository: DayRepository
    resolver: TargetResolver
    totals_engine: TotalsEngine
    dates: DateKeyResolver
    default_targets: DayTargets
    new_day_locked: bool = False

    async def ensure_day(self, user_id: str, date_key: str | None) -> DayRecord:
        """Return the day row, creating it on first access."""
        require_user_id("ensure_day", user_id)
        resolved_date = self.dates.normalize(date_key)
        day = await asyncio.to_thread(self.repository.get_day, user_id, resolved_date)
        if day is not None and day.targets is not None and day.totals is not None:
            return day

        created = await self.ensure_targets(user_id, resolved_date)
        if created and self.new_day_locked:
            await self.totals_engine.lock_remaining(user_id, resolved_date)
        else:
            await self.totals_engine.recalc_and_persist_day(user_id, resolved_date)

        stored = await asyncio.to_thread(
            self.repository.get_day, user_id, resolved_date
        )
        if stored is None:
            raise RuntimeError(f"Failed to create day {resolved_date}")
        return stored

    async def ensure_targets(self, user_id: str, date_key: str) -> bool:
        """Snapshot the governing target onto a day that has none.

        Precedence: the date's daily target, the user's standing target, the
        previous day's target, then defaults. Returns True when the day row
        did not exist yet.
        """
        require_user_id("ensure_targets", user_id)
        day = await asyncio.to_thread(self.repository.get_day, user_id, date_key)
        if day is not None and day.targets is not None:
            return False
        targets = await asyncio.to_thread(self._initial_targets, user_id, date_key)
        await asyncio.to_thread(
            self.repository.upsert_day_targets, user_id, date_key, targets
        )
        logger.info("Snapshotted targets on day %s for user %s", date_key, user_id)
        return day is None

    async def recalc_day(self, user_id: str, date_key: str | None) -> DayTotals:
        """Snapshot targets if needed and recalculate the day."""
        require_user_id("recalc_day", user_id)
        resolved_date = self.dates.normalize(date_key)
        await self.ensure_targets(user_id, resolved_date)
        return await self.totals_engine.recalc_and_persist_day(user_id, resolved_date)

    async def lock_day(
        self, user_id: str, date_key: str | None, override: float | None = None
    ) -> DayTotals:
        """Pin the day's remaining calories."""
        require_user_id("lock_day", user_id)
        resolved_date = self.dates.normalize(date_key)
        await self.ensure_targets(user_id, resolved_date)
        return await self.totals_engine.lock_remaining(
            user_id, resolved_date, override
        )

    async def unlock_day(self, user_id: str, date_key: str | None) -> DayTotals:
        """Release a pinned remaining value."""
        require_user_id("unlock_day", user_id)
        resolved_date = self.dates.normalize(date_key)
        await self.ensure_targets(user_id, resolved_date)
        return await self.totals_engine.unlock_remaining(user_id, resolved_date)

    def get_day(self, user_id: str, date_key: str | None) -> DayRecord | None:
        """Return the day row without creating it."""
        require_user_id("get_day", user_id)
        return self.repository.get_day(user_id, self.dates.normalize(date_key))

    def list_history(
        self, user_id: str, start_key: str, end_key: str
    ) -> list[DayRecord]:
        """Return stored days between two keys inclusive, oldest first."""
        require_user_id("list_history", user_id)
        start = parse_date_key(start_key)
        end = parse_date_key(end_key)
        if end < start:
            raise InvalidDateKeyError("History end date is before start date")
        if (end - start).days >= MAX_HISTORY_DAYS:
            raise InvalidDateKeyError(
                f"History range is limited to {MAX_HISTORY_DAYS} days"
            )
        return self.repository.list_days(user_id, start_key, end_key)

    def _initial_targets(self, user_id: str, date_key: str) -> DayTargets:
        active = self.resolver.get_active_target(user_id, date_key)
        if active is not None:
            return active
        previous = self.repository.get_latest_day_before(user_id, date_key)
        if previous is not None and previous.targets is not None:
            return previous.targets
        return self.default_targets
