"""Target resolution and target save flows."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from macro_tracker.domain.days import DayTargets, DayTotals, embedded_target_calories
from macro_tracker.domain.errors import require_identifiers, require_user_id
from macro_tracker.domain.numbers import coerce_non_negative_number
from macro_tracker.domain.targets import TargetRecord
from macro_tracker.services.dates import parse_date_key
from macro_tracker.services.events import TARGETS_UPDATE_EVENT, EventPublisher
from macro_tracker.services.totals import DayRepository, TotalsEngine

logger = logging.getLogger(__name__)


class TargetRepository(Protocol):
    """Persistence interface for daily and standing targets."""

    def get_latest_daily_target(
        self, user_id: str, date_key: str
    ) -> TargetRecord | None:
        """Return the newest ``daily_targets`` row for the date."""

    def get_latest_standing_target(self, user_id: str) -> TargetRecord | None:
        """Return the newest standing ``targets`` row for the user."""

    def upsert_daily_target(
        self, user_id: str, date_key: str, targets: DayTargets
    ) -> None:
        """Insert or update the ``daily_targets`` row for the date."""

    def create_standing_target(
        self, user_id: str, targets: DayTargets
    ) -> TargetRecord:
        """Insert a standing target row."""


@dataclass
class TargetResolver:
    """Decides which target governs a day."""

    day_repository: DayRepository
    target_repository: TargetRepository

    def resolve_base_calories(self, user_id: str, date_key: str) -> float:
        """Return the base calorie target for a day.

        The day's own target wins, then the day's ``daily_targets`` row, then
        the user's newest standing target. Zero when none exist.
        """
        require_identifiers("resolve_base_calories", user_id, date_key)
        day = self.day_repository.get_day(user_id, date_key)
        embedded = embedded_target_calories(day.targets if day else None)
        if embedded is not None:
            return embedded
        daily = self.target_repository.get_latest_daily_target(user_id, date_key)
        if daily is not None and daily.calories is not None:
            return coerce_non_negative_number(daily.calories)
        standing = self.target_repository.get_latest_standing_target(user_id)
        if standing is not None and standing.calories is not None:
            return coerce_non_negative_number(standing.calories)
        return 0.0

    def get_active_target(self, user_id: str, date_key: str) -> DayTargets | None:
        """Return the full target for display, following the same precedence."""
        require_identifiers("get_active_target", user_id, date_key)
        day = self.day_repository.get_day(user_id, date_key)
        if day is not None and day.targets is not None:
            return day.targets
        daily = self.target_repository.get_latest_daily_target(user_id, date_key)
        if daily is not None:
            return _targets_from_record(daily)
        standing = self.target_repository.get_latest_standing_target(user_id)
        if standing is not None:
            return _targets_from_record(standing)
        return None


@dataclass
class TargetService:
    """Saves targets and funnels the resulting totals through the engine."""

    resolver: TargetResolver
    totals_engine: TotalsEngine
    events: EventPublisher

    @property
    def day_repository(self) -> DayRepository:
        return self.resolver.day_repository

    @property
    def target_repository(self) -> TargetRepository:
        return self.resolver.target_repository

    async def save_target_for_day(
        self, user_id: str, date_key: str, targets: DayTargets
    ) -> DayTotals:
        """Snapshot targets onto a day and rebuild its totals."""
        require_identifiers("save_target_for_day", user_id, date_key)
        parse_date_key(date_key)
        await asyncio.to_thread(
            self.target_repository.upsert_daily_target, user_id, date_key, targets
        )
        await asyncio.to_thread(
            self.day_repository.upsert_day_targets, user_id, date_key, targets
        )
        logger.info("Saved targets for user %s on %s", user_id, date_key)
        self.events.emit(
            TARGETS_UPDATE_EVENT,
            {"user_id": user_id, "date_key": date_key, **targets.to_payload()},
        )
        return await self.totals_engine.recalc_and_persist_day(user_id, date_key)

    def save_standing_target(self, user_id: str, targets: DayTargets) -> TargetRecord:
        """Record a new standing target; past days keep their snapshots."""
        require_user_id("save_standing_target", user_id)
        record = self.target_repository.create_standing_target(user_id, targets)
        logger.info("Saved standing target for user %s", user_id)
        return record

    async def get_active_target(
        self, user_id: str, date_key: str
    ) -> DayTargets | None:
        """Return the target governing a day."""
        require_identifiers("get_active_target", user_id, date_key)
        parse_date_key(date_key)
        return await asyncio.to_thread(
            self.resolver.get_active_target, user_id, date_key
        )


def _targets_from_record(record: TargetRecord) -> DayTargets:
    return DayTargets(
        calories=record.calories,
        protein=record.protein,
        carbs=record.carbs,
        fat=record.fat,
        goal=record.goal,
        label=record.label,
        rationale=record.rationale,
    )
