"""Daily totals recomputation.

``TotalsEngine`` is the only writer of ``days.totals``. Every entry mutation
and target save funnels through :meth:`TotalsEngine.recalc_and_persist_day`,
which sums the day's entries, applies the day's embedded calorie target and
honours the locked-remaining override before persisting and notifying
observers.
"""

import asyncio
import logging
from dataclasses import dataclass, field, replace
from typing import Protocol

from macro_tracker.domain.days import (
    DayRecord,
    DayTargets,
    DayTotals,
    embedded_target_calories,
)
from macro_tracker.domain.entries import FoodSums
from macro_tracker.domain.errors import require_identifiers
from macro_tracker.domain.models import DayKey
from macro_tracker.domain.numbers import coerce_number
from macro_tracker.services.dates import parse_date_key
from macro_tracker.services.events import DAY_TOTALS_EVENT, EventPublisher
from macro_tracker.services.locks import KeyedLock

logger = logging.getLogger(__name__)


class EntrySumReader(Protocol):
    """Read-only sums over a day's logged entries."""

    def sum_food(self, user_id: str, date_key: str) -> FoodSums:
        """Return summed calories and macros for the day's food entries."""

    def sum_workout_calories(self, user_id: str, date_key: str) -> float:
        """Return summed calories burned for the day's workout entries."""


class DayRepository(Protocol):
    """Persistence interface for ``days`` rows."""

    def get_day(self, user_id: str, date_key: str) -> DayRecord | None:
        """Return the day row if it exists."""

    def upsert_day_totals(self, user_id: str, date_key: str, totals: DayTotals) -> None:
        """Insert or update the day's totals, stamping ``updated_at``."""

    def upsert_day_targets(
        self, user_id: str, date_key: str, targets: DayTargets
    ) -> None:
        """Insert or update the day's embedded targets."""

    def list_days(self, user_id: str, start_key: str, end_key: str) -> list[DayRecord]:
        """Return day rows between two date keys inclusive, oldest first."""

    def get_latest_day_before(self, user_id: str, date_key: str) -> DayRecord | None:
        """Return the most recent day row strictly before the date key."""


@dataclass
class TotalsEngine:
    """Recomputes, persists and publishes day totals."""

    entry_reader: EntrySumReader
    day_repository: DayRepository
    events: EventPublisher
    locks: KeyedLock = field(default_factory=KeyedLock)

    async def recalc_and_persist_day(self, user_id: str, date_key: str) -> DayTotals:
        """Recalculate and persist totals for a user and date.

        Safe to call repeatedly; the stored record only changes when the
        underlying entries or targets change.
        """
        _require_day("recalc_and_persist_day", user_id, date_key)
        async with self.locks.hold(DayKey(user_id, date_key)):
            food, workout_cals, day = await self._gather(user_id, date_key)
            totals = compute_day_totals(
                food=food,
                workout_cals=workout_cals,
                base_target=_base_target(day),
                prior=day.raw_totals if day else None,
            )
            await self._persist(user_id, date_key, totals)
        return totals

    async def lock_remaining(
        self, user_id: str, date_key: str, override: float | None = None
    ) -> DayTotals:
        """Pin the day's remaining calories until its entries change.

        Without an override the currently computed remaining is pinned.
        """
        _require_day("lock_remaining", user_id, date_key)
        async with self.locks.hold(DayKey(user_id, date_key)):
            food, workout_cals, day = await self._gather(user_id, date_key)
            current = compute_day_totals(
                food=food,
                workout_cals=workout_cals,
                base_target=_base_target(day),
                prior=day.raw_totals if day else None,
            )
            totals = replace(
                current,
                locked_remaining=True,
                remaining_override=override,
                remaining=override if override is not None else current.remaining,
            )
            await self._persist(user_id, date_key, totals)
        return totals

    async def unlock_remaining(self, user_id: str, date_key: str) -> DayTotals:
        """Clear a pinned remaining value and recompute it from current sums."""
        _require_day("unlock_remaining", user_id, date_key)
        async with self.locks.hold(DayKey(user_id, date_key)):
            food, workout_cals, day = await self._gather(user_id, date_key)
            prior = dict(day.raw_totals or {}) if day else {}
            prior["locked_remaining"] = False
            prior["remaining_override"] = None
            totals = compute_day_totals(
                food=food,
                workout_cals=workout_cals,
                base_target=_base_target(day),
                prior=prior,
            )
            await self._persist(user_id, date_key, totals)
        return totals

    async def _gather(
        self, user_id: str, date_key: str
    ) -> tuple[FoodSums, float, DayRecord | None]:
        food, workout_cals, day = await asyncio.gather(
            asyncio.to_thread(self.entry_reader.sum_food, user_id, date_key),
            asyncio.to_thread(
                self.entry_reader.sum_workout_calories, user_id, date_key
            ),
            asyncio.to_thread(self.day_repository.get_day, user_id, date_key),
        )
        return food, workout_cals, day

    async def _persist(self, user_id: str, date_key: str, totals: DayTotals) -> None:
        await asyncio.to_thread(
            self.day_repository.upsert_day_totals, user_id, date_key, totals
        )
        logger.info(
            "Recalculated day %s for user %s: food=%s workout=%s remaining=%s",
            date_key,
            user_id,
            totals.food_cals,
            totals.workout_cals,
            totals.remaining,
        )
        self.events.emit(
            DAY_TOTALS_EVENT,
            {"user_id": user_id, "date_key": date_key, "totals": totals},
        )


def compute_day_totals(
    *,
    food: FoodSums,
    workout_cals: float,
    base_target: float,
    prior: dict[str, object] | None,
) -> DayTotals:
    """Combine fresh sums with the previously stored totals.

    A stored lock survives only while the food and workout sums match the
    values it was stored with. Macros always come from the fresh sums.
    """
    previous = prior or {}
    locked = bool(previous.get("locked_remaining"))
    prior_food = coerce_number(previous.get("food_cals")) or 0.0
    prior_workout = coerce_number(previous.get("workout_cals")) or 0.0
    if locked and (food.calories != prior_food or workout_cals != prior_workout):
        locked = False

    allowance = max(0.0, base_target + workout_cals)
    override = coerce_number(previous.get("remaining_override"))
    prior_remaining = coerce_number(previous.get("remaining"))
    if locked and override is not None:
        remaining = override
    elif locked and prior_remaining is not None:
        remaining = prior_remaining
    else:
        remaining = allowance - food.calories

    return DayTotals(
        food_cals=food.calories,
        workout_cals=workout_cals,
        allowance=allowance,
        remaining=remaining,
        locked_remaining=locked,
        remaining_override=override if locked else None,
        protein=food.protein,
        carbs=food.carbs,
        fat=food.fat,
    )


def _require_day(operation: str, user_id: str, date_key: str) -> None:
    require_identifiers(operation, user_id, date_key)
    parse_date_key(date_key)


def _base_target(day: DayRecord | None) -> float:
    if day is None:
        return 0.0
    calories = embedded_target_calories(day.targets)
    return calories if calories is not None else 0.0
