"""Food and workout logging service."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from macro_tracker.domain.days import DayTotals
from macro_tracker.domain.entries import FoodEntry, WorkoutEntry
from macro_tracker.domain.errors import InvalidEntryError, require_user_id
from macro_tracker.domain.numbers import coerce_non_negative_number, coerce_number
from macro_tracker.services.dates import DateKeyResolver
from macro_tracker.services.days import DayService
from macro_tracker.services.totals import EntrySumReader, TotalsEngine

logger = logging.getLogger(__name__)


class EntryRepository(EntrySumReader, Protocol):
    """Persistence interface for food and workout entries."""

    def list_food_entries(self, user_id: str, date_key: str) -> list[FoodEntry]:
        """Return the day's food entries, newest first."""

    def list_workout_entries(self, user_id: str, date_key: str) -> list[WorkoutEntry]:
        """Return the day's workout entries, newest first."""

    def get_food_entry(self, user_id: str, entry_id: str) -> FoodEntry | None:
        """Return a food entry owned by the user."""

    def get_workout_entry(self, user_id: str, entry_id: str) -> WorkoutEntry | None:
        """Return a workout entry owned by the user."""

    def create_food_entry(self, payload: dict[str, object]) -> FoodEntry:
        """Insert a food entry."""

    def update_food_entry(
        self, user_id: str, entry_id: str, payload: dict[str, object]
    ) -> FoodEntry | None:
        """Update a food entry owned by the user."""

    def delete_food_entry(self, user_id: str, entry_id: str) -> None:
        """Delete a food entry owned by the user."""

    def create_workout_entries(
        self, payloads: list[dict[str, object]]
    ) -> list[WorkoutEntry]:
        """Insert workout entries."""

    def update_workout_entry(
        self, user_id: str, entry_id: str, payload: dict[str, object]
    ) -> WorkoutEntry | None:
        """Update a workout entry owned by the user."""

    def delete_workout_entry(self, user_id: str, entry_id: str) -> None:
        """Delete a workout entry owned by the user."""


@dataclass
class EntryService:
    """Logs entries and recalculates the affected day after every change."""

    repository: EntryRepository
    totals_engine: TotalsEngine
    days: DayService
    dates: DateKeyResolver

    async def upsert_food_entry(  # noqa: PLR0913
        self,
        user_id: str,
        date_key: str | None,
        description: str,
        calories: object,
        protein: object = None,
        carbs: object = None,
        fat: object = None,
        source: str | None = None,
        entry_id: str | None = None,
    ) -> tuple[FoodEntry, DayTotals]:
        """Create or update a food entry and recalculate its day.

        An update without a date keeps the entry on its stored day. Moving an
        entry to another day recalculates both days.
        """
        require_user_id("upsert_food_entry", user_id)
        name = (description or "").strip()
        if not name or coerce_number(calories) is None:
            raise InvalidEntryError("Missing required food fields")
        previous = None
        if entry_id:
            previous = await asyncio.to_thread(
                self.repository.get_food_entry, user_id, entry_id
            )
            if previous is None:
                raise InvalidEntryError(f"Food entry {entry_id} not found")
        entry_date = self._entry_date(date_key, previous)
        payload = {
            "user_id": user_id,
            "entry_date": entry_date,
            "description": name,
            "calories": coerce_non_negative_number(calories),
            "protein": _optional_macro(protein),
            "carbs": _optional_macro(carbs),
            "fat": _optional_macro(fat),
            "source": source,
        }
        if previous is not None:
            entry = await asyncio.to_thread(
                self.repository.update_food_entry, user_id, previous.id, payload
            )
            if entry is None:
                raise InvalidEntryError(f"Food entry {entry_id} not found")
        else:
            entry = await asyncio.to_thread(self.repository.create_food_entry, payload)
        logger.info(
            "Saved food entry %s on %s (%s kcal)", entry.id, entry_date, entry.calories
        )
        totals = await self._recalc(user_id, entry_date)
        if previous is not None and previous.entry_date != entry_date:
            await self._recalc(user_id, previous.entry_date)
        return entry, totals

    async def delete_food_entry(self, user_id: str, entry_id: str) -> DayTotals | None:
        """Delete a food entry and recalculate its day.

        Returns ``None`` when the entry does not exist.
        """
        require_user_id("delete_food_entry", user_id)
        if not entry_id:
            raise InvalidEntryError("Missing entry id")
        entry = await asyncio.to_thread(
            self.repository.get_food_entry, user_id, entry_id
        )
        if entry is None:
            return None
        await asyncio.to_thread(self.repository.delete_food_entry, user_id, entry_id)
        logger.info("Deleted food entry %s on %s", entry_id, entry.entry_date)
        return await self._recalc(user_id, entry.entry_date)

    async def upsert_workout_entry(  # noqa: PLR0913
        self,
        user_id: str,
        date_key: str | None,
        activity: str,
        calories: object,
        minutes: int | None = None,
        intensity: str | None = None,
        source: str | None = None,
        entry_id: str | None = None,
    ) -> tuple[WorkoutEntry, DayTotals]:
        """Create or update a workout entry and recalculate its day."""
        require_user_id("upsert_workout_entry", user_id)
        if not (activity or "").strip():
            raise InvalidEntryError("Missing activity")
        previous = None
        if entry_id:
            previous = await asyncio.to_thread(
                self.repository.get_workout_entry, user_id, entry_id
            )
            if previous is None:
                raise InvalidEntryError(f"Workout entry {entry_id} not found")
        entry_date = self._entry_date(date_key, previous)
        payload = _workout_payload(
            user_id, entry_date, activity, calories, minutes, intensity, source
        )
        if payload is None:
            raise InvalidEntryError("Missing activity")
        if previous is not None:
            entry = await asyncio.to_thread(
                self.repository.update_workout_entry, user_id, previous.id, payload
            )
            if entry is None:
                raise InvalidEntryError(f"Workout entry {entry_id} not found")
        else:
            created = await asyncio.to_thread(
                self.repository.create_workout_entries, [payload]
            )
            entry = created[0]
        logger.info(
            "Saved workout entry %s on %s (%s kcal)",
            entry.id,
            entry_date,
            entry.calories_burned,
        )
        totals = await self._recalc(user_id, entry_date)
        if previous is not None and previous.entry_date != entry_date:
            await self._recalc(user_id, previous.entry_date)
        return entry, totals

    async def delete_workout_entry(
        self, user_id: str, entry_id: str
    ) -> DayTotals | None:
        """Delete a workout entry and recalculate its day.

        Returns ``None`` when the entry does not exist.
        """
        require_user_id("delete_workout_entry", user_id)
        if not entry_id:
            raise InvalidEntryError("Missing entry id")
        entry = await asyncio.to_thread(
            self.repository.get_workout_entry, user_id, entry_id
        )
        if entry is None:
            return None
        await asyncio.to_thread(
            self.repository.delete_workout_entry, user_id, entry_id
        )
        logger.info("Deleted workout entry %s on %s", entry_id, entry.entry_date)
        return await self._recalc(user_id, entry.entry_date)

    async def bulk_add_workouts(
        self, user_id: str, date_key: str | None, items: list[dict[str, object]]
    ) -> tuple[list[WorkoutEntry], DayTotals | None]:
        """Insert several workouts for a day, skipping blank activities."""
        require_user_id("bulk_add_workouts", user_id)
        entry_date = self.dates.normalize(date_key)
        payloads = []
        for item in items:
            payload = _workout_payload(
                user_id,
                entry_date,
                str(item.get("activity") or ""),
                item.get("calories_burned"),
                _optional_int(item.get("minutes")),
                _optional_text(item.get("intensity")),
                _optional_text(item.get("source")) or "plan",
            )
            if payload is not None:
                payloads.append(payload)
        if not payloads:
            return [], None
        entries = await asyncio.to_thread(
            self.repository.create_workout_entries, payloads
        )
        logger.info("Added %d workouts on %s", len(entries), entry_date)
        totals = await self._recalc(user_id, entry_date)
        return entries, totals

    def list_food_entries(self, user_id: str, date_key: str | None) -> list[FoodEntry]:
        """Return the day's food entries."""
        require_user_id("list_food_entries", user_id)
        return self.repository.list_food_entries(
            user_id, self.dates.normalize(date_key)
        )

    def list_workout_entries(
        self, user_id: str, date_key: str | None
    ) -> list[WorkoutEntry]:
        """Return the day's workout entries."""
        require_user_id("list_workout_entries", user_id)
        return self.repository.list_workout_entries(
            user_id, self.dates.normalize(date_key)
        )

    def _entry_date(
        self, date_key: str | None, previous: FoodEntry | WorkoutEntry | None
    ) -> str:
        if previous is not None and (date_key is None or not date_key.strip()):
            return previous.entry_date
        return self.dates.normalize(date_key)

    async def _recalc(self, user_id: str, date_key: str) -> DayTotals:
        await self.days.ensure_targets(user_id, date_key)
        return await self.totals_engine.recalc_and_persist_day(user_id, date_key)


def _workout_payload(  # noqa: PLR0913
    user_id: str,
    entry_date: str,
    activity: str,
    calories: object,
    minutes: int | None,
    intensity: str | None,
    source: str | None,
) -> dict[str, object] | None:
    name = (activity or "").strip()
    if not name:
        return None
    return {
        "user_id": user_id,
        "entry_date": entry_date,
        "activity": name,
        "calories_burned": round(coerce_non_negative_number(calories)),
        "minutes": minutes,
        "intensity": intensity,
        "source": source,
    }


def _optional_macro(value: object) -> float | None:
    number = coerce_number(value)
    if number is None:
        return None
    return max(0.0, number)


def _optional_int(value: object) -> int | None:
    number = coerce_number(value)
    return round(number) if number is not None else None


def _optional_text(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
