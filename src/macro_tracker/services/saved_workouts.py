"""Saved workout plan service."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from macro_tracker.domain.days import DayTotals
from macro_tracker.domain.entries import WorkoutEntry
from macro_tracker.domain.errors import (
    InvalidEntryError,
    SavedWorkoutLimitError,
    require_user_id,
)
from macro_tracker.domain.saved_workouts import (
    SavedWorkout,
    plan_item_workout,
    plan_items,
)
from macro_tracker.services.entries import EntryService

logger = logging.getLogger(__name__)


class SavedWorkoutRepository(Protocol):
    """Persistence interface for ``saved_workouts``."""

    def list_saved_workouts(self, user_id: str) -> list[SavedWorkout]:
        """Return the user's saved workouts, newest first."""

    def count_saved_workouts(self, user_id: str) -> int:
        """Return how many workouts the user has saved."""

    def get_saved_workout(self, user_id: str, saved_id: str) -> SavedWorkout | None:
        """Return a saved workout owned by the user."""

    def create_saved_workout(
        self, user_id: str, name: str, plan: object
    ) -> SavedWorkout:
        """Insert a saved workout."""

    def delete_saved_workout(self, user_id: str, saved_id: str) -> None:
        """Delete a saved workout owned by the user."""


@dataclass
class SavedWorkoutService:
    """Stores workout plans and logs them as workout entries."""

    repository: SavedWorkoutRepository
    entry_service: EntryService
    max_saved: int = 10

    def list_saved(self, user_id: str) -> list[SavedWorkout]:
        require_user_id("list_saved", user_id)
        return self.repository.list_saved_workouts(user_id)

    def save_plan(self, user_id: str, name: str, plan: object) -> SavedWorkout:
        """Save a named plan, up to ``max_saved`` per user."""
        require_user_id("save_plan", user_id)
        cleaned = (name or "").strip()
        if not cleaned:
            raise InvalidEntryError("Missing workout name")
        if self.repository.count_saved_workouts(user_id) >= self.max_saved:
            raise SavedWorkoutLimitError(
                f"Limit reached. You can only save up to {self.max_saved} workouts."
            )
        saved = self.repository.create_saved_workout(user_id, cleaned, plan)
        logger.info("Saved workout %s for user %s", saved.id, user_id)
        return saved

    def remove(self, user_id: str, saved_id: str) -> bool:
        """Delete a saved workout. Returns False when it does not exist."""
        require_user_id("remove_saved_workout", user_id)
        if self.repository.get_saved_workout(user_id, saved_id) is None:
            return False
        self.repository.delete_saved_workout(user_id, saved_id)
        return True

    async def log_to_day(
        self, user_id: str, saved_id: str, date_key: str | None = None
    ) -> tuple[list[WorkoutEntry], DayTotals | None] | None:
        """Insert a saved plan's items as the day's workouts.

        Returns ``None`` when the saved workout does not exist.
        """
        require_user_id("log_saved_workout", user_id)
        saved = await asyncio.to_thread(
            self.repository.get_saved_workout, user_id, saved_id
        )
        if saved is None:
            return None
        items = [
            plan_item_workout(item, saved.name) for item in plan_items(saved.plan)
        ]
        return await self.entry_service.bulk_add_workouts(user_id, date_key, items)
