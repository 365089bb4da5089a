"""Supabase repository for food and workout entries."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from macro_tracker.domain.entries import (
    FoodEntry,
    FoodSums,
    WorkoutEntry,
    sum_food_rows,
    sum_workout_rows,
)
from macro_tracker.domain.numbers import coerce_non_negative_number, coerce_number
from macro_tracker.services.entries import EntryRepository

_FOOD_COLUMNS = (
    "id, user_id, entry_date, description, calories, protein, carbs, fat, source, "
    "created_at"
)
_WORKOUT_COLUMNS = (
    "id, user_id, entry_date, activity, minutes, intensity, calories_burned, "
    "source, created_at"
)


@dataclass
class SupabaseEntryRepository(EntryRepository):
    """Supabase implementation for ``food_entries`` and ``workout_entries``."""

    client: Client

    def sum_food(self, user_id: str, date_key: str) -> FoodSums:
        """Sum the day's food calories and macros."""
        response = (
            self.client.table("food_entries")
            .select("calories, protein, carbs, fat")
            .eq("user_id", user_id)
            .eq("entry_date", date_key)
            .execute()
        )
        return sum_food_rows(response.data or [])

    def sum_workout_calories(self, user_id: str, date_key: str) -> float:
        """Sum the day's calories burned."""
        response = (
            self.client.table("workout_entries")
            .select("calories_burned")
            .eq("user_id", user_id)
            .eq("entry_date", date_key)
            .execute()
        )
        return sum_workout_rows(response.data or [])

    def list_food_entries(self, user_id: str, date_key: str) -> list[FoodEntry]:
        """Return the day's food entries, newest first."""
        response = (
            self.client.table("food_entries")
            .select(_FOOD_COLUMNS)
            .eq("user_id", user_id)
            .eq("entry_date", date_key)
            .order("created_at", desc=True)
            .execute()
        )
        return [_parse_food(row) for row in response.data or []]

    def list_workout_entries(self, user_id: str, date_key: str) -> list[WorkoutEntry]:
        """Return the day's workout entries, newest first."""
        response = (
            self.client.table("workout_entries")
            .select(_WORKOUT_COLUMNS)
            .eq("user_id", user_id)
            .eq("entry_date", date_key)
            .order("created_at", desc=True)
            .execute()
        )
        return [_parse_workout(row) for row in response.data or []]

    def get_food_entry(self, user_id: str, entry_id: str) -> FoodEntry | None:
        """Return a food entry by id."""
        response = (
            self.client.table("food_entries")
            .select(_FOOD_COLUMNS)
            .eq("id", entry_id)
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_food(response.data[0])

    def get_workout_entry(self, user_id: str, entry_id: str) -> WorkoutEntry | None:
        """Return a workout entry by id."""
        response = (
            self.client.table("workout_entries")
            .select(_WORKOUT_COLUMNS)
            .eq("id", entry_id)
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_workout(response.data[0])

    def create_food_entry(self, payload: dict[str, object]) -> FoodEntry:
        """Insert a food entry."""
        response = self.client.table("food_entries").insert(payload).execute()
        if not response.data:
            raise RuntimeError("Failed to create food entry")
        return _parse_food(response.data[0])

    def update_food_entry(
        self, user_id: str, entry_id: str, payload: dict[str, object]
    ) -> FoodEntry | None:
        """Update a food entry owned by the user."""
        response = (
            self.client.table("food_entries")
            .update({**payload, "updated_at": datetime.now(tz=UTC).isoformat()})
            .eq("id", entry_id)
            .eq("user_id", user_id)
            .execute()
        )
        if not response.data:
            return None
        return _parse_food(response.data[0])

    def delete_food_entry(self, user_id: str, entry_id: str) -> None:
        """Delete a food entry owned by the user."""
        self.client.table("food_entries").delete().eq("id", entry_id).eq(
            "user_id", user_id
        ).execute()

    def create_workout_entries(
        self, payloads: list[dict[str, object]]
    ) -> list[WorkoutEntry]:
        """Insert workout entries."""
        response = self.client.table("workout_entries").insert(payloads).execute()
        if not response.data:
            raise RuntimeError("Failed to create workout entries")
        return [_parse_workout(row) for row in response.data]

    def update_workout_entry(
        self, user_id: str, entry_id: str, payload: dict[str, object]
    ) -> WorkoutEntry | None:
        """Update a workout entry owned by the user."""
        response = (
            self.client.table("workout_entries")
            .update({**payload, "updated_at": datetime.now(tz=UTC).isoformat()})
            .eq("id", entry_id)
            .eq("user_id", user_id)
            .execute()
        )
        if not response.data:
            return None
        return _parse_workout(response.data[0])

    def delete_workout_entry(self, user_id: str, entry_id: str) -> None:
        """Delete a workout entry owned by the user."""
        self.client.table("workout_entries").delete().eq("id", entry_id).eq(
            "user_id", user_id
        ).execute()


def _parse_food(row: dict[str, object]) -> FoodEntry:
    return FoodEntry(
        id=str(row["id"]),
        user_id=str(row.get("user_id", "")),
        entry_date=str(row.get("entry_date", "")),
        description=str(row.get("description") or ""),
        calories=coerce_non_negative_number(row.get("calories")),
        protein=coerce_number(row.get("protein")),
        carbs=coerce_number(row.get("carbs")),
        fat=coerce_number(row.get("fat")),
        source=row.get("source"),
        created_at=_parse_timestamp(row.get("created_at")),
    )


def _parse_workout(row: dict[str, object]) -> WorkoutEntry:
    minutes = coerce_number(row.get("minutes"))
    return WorkoutEntry(
        id=str(row["id"]),
        user_id=str(row.get("user_id", "")),
        entry_date=str(row.get("entry_date", "")),
        activity=str(row.get("activity") or ""),
        calories_burned=coerce_non_negative_number(row.get("calories_burned")),
        minutes=round(minutes) if minutes is not None else None,
        intensity=row.get("intensity"),
        source=row.get("source"),
        created_at=_parse_timestamp(row.get("created_at")),
    )


def _parse_timestamp(value: object) -> datetime | None:
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value)
    return None
