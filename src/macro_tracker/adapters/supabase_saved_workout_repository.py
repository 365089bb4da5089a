"""Supabase repository for saved workout plans."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from macro_tracker.domain.saved_workouts import SavedWorkout
from macro_tracker.services.saved_workouts import SavedWorkoutRepository

_COLUMNS = "id, user_id, name, plan, created_at"


@dataclass
class SupabaseSavedWorkoutRepository(SavedWorkoutRepository):
    """Supabase implementation for ``saved_workouts``."""

    client: Client

    def list_saved_workouts(self, user_id: str) -> list[SavedWorkout]:
        response = (
            self.client.table("saved_workouts")
            .select(_COLUMNS)
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .execute()
        )
        return [_parse_saved(row) for row in response.data or []]

    def count_saved_workouts(self, user_id: str) -> int:
        response = (
            self.client.table("saved_workouts")
            .select("id")
            .eq("user_id", user_id)
            .execute()
        )
        return len(response.data or [])

    def get_saved_workout(self, user_id: str, saved_id: str) -> SavedWorkout | None:
        response = (
            self.client.table("saved_workouts")
            .select(_COLUMNS)
            .eq("id", saved_id)
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_saved(response.data[0])

    def create_saved_workout(
        self, user_id: str, name: str, plan: object
    ) -> SavedWorkout:
        response = (
            self.client.table("saved_workouts")
            .insert({"user_id": user_id, "name": name, "plan": plan})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to save workout")
        return _parse_saved(response.data[0])

    def delete_saved_workout(self, user_id: str, saved_id: str) -> None:
        self.client.table("saved_workouts").delete().eq("id", saved_id).eq(
            "user_id", user_id
        ).execute()


def _parse_saved(row: dict[str, object]) -> SavedWorkout:
    created_raw = row.get("created_at")
    return SavedWorkout(
        id=str(row["id"]),
        user_id=str(row.get("user_id", "")),
        name=str(row.get("name") or ""),
        plan=row.get("plan"),
        created_at=(
            datetime.fromisoformat(created_raw)
            if isinstance(created_raw, str) and created_raw
            else None
        ),
    )
