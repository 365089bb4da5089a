"""Supabase repository for daily and standing targets."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from macro_tracker.domain.days import DayTargets
from macro_tracker.domain.numbers import coerce_number
from macro_tracker.domain.targets import TargetRecord
from macro_tracker.services.targets import TargetRepository


@dataclass
class SupabaseTargetRepository(TargetRepository):
    """Supabase implementation for ``daily_targets`` and ``targets``."""

    client: Client

    def get_latest_daily_target(
        self, user_id: str, date_key: str
    ) -> TargetRecord | None:
        """Return the newest daily target row for the date."""
        response = (
            self.client.table("daily_targets")
            .select("user_id, target_date, calories, protein, carbs, fat, created_at")
            .eq("user_id", user_id)
            .eq("target_date", date_key)
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_target(response.data[0])

    def get_latest_standing_target(self, user_id: str) -> TargetRecord | None:
        """Return the newest standing target row."""
        response = (
            self.client.table("targets")
            .select(
                "user_id, goal, calories, protein, carbs, fat, label, rationale, "
                "created_at"
            )
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_target(response.data[0])

    def upsert_daily_target(
        self, user_id: str, date_key: str, targets: DayTargets
    ) -> None:
        """Write the numeric targets for a date."""
        payload = targets.macro_payload()
        existing = (
            self.client.table("daily_targets")
            .select("id")
            .eq("user_id", user_id)
            .eq("target_date", date_key)
            .limit(1)
            .execute()
        )
        if existing.data:
            self.client.table("daily_targets").update(payload).eq(
                "user_id", user_id
            ).eq("target_date", date_key).execute()
            return
        self.client.table("daily_targets").insert(
            {"user_id": user_id, "target_date": date_key, **payload}
        ).execute()

    def create_standing_target(
        self, user_id: str, targets: DayTargets
    ) -> TargetRecord:
        """Insert a standing target row."""
        response = (
            self.client.table("targets")
            .insert(
                {
                    "user_id": user_id,
                    **targets.to_payload(),
                    "created_at": datetime.now(tz=UTC).isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create target")
        return _parse_target(response.data[0])


def _parse_target(row: dict[str, object]) -> TargetRecord:
    created_raw = row.get("created_at")
    return TargetRecord(
        user_id=str(row.get("user_id", "")),
        calories=coerce_number(row.get("calories")),
        protein=coerce_number(row.get("protein")),
        carbs=coerce_number(row.get("carbs")),
        fat=coerce_number(row.get("fat")),
        goal=row.get("goal"),
        label=row.get("label"),
        rationale=row.get("rationale"),
        target_date=row.get("target_date"),
        created_at=(
            datetime.fromisoformat(created_raw)
            if isinstance(created_raw, str) and created_raw
            else None
        ),
    )
