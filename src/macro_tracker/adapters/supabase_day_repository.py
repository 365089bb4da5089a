"""Supabase repository for day rows."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from macro_tracker.domain.days import DayRecord, DayTargets, DayTotals
from macro_tracker.services.totals import DayRepository

_DAY_COLUMNS = "id, user_id, date, targets, totals, updated_at"


@dataclass
class SupabaseDayRepository(DayRepository):
    """Supabase implementation for ``days``."""

    client: Client

    def get_day(self, user_id: str, date_key: str) -> DayRecord | None:
        """Return the day row if present."""
        response = (
            self.client.table("days")
            .select(_DAY_COLUMNS)
            .eq("user_id", user_id)
            .eq("date", date_key)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_day(response.data[0])

    def upsert_day_totals(self, user_id: str, date_key: str, totals: DayTotals) -> None:
        """Write the day's totals, inserting the row when absent."""
        self._upsert(user_id, date_key, {"totals": totals.to_payload()})

    def upsert_day_targets(
        self, user_id: str, date_key: str, targets: DayTargets
    ) -> None:
        """Write the day's embedded targets, inserting the row when absent."""
        self._upsert(user_id, date_key, {"targets": targets.to_payload()})

    def list_days(self, user_id: str, start_key: str, end_key: str) -> list[DayRecord]:
        """Return days in the inclusive range."""
        response = (
            self.client.table("days")
            .select(_DAY_COLUMNS)
            .eq("user_id", user_id)
            .gte("date", start_key)
            .lte("date", end_key)
            .order("date", desc=False)
            .execute()
        )
        return [_parse_day(row) for row in response.data or []]

    def get_latest_day_before(self, user_id: str, date_key: str) -> DayRecord | None:
        """Return the newest day strictly before the date key."""
        response = (
            self.client.table("days")
            .select(_DAY_COLUMNS)
            .eq("user_id", user_id)
            .lt("date", date_key)
            .order("date", desc=True)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_day(response.data[0])

    def _upsert(self, user_id: str, date_key: str, fields: dict[str, object]) -> None:
        payload = {**fields, "updated_at": datetime.now(tz=UTC).isoformat()}
        existing = (
            self.client.table("days")
            .select("id")
            .eq("user_id", user_id)
            .eq("date", date_key)
            .limit(1)
            .execute()
        )
        if existing.data:
            self.client.table("days").update(payload).eq("user_id", user_id).eq(
                "date", date_key
            ).execute()
            return
        response = (
            self.client.table("days")
            .insert({"user_id": user_id, "date": date_key, **payload})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create day")


def _parse_day(row: dict[str, object]) -> DayRecord:
    raw_targets = row.get("targets")
    raw_totals = row.get("totals")
    totals_payload = raw_totals if isinstance(raw_totals, dict) else None
    updated_raw = row.get("updated_at")
    return DayRecord(
        user_id=str(row.get("user_id", "")),
        date_key=str(row.get("date", "")),
        targets=DayTargets.from_payload(
            raw_targets if isinstance(raw_targets, dict) else None
        ),
        totals=DayTotals.from_payload(totals_payload),
        raw_totals=totals_payload,
        updated_at=(
            datetime.fromisoformat(updated_raw)
            if isinstance(updated_raw, str) and updated_raw
            else None
        ),
    )
