"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

import pytest

from macro_tracker.config import Settings
from macro_tracker.containers import AppContainer, build_services
from macro_tracker.domain.days import DayRecord, DayTargets, DayTotals
from macro_tracker.domain.entries import (
    FoodEntry,
    FoodSums,
    WorkoutEntry,
    sum_food_rows,
    sum_workout_rows,
)
from macro_tracker.domain.saved_workouts import SavedWorkout
from macro_tracker.domain.targets import TargetRecord
from macro_tracker.services.entries import EntryRepository
from macro_tracker.services.events import EventBus
from macro_tracker.services.saved_workouts import SavedWorkoutRepository
from macro_tracker.services.targets import TargetRepository
from macro_tracker.services.totals import DayRepository, TotalsEngine


@dataclass
class InMemoryEntryRepository(EntryRepository):
    """In-memory food and workout entries for tests."""

    foods: dict[str, dict[str, object]] = field(default_factory=dict)
    workouts: dict[str, dict[str, object]] = field(default_factory=dict)
    sum_calls: int = 0

    def add_food(self, user_id: str, date_key: str, **fields: object) -> str:
        entry_id = str(uuid4())
        self.foods[entry_id] = {
            "id": entry_id,
            "user_id": user_id,
            "entry_date": date_key,
            "description": fields.pop("description", "food"),
            **fields,
        }
        return entry_id

    def add_workout(self, user_id: str, date_key: str, **fields: object) -> str:
        entry_id = str(uuid4())
        self.workouts[entry_id] = {
            "id": entry_id,
            "user_id": user_id,
            "entry_date": date_key,
            "activity": fields.pop("activity", "run"),
            **fields,
        }
        return entry_id

    def sum_food(self, user_id: str, date_key: str) -> FoodSums:
        self.sum_calls += 1
        return sum_food_rows(_rows_for(self.foods, user_id, date_key))

    def sum_workout_calories(self, user_id: str, date_key: str) -> float:
        return sum_workout_rows(_rows_for(self.workouts, user_id, date_key))

    def list_food_entries(self, user_id: str, date_key: str) -> list[FoodEntry]:
        rows = _rows_for(self.foods, user_id, date_key)
        return [_food(row) for row in reversed(rows)]

    def list_workout_entries(self, user_id: str, date_key: str) -> list[WorkoutEntry]:
        rows = _rows_for(self.workouts, user_id, date_key)
        return [_workout(row) for row in reversed(rows)]

    def get_food_entry(self, user_id: str, entry_id: str) -> FoodEntry | None:
        row = self.foods.get(entry_id)
        if row is None or row["user_id"] != user_id:
            return None
        return _food(row)

    def get_workout_entry(self, user_id: str, entry_id: str) -> WorkoutEntry | None:
        row = self.workouts.get(entry_id)
        if row is None or row["user_id"] != user_id:
            return None
        return _workout(row)

    def create_food_entry(self, payload: dict[str, object]) -> FoodEntry:
        entry_id = str(uuid4())
        self.foods[entry_id] = {"id": entry_id, **payload}
        return _food(self.foods[entry_id])

    def update_food_entry(
        self, user_id: str, entry_id: str, payload: dict[str, object]
    ) -> FoodEntry | None:
        row = self.foods.get(entry_id)
        if row is None or row["user_id"] != user_id:
            return None
        row.update(payload)
        return _food(row)

    def delete_food_entry(self, user_id: str, entry_id: str) -> None:
        row = self.foods.get(entry_id)
        if row is not None and row["user_id"] == user_id:
            del self.foods[entry_id]

    def create_workout_entries(
        self, payloads: list[dict[str, object]]
    ) -> list[WorkoutEntry]:
        created = []
        for payload in payloads:
            entry_id = str(uuid4())
            self.workouts[entry_id] = {"id": entry_id, **payload}
            created.append(_workout(self.workouts[entry_id]))
        return created

    def update_workout_entry(
        self, user_id: str, entry_id: str, payload: dict[str, object]
    ) -> WorkoutEntry | None:
        row = self.workouts.get(entry_id)
        if row is None or row["user_id"] != user_id:
            return None
        row.update(payload)
        return _workout(row)

    def delete_workout_entry(self, user_id: str, entry_id: str) -> None:
        row = self.workouts.get(entry_id)
        if row is not None and row["user_id"] == user_id:
            del self.workouts[entry_id]


@dataclass
class InMemoryDayRepository(DayRepository):
    """In-memory ``days`` rows keyed by user and date."""

    rows: dict[tuple[str, str], dict[str, object]] = field(default_factory=dict)
    totals_writes: int = 0
    fail_writes: bool = False

    def seed(
        self,
        user_id: str,
        date_key: str,
        targets: dict[str, object] | None = None,
        totals: dict[str, object] | None = None,
    ) -> None:
        self.rows[(user_id, date_key)] = {
            "targets": targets,
            "totals": totals,
            "updated_at": datetime.now(tz=UTC),
        }

    def get_day(self, user_id: str, date_key: str) -> DayRecord | None:
        row = self.rows.get((user_id, date_key))
        if row is None:
            return None
        return _day(user_id, date_key, row)

    def upsert_day_totals(self, user_id: str, date_key: str, totals: DayTotals) -> None:
        if self.fail_writes:
            raise RuntimeError("write failed")
        self.totals_writes += 1
        row = self.rows.setdefault((user_id, date_key), {"targets": None})
        row["totals"] = totals.to_payload()
        row["updated_at"] = datetime.now(tz=UTC)

    def upsert_day_targets(
        self, user_id: str, date_key: str, targets: DayTargets
    ) -> None:
        row = self.rows.setdefault((user_id, date_key), {"totals": None})
        row["targets"] = targets.to_payload()
        row["updated_at"] = datetime.now(tz=UTC)

    def list_days(self, user_id: str, start_key: str, end_key: str) -> list[DayRecord]:
        return [
            _day(user, date_key, row)
            for (user, date_key), row in sorted(self.rows.items())
            if user == user_id and start_key <= date_key <= end_key
        ]

    def get_latest_day_before(self, user_id: str, date_key: str) -> DayRecord | None:
        earlier = [
            (key, row)
            for (user, key), row in self.rows.items()
            if user == user_id and key < date_key
        ]
        if not earlier:
            return None
        key, row = max(earlier, key=lambda item: item[0])
        return _day(user_id, key, row)


@dataclass
class InMemoryTargetRepository(TargetRepository):
    """In-memory daily and standing targets."""

    daily: list[TargetRecord] = field(default_factory=list)
    standing: list[TargetRecord] = field(default_factory=list)

    def get_latest_daily_target(
        self, user_id: str, date_key: str
    ) -> TargetRecord | None:
        rows = [
            row
            for row in self.daily
            if row.user_id == user_id and row.target_date == date_key
        ]
        return rows[-1] if rows else None

    def get_latest_standing_target(self, user_id: str) -> TargetRecord | None:
        rows = [row for row in self.standing if row.user_id == user_id]
        return rows[-1] if rows else None

    def upsert_daily_target(
        self, user_id: str, date_key: str, targets: DayTargets
    ) -> None:
        self.daily = [
            row
            for row in self.daily
            if not (row.user_id == user_id and row.target_date == date_key)
        ]
        self.daily.append(
            TargetRecord(
                user_id=user_id,
                calories=targets.calories,
                protein=targets.protein,
                carbs=targets.carbs,
                fat=targets.fat,
                target_date=date_key,
                created_at=datetime.now(tz=UTC),
            )
        )

    def create_standing_target(
        self, user_id: str, targets: DayTargets
    ) -> TargetRecord:
        record = TargetRecord(
            user_id=user_id,
            calories=targets.calories,
            protein=targets.protein,
            carbs=targets.carbs,
            fat=targets.fat,
            goal=targets.goal,
            label=targets.label,
            rationale=targets.rationale,
            created_at=datetime.now(tz=UTC),
        )
        self.standing.append(record)
        return record


@dataclass
class InMemorySavedWorkoutRepository(SavedWorkoutRepository):
    """In-memory saved workout plans."""

    rows: dict[str, SavedWorkout] = field(default_factory=dict)

    def list_saved_workouts(self, user_id: str) -> list[SavedWorkout]:
        rows = [row for row in self.rows.values() if row.user_id == user_id]
        return list(reversed(rows))

    def count_saved_workouts(self, user_id: str) -> int:
        return len(self.list_saved_workouts(user_id))

    def get_saved_workout(self, user_id: str, saved_id: str) -> SavedWorkout | None:
        row = self.rows.get(saved_id)
        if row is None or row.user_id != user_id:
            return None
        return row

    def create_saved_workout(
        self, user_id: str, name: str, plan: object
    ) -> SavedWorkout:
        saved = SavedWorkout(
            id=str(uuid4()),
            user_id=user_id,
            name=name,
            plan=plan,
            created_at=datetime.now(tz=UTC),
        )
        self.rows[saved.id] = saved
        return saved

    def delete_saved_workout(self, user_id: str, saved_id: str) -> None:
        if self.get_saved_workout(user_id, saved_id) is not None:
            del self.rows[saved_id]


@dataclass
class RecordingHandler:
    """Collects event payloads."""

    payloads: list[dict[str, object]] = field(default_factory=list)

    def __call__(self, payload: dict[str, object]) -> None:
        self.payloads.append(payload)


def _rows_for(
    table: dict[str, dict[str, object]], user_id: str, date_key: str
) -> list[dict[str, object]]:
    return [
        row
        for row in table.values()
        if row["user_id"] == user_id and row["entry_date"] == date_key
    ]


def _food(row: dict[str, object]) -> FoodEntry:
    return FoodEntry(
        id=str(row["id"]),
        user_id=str(row["user_id"]),
        entry_date=str(row["entry_date"]),
        description=str(row.get("description", "")),
        calories=float(row.get("calories") or 0),
        protein=row.get("protein"),
        carbs=row.get("carbs"),
        fat=row.get("fat"),
        source=row.get("source"),
    )


def _workout(row: dict[str, object]) -> WorkoutEntry:
    return WorkoutEntry(
        id=str(row["id"]),
        user_id=str(row["user_id"]),
        entry_date=str(row["entry_date"]),
        activity=str(row.get("activity", "")),
        calories_burned=float(row.get("calories_burned") or 0),
        minutes=row.get("minutes"),
        intensity=row.get("intensity"),
        source=row.get("source"),
    )


def _day(user_id: str, date_key: str, row: dict[str, object]) -> DayRecord:
    raw_totals = row.get("totals")
    return DayRecord(
        user_id=user_id,
        date_key=date_key,
        targets=DayTargets.from_payload(row.get("targets")),
        totals=DayTotals.from_payload(raw_totals),
        raw_totals=raw_totals,
        updated_at=row.get("updated_at"),
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="test.service.key",
    )


@pytest.fixture
def entry_repository() -> InMemoryEntryRepository:
    return InMemoryEntryRepository()


@pytest.fixture
def day_repository() -> InMemoryDayRepository:
    return InMemoryDayRepository()


@pytest.fixture
def target_repository() -> InMemoryTargetRepository:
    return InMemoryTargetRepository()


@pytest.fixture
def saved_workout_repository() -> InMemorySavedWorkoutRepository:
    return InMemorySavedWorkoutRepository()


@pytest.fixture
def events() -> EventBus:
    return EventBus()


@pytest.fixture
def engine(
    entry_repository: InMemoryEntryRepository,
    day_repository: InMemoryDayRepository,
    events: EventBus,
) -> TotalsEngine:
    return TotalsEngine(
        entry_reader=entry_repository,
        day_repository=day_repository,
        events=events,
    )


@pytest.fixture
def container(
    settings: Settings,
    entry_repository: InMemoryEntryRepository,
    day_repository: InMemoryDayRepository,
    target_repository: InMemoryTargetRepository,
    saved_workout_repository: InMemorySavedWorkoutRepository,
) -> AppContainer:
    return build_services(
        settings,
        entry_repository=entry_repository,
        day_repository=day_repository,
        target_repository=target_repository,
        saved_workout_repository=saved_workout_repository,
    )
