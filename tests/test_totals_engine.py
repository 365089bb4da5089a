"""Tests for the daily totals engine."""

import asyncio

import pytest

from macro_tracker.domain.entries import FoodSums
from macro_tracker.domain.errors import InvalidDateKeyError, MissingIdentifierError
from macro_tracker.services.events import DAY_TOTALS_EVENT, EventBus
from macro_tracker.services.totals import TotalsEngine, compute_day_totals
from tests.conftest import (
    InMemoryDayRepository,
    InMemoryEntryRepository,
    RecordingHandler,
)

USER = "u1"
DAY = "2024-01-05"


def test_new_day_totals_are_computed_persisted_and_published(
    engine: TotalsEngine,
    entry_repository: InMemoryEntryRepository,
    day_repository: InMemoryDayRepository,
    events: EventBus,
) -> None:
    entry_repository.add_food(USER, DAY, calories=500)
    entry_repository.add_workout(USER, DAY, calories_burned=300)
    day_repository.seed(USER, DAY, targets={"calories": 2000})
    handler = RecordingHandler()
    events.subscribe(DAY_TOTALS_EVENT, handler)

    totals = asyncio.run(engine.recalc_and_persist_day(USER, DAY))

    assert totals.food_cals == 500
    assert totals.workout_cals == 300
    assert totals.allowance == 2300
    assert totals.remaining == 1800
    assert totals.locked_remaining is False
    stored = day_repository.get_day(USER, DAY)
    assert stored is not None
    assert stored.totals == totals
    assert handler.payloads == [{"user_id": USER, "date_key": DAY, "totals": totals}]


def test_missing_day_row_uses_zero_target_and_inserts_row(
    engine: TotalsEngine,
    entry_repository: InMemoryEntryRepository,
    day_repository: InMemoryDayRepository,
) -> None:
    entry_repository.add_food(USER, DAY, calories=400)

    totals = asyncio.run(engine.recalc_and_persist_day(USER, DAY))

    assert totals.allowance == 0
    assert totals.remaining == -400
    assert totals.over_target is True
    assert totals.display_remaining == 0
    assert (USER, DAY) in day_repository.rows


def test_recalc_is_idempotent_under_stable_inputs(
    engine: TotalsEngine,
    entry_repository: InMemoryEntryRepository,
    day_repository: InMemoryDayRepository,
) -> None:
    entry_repository.add_food(USER, DAY, calories=650, protein=40, carbs=60, fat=20)
    day_repository.seed(USER, DAY, targets={"calories": 1800})

    first = asyncio.run(engine.recalc_and_persist_day(USER, DAY))
    stored_first = dict(day_repository.rows[(USER, DAY)]["totals"])
    second = asyncio.run(engine.recalc_and_persist_day(USER, DAY))

    assert first == second
    assert day_repository.rows[(USER, DAY)]["totals"] == stored_first


def test_lock_with_override_is_honoured_when_sums_unchanged(
    engine: TotalsEngine,
    entry_repository: InMemoryEntryRepository,
    day_repository: InMemoryDayRepository,
) -> None:
    entry_repository.add_food(USER, DAY, calories=500)
    day_repository.seed(
        USER,
        DAY,
        targets={"calories": 2000},
        totals={
            "food_cals": 500,
            "workout_cals": 0,
            "allowance": 2000,
            "remaining": 1500,
            "locked_remaining": True,
            "remaining_override": 1200,
        },
    )

    totals = asyncio.run(engine.recalc_and_persist_day(USER, DAY))

    assert totals.remaining == 1200
    assert totals.locked_remaining is True
    assert totals.remaining_override == 1200


def test_lock_clears_when_a_meal_is_added(
    engine: TotalsEngine,
    entry_repository: InMemoryEntryRepository,
    day_repository: InMemoryDayRepository,
) -> None:
    entry_repository.add_food(USER, DAY, calories=500)
    entry_repository.add_food(USER, DAY, calories=150)
    day_repository.seed(
        USER,
        DAY,
        targets={"calories": 2000},
        totals={
            "food_cals": 500,
            "workout_cals": 0,
            "allowance": 2000,
            "remaining": 1500,
            "locked_remaining": True,
            "remaining_override": 1200,
        },
    )

    totals = asyncio.run(engine.recalc_and_persist_day(USER, DAY))

    assert totals.food_cals == 650
    assert totals.locked_remaining is False
    assert totals.remaining_override is None
    assert totals.remaining == 2000 - 650


def test_lock_clears_when_workout_sum_changes(
    engine: TotalsEngine,
    entry_repository: InMemoryEntryRepository,
    day_repository: InMemoryDayRepository,
) -> None:
    entry_repository.add_workout(USER, DAY, calories_burned=250)
    day_repository.seed(
        USER,
        DAY,
        targets={"calories": 2000},
        totals={
            "food_cals": 0,
            "workout_cals": 0,
            "remaining": 900,
            "locked_remaining": True,
        },
    )

    totals = asyncio.run(engine.recalc_and_persist_day(USER, DAY))

    assert totals.locked_remaining is False
    assert totals.remaining == 2250


def test_lock_without_override_keeps_prior_remaining(
    engine: TotalsEngine,
    day_repository: InMemoryDayRepository,
) -> None:
    day_repository.seed(
        USER,
        DAY,
        targets={"calories": 2000},
        totals={
            "food_cals": 0,
            "workout_cals": 0,
            "remaining": 900,
            "locked_remaining": True,
            "remaining_override": None,
        },
    )

    totals = asyncio.run(engine.recalc_and_persist_day(USER, DAY))

    assert totals.locked_remaining is True
    assert totals.remaining == 900


def test_macros_are_summed_from_entries(
    engine: TotalsEngine,
    entry_repository: InMemoryEntryRepository,
    day_repository: InMemoryDayRepository,
) -> None:
    entry_repository.add_food(USER, DAY, calories=300, protein=20, carbs=30, fat=10)
    entry_repository.add_food(USER, DAY, calories=200, protein="15", carbs=None)
    day_repository.seed(USER, DAY, totals={"protein": 99, "carbs": 99, "fat": 99})

    totals = asyncio.run(engine.recalc_and_persist_day(USER, DAY))

    assert totals.protein == 35
    assert totals.carbs == 30
    assert totals.fat == 10


def test_macros_are_recomputed_when_entries_have_none(
    engine: TotalsEngine,
    entry_repository: InMemoryEntryRepository,
    day_repository: InMemoryDayRepository,
) -> None:
    entry_repository.add_food(USER, DAY, calories=300)
    day_repository.seed(
        USER, DAY, totals={"food_cals": 0, "protein": 42, "carbs": 80, "fat": 12}
    )

    totals = asyncio.run(engine.recalc_and_persist_day(USER, DAY))

    assert (totals.protein, totals.carbs, totals.fat) == (None, None, None)


def test_macros_are_zero_when_the_day_has_no_entries(
    engine: TotalsEngine, day_repository: InMemoryDayRepository
) -> None:
    day_repository.seed(
        USER, DAY, totals={"food_cals": 300, "protein": 40, "carbs": 25, "fat": 9}
    )

    totals = asyncio.run(engine.recalc_and_persist_day(USER, DAY))

    assert totals.food_cals == 0
    assert (totals.protein, totals.carbs, totals.fat) == (0, 0, 0)


def test_non_numeric_and_nan_values_count_as_zero(
    engine: TotalsEngine,
    entry_repository: InMemoryEntryRepository,
    day_repository: InMemoryDayRepository,
) -> None:
    entry_repository.add_food(USER, DAY, calories="abc")
    entry_repository.add_food(USER, DAY, calories=None)
    entry_repository.add_food(USER, DAY, calories=120)
    entry_repository.add_workout(USER, DAY, calories_burned=float("nan"))
    day_repository.seed(USER, DAY, targets={"calories": float("nan")})

    totals = asyncio.run(engine.recalc_and_persist_day(USER, DAY))

    assert totals.food_cals == 120
    assert totals.workout_cals == 0
    assert totals.allowance == 0


def test_other_users_and_dates_are_ignored(
    engine: TotalsEngine,
    entry_repository: InMemoryEntryRepository,
) -> None:
    entry_repository.add_food(USER, DAY, calories=100)
    entry_repository.add_food("u2", DAY, calories=900)
    entry_repository.add_food(USER, "2024-01-06", calories=900)

    totals = asyncio.run(engine.recalc_and_persist_day(USER, DAY))

    assert totals.food_cals == 100


@pytest.mark.parametrize(
    ("user_id", "date_key"), [("", DAY), (USER, ""), ("  ", DAY), (USER, None)]
)
def test_missing_identifiers_fail_before_io(
    engine: TotalsEngine,
    entry_repository: InMemoryEntryRepository,
    user_id: str,
    date_key: str,
) -> None:
    with pytest.raises(MissingIdentifierError):
        asyncio.run(engine.recalc_and_persist_day(user_id, date_key))
    assert entry_repository.sum_calls == 0


@pytest.mark.parametrize("date_key", ["2024-1-5", "2024-02-30", "today"])
def test_malformed_date_keys_fail_before_io(
    engine: TotalsEngine,
    entry_repository: InMemoryEntryRepository,
    day_repository: InMemoryDayRepository,
    date_key: str,
) -> None:
    with pytest.raises(InvalidDateKeyError):
        asyncio.run(engine.recalc_and_persist_day(USER, date_key))
    with pytest.raises(InvalidDateKeyError):
        asyncio.run(engine.lock_remaining(USER, date_key))

    assert entry_repository.sum_calls == 0
    assert day_repository.rows == {}


def test_read_failure_propagates_without_write(
    day_repository: InMemoryDayRepository, events: EventBus
) -> None:
    class FailingEntries(InMemoryEntryRepository):
        def sum_workout_calories(self, user_id: str, date_key: str) -> float:
            raise RuntimeError("read failed")

    engine = TotalsEngine(
        entry_reader=FailingEntries(), day_repository=day_repository, events=events
    )
    handler = RecordingHandler()
    events.subscribe(DAY_TOTALS_EVENT, handler)

    with pytest.raises(RuntimeError, match="read failed"):
        asyncio.run(engine.recalc_and_persist_day(USER, DAY))

    assert day_repository.totals_writes == 0
    assert handler.payloads == []


def test_write_failure_propagates_without_event(
    engine: TotalsEngine,
    day_repository: InMemoryDayRepository,
    events: EventBus,
) -> None:
    day_repository.seed(USER, DAY, targets={"calories": 2000}, totals={"remaining": 1})
    day_repository.fail_writes = True
    handler = RecordingHandler()
    events.subscribe(DAY_TOTALS_EVENT, handler)

    with pytest.raises(RuntimeError, match="write failed"):
        asyncio.run(engine.recalc_and_persist_day(USER, DAY))

    assert day_repository.rows[(USER, DAY)]["totals"] == {"remaining": 1}
    assert handler.payloads == []


def test_concurrent_recalcs_for_same_day_are_serialised(
    engine: TotalsEngine,
    entry_repository: InMemoryEntryRepository,
    day_repository: InMemoryDayRepository,
) -> None:
    entry_repository.add_food(USER, DAY, calories=250)
    day_repository.seed(USER, DAY, targets={"calories": 1000})

    async def run_many() -> list:
        return await asyncio.gather(
            *(engine.recalc_and_persist_day(USER, DAY) for _ in range(5))
        )

    results = asyncio.run(run_many())

    assert {result.remaining for result in results} == {750}
    assert day_repository.totals_writes == 5
    assert engine.locks._locks == {}


def test_lock_and_unlock_remaining(
    engine: TotalsEngine,
    entry_repository: InMemoryEntryRepository,
    day_repository: InMemoryDayRepository,
) -> None:
    entry_repository.add_food(USER, DAY, calories=300)
    day_repository.seed(USER, DAY, targets={"calories": 2000})

    locked = asyncio.run(engine.lock_remaining(USER, DAY, 1000))
    again = asyncio.run(engine.recalc_and_persist_day(USER, DAY))
    unlocked = asyncio.run(engine.unlock_remaining(USER, DAY))

    assert locked.locked_remaining is True
    assert locked.remaining == 1000
    assert again.remaining == 1000
    assert unlocked.locked_remaining is False
    assert unlocked.remaining == 1700


@pytest.mark.parametrize(
    ("base", "workout", "expected"),
    [(2000, 300, 2300), (0, 0, 0), (-500, 100, 0), (-100, -50, 0), (100, -500, 0)],
)
def test_allowance_is_never_negative(base: float, workout: float, expected: float):
    totals = compute_day_totals(
        food=FoodSums(calories=0),
        workout_cals=workout,
        base_target=base,
        prior=None,
    )

    assert totals.allowance == expected
    assert totals.allowance >= 0
