"""Domain models for logged food and workout entries."""

from dataclasses import dataclass
from datetime import datetime

from macro_tracker.domain.numbers import coerce_non_negative_number, coerce_number


@dataclass(frozen=True)
class FoodEntry:
    """A logged food item."""

    id: str
    user_id: str
    entry_date: str
    description: str
    calories: float
    protein: float | None
    carbs: float | None
    fat: float | None
    source: str | None
    created_at: datetime | None = None


@dataclass(frozen=True)
class WorkoutEntry:
    """A logged workout."""

    id: str
    user_id: str
    entry_date: str
    activity: str
    calories_burned: float
    minutes: int | None = None
    intensity: str | None = None
    source: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class FoodSums:
    """Summed calories and macros for a day's food entries.

    Macro sums are ``None`` when no entry carried a value for that macro.
    """

    calories: float
    protein: float | None = None
    carbs: float | None = None
    fat: float | None = None


def sum_food_rows(rows: list[dict[str, object]]) -> FoodSums:
    """Sum calories and macros from raw ``food_entries`` rows.

    A day with no rows sums to zero for every macro, so the previous totals
    never outlive the last deleted entry.
    """
    if not rows:
        return FoodSums(calories=0.0, protein=0.0, carbs=0.0, fat=0.0)
    calories = 0.0
    macros: dict[str, float | None] = {"protein": None, "carbs": None, "fat": None}
    for row in rows:
        calories += coerce_non_negative_number(row.get("calories"))
        for name in macros:
            value = coerce_number(row.get(name))
            if value is None:
                continue
            macros[name] = (macros[name] or 0.0) + max(0.0, value)
    return FoodSums(
        calories=calories,
        protein=macros["protein"],
        carbs=macros["carbs"],
        fat=macros["fat"],
    )


def sum_workout_rows(rows: list[dict[str, object]]) -> float:
    """Sum calories burned from raw ``workout_entries`` rows."""
    return sum(
        (coerce_non_negative_number(row.get("calories_burned")) for row in rows),
        0.0,
    )
