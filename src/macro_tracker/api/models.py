"""Pydantic models for HTTP payloads."""

from typing import Any, Literal

from pydantic import BaseModel, Field


class FoodEntryIn(BaseModel):
    """Food entry create/update payload."""

    description: str = Field(min_length=1)
    calories: float = Field(ge=0)
    protein: float | None = Field(default=None, ge=0)
    carbs: float | None = Field(default=None, ge=0)
    fat: float | None = Field(default=None, ge=0)
    source: str | None = "manual"
    date_key: str | None = None


class WorkoutEntryIn(BaseModel):
    """Workout entry create/update payload."""

    activity: str = Field(min_length=1)
    calories_burned: float = Field(default=0, ge=0)
    minutes: int | None = Field(default=None, ge=0)
    intensity: str | None = None
    source: str | None = "manual"
    date_key: str | None = None


class WorkoutItemIn(BaseModel):
    """Single workout in a bulk insert."""

    activity: str
    calories_burned: float | None = None
    minutes: int | None = None
    intensity: str | None = None


class BulkWorkoutsIn(BaseModel):
    """Bulk workout payload."""

    items: list[WorkoutItemIn]


class TargetsIn(BaseModel):
    """Target save payload."""

    calories: float | None = Field(default=None, ge=0)
    protein: float | None = Field(default=None, ge=0)
    carbs: float | None = Field(default=None, ge=0)
    fat: float | None = Field(default=None, ge=0)
    goal: str | None = None
    label: str | None = None
    rationale: str | None = None


class LockIn(BaseModel):
    """Lock payload with an optional pinned remaining value."""

    remaining_override: float | None = None


class SuggestTargetsIn(BaseModel):
    """Body metrics used to suggest targets."""

    sex: Literal["male", "female"]
    age: int = Field(gt=0)
    height_in: float = Field(gt=0)
    weight_lbs: float = Field(gt=0)
    activity_level: str | None = None
    goal_text: str | None = None


class SavedWorkoutIn(BaseModel):
    """Saved workout plan payload."""

    name: str = Field(min_length=1)
    plan: dict[str, Any] | list[dict[str, Any]]


class LogSavedWorkoutIn(BaseModel):
    """Day to log a saved workout on."""

    date_key: str | None = None
