"""Domain models for target records and profiles."""

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

Goal = Literal["cut", "lean", "bulk", "recomp"]
Sex = Literal["male", "female"]


@dataclass(frozen=True)
class TargetRecord:
    """A row from the ``daily_targets`` or standing ``targets`` table."""

    user_id: str
    calories: float | None
    protein: float | None
    carbs: float | None
    fat: float | None
    goal: str | None = None
    label: str | None = None
    rationale: str | None = None
    target_date: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class Profile:
    """Body metrics used to suggest targets."""

    sex: Sex
    age: int
    height_in: float
    weight_lbs: float
    activity_level: str | None = None
