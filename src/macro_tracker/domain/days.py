"""Domain models for day snapshots."""

from dataclasses import dataclass
from datetime import datetime

from macro_tracker.domain.numbers import coerce_non_negative_number, coerce_number

MACRO_FIELDS = ("protein", "carbs", "fat")


@dataclass(frozen=True)
class DayTargets:
    """Calorie and macro targets snapshotted onto a day."""

    calories: float | None = None
    protein: float | None = None
    carbs: float | None = None
    fat: float | None = None
    goal: str | None = None
    label: str | None = None
    rationale: str | None = None

    def to_payload(self) -> dict[str, object]:
        """Return the JSON blob stored in ``days.targets``."""
        return {
            "goal": self.goal,
            "calories": self.calories,
            "protein": self.protein,
            "carbs": self.carbs,
            "fat": self.fat,
            "label": self.label,
            "rationale": self.rationale,
        }

    def macro_payload(self) -> dict[str, object]:
        """Return only the numeric targets."""
        return {
            "calories": self.calories,
            "protein": self.protein,
            "carbs": self.carbs,
            "fat": self.fat,
        }

    @classmethod
    def from_payload(cls, payload: dict[str, object] | None) -> "DayTargets | None":
        """Build targets from a stored JSON blob."""
        if not payload:
            return None
        return cls(
            calories=coerce_number(payload.get("calories")),
            protein=coerce_number(payload.get("protein")),
            carbs=coerce_number(payload.get("carbs")),
            fat=coerce_number(payload.get("fat")),
            goal=_optional_str(payload.get("goal")),
            label=_optional_str(payload.get("label")),
            rationale=_optional_str(payload.get("rationale")),
        )


@dataclass(frozen=True)
class DayTotals:
    """Derived totals for a single user and date."""

    food_cals: float
    workout_cals: float
    allowance: float
    remaining: float
    locked_remaining: bool = False
    remaining_override: float | None = None
    protein: float | None = None
    carbs: float | None = None
    fat: float | None = None

    @property
    def over_target(self) -> bool:
        """Return True when more was eaten than the allowance."""
        return self.remaining < 0

    @property
    def display_remaining(self) -> float:
        """Remaining clamped at zero for presentation."""
        return max(0.0, self.remaining)

    def to_payload(self) -> dict[str, object]:
        """Return the JSON blob stored in ``days.totals``."""
        return {
            "food_cals": self.food_cals,
            "workout_cals": self.workout_cals,
            "allowance": self.allowance,
            "remaining": self.remaining,
            "locked_remaining": self.locked_remaining,
            "remaining_override": self.remaining_override,
            "protein": self.protein,
            "carbs": self.carbs,
            "fat": self.fat,
        }

    @classmethod
    def from_payload(cls, payload: dict[str, object] | None) -> "DayTotals | None":
        """Build totals from a stored JSON blob.

        Missing numeric fields are kept as ``None`` for the lock fields and
        zero for the sums, so that a partially written blob can still be
        compared against fresh sums.
        """
        if not payload:
            return None
        return cls(
            food_cals=coerce_number(payload.get("food_cals")) or 0.0,
            workout_cals=coerce_number(payload.get("workout_cals")) or 0.0,
            allowance=coerce_number(payload.get("allowance")) or 0.0,
            remaining=coerce_number(payload.get("remaining")) or 0.0,
            locked_remaining=bool(payload.get("locked_remaining")),
            remaining_override=coerce_number(payload.get("remaining_override")),
            protein=coerce_number(payload.get("protein")),
            carbs=coerce_number(payload.get("carbs")),
            fat=coerce_number(payload.get("fat")),
        )


@dataclass(frozen=True)
class DayRecord:
    """A persisted ``days`` row."""

    user_id: str
    date_key: str
    targets: DayTargets | None
    totals: DayTotals | None
    raw_totals: dict[str, object] | None = None
    updated_at: datetime | None = None


def embedded_target_calories(targets: DayTargets | None) -> float | None:
    """Return the day's own calorie target when it is a usable number."""
    if targets is None or targets.calories is None:
        return None
    return coerce_non_negative_number(targets.calories)


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
