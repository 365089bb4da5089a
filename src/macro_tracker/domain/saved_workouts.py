"""Saved workout plans and their conversion to workout entries."""

from dataclasses import dataclass
from datetime import datetime

from macro_tracker.domain.numbers import coerce_number

_LABEL_KEYS = ("text", "activity", "title", "name", "kind")
_KCAL_KEYS = ("calories_burned", "calories", "kcal")


@dataclass(frozen=True)
class SavedWorkout:
    """A named workout plan a user can log again."""

    id: str
    user_id: str
    name: str
    plan: object
    created_at: datetime | None = None


def plan_items(plan: object) -> list[dict[str, object]]:
    """Return the items of a stored plan.

    Plans are stored as a list of items, as ``{"blocks": [...], "items":
    [...]}``, or as a single item.
    """
    if not plan:
        return []
    if isinstance(plan, list):
        return [item for item in plan if isinstance(item, dict)]
    if not isinstance(plan, dict):
        return []
    blocks = plan.get("blocks") if isinstance(plan.get("blocks"), list) else []
    items = plan.get("items") if isinstance(plan.get("items"), list) else []
    if not blocks and not items:
        if any(plan.get(key) for key in ("text", "activity", "title", "name")):
            return [plan]
        return []
    return [item for item in [*blocks, *items] if isinstance(item, dict)]


def per_minute_calories(kind: object) -> int:
    """Rough kcal per minute for a block kind."""
    value = str(kind or "").lower()
    if "warm" in value:
        return 4
    if "strength" in value:
        return 6
    if any(word in value for word in ("interval", "hiit", "metcon", "tabata")):
        return 9
    return 7


def plan_item_workout(
    item: dict[str, object], fallback_name: str
) -> dict[str, object]:
    """Convert a plan item to a bulk workout item.

    Items without an explicit calorie burn are estimated from their minutes.
    """
    minutes = _whole_number(item.get("minutes"))
    explicit = next(
        (
            number
            for number in (_whole_number(item.get(key)) for key in _KCAL_KEYS)
            if number
        ),
        0,
    )
    kind = item.get("kind") or item.get("category")
    calories = explicit if explicit > 0 else minutes * per_minute_calories(kind)
    label = next(
        (str(item[key]) for key in _LABEL_KEYS if item.get(key)),
        fallback_name or "Workout",
    )
    return {
        "activity": label,
        "minutes": minutes,
        "calories_burned": calories,
        "intensity": item.get("intensity"),
        "source": "saved",
    }


def _whole_number(value: object) -> int:
    number = coerce_number(value)
    return int(number) if number is not None else 0
