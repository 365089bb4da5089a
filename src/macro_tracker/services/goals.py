"""Goal inference and target suggestions from body metrics."""

import re

from macro_tracker.domain.days import DayTargets
from macro_tracker.domain.targets import Goal, Profile

KG_PER_LB = 0.453592
CM_PER_IN = 2.54

_GOAL_PATTERNS: list[tuple[Goal, re.Pattern[str]]] = [
    (
        "recomp",
        re.compile(r"\b(recomp|body\s*recomp|burn\s*fat\s*while\s*bulking)\b"),
    ),
    ("cut", re.compile(r"\b(cut|cutting|fat\s*loss|deficit|shred|lean\s*out)\b")),
    ("lean", re.compile(r"\b(lean|tone|maintenance|maintain)\b")),
    ("bulk", re.compile(r"\b(bulk|surplus|gain|mass)\b")),
]

_GOAL_FACTORS: dict[str, float] = {"cut": 0.80, "recomp": 0.90, "bulk": 1.10}

_RATIONALES: dict[str, str] = {
    "cut": "A 20% deficit from maintenance with high protein to keep muscle.",
    "recomp": "A small deficit with high protein to build muscle while leaning out.",
    "lean": "Calories at maintenance to hold weight steady.",
    "bulk": "A 10% surplus to support muscle gain with limited fat gain.",
}


def infer_goal_from_text(text: str | None) -> Goal | None:
    """Infer a goal keyword from free text."""
    if not text:
        return None
    lowered = text.lower()
    for goal, pattern in _GOAL_PATTERNS:
        if pattern.search(lowered):
            return goal
    return None


def short_goal_label(targets: DayTargets | None) -> str | None:
    """Return a short goal label for display."""
    if targets is None:
        return None
    inferred = infer_goal_from_text(targets.label or targets.goal)
    return inferred or targets.goal or targets.label


def mifflin_st_jeor(profile: Profile) -> int:
    """Return resting energy expenditure in kcal."""
    kg = profile.weight_lbs * KG_PER_LB
    cm = profile.height_in * CM_PER_IN
    base = (10 * kg) + (6.25 * cm) - (5 * profile.age)
    return round(base + 5 if profile.sex == "male" else base - 161)


def activity_multiplier(label: str | None) -> float:
    """Map an activity description to a TDEE multiplier."""
    value = (label or "").lower()
    if "very" in value and "active" in value:
        return 1.725
    if "active" in value:
        return 1.55
    if "light" in value:
        return 1.375
    if "sedentary" in value or "low" in value:
        return 1.2
    return 1.4


def adjust_for_goal(tdee: float, goal: Goal) -> int:
    """Scale maintenance calories for a goal."""
    return round(tdee * _GOAL_FACTORS.get(goal, 1.0))


def default_macros(kcal: float, weight_lbs: float, goal: Goal) -> dict[str, int]:
    """Split calories into protein, carbs and fat grams.

    Protein is set per pound of body weight, fat at a quarter of calories and
    carbs fill the rest.
    """
    per_lb = 1.0 if goal in {"cut", "recomp"} else 0.9
    protein = round(per_lb * weight_lbs)
    fat = round(round(kcal * 0.25) / 9)
    carb_kcal = max(0, kcal - (protein * 4) - (fat * 9))
    carbs = round(carb_kcal / 4)
    return {"protein": protein, "carbs": carbs, "fat": fat}


def suggest_targets(profile: Profile, goal_text: str | None = None) -> DayTargets:
    """Suggest daily targets for a profile and an optional goal description."""
    goal = infer_goal_from_text(goal_text) or "lean"
    tdee = mifflin_st_jeor(profile) * activity_multiplier(profile.activity_level)
    calories = adjust_for_goal(tdee, goal)
    macros = default_macros(calories, profile.weight_lbs, goal)
    return DayTargets(
        calories=float(calories),
        protein=float(macros["protein"]),
        carbs=float(macros["carbs"]),
        fat=float(macros["fat"]),
        goal=goal,
        label=goal.upper(),
        rationale=_RATIONALES[goal],
    )
