"""Day, food and workout endpoints."""

from __future__ import annotations

from dataclasses import asdict
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, HTTPException, Request, status

from macro_tracker.api.deps import require_user
from macro_tracker.api.models import (
    BulkWorkoutsIn,
    FoodEntryIn,
    LockIn,
    WorkoutEntryIn,
)

if TYPE_CHECKING:
    from macro_tracker.containers import AppContainer
    from macro_tracker.domain.days import DayRecord, DayTotals

router = APIRouter(tags=["days"])


@router.get("/days")
async def list_days(
    start: str,
    end: str,
    request: Request,
    user_id: str = Depends(require_user),
) -> dict[str, object]:
    """Return stored days in a date range."""
    container: AppContainer = request.app.state.container
    days = container.day_service.list_history(user_id, start, end)
    return {"days": [day_payload(day) for day in days]}


@router.get("/days/{date_key}")
async def get_day(
    date_key: str,
    request: Request,
    user_id: str = Depends(require_user),
) -> dict[str, object]:
    """Return a day, creating it on first access."""
    container: AppContainer = request.app.state.container
    day = await container.day_service.ensure_day(user_id, date_key)
    return day_payload(day)


@router.post("/days/{date_key}/recalc")
async def recalc_day(
    date_key: str,
    request: Request,
    user_id: str = Depends(require_user),
) -> dict[str, object]:
    """Recalculate a day's totals."""
    container: AppContainer = request.app.state.container
    totals = await container.day_service.recalc_day(user_id, date_key)
    return {"date_key": date_key, "totals": totals_payload(totals)}


@router.post("/days/{date_key}/lock")
async def lock_day(
    date_key: str,
    body: LockIn,
    request: Request,
    user_id: str = Depends(require_user),
) -> dict[str, object]:
    """Pin the day's remaining calories."""
    container: AppContainer = request.app.state.container
    totals = await container.day_service.lock_day(
        user_id, date_key, body.remaining_override
    )
    return {"date_key": date_key, "totals": totals_payload(totals)}


@router.delete("/days/{date_key}/lock")
async def unlock_day(
    date_key: str,
    request: Request,
    user_id: str = Depends(require_user),
) -> dict[str, object]:
    """Release a pinned remaining value."""
    container: AppContainer = request.app.state.container
    totals = await container.day_service.unlock_day(user_id, date_key)
    return {"date_key": date_key, "totals": totals_payload(totals)}


@router.get("/days/{date_key}/foods")
async def list_foods(
    date_key: str,
    request: Request,
    user_id: str = Depends(require_user),
) -> dict[str, object]:
    """Return the day's food entries."""
    container: AppContainer = request.app.state.container
    entries = container.entry_service.list_food_entries(user_id, date_key)
    return {"foods": [asdict(entry) for entry in entries]}


@router.post("/days/{date_key}/foods", status_code=status.HTTP_201_CREATED)
async def add_food(
    date_key: str,
    body: FoodEntryIn,
    request: Request,
    user_id: str = Depends(require_user),
) -> dict[str, object]:
    """Log a food entry."""
    container: AppContainer = request.app.state.container
    entry, totals = await container.entry_service.upsert_food_entry(
        user_id=user_id,
        date_key=date_key,
        description=body.description,
        calories=body.calories,
        protein=body.protein,
        carbs=body.carbs,
        fat=body.fat,
        source=body.source,
    )
    return {"food": asdict(entry), "totals": totals_payload(totals)}


@router.put("/foods/{entry_id}")
async def update_food(
    entry_id: str,
    body: FoodEntryIn,
    request: Request,
    user_id: str = Depends(require_user),
) -> dict[str, object]:
    """Update a food entry."""
    container: AppContainer = request.app.state.container
    entry, totals = await container.entry_service.upsert_food_entry(
        user_id=user_id,
        date_key=body.date_key,
        description=body.description,
        calories=body.calories,
        protein=body.protein,
        carbs=body.carbs,
        fat=body.fat,
        source=body.source,
        entry_id=entry_id,
    )
    return {"food": asdict(entry), "totals": totals_payload(totals)}


@router.delete("/foods/{entry_id}")
async def delete_food(
    entry_id: str,
    request: Request,
    user_id: str = Depends(require_user),
) -> dict[str, object]:
    """Delete a food entry."""
    container: AppContainer = request.app.state.container
    totals = await container.entry_service.delete_food_entry(user_id, entry_id)
    if totals is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return {"totals": totals_payload(totals)}


@router.get("/days/{date_key}/workouts")
async def list_workouts(
    date_key: str,
    request: Request,
    user_id: str = Depends(require_user),
) -> dict[str, object]:
    """Return the day's workout entries."""
    container: AppContainer = request.app.state.container
    entries = container.entry_service.list_workout_entries(user_id, date_key)
    return {"workouts": [asdict(entry) for entry in entries]}


@router.post("/days/{date_key}/workouts", status_code=status.HTTP_201_CREATED)
async def add_workout(
    date_key: str,
    body: WorkoutEntryIn,
    request: Request,
    user_id: str = Depends(require_user),
) -> dict[str, object]:
    """Log a workout entry."""
    container: AppContainer = request.app.state.container
    entry, totals = await container.entry_service.upsert_workout_entry(
        user_id=user_id,
        date_key=date_key,
        activity=body.activity,
        calories=body.calories_burned,
        minutes=body.minutes,
        intensity=body.intensity,
        source=body.source,
    )
    return {"workout": asdict(entry), "totals": totals_payload(totals)}


@router.post("/days/{date_key}/workouts/bulk", status_code=status.HTTP_201_CREATED)
async def bulk_add_workouts(
    date_key: str,
    body: BulkWorkoutsIn,
    request: Request,
    user_id: str = Depends(require_user),
) -> dict[str, object]:
    """Log several workouts at once."""
    container: AppContainer = request.app.state.container
    entries, totals = await container.entry_service.bulk_add_workouts(
        user_id, date_key, [item.model_dump() for item in body.items]
    )
    return {
        "workouts": [asdict(entry) for entry in entries],
        "totals": totals_payload(totals) if totals else None,
    }


@router.put("/workouts/{entry_id}")
async def update_workout(
    entry_id: str,
    body: WorkoutEntryIn,
    request: Request,
    user_id: str = Depends(require_user),
) -> dict[str, object]:
    """Update a workout entry."""
    container: AppContainer = request.app.state.container
    entry, totals = await container.entry_service.upsert_workout_entry(
        user_id=user_id,
        date_key=body.date_key,
        activity=body.activity,
        calories=body.calories_burned,
        minutes=body.minutes,
        intensity=body.intensity,
        source=body.source,
        entry_id=entry_id,
    )
    return {"workout": asdict(entry), "totals": totals_payload(totals)}


@router.delete("/workouts/{entry_id}")
async def delete_workout(
    entry_id: str,
    request: Request,
    user_id: str = Depends(require_user),
) -> dict[str, object]:
    """Delete a workout entry."""
    container: AppContainer = request.app.state.container
    totals = await container.entry_service.delete_workout_entry(user_id, entry_id)
    if totals is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return {"totals": totals_payload(totals)}


def totals_payload(totals: DayTotals) -> dict[str, object]:
    """Serialise totals with presentation hints."""
    return {
        **totals.to_payload(),
        "display_remaining": totals.display_remaining,
        "over_target": totals.over_target,
    }


def day_payload(day: DayRecord) -> dict[str, object]:
    """Serialise a day row."""
    return {
        "date_key": day.date_key,
        "targets": day.targets.to_payload() if day.targets else None,
        "totals": totals_payload(day.totals) if day.totals else None,
        "updated_at": day.updated_at.isoformat() if day.updated_at else None,
    }
