"""Saved workout plan endpoints."""

from __future__ import annotations

from dataclasses import asdict
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, HTTPException, Request, status

from macro_tracker.api.days import totals_payload
from macro_tracker.api.deps import require_user
from macro_tracker.api.models import LogSavedWorkoutIn, SavedWorkoutIn

if TYPE_CHECKING:
    from macro_tracker.containers import AppContainer

router = APIRouter(prefix="/saved-workouts", tags=["saved-workouts"])


@router.get("")
async def list_saved_workouts(
    request: Request,
    user_id: str = Depends(require_user),
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    saved = container.saved_workout_service.list_saved(user_id)
    return {"saved_workouts": [asdict(item) for item in saved]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def save_workout(
    body: SavedWorkoutIn,
    request: Request,
    user_id: str = Depends(require_user),
) -> dict[str, object]:
    """Save a workout plan for later."""
    container: AppContainer = request.app.state.container
    saved = container.saved_workout_service.save_plan(user_id, body.name, body.plan)
    return {"saved_workout": asdict(saved)}


@router.delete("/{saved_id}")
async def remove_saved_workout(
    saved_id: str,
    request: Request,
    user_id: str = Depends(require_user),
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    if not container.saved_workout_service.remove(user_id, saved_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return {"deleted": saved_id}


@router.post("/{saved_id}/log", status_code=status.HTTP_201_CREATED)
async def log_saved_workout(
    saved_id: str,
    body: LogSavedWorkoutIn,
    request: Request,
    user_id: str = Depends(require_user),
) -> dict[str, object]:
    """Log a saved plan's items on a day, today by default."""
    container: AppContainer = request.app.state.container
    result = await container.saved_workout_service.log_to_day(
        user_id, saved_id, body.date_key
    )
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    entries, totals = result
    return {
        "workouts": [asdict(entry) for entry in entries],
        "totals": totals_payload(totals) if totals else None,
    }
