"""Target endpoints."""

from __future__ import annotations

from dataclasses import asdict
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Request, status

from macro_tracker.api.days import totals_payload
from macro_tracker.api.deps import require_user
from macro_tracker.api.models import SuggestTargetsIn, TargetsIn
from macro_tracker.domain.days import DayTargets
from macro_tracker.domain.targets import Profile
from macro_tracker.services.goals import short_goal_label, suggest_targets

if TYPE_CHECKING:
    from macro_tracker.containers import AppContainer

router = APIRouter(tags=["targets"])


@router.get("/days/{date_key}/targets")
async def get_targets(
    date_key: str,
    request: Request,
    user_id: str = Depends(require_user),
) -> dict[str, object]:
    """Return the target governing a day."""
    container: AppContainer = request.app.state.container
    targets = await container.target_service.get_active_target(user_id, date_key)
    return {
        "date_key": date_key,
        "targets": targets.to_payload() if targets else None,
        "goal_label": short_goal_label(targets),
    }


@router.put("/days/{date_key}/targets")
async def save_targets(
    date_key: str,
    body: TargetsIn,
    request: Request,
    user_id: str = Depends(require_user),
) -> dict[str, object]:
    """Apply targets to a day and rebuild its totals."""
    container: AppContainer = request.app.state.container
    targets = DayTargets(**body.model_dump())
    totals = await container.target_service.save_target_for_day(
        user_id, date_key, targets
    )
    return {
        "date_key": date_key,
        "targets": targets.to_payload(),
        "totals": totals_payload(totals),
    }


@router.post("/targets", status_code=status.HTTP_201_CREATED)
async def save_standing_target(
    body: TargetsIn,
    request: Request,
    user_id: str = Depends(require_user),
) -> dict[str, object]:
    """Record a standing target used by days without their own target."""
    container: AppContainer = request.app.state.container
    record = container.target_service.save_standing_target(
        user_id, DayTargets(**body.model_dump())
    )
    return {"target": asdict(record)}


@router.post("/targets/suggest")
async def suggest(body: SuggestTargetsIn) -> dict[str, object]:
    """Suggest targets from body metrics and a goal description."""
    profile = Profile(
        sex=body.sex,
        age=body.age,
        height_in=body.height_in,
        weight_lbs=body.weight_lbs,
        activity_level=body.activity_level,
    )
    return {"targets": suggest_targets(profile, body.goal_text).to_payload()}
