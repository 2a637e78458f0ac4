"""Streak and badge endpoints."""

from typing import List

from fastapi import APIRouter, Depends

from fittrack.core.auth import get_current_user_id
from fittrack.features.streaks.service import streak_service
from fittrack.models.streak import (
    AddBadgeRequest,
    BadgeCheckResult,
    BadgeDefinition,
    StreakRecord,
    UpdateStreaksRequest,
)

router = APIRouter(prefix="/api/streaks", tags=["streaks"])


@router.get("", response_model=StreakRecord)
def get_streaks(user_id: str = Depends(get_current_user_id)):
    """Return the user's streaks, creating an empty record on first read."""
    return streak_service.get_streaks(user_id)


@router.put("/update", response_model=StreakRecord)
def update_streaks(body: UpdateStreaksRequest, user_id: str = Depends(get_current_user_id)):
    """Manual override of the counters (testing and admin use)."""
    return streak_service.set_streaks(
        user_id,
        workout_streak=body.workout_streak,
        water_streak=body.water_streak,
        diet_streak=body.diet_streak,
    )


@router.post("/badge", response_model=StreakRecord)
def add_badge(body: AddBadgeRequest, user_id: str = Depends(get_current_user_id)):
    return streak_service.add_badge(
        user_id,
        name=body.name,
        description=body.description,
        image=body.image,
    )


@router.get("/available-badges", response_model=List[BadgeDefinition])
def available_badges(user_id: str = Depends(get_current_user_id)):
    return streak_service.available_badges()


@router.post("/check-badges", response_model=BadgeCheckResult)
def check_badges(user_id: str = Depends(get_current_user_id)):
    return streak_service.check_badges(user_id)
