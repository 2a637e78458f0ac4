"""Workout log endpoints. Creating a workout advances the workout streak."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from fittrack.api.params import parse_date_range
from fittrack.core.auth import get_current_user_id
from fittrack.core.metrics import activities_logged_total
from fittrack.features.streaks.service import streak_service
from fittrack.features.workouts.service import workout_service
from fittrack.models.activity import CreateWorkoutRequest, UpdateWorkoutRequest, Workout

router = APIRouter(prefix="/api/workouts", tags=["workouts"])


@router.get("", response_model=List[Workout])
def list_workouts(user_id: str = Depends(get_current_user_id)):
    return workout_service.list_recent(user_id)


@router.get("/range", response_model=List[Workout])
def list_workouts_in_range(
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    user_id: str = Depends(get_current_user_id),
):
    start, end = parse_date_range(start_date, end_date)
    return workout_service.list_range(user_id, start, end)


@router.post("", response_model=Workout, status_code=201)
def create_workout(body: CreateWorkoutRequest, user_id: str = Depends(get_current_user_id)):
    workout = workout_service.create(user_id, body)
    activities_logged_total.inc(labels={"kind": "workout"})
    streak_service.record_activity(user_id, "workout")
    return workout


@router.put("/{workout_id}", response_model=Workout)
def update_workout(workout_id: str, body: UpdateWorkoutRequest, user_id: str = Depends(get_current_user_id)):
    return workout_service.update(user_id, workout_id, body)


@router.delete("/{workout_id}")
def delete_workout(workout_id: str, user_id: str = Depends(get_current_user_id)):
    workout_service.delete(user_id, workout_id)
    return {"message": "Workout deleted successfully"}
