"""Meal log endpoints. Creating a meal advances the diet streak."""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from fittrack.api.params import parse_date_range
from fittrack.core.auth import get_current_user_id
from fittrack.core.metrics import activities_logged_total
from fittrack.features.diet.service import diet_service
from fittrack.features.streaks.service import streak_service
from fittrack.models.activity import CreateMealRequest, Meal, MealSummary, UpdateMealRequest

router = APIRouter(prefix="/api/diet", tags=["diet"])


@router.get("", response_model=List[Meal])
def list_meals(user_id: str = Depends(get_current_user_id)):
    return diet_service.list_recent(user_id)


@router.get("/range", response_model=List[Meal])
def list_meals_in_range(
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    user_id: str = Depends(get_current_user_id),
):
    start, end = parse_date_range(start_date, end_date)
    return diet_service.list_range(user_id, start, end)


@router.get("/date/{day}", response_model=List[Meal])
def list_meals_for_day(day: date, user_id: str = Depends(get_current_user_id)):
    return diet_service.list_for_day(user_id, day)


@router.get("/summary/{day}", response_model=MealSummary)
def daily_summary(day: date, user_id: str = Depends(get_current_user_id)):
    return diet_service.daily_summary(user_id, day)


@router.post("", response_model=Meal, status_code=201)
def create_meal(body: CreateMealRequest, user_id: str = Depends(get_current_user_id)):
    meal = diet_service.create(user_id, body)
    activities_logged_total.inc(labels={"kind": "meal"})
    # Runs against today even when the meal is planned for another day
    streak_service.record_activity(user_id, "diet")
    return meal


@router.put("/{meal_id}", response_model=Meal)
def update_meal(meal_id: str, body: UpdateMealRequest, user_id: str = Depends(get_current_user_id)):
    return diet_service.update(user_id, meal_id, body)


@router.delete("/{meal_id}")
def delete_meal(meal_id: str, user_id: str = Depends(get_current_user_id)):
    diet_service.delete(user_id, meal_id)
    return {"message": "Meal deleted successfully"}
