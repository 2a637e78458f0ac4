"""Water intake endpoints. Setting or adding glasses re-checks the water streak."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from fittrack.api.params import parse_date_range
from fittrack.core.auth import get_current_user_id
from fittrack.core.metrics import activities_logged_total
from fittrack.features.streaks.service import streak_service
from fittrack.features.water.service import water_service
from fittrack.models.activity import SetWaterRequest, WaterIntake, WeeklyWaterSummary

router = APIRouter(prefix="/api/water", tags=["water"])


@router.get("", response_model=List[WaterIntake])
def list_water(user_id: str = Depends(get_current_user_id)):
    return water_service.list_recent(user_id)


@router.get("/range", response_model=List[WaterIntake])
def list_water_in_range(
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    user_id: str = Depends(get_current_user_id),
):
    start, end = parse_date_range(start_date, end_date)
    return water_service.list_range(user_id, start, end)


@router.get("/today", response_model=WaterIntake)
def today_water(user_id: str = Depends(get_current_user_id)):
    return water_service.today(user_id)


@router.get("/weekly", response_model=WeeklyWaterSummary)
def weekly_water(user_id: str = Depends(get_current_user_id)):
    return water_service.weekly_summary(user_id)


@router.post("", response_model=WaterIntake)
def set_water(body: SetWaterRequest, user_id: str = Depends(get_current_user_id)):
    record = water_service.set_glasses(user_id, body.glasses)
    activities_logged_total.inc(labels={"kind": "water"})
    streak_service.record_activity(user_id, "water")
    return record


@router.post("/add-glass", response_model=WaterIntake)
def add_glass(user_id: str = Depends(get_current_user_id)):
    record = water_service.add_glass(user_id)
    activities_logged_total.inc(labels={"kind": "water"})
    streak_service.record_activity(user_id, "water")
    return record
