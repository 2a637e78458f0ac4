"""Activity record models: workouts, meals and water intake."""

from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

WorkoutType = Literal["cardio", "strength", "yoga", "running", "cycling", "swimming", "other"]
MealType = Literal["breakfast", "lunch", "dinner", "snack"]

MEAL_TYPES: tuple = ("breakfast", "lunch", "dinner", "snack")


class Workout(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    type: WorkoutType
    duration: float = Field(description="Minutes")
    calories: float
    date: datetime
    image: str = ""
    notes: str = ""


class Meal(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    food_name: str
    calories: float
    meal_type: MealType = "breakfast"
    date: datetime
    image: str = ""
    quantity: str = "1 serving"


class WaterIntake(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None  # None for the "nothing logged today" placeholder
    user_id: str
    glasses: int
    date: datetime


# Request/Response models

class CreateWorkoutRequest(BaseModel):
    type: WorkoutType
    duration: float = Field(ge=0)
    calories: float = Field(ge=0)
    date: Optional[datetime] = None
    image: Optional[str] = None
    notes: Optional[str] = None


class UpdateWorkoutRequest(BaseModel):
    type: Optional[WorkoutType] = None
    duration: Optional[float] = Field(default=None, ge=0)
    calories: Optional[float] = Field(default=None, ge=0)
    image: Optional[str] = None
    notes: Optional[str] = None


class CreateMealRequest(BaseModel):
    food_name: str = Field(min_length=1)
    calories: float = Field(ge=0)
    meal_type: Optional[MealType] = None
    # The meal planner can schedule meals for another day
    date: Optional[datetime] = None
    image: Optional[str] = None
    quantity: Optional[str] = None

    @field_validator("food_name")
    @classmethod
    def _strip_food_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Food name is required")
        return value


class UpdateMealRequest(BaseModel):
    food_name: Optional[str] = None
    calories: Optional[float] = Field(default=None, ge=0)
    meal_type: Optional[MealType] = None
    image: Optional[str] = None
    quantity: Optional[str] = None


class SetWaterRequest(BaseModel):
    # Range is checked against WATER_MAX_GLASSES by the water service
    glasses: int


class MealSummary(BaseModel):
    total_calories: float
    meal_count: int
    meals_by_type: Dict[str, List[Meal]]


class WeeklyWaterSummary(BaseModel):
    total_glasses: int
    average_glasses: float
    days_with_water: int
    weekly_data: List[WaterIntake]
