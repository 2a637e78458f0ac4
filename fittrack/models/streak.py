from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

StreakDomain = Literal["workout", "water", "diet"]
StreakOutcome = Literal["incremented", "reset", "unchanged", "not_qualified"]
RequirementType = Literal["workout", "workout_streak", "water_streak", "diet_streak", "meal_count"]


class Badge(BaseModel):
    """A badge a user has earned. Never revoked."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    image: str
    earned_date: datetime


class StreakRecord(BaseModel):
    """
    Per-user streak counters and earned badges.

    last_*_date hold the full timestamp of the last advancing event; they are
    compared at calendar-day granularity.
    """

    user_id: str
    workout_streak: int = Field(default=0, ge=0)
    water_streak: int = Field(default=0, ge=0)
    diet_streak: int = Field(default=0, ge=0)
    last_workout_date: Optional[datetime] = None
    last_water_date: Optional[datetime] = None
    last_diet_date: Optional[datetime] = None
    badges: List[Badge] = Field(default_factory=list)
    # Compare-and-swap counter for the store; never serialized
    version: int = Field(default=0, exclude=True)

    def has_badge(self, name: str) -> bool:
        return any(badge.name == name for badge in self.badges)


class BadgeRequirement(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: RequirementType
    count: int


class BadgeDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    image: str
    requirement: BadgeRequirement


class BadgeCheckResult(BaseModel):
    new_badges: List[str] = Field(default_factory=list)
    streak: Optional[StreakRecord] = None
    message: Optional[str] = None


# Request models

class UpdateStreaksRequest(BaseModel):
    workout_streak: Optional[int] = Field(default=None, ge=0)
    water_streak: Optional[int] = Field(default=None, ge=0)
    diet_streak: Optional[int] = Field(default=None, ge=0)


class AddBadgeRequest(BaseModel):
    # Presence is checked by the service so a blank field gets the same message as a missing one
    name: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
