"""
Meal log service.

Meals carry their own date (the planner can schedule them ahead), but the diet
streak only looks at meals dated today.
"""

import uuid
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import delete, insert, select, update

from fittrack.core import clock
from fittrack.core.config import settings
from fittrack.core.database import get_db_session, meals
from fittrack.core.errors import NotFoundError, ValidationError
from fittrack.models.activity import MEAL_TYPES, CreateMealRequest, Meal, MealSummary, UpdateMealRequest


def _row_to_meal(row) -> Meal:
    return Meal(
        id=row.id,
        user_id=row.user_id,
        food_name=row.food_name,
        calories=row.calories,
        meal_type=row.meal_type,
        date=clock.ensure_utc(row.date),
        image=row.image or "",
        quantity=row.quantity or "1 serving",
    )


class DietService:
    def list_recent(self, user_id: str, limit: Optional[int] = None) -> List[Meal]:
        with get_db_session() as session:
            rows = session.execute(
                select(meals)
                .where(meals.c.user_id == user_id)
                .order_by(meals.c.date.desc())
                .limit(limit or settings.RECENT_MEALS_LIMIT)
            ).all()
        return [_row_to_meal(r) for r in rows]

    def list_range(self, user_id: str, start: datetime, end: datetime) -> List[Meal]:
        with get_db_session() as session:
            rows = session.execute(
                select(meals)
                .where(meals.c.user_id == user_id)
                .where(meals.c.date >= clock.ensure_utc(start))
                .where(meals.c.date < clock.ensure_utc(end))
                .order_by(meals.c.date.desc())
            ).all()
        return [_row_to_meal(r) for r in rows]

    def list_for_day(self, user_id: str, day: date) -> List[Meal]:
        """Meals on one calendar day, earliest first."""
        start, end = clock.day_bounds(day)
        with get_db_session() as session:
            rows = session.execute(
                select(meals)
                .where(meals.c.user_id == user_id)
                .where(meals.c.date >= start)
                .where(meals.c.date < end)
                .order_by(meals.c.date.asc())
            ).all()
        return [_row_to_meal(r) for r in rows]

    def daily_summary(self, user_id: str, day: date) -> MealSummary:
        day_meals = self.list_for_day(user_id, day)
        return MealSummary(
            total_calories=sum(m.calories for m in day_meals),
            meal_count=len(day_meals),
            meals_by_type={t: [m for m in day_meals if m.meal_type == t] for t in MEAL_TYPES},
        )

    def create(self, user_id: str, body: CreateMealRequest, *, now: Optional[datetime] = None) -> Meal:
        when = clock.from_user_input(body.date) if body.date else clock.ensure_utc(now or clock.utc_now())
        meal = Meal(
            id=str(uuid.uuid4()),
            user_id=user_id,
            food_name=body.food_name,
            calories=body.calories,
            meal_type=body.meal_type or "breakfast",
            date=when,
            image=body.image or "",
            quantity=body.quantity or "1 serving",
        )
        with get_db_session() as session:
            session.execute(insert(meals).values(**meal.model_dump()))
        return meal

    def update(self, user_id: str, meal_id: str, body: UpdateMealRequest) -> Meal:
        changes = body.model_dump(exclude_none=True)
        if "food_name" in changes:
            changes["food_name"] = changes["food_name"].strip()
            if not changes["food_name"]:
                raise ValidationError("Food name is required")
        with get_db_session() as session:
            owned = (meals.c.id == meal_id) & (meals.c.user_id == user_id)
            if changes:
                session.execute(update(meals).where(owned).values(**changes))
            row = session.execute(select(meals).where(owned)).first()
            if not row:
                raise NotFoundError("Meal not found")
            return _row_to_meal(row)

    def delete(self, user_id: str, meal_id: str) -> None:
        with get_db_session() as session:
            result = session.execute(
                delete(meals).where((meals.c.id == meal_id) & (meals.c.user_id == user_id))
            )
            if result.rowcount == 0:
                raise NotFoundError("Meal not found")

    def has_meal_on(self, user_id: str, day: date) -> bool:
        start, end = clock.day_bounds(day)
        with get_db_session() as session:
            row = session.execute(
                select(meals.c.id)
                .where(meals.c.user_id == user_id)
                .where(meals.c.date >= start)
                .where(meals.c.date < end)
                .limit(1)
            ).first()
        return row is not None


diet_service = DietService()
