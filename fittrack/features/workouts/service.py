"""
Workout log service.

- list_recent / list_range
- create / update / delete (owner-scoped)
- has_workout_on(user_id, day): streak predicate
"""

import uuid
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import delete, insert, select, update

from fittrack.core import clock
from fittrack.core.config import settings
from fittrack.core.database import get_db_session, workouts
from fittrack.core.errors import NotFoundError
from fittrack.models.activity import CreateWorkoutRequest, UpdateWorkoutRequest, Workout


def _row_to_workout(row) -> Workout:
    return Workout(
        id=row.id,
        user_id=row.user_id,
        type=row.type,
        duration=row.duration,
        calories=row.calories,
        date=clock.ensure_utc(row.date),
        image=row.image or "",
        notes=row.notes or "",
    )


class WorkoutService:
    def list_recent(self, user_id: str, limit: Optional[int] = None) -> List[Workout]:
        with get_db_session() as session:
            rows = session.execute(
                select(workouts)
                .where(workouts.c.user_id == user_id)
                .order_by(workouts.c.date.desc())
                .limit(limit or settings.RECENT_WORKOUTS_LIMIT)
            ).all()
        return [_row_to_workout(r) for r in rows]

    def list_range(self, user_id: str, start: datetime, end: datetime) -> List[Workout]:
        """Workouts with start <= date < end, newest first."""
        with get_db_session() as session:
            rows = session.execute(
                select(workouts)
                .where(workouts.c.user_id == user_id)
                .where(workouts.c.date >= clock.ensure_utc(start))
                .where(workouts.c.date < clock.ensure_utc(end))
                .order_by(workouts.c.date.desc())
            ).all()
        return [_row_to_workout(r) for r in rows]

    def create(self, user_id: str, body: CreateWorkoutRequest, *, now: Optional[datetime] = None) -> Workout:
        when = clock.from_user_input(body.date) if body.date else clock.ensure_utc(now or clock.utc_now())
        workout = Workout(
            id=str(uuid.uuid4()),
            user_id=user_id,
            type=body.type,
            duration=body.duration,
            calories=body.calories,
            date=when,
            image=body.image or "",
            notes=body.notes or "",
        )
        with get_db_session() as session:
            session.execute(insert(workouts).values(**workout.model_dump()))
        return workout

    def update(self, user_id: str, workout_id: str, body: UpdateWorkoutRequest) -> Workout:
        changes = body.model_dump(exclude_none=True)
        with get_db_session() as session:
            owned = (workouts.c.id == workout_id) & (workouts.c.user_id == user_id)
            if changes:
                session.execute(update(workouts).where(owned).values(**changes))
            row = session.execute(select(workouts).where(owned)).first()
            if not row:
                raise NotFoundError("Workout not found")
            return _row_to_workout(row)

    def delete(self, user_id: str, workout_id: str) -> None:
        with get_db_session() as session:
            result = session.execute(
                delete(workouts).where((workouts.c.id == workout_id) & (workouts.c.user_id == user_id))
            )
            if result.rowcount == 0:
                raise NotFoundError("Workout not found")

    def has_workout_on(self, user_id: str, day: date) -> bool:
        start, end = clock.day_bounds(day)
        with get_db_session() as session:
            row = session.execute(
                select(workouts.c.id)
                .where(workouts.c.user_id == user_id)
                .where(workouts.c.date >= start)
                .where(workouts.c.date < end)
                .limit(1)
            ).first()
        return row is not None


workout_service = WorkoutService()
