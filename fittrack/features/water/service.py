"""
Water intake service.

One record per user per calendar day: setting or adding glasses updates
today's record in place, creating it on first use.
"""

import uuid
from datetime import date, datetime, timedelta
from typing import List, Optional

from sqlalchemy import insert, select, update

from fittrack.core import clock
from fittrack.core.config import settings
from fittrack.core.database import get_db_session, water_intake
from fittrack.core.errors import ValidationError
from fittrack.models.activity import WaterIntake, WeeklyWaterSummary


def _row_to_water(row) -> WaterIntake:
    return WaterIntake(
        id=row.id,
        user_id=row.user_id,
        glasses=row.glasses,
        date=clock.ensure_utc(row.date),
    )


class WaterService:
    def list_recent(self, user_id: str, limit: Optional[int] = None) -> List[WaterIntake]:
        with get_db_session() as session:
            rows = session.execute(
                select(water_intake)
                .where(water_intake.c.user_id == user_id)
                .order_by(water_intake.c.date.desc())
                .limit(limit or settings.RECENT_WATER_LIMIT)
            ).all()
        return [_row_to_water(r) for r in rows]

    def list_range(self, user_id: str, start: datetime, end: datetime) -> List[WaterIntake]:
        with get_db_session() as session:
            rows = session.execute(
                select(water_intake)
                .where(water_intake.c.user_id == user_id)
                .where(water_intake.c.date >= clock.ensure_utc(start))
                .where(water_intake.c.date < clock.ensure_utc(end))
                .order_by(water_intake.c.date.desc())
            ).all()
        return [_row_to_water(r) for r in rows]

    def get_for_day(self, user_id: str, day: date) -> Optional[WaterIntake]:
        start, end = clock.day_bounds(day)
        with get_db_session() as session:
            row = session.execute(
                select(water_intake)
                .where(water_intake.c.user_id == user_id)
                .where(water_intake.c.date >= start)
                .where(water_intake.c.date < end)
                .order_by(water_intake.c.date.asc())
                .limit(1)
            ).first()
        return _row_to_water(row) if row else None

    def today(self, user_id: str, *, now: Optional[datetime] = None) -> WaterIntake:
        """Today's record, or a zero-glass placeholder (not persisted)."""
        moment = clock.ensure_utc(now or clock.utc_now())
        existing = self.get_for_day(user_id, clock.local_day(moment))
        return existing or WaterIntake(user_id=user_id, glasses=0, date=moment)

    def set_glasses(self, user_id: str, glasses: int, *, now: Optional[datetime] = None) -> WaterIntake:
        if glasses < 0 or glasses > settings.WATER_MAX_GLASSES:
            raise ValidationError(f"Glasses must be between 0 and {settings.WATER_MAX_GLASSES}")
        return self._upsert_today(user_id, lambda _current: glasses, now=now)

    def add_glass(self, user_id: str, *, now: Optional[datetime] = None) -> WaterIntake:
        return self._upsert_today(
            user_id,
            lambda current: min(current + 1, settings.WATER_MAX_GLASSES),
            now=now,
        )

    def _upsert_today(self, user_id: str, next_glasses, *, now: Optional[datetime]) -> WaterIntake:
        moment = clock.ensure_utc(now or clock.utc_now())
        existing = self.get_for_day(user_id, clock.local_day(moment))
        with get_db_session() as session:
            if existing:
                glasses = next_glasses(existing.glasses)
                session.execute(
                    update(water_intake).where(water_intake.c.id == existing.id).values(glasses=glasses)
                )
                return existing.model_copy(update={"glasses": glasses})

            record = WaterIntake(
                id=str(uuid.uuid4()),
                user_id=user_id,
                glasses=next_glasses(0),
                date=moment,
            )
            session.execute(insert(water_intake).values(**record.model_dump()))
            return record

    def weekly_summary(self, user_id: str, *, now: Optional[datetime] = None) -> WeeklyWaterSummary:
        moment = clock.ensure_utc(now or clock.utc_now())
        with get_db_session() as session:
            rows = session.execute(
                select(water_intake)
                .where(water_intake.c.user_id == user_id)
                .where(water_intake.c.date >= moment - timedelta(days=7))
                .where(water_intake.c.date <= moment)
                .order_by(water_intake.c.date.asc())
            ).all()
        week = [_row_to_water(r) for r in rows]
        total = sum(w.glasses for w in week)
        return WeeklyWaterSummary(
            total_glasses=total,
            average_glasses=round(total / len(week), 1) if week else 0,
            days_with_water=len(week),
            weekly_data=week,
        )

    def glasses_on(self, user_id: str, day: date) -> int:
        record = self.get_for_day(user_id, day)
        return record.glasses if record else 0


water_service = WaterService()
