"""
Persistence for per-user streak records.

A record with version 0 has never been saved. Every save bumps the version and
is a compare-and-swap against the stored one, so two writers that read the
same version cannot both win.
"""

import threading
from contextlib import contextmanager
from typing import Iterator, Optional, Tuple

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError

from fittrack.core.clock import ensure_utc
from fittrack.core.database import get_db_session, streak_badges, streaks
from fittrack.core.errors import ConflictError
from fittrack.models.streak import Badge, StreakRecord


# Users share a fixed pool of locks; two users on one stripe just wait on each other.
LOCK_STRIPES = 64


class StreakStore:
    """SQL-backed StreakRecord store with in-process per-user locking."""

    def __init__(self, lock_stripes: int = LOCK_STRIPES):
        self._locks: Tuple[threading.Lock, ...] = tuple(threading.Lock() for _ in range(lock_stripes))

    @contextmanager
    def user_lock(self, user_id: str) -> Iterator[None]:
        """Serialize read-modify-write sequences for one user within this process."""
        with self.lock_for(user_id):
            yield

    def lock_for(self, user_id: str) -> threading.Lock:
        return self._locks[hash(user_id) % len(self._locks)]

    def get(self, user_id: str) -> Optional[StreakRecord]:
        with get_db_session() as session:
            row = session.execute(select(streaks).where(streaks.c.user_id == user_id)).first()
            if not row:
                return None
            badge_rows = session.execute(
                select(streak_badges)
                .where(streak_badges.c.user_id == user_id)
                .order_by(streak_badges.c.position)
            ).all()

        return StreakRecord(
            user_id=row.user_id,
            workout_streak=row.workout_streak,
            water_streak=row.water_streak,
            diet_streak=row.diet_streak,
            last_workout_date=ensure_utc(row.last_workout_date),
            last_water_date=ensure_utc(row.last_water_date),
            last_diet_date=ensure_utc(row.last_diet_date),
            badges=[
                Badge(
                    name=b.name,
                    description=b.description,
                    image=b.image,
                    earned_date=ensure_utc(b.earned_date),
                )
                for b in badge_rows
            ],
            version=row.version,
        )

    def load_or_new(self, user_id: str) -> StreakRecord:
        """Return the stored record, or an unsaved empty one."""
        return self.get(user_id) or StreakRecord(user_id=user_id)

    def get_or_create(self, user_id: str) -> StreakRecord:
        """Return the stored record, persisting an empty one first if absent."""
        existing = self.get(user_id)
        if existing:
            return existing
        try:
            return self.save(StreakRecord(user_id=user_id))
        except ConflictError:
            # Another request created it between our read and insert
            return self.get(user_id)

    def save(self, record: StreakRecord) -> StreakRecord:
        """
        Persist counters, dates and any badges not yet stored.

        Raises:
            ConflictError: the stored version moved on since `record` was read
        """
        values = {
            "workout_streak": record.workout_streak,
            "water_streak": record.water_streak,
            "diet_streak": record.diet_streak,
            "last_workout_date": ensure_utc(record.last_workout_date),
            "last_water_date": ensure_utc(record.last_water_date),
            "last_diet_date": ensure_utc(record.last_diet_date),
            "version": record.version + 1,
        }
        try:
            with get_db_session() as session:
                if record.version == 0:
                    session.execute(insert(streaks).values(user_id=record.user_id, **values))
                else:
                    result = session.execute(
                        update(streaks)
                        .where(streaks.c.user_id == record.user_id)
                        .where(streaks.c.version == record.version)
                        .values(**values)
                    )
                    if result.rowcount != 1:
                        raise ConflictError(f"Streak record for {record.user_id} was modified concurrently")

                stored_names = set(
                    session.execute(
                        select(streak_badges.c.name).where(streak_badges.c.user_id == record.user_id)
                    ).scalars()
                )
                for position, badge in enumerate(record.badges):
                    if badge.name in stored_names:
                        continue
                    session.execute(
                        insert(streak_badges).values(
                            user_id=record.user_id,
                            name=badge.name,
                            description=badge.description,
                            image=badge.image,
                            earned_date=ensure_utc(badge.earned_date),
                            position=position,
                        )
                    )
        except IntegrityError:
            raise ConflictError(f"Streak record for {record.user_id} was modified concurrently")

        return record.model_copy(update={"version": record.version + 1})


# Singleton store used by the services
streak_store = StreakStore()
