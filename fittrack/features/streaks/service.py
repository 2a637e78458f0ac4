from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fittrack.core import clock
from fittrack.core.errors import BadgeExistsError, ValidationError
from fittrack.core.logging import log_event
from fittrack.core.metrics import badges_awarded_total, streak_updates_total
from fittrack.features.streaks import badges as badge_rules
from fittrack.features.streaks.engine import update_streak
from fittrack.features.streaks.store import StreakStore, streak_store
from fittrack.models.streak import (
    Badge,
    BadgeCheckResult,
    BadgeDefinition,
    StreakDomain,
    StreakOutcome,
    StreakRecord,
)


class StreakService:
    """Streak counters and badges for one user at a time, backed by a StreakStore."""

    def __init__(self, store: Optional[StreakStore] = None):
        self._store = store or streak_store

    def get_streaks(self, user_id: str) -> StreakRecord:
        """Return the user's record, persisting an empty one on first read."""
        return self._store.get_or_create(user_id)

    def record_activity(
        self,
        user_id: str,
        domain: StreakDomain,
        *,
        now: Optional[datetime] = None,
    ) -> Optional[StreakOutcome]:
        """
        Best-effort streak update after an activity record was saved.

        Never raises: a failure is logged and counted, and the caller's request
        carries on. Returns None when the update failed.
        """
        try:
            record, outcome = update_streak(user_id, domain, now=now, store=self._store)
        except Exception as exc:
            streak_updates_total.inc(labels={"domain": domain, "outcome": "failed"})
            log_event(
                "error",
                "streak.update_failed",
                user_id=user_id,
                domain=domain,
                event_type="streak.update_failed",
                error_code=getattr(exc, "code", type(exc).__name__),
                extra={"error": exc},
                exc_info=True,
            )
            return None

        streak_updates_total.inc(labels={"domain": domain, "outcome": outcome})
        if outcome != "not_qualified":
            log_event(
                "info",
                "streak.updated",
                user_id=user_id,
                domain=domain,
                event_type="streak.updated",
                extra={"outcome": outcome, "value": getattr(record, f"{domain}_streak")},
            )
        return outcome

    def set_streaks(
        self,
        user_id: str,
        *,
        workout_streak: Optional[int] = None,
        water_streak: Optional[int] = None,
        diet_streak: Optional[int] = None,
    ) -> StreakRecord:
        """Overwrite any supplied counters; last dates are left alone."""
        changes = {
            "workout_streak": workout_streak,
            "water_streak": water_streak,
            "diet_streak": diet_streak,
        }
        changes = {k: v for k, v in changes.items() if v is not None}
        for field, value in changes.items():
            if value < 0:
                raise ValidationError(f"{field} must be a non-negative integer")

        with self._store.user_lock(user_id):
            record = self._store.load_or_new(user_id)
            saved = self._store.save(record.model_copy(update=changes))

        log_event("info", "streak.overridden", user_id=user_id, event_type="streak.overridden", extra=changes)
        return saved

    def add_badge(
        self,
        user_id: str,
        *,
        name: Optional[str],
        description: Optional[str],
        image: Optional[str],
        now: Optional[datetime] = None,
    ) -> StreakRecord:
        """
        Award an arbitrary badge.

        Raises:
            ValidationError: a field is missing or blank
            BadgeExistsError: the user already holds a badge with this name
        """
        if not (name and name.strip()) or not (description and description.strip()) or not (image and image.strip()):
            raise ValidationError("Name, description, and image are required")

        moment = clock.ensure_utc(now or clock.utc_now())
        with self._store.user_lock(user_id):
            record = self._store.load_or_new(user_id)
            if record.has_badge(name):
                raise BadgeExistsError("Badge already exists")
            badge = Badge(name=name, description=description, image=image, earned_date=moment)
            saved = self._store.save(record.model_copy(update={"badges": list(record.badges) + [badge]}))

        badges_awarded_total.inc(labels={"badge": name, "source": "manual"})
        log_event("info", "badges.awarded", user_id=user_id, event_type="badges.awarded", extra={"badges": [name], "source": "manual"})
        return saved

    def check_badges(self, user_id: str, *, now: Optional[datetime] = None) -> BadgeCheckResult:
        """
        Award any streak badges whose threshold is now met.

        No stored record is not an error: the result just says so. The record
        is saved once, and only if something new was awarded.
        """
        moment = clock.ensure_utc(now or clock.utc_now())
        with self._store.user_lock(user_id):
            record = self._store.get(user_id)
            if record is None:
                return BadgeCheckResult(message="No streaks found")

            updated, new_badges = badge_rules.evaluate(record, moment)
            if new_badges:
                updated = self._store.save(updated)

        for name in new_badges:
            badges_awarded_total.inc(labels={"badge": name, "source": "streak"})
        if new_badges:
            log_event("info", "badges.awarded", user_id=user_id, event_type="badges.awarded", extra={"badges": new_badges, "source": "streak"})
        return BadgeCheckResult(new_badges=new_badges, streak=updated)

    def available_badges(self) -> List[BadgeDefinition]:
        return badge_rules.available_badges()


# Singleton service used by routes
streak_service = StreakService()
