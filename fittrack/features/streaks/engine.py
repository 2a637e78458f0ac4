from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Dict, Optional, Tuple

from fittrack.core import clock
from fittrack.core.config import settings
from fittrack.features.diet.service import diet_service
from fittrack.features.streaks.store import StreakStore, streak_store
from fittrack.features.water.service import water_service
from fittrack.features.workouts.service import workout_service
from fittrack.models.streak import StreakDomain, StreakOutcome, StreakRecord


@dataclass(frozen=True)
class StreakDomainConfig:
    """What distinguishes one streak from another: the qualifying test and the fields it owns."""

    domain: StreakDomain
    qualifies: Callable[[str, date], bool]
    counter_field: str
    last_date_field: str


def _water_qualifies(user_id: str, day: date) -> bool:
    return water_service.glasses_on(user_id, day) >= settings.WATER_STREAK_MIN_GLASSES


DOMAINS: Dict[str, StreakDomainConfig] = {
    "workout": StreakDomainConfig(
        domain="workout",
        qualifies=lambda user_id, day: workout_service.has_workout_on(user_id, day),
        counter_field="workout_streak",
        last_date_field="last_workout_date",
    ),
    "water": StreakDomainConfig(
        domain="water",
        qualifies=_water_qualifies,
        counter_field="water_streak",
        last_date_field="last_water_date",
    ),
    "diet": StreakDomainConfig(
        domain="diet",
        qualifies=lambda user_id, day: diet_service.has_meal_on(user_id, day),
        counter_field="diet_streak",
        last_date_field="last_diet_date",
    ),
}


def advance(record: StreakRecord, config: StreakDomainConfig, now: datetime) -> Tuple[StreakRecord, StreakOutcome]:
    """
    Apply one qualifying day to `record`. Pure: the caller has already checked
    the domain predicate and is responsible for saving.

    Last advanced yesterday -> +1; last advanced today -> unchanged; anything
    else (never, or two+ days ago) -> restart at 1. The last date is set to the
    full `now` timestamp in every case.
    """
    today = clock.local_day(now)
    yesterday = today - timedelta(days=1)
    last: Optional[datetime] = getattr(record, config.last_date_field)
    last_day = clock.local_day(last) if last else None
    current = getattr(record, config.counter_field)

    if last_day == yesterday:
        outcome: StreakOutcome = "incremented"
        counter = current + 1
    elif last_day != today:
        outcome = "reset"
        counter = 1
    else:
        outcome = "unchanged"
        counter = current

    updated = record.model_copy(update={config.counter_field: counter, config.last_date_field: now})
    return updated, outcome


def update_streak(
    user_id: str,
    domain: StreakDomain,
    *,
    now: Optional[datetime] = None,
    store: Optional[StreakStore] = None,
) -> Tuple[StreakRecord, StreakOutcome]:
    """
    Recompute one domain's streak after an activity was logged.

    Always evaluates relative to `now` (the call time), not the date on the
    logged record. A non-qualifying day changes nothing and saves nothing.
    Errors propagate; callers that must not fail wrap this.
    """
    config = DOMAINS[domain]
    store = store or streak_store
    moment = clock.ensure_utc(now or clock.utc_now())
    today = clock.local_day(moment)

    with store.user_lock(user_id):
        record = store.load_or_new(user_id)
        if not config.qualifies(user_id, today):
            return record, "not_qualified"

        updated, outcome = advance(record, config, moment)
        return store.save(updated), outcome
