import os
import time
from datetime import date, datetime, timedelta, timezone

import pytest

from fittrack.core import clock
from fittrack.core.config import settings
from fittrack.features.diet.service import diet_service
from fittrack.features.streaks.engine import DOMAINS, advance, update_streak
from fittrack.features.streaks.service import StreakService
from fittrack.features.streaks.store import streak_store
from fittrack.features.water.service import water_service
from fittrack.features.workouts.service import workout_service
from fittrack.models.activity import CreateMealRequest, CreateWorkoutRequest
from fittrack.models.streak import StreakRecord

DAY_ONE = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)


def log_workout(user_id: str, when: datetime) -> None:
    workout_service.create(user_id, CreateWorkoutRequest(type="running", duration=30, calories=250), now=when)


def log_meal(user_id: str, when: datetime) -> None:
    diet_service.create(user_id, CreateMealRequest(food_name="Oatmeal", calories=300), now=when)


def test_first_workout_starts_streak_at_one():
    log_workout("u1", DAY_ONE)
    record, outcome = update_streak("u1", "workout", now=DAY_ONE)

    assert outcome == "reset"
    assert record.workout_streak == 1
    assert record.last_workout_date == DAY_ONE


def test_consecutive_day_gap_and_reset_scenario():
    service = StreakService()
    day_two = DAY_ONE + timedelta(days=1)
    day_four = DAY_ONE + timedelta(days=3)

    log_workout("u2", DAY_ONE)
    assert service.record_activity("u2", "workout", now=DAY_ONE) == "reset"
    assert service.get_streaks("u2").workout_streak == 1

    log_workout("u2", day_two)
    assert service.record_activity("u2", "workout", now=day_two) == "incremented"
    assert service.get_streaks("u2").workout_streak == 2

    # Skip day three entirely
    log_workout("u2", day_four)
    assert service.record_activity("u2", "workout", now=day_four) == "reset"
    record = service.get_streaks("u2")
    assert record.workout_streak == 1
    assert record.last_workout_date == day_four


def test_second_activity_same_day_leaves_counter_unchanged():
    log_workout("u3", DAY_ONE)
    update_streak("u3", "workout", now=DAY_ONE)

    later = DAY_ONE + timedelta(hours=8)
    log_workout("u3", later)
    record, outcome = update_streak("u3", "workout", now=later)

    assert outcome == "unchanged"
    assert record.workout_streak == 1
    # The timestamp still moves forward within the day
    assert record.last_workout_date == later


def test_non_qualifying_day_does_not_create_or_touch_record():
    record, outcome = update_streak("u4", "workout", now=DAY_ONE)

    assert outcome == "not_qualified"
    assert record.workout_streak == 0
    assert streak_store.get("u4") is None


def test_gap_day_is_not_recorded_as_zero():
    log_workout("u5", DAY_ONE)
    update_streak("u5", "workout", now=DAY_ONE)

    # Nothing logged on day two: the updater is a no-op
    _, outcome = update_streak("u5", "workout", now=DAY_ONE + timedelta(days=1))
    assert outcome == "not_qualified"
    assert streak_store.get("u5").workout_streak == 1


def test_water_requires_four_glasses_and_rechecks_same_day():
    for hour in range(3):
        water_service.add_glass("u6", now=DAY_ONE + timedelta(hours=hour))
    _, outcome = update_streak("u6", "water", now=DAY_ONE + timedelta(hours=3))
    assert outcome == "not_qualified"
    assert streak_store.get("u6") is None

    fourth = DAY_ONE + timedelta(hours=4)
    water_service.add_glass("u6", now=fourth)
    record, outcome = update_streak("u6", "water", now=fourth)
    assert outcome == "reset"
    assert record.water_streak == 1
    assert record.last_water_date == fourth


def test_water_set_below_threshold_next_day_keeps_previous_streak():
    water_service.set_glasses("u7", 8, now=DAY_ONE)
    update_streak("u7", "water", now=DAY_ONE)

    day_two = DAY_ONE + timedelta(days=1)
    water_service.set_glasses("u7", 2, now=day_two)
    _, outcome = update_streak("u7", "water", now=day_two)

    assert outcome == "not_qualified"
    assert streak_store.get("u7").water_streak == 1


def test_updater_uses_call_time_not_record_date():
    planned_for = DAY_ONE + timedelta(days=3)
    diet_service.create(
        "u8",
        CreateMealRequest(food_name="Salmon", calories=500, date=planned_for),
        now=DAY_ONE,
    )

    # The planned meal is not dated today, so logging it does not qualify today
    _, outcome = update_streak("u8", "diet", now=DAY_ONE)
    assert outcome == "not_qualified"

    # A meal dated today does, and the streak advances relative to now
    log_meal("u8", DAY_ONE)
    record, outcome = update_streak("u8", "diet", now=DAY_ONE)
    assert outcome == "reset"
    assert record.last_diet_date == DAY_ONE


def test_domains_are_independent():
    log_workout("u9", DAY_ONE)
    log_meal("u9", DAY_ONE)
    update_streak("u9", "workout", now=DAY_ONE)
    update_streak("u9", "diet", now=DAY_ONE)

    day_two = DAY_ONE + timedelta(days=1)
    log_workout("u9", day_two)
    update_streak("u9", "workout", now=day_two)

    record = streak_store.get("u9")
    assert record.workout_streak == 2
    assert record.diet_streak == 1
    assert record.water_streak == 0
    assert record.last_water_date is None


@pytest.mark.parametrize(
    "last_offset_days, expected_counter, expected_outcome",
    [
        (1, 6, "incremented"),
        (0, 5, "unchanged"),
        (2, 1, "reset"),
        (10, 1, "reset"),
    ],
)
def test_advance_transition_table(last_offset_days, expected_counter, expected_outcome):
    now = datetime(2024, 3, 10, 7, 30, tzinfo=timezone.utc)
    record = StreakRecord(
        user_id="pure",
        diet_streak=5,
        last_diet_date=now - timedelta(days=last_offset_days),
    )

    updated, outcome = advance(record, DOMAINS["diet"], now)

    assert outcome == expected_outcome
    assert updated.diet_streak == expected_counter
    assert updated.last_diet_date == now
    # advance never saves and never mutates its input
    assert record.diet_streak == 5


def test_advance_from_empty_record_starts_at_one():
    updated, outcome = advance(StreakRecord(user_id="fresh"), DOMAINS["workout"], DAY_ONE)
    assert outcome == "reset"
    assert updated.workout_streak == 1


def test_yesterday_is_a_calendar_day_not_24_hours():
    late = datetime(2024, 1, 1, 23, 50, tzinfo=timezone.utc)
    early = datetime(2024, 1, 2, 0, 10, tzinfo=timezone.utc)

    log_workout("u10", late)
    update_streak("u10", "workout", now=late)
    log_workout("u10", early)
    record, outcome = update_streak("u10", "workout", now=early)

    assert outcome == "incremented"
    assert record.workout_streak == 2


@pytest.fixture(params=["configured", "system"])
def new_york(request, monkeypatch):
    """Run in America/New_York, either via APP_TIMEZONE or via the server's TZ."""
    if request.param == "configured":
        monkeypatch.setattr(settings, "APP_TIMEZONE", "America/New_York")
        yield
        return

    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    monkeypatch.setattr(settings, "APP_TIMEZONE", None)
    previous = os.environ.get("TZ")
    os.environ["TZ"] = "America/New_York"
    time.tzset()
    try:
        yield
    finally:
        if previous is None:
            os.environ.pop("TZ", None)
        else:
            os.environ["TZ"] = previous
        time.tzset()


def test_local_day_uses_zone_not_utc_date(new_york):
    # 23:30 EST on Jan 1
    assert clock.local_day(datetime(2024, 1, 2, 4, 30, tzinfo=timezone.utc)) == date(2024, 1, 1)
    # 23:30 EDT on Jul 1
    assert clock.local_day(datetime(2024, 7, 2, 3, 30, tzinfo=timezone.utc)) == date(2024, 7, 1)


def test_day_bounds_follow_dst(new_york):
    assert clock.day_bounds(date(2024, 1, 15)) == (
        datetime(2024, 1, 15, 5, 0, tzinfo=timezone.utc),
        datetime(2024, 1, 16, 5, 0, tzinfo=timezone.utc),
    )
    assert clock.day_bounds(date(2024, 7, 1)) == (
        datetime(2024, 7, 1, 4, 0, tzinfo=timezone.utc),
        datetime(2024, 7, 2, 4, 0, tzinfo=timezone.utc),
    )
    # Spring-forward day is 23 hours long
    start, end = clock.day_bounds(date(2024, 3, 10))
    assert start == datetime(2024, 3, 10, 5, 0, tzinfo=timezone.utc)
    assert end == datetime(2024, 3, 11, 4, 0, tzinfo=timezone.utc)


def test_late_evening_workout_counts_for_the_local_day(new_york):
    late_evening = datetime(2024, 1, 2, 4, 30, tzinfo=timezone.utc)  # Jan 1, 23:30 local
    next_morning = datetime(2024, 1, 2, 15, 0, tzinfo=timezone.utc)  # Jan 2, 10:00 local

    log_workout("tz1", late_evening)
    _, first = update_streak("tz1", "workout", now=late_evening)
    log_workout("tz1", next_morning)
    record, second = update_streak("tz1", "workout", now=next_morning)

    assert (first, second) == ("reset", "incremented")
    assert record.workout_streak == 2


def test_same_local_evening_spanning_utc_midnight_is_one_day(new_york):
    evening = datetime(2024, 1, 2, 1, 0, tzinfo=timezone.utc)  # Jan 1, 20:00 local
    later = datetime(2024, 1, 2, 4, 0, tzinfo=timezone.utc)  # Jan 1, 23:00 local

    log_workout("tz2", evening)
    update_streak("tz2", "workout", now=evening)
    log_workout("tz2", later)
    record, outcome = update_streak("tz2", "workout", now=later)

    assert outcome == "unchanged"
    assert record.workout_streak == 1


def test_streak_continues_across_dst_change(new_york):
    before = datetime(2024, 3, 10, 4, 30, tzinfo=timezone.utc)  # Mar 9, 23:30 EST
    after = datetime(2024, 3, 11, 3, 30, tzinfo=timezone.utc)  # Mar 10, 23:30 EDT

    log_meal("tz3", before)
    update_streak("tz3", "diet", now=before)
    log_meal("tz3", after)
    record, outcome = update_streak("tz3", "diet", now=after)

    assert outcome == "incremented"
    assert record.diet_streak == 2
