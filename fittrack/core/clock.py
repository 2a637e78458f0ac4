"""
Time helpers.

All timestamps are stored as aware UTC. Calendar-day questions ("did the user
work out today?") are answered in the application timezone: APP_TIMEZONE when
configured, otherwise the server's local zone.
"""

from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional, Tuple, Union
from zoneinfo import ZoneInfo

from fittrack.core.config import settings


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def app_timezone() -> Optional[tzinfo]:
    """The configured zone, or None for the system zone (resolved per instant, DST included)."""
    if settings.APP_TIMEZONE:
        return ZoneInfo(settings.APP_TIMEZONE)
    return None


def localize(wall_time: datetime) -> datetime:
    """Attach the application zone to a naive local wall-clock time."""
    tz = app_timezone()
    if tz is None:
        return wall_time.astimezone()
    return wall_time.replace(tzinfo=tz)


def ensure_utc(moment: Optional[datetime]) -> Optional[datetime]:
    """Normalize to aware UTC; naive values (e.g. read back from SQLite) are taken as UTC."""
    if moment is None:
        return None
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def from_user_input(moment: datetime) -> datetime:
    """Normalize a client-supplied timestamp; naive values are local wall time."""
    if moment.tzinfo is None:
        moment = localize(moment)
    return moment.astimezone(timezone.utc)


def local_day(moment: datetime) -> date:
    """Truncate an instant to its calendar day in the application timezone."""
    return ensure_utc(moment).astimezone(app_timezone()).date()


def day_bounds(day: date) -> Tuple[datetime, datetime]:
    """Half-open [start, end) UTC range covering one local calendar day."""
    start = localize(datetime.combine(day, time.min))
    end = localize(datetime.combine(day + timedelta(days=1), time.min))
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def _parse_moment(value: str) -> Union[date, datetime]:
    text = value.strip()
    if len(text) == 10:
        return date.fromisoformat(text)
    return datetime.fromisoformat(text.replace("Z", "+00:00"))


def range_bounds(start: str, end: str) -> Tuple[datetime, datetime]:
    """
    Turn user-supplied range ends into a half-open [start, end) UTC range.

    A bare date (YYYY-MM-DD) covers that whole local day; a timestamp is taken
    as-is and the end is inclusive.

    Raises:
        ValueError: either end is not an ISO date or timestamp
    """
    first = _parse_moment(start)
    last = _parse_moment(end)

    if isinstance(first, datetime):
        lower = first if first.tzinfo else localize(first)
        lower = lower.astimezone(timezone.utc)
    else:
        lower = day_bounds(first)[0]

    if isinstance(last, datetime):
        upper = last if last.tzinfo else localize(last)
        upper = upper.astimezone(timezone.utc) + timedelta(microseconds=1)
    else:
        upper = day_bounds(last)[1]

    return lower, upper
