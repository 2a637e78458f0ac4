"""Shared query-parameter parsing for the activity routers."""

from datetime import datetime
from typing import Optional, Tuple

from fittrack.core.clock import range_bounds
from fittrack.core.errors import ValidationError


def parse_date_range(start_date: Optional[str], end_date: Optional[str]) -> Tuple[datetime, datetime]:
    """Validate ?start_date&end_date and return a half-open UTC range."""
    if not start_date or not end_date:
        raise ValidationError("Start date and end date are required")
    try:
        return range_bounds(start_date, end_date)
    except ValueError:
        raise ValidationError("Start date and end date must be ISO dates or timestamps")
