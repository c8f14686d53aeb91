"""
Time helpers.
Everything is stored as naive UTC; "today" is computed in the reference timezone.
"""
from datetime import datetime, time, timedelta
from typing import Optional, Tuple
import pytz
from ..config import settings
from ..models.models import utcnow


def to_naive_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Normalise a datetime for storage.

    Aware datetimes are converted to UTC; naive ones are assumed to be UTC already.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(pytz.UTC).replace(tzinfo=None)


def day_window(now: Optional[datetime] = None, tz_name: Optional[str] = None) -> Tuple[datetime, datetime]:
    """
    Get [start_of_day, end_of_day] of ``now`` in the reference timezone, as naive UTC.

    Args:
        now: Reference instant (aware, or naive UTC). Defaults to current time.
        tz_name: Timezone name (defaults to settings.tz_default)

    Returns:
        (start_utc, end_utc), both inclusive
    """
    tz = pytz.timezone(tz_name or settings.tz_default)
    if now is None:
        now = utcnow()
    if now.tzinfo is None:
        now = pytz.UTC.localize(now)
    local_date = now.astimezone(tz).date()
    start_local = tz.localize(datetime.combine(local_date, time.min))
    next_start_local = tz.localize(datetime.combine(local_date + timedelta(days=1), time.min))
    start_utc = start_local.astimezone(pytz.UTC).replace(tzinfo=None)
    end_utc = next_start_local.astimezone(pytz.UTC).replace(tzinfo=None) - timedelta(microseconds=1)
    return start_utc, end_utc
