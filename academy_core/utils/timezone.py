"""Timezone utilities for reliable UTC handling."""

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from academy_core.core.settings import settings

LOCAL_TZ = ZoneInfo(settings.timezone)


def now_utc() -> datetime:
    """Get current time in UTC."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Return an aware UTC datetime.

    Naive values are treated as UTC; some drivers (SQLite) drop tzinfo on the
    way back from the database.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_local(dt: datetime) -> datetime:
    """Convert any datetime to the configured local timezone."""
    return ensure_utc(dt).astimezone(LOCAL_TZ)


def local_day_bounds(day: date) -> tuple[datetime, datetime]:
    """UTC bounds ``[start, end)`` of a local calendar day."""
    start_local = datetime.combine(day, time.min, tzinfo=LOCAL_TZ)
    end_local = datetime.combine(day + timedelta(days=1), time.min, tzinfo=LOCAL_TZ)
    return start_local.astimezone(timezone.utc), end_local.astimezone(timezone.utc)


def parse_time_string(time_str: str) -> time:
    """Parse time string like '14:30' or '14:30:00'."""
    parts = time_str.split(":")
    hour = int(parts[0])
    minute = int(parts[1])
    second = int(parts[2]) if len(parts) > 2 else 0
    return time(hour, minute, second)


def minutes_of_day(value: time) -> int:
    return value.hour * 60 + value.minute
