"""
Timezone utilities for the Sideout platform.

Lesson dates and times are stored as wall-clock values in the timezone of the
beach where the lesson happens. These helpers convert between that local time
and UTC.
"""

from datetime import date, datetime, time, timezone
from typing import TYPE_CHECKING, Optional

import pytz

from .config import settings

if TYPE_CHECKING:
    from app.models.location import Location


def get_location_timezone(location: Optional["Location"]) -> pytz.BaseTzInfo:
    """
    Get the timezone a location operates in.

    Falls back to the platform default when the location is unknown.
    """
    tz_name = getattr(location, "timezone", None) or settings.default_timezone
    return pytz.timezone(tz_name)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def local_to_utc(day: date, at: time, tz: pytz.BaseTzInfo) -> datetime:
    """Combine a local date and time and convert it to an aware UTC datetime."""
    local_dt = tz.localize(datetime.combine(day, at))
    return local_dt.astimezone(timezone.utc)


def get_location_now(location: Optional["Location"], now: Optional[datetime] = None) -> datetime:
    """
    Get the current datetime at a location.

    Args:
        location: Location object (or None for the platform default)
        now: Optional aware UTC reference time

    Returns:
        Aware datetime in the location's timezone
    """
    reference = now or utc_now()
    return reference.astimezone(get_location_timezone(location))


def hours_until(day: date, at: time, tz: pytz.BaseTzInfo, now: Optional[datetime] = None) -> float:
    """Hours from now until a local wall-clock moment (negative when in the past)."""
    reference = now or utc_now()
    return (local_to_utc(day, at, tz) - reference).total_seconds() / 3600.0


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes (as returned by SQLite) as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
