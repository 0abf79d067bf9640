"""
Timezone-aware datetime helpers.
- Store and compute in UTC in DB.
- Calendar decisions ("today", delegation windows) use the institution's local date.
"""
from datetime import date, datetime, time, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from approval_engine.core.config import settings

UTC = timezone.utc
LOCAL_TZ = ZoneInfo(settings.TZ)


def now_utc() -> datetime:
    """Current time in UTC (timezone-aware)."""
    return datetime.now(UTC)


def today_local() -> date:
    """Today's date in the institution's timezone."""
    return datetime.now(LOCAL_TZ).date()


def to_local(dt: Optional[datetime]) -> Optional[datetime]:
    """Convert to the display timezone. Naive datetimes are treated as UTC before converting."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(LOCAL_TZ)


def iso_local(dt: Optional[datetime]) -> Optional[str]:
    """Serialize as ISO-8601 with the local offset. Use for API response datetime fields."""
    if dt is None:
        return None
    return to_local(dt).isoformat()


def local_day_start(day: date) -> datetime:
    """Local midnight of ``day`` as a UTC datetime, for range filters on stored timestamps."""
    return datetime.combine(day, time.min, tzinfo=LOCAL_TZ).astimezone(UTC)
