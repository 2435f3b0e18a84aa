"""
Date and time helpers.

All timestamps are stored as naive UTC datetimes. Conversion to a guest's or
admin's local calendar goes through the IANA time zone database (zoneinfo),
so day boundaries stay correct across DST transitions.
"""
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import HTTPException, status

from app.core.config import settings


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (storage format)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def resolve_timezone(tz_name: str | None) -> ZoneInfo:
    """Resolve an IANA zone name, falling back to the configured default."""
    name = tz_name or settings.DEFAULT_TIMEZONE
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown time zone '{name}'",
        )


def to_local(value: datetime, tz: ZoneInfo) -> datetime:
    """Convert a stored naive UTC datetime to the given zone."""
    return value.replace(tzinfo=timezone.utc).astimezone(tz)


def local_day_start_utc(day: date, tz: ZoneInfo) -> datetime:
    """UTC instant (naive) at which the local calendar day starts."""
    local_midnight = datetime.combine(day, time.min, tzinfo=tz)
    return local_midnight.astimezone(timezone.utc).replace(tzinfo=None)


def last_local_days(days: int, tz: ZoneInfo, now: datetime | None = None) -> List[Tuple[date, datetime, datetime]]:
    """
    Return (local_date, utc_start, utc_end) for the last `days` local
    calendar days, today included, newest first.
    """
    current = to_local(now or utcnow(), tz).date()
    windows = []
    for offset in range(days):
        day = current - timedelta(days=offset)
        windows.append(
            (day, local_day_start_utc(day, tz), local_day_start_utc(day + timedelta(days=1), tz))
        )
    return windows


def format_local_full(value: datetime | None, tz: ZoneInfo) -> str:
    """DD/MM/YYYY HH:MM:SS in the given zone; empty string for missing values."""
    if value is None:
        return ""
    return to_local(value, tz).strftime("%d/%m/%Y %H:%M:%S")
