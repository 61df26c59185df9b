"""
Timestamps are stored as naive datetimes in UTC and leave the API as
ISO-8601 strings with millisecond precision and a trailing "Z".
"""
from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Optional
from zoneinfo import ZoneInfo

END_OF_DAY = time(23, 59, 59, 999000)


def utcnow() -> datetime:
    """Current UTC time, naive, truncated to whole milliseconds."""
    now = datetime.now(timezone.utc)
    return now.replace(tzinfo=None, microsecond=now.microsecond // 1000 * 1000)


def _to_utc_naive(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    "2024-03-10T12:00:00Z", "...+02:00" or a naive string (taken as UTC)
    into a UTC-naive datetime. Blank input gives None; garbage raises ValueError.
    """
    text = (value or "").strip()
    if not text:
        return None
    if text[-1] in "zZ":
        text = f"{text[:-1]}+00:00"
    return _to_utc_naive(datetime.fromisoformat(text))


def parse_iso_date(value: Optional[str]) -> Optional[date]:
    """YYYY-MM-DD into a date. Blank input gives None."""
    text = (value or "").strip()
    return date.fromisoformat(text) if text else None


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    if dt is None:
        return None
    stamp = _to_utc_naive(dt).isoformat(timespec="milliseconds")
    return f"{stamp}Z"


def local_day_bounds(day: date, tz_name: Optional[str] = None) -> tuple[datetime, datetime]:
    """
    First and last millisecond of `day`, as UTC-naive datetimes.

    `day` is read in the IANA zone `tz_name`, or in the server's local zone
    when tz_name is None.
    """
    bounds = (datetime.combine(day, time.min), datetime.combine(day, END_OF_DAY))
    if tz_name:
        zone = ZoneInfo(tz_name)
        aware = [b.replace(tzinfo=zone) for b in bounds]
    else:
        aware = [b.astimezone() for b in bounds]
    start, end = (_to_utc_naive(a) for a in aware)
    return start, end
