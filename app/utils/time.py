"""Utility functions for time handling.

Two families live here:

* Entity timestamps are UTC and timezone-aware. Persist them as ISO-8601
  strings with offsets (e.g. "+00:00") via iso_now().
* Pickup times and dates are wall-clock values in one fixed reference
  calendar. Times of day travel as "HH:MM", dates as "YYYY-MM-DD". A
  time of day is anchored to REFERENCE_DATE whenever a full datetime is
  needed, so it never depends on the real timezone.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timezone
from typing import Any
from zoneinfo import ZoneInfo

from app.domain.exceptions import FormatError

REFERENCE_DATE = date(2000, 1, 1)

TIME_OF_DAY_FORMAT = "%H:%M"
DATE_FORMAT = "%Y-%m-%d"

_TIME_OF_DAY_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

WEEKDAY_NAMES: dict[int, str] = {
    1: "Montag",
    2: "Dienstag",
    3: "Mittwoch",
    4: "Donnerstag",
    5: "Freitag",
    6: "Samstag",
    7: "Sonntag",
}


def utc_now() -> datetime:
    """Return current UTC time as an aware datetime."""
    return datetime.now(timezone.utc)


def iso_now(*, timespec: str | None = None) -> str:
    """Return current UTC time as an ISO8601 string (timezone-aware)."""
    now = utc_now()
    if timespec:
        return now.isoformat(timespec=timespec)
    return now.isoformat()


def format_timestamp(dt: datetime | None) -> str | None:
    """Render an entity timestamp as ISO-8601 with offset, seconds precision."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat(timespec="seconds")


def coerce_datetime(value: Any) -> datetime | None:
    """
    Coerce value to datetime, returning None on failure.

    Args:
        value: String or datetime to coerce

    Returns:
        Datetime in timezone.utc or None if invalid
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        raw = value.strip()
        if raw.endswith("Z"):
            raw = raw.replace("Z", "+00:00")
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    else:
        parsed = parsed.replace(tzinfo=timezone.utc)

    return parsed


# ---------------------------------------------------------------------------
# Wall-clock pickup values
# ---------------------------------------------------------------------------


def parse_time_of_day(value: str) -> time:
    """Parse a strict ``HH:MM`` string.

    Raises:
        FormatError: if the value is not a 24h time with two-digit fields.
    """
    if not isinstance(value, str) or not _TIME_OF_DAY_RE.match(value):
        raise FormatError(f"invalid time format {value!r}, expected HH:MM")
    return datetime.strptime(value, TIME_OF_DAY_FORMAT).time()


def anchor_time_of_day(value: time) -> datetime:
    """Attach a time of day to REFERENCE_DATE."""
    return datetime.combine(REFERENCE_DATE, value)


def format_time_of_day(value: time | datetime | None) -> str | None:
    """Render a time of day as ``HH:MM`` (None passes through)."""
    if value is None:
        return None
    return value.strftime(TIME_OF_DAY_FORMAT)


def parse_date(value: str) -> date:
    """Parse a strict ``YYYY-MM-DD`` calendar date.

    Raises:
        FormatError: if the value is malformed or not a real date.
    """
    if not isinstance(value, str) or not _DATE_RE.match(value):
        raise FormatError(f"invalid date format {value!r}, expected YYYY-MM-DD")
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError:
        raise FormatError(f"invalid date {value!r}, expected YYYY-MM-DD") from None


def format_date(value: date | None) -> str | None:
    if value is None:
        return None
    return value.strftime(DATE_FORMAT)


def iso_weekday(value: date) -> int:
    """Monday=1 ... Sunday=7."""
    return value.isoweekday()


def weekday_name(weekday: int) -> str:
    """Localized weekday name; raises KeyError outside 1..7."""
    return WEEKDAY_NAMES[weekday]


def today(tz_name: str) -> date:
    """Current calendar date in the reference timezone."""
    return datetime.now(ZoneInfo(tz_name)).date()
