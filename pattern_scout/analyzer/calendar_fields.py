"""
Calendar field extraction and next-occurrence projection.

Every function takes the reference time zone explicitly; nothing here reads
the host's local zone. Timestamps are epoch milliseconds.
"""

from datetime import date, datetime, timedelta, timezone, tzinfo
from enum import Enum
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import numpy as np

from pattern_scout.analyzer.exceptions import TimeZoneError


class CalendarField(str, Enum):
    HOUR = "hour"
    DAY_OF_WEEK = "day_of_week"
    WEEK_OF_YEAR = "week_of_year"
    MONTH = "month"
    QUARTER = "quarter"


DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")
MONTH_NAMES = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

_MAX_ISO_WEEK_YEARS_AHEAD = 7


@lru_cache(maxsize=32)
def resolve_zone(name: str) -> tzinfo:
    """Map an IANA zone name to a tzinfo; 'UTC' never needs tz database files."""
    if not name or name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise TimeZoneError(f"Unknown time zone: {name!r}") from e


def to_datetime(timestamp_ms: int, tz: tzinfo) -> datetime:
    return datetime.fromtimestamp(timestamp_ms / 1000.0, tz=tz)


def to_epoch_ms(moment: datetime) -> int:
    return int(round(moment.timestamp() * 1000))


def calendar_key(timestamp_ms: int, field: CalendarField, tz: tzinfo) -> int:
    """
    Extract a calendar field from a timestamp.

    Day of week is numbered 1=Sunday .. 7=Saturday, week of year is the ISO
    week, month is 1-12 and quarter is 1-4.
    """
    moment = to_datetime(timestamp_ms, tz)
    if field is CalendarField.HOUR:
        return moment.hour
    if field is CalendarField.DAY_OF_WEEK:
        return moment.isoweekday() % 7 + 1
    if field is CalendarField.WEEK_OF_YEAR:
        return moment.isocalendar()[1]
    if field is CalendarField.MONTH:
        return moment.month
    if field is CalendarField.QUARTER:
        return (moment.month - 1) // 3 + 1
    raise ValueError(f"Unsupported calendar field: {field}")


def calendar_keys(timestamps: np.ndarray, field: CalendarField, tz: tzinfo) -> np.ndarray:
    return np.array([calendar_key(int(ts), field, tz) for ts in timestamps], dtype=np.int64)


def _at_midnight(day: date, tz: tzinfo, hour: int = 0) -> datetime:
    return datetime(day.year, day.month, day.day, hour, tzinfo=tz)


def _iso_week_start(year: int, week: int) -> date | None:
    try:
        return date.fromisocalendar(year, week, 1)
    except ValueError:
        return None


def predict_next_occurrence(value: int, field: CalendarField, now_ms: int, tz: tzinfo) -> int:
    """
    Project a calendar key forward to its next start instant at or after ``now_ms``.

    The candidate is the start of the unit (hour, day, ISO week, month, quarter)
    within the current cycle; if it already passed, it moves one full cycle
    ahead (day, week, or year).
    """
    now = to_datetime(now_ms, tz)
    today = now.date()

    if field is CalendarField.HOUR:
        candidate = _at_midnight(today, tz, hour=value)
        if candidate < now:
            candidate = _at_midnight(today + timedelta(days=1), tz, hour=value)

    elif field is CalendarField.DAY_OF_WEEK:
        # Week runs Sunday..Saturday, matching the 1=Sunday numbering
        week_start = today - timedelta(days=today.isoweekday() % 7)
        target = week_start + timedelta(days=value - 1)
        candidate = _at_midnight(target, tz)
        if candidate < now:
            candidate = _at_midnight(target + timedelta(weeks=1), tz)

    elif field is CalendarField.WEEK_OF_YEAR:
        year = today.isocalendar()[0]
        candidate = None
        for offset in range(_MAX_ISO_WEEK_YEARS_AHEAD + 1):
            start = _iso_week_start(year + offset, value)
            if start is None:
                continue
            moment = _at_midnight(start, tz)
            if moment >= now:
                candidate = moment
                break
        if candidate is None:
            raise ValueError(f"ISO week {value} does not occur after {now.isoformat()}")

    elif field in (CalendarField.MONTH, CalendarField.QUARTER):
        month = value if field is CalendarField.MONTH else (value - 1) * 3 + 1
        candidate = _at_midnight(date(today.year, month, 1), tz)
        if candidate < now:
            candidate = _at_midnight(date(today.year + 1, month, 1), tz)

    else:
        raise ValueError(f"Unsupported calendar field: {field}")

    return to_epoch_ms(candidate)
