"""
Time-of-day window helpers.

Scheduled routines store a wall-clock time ("HH:MM", 24h) and a duration.
These helpers place such a time on the day of a reference instant and
answer window-membership and minutes-until questions.
"""

import math
import re
from datetime import date, datetime, time, timedelta
from typing import Tuple, Union

import pytz

from common.utils.exceptions import ValidationException

TIME_OF_DAY_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
DATE_KEY_FORMAT = "%Y-%m-%d"

_ONE_MINUTE = timedelta(minutes=1)


def parse_time_of_day(value: str) -> time:
    """
    Parse a 24-hour "HH:MM" string.

    Args:
        value: Time-of-day string, e.g. "07:30" or "22:00"

    Returns:
        datetime.time with seconds zeroed

    Raises:
        ValidationException: If the value is not a valid 24-hour time
    """
    if not isinstance(value, str):
        raise ValidationException(
            message=f"Time of day must be a string, got {type(value).__name__}",
            code="INVALID_TIME",
        )

    match = TIME_OF_DAY_PATTERN.match(value.strip())
    if not match:
        raise ValidationException(
            message=f"Invalid time of day {value!r}, expected 24-hour HH:MM",
            code="INVALID_TIME",
        )

    return time(hour=int(match.group(1)), minute=int(match.group(2)))


def validate_duration(minutes) -> int:
    """
    Check a routine duration is a positive whole number of minutes.

    Raises:
        ValidationException: If the duration is not an int > 0
    """
    if isinstance(minutes, bool) or not isinstance(minutes, int) or minutes <= 0:
        raise ValidationException(
            message=f"Duration must be a positive number of minutes, got {minutes!r}",
            code="INVALID_DURATION",
        )
    return minutes


def time_on_day(value: str, reference: datetime) -> datetime:
    """
    Place an "HH:MM" time on the calendar day of `reference`, in its zone.

    pytz zones are localized so the offset is the one in force at that
    wall-clock time, not the offset `reference` happens to carry.
    """
    parsed = parse_time_of_day(value)
    naive = datetime.combine(reference.date(), parsed)

    tz = reference.tzinfo
    if tz is None:
        return naive
    if isinstance(tz, pytz.BaseTzInfo):
        return tz.localize(naive)
    return naive.replace(tzinfo=tz)


def window_for(value: str, duration_minutes: int, reference: datetime) -> Tuple[datetime, datetime]:
    """
    Compute the [start, end) window of a scheduled routine on the reference day.

    Args:
        value: Start time as "HH:MM"
        duration_minutes: Length of the window, > 0
        reference: Instant whose calendar day the window is placed on

    Returns:
        (start, end) datetimes
    """
    start = time_on_day(value, reference)
    end = start + timedelta(minutes=validate_duration(duration_minutes))
    return start, end


def is_within_window(now: datetime, start: datetime, end: datetime) -> bool:
    """Window membership, end-exclusive."""
    return start <= now < end


def minutes_until(start: datetime, now: datetime) -> int:
    # Partial minutes round up so anything strictly in the future is >= 1.
    return math.ceil((start - now) / _ONE_MINUTE)


def end_of_day(value: Union[date, datetime]) -> datetime:
    """Last representable instant of the day; tzinfo preserved for datetimes."""
    if isinstance(value, datetime):
        return value.replace(hour=23, minute=59, second=59, microsecond=999999)
    return datetime.combine(value, time.max)


def is_after_today(day: date, now: datetime) -> bool:
    """True when end-of-day(day) is strictly after end-of-day(now)."""
    if isinstance(day, datetime):
        day = day.date()
    return end_of_day(day) > end_of_day(now.date())


def date_key(day: date) -> str:
    return day.strftime(DATE_KEY_FORMAT)


def parse_date_key(value: str) -> date:
    """
    Parse a "YYYY-MM-DD" daily-progress key.

    Raises:
        ValidationException: If the key is not a valid calendar date
    """
    try:
        return datetime.strptime(value, DATE_KEY_FORMAT).date()
    except (TypeError, ValueError):
        raise ValidationException(
            message=f"Invalid date key {value!r}, expected YYYY-MM-DD",
            code="INVALID_DATE",
        )
