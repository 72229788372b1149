"""
Common validators and time utilities for the operations API.

This module contains shared validation logic and interval arithmetic used
by the HOS compliance engine and its API layer. All interval math is done
in whole minutes.
"""

from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from django.core.validators import BaseValidator


def is_aware(value: datetime) -> bool:
    """Return True when the datetime carries a usable UTC offset."""
    return value.tzinfo is not None and value.tzinfo.utcoffset(value) is not None


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from start to end (0 when end is not after start)."""
    seconds = (end - start).total_seconds()
    if seconds <= 0:
        return 0
    return int(seconds // 60)


def overlap_minutes(a_start, a_end, b_start, b_end) -> int:
    """Whole minutes shared by [a_start, a_end) and [b_start, b_end)."""
    start = max(a_start, b_start)
    end = min(a_end, b_end)
    return minutes_between(start, end)


def local_day_bounds(day: date, tz: ZoneInfo):
    """
    Return the aware start and end of a local calendar day.

    Days spanning a DST change are 23 or 25 hours long.
    """
    start = datetime.combine(day, time(0, 0), tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time(0, 0), tzinfo=tz)
    return start, end


def format_duration(minutes):
    """Format minutes as HH:MM for remarks and reasons."""
    sign = "-" if minutes < 0 else ""
    minutes = abs(int(minutes))
    return f"{sign}{minutes // 60:02d}:{minutes % 60:02d}"


class MinutesValidator(BaseValidator):
    """
    Validator for minute counts in HOS context.

    Ensures minutes are non-negative and within a maximum.
    """

    def __init__(self, max_minutes):
        self.limit_value = max_minutes
        self.message = f"Minutes must be between 0 and {max_minutes}."

    def compare(self, value, limit_value):
        try:
            minutes = int(value)
            return not (0 <= minutes <= limit_value)
        except (ValueError, TypeError):
            return True

    def clean(self, value):
        return int(value)


def validate_other_employer_minutes(value):
    """Validate attested minutes for another carrier (at most 8 days)."""
    validator = MinutesValidator(max_minutes=8 * 24 * 60)
    validator(value)
