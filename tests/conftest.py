"""
Pytest configuration for HOS compliance tests.

Shared fixtures and segment builders. All instants are UTC and the
default test policy evaluates restart nights in UTC so that the
1:00-5:00 AM windows line up with the hours written in each test.
"""

from datetime import datetime, timedelta, timezone

import pytest

from hos_compliance.models import DutySegment, DutyStatus, PolicyWindow, WeeklyRule
from hos_compliance.services import HOSEngineService

# Monday
BASE = datetime(2024, 1, 1, tzinfo=timezone.utc)

DRIVING = DutyStatus.DRIVING
ON_DUTY = DutyStatus.ON_DUTY_NOT_DRIVING
OFF_DUTY = DutyStatus.OFF_DUTY
SLEEPER = DutyStatus.SLEEPER_BERTH


def at(day=1, hour=0, minute=0):
    """UTC instant on day ``day`` (1-based) of January 2024."""
    return BASE + timedelta(days=day - 1, hours=hour, minutes=minute)


def seg(start, end, status=DRIVING, driver_id="D1", notes=""):
    return DutySegment(driver_id=driver_id, start=start, end=end, status=status, notes=notes)


def work_day(day, driver_id="D1"):
    """
    A 10-hour driving day with a 30-minute break.

    Drives 05:00-10:00 and 10:30-15:30, leaving 13.5 hours of rest before
    the next day's start.
    """
    return [
        seg(at(day, 5), at(day, 10), DRIVING, driver_id),
        seg(at(day, 10), at(day, 10, 30), OFF_DUTY, driver_id),
        seg(at(day, 10, 30), at(day, 15, 30), DRIVING, driver_id),
    ]


def work_days(first_day, count, driver_id="D1"):
    segments = []
    for day in range(first_day, first_day + count):
        segments.extend(work_day(day, driver_id))
    return segments


@pytest.fixture
def policy():
    """Default 60/7 policy with restart nights evaluated in UTC."""
    return PolicyWindow(local_timezone="UTC")


@pytest.fixture
def policy_70():
    """70/8 policy with restart nights evaluated in UTC."""
    return PolicyWindow(weekly_rule=WeeklyRule.SEVENTY_EIGHT, local_timezone="UTC")


@pytest.fixture
def engine(policy):
    return HOSEngineService(policy)
