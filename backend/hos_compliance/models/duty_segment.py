"""
Duty segment values for HOS compliance.

Contains the DutyStatus choices, the immutable DutySegment that every
engine stage consumes, and the AttendanceRecord the Segment Builder turns
into segments.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from django.db import models

from common.validators import overlap_minutes, minutes_between


class DutyStatus(models.TextChoices):
    """FMCSA duty status categories (grid rows on a log sheet)."""

    OFF_DUTY = "OFF_DUTY", "Off Duty"
    SLEEPER_BERTH = "SLEEPER_BERTH", "Sleeper Berth"
    DRIVING = "DRIVING", "Driving"
    ON_DUTY_NOT_DRIVING = "ON_DUTY_NOT_DRIVING", "On Duty (Not Driving)"


ON_DUTY_STATUSES = frozenset({DutyStatus.DRIVING.value, DutyStatus.ON_DUTY_NOT_DRIVING.value})
REST_STATUSES = frozenset({DutyStatus.OFF_DUTY.value, DutyStatus.SLEEPER_BERTH.value})


@dataclass(frozen=True)
class DutySegment:
    """
    Contiguous period of a single duty status for one driver.

    Segments are created by the Segment Builder (or validated by it when
    supplied directly) and never mutated; a change in status always starts
    a new segment.

    Attributes:
        driver_id: Driver identifier
        start: Aware datetime the status began
        end: Aware datetime the status ended (exclusive)
        status: DutyStatus value
        notes: Free-form remarks carried from the source record
    """

    driver_id: str
    start: datetime
    end: datetime
    status: str
    notes: str = ""

    @property
    def duration_minutes(self) -> int:
        return minutes_between(self.start, self.end)

    @property
    def duration_hours(self) -> float:
        return self.duration_minutes / 60.0

    @property
    def is_driving(self) -> bool:
        return str(self.status) == DutyStatus.DRIVING.value

    @property
    def is_on_duty(self) -> bool:
        return str(self.status) in ON_DUTY_STATUSES

    @property
    def is_rest(self) -> bool:
        return str(self.status) in REST_STATUSES

    def clipped_minutes(self, window_start: datetime, window_end: datetime) -> int:
        """Minutes of this segment falling inside [window_start, window_end)."""
        return overlap_minutes(self.start, self.end, window_start, window_end)


@dataclass(frozen=True)
class AttendanceRecord:
    """
    Raw attendance entry from timecards or route assignments.

    A record with no clock_out is an open shift (driver still clocked in).
    The optional break is recorded as off duty inside the worked interval.
    """

    driver_id: str
    clock_in: datetime
    clock_out: Optional[datetime] = None
    break_start: Optional[datetime] = None
    break_end: Optional[datetime] = None
    status: str = DutyStatus.DRIVING
    source: str = field(default="timecard")
