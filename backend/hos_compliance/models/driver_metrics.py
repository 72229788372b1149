"""
Driver metrics for HOS compliance.

DriverMetrics is derived for one (driver, evaluation instant) pair and
never cached, because the rolling window moves with the clock.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class DriverMetrics:
    """
    Usage and remaining capacity for one driver at one instant.

    Sums are integer minutes. The ``*_hours`` properties are the only
    place minutes become hours.

    Attributes:
        driver_id: Driver identifier
        evaluated_at: Evaluation instant
        weekly_rule: Policy weekly rule in force
        minutes_used_7d: On-duty minutes in the trailing 7 days (restart floored)
        minutes_used_8d: On-duty minutes in the trailing 8 days (restart floored)
        driving_minutes_since_rest: Driving since the last 10-hour rest
        on_duty_minutes_since_rest: On duty since the last 10-hour rest
        driving_minutes_since_break: Driving since the last 30-minute interruption
        last_qualifying_restart: End of the latest qualifying 34-hour restart
        last_rest_end: End of the latest 10-hour rest
        other_employer_minutes: Attested minutes worked for another carrier
        weekly_minutes_available: Remaining under the weekly rule
        driving_minutes_available: Remaining under the 11-hour limit
        on_duty_minutes_available: Remaining under the 14-hour limit
        next_break_required: Break due soon (7.5 hours driving since rest)
        can_drive: Driver may drive now
    """

    driver_id: str
    evaluated_at: datetime
    weekly_rule: str
    minutes_used_7d: int = 0
    minutes_used_8d: int = 0
    driving_minutes_since_rest: int = 0
    on_duty_minutes_since_rest: int = 0
    driving_minutes_since_break: int = 0
    last_qualifying_restart: Optional[datetime] = None
    last_rest_end: Optional[datetime] = None
    other_employer_minutes: int = 0
    weekly_minutes_available: int = 0
    driving_minutes_available: int = 0
    on_duty_minutes_available: int = 0
    next_break_required: bool = False
    can_drive: bool = False

    @property
    def hours_used_7d(self) -> float:
        return self.minutes_used_7d / 60.0

    @property
    def hours_used_8d(self) -> float:
        return self.minutes_used_8d / 60.0

    @property
    def driving_hours_since_rest(self) -> float:
        return self.driving_minutes_since_rest / 60.0

    @property
    def on_duty_hours_since_rest(self) -> float:
        return self.on_duty_minutes_since_rest / 60.0

    @property
    def driving_hours_since_break(self) -> float:
        return self.driving_minutes_since_break / 60.0

    @property
    def weekly_hours_available(self) -> float:
        return self.weekly_minutes_available / 60.0

    @property
    def driving_hours_available(self) -> float:
        return self.driving_minutes_available / 60.0

    @property
    def on_duty_hours_available(self) -> float:
        return self.on_duty_minutes_available / 60.0

    def minutes_used_for(self, window_days: int) -> int:
        """On-duty minutes for the 7- or 8-day window."""
        return self.minutes_used_8d if window_days == 8 else self.minutes_used_7d
