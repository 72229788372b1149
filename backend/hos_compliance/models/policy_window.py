"""
Policy window for HOS compliance.

Holds the numeric limits every rule check reads. The policy is
process-wide configuration loaded from settings, never derived per driver.
"""

from dataclasses import dataclass
from datetime import timedelta
from zoneinfo import ZoneInfo

from django.db import models

from .violation import ViolationType


class WeeklyRule(models.TextChoices):
    SIXTY_SEVEN = "60_7", "60 Hours / 7 Days"
    SEVENTY_EIGHT = "70_8", "70 Hours / 8 Days"


# (limit minutes, window days, violation type)
WEEKLY_RULE_LIMITS = {
    WeeklyRule.SIXTY_SEVEN.value: (60 * 60, 7, ViolationType.WEEKLY_60_HOUR),
    WeeklyRule.SEVENTY_EIGHT.value: (70 * 60, 8, ViolationType.WEEKLY_70_HOUR),
}


@dataclass(frozen=True)
class PolicyWindow:
    """
    Immutable HOS limits for a carrier.

    All durations are minutes. The weekly rule selects exactly one of
    60/7 or 70/8; both rolling sums are still reported in DriverMetrics.
    """

    weekly_rule: str = WeeklyRule.SIXTY_SEVEN
    local_timezone: str = "America/Los_Angeles"
    driving_limit_minutes: int = 11 * 60
    on_duty_limit_minutes: int = 14 * 60
    break_after_driving_minutes: int = 8 * 60
    break_minutes: int = 30
    daily_reset_minutes: int = 10 * 60
    restart_minutes: int = 34 * 60
    restart_night_periods: int = 2
    night_start_hour: int = 1
    night_end_hour: int = 5
    next_break_warning_minutes: int = 450
    weekly_critical_margin_minutes: int = 5 * 60
    at_risk_remaining_minutes: int = 2 * 60
    fleet_limited_weekly_minutes: int = 20 * 60
    fleet_rest_weekly_minutes: int = 10 * 60
    fleet_rest_driving_minutes: int = 2 * 60
    meal_required_by_minutes: int = 6 * 60
    meal_break_minutes: int = 30

    @property
    def _weekly_limits(self):
        return WEEKLY_RULE_LIMITS[WeeklyRule(self.weekly_rule).value]

    @property
    def weekly_limit_minutes(self) -> int:
        return self._weekly_limits[0]

    @property
    def window_days(self) -> int:
        return self._weekly_limits[1]

    @property
    def window(self) -> timedelta:
        return timedelta(days=self.window_days)

    @property
    def weekly_violation_type(self) -> str:
        return self._weekly_limits[2]

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.local_timezone)

    def to_dict(self) -> dict:
        return {
            "weekly_rule": str(self.weekly_rule),
            "weekly_limit_hours": self.weekly_limit_minutes / 60.0,
            "window_days": self.window_days,
            "local_timezone": self.local_timezone,
            "driving_limit_hours": self.driving_limit_minutes / 60.0,
            "on_duty_limit_hours": self.on_duty_limit_minutes / 60.0,
            "break_after_driving_hours": self.break_after_driving_minutes / 60.0,
            "break_minutes": self.break_minutes,
            "daily_reset_hours": self.daily_reset_minutes / 60.0,
            "restart_hours": self.restart_minutes / 60.0,
            "restart_night_periods": self.restart_night_periods,
            "night_window": f"{self.night_start_hour:02d}:00-{self.night_end_hour:02d}:00",
        }
