"""
Restart Detector Service.

Finds qualifying 34-hour restarts in a driver's duty history. A restart
is an off-duty span of at least 34 consecutive hours containing two
complete 1:00-5:00 AM periods on different nights, evaluated in the
policy's driver-local time zone.

The most recent qualifying restart floors the 60/7 and 70/8 rolling
windows: nothing before it counts toward the weekly limit.

Single Responsibility: restart detection only.
"""

import logging
from datetime import datetime, time, timedelta
from typing import List, Optional, Sequence

from common.validators import minutes_between

from ..models import DutySegment, PolicyWindow
from .rolling_window import RollingWindowCalculatorService

logger = logging.getLogger(__name__)


class RestartDetectorService:
    """Service for detecting qualifying 34-hour restarts."""

    def __init__(self, calculator: Optional[RollingWindowCalculatorService] = None):
        """Initialize restart detector."""
        self.calculator = calculator or RollingWindowCalculatorService()
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def find_last_restart(
        self,
        segments: Sequence[DutySegment],
        at: datetime,
        policy: PolicyWindow,
    ) -> Optional[datetime]:
        """
        Return the end of the most recent qualifying restart before ``at``.

        A rest still in progress at ``at`` ends at ``at``.
        """
        restarts = self.qualifying_restarts(segments, at, policy)
        if not restarts:
            return None
        return restarts[-1]

    def qualifying_restarts(
        self,
        segments: Sequence[DutySegment],
        at: datetime,
        policy: PolicyWindow,
    ) -> List[datetime]:
        """End instants of every qualifying restart, oldest first."""
        restarts = []
        for start, end in self.calculator.rest_spans(segments, at):
            if minutes_between(start, end) < policy.restart_minutes:
                continue
            nights = self.count_night_periods(start, end, policy)
            if nights >= policy.restart_night_periods:
                restarts.append(end)
            else:
                self.logger.debug(
                    f"Rest {start.isoformat()}-{end.isoformat()} is long enough but "
                    f"covers only {nights} night period(s)"
                )
        return restarts

    def count_night_periods(
        self, start: datetime, end: datetime, policy: PolicyWindow
    ) -> int:
        """
        Count local nights whose whole night window lies inside [start, end].

        Each calendar night is counted at most once.
        """
        tz = policy.tzinfo
        day = start.astimezone(tz).date()
        last_day = end.astimezone(tz).date()

        count = 0
        while day <= last_day:
            night_start = datetime.combine(day, time(policy.night_start_hour), tzinfo=tz)
            if policy.night_end_hour == 24:
                night_end = datetime.combine(day + timedelta(days=1), time(0), tzinfo=tz)
            else:
                night_end = datetime.combine(day, time(policy.night_end_hour), tzinfo=tz)

            if start <= night_start and night_end <= end:
                count += 1
            day += timedelta(days=1)
        return count
