"""
Grid View Service.

Builds the rolling 60/7 grid shown on the operations dashboard: one row
per driver with on-duty hours per local calendar day, weekly hours used
and available at the end of the view, a status badge and the reasons
behind it.

Days are local calendar days in the policy time zone, so a shift
crossing midnight is split between two columns.

Single Responsibility: grid row assembly only.
"""

import logging
from datetime import date, datetime, timedelta
from typing import List, Optional, Sequence

from common.validators import local_day_bounds, minutes_between

from ..models import DutySegment, GridRow, PolicyWindow, StatusBadge
from . import explanations
from .driver_evaluator import DriverEvaluatorService

logger = logging.getLogger(__name__)

MIN_GRID_DAYS = 7
MAX_GRID_DAYS = 42


class GridViewService:
    """Service for building 60/7 grid rows."""

    def __init__(self, driver_evaluator: Optional[DriverEvaluatorService] = None):
        """Initialize grid view with the driver evaluator."""
        self.driver_evaluator = driver_evaluator or DriverEvaluatorService()
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @staticmethod
    def clamp_days(days: int) -> int:
        return max(MIN_GRID_DAYS, min(MAX_GRID_DAYS, int(days)))

    def build_row(
        self,
        driver_id: str,
        segments: Sequence[DutySegment],
        end_date: date,
        policy: PolicyWindow,
        days: int = MIN_GRID_DAYS,
        other_employer_minutes: int = 0,
    ) -> GridRow:
        """
        Build one driver's grid row.

        Args:
            driver_id: Driver identifier
            segments: Validated, ordered segments for the driver
            end_date: Last local calendar day shown
            policy: Active policy window
            days: Number of days shown, clamped to 7-42
            other_employer_minutes: Attested minutes for another carrier

        Returns:
            GridRow evaluated at the end of ``end_date``
        """
        tz = policy.tzinfo
        days = self.clamp_days(days)
        day_list = [end_date - timedelta(days=offset) for offset in range(days - 1, -1, -1)]

        day_minutes = [self.on_duty_minutes_for_day(segments, day, policy) for day in day_list]

        last_day_start, at = local_day_bounds(end_date, tz)
        evaluation = self.driver_evaluator.evaluate(
            driver_id, segments, at, policy, other_employer_minutes
        )
        metrics = evaluation.metrics

        used_minutes = metrics.minutes_used_for(policy.window_days)
        hours_used = round(used_minutes / 60.0, 2)
        hours_available = round((policy.weekly_limit_minutes - used_minutes) / 60.0, 2)

        reasons = []
        weekly = explanations.weekly_reason(hours_used, hours_available, policy)
        if weekly is not None:
            reasons.append(weekly)

        rest_minutes = self.rest_before_day(segments, last_day_start, at)
        if rest_minutes is not None and rest_minutes < policy.daily_reset_minutes:
            reasons.append(explanations.short_rest_reason(rest_minutes, policy))

        if not self.meal_taken(segments, last_day_start, at, policy):
            reasons.append(explanations.meal_reason(day_minutes[-1], policy))

        status = self.driver_evaluator.availability.status_badge(
            metrics, evaluation.violations, policy
        )
        if any(reason["severity"] == "VIOLATION" for reason in reasons):
            status = StatusBadge.VIOLATION

        return GridRow(
            driver_id=driver_id,
            days=day_list,
            day_hours=[round(minutes / 60.0, 2) for minutes in day_minutes],
            hours_used=hours_used,
            hours_available=hours_available,
            status=str(status),
            reasons=reasons,
        )

    def on_duty_minutes_for_day(
        self, segments: Sequence[DutySegment], day: date, policy: PolicyWindow
    ) -> int:
        """On-duty minutes inside one local calendar day."""
        day_start, day_end = local_day_bounds(day, policy.tzinfo)
        return sum(
            segment.clipped_minutes(day_start, day_end)
            for segment in segments
            if segment.is_on_duty
        )

    def rest_before_day(
        self, segments: Sequence[DutySegment], day_start: datetime, day_end: datetime
    ) -> Optional[int]:
        """
        Rest minutes between the last shift ending before the day and the
        first shift starting in it.

        None when either shift is missing or a shift runs through midnight.
        """
        on_duty = [segment for segment in segments if segment.is_on_duty]
        prior_ends = [segment.end for segment in on_duty if segment.end <= day_start]
        day_starts = [
            segment.start for segment in on_duty if day_start <= segment.start < day_end
        ]
        if not prior_ends or not day_starts:
            return None
        if any(segment.start < day_start < segment.end for segment in on_duty):
            return None
        return minutes_between(max(prior_ends), min(day_starts))

    def meal_taken(
        self,
        segments: Sequence[DutySegment],
        day_start: datetime,
        day_end: datetime,
        policy: PolicyWindow,
    ) -> bool:
        """
        Whether the day's work had a meal break in time.

        Days with fewer on-duty minutes than the meal deadline need none.
        Otherwise an off-duty gap of the meal length must start before the
        deadline's on-duty minute is reached.
        """
        worked = 0
        previous_end = None
        for segment in segments:
            if not segment.is_on_duty:
                continue
            start = max(segment.start, day_start)
            end = min(segment.end, day_end)
            if end <= start:
                continue

            if previous_end is not None and minutes_between(previous_end, start) >= policy.meal_break_minutes:
                return True
            worked += minutes_between(start, end)
            if worked >= policy.meal_required_by_minutes:
                return False
            previous_end = end
        return True

    def build_rows(
        self,
        driver_segments: dict,
        end_date: date,
        policy: PolicyWindow,
        days: int = MIN_GRID_DAYS,
        other_employer_minutes: Optional[dict] = None,
    ) -> List[GridRow]:
        """Grid rows for several drivers, ordered by driver id."""
        other_employer_minutes = other_employer_minutes or {}
        rows = [
            self.build_row(
                driver_id,
                segments,
                end_date,
                policy,
                days,
                other_employer_minutes.get(driver_id, 0),
            )
            for driver_id, segments in sorted(driver_segments.items())
        ]
        self.logger.debug(f"Built {len(rows)} grid row(s) ending {end_date.isoformat()}")
        return rows
