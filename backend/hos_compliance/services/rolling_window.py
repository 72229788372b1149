"""
Rolling Window Calculator Service.

Sums on-duty and driving time for a driver at an evaluation instant:
- 60/7 and 70/8 rolling windows, floored by a qualifying 34-hour restart
- Driving and on-duty time since the last 10-hour rest (11/14-hour limits)
- Driving time since the last 30-minute interruption (break rule)

All sums are whole minutes; hours only appear at the presentation
boundary. Time inside the known history that no on-duty segment covers is
rest, so gaps between stored segments count as off duty.

Single Responsibility: duty time accumulation only.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Sequence, Tuple

from common.validators import minutes_between

from ..models import DriverMetrics, DutySegment, PolicyWindow

logger = logging.getLogger(__name__)

Span = Tuple[datetime, datetime]


class RollingWindowCalculatorService:
    """
    Service for accumulating duty time over a driver's segments.

    Expects segments already validated and ordered by the Segment Builder.
    """

    def __init__(self):
        """Initialize rolling window calculator."""
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def calculate_usage(
        self,
        driver_id: str,
        segments: Sequence[DutySegment],
        at: datetime,
        policy: PolicyWindow,
        restart_end: Optional[datetime] = None,
        other_employer_minutes: int = 0,
    ) -> DriverMetrics:
        """
        Compute usage metrics at an evaluation instant.

        Args:
            driver_id: Driver identifier
            segments: Ordered, non-overlapping segments for the driver
            at: Evaluation instant
            policy: Active policy window
            restart_end: End of the latest qualifying restart, if any
            other_employer_minutes: Attested minutes for another carrier,
                added to each rolling sum no restart has floored

        Returns:
            DriverMetrics with usage fields populated; availability fields
            are filled in by the Availability Engine
        """
        rest_end = self.last_rest_end(segments, at, policy)
        break_end = self.last_break_end(segments, at, policy)

        metrics = DriverMetrics(
            driver_id=driver_id,
            evaluated_at=at,
            weekly_rule=policy.weekly_rule,
            minutes_used_7d=self.weekly_minutes(
                segments, at, 7, restart_end, other_employer_minutes
            ),
            minutes_used_8d=self.weekly_minutes(
                segments, at, 8, restart_end, other_employer_minutes
            ),
            driving_minutes_since_rest=self.minutes_since(
                segments, at, rest_end, lambda segment: segment.is_driving
            ),
            on_duty_minutes_since_rest=self.minutes_since(
                segments, at, rest_end, lambda segment: segment.is_on_duty
            ),
            driving_minutes_since_break=self.minutes_since(
                segments, at, break_end, lambda segment: segment.is_driving
            ),
            last_qualifying_restart=restart_end,
            last_rest_end=rest_end,
            other_employer_minutes=other_employer_minutes,
        )

        self.logger.debug(
            f"Usage for {driver_id} at {at.isoformat()}: "
            f"7d={metrics.minutes_used_7d}m 8d={metrics.minutes_used_8d}m "
            f"driving={metrics.driving_minutes_since_rest}m on_duty={metrics.on_duty_minutes_since_rest}m"
        )
        return metrics

    def weekly_minutes(
        self,
        segments: Sequence[DutySegment],
        at: datetime,
        window_days: int,
        restart_end: Optional[datetime] = None,
        other_employer_minutes: int = 0,
    ) -> int:
        """
        On-duty minutes inside the trailing window ending at ``at``.

        A qualifying restart inside the window is a hard floor: nothing
        before it counts, including attested other-employer minutes.
        """
        window_start = at - timedelta(days=window_days)
        total = other_employer_minutes
        if restart_end is not None and window_start < restart_end <= at:
            window_start = restart_end
            total = 0

        for segment in segments:
            if segment.start >= at:
                break
            if not segment.is_on_duty:
                continue
            total += segment.clipped_minutes(window_start, at)
        return total

    def minutes_since(
        self,
        segments: Sequence[DutySegment],
        at: datetime,
        since: Optional[datetime],
        predicate: Callable[[DutySegment], bool],
    ) -> int:
        """Minutes of matching segments between ``since`` (or history start) and ``at``."""
        if not segments:
            return 0
        start = since if since is not None else segments[0].start

        total = 0
        for segment in segments:
            if segment.start >= at:
                break
            if predicate(segment):
                total += segment.clipped_minutes(start, at)
        return total

    def rest_spans(self, segments: Sequence[DutySegment], at: datetime) -> List[Span]:
        """Maximal off-duty spans (off duty, sleeper berth or gaps) up to ``at``."""
        return self._uncovered_spans(segments, at, lambda segment: segment.is_on_duty)

    def non_driving_spans(self, segments: Sequence[DutySegment], at: datetime) -> List[Span]:
        """Maximal spans without driving up to ``at``."""
        return self._uncovered_spans(segments, at, lambda segment: segment.is_driving)

    def last_rest_end(
        self, segments: Sequence[DutySegment], at: datetime, policy: PolicyWindow
    ) -> Optional[datetime]:
        """End of the most recent rest long enough to reset the 11/14-hour counters."""
        return self._last_span_end(
            self.rest_spans(segments, at), policy.daily_reset_minutes
        )

    def last_break_end(
        self, segments: Sequence[DutySegment], at: datetime, policy: PolicyWindow
    ) -> Optional[datetime]:
        """End of the most recent non-driving interruption satisfying the break rule."""
        return self._last_span_end(
            self.non_driving_spans(segments, at), policy.break_minutes
        )

    def _last_span_end(self, spans: List[Span], minimum_minutes: int) -> Optional[datetime]:
        for start, end in reversed(spans):
            if minutes_between(start, end) >= minimum_minutes:
                return end
        return None

    def _uncovered_spans(
        self,
        segments: Sequence[DutySegment],
        at: datetime,
        covers: Callable[[DutySegment], bool],
    ) -> List[Span]:
        """
        Spans inside [history start, at] not covered by matching segments.

        Adjacent covering segments merge, so a driving segment followed by
        on-duty work leaves no zero-length rest between them.
        """
        if not segments or segments[0].start >= at:
            return []

        spans: List[Span] = []
        cursor = segments[0].start
        for segment in segments:
            if segment.start >= at:
                break
            if not covers(segment):
                continue
            if segment.start > cursor:
                spans.append((cursor, segment.start))
            cursor = max(cursor, min(segment.end, at))

        if at > cursor:
            spans.append((cursor, at))
        return spans
