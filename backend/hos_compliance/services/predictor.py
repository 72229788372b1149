"""
Violation Predictor Service.

Projects a driver's duty history forward through planned segments and
reports the first HOS limit the plan would break, and when.

After each planned segment the whole timeline is re-evaluated exactly as
a live evaluation would be. For the first segment that produces a
violation, the crossing instant is found by linear interpolation from the
segment start (duty accrues one minute per minute), then corrected
forward for minutes that roll out of the weekly window meanwhile.

Single Responsibility: forward simulation of planned schedules only.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional, Sequence, Tuple

from common.validators import is_aware

from ..exceptions import MalformedSegment
from ..models import DutySegment, PolicyWindow, Prediction
from .driver_evaluator import DriverEvaluatorService
from .segment_builder import SegmentBuilderService

logger = logging.getLogger(__name__)


class ViolationPredictorService:
    """
    Service for predicting violations in planned schedules.

    Deterministic: the result depends only on the segments, the plan, the
    evaluation instant and the policy.
    """

    def __init__(
        self,
        driver_evaluator: Optional[DriverEvaluatorService] = None,
        segment_builder: Optional[SegmentBuilderService] = None,
    ):
        """Initialize predictor."""
        self.driver_evaluator = driver_evaluator or DriverEvaluatorService()
        self.segment_builder = segment_builder or SegmentBuilderService()
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def predict(
        self,
        driver_id: str,
        segments: Sequence[DutySegment],
        planned_segments: Sequence[DutySegment],
        at: datetime,
        policy: PolicyWindow,
        other_employer_minutes: int = 0,
    ) -> Optional[Prediction]:
        """
        Predict the first violation caused by a planned schedule.

        Args:
            driver_id: Driver identifier
            segments: Existing duty segments (history up to ``at``)
            planned_segments: Future segments in chronological order
            at: Evaluation instant; the plan must not start before it
            policy: Active policy window
            other_employer_minutes: Attested minutes for another carrier

        Returns:
            Prediction for the first violated limit, or None when the plan
            stays within every limit

        Raises:
            MalformedSegment: If the plan overlaps itself, starts before the
                evaluation instant, or the history runs past it
        """
        if not planned_segments:
            return None

        planned, timeline = self._build_timeline(driver_id, segments, planned_segments, at)
        evaluator = self.driver_evaluator

        for index, segment in enumerate(planned):
            evaluation = evaluator.evaluate(
                driver_id, timeline, segment.end, policy, other_employer_minutes
            )
            if not evaluation.violations:
                continue

            crossing_type, crossing_at = self._first_crossing(
                driver_id,
                timeline,
                segment,
                [violation.type for violation in evaluation.violations],
                policy,
                other_employer_minutes,
            )
            severity = next(
                violation.severity
                for violation in evaluation.violations
                if violation.type == crossing_type
            )

            plan_end = evaluator.usage_at(
                driver_id, timeline, planned[-1].end, policy, other_employer_minutes
            )
            limit_evaluator = evaluator.limit_evaluator
            margin = limit_evaluator.observed_minutes(
                crossing_type, plan_end, policy
            ) - limit_evaluator.limit_minutes(crossing_type, policy)

            prediction = Prediction(
                driver_id=driver_id,
                first_violated_type=crossing_type,
                projected_violation_instant=crossing_at,
                margin_minutes_at_plan_end=margin,
                severity=severity,
                segment_index=index,
            )
            self.logger.info(
                f"Predicted {crossing_type} for driver {driver_id} at "
                f"{crossing_at.isoformat()} (planned segment {index})"
            )
            return prediction

        self.logger.debug(f"No violation predicted for driver {driver_id}")
        return None

    def _build_timeline(
        self,
        driver_id: str,
        segments: Sequence[DutySegment],
        planned_segments: Sequence[DutySegment],
        at: datetime,
    ) -> Tuple[List[DutySegment], List[DutySegment]]:
        """Validate the plan and join it to the history ending by ``at``."""
        if not is_aware(at):
            raise MalformedSegment(f"Evaluation instant for driver {driver_id} must be timezone-aware")

        history = self.segment_builder.normalize_segments(segments, driver_id)
        if history and history[-1].end > at:
            raise MalformedSegment(
                f"History for driver {driver_id} runs to {history[-1].end.isoformat()}, "
                f"past evaluation instant {at.isoformat()}"
            )

        planned = self.segment_builder.normalize_segments(planned_segments, driver_id)
        if planned[0].start < at:
            raise MalformedSegment(
                f"Planned segment for driver {driver_id} starts at "
                f"{planned[0].start.isoformat()}, before evaluation instant {at.isoformat()}"
            )

        timeline = self.segment_builder.normalize_segments(history + planned, driver_id)
        return planned, timeline

    def _first_crossing(
        self,
        driver_id: str,
        timeline: Sequence[DutySegment],
        segment: DutySegment,
        violated_types: Sequence[str],
        policy: PolicyWindow,
        other_employer_minutes: int,
    ) -> Tuple[str, datetime]:
        """
        Earliest threshold crossing among the violated limits within a segment.

        Steps forward by the minutes still missing before the limit breaks;
        usage grows by at most one minute per minute, so a step never
        passes the first breaking instant. The crossing is the instant the
        usage reached the limit on its way to breaking it.
        """
        evaluator = self.driver_evaluator
        limit_evaluator = evaluator.limit_evaluator
        start_usage = evaluator.usage_at(
            driver_id, timeline, segment.start, policy, other_employer_minutes
        )

        best: Optional[Tuple[str, datetime]] = None
        for violation_type in limit_evaluator.VIOLATION_ORDER:
            if violation_type not in violated_types:
                continue

            target = limit_evaluator.limit_minutes(violation_type, policy)
            breaking = target if limit_evaluator.is_exceeded(violation_type, target, target) else target + 1
            observed = limit_evaluator.observed_minutes(violation_type, start_usage, policy)
            instant = segment.start
            while observed < breaking and instant < segment.end:
                instant = min(segment.end, instant + timedelta(minutes=breaking - observed))
                usage = evaluator.usage_at(
                    driver_id, timeline, instant, policy, other_employer_minutes
                )
                observed = limit_evaluator.observed_minutes(violation_type, usage, policy)

            crossing = max(segment.start, instant - timedelta(minutes=max(0, observed - target)))
            if best is None or crossing < best[1]:
                best = (violation_type, crossing)

        return best
