"""
HOS Engine Service.

Entry point for callers of the compliance engine. Validates duty history
and runs the per-driver pipeline, the predictor, fleet aggregation,
schedule analysis and the grid view.

Every operation takes an explicit evaluation instant; the engine never
reads the clock and keeps no state between calls, so repeated calls with
the same inputs return the same results.

Single Responsibility: orchestration of the engine stages.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import date, datetime
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from django.conf import settings

from common.validators import is_aware

from ..exceptions import HOSEngineError, MalformedSegment
from ..models import DriverEvaluation, DutySegment, FleetSummary, GridRow, PolicyWindow, Prediction
from . import explanations
from .driver_evaluator import DriverEvaluatorService
from .fleet_aggregator import FleetAggregatorService
from .grid import GridViewService
from .policy import get_policy
from .predictor import ViolationPredictorService
from .segment_builder import SegmentBuilderService

logger = logging.getLogger(__name__)

DEFAULT_FLEET_WORKERS = 8
MAX_ALTERNATIVE_DRIVERS = 3


class HOSEngineService:
    """
    Facade over the HOS compliance engine.

    Composes the Segment Builder, the per-driver evaluator, the Predictor,
    the Fleet Aggregator and the grid view.
    """

    def __init__(self, policy: Optional[PolicyWindow] = None):
        """
        Initialize the engine.

        Args:
            policy: Policy to use; defaults to the HOS_POLICY setting
        """
        self.policy = policy or get_policy()
        self.segment_builder = SegmentBuilderService()
        self.driver_evaluator = DriverEvaluatorService()
        self.predictor = ViolationPredictorService(self.driver_evaluator, self.segment_builder)
        self.fleet_aggregator = FleetAggregatorService()
        self.grid_view = GridViewService(self.driver_evaluator)
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def evaluate(
        self,
        driver_id: str,
        segments: Sequence[DutySegment],
        evaluation_instant: datetime,
        policy: Optional[PolicyWindow] = None,
        other_employer_minutes: int = 0,
    ) -> DriverEvaluation:
        """
        Evaluate one driver at one instant.

        Args:
            driver_id: Driver identifier
            segments: Duty segments in any order
            evaluation_instant: Timezone-aware evaluation instant
            policy: Policy override; defaults to the engine policy
            other_employer_minutes: Attested minutes for another carrier

        Returns:
            DriverEvaluation with metrics and active violations

        Raises:
            MalformedSegment: If the segments or the instant are invalid
        """
        self._check_instant(evaluation_instant)
        ordered = self.segment_builder.normalize_segments(segments, driver_id)
        evaluation = self.driver_evaluator.evaluate(
            driver_id, ordered, evaluation_instant, policy or self.policy, other_employer_minutes
        )
        self.logger.debug(
            f"Evaluated driver {driver_id} at {evaluation_instant.isoformat()}: "
            f"{len(evaluation.violations)} violation(s)"
        )
        return evaluation

    def predict(
        self,
        driver_id: str,
        segments: Sequence[DutySegment],
        planned_segments: Sequence[DutySegment],
        evaluation_instant: datetime,
        policy: Optional[PolicyWindow] = None,
        other_employer_minutes: int = 0,
    ) -> Optional[Prediction]:
        """Predict the first violation a planned schedule would cause."""
        self._check_instant(evaluation_instant)
        return self.predictor.predict(
            driver_id,
            segments,
            planned_segments,
            evaluation_instant,
            policy or self.policy,
            other_employer_minutes,
        )

    def status_badge(
        self, evaluation: DriverEvaluation, policy: Optional[PolicyWindow] = None
    ) -> str:
        """Dashboard badge for an evaluation made under ``policy``."""
        return self.driver_evaluator.availability.status_badge(
            evaluation.metrics, evaluation.violations, policy or self.policy
        )

    def recommendations(
        self, evaluation: DriverEvaluation, policy: Optional[PolicyWindow] = None
    ) -> List[Dict]:
        """Dashboard recommendations for an evaluation made under ``policy``."""
        return explanations.build_recommendations(evaluation.metrics, policy or self.policy)

    def max_continuous_driving_minutes(
        self, evaluation: DriverEvaluation, policy: Optional[PolicyWindow] = None
    ) -> int:
        """Longest stretch the driver could drive from the evaluation instant."""
        return self.driver_evaluator.availability.max_continuous_driving_minutes(
            evaluation.metrics, policy or self.policy
        )

    def evaluate_drivers(
        self,
        driver_segments: Mapping[str, Sequence[DutySegment]],
        evaluation_instant: datetime,
        other_employer_minutes: Optional[Mapping[str, int]] = None,
        max_workers: Optional[int] = None,
    ) -> Tuple[Dict[str, DriverEvaluation], Dict[str, str]]:
        """
        Evaluate many drivers concurrently.

        A driver whose history is rejected is left out of the results and
        reported in the returned alerts; the other drivers are unaffected.

        A naive evaluation instant raises MalformedSegment for the whole call.

        Returns:
            Tuple of (evaluations by driver id, error message by driver id)
        """
        self._check_instant(evaluation_instant)
        other_employer_minutes = other_employer_minutes or {}
        max_workers = max_workers or getattr(
            settings, "HOS_FLEET_MAX_WORKERS", DEFAULT_FLEET_WORKERS
        )

        evaluations: Dict[str, DriverEvaluation] = {}
        alerts: Dict[str, str] = {}
        if not driver_segments:
            return evaluations, alerts

        with ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="HOSDriverWorker"
        ) as executor:
            futures = {
                executor.submit(
                    self.evaluate,
                    driver_id,
                    segments,
                    evaluation_instant,
                    other_employer_minutes=other_employer_minutes.get(driver_id, 0),
                ): driver_id
                for driver_id, segments in driver_segments.items()
            }

            for future in as_completed(futures):
                driver_id = futures[future]
                try:
                    evaluations[driver_id] = future.result()
                except HOSEngineError as e:
                    self.logger.warning(f"Excluding driver {driver_id} from fleet evaluation: {e}")
                    alerts[driver_id] = str(e)

        return evaluations, alerts

    def evaluate_fleet(
        self,
        driver_segments: Mapping[str, Sequence[DutySegment]],
        evaluation_instant: datetime,
        other_employer_minutes: Optional[Mapping[str, int]] = None,
        max_workers: Optional[int] = None,
    ) -> FleetSummary:
        """
        Evaluate every active driver and summarise the fleet.

        Args:
            driver_segments: Duty segments keyed by driver id
            evaluation_instant: Timezone-aware evaluation instant
            other_employer_minutes: Attested minutes keyed by driver id
            max_workers: Thread pool size; defaults to HOS_FLEET_MAX_WORKERS

        Returns:
            FleetSummary with bucket counts and data-quality alerts
        """
        evaluations, alerts = self.evaluate_drivers(
            driver_segments, evaluation_instant, other_employer_minutes, max_workers
        )
        ordered = [evaluations[driver_id] for driver_id in sorted(evaluations)]
        summary = self.fleet_aggregator.aggregate(ordered, self.policy, alerts)

        self.logger.info(
            f"Fleet evaluated at {evaluation_instant.isoformat()}: "
            f"{summary.total_drivers} driver(s), {len(alerts)} excluded"
        )
        return summary

    def analyze_schedule(
        self,
        driver_segments: Mapping[str, Sequence[DutySegment]],
        planned: Mapping[str, Sequence[DutySegment]],
        evaluation_instant: datetime,
        other_employer_minutes: Optional[Mapping[str, int]] = None,
    ) -> Dict:
        """
        Check planned shifts and suggest replacement drivers for conflicts.

        Args:
            driver_segments: Duty history keyed by driver id (all active drivers)
            planned: Planned segments keyed by driver id
            evaluation_instant: Timezone-aware evaluation instant
            other_employer_minutes: Attested minutes keyed by driver id

        Returns:
            Dict with a prediction per planned driver, the conflicts with
            their alternative drivers, drivers with nothing planned and
            data-quality alerts
        """
        other_employer_minutes = other_employer_minutes or {}
        evaluations, alerts = self.evaluate_drivers(
            driver_segments, evaluation_instant, other_employer_minutes
        )

        predictions: Dict[str, Optional[Prediction]] = {}
        planned_minutes: Dict[str, int] = {}
        for driver_id in sorted(planned):
            if driver_id in alerts:
                continue
            plan = planned[driver_id]
            planned_minutes[driver_id] = sum(
                segment.duration_minutes for segment in plan if segment.is_on_duty
            )
            try:
                predictions[driver_id] = self.predict(
                    driver_id,
                    driver_segments.get(driver_id, ()),
                    plan,
                    evaluation_instant,
                    other_employer_minutes=other_employer_minutes.get(driver_id, 0),
                )
            except HOSEngineError as e:
                self.logger.warning(f"Cannot analyse plan for driver {driver_id}: {e}")
                alerts[driver_id] = str(e)

        conflicted = {driver_id for driver_id, prediction in predictions.items() if prediction}
        conflicts = [
            {
                "driver_id": driver_id,
                "prediction": predictions[driver_id],
                "planned_on_duty_minutes": planned_minutes[driver_id],
                "alternatives": self._alternative_drivers(
                    driver_id, planned_minutes[driver_id], evaluations, planned_minutes, conflicted
                ),
            }
            for driver_id in sorted(conflicted)
        ]

        unscheduled = sorted(driver_id for driver_id in evaluations if driver_id not in planned)

        self.logger.info(
            f"Schedule analysed for {len(predictions)} driver(s): {len(conflicts)} conflict(s)"
        )
        return {
            "evaluated_at": evaluation_instant,
            "predictions": predictions,
            "conflicts": conflicts,
            "unscheduled_drivers": unscheduled,
            "data_quality_alerts": alerts,
        }

    def _alternative_drivers(
        self,
        driver_id: str,
        shift_minutes: int,
        evaluations: Mapping[str, DriverEvaluation],
        planned_minutes: Mapping[str, int],
        conflicted: set,
    ) -> List[Dict]:
        """Compliant drivers with enough weekly hours left, most available first."""
        candidates = []
        for candidate_id, evaluation in evaluations.items():
            if candidate_id == driver_id or candidate_id in conflicted:
                continue
            if not evaluation.metrics.can_drive:
                continue

            remaining = evaluation.metrics.weekly_minutes_available - planned_minutes.get(
                candidate_id, 0
            )
            if remaining < shift_minutes:
                continue
            candidates.append(
                {
                    "driver_id": candidate_id,
                    "weekly_hours_available": round(remaining / 60.0, 2),
                    "driving_hours_available": evaluation.metrics.driving_hours_available,
                }
            )

        candidates.sort(key=lambda item: (-item["weekly_hours_available"], item["driver_id"]))
        return candidates[:MAX_ALTERNATIVE_DRIVERS]

    def _check_instant(self, evaluation_instant: datetime) -> None:
        if not is_aware(evaluation_instant):
            raise MalformedSegment(
                f"Evaluation instant {evaluation_instant.isoformat()} must be timezone-aware"
            )

    def build_grid(
        self,
        driver_segments: Mapping[str, Sequence[DutySegment]],
        end_date: date,
        days: int = 7,
        other_employer_minutes: Optional[Mapping[str, int]] = None,
    ) -> List[GridRow]:
        """
        Build 60/7 grid rows for the given drivers.

        Raises:
            MalformedSegment: If any driver's segments are invalid
        """
        validated = {
            driver_id: self.segment_builder.normalize_segments(segments, driver_id)
            for driver_id, segments in driver_segments.items()
        }
        return self.grid_view.build_rows(
            validated, end_date, self.policy, days, dict(other_employer_minutes or {})
        )
