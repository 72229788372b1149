"""
Driver Evaluator Service.

Runs the per-driver pipeline over validated segments:
Rolling Window Calculator (floored by the Restart Detector) -> Limit
Evaluator -> Availability Engine.

Single Responsibility: composing the evaluation stages for one driver.
"""

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..models import DriverEvaluation, DriverMetrics, DutySegment, PolicyWindow
from .availability import AvailabilityService
from .limit_evaluator import LimitEvaluatorService
from .restart_detector import RestartDetectorService
from .rolling_window import RollingWindowCalculatorService

logger = logging.getLogger(__name__)


class DriverEvaluatorService:
    """Service composing the evaluation stages for a single driver."""

    def __init__(
        self,
        calculator: Optional[RollingWindowCalculatorService] = None,
        restart_detector: Optional[RestartDetectorService] = None,
        limit_evaluator: Optional[LimitEvaluatorService] = None,
        availability: Optional[AvailabilityService] = None,
    ):
        """Initialize driver evaluator with its stage services."""
        self.calculator = calculator or RollingWindowCalculatorService()
        self.restart_detector = restart_detector or RestartDetectorService(self.calculator)
        self.limit_evaluator = limit_evaluator or LimitEvaluatorService()
        self.availability = availability or AvailabilityService()
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def usage_at(
        self,
        driver_id: str,
        segments: Sequence[DutySegment],
        at: datetime,
        policy: PolicyWindow,
        other_employer_minutes: int = 0,
    ) -> DriverMetrics:
        """Usage metrics at ``at`` with the latest restart applied."""
        restart_end = self.restart_detector.find_last_restart(segments, at, policy)
        return self.calculator.calculate_usage(
            driver_id,
            segments,
            at,
            policy,
            restart_end=restart_end,
            other_employer_minutes=other_employer_minutes,
        )

    def evaluate(
        self,
        driver_id: str,
        segments: Sequence[DutySegment],
        at: datetime,
        policy: PolicyWindow,
        other_employer_minutes: int = 0,
    ) -> DriverEvaluation:
        """
        Evaluate one driver at one instant.

        Args:
            driver_id: Driver identifier
            segments: Validated, ordered segments (later segments are ignored)
            at: Evaluation instant
            policy: Active policy window
            other_employer_minutes: Attested minutes for another carrier

        Returns:
            DriverEvaluation with complete metrics and active violations
        """
        usage = self.usage_at(driver_id, segments, at, policy, other_employer_minutes)
        violations = self.limit_evaluator.evaluate(usage, policy)
        metrics = self.availability.apply(usage, violations, policy)
        return DriverEvaluation(metrics=metrics, violations=tuple(violations))
