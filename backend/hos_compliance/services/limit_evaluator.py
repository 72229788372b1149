"""
Limit Evaluator Service.

Applies the HOS rule checks to a driver's metrics at one instant:
- 60-hour/7-day or 70-hour/8-day limit (whichever the carrier operates under)
- 11-hour driving limit since the last 10-hour rest
- 14-hour on-duty limit since the last 10-hour rest
- 30-minute break after 8 hours of driving

Each limit is checked independently and every exceeded limit is
reported. Severity is a function of the violation type and its margin.

Single Responsibility: rule evaluation only.
"""

import logging
from typing import List, Optional

from ..models import DriverMetrics, PolicyWindow, Severity, Violation, ViolationType

logger = logging.getLogger(__name__)


class LimitEvaluatorService:
    """
    Service for evaluating HOS limits against computed metrics.

    Stateless: the same metrics and policy always yield the same violations.
    """

    # Report order; also the tie-break order for predictions
    VIOLATION_ORDER = (
        ViolationType.WEEKLY_60_HOUR,
        ViolationType.WEEKLY_70_HOUR,
        ViolationType.DRIVING_11_HOUR,
        ViolationType.ON_DUTY_14_HOUR,
        ViolationType.BREAK_30_MINUTE,
    )

    def __init__(self):
        """Initialize limit evaluator."""
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def evaluate(self, metrics: DriverMetrics, policy: PolicyWindow) -> List[Violation]:
        """
        Evaluate every limit for the given metrics.

        Args:
            metrics: Usage metrics from the Rolling Window Calculator
            policy: Active policy window

        Returns:
            All active violations, in VIOLATION_ORDER
        """
        violations = []
        for violation_type in self.VIOLATION_ORDER:
            violation = self.check(violation_type, metrics, policy)
            if violation is not None:
                violations.append(violation)

        if violations:
            self.logger.debug(
                f"Driver {metrics.driver_id} has {len(violations)} violation(s) at "
                f"{metrics.evaluated_at.isoformat()}: {[str(v.type) for v in violations]}"
            )
        return violations

    def check(
        self,
        violation_type: str,
        metrics: DriverMetrics,
        policy: PolicyWindow,
    ) -> Optional[Violation]:
        """Check a single limit; returns None when it is not exceeded or not in force."""
        if violation_type in (ViolationType.WEEKLY_60_HOUR, ViolationType.WEEKLY_70_HOUR):
            if violation_type != policy.weekly_violation_type:
                return None

        observed = self.observed_minutes(violation_type, metrics, policy)
        limit = self.limit_minutes(violation_type, policy)
        if not self.is_exceeded(violation_type, observed, limit):
            return None

        return Violation(
            driver_id=metrics.driver_id,
            type=violation_type,
            severity=self.severity_for(violation_type, observed - limit, policy),
            observed_minutes=observed,
            limit_minutes=limit,
            evaluated_at=metrics.evaluated_at,
        )

    def observed_minutes(
        self, violation_type: str, metrics: DriverMetrics, policy: PolicyWindow
    ) -> int:
        """Metric a limit is measured against."""
        if violation_type in (ViolationType.WEEKLY_60_HOUR, ViolationType.WEEKLY_70_HOUR):
            return metrics.minutes_used_for(policy.window_days)
        if violation_type == ViolationType.DRIVING_11_HOUR:
            return metrics.driving_minutes_since_rest
        if violation_type == ViolationType.ON_DUTY_14_HOUR:
            return metrics.on_duty_minutes_since_rest
        if violation_type == ViolationType.BREAK_30_MINUTE:
            return metrics.driving_minutes_since_break
        raise ValueError(f"Unknown violation type: {violation_type}")

    def limit_minutes(self, violation_type: str, policy: PolicyWindow) -> int:
        """Regulatory limit for a violation type."""
        if violation_type in (ViolationType.WEEKLY_60_HOUR, ViolationType.WEEKLY_70_HOUR):
            return policy.weekly_limit_minutes
        if violation_type == ViolationType.DRIVING_11_HOUR:
            return policy.driving_limit_minutes
        if violation_type == ViolationType.ON_DUTY_14_HOUR:
            return policy.on_duty_limit_minutes
        if violation_type == ViolationType.BREAK_30_MINUTE:
            return policy.break_after_driving_minutes
        raise ValueError(f"Unknown violation type: {violation_type}")

    def is_exceeded(self, violation_type: str, observed: int, limit: int) -> bool:
        """
        Whether the observed value breaks the limit.

        The break rule trips on reaching 8 hours of driving without an
        interruption; the hour limits trip only once exceeded.
        """
        if violation_type == ViolationType.BREAK_30_MINUTE:
            return observed >= limit
        return observed > limit

    def severity_for(self, violation_type: str, margin_minutes: int, policy: PolicyWindow) -> str:
        """
        Severity for a violation.

        Daily limits and the break rule require the driver to stop now.
        Weekly violations escalate once the margin passes the policy's
        critical margin.
        """
        if violation_type in (ViolationType.WEEKLY_60_HOUR, ViolationType.WEEKLY_70_HOUR):
            if margin_minutes > policy.weekly_critical_margin_minutes:
                return Severity.CRITICAL
            return Severity.HIGH
        return Severity.CRITICAL
