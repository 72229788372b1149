"""
Fleet Aggregator Service.

Reduces per-driver evaluations into fleet-level counts for the real-time
dashboard: available, limited, rest required and violation, plus the
fleet-average weekly usage.

Single Responsibility: fleet-level reduction only.
"""

import logging
from typing import Dict, Optional, Sequence

from ..models import DriverEvaluation, FleetBucket, FleetSummary, PolicyWindow

logger = logging.getLogger(__name__)


class FleetAggregatorService:
    """Service for classifying drivers and summarising the fleet."""

    def __init__(self):
        """Initialize fleet aggregator."""
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def classify(self, evaluation: DriverEvaluation, policy: PolicyWindow) -> str:
        """
        Place one driver in a single bucket.

        Precedence is violation > rest_required > limited > available. A
        driver who cannot drive but matches no other bucket (a limit
        exactly used up) needs rest.
        """
        metrics = evaluation.metrics

        if evaluation.violations:
            return FleetBucket.VIOLATION
        if (
            metrics.weekly_minutes_available < policy.fleet_rest_weekly_minutes
            or metrics.driving_minutes_available < policy.fleet_rest_driving_minutes
        ):
            return FleetBucket.REST_REQUIRED
        if not metrics.can_drive:
            return FleetBucket.REST_REQUIRED
        if metrics.weekly_minutes_available < policy.fleet_limited_weekly_minutes:
            return FleetBucket.LIMITED
        return FleetBucket.AVAILABLE

    def aggregate(
        self,
        evaluations: Sequence[DriverEvaluation],
        policy: PolicyWindow,
        data_quality_alerts: Optional[Dict[str, str]] = None,
    ) -> FleetSummary:
        """
        Summarise a fleet.

        Args:
            evaluations: Per-driver evaluations for all active drivers
            policy: Active policy window
            data_quality_alerts: Drivers excluded from the counts and why

        Returns:
            FleetSummary with bucket counts and averages
        """
        counts = {bucket.value: 0 for bucket in FleetBucket}
        classifications = {}

        for evaluation in evaluations:
            bucket = FleetBucket(self.classify(evaluation, policy))
            counts[bucket.value] += 1
            classifications[evaluation.driver_id] = bucket.value

        total = len(evaluations)
        if total:
            average_minutes = sum(e.metrics.minutes_used_7d for e in evaluations) / total
            average_used_for_rule = (
                sum(e.metrics.minutes_used_for(policy.window_days) for e in evaluations) / total
            )
            utilization = round(100.0 * average_used_for_rule / policy.weekly_limit_minutes, 1)
        else:
            average_minutes = 0.0
            utilization = 0.0

        summary = FleetSummary(
            total_drivers=total,
            counts=counts,
            average_hours_used_7d=round(average_minutes / 60.0, 2),
            average_utilization_percent=utilization,
            classifications=classifications,
            data_quality_alerts=dict(data_quality_alerts or {}),
        )

        self.logger.debug(f"Fleet summary for {total} drivers: {counts}")
        return summary
