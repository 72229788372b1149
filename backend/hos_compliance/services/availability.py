"""
Availability Engine Service.

Computes how much a driver can still work right now under each limit,
whether the driver may drive, and the dashboard status badge.

Single Responsibility: remaining capacity calculation only.
"""

import logging
from dataclasses import replace
from typing import Sequence

from ..models import DriverMetrics, PolicyWindow, StatusBadge, Violation

logger = logging.getLogger(__name__)


class AvailabilityService:
    """Service for calculating remaining HOS capacity."""

    def __init__(self):
        """Initialize availability engine."""
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def apply(
        self,
        metrics: DriverMetrics,
        violations: Sequence[Violation],
        policy: PolicyWindow,
    ) -> DriverMetrics:
        """
        Fill the availability fields of a metrics value.

        Args:
            metrics: Usage metrics from the Rolling Window Calculator
            violations: Active violations from the Limit Evaluator
            policy: Active policy window

        Returns:
            New DriverMetrics with remaining capacity, can_drive and
            next_break_required populated
        """
        weekly_available = max(
            0, policy.weekly_limit_minutes - metrics.minutes_used_for(policy.window_days)
        )
        driving_available = max(
            0, policy.driving_limit_minutes - metrics.driving_minutes_since_rest
        )
        on_duty_available = max(
            0, policy.on_duty_limit_minutes - metrics.on_duty_minutes_since_rest
        )

        can_drive = (
            weekly_available > 0
            and driving_available > 0
            and on_duty_available > 0
            and not violations
        )
        next_break_required = (
            metrics.driving_minutes_since_rest >= policy.next_break_warning_minutes
        )

        return replace(
            metrics,
            weekly_minutes_available=weekly_available,
            driving_minutes_available=driving_available,
            on_duty_minutes_available=on_duty_available,
            next_break_required=next_break_required,
            can_drive=can_drive,
        )

    def max_continuous_driving_minutes(self, metrics: DriverMetrics, policy: PolicyWindow) -> int:
        """Longest stretch the driver could drive from now without breaking a limit."""
        if not metrics.can_drive:
            return 0

        until_break = max(
            0, policy.break_after_driving_minutes - metrics.driving_minutes_since_break
        )
        return max(
            0,
            min(
                metrics.weekly_minutes_available,
                metrics.driving_minutes_available,
                metrics.on_duty_minutes_available,
                until_break,
            ),
        )

    def status_badge(
        self,
        metrics: DriverMetrics,
        violations: Sequence[Violation],
        policy: PolicyWindow,
    ) -> str:
        """Dashboard badge: VIOLATION, AT_RISK or OK."""
        if violations:
            return StatusBadge.VIOLATION

        threshold = policy.at_risk_remaining_minutes
        if (
            metrics.weekly_minutes_available < threshold
            or metrics.driving_minutes_available < threshold
            or metrics.on_duty_minutes_available < threshold
            or metrics.next_break_required
        ):
            return StatusBadge.AT_RISK
        return StatusBadge.OK
