"""
Violation values for HOS compliance.

Contains the ViolationType and Severity choices and the Violation value
produced by the Limit Evaluator. Violations are recomputed per
evaluation and never stored as mutable state.
"""

from dataclasses import dataclass
from datetime import datetime

from django.db import models


class ViolationType(models.TextChoices):
    WEEKLY_60_HOUR = "WEEKLY_60_HOUR", "60-Hour/7-Day Limit"
    WEEKLY_70_HOUR = "WEEKLY_70_HOUR", "70-Hour/8-Day Limit"
    DRIVING_11_HOUR = "DRIVING_11_HOUR", "11-Hour Driving Limit"
    ON_DUTY_14_HOUR = "ON_DUTY_14_HOUR", "14-Hour On-Duty Limit"
    BREAK_30_MINUTE = "BREAK_30_MINUTE", "30-Minute Rest Break Required"


class Severity(models.TextChoices):
    CRITICAL = "CRITICAL", "Critical (Stop Driving Now)"
    HIGH = "HIGH", "High (DOT Violation)"
    MEDIUM = "MEDIUM", "Medium (Approaching Limit)"
    LOW = "LOW", "Low (Advisory)"


@dataclass(frozen=True)
class Violation:
    """
    A limit exceeded at a specific evaluation instant.

    Values are kept in minutes; hours are derived for presentation.

    Attributes:
        driver_id: Driver identifier
        type: ViolationType value
        severity: Severity value, a function of type and margin
        observed_minutes: Observed usage
        limit_minutes: Regulatory limit
        evaluated_at: Evaluation instant
    """

    driver_id: str
    type: str
    severity: str
    observed_minutes: int
    limit_minutes: int
    evaluated_at: datetime

    @property
    def margin_minutes(self) -> int:
        return self.observed_minutes - self.limit_minutes

    @property
    def observed_value(self) -> float:
        return self.observed_minutes / 60.0

    @property
    def limit_value(self) -> float:
        return self.limit_minutes / 60.0

    @property
    def margin(self) -> float:
        return self.margin_minutes / 60.0

    @property
    def is_critical(self) -> bool:
        return self.severity == Severity.CRITICAL
