"""
Evaluation and fleet values for HOS compliance.

Per-driver evaluation results, dashboard badges, fleet buckets and the
60/7 grid row consumed by the dashboard.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Tuple

from django.db import models

from .driver_metrics import DriverMetrics
from .violation import Violation


class StatusBadge(models.TextChoices):
    OK = "OK", "OK"
    AT_RISK = "AT_RISK", "At Risk"
    VIOLATION = "VIOLATION", "Violation"


class FleetBucket(models.TextChoices):
    AVAILABLE = "available", "Available"
    LIMITED = "limited", "Limited"
    REST_REQUIRED = "rest_required", "Rest Required"
    VIOLATION = "violation", "Violation"


@dataclass(frozen=True)
class DriverEvaluation:
    """Metrics and active violations for one driver at one instant."""

    metrics: DriverMetrics
    violations: Tuple[Violation, ...] = ()

    @property
    def driver_id(self) -> str:
        return self.metrics.driver_id

    @property
    def is_compliant(self) -> bool:
        return not self.violations


@dataclass(frozen=True)
class FleetSummary:
    """
    Fleet-level reduction of per-driver evaluations.

    Attributes:
        total_drivers: Drivers included in the counts
        counts: Drivers per FleetBucket value
        average_hours_used_7d: Mean of hours_used_7d over included drivers
        average_utilization_percent: Mean weekly usage against the policy limit
        classifications: FleetBucket per driver id
        data_quality_alerts: Error message per driver excluded from the counts
    """

    total_drivers: int
    counts: Dict[str, int]
    average_hours_used_7d: float
    average_utilization_percent: float
    classifications: Dict[str, str] = field(default_factory=dict)
    data_quality_alerts: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class GridRow:
    """One driver's row in the rolling 60/7 grid view."""

    driver_id: str
    days: List[date]
    day_hours: List[float]
    hours_used: float
    hours_available: float
    status: str
    reasons: List[dict] = field(default_factory=list)
