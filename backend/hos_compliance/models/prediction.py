"""
Prediction value for HOS compliance.

Produced by the Predictor only when planned segments cause a violation.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Prediction:
    """
    First projected violation for a planned schedule.

    Attributes:
        driver_id: Driver identifier
        first_violated_type: ViolationType crossed first
        projected_violation_instant: Instant the threshold is crossed
        margin_minutes_at_plan_end: Observed minus limit at the end of the plan
        severity: Severity of the violation at the responsible segment's end
        segment_index: Index of the responsible planned segment
    """

    driver_id: str
    first_violated_type: str
    projected_violation_instant: datetime
    margin_minutes_at_plan_end: int
    severity: str
    segment_index: int

    @property
    def projected_margin_at_plan_end(self) -> float:
        return self.margin_minutes_at_plan_end / 60.0
