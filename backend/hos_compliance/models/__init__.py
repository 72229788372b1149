"""
HOS Compliance models package.

Immutable value objects passed between the engine stages, split into
separate files for better modularity. Nothing here is persisted.
"""

from .duty_segment import (
    AttendanceRecord,
    DutySegment,
    DutyStatus,
    ON_DUTY_STATUSES,
    REST_STATUSES,
)
from .violation import Severity, Violation, ViolationType
from .policy_window import PolicyWindow, WeeklyRule
from .driver_metrics import DriverMetrics
from .prediction import Prediction
from .fleet import DriverEvaluation, FleetBucket, FleetSummary, GridRow, StatusBadge

__all__ = [
    'AttendanceRecord',
    'DutySegment',
    'DutyStatus',
    'ON_DUTY_STATUSES',
    'REST_STATUSES',
    'Severity',
    'Violation',
    'ViolationType',
    'PolicyWindow',
    'WeeklyRule',
    'DriverMetrics',
    'Prediction',
    'DriverEvaluation',
    'FleetBucket',
    'FleetSummary',
    'GridRow',
    'StatusBadge',
]
