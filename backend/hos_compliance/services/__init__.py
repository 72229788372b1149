"""
HOS Compliance Services Package.

This package contains the business logic of the Hours of Service
compliance engine. Services are stateless and operate on the immutable
values in ``hos_compliance.models``.

Services:
- SegmentBuilderService: Attendance records to validated duty segments
- RollingWindowCalculatorService: 60/7, 70/8 and since-rest duty sums
- RestartDetectorService: Qualifying 34-hour restarts
- LimitEvaluatorService: Rule checks and violation severity
- AvailabilityService: Remaining hours, can-drive and status badges
- DriverEvaluatorService: Per-driver evaluation pipeline
- ViolationPredictorService: Forward simulation of planned schedules
- FleetAggregatorService: Fleet dashboard counts
- GridViewService: Rolling 60/7 grid rows
- HOSEngineService: Facade used by the API
"""

from .segment_builder import SegmentBuilderService
from .rolling_window import RollingWindowCalculatorService
from .restart_detector import RestartDetectorService
from .limit_evaluator import LimitEvaluatorService
from .availability import AvailabilityService
from .driver_evaluator import DriverEvaluatorService
from .predictor import ViolationPredictorService
from .fleet_aggregator import FleetAggregatorService
from .grid import GridViewService
from .hos_engine import HOSEngineService
from .policy import get_policy, load_policy

__all__ = [
    'SegmentBuilderService',
    'RollingWindowCalculatorService',
    'RestartDetectorService',
    'LimitEvaluatorService',
    'AvailabilityService',
    'DriverEvaluatorService',
    'ViolationPredictorService',
    'FleetAggregatorService',
    'GridViewService',
    'HOSEngineService',
    'get_policy',
    'load_policy',
]
