"""
HOS Compliance API Views.

Provides REST API endpoints for evaluating drivers against the HOS
rules, predicting violations for planned schedules and summarising the
fleet. Views validate input, delegate to the engine services and
serialize the results; no data is persisted.
"""

import logging

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from .exceptions import HOSEngineError
from .serializers import (
    BuildSegmentsRequestSerializer,
    DriverMetricsSerializer,
    DutySegmentSerializer,
    EvaluationRequestSerializer,
    FleetRequestSerializer,
    FleetSummarySerializer,
    GridRequestSerializer,
    GridRowSerializer,
    PredictionRequestSerializer,
    PredictionSerializer,
    ViolationSerializer,
)
from .services.hos_engine import HOSEngineService
from .services.policy import get_policy
from .services.segment_builder import SegmentBuilderService

logger = logging.getLogger(__name__)


def engine_error_response(error, context):
    """Translate an engine error into a 400 response."""
    logger.warning(f"Rejected {context}: {error}")
    return Response(
        {'error': str(error), 'error_type': error.__class__.__name__},
        status=status.HTTP_400_BAD_REQUEST,
    )


def server_error_response(error, context, message):
    """Log an unexpected error and return a 500 response."""
    logger.error(f"Error during {context}: {str(error)}")
    return Response({'error': message}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


class SegmentViewSet(viewsets.ViewSet):
    """
    ViewSet for duty segment construction.

    Turns attendance records into the duty segments the other
    endpoints accept.
    """

    permission_classes = [AllowAny]

    @action(detail=False, methods=['post'])
    def build(self, request):
        """
        Build duty segments from attendance records.

        Request Body:
            records (list): Attendance records (driver_id, clock_in,
                clock_out, break_start, break_end, status, source)
            as_of (datetime): Instant that closes open shifts (optional)
        """
        serializer = BuildSegmentsRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            segments_by_driver = SegmentBuilderService().build_fleet_segments(
                serializer.get_records(), as_of=serializer.validated_data['as_of']
            )
            data = {
                driver_id: DutySegmentSerializer(segments, many=True).data
                for driver_id, segments in sorted(segments_by_driver.items())
            }

            logger.info(f"Built duty segments for {len(data)} driver(s)")
            return Response({'drivers': data})

        except HOSEngineError as e:
            return engine_error_response(e, 'segment build')
        except Exception as e:
            return server_error_response(e, 'segment build', 'Failed to build duty segments')


class HOSEvaluationViewSet(viewsets.ViewSet):
    """
    ViewSet for per-driver HOS evaluation and prediction.

    Calculates compliance at an explicit evaluation instant without
    persisting data to database.
    """

    permission_classes = [AllowAny]

    @action(detail=False, methods=['post'])
    def evaluate(self, request):
        """
        Evaluate a driver against every HOS limit.

        Request Body:
            driver_id (str): Driver identifier
            evaluation_instant (datetime): Instant to evaluate at
            segments (list): Duty segments (start, end, status)
            other_employer_minutes (int): Attested minutes for another carrier
        """
        serializer = EvaluationRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        driver_id = serializer.validated_data['driver_id']
        try:
            engine = HOSEngineService()
            evaluation = engine.evaluate(
                driver_id,
                serializer.get_segments(),
                serializer.validated_data['evaluation_instant'],
                other_employer_minutes=serializer.validated_data['other_employer_minutes'],
            )

            result = {
                'driver_id': driver_id,
                'status': str(engine.status_badge(evaluation)),
                'is_compliant': evaluation.is_compliant,
                'metrics': DriverMetricsSerializer(evaluation.metrics).data,
                'violations': ViolationSerializer(evaluation.violations, many=True).data,
                'recommendations': engine.recommendations(evaluation),
                'max_continuous_driving_hours': round(
                    engine.max_continuous_driving_minutes(evaluation) / 60.0, 2
                ),
            }

            logger.info(
                f"HOS evaluation for driver {driver_id}: {result['status']} "
                f"({len(evaluation.violations)} violation(s))"
            )
            return Response(result)

        except HOSEngineError as e:
            return engine_error_response(e, f'evaluation for driver {driver_id}')
        except Exception as e:
            return server_error_response(
                e, f'evaluation for driver {driver_id}', 'Failed to evaluate HOS compliance'
            )

    @action(detail=False, methods=['post'])
    def predict(self, request):
        """
        Predict the first violation a planned schedule would cause.

        Request Body:
            driver_id (str): Driver identifier
            evaluation_instant (datetime): Instant the plan starts from
            segments (list): Existing duty segments
            planned_segments (list): Future duty segments
            other_employer_minutes (int): Attested minutes for another carrier
        """
        serializer = PredictionRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        driver_id = serializer.validated_data['driver_id']
        try:
            prediction = HOSEngineService().predict(
                driver_id,
                serializer.get_segments(),
                serializer.get_planned_segments(),
                serializer.validated_data['evaluation_instant'],
                other_employer_minutes=serializer.validated_data['other_employer_minutes'],
            )

            logger.info(
                f"Schedule prediction for driver {driver_id}: "
                f"{prediction.first_violated_type if prediction else 'no violation'}"
            )
            return Response({
                'driver_id': driver_id,
                'violation_predicted': prediction is not None,
                'prediction': PredictionSerializer(prediction).data if prediction else None,
            })

        except HOSEngineError as e:
            return engine_error_response(e, f'prediction for driver {driver_id}')
        except Exception as e:
            return server_error_response(
                e, f'prediction for driver {driver_id}', 'Failed to predict HOS violations'
            )

    @action(detail=False, methods=['post'])
    def analyze_schedule(self, request):
        """
        Check every planned shift and suggest alternative drivers.

        Request Body:
            evaluation_instant (datetime): Instant the plans start from
            drivers (list): driver_id, segments, planned_segments and
                other_employer_minutes per active driver
        """
        serializer = FleetRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            analysis = HOSEngineService().analyze_schedule(
                serializer.get_driver_segments(),
                serializer.get_planned_segments(),
                serializer.validated_data['evaluation_instant'],
                serializer.get_other_employer_minutes(),
            )

            result = {
                'evaluated_at': serializer.fields['evaluation_instant'].to_representation(
                    analysis['evaluated_at']
                ),
                'predictions': {
                    driver_id: PredictionSerializer(prediction).data if prediction else None
                    for driver_id, prediction in analysis['predictions'].items()
                },
                'conflicts': [
                    {
                        'driver_id': conflict['driver_id'],
                        'prediction': PredictionSerializer(conflict['prediction']).data,
                        'planned_on_duty_hours': round(conflict['planned_on_duty_minutes'] / 60.0, 2),
                        'suggested_action': 'Reassign shift to driver with more available hours',
                        'alternative_drivers': conflict['alternatives'],
                    }
                    for conflict in analysis['conflicts']
                ],
                'unscheduled_drivers': analysis['unscheduled_drivers'],
                'data_quality_alerts': analysis['data_quality_alerts'],
            }

            logger.info(f"Schedule analysis returned {len(result['conflicts'])} conflict(s)")
            return Response(result)

        except HOSEngineError as e:
            return engine_error_response(e, 'schedule analysis')
        except Exception as e:
            return server_error_response(e, 'schedule analysis', 'Failed to analyze schedule')


class FleetViewSet(viewsets.ViewSet):
    """
    ViewSet for fleet dashboard data.

    Evaluates all supplied drivers concurrently; drivers with malformed
    history are reported as data-quality alerts instead of failing the
    request.
    """

    permission_classes = [AllowAny]

    @action(detail=False, methods=['post'])
    def dashboard(self, request):
        """Fleet counts per bucket and average weekly usage."""
        serializer = FleetRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            summary = HOSEngineService().evaluate_fleet(
                serializer.get_driver_segments(),
                serializer.validated_data['evaluation_instant'],
                serializer.get_other_employer_minutes(),
                max_workers=serializer.validated_data.get('max_workers'),
            )
            return Response(FleetSummarySerializer(summary).data)

        except HOSEngineError as e:
            return engine_error_response(e, 'fleet dashboard')
        except Exception as e:
            return server_error_response(e, 'fleet dashboard', 'Failed to evaluate fleet')

    @action(detail=False, methods=['post'])
    def grid(self, request):
        """
        Rolling 60/7 grid rows.

        Request Body:
            end_date (date): Last local day shown
            days (int): Days shown, clamped to 7-42
            drivers (list): driver_id, segments and other_employer_minutes
        """
        serializer = GridRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            rows = HOSEngineService().build_grid(
                serializer.get_driver_segments(),
                serializer.validated_data['end_date'],
                serializer.validated_data['days'],
                serializer.get_other_employer_minutes(),
            )

            logger.info(f"Built 60/7 grid with {len(rows)} row(s)")
            return Response({
                'end_date': serializer.validated_data['end_date'].isoformat(),
                'rows': GridRowSerializer(rows, many=True).data,
            })

        except HOSEngineError as e:
            return engine_error_response(e, 'grid view')
        except Exception as e:
            return server_error_response(e, 'grid view', 'Failed to build grid')


class PolicyViewSet(viewsets.ViewSet):
    """ViewSet exposing the active HOS policy."""

    permission_classes = [AllowAny]

    def list(self, request):
        """Active policy limits."""
        try:
            return Response(get_policy().to_dict())
        except HOSEngineError as e:
            return server_error_response(e, 'policy lookup', 'HOS policy is misconfigured')
