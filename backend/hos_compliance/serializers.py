"""
HOS Compliance API Serializers.

Provides serialization and validation for HOS compliance API endpoints.
Request serializers validate JSON input and convert it into the engine's
value objects; response serializers format engine results.
"""

from rest_framework import serializers

from common.validators import validate_other_employer_minutes

from .models import AttendanceRecord, DutySegment, DutyStatus
from .services import explanations
from .services.grid import MAX_GRID_DAYS
from .services.segment_builder import SegmentBuilderService

_segment_builder = SegmentBuilderService()


class DutyStatusField(serializers.CharField):
    """
    Duty status accepting loose labels (OFF, SB, D, ON, PC, YM, ...).

    Always represented as the canonical DutyStatus value.
    """

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        return _segment_builder.parse_duty_status(value)

    def to_representation(self, value):
        return str(value)


class DutySegmentSerializer(serializers.Serializer):
    """
    Serializer for a single duty segment.

    ``driver_id`` is optional on input; segments nested in a per-driver
    request inherit the enclosing driver id.
    """

    driver_id = serializers.CharField(max_length=64, required=False)
    start = serializers.DateTimeField()
    end = serializers.DateTimeField()
    status = DutyStatusField(help_text="OFF_DUTY, SLEEPER_BERTH, DRIVING or ON_DUTY_NOT_DRIVING")
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    duration_hours = serializers.FloatField(read_only=True)

    def validate(self, data):
        """Cross-field validation for segment bounds."""
        if data["end"] <= data["start"]:
            raise serializers.ValidationError({"end": "Segment end must be after its start"})
        return data


def to_duty_segments(driver_id, items):
    """Convert validated segment data into DutySegment values for a driver."""
    return [
        DutySegment(
            driver_id=driver_id,
            start=item["start"],
            end=item["end"],
            status=item["status"],
            notes=item.get("notes", ""),
        )
        for item in items
    ]


class AttendanceRecordSerializer(serializers.Serializer):
    """Serializer for a raw attendance (timecard) record."""

    driver_id = serializers.CharField(max_length=64)
    clock_in = serializers.DateTimeField()
    clock_out = serializers.DateTimeField(required=False, allow_null=True, default=None)
    break_start = serializers.DateTimeField(required=False, allow_null=True, default=None)
    break_end = serializers.DateTimeField(required=False, allow_null=True, default=None)
    status = DutyStatusField(required=False, default=DutyStatus.DRIVING)
    source = serializers.CharField(required=False, allow_blank=True, default="timecard")

    def validate(self, data):
        """Cross-field validation for shift and break bounds."""
        clock_out = data.get("clock_out")
        if clock_out is not None and clock_out <= data["clock_in"]:
            raise serializers.ValidationError({"clock_out": "Clock-out must be after clock-in"})

        has_start = data.get("break_start") is not None
        has_end = data.get("break_end") is not None
        if has_start != has_end:
            raise serializers.ValidationError(
                {"break_end": "Break start and break end must be given together"}
            )
        return data


class BuildSegmentsRequestSerializer(serializers.Serializer):
    """
    Serializer for segment building requests.

    Records may belong to several drivers; segments are built per driver.
    """

    records = AttendanceRecordSerializer(many=True)
    as_of = serializers.DateTimeField(
        required=False,
        allow_null=True,
        default=None,
        help_text="Instant that closes open shifts",
    )

    def get_records(self):
        return [AttendanceRecord(**item) for item in self.validated_data["records"]]


class EvaluationRequestSerializer(serializers.Serializer):
    """Serializer for single-driver evaluation requests."""

    driver_id = serializers.CharField(max_length=64)
    evaluation_instant = serializers.DateTimeField()
    segments = DutySegmentSerializer(many=True)
    other_employer_minutes = serializers.IntegerField(
        required=False,
        default=0,
        validators=[validate_other_employer_minutes],
        help_text="Attested minutes worked for another carrier in the window",
    )

    def validate(self, data):
        """Segments must belong to the requested driver."""
        driver_id = data["driver_id"]
        for item in data["segments"]:
            if item.get("driver_id", driver_id) != driver_id:
                raise serializers.ValidationError(
                    {"segments": f"Segment for driver {item['driver_id']} in request for {driver_id}"}
                )
        return data

    def get_segments(self):
        return to_duty_segments(self.validated_data["driver_id"], self.validated_data["segments"])


class PredictionRequestSerializer(EvaluationRequestSerializer):
    """Serializer for schedule prediction requests."""

    planned_segments = DutySegmentSerializer(many=True)

    def get_planned_segments(self):
        return to_duty_segments(
            self.validated_data["driver_id"], self.validated_data["planned_segments"]
        )


class DriverScheduleSerializer(serializers.Serializer):
    """One driver's history and plan inside a fleet request."""

    driver_id = serializers.CharField(max_length=64)
    segments = DutySegmentSerializer(many=True)
    planned_segments = DutySegmentSerializer(many=True, required=False, default=list)
    other_employer_minutes = serializers.IntegerField(
        required=False, default=0, validators=[validate_other_employer_minutes]
    )


class FleetRequestSerializer(serializers.Serializer):
    """
    Serializer for fleet-wide requests.

    Provides per-driver segment and attestation mappings for the engine.
    """

    evaluation_instant = serializers.DateTimeField()
    drivers = DriverScheduleSerializer(many=True)
    max_workers = serializers.IntegerField(required=False, min_value=1, max_value=64)

    def validate_drivers(self, value):
        driver_ids = [item["driver_id"] for item in value]
        duplicates = sorted({driver_id for driver_id in driver_ids if driver_ids.count(driver_id) > 1})
        if duplicates:
            raise serializers.ValidationError(f"Duplicate drivers in request: {duplicates}")
        return value

    def get_driver_segments(self):
        return {
            item["driver_id"]: to_duty_segments(item["driver_id"], item["segments"])
            for item in self.validated_data["drivers"]
        }

    def get_planned_segments(self):
        return {
            item["driver_id"]: to_duty_segments(item["driver_id"], item["planned_segments"])
            for item in self.validated_data["drivers"]
            if item["planned_segments"]
        }

    def get_other_employer_minutes(self):
        return {
            item["driver_id"]: item["other_employer_minutes"]
            for item in self.validated_data["drivers"]
        }


class GridRequestSerializer(FleetRequestSerializer):
    """Serializer for 60/7 grid requests."""

    evaluation_instant = None
    end_date = serializers.DateField(help_text="Last local calendar day shown")
    days = serializers.IntegerField(
        required=False,
        default=7,
        min_value=1,
        max_value=MAX_GRID_DAYS,
        help_text="Days shown (7-42)",
    )


class DriverMetricsSerializer(serializers.Serializer):
    """Serializer for DriverMetrics values; hours are derived from minutes."""

    driver_id = serializers.CharField()
    evaluated_at = serializers.DateTimeField()
    weekly_rule = serializers.CharField()
    hours_used_7d = serializers.FloatField()
    hours_used_8d = serializers.FloatField()
    driving_hours_since_rest = serializers.FloatField()
    on_duty_hours_since_rest = serializers.FloatField()
    driving_hours_since_break = serializers.FloatField()
    last_qualifying_restart = serializers.DateTimeField(allow_null=True)
    last_rest_end = serializers.DateTimeField(allow_null=True)
    weekly_hours_available = serializers.FloatField()
    driving_hours_available = serializers.FloatField()
    on_duty_hours_available = serializers.FloatField()
    next_break_required = serializers.BooleanField()
    can_drive = serializers.BooleanField()


class ViolationSerializer(serializers.Serializer):
    """Serializer for Violation values with message and regulation text."""

    type = serializers.CharField()
    severity = serializers.CharField()
    observed_value = serializers.FloatField()
    limit_value = serializers.FloatField()
    margin = serializers.FloatField()
    evaluated_at = serializers.DateTimeField()
    message = serializers.SerializerMethodField()
    regulation = serializers.SerializerMethodField()

    def get_message(self, obj):
        return explanations.describe_violation(obj)

    def get_regulation(self, obj):
        return explanations.regulation_for(obj.type)


class PredictionSerializer(serializers.Serializer):
    """Serializer for Prediction values."""

    driver_id = serializers.CharField()
    first_violated_type = serializers.CharField()
    projected_violation_instant = serializers.DateTimeField()
    projected_margin_at_plan_end = serializers.FloatField()
    severity = serializers.CharField()
    segment_index = serializers.IntegerField()
    regulation = serializers.SerializerMethodField()

    def get_regulation(self, obj):
        return explanations.regulation_for(obj.first_violated_type)


class FleetSummarySerializer(serializers.Serializer):
    """Serializer for fleet dashboard summaries."""

    total_drivers = serializers.IntegerField()
    counts = serializers.DictField(child=serializers.IntegerField())
    average_hours_used_7d = serializers.FloatField()
    average_utilization_percent = serializers.FloatField()
    classifications = serializers.DictField(child=serializers.CharField())
    data_quality_alerts = serializers.DictField(child=serializers.CharField())


class GridRowSerializer(serializers.Serializer):
    """Serializer for 60/7 grid rows."""

    driver_id = serializers.CharField()
    days = serializers.ListField(child=serializers.DateField())
    day_hours = serializers.ListField(child=serializers.FloatField())
    hours_used = serializers.FloatField()
    hours_available = serializers.FloatField()
    status = serializers.CharField()
    reasons = serializers.ListField(child=serializers.DictField())
