"""
Tests for the Segment Builder

Run with: pytest tests/test_segment_builder.py -v
"""

from datetime import datetime

import pytest

from conftest import DRIVING, OFF_DUTY, ON_DUTY, SLEEPER, at, seg
from hos_compliance.exceptions import MalformedSegment
from hos_compliance.models import AttendanceRecord, DutyStatus
from hos_compliance.services import SegmentBuilderService


def record(clock_in, clock_out=None, driver_id="D1", **kwargs):
    return AttendanceRecord(driver_id=driver_id, clock_in=clock_in, clock_out=clock_out, **kwargs)


@pytest.fixture
def builder():
    return SegmentBuilderService()


class TestBuildSegments:
    """Tests for attendance record conversion"""

    def test_single_record_becomes_driving_segment(self, builder):
        """A plain shift is one driving segment"""
        segments = builder.build_segments([record(at(1, 8), at(1, 16))])

        assert len(segments) == 1
        assert segments[0].status == DutyStatus.DRIVING
        assert segments[0].duration_minutes == 8 * 60

    def test_gap_between_records_is_off_duty(self, builder):
        """Gaps between shifts are emitted as off-duty segments"""
        segments = builder.build_segments(
            [record(at(2, 8), at(2, 16)), record(at(1, 8), at(1, 16))]
        )

        assert [s.status for s in segments] == [DRIVING, OFF_DUTY, DRIVING]
        assert segments[1].start == at(1, 16)
        assert segments[1].end == at(2, 8)
        assert segments[1].notes == "gap between attendance records"

    def test_back_to_back_records_have_no_gap_segment(self, builder):
        """Adjacent records produce no zero-length gap"""
        segments = builder.build_segments(
            [record(at(1, 8), at(1, 12)), record(at(1, 12), at(1, 14), status=ON_DUTY)]
        )

        assert [s.status for s in segments] == [DRIVING, ON_DUTY]

    def test_break_splits_the_shift(self, builder):
        """A recorded break becomes an off-duty segment inside the shift"""
        segments = builder.build_segments(
            [record(at(1, 8), at(1, 17), break_start=at(1, 12), break_end=at(1, 12, 30))]
        )

        assert [s.status for s in segments] == [DRIVING, OFF_DUTY, DRIVING]
        assert segments[1].notes == "break"
        assert sum(s.duration_minutes for s in segments if s.is_driving) == 8 * 60 + 30

    def test_break_at_shift_start_drops_empty_piece(self, builder):
        """Breaks touching the shift edge leave no zero-length segment"""
        segments = builder.build_segments(
            [record(at(1, 8), at(1, 12), break_start=at(1, 8), break_end=at(1, 8, 30))]
        )

        assert [s.status for s in segments] == [OFF_DUTY, DRIVING]

    def test_open_shift_closed_at_as_of(self, builder):
        """An open shift runs until the supplied instant"""
        segments = builder.build_segments([record(at(1, 8))], as_of=at(1, 11))

        assert segments[0].end == at(1, 11)

    def test_open_shift_without_as_of_is_rejected(self, builder):
        """Open shifts need an instant to close them"""
        with pytest.raises(MalformedSegment):
            builder.build_segments([record(at(1, 8))])

    def test_inverted_record_is_rejected(self, builder):
        """Records ending before they start are rejected"""
        with pytest.raises(MalformedSegment):
            builder.build_segments([record(at(1, 16), at(1, 8))])

    def test_zero_length_record_is_rejected(self, builder):
        """Zero-duration records are rejected, not dropped"""
        with pytest.raises(MalformedSegment):
            builder.build_segments([record(at(1, 8), at(1, 8))])

    def test_overlapping_records_are_rejected(self, builder):
        """Overlapping shifts cannot be trusted"""
        with pytest.raises(MalformedSegment):
            builder.build_segments([record(at(1, 8), at(1, 16)), record(at(1, 15), at(1, 20))])

    def test_break_outside_shift_is_rejected(self, builder):
        """A break must fall within its shift"""
        with pytest.raises(MalformedSegment):
            builder.build_segments(
                [record(at(1, 8), at(1, 12), break_start=at(1, 11), break_end=at(1, 13))]
            )

    def test_records_for_several_drivers_are_rejected(self, builder):
        """build_segments works on one driver at a time"""
        with pytest.raises(MalformedSegment):
            builder.build_segments(
                [record(at(1, 8), at(1, 10)), record(at(1, 8), at(1, 10), driver_id="D2")]
            )

    def test_naive_timestamps_are_rejected(self, builder):
        """Instants must carry a time zone"""
        with pytest.raises(MalformedSegment):
            builder.build_segments([record(datetime(2024, 1, 1, 8), datetime(2024, 1, 1, 16))])

    def test_off_duty_record_is_rejected(self, builder):
        """Attendance records describe on-duty work"""
        with pytest.raises(MalformedSegment):
            builder.build_segments([record(at(1, 8), at(1, 16), status=OFF_DUTY)])

    def test_empty_input(self, builder):
        """No records is a normal outcome"""
        assert builder.build_segments([]) == []

    def test_fleet_segments_grouped_by_driver(self, builder):
        """Fleet input is split per driver"""
        result = builder.build_fleet_segments(
            [
                record(at(1, 8), at(1, 10)),
                record(at(1, 9), at(1, 12), driver_id="D2"),
                record(at(1, 14), at(1, 16)),
            ]
        )

        assert sorted(result) == ["D1", "D2"]
        assert len(result["D1"]) == 3
        assert len(result["D2"]) == 1


class TestParseDutyStatus:
    """Tests for loose duty status labels"""

    @pytest.mark.parametrize(
        "label,expected",
        [
            ("OFF", OFF_DUTY),
            ("off duty", OFF_DUTY),
            ("PC", OFF_DUTY),
            ("SB", SLEEPER),
            ("sleeper-berth", SLEEPER),
            ("D", DRIVING),
            ("driving", DRIVING),
            ("ON", ON_DUTY),
            ("on_duty_not_driving", ON_DUTY),
            ("YM", ON_DUTY),
        ],
    )
    def test_known_labels(self, builder, label, expected):
        assert builder.parse_duty_status(label) == expected

    def test_unknown_label_is_on_duty(self, builder):
        """Unknown time is never credited as rest"""
        assert builder.parse_duty_status("loading dock") == ON_DUTY


class TestNormalizeSegments:
    """Tests for validation of caller-supplied segments"""

    def test_sorts_segments(self, builder):
        """Segments are returned in time order"""
        later = seg(at(1, 10), at(1, 12))
        earlier = seg(at(1, 6), at(1, 8))

        assert builder.normalize_segments([later, earlier]) == [earlier, later]

    def test_overlap_is_rejected(self, builder):
        """Overlapping segments fail the driver's evaluation"""
        with pytest.raises(MalformedSegment):
            builder.normalize_segments([seg(at(1, 6), at(1, 9)), seg(at(1, 8), at(1, 10))])

    def test_foreign_driver_is_rejected(self, builder):
        """Segments must belong to the driver being evaluated"""
        with pytest.raises(MalformedSegment):
            builder.normalize_segments([seg(at(1, 6), at(1, 9), driver_id="D2")], "D1")

    def test_mixed_naive_and_aware_is_rejected(self, builder):
        """A naive instant is reported, not a comparison error"""
        naive = seg(datetime(2024, 1, 1, 10), datetime(2024, 1, 1, 12))
        with pytest.raises(MalformedSegment):
            builder.normalize_segments([seg(at(1, 6), at(1, 9)), naive])

    def test_unknown_status_is_rejected(self, builder):
        """Segments carry one of the four duty statuses"""
        with pytest.raises(MalformedSegment):
            builder.normalize_segments([seg(at(1, 6), at(1, 9), status="LUNCH")])

    def test_plain_string_status_is_coerced(self, builder):
        """String statuses come back as DutyStatus members"""
        normalized = builder.normalize_segments([seg(at(1, 6), at(1, 9), status="ON_DUTY_NOT_DRIVING")])

        assert normalized[0].status is DutyStatus.ON_DUTY_NOT_DRIVING
        assert normalized[0].is_on_duty
        assert not normalized[0].is_driving
        assert not normalized[0].is_rest

    def test_string_driving_status_is_driving(self):
        assert seg(at(1, 6), at(1, 9), status="DRIVING").is_driving
