"""
Segment Builder Service.

Converts raw attendance records (clock-in/out with optional breaks) into
the contiguous duty segments the rest of the engine consumes, and
validates segments supplied directly by callers.

This service handles:
- Worked interval and break splitting per attendance record
- Off-duty segments for gaps between records
- Ordering and overlap validation
- Loose duty status label parsing

Single Responsibility: Duty segment construction and validation only.
"""

import logging
import re
from collections import defaultdict
from dataclasses import replace
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from common.validators import is_aware

from ..exceptions import MalformedSegment
from ..models import AttendanceRecord, DutySegment, DutyStatus

logger = logging.getLogger(__name__)


class SegmentBuilderService:
    """
    Service for building and validating duty segments.

    Pure functions over their inputs: nothing is stored, and malformed
    input is rejected rather than silently dropped, since a gap in duty
    history can hide a violation.
    """

    # Loose labels seen in timecard exports and ELD feeds
    STATUS_ALIASES = {
        "OFF": DutyStatus.OFF_DUTY,
        "OFFDUTY": DutyStatus.OFF_DUTY,
        "PC": DutyStatus.OFF_DUTY,
        "PERSONAL": DutyStatus.OFF_DUTY,
        "PERSONALCONVEYANCE": DutyStatus.OFF_DUTY,
        "SB": DutyStatus.SLEEPER_BERTH,
        "SLEEPER": DutyStatus.SLEEPER_BERTH,
        "SLEEPERBERTH": DutyStatus.SLEEPER_BERTH,
        "D": DutyStatus.DRIVING,
        "DR": DutyStatus.DRIVING,
        "DRIVE": DutyStatus.DRIVING,
        "DRIVING": DutyStatus.DRIVING,
        "ON": DutyStatus.ON_DUTY_NOT_DRIVING,
        "ONDUTY": DutyStatus.ON_DUTY_NOT_DRIVING,
        "ONDUTYNOTDRIVING": DutyStatus.ON_DUTY_NOT_DRIVING,
        "YM": DutyStatus.ON_DUTY_NOT_DRIVING,
        "YARD": DutyStatus.ON_DUTY_NOT_DRIVING,
        "YARDMOVE": DutyStatus.ON_DUTY_NOT_DRIVING,
    }

    def __init__(self):
        """Initialize segment builder."""
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def parse_duty_status(self, value) -> str:
        """
        Map a loose duty status label to a DutyStatus.

        Personal conveyance counts as off duty and yard moves as on duty
        (not driving). Unrecognised labels are treated as on duty so that
        unknown time is never credited as rest.
        """
        if isinstance(value, DutyStatus):
            return value

        normalized = re.sub(r"[^A-Z]", "", str(value).upper())
        if normalized in DutyStatus.values:
            return DutyStatus(normalized)

        status = self.STATUS_ALIASES.get(normalized)
        if status is None:
            self.logger.debug(f"Unknown duty status {value!r}; treating as on duty")
            return DutyStatus.ON_DUTY_NOT_DRIVING
        return status

    def build_segments(
        self,
        records: Iterable[AttendanceRecord],
        as_of: Optional[datetime] = None,
    ) -> List[DutySegment]:
        """
        Build duty segments for a single driver.

        Args:
            records: Attendance records for one driver, in any order
            as_of: Instant that closes open shifts (records without clock-out)

        Returns:
            Time-ordered, non-overlapping duty segments

        Raises:
            MalformedSegment: On inverted, zero-length or overlapping records,
                breaks outside their record, open shifts without ``as_of``,
                naive timestamps or records from several drivers
        """
        records = list(records)
        if not records:
            return []

        driver_ids = {record.driver_id for record in records}
        if len(driver_ids) > 1:
            raise MalformedSegment(
                f"Attendance records for several drivers supplied together: {sorted(driver_ids)}"
            )

        for record in records:
            if not is_aware(record.clock_in):
                raise MalformedSegment(
                    f"Timestamps for driver {record.driver_id} must be timezone-aware"
                )

        ordered = sorted(records, key=lambda record: record.clock_in)
        segments: List[DutySegment] = []

        for record in ordered:
            record_segments = self._segments_for_record(record, as_of)

            if segments:
                previous_end = segments[-1].end
                gap_start, gap_end = previous_end, record_segments[0].start
                if gap_end < gap_start:
                    raise MalformedSegment(
                        f"Attendance for driver {record.driver_id} overlaps: record starting "
                        f"{gap_end.isoformat()} begins before previous record ends {gap_start.isoformat()}"
                    )
                if gap_end > gap_start:
                    segments.append(
                        DutySegment(
                            driver_id=record.driver_id,
                            start=gap_start,
                            end=gap_end,
                            status=DutyStatus.OFF_DUTY,
                            notes="gap between attendance records",
                        )
                    )

            segments.extend(record_segments)

        self.logger.debug(
            f"Built {len(segments)} segments from {len(ordered)} records for driver {ordered[0].driver_id}"
        )
        return segments

    def build_fleet_segments(
        self,
        records: Iterable[AttendanceRecord],
        as_of: Optional[datetime] = None,
    ) -> Dict[str, List[DutySegment]]:
        """Group attendance records by driver and build each driver's segments."""
        by_driver = defaultdict(list)
        for record in records:
            by_driver[record.driver_id].append(record)

        return {
            driver_id: self.build_segments(driver_records, as_of=as_of)
            for driver_id, driver_records in by_driver.items()
        }

    def normalize_segments(
        self,
        segments: Iterable[DutySegment],
        driver_id: Optional[str] = None,
    ) -> List[DutySegment]:
        """
        Validate supplied segments and return them in time order.

        Args:
            segments: Segments for one driver
            driver_id: Expected driver; when omitted, taken from the segments

        Returns:
            Segments sorted by start time

        Raises:
            MalformedSegment: On naive or inverted intervals, overlaps,
                unknown statuses or segments from another driver
        """
        segments = list(segments)
        for segment in segments:
            self._validate_interval(segment.start, segment.end, segment.driver_id)

        ordered = []
        for segment in sorted(segments, key=lambda segment: (segment.start, segment.end)):
            if segment.status not in DutyStatus.values:
                raise MalformedSegment(
                    f"Unknown duty status {segment.status!r} for driver {segment.driver_id}"
                )
            segment = replace(segment, status=DutyStatus(segment.status))
            ordered.append(segment)
            if driver_id is None:
                driver_id = segment.driver_id
            elif segment.driver_id != driver_id:
                raise MalformedSegment(
                    f"Segment for driver {segment.driver_id} supplied with driver {driver_id}"
                )

        for previous, current in zip(ordered, ordered[1:]):
            if current.start < previous.end:
                raise MalformedSegment(
                    f"Overlapping segments for driver {driver_id}: "
                    f"{previous.start.isoformat()}-{previous.end.isoformat()} and "
                    f"{current.start.isoformat()}-{current.end.isoformat()}"
                )

        return ordered

    def _segments_for_record(
        self, record: AttendanceRecord, as_of: Optional[datetime]
    ) -> List[DutySegment]:
        """Split one attendance record into worked and break segments."""
        clock_out = record.clock_out
        if clock_out is None:
            if as_of is None:
                raise MalformedSegment(
                    f"Open shift for driver {record.driver_id} at {record.clock_in.isoformat()} "
                    "with no instant to close it"
                )
            clock_out = as_of

        self._validate_interval(record.clock_in, clock_out, record.driver_id)
        status = self.parse_duty_status(record.status)
        if status not in (DutyStatus.DRIVING, DutyStatus.ON_DUTY_NOT_DRIVING):
            raise MalformedSegment(
                f"Attendance record for driver {record.driver_id} must be on duty, got {status}"
            )

        if record.break_start is None and record.break_end is None:
            return [
                DutySegment(
                    driver_id=record.driver_id,
                    start=record.clock_in,
                    end=clock_out,
                    status=status,
                    notes=record.source,
                )
            ]

        if record.break_start is None or record.break_end is None:
            raise MalformedSegment(
                f"Break for driver {record.driver_id} needs both a start and an end"
            )
        self._validate_interval(record.break_start, record.break_end, record.driver_id)
        if record.break_start < record.clock_in or record.break_end > clock_out:
            raise MalformedSegment(
                f"Break {record.break_start.isoformat()}-{record.break_end.isoformat()} "
                f"falls outside shift for driver {record.driver_id}"
            )

        pieces = [
            (record.clock_in, record.break_start, status),
            (record.break_start, record.break_end, DutyStatus.OFF_DUTY),
            (record.break_end, clock_out, status),
        ]
        return [
            DutySegment(
                driver_id=record.driver_id,
                start=start,
                end=end,
                status=piece_status,
                notes="break" if piece_status == DutyStatus.OFF_DUTY else record.source,
            )
            for start, end, piece_status in pieces
            if end > start
        ]

    def _validate_interval(self, start: datetime, end: datetime, driver_id: str):
        """Reject naive, zero-length and inverted intervals."""
        if not (is_aware(start) and is_aware(end)):
            raise MalformedSegment(
                f"Timestamps for driver {driver_id} must be timezone-aware"
            )
        if end <= start:
            raise MalformedSegment(
                f"Interval for driver {driver_id} ends at {end.isoformat()} "
                f"which is not after its start {start.isoformat()}"
            )
