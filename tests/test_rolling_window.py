"""
Tests for the Rolling Window Calculator

Run with: pytest tests/test_rolling_window.py -v
"""

import pytest

from conftest import DRIVING, OFF_DUTY, ON_DUTY, SLEEPER, at, seg, work_days
from hos_compliance.services import RollingWindowCalculatorService


@pytest.fixture
def calculator():
    return RollingWindowCalculatorService()


class TestWeeklyMinutes:
    """Tests for the 7- and 8-day rolling sums"""

    def test_counts_only_on_duty_minutes(self, calculator):
        """Off duty and sleeper berth never count toward the weekly sum"""
        segments = [
            seg(at(1, 0), at(1, 8), SLEEPER),
            seg(at(1, 8), at(1, 12), DRIVING),
            seg(at(1, 12), at(1, 14), ON_DUTY),
            seg(at(1, 14), at(1, 20), OFF_DUTY),
        ]

        assert calculator.weekly_minutes(segments, at(1, 20), 7) == 6 * 60

    def test_clips_segments_to_window_start(self, calculator):
        """Only the part of a segment inside the window counts"""
        segments = [seg(at(1, 20), at(2, 4), ON_DUTY)]

        # 7-day window ending 9 Jan 00:00 starts 2 Jan 00:00
        assert calculator.weekly_minutes(segments, at(9, 0), 7) == 4 * 60

    def test_ignores_segments_after_instant(self, calculator):
        """Future segments and the future part of a segment are excluded"""
        segments = [seg(at(1, 8), at(1, 12)), seg(at(1, 14), at(1, 16))]

        assert calculator.weekly_minutes(segments, at(1, 10), 7) == 2 * 60

    def test_eight_day_window_reaches_further_back(self, calculator):
        """The 8-day sum includes the eighth day"""
        segments = work_days(1, 8)

        assert calculator.weekly_minutes(segments, at(8, 16), 7) == 70 * 60
        assert calculator.weekly_minutes(segments, at(8, 16), 8) == 80 * 60

    def test_restart_floors_the_window(self, calculator):
        """Nothing before a restart inside the window counts"""
        segments = work_days(1, 3) + work_days(6, 1)

        assert calculator.weekly_minutes(segments, at(6, 16), 7, restart_end=at(6, 0)) == 10 * 60

    def test_restart_before_window_is_ignored(self, calculator):
        """A restart older than the window does not change the sum"""
        segments = work_days(10, 2)

        assert calculator.weekly_minutes(segments, at(11, 16), 7, restart_end=at(1, 0)) == 20 * 60

    def test_restart_floors_other_employer_minutes(self, calculator):
        """Attested minutes count only while no restart has floored the window"""
        segments = work_days(1, 3) + work_days(6, 1)

        assert calculator.weekly_minutes(segments, at(6, 16), 7, at(6, 0), 300) == 10 * 60
        assert calculator.weekly_minutes(segments, at(6, 16), 7, None, 300) == 40 * 60 + 300


class TestSinceRest:
    """Tests for the 11/14-hour counters"""

    def test_ten_hour_rest_resets_counters(self, calculator, policy):
        """A 10-hour rest is the reset point"""
        segments = [
            seg(at(1, 0), at(1, 8), DRIVING),
            seg(at(1, 8), at(1, 18), OFF_DUTY),
            seg(at(1, 18), at(1, 21), DRIVING),
            seg(at(1, 21), at(1, 22), ON_DUTY),
        ]
        metrics = calculator.calculate_usage("D1", segments, at(1, 22), policy)

        assert metrics.last_rest_end == at(1, 18)
        assert metrics.driving_minutes_since_rest == 3 * 60
        assert metrics.on_duty_minutes_since_rest == 4 * 60

    def test_short_rest_does_not_reset(self, calculator, policy):
        """Rest under 10 hours leaves the counters running"""
        segments = [
            seg(at(1, 0), at(1, 4), DRIVING),
            seg(at(1, 4), at(1, 13), OFF_DUTY),
            seg(at(1, 13), at(1, 16), DRIVING),
        ]
        metrics = calculator.calculate_usage("D1", segments, at(1, 16), policy)

        assert metrics.last_rest_end is None
        assert metrics.driving_minutes_since_rest == 7 * 60

    def test_off_duty_and_sleeper_combine_into_one_rest(self, calculator, policy):
        """Consecutive rest statuses form a single span"""
        segments = [
            seg(at(1, 0), at(1, 4), DRIVING),
            seg(at(1, 4), at(1, 9), OFF_DUTY),
            seg(at(1, 9), at(1, 14), SLEEPER),
            seg(at(1, 14), at(1, 16), DRIVING),
        ]
        metrics = calculator.calculate_usage("D1", segments, at(1, 16), policy)

        assert metrics.last_rest_end == at(1, 14)
        assert metrics.driving_minutes_since_rest == 2 * 60

    def test_gap_counts_as_rest(self, calculator, policy):
        """Unrecorded time between segments is off duty"""
        segments = [seg(at(1, 0), at(1, 4)), seg(at(1, 16), at(1, 18))]
        metrics = calculator.calculate_usage("D1", segments, at(1, 18), policy)

        assert metrics.last_rest_end == at(1, 16)
        assert metrics.driving_minutes_since_rest == 2 * 60

    def test_ongoing_rest_resets_at_instant(self, calculator, policy):
        """A rest still running at the instant counts up to the instant"""
        segments = [seg(at(1, 0), at(1, 8)), seg(at(1, 8), at(2, 8), OFF_DUTY)]
        metrics = calculator.calculate_usage("D1", segments, at(1, 19), policy)

        assert metrics.last_rest_end == at(1, 19)
        assert metrics.driving_minutes_since_rest == 0


class TestSinceBreak:
    """Tests for the 30-minute break counter"""

    def test_on_duty_interruption_counts_as_break(self, calculator, policy):
        """Any 30 minutes without driving interrupts the count"""
        segments = [
            seg(at(1, 0), at(1, 5), DRIVING),
            seg(at(1, 5), at(1, 5, 30), ON_DUTY),
            seg(at(1, 5, 30), at(1, 8), DRIVING),
        ]
        metrics = calculator.calculate_usage("D1", segments, at(1, 8), policy)

        assert metrics.driving_minutes_since_break == 150
        assert metrics.driving_minutes_since_rest == 7 * 60 + 30

    def test_short_interruption_does_not_count(self, calculator, policy):
        """Interruptions under 30 minutes do not reset the count"""
        segments = [
            seg(at(1, 0), at(1, 5), DRIVING),
            seg(at(1, 5), at(1, 5, 20), OFF_DUTY),
            seg(at(1, 5, 20), at(1, 8), DRIVING),
        ]
        metrics = calculator.calculate_usage("D1", segments, at(1, 8), policy)

        assert metrics.driving_minutes_since_break == 7 * 60 + 40


class TestCalculateUsage:
    """Tests for the combined usage metrics"""

    def test_other_employer_minutes_added_to_both_windows(self, calculator, policy):
        """Attested work for another carrier counts toward the weekly sums"""
        metrics = calculator.calculate_usage(
            "D1", work_days(1, 1), at(1, 16), policy, other_employer_minutes=300
        )

        assert metrics.minutes_used_7d == 10 * 60 + 300
        assert metrics.minutes_used_8d == 10 * 60 + 300
        assert metrics.driving_minutes_since_rest == 10 * 60

    def test_no_segments(self, calculator, policy):
        """An empty history has zero usage"""
        metrics = calculator.calculate_usage("D1", [], at(1, 0), policy)

        assert metrics.minutes_used_7d == 0
        assert metrics.driving_minutes_since_rest == 0
        assert metrics.last_rest_end is None

    def test_hours_are_derived_from_minutes(self, calculator, policy):
        """Presentation hours are minutes / 60"""
        metrics = calculator.calculate_usage(
            "D1", [seg(at(1, 0), at(1, 1, 30))], at(1, 2), policy
        )

        assert metrics.hours_used_7d == pytest.approx(1.5)
        assert metrics.driving_hours_since_rest == pytest.approx(1.5)
