"""
Tests for the Violation Predictor

Run with: pytest tests/test_predictor.py -v
"""

from datetime import datetime

import pytest

from conftest import DRIVING, OFF_DUTY, ON_DUTY, at, seg, work_days
from hos_compliance.exceptions import MalformedSegment
from hos_compliance.models import Severity, ViolationType
from hos_compliance.services import ViolationPredictorService


@pytest.fixture
def predictor():
    return ViolationPredictorService()


def nine_hours_driven():
    """9 hours of driving since rest (2 hours available), 5 since the last break."""
    return [
        seg(at(1, 6), at(1, 10), DRIVING),
        seg(at(1, 10), at(1, 10, 30), OFF_DUTY),
        seg(at(1, 10, 30), at(1, 15, 30), DRIVING),
    ]


class TestPredict:
    """Tests for forward simulation of planned schedules"""

    def test_driving_limit_crossed_after_two_hours(self, predictor, engine, policy):
        """Six planned hours with two available crosses 11 hours at start + 2h"""
        history = nine_hours_driven()
        now = at(1, 15, 30)
        assert engine.evaluate("D1", history, now).metrics.driving_hours_available == pytest.approx(2.0)

        plan = [seg(now, at(1, 21, 30), DRIVING)]
        prediction = predictor.predict("D1", history, plan, now, policy)

        assert prediction.first_violated_type == ViolationType.DRIVING_11_HOUR
        assert prediction.projected_violation_instant == at(1, 17, 30)
        assert prediction.segment_index == 0
        assert prediction.severity == Severity.CRITICAL
        assert prediction.projected_margin_at_plan_end == pytest.approx(4.0)

    def test_empty_plan_predicts_nothing(self, predictor, engine, policy):
        """No planned segments means no predicted violation"""
        history = nine_hours_driven()

        assert engine.evaluate("D1", history, at(1, 15, 30)).violations == ()
        assert predictor.predict("D1", history, [], at(1, 15, 30), policy) is None

    def test_rest_in_plan_prevents_violation(self, predictor, policy):
        """A planned 10-hour rest resets the daily counters"""
        now = at(1, 15, 30)
        plan = [
            seg(now, at(2, 1, 30), OFF_DUTY),
            seg(at(2, 1, 30), at(2, 7, 30), DRIVING),
        ]

        assert predictor.predict("D1", nine_hours_driven(), plan, now, policy) is None

    def test_break_violation_in_later_segment(self, predictor, policy):
        """The responsible segment index points into the plan"""
        now = at(1, 6)
        plan = [
            seg(now, at(1, 10), DRIVING),
            seg(at(1, 10), at(1, 11), ON_DUTY),
            seg(at(1, 11), at(1, 20), DRIVING),
        ]
        prediction = predictor.predict("D1", [], plan, now, policy)

        # 1 hour of non-driving work clears the break; 11 hours are reached at 18:00
        # and 8 hours since the break at 19:00
        assert prediction.segment_index == 2
        assert prediction.first_violated_type == ViolationType.DRIVING_11_HOUR
        assert prediction.projected_violation_instant == at(1, 18)

    def test_weekly_crossing_accounts_for_window_roll(self, predictor, policy):
        """Minutes leaving the 7-day window push the crossing later"""
        history = work_days(1, 5) + [
            seg(at(6, 5), at(6, 10), DRIVING),
            seg(at(6, 10), at(6, 10, 30), OFF_DUTY),
            seg(at(6, 10, 30), at(6, 15), DRIVING),
            seg(at(7, 12), at(7, 12, 30), ON_DUTY),
        ]
        now = at(8, 5)

        # Exactly 60h in the trailing window at 8 Jan 05:00. Day 1's driving
        # from 05:00 to 10:00 leaves the window as fast as the plan adds
        # hours, so the limit only breaks once that driving has rolled out.
        plan = [seg(now, at(8, 12), ON_DUTY)]
        prediction = predictor.predict("D1", history, plan, now, policy)

        assert prediction.first_violated_type == ViolationType.WEEKLY_60_HOUR
        assert prediction.projected_violation_instant == at(8, 10)
        assert prediction.severity == Severity.HIGH
        assert prediction.projected_margin_at_plan_end == pytest.approx(0.5)

    def test_plan_before_instant_is_rejected(self, predictor, policy):
        """Plans cannot start in the past"""
        with pytest.raises(MalformedSegment):
            predictor.predict(
                "D1", [], [seg(at(1, 5), at(1, 8), DRIVING)], at(1, 6), policy
            )

    def test_overlapping_plan_is_rejected(self, predictor, policy):
        """Planned segments must not overlap each other"""
        history = [seg(at(1, 6), at(1, 8), DRIVING)]
        plan = [seg(at(1, 8), at(1, 12), DRIVING), seg(at(1, 11), at(1, 14), ON_DUTY)]

        with pytest.raises(MalformedSegment):
            predictor.predict("D1", history, plan, at(1, 8), policy)

    def test_history_past_instant_is_rejected(self, predictor, policy):
        """Recorded duty after the evaluation instant cannot be planned over"""
        history = [seg(at(1, 0), at(1, 4), DRIVING), seg(at(1, 10), at(1, 22), DRIVING)]
        plan = [seg(at(1, 4), at(1, 6), DRIVING)]

        with pytest.raises(MalformedSegment):
            predictor.predict("D1", history, plan, at(1, 4), policy)

    def test_segment_spanning_instant_is_rejected(self, predictor, policy):
        history = [seg(at(1, 2), at(1, 6), DRIVING)]
        plan = [seg(at(1, 4), at(1, 6), DRIVING)]

        with pytest.raises(MalformedSegment):
            predictor.predict("D1", history, plan, at(1, 4), policy)

    def test_naive_instant_is_rejected(self, predictor, policy):
        with pytest.raises(MalformedSegment):
            predictor.predict(
                "D1", [], [seg(at(1, 5), at(1, 8), DRIVING)], datetime(2024, 1, 1, 5), policy
            )

    def test_deterministic(self, predictor, policy):
        """Identical inputs give identical predictions"""
        history = nine_hours_driven()
        plan = [seg(at(1, 15, 30), at(1, 21, 30), DRIVING)]

        first = predictor.predict("D1", history, plan, at(1, 15, 30), policy)
        second = predictor.predict("D1", history, plan, at(1, 15, 30), policy)

        assert first == second
