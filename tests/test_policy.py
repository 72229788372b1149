"""
Tests for HOS policy loading

Run with: pytest tests/test_policy.py -v
"""

import pytest
from django.test import override_settings

from hos_compliance.exceptions import InvalidPolicy
from hos_compliance.models import ViolationType, WeeklyRule
from hos_compliance.services import get_policy, load_policy


class TestLoadPolicy:
    """Tests for PolicyWindow construction"""

    def test_defaults(self):
        """Missing keys fall back to the FMCSA limits"""
        policy = load_policy({})

        assert policy.weekly_rule == WeeklyRule.SIXTY_SEVEN
        assert policy.weekly_limit_minutes == 60 * 60
        assert policy.window_days == 7
        assert policy.driving_limit_minutes == 11 * 60
        assert policy.on_duty_limit_minutes == 14 * 60
        assert policy.restart_minutes == 34 * 60
        assert policy.next_break_warning_minutes == 450
        assert policy.local_timezone == "America/Los_Angeles"

    def test_seventy_eight_rule(self):
        policy = load_policy({"WEEKLY_RULES": ["70_8"]})

        assert policy.weekly_limit_minutes == 70 * 60
        assert policy.window_days == 8
        assert policy.weekly_violation_type == ViolationType.WEEKLY_70_HOUR

    def test_single_rule_string(self):
        assert load_policy({"WEEKLY_RULE": "70_8"}).weekly_rule == WeeklyRule.SEVENTY_EIGHT

    def test_fractional_hours(self):
        """Hour settings are converted to whole minutes"""
        assert load_policy({"NEXT_BREAK_WARNING_HOURS": 7.25}).next_break_warning_minutes == 435

    def test_both_weekly_rules_rejected(self):
        """A carrier operates under exactly one weekly rule"""
        with pytest.raises(InvalidPolicy):
            load_policy({"WEEKLY_RULES": ["60_7", "70_8"]})

    def test_duplicate_rule_is_one_rule(self):
        assert load_policy({"WEEKLY_RULES": ["60_7", "60_7"]}).weekly_rule == WeeklyRule.SIXTY_SEVEN

    @pytest.mark.parametrize(
        "config",
        [
            {"WEEKLY_RULES": ["80_8"]},
            {"WEEKLY_RULES": []},
            {"DRIVING_LIMIT_HOURS": 0},
            {"ON_DUTY_LIMIT_HOURS": -14},
            {"BREAK_MINUTES": "thirty"},
            {"RESTART_NIGHT_PERIODS": 0},
            {"NIGHT_START_HOUR": 5, "NIGHT_END_HOUR": 1},
            {"NIGHT_END_HOUR": 25},
            {"LOCAL_TIMEZONE": "Mars/Olympus_Mons"},
            {"BREAK_AFTER_DRIVING_HOURS": 12},
            {"DAILY_RESET_HOURS": 40},
        ],
    )
    def test_invalid_configurations(self, config):
        with pytest.raises(InvalidPolicy):
            load_policy(config)


class TestGetPolicy:
    """Tests for the settings-backed policy"""

    def test_reads_settings(self):
        with override_settings(HOS_POLICY={"WEEKLY_RULES": ["70_8"], "LOCAL_TIMEZONE": "UTC"}):
            policy = get_policy()

        assert policy.weekly_rule == WeeklyRule.SEVENTY_EIGHT
        assert policy.local_timezone == "UTC"

    def test_invalid_settings_raise(self):
        with override_settings(HOS_POLICY={"WEEKLY_RULES": ["60_7", "70_8"]}):
            with pytest.raises(InvalidPolicy):
                get_policy()

    def test_policy_dict(self):
        data = load_policy({}).to_dict()

        assert data["weekly_rule"] == "60_7"
        assert data["weekly_limit_hours"] == 60.0
        assert data["night_window"] == "01:00-05:00"
