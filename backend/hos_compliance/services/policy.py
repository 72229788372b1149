"""
HOS Policy loader.

Builds the process-wide PolicyWindow from the ``HOS_POLICY`` setting and
rejects unsupported configurations at load time.

Single Responsibility: policy configuration parsing and validation only.
"""

import logging
from typing import Dict, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from django.conf import settings

from ..exceptions import InvalidPolicy
from ..models import PolicyWindow, WeeklyRule

logger = logging.getLogger(__name__)

# setting key -> (PolicyWindow field, minutes per unit)
_DURATION_KEYS = {
    "DRIVING_LIMIT_HOURS": ("driving_limit_minutes", 60),
    "ON_DUTY_LIMIT_HOURS": ("on_duty_limit_minutes", 60),
    "BREAK_AFTER_DRIVING_HOURS": ("break_after_driving_minutes", 60),
    "BREAK_MINUTES": ("break_minutes", 1),
    "DAILY_RESET_HOURS": ("daily_reset_minutes", 60),
    "RESTART_HOURS": ("restart_minutes", 60),
    "NEXT_BREAK_WARNING_HOURS": ("next_break_warning_minutes", 60),
    "WEEKLY_CRITICAL_MARGIN_HOURS": ("weekly_critical_margin_minutes", 60),
    "AT_RISK_REMAINING_HOURS": ("at_risk_remaining_minutes", 60),
    "FLEET_LIMITED_WEEKLY_HOURS": ("fleet_limited_weekly_minutes", 60),
    "FLEET_REST_WEEKLY_HOURS": ("fleet_rest_weekly_minutes", 60),
    "FLEET_REST_DRIVING_HOURS": ("fleet_rest_driving_minutes", 60),
    "MEAL_REQUIRED_BY_HOURS": ("meal_required_by_minutes", 60),
    "MEAL_BREAK_MINUTES": ("meal_break_minutes", 1),
}


def load_policy(config: Optional[Dict] = None) -> PolicyWindow:
    """
    Build a PolicyWindow from a settings-style dictionary.

    Args:
        config: Mapping shaped like ``settings.HOS_POLICY``; missing keys
            fall back to the FMCSA property-carrying defaults.

    Returns:
        Validated PolicyWindow

    Raises:
        InvalidPolicy: If the configuration is unsupported
    """
    config = dict(config or {})
    values = {"weekly_rule": _resolve_weekly_rule(config)}

    for key, (field_name, unit) in _DURATION_KEYS.items():
        if key not in config:
            continue
        raw = config[key]
        try:
            minutes = round(float(raw) * unit)
        except (TypeError, ValueError):
            raise InvalidPolicy(f"{key} must be a number, got {raw!r}")
        if minutes <= 0:
            raise InvalidPolicy(f"{key} must be positive, got {raw!r}")
        values[field_name] = minutes

    if "RESTART_NIGHT_PERIODS" in config:
        periods = config["RESTART_NIGHT_PERIODS"]
        if not isinstance(periods, int) or periods < 1:
            raise InvalidPolicy(f"RESTART_NIGHT_PERIODS must be a positive integer, got {periods!r}")
        values["restart_night_periods"] = periods

    night_start = config.get("NIGHT_START_HOUR", 1)
    night_end = config.get("NIGHT_END_HOUR", 5)
    if not (isinstance(night_start, int) and isinstance(night_end, int)) or not (
        0 <= night_start < night_end <= 24
    ):
        raise InvalidPolicy(
            f"Night window must satisfy 0 <= start < end <= 24, got {night_start!r}-{night_end!r}"
        )
    values["night_start_hour"] = night_start
    values["night_end_hour"] = night_end

    tz_name = config.get("LOCAL_TIMEZONE", "America/Los_Angeles")
    try:
        ZoneInfo(str(tz_name))
    except (ZoneInfoNotFoundError, ValueError):
        raise InvalidPolicy(f"Unknown LOCAL_TIMEZONE {tz_name!r}")
    values["local_timezone"] = str(tz_name)

    policy = PolicyWindow(**values)

    if policy.break_after_driving_minutes > policy.driving_limit_minutes:
        raise InvalidPolicy("BREAK_AFTER_DRIVING_HOURS cannot exceed DRIVING_LIMIT_HOURS")
    if policy.daily_reset_minutes > policy.restart_minutes:
        raise InvalidPolicy("DAILY_RESET_HOURS cannot exceed RESTART_HOURS")

    logger.debug(f"Loaded HOS policy: {policy}")
    return policy


def get_policy() -> PolicyWindow:
    """Load the policy configured in Django settings."""
    return load_policy(getattr(settings, "HOS_POLICY", None))


def _resolve_weekly_rule(config: Dict) -> str:
    """Pick the single weekly rule the carrier operates under."""
    rules = config.get("WEEKLY_RULES")
    if rules is None:
        rules = [config.get("WEEKLY_RULE", WeeklyRule.SIXTY_SEVEN)]
    if isinstance(rules, str):
        rules = [rules]

    rules = [str(rule).strip() for rule in rules if str(rule).strip()]
    unknown = [rule for rule in rules if rule not in WeeklyRule.values]
    if unknown:
        raise InvalidPolicy(
            f"Unsupported weekly rule(s) {unknown}; expected one of {WeeklyRule.values}"
        )

    distinct = sorted(set(rules))
    if not distinct:
        raise InvalidPolicy("No weekly rule configured; enable 60_7 or 70_8")
    if len(distinct) > 1:
        raise InvalidPolicy(
            "Both 60_7 and 70_8 are enabled; a carrier operates under exactly one weekly rule"
        )
    return WeeklyRule(distinct[0])
