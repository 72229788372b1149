"""
HOS Explanations.

Human-readable text for evaluation results: regulation references,
violation messages, dashboard recommendations and grid reasons. Reads
only evaluator outputs and policy numbers; nothing here feeds back into
rule evaluation.

Single Responsibility: presentation text only.
"""

from typing import Dict, List, Optional

from common.validators import format_duration

from ..models import DriverMetrics, PolicyWindow, Severity, Violation, ViolationType

REGULATIONS = {
    ViolationType.WEEKLY_60_HOUR.value: (
        "49 CFR 395.3(b)(1): no driving after 60 hours on duty in 7 consecutive days."
    ),
    ViolationType.WEEKLY_70_HOUR.value: (
        "49 CFR 395.3(b)(2): no driving after 70 hours on duty in 8 consecutive days."
    ),
    ViolationType.DRIVING_11_HOUR.value: (
        "49 CFR 395.3(a)(3): at most 11 hours of driving after 10 consecutive hours off duty."
    ),
    ViolationType.ON_DUTY_14_HOUR.value: (
        "49 CFR 395.3(a)(2): no driving beyond the 14th hour after coming on duty "
        "following 10 consecutive hours off duty."
    ),
    ViolationType.BREAK_30_MINUTE.value: (
        "49 CFR 395.3(a)(3)(ii): a 30-minute interruption is required after "
        "8 cumulative hours of driving."
    ),
}

RESTART_REGULATION = (
    "49 CFR 395.3(c): a 34-hour off-duty period including two 1:00-5:00 AM "
    "periods restarts the 60/70-hour count."
)


def regulation_for(violation_type: str) -> str:
    """Regulation reference for a violation type."""
    return REGULATIONS[str(violation_type)]


def describe_violation(violation: Violation) -> str:
    """One-line message for a violation, in hours."""
    label = ViolationType(violation.type).label
    if violation.type == ViolationType.BREAK_30_MINUTE:
        return (
            f"{label}: {violation.observed_value:.1f} hours of driving without "
            f"a 30-minute interruption"
        )
    return (
        f"{label} exceeded: {violation.observed_value:.1f}h used of "
        f"{violation.limit_value:.0f}h (over by {format_duration(violation.margin_minutes)})"
    )


def build_recommendations(metrics: DriverMetrics, policy: PolicyWindow) -> List[Dict]:
    """
    Dashboard recommendations for a driver.

    Args:
        metrics: Complete metrics from the Availability Engine
        policy: Active policy window

    Returns:
        List of recommendation dictionaries, most urgent first
    """
    recommendations = []

    if metrics.next_break_required:
        recommendations.append(
            {
                "type": "BREAK_REQUIRED",
                "priority": Severity.HIGH.value,
                "message": "Driver should take a 30-minute break soon",
                "action": "Schedule a 30-minute off-duty period",
            }
        )

    if metrics.driving_minutes_available < policy.fleet_rest_driving_minutes:
        recommendations.append(
            {
                "type": "DRIVING_LIMIT_WARNING",
                "priority": Severity.HIGH.value,
                "message": (
                    f"Only {metrics.driving_hours_available:.1f} driving hours "
                    f"remaining before a 10-hour rest"
                ),
                "action": "Plan to end driving shift soon",
            }
        )

    if metrics.weekly_minutes_available < policy.fleet_rest_weekly_minutes:
        recommendations.append(
            {
                "type": "WEEKLY_LIMIT_WARNING",
                "priority": Severity.MEDIUM.value,
                "message": (
                    f"Only {metrics.weekly_hours_available:.1f} hours available "
                    f"under the {policy.weekly_limit_minutes // 60}/{policy.window_days} limit"
                ),
                "action": "Consider scheduling time off or lighter duties",
            }
        )

    restart_suggested_after = policy.weekly_limit_minutes - policy.fleet_rest_weekly_minutes
    if (
        metrics.minutes_used_for(policy.window_days) > restart_suggested_after
        and metrics.last_qualifying_restart is None
    ):
        recommendations.append(
            {
                "type": "RESTART_SUGGESTED",
                "priority": Severity.LOW.value,
                "message": "Consider taking a 34-hour restart to reset weekly hours",
                "action": "Schedule 34+ hours off duty including two 1-5 AM periods",
                "regulation": RESTART_REGULATION,
            }
        )

    return recommendations


def weekly_reason(
    hours_used: float, hours_available: float, policy: PolicyWindow
) -> Optional[Dict]:
    """Grid reason for the weekly cap, if exceeded or close."""
    rule = f"{policy.weekly_limit_minutes // 60}/{policy.window_days}"
    values = {"hours_used": hours_used, "hours_available": hours_available}

    if hours_available < 0:
        return {
            "type": f"HOS_{policy.weekly_rule}",
            "severity": "VIOLATION",
            "message": f"Exceeded {rule} cap",
            "values": values,
        }
    if hours_available * 60 < policy.at_risk_remaining_minutes:
        return {
            "type": f"HOS_{policy.weekly_rule}",
            "severity": "AT_RISK",
            "message": f"Near {rule} cap",
            "values": values,
        }
    return None


def short_rest_reason(rest_minutes: int, policy: PolicyWindow) -> Dict:
    """Grid reason for insufficient rest between the last two shifts."""
    rest_hours = round(rest_minutes / 60.0, 2)
    reset_hours = policy.daily_reset_minutes // 60
    return {
        "type": "REST",
        "severity": "VIOLATION",
        "message": f"Short rest ({rest_hours:.2f}h) < {reset_hours}h",
        "values": {"rest_hours": rest_hours},
        "recommended_action": f"Reassign or delay start to ensure {reset_hours}h rest",
    }


def meal_reason(on_duty_minutes: int, policy: PolicyWindow) -> Dict:
    """Informational grid note for a day without a qualifying meal break."""
    return {
        "type": "MEAL",
        "severity": "INFO",
        "message": (
            f"No {policy.meal_break_minutes}-minute meal break by hour "
            f"{policy.meal_required_by_minutes // 60} of "
            f"{format_duration(on_duty_minutes)} on duty"
        ),
        "values": {"on_duty_hours": round(on_duty_minutes / 60.0, 2)},
    }
