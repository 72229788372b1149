"""
App configuration for HOS compliance.

Loads the HOS policy once at start-up so that an invalid configuration
stops the process instead of failing individual evaluations later.
"""

import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class HOSComplianceConfig(AppConfig):
    """Django app config for the HOS compliance engine."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "hos_compliance"
    verbose_name = "HOS Compliance"

    def ready(self):
        """Validate the configured policy window."""
        from .services.policy import get_policy

        policy = get_policy()
        logger.info(
            f"HOS policy loaded: weekly rule {policy.weekly_rule}, "
            f"restart nights evaluated in {policy.local_timezone}"
        )
