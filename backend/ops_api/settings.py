"""
Django settings for ops_api project.

Operations API for the last-mile delivery dashboard. Only the Hours of
Service compliance engine is served from here; every value that differs
between deployments is read from the environment.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get(
    "DJANGO_SECRET_KEY", "django-insecure-local-development-key-change-me"
)

DEBUG = os.environ.get("DJANGO_DEBUG", "false").lower() == "true"

ALLOWED_HOSTS = [
    host.strip()
    for host in os.environ.get("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",")
    if host.strip()
]

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.auth",
    "rest_framework",
    "hos_compliance.apps.HOSComplianceConfig",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "ops_api.urls"

WSGI_APPLICATION = "ops_api.wsgi.application"

# The engine never touches the database; this only satisfies contrib apps.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
    }
}

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": ["rest_framework.permissions.AllowAny"],
    "UNAUTHENTICATED_USER": None,
    "DEFAULT_RENDERER_CLASSES": ["rest_framework.renderers.JSONRenderer"],
    "DEFAULT_PARSER_CLASSES": ["rest_framework.parsers.JSONParser"],
}

# Hours of Service policy. Exactly one weekly rule may be enabled per
# carrier; the app refuses to start on an invalid combination.
HOS_POLICY = {
    "WEEKLY_RULES": [os.environ.get("HOS_WEEKLY_RULE", "60_7")],
    "LOCAL_TIMEZONE": os.environ.get("HOS_LOCAL_TIMEZONE", "America/Los_Angeles"),
    "DRIVING_LIMIT_HOURS": 11,
    "ON_DUTY_LIMIT_HOURS": 14,
    "BREAK_AFTER_DRIVING_HOURS": 8,
    "BREAK_MINUTES": 30,
    "DAILY_RESET_HOURS": 10,
    "RESTART_HOURS": 34,
    "RESTART_NIGHT_PERIODS": 2,
    "NIGHT_START_HOUR": 1,
    "NIGHT_END_HOUR": 5,
    "NEXT_BREAK_WARNING_HOURS": 7.5,
    "WEEKLY_CRITICAL_MARGIN_HOURS": 5,
    "AT_RISK_REMAINING_HOURS": 2,
    "FLEET_LIMITED_WEEKLY_HOURS": 20,
    "FLEET_REST_WEEKLY_HOURS": 10,
    "FLEET_REST_DRIVING_HOURS": 2,
    "MEAL_REQUIRED_BY_HOURS": 6,
    "MEAL_BREAK_MINUTES": 30,
}

HOS_FLEET_MAX_WORKERS = int(os.environ.get("HOS_FLEET_MAX_WORKERS", "8"))

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{asctime} {levelname} {name} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
    "loggers": {
        "hos_compliance": {
            "handlers": ["console"],
            "level": os.environ.get("HOS_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
    },
}
