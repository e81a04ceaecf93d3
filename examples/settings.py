"""Django settings for the example project.

A persistent SQLite database, the admin, and the three django-camps apps.
Stripe credentials are read from the environment (or an ``.env`` file next
to this module) so the management commands can run against a test account.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent
load_dotenv(BASE_DIR / ".env")

SECRET_KEY = "example-dev-key-not-for-production"
SALT_KEY = os.environ.get("SALT_KEY", "example-salt-key-not-for-production")
DEBUG = True
ALLOWED_HOSTS = ["*"]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.messages",
    "django.contrib.sessions",
    "django.contrib.staticfiles",
    "django_camps.events",
    "django_camps.registration",
    "django_camps.reconciliation",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
]

ROOT_URLCONF = "urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"
USE_TZ = True
TIME_ZONE = "America/New_York"

STATIC_URL = "static/"

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "%(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "simple"},
    },
    "loggers": {
        "django_camps": {
            "handlers": ["console"],
            "level": os.environ.get("DJANGO_CAMPS_LOG_LEVEL", "INFO"),
        },
    },
}

DJANGO_CAMPS = {
    "stripe": {
        "secret_key": os.environ.get("STRIPE_SECRET_KEY", ""),
        "lookback_days": int(os.environ.get("STRIPE_LOOKBACK_DAYS", "360")),
    },
    "reconciliation": {
        "strategy": os.environ.get("RECONCILIATION_STRATEGY", "sequential"),
    },
}
