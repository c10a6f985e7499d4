"""
Test settings – in-memory SQLite, no outbound release-notes calls.
"""
import os

import structlog

# base.py refuses to start without SECRET_KEY; tests never see a real one.
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from .base import *  # noqa: E402, F401, F403

DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "homepage-tests",
    }
}

APP_VERSION = "1.6.0"
INSTANCE_ID = "test-instance"
RELEASE_NOTES_URL = ""
RECENTLY_USED_LIMIT = 5

LOGGING["root"]["level"] = "WARNING"  # noqa: F405

# structlog.testing.capture_logs() only sees loggers that are not cached.
structlog.configure(cache_logger_on_first_use=False)
