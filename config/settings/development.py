"""
Development settings – extends base settings with debug-friendly overrides.
"""
from decouple import config

from .base import *  # noqa: F401, F403

DEBUG = config("DEBUG", default=True, cast=bool)

# In development only: allow all hosts if DEBUG is True
if DEBUG:
    ALLOWED_HOSTS = ["*"]

SECURE_SSL_REDIRECT = False
SESSION_COOKIE_SECURE = False
CSRF_COOKIE_SECURE = False

LOGGING["root"]["level"] = "DEBUG"  # noqa: F405

# Human-readable log lines instead of JSON
LOGGING["formatters"]["json_formatter"]["processor"] = structlog.dev.ConsoleRenderer()  # noqa: F405

# Pick up feed changes quickly while working on the homepage
RELEASE_NOTES_CACHE_SECONDS = config("RELEASE_NOTES_CACHE_SECONDS", default=60, cast=int)

REST_FRAMEWORK["DEFAULT_RENDERER_CLASSES"] = [  # noqa: F405
    "rest_framework.renderers.JSONRenderer",
    "rest_framework.renderers.BrowsableAPIRenderer",
]
