"""
common.health
~~~~~~~~~~~~~
GET /health/ – liveness + readiness probe.

Returns:
    200  {"status": "ok", "db": "ok", "cache": "ok", "version": "<APP_VERSION>"}
    503  {"status": "degraded", ...} – DB unreachable or cache broken

The cache check matters because release notes are served from it.
"""
import structlog
from django.conf import settings
from django.core.cache import cache
from django.db import OperationalError, connection
from django.http import JsonResponse

logger = structlog.get_logger(__name__)

_PROBE_KEY = "health:probe"


def _check_db() -> str:
    try:
        connection.ensure_connection()
    except OperationalError as exc:
        logger.error("health_check_db_failure", error=str(exc))
        return f"error: {exc}"
    return "ok"


def _check_cache() -> str:
    try:
        cache.set(_PROBE_KEY, "1", timeout=5)
        if cache.get(_PROBE_KEY) != "1":
            return "error: probe value not read back"
    except Exception as exc:  # noqa: BLE001 – any backend failure is reported, not raised
        logger.error("health_check_cache_failure", error=str(exc))
        return f"error: {exc}"
    return "ok"


def health_check(request):
    """Return service health including database and cache status."""
    db_status = _check_db()
    cache_status = _check_cache()
    healthy = db_status == "ok" and cache_status == "ok"

    payload = {
        "status": "ok" if healthy else "degraded",
        "db": db_status,
        "cache": cache_status,
        "version": settings.APP_VERSION,
    }
    return JsonResponse(payload, status=200 if healthy else 503)
