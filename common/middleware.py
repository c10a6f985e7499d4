"""
common.middleware
~~~~~~~~~~~~~~~~~
Structured JSON request-logging middleware powered by structlog.

Every request gets a ``request_id`` bound into structlog's contextvars, so
all log records emitted while serving it (services included) carry the id.
"""
import time
import uuid

import structlog

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class StructuredLoggingMiddleware:
    """
    Emits one ``http_request`` record per request/response cycle.

    Log record fields:
        request_id  – taken from ``X-Request-ID`` or freshly generated
        method      – HTTP verb
        path        – URL path including the query string
        status      – response status code
        duration_ms – round-trip duration in milliseconds (2 dp)
        user_id     – primary key of the authenticated user, if any

    The request id is echoed back in the ``X-Request-ID`` response header.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start = time.monotonic()
        try:
            response = self.get_response(request)
            duration_ms = round((time.monotonic() - start) * 1000, 2)

            user = getattr(request, "user", None)
            logger.info(
                "http_request",
                method=request.method,
                path=request.get_full_path(),
                status=response.status_code,
                duration_ms=duration_ms,
                user_id=user.pk if user is not None and user.is_authenticated else None,
            )
            response[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            structlog.contextvars.clear_contextvars()
