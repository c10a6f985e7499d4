"""
common.exceptions
~~~~~~~~~~~~~~~~~
Centralised DRF exception handler and the application error hierarchy.

Services raise :class:`AppError` subclasses; the handler below turns them
into ``{"code": ..., "detail": ...}`` JSON bodies.
"""
import structlog
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = structlog.get_logger(__name__)


class AppError(Exception):
    """Base application error.  Subclass to define domain-specific errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_code: str = "error"
    default_detail: str = "An error occurred."

    def __init__(self, detail: str | None = None, code: str | None = None) -> None:
        self.detail = detail or self.default_detail
        self.code = code or self.default_code
        super().__init__(self.detail)

    def __str__(self) -> str:
        return self.detail


class NotSignedInError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_code = "user_not_signed_in"
    default_detail = "You must be signed in to perform this action."


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = "not_found"
    default_detail = "The requested resource was not found."


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_code = "conflict"
    default_detail = "A resource conflict occurred."


class PermissionDeniedError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_code = "permission_denied"
    default_detail = "You do not have permission to perform this action."


def custom_exception_handler(exc: Exception, context: dict) -> Response | None:
    """
    Global DRF exception handler.

    ``AppError`` subclasses become ``{"code", "detail"}`` responses with the
    subclass's status code.  Anything else goes through the stock DRF
    handler; exceptions DRF does not know about are logged and re-raised by
    DRF as a 500.
    """
    if isinstance(exc, AppError):
        view = context.get("view")
        logger.warning(
            "app_error",
            code=exc.code,
            detail=exc.detail,
            status_code=exc.status_code,
            view=type(view).__name__ if view is not None else None,
        )
        return Response(
            {"code": exc.code, "detail": exc.detail},
            status=exc.status_code,
        )

    response = drf_exception_handler(exc, context)
    if response is not None:
        logger.warning(
            "drf_error",
            detail=response.data,
            status_code=response.status_code,
        )
    else:
        logger.exception("unhandled_exception", exc_info=exc)

    return response
