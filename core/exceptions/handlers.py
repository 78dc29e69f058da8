"""DRF exception handler rendering every failure in one error envelope."""

import logging
import traceback
from datetime import UTC, datetime
from typing import Any

from django.conf import settings
from django.http import Http404

from pydantic import ValidationError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.exceptions.notification_exceptions import NotificationServiceError
from core.logging.context import get_request_id

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "An internal server error occurred."


def custom_exception_handler(
    exc: Exception, context: dict[str, Any]
) -> Response | None:
    """Render an exception as ``{status, message, request_id, timestamp}``.

    DRF's own exceptions keep DRF's payload and status. Request bodies that
    fail pydantic validation become 400 with the field errors attached.
    Service errors carry their own status, ``error`` code and extra fields.
    Anything else is a 500 whose message never leaks the exception text.

    Args:
        exc: The exception that was raised.
        context: Context dictionary containing request and view information.

    Returns:
        The error response, tagged with ``X-Request-ID`` when one is bound.
    """
    view = context.get("view")
    request = getattr(view, "request", None) or context.get("request")
    request_id = get_request_id()

    response = exception_handler(exc, context)
    if response is None:
        status_code, body = _describe(exc)
        response = Response(
            {**_create_error_response(status_code, body.pop("message"), request_id), **body},
            status=status_code,
        )

    if request_id:
        response["X-Request-ID"] = request_id

    _log_exception(exc, request, response.status_code)
    return response


def _describe(exc: Exception) -> tuple[int, dict[str, Any]]:
    """Map an exception DRF did not handle to a status and body fields."""
    if isinstance(exc, ValidationError):
        return status.HTTP_400_BAD_REQUEST, {
            "message": "Invalid request parameters",
            "errors": exc.errors(include_url=False, include_context=False),
        }
    if isinstance(exc, NotificationServiceError):
        return exc.status_code, {
            "message": str(exc),
            "error": exc.error_code,
            **exc.extra_fields(),
        }
    if isinstance(exc, Http404):
        return status.HTTP_404_NOT_FOUND, {
            "message": "The requested resource was not found."
        }
    return status.HTTP_500_INTERNAL_SERVER_ERROR, {"message": INTERNAL_ERROR_MESSAGE}


def _create_error_response(
    status_code: int, message: str, request_id: str | None
) -> dict[str, Any]:
    """Build the fields every error body shares."""
    return {
        "status": status_code,
        "message": message,
        "request_id": request_id,
        "timestamp": datetime.now(UTC).isoformat(),
    }


def _log_exception(exc: Exception, request: Any, status_code: int) -> None:
    """Log the failure at WARNING for 4xx responses and ERROR otherwise.

    The stack trace is appended only when DEBUG is on.
    """
    level = logging.WARNING if 400 <= status_code < 500 else logging.ERROR
    method = getattr(request, "method", "unknown")
    path = getattr(request, "path", "unknown")

    message = f"{type(exc).__name__} on {method} {path} -> {status_code}: {exc}"
    if settings.DEBUG:
        message += "\n" + "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )

    logger.log(level, message)
