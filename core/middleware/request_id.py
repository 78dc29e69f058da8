"""Request ID middleware for log correlation."""

import re
import uuid
from collections.abc import Callable

from django.http import HttpRequest, HttpResponse

import structlog

from core.constants import REQUEST_ID_HEADER
from core.logging.context import clear_request_id, set_request_id

logger = structlog.get_logger(__name__)

# Incoming ids outside this shape are replaced rather than echoed into logs.
VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


class RequestIDMiddleware:
    """Attach a request id to every request, its logs and its response.

    The app may send its own ``X-Request-ID``; a missing or malformed one is
    replaced with a fresh UUID. The id lives in thread-local context for the
    duration of the request so the logging processors and the exception
    handler can pick it up.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        """Initialize the middleware.

        Args:
            get_response: The next middleware or view in the chain.
        """
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        request_id = request.headers.get(REQUEST_ID_HEADER, "")
        if not VALID_REQUEST_ID.match(request_id):
            if request_id:
                logger.debug("request_id_replaced", received_length=len(request_id))
            request_id = str(uuid.uuid4())

        set_request_id(request_id)
        request.request_id = request_id  # type: ignore[attr-defined]

        try:
            response = self.get_response(request)
            response[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            clear_request_id()
