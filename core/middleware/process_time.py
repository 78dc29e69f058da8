"""Process time middleware for request timing."""

import time
from collections.abc import Callable

from django.http import HttpRequest, HttpResponse

import structlog

from core.constants import PROCESS_TIME_HEADER, SLOW_REQUEST_THRESHOLD

logger = structlog.get_logger(__name__)


class ProcessTimeMiddleware:
    """Time each request and report it in the ``X-Process-Time`` header.

    Requests slower than ``SLOW_REQUEST_THRESHOLD`` seconds are logged as
    warnings with the route and status code.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        started = time.perf_counter()
        response = self.get_response(request)
        duration = time.perf_counter() - started

        response[PROCESS_TIME_HEADER] = f"{duration:.6f}"
        if duration > SLOW_REQUEST_THRESHOLD:
            logger.warning(
                "slow_request",
                method=request.method,
                path=request.path,
                status_code=response.status_code,
                duration_seconds=round(duration, 3),
                threshold_seconds=SLOW_REQUEST_THRESHOLD,
            )
        return response
