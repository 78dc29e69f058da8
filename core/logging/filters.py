"""stdlib logging filter exposing correlation ids to plain format strings."""

import logging

from core.logging.context import get_correlation_id, get_job_id, get_request_id


class RequestIDFilter(logging.Filter):
    """Set ``request_id``, ``job_id`` and ``correlation_id`` on every record.

    Unset ids render as ``N/A`` so ``%(request_id)s`` style formats never fail.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "N/A"
        record.job_id = get_job_id() or "N/A"
        record.correlation_id = get_correlation_id() or "N/A"
        return True
