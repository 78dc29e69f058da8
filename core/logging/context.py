"""Per-thread correlation ids for HTTP requests and background jobs.

Gunicorn threads serve one request at a time and rq workers run one job at a
time, so a thread-local slot per id kind is enough to tag every log line.
"""

import threading

_correlation = threading.local()

REQUEST_ID = "request_id"
JOB_ID = "job_id"


def _set(kind: str, value: str) -> None:
    setattr(_correlation, kind, value)


def _get(kind: str) -> str | None:
    return getattr(_correlation, kind, None)


def _clear(kind: str) -> None:
    _correlation.__dict__.pop(kind, None)


def set_request_id(request_id: str) -> None:
    """Bind the id of the HTTP request handled by this thread."""
    _set(REQUEST_ID, request_id)


def get_request_id() -> str | None:
    """Return the current request id, or None outside a request."""
    return _get(REQUEST_ID)


def clear_request_id() -> None:
    _clear(REQUEST_ID)


def set_job_id(job_id: str) -> None:
    """Bind the id of the rq job (a delivery id or a check name) being run."""
    _set(JOB_ID, job_id)


def get_job_id() -> str | None:
    return _get(JOB_ID)


def clear_job_id() -> None:
    _clear(JOB_ID)


def get_correlation_id() -> str | None:
    """Return the request id, falling back to the job id."""
    return get_request_id() or get_job_id()
