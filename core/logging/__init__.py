"""Logging utilities for the notification service."""

from core.logging.config import setup_logging
from core.logging.context import (
    clear_job_id,
    get_correlation_id,
    get_job_id,
    get_request_id,
    set_job_id,
    set_request_id,
)
from core.logging.filters import RequestIDFilter

__all__ = [
    "RequestIDFilter",
    "clear_job_id",
    "get_correlation_id",
    "get_job_id",
    "get_request_id",
    "set_job_id",
    "set_request_id",
    "setup_logging",
]
