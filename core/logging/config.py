"""structlog setup: JSON lines to a rotating file, colored lines to the console."""

import logging
import logging.handlers
import os
from pathlib import Path

import structlog

from core.logging.filters import RequestIDFilter
from core.logging.processors import (
    add_request_context,
    add_service_context,
    console_renderer,
    mask_push_tokens,
)

DEFAULT_LOG_FILE_PATH = "./logs/companion-notifications.log"
MAX_LOG_BYTES = 50 * 1024 * 1024
LOG_BACKUP_COUNT = 20

# Libraries whose INFO chatter drowns out scheduling decisions
NOISY_LOGGERS = ("rq.worker", "rq.scheduler", "urllib3.connectionpool")

SHARED_PROCESSORS = (
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
    add_request_context,
    add_service_context,
    mask_push_tokens,
)


def _formatter(renderer) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=list(SHARED_PROCESSORS),
    )


def _file_handler(path: str) -> logging.Handler:
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setFormatter(_formatter(structlog.processors.JSONRenderer()))
    return handler


def _console_handler() -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setFormatter(_formatter(console_renderer))
    return handler


def setup_logging() -> None:
    """Route structlog and stdlib logging through the same two handlers.

    Environment Variables:
    - LOG_FILE_PATH: JSON log file (default: ./logs/companion-notifications.log)
    - LOG_LEVEL: Logging level (default: INFO)
    - SERVICE_NAME: Service name added to every event
    - ENVIRONMENT: Deployment environment added to every event
    """
    log_file_path = os.getenv("LOG_FILE_PATH", DEFAULT_LOG_FILE_PATH)
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    structlog.configure(
        processors=[
            *SHARED_PROCESSORS,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    correlation_filter = RequestIDFilter()
    for handler in (_file_handler(log_file_path), _console_handler()):
        handler.setLevel(level)
        handler.addFilter(correlation_filter)
        root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    structlog.get_logger(__name__).info(
        "logging_configured", log_file=log_file_path, log_level=level_name
    )
