"""structlog processors shared by the JSON file and console outputs."""

import os
import re
import threading

from colorama import Fore, Style, just_fix_windows_console
from structlog.typing import EventDict, WrappedLogger

from core.logging.context import get_correlation_id, get_job_id, get_request_id

just_fix_windows_console()

LEVEL_COLORS = {
    "DEBUG": Fore.CYAN,
    "INFO": Fore.GREEN,
    "WARNING": Fore.YELLOW,
    "ERROR": Fore.RED,
    "CRITICAL": Fore.RED + Style.BRIGHT,
}

# Expo style device tokens, e.g. ExponentPushToken[xxxxxxxx]
PUSH_TOKEN_PATTERN = re.compile(r"(Expo(?:nent)?PushToken\[)([^\]]{4})[^\]]*(\])")
TOKEN_KEYS = frozenset({"push_token", "token", "access_token"})

# Rendered in the console prefix, or metadata only the JSON file needs
CONSOLE_HIDDEN = frozenset(
    {
        "level",
        "timestamp",
        "logger",
        "event",
        "request_id",
        "job_id",
        "process_id",
        "thread_id",
        "service_name",
        "environment",
    }
)


def add_request_context(
    _logger: WrappedLogger, _method_name: str, event_dict: EventDict
) -> EventDict:
    """Tag the event with the bound request id and job id, if any."""
    for key, value in (("request_id", get_request_id()), ("job_id", get_job_id())):
        if value:
            event_dict.setdefault(key, value)
    return event_dict


def add_service_context(
    _logger: WrappedLogger, _method_name: str, event_dict: EventDict
) -> EventDict:
    """Add service_name, environment, pid and thread id.

    rq forks a work horse per job, so the pid tells job runs apart.
    """
    event_dict["service_name"] = os.getenv("SERVICE_NAME", "companion-notifications")
    event_dict["environment"] = os.getenv("ENVIRONMENT", "development")
    event_dict["process_id"] = os.getpid()
    event_dict["thread_id"] = threading.get_ident()
    return event_dict


def mask_push_tokens(
    _logger: WrappedLogger, _method_name: str, event_dict: EventDict
) -> EventDict:
    """Mask device push tokens and credentials before anything is written.

    Token-named keys keep their first four characters. Tokens embedded in
    free text, such as gateway error bodies, are masked in place.
    """
    for key, value in event_dict.items():
        if not isinstance(value, str):
            continue
        if key in TOKEN_KEYS:
            event_dict[key] = _mask(value)
        elif "PushToken[" in value:
            event_dict[key] = PUSH_TOKEN_PATTERN.sub(r"\1\2***\3", value)
    return event_dict


def _mask(value: str) -> str:
    if PUSH_TOKEN_PATTERN.search(value):
        return PUSH_TOKEN_PATTERN.sub(r"\1\2***\3", value)
    return f"{value[:4]}***" if len(value) > 4 else "***"


def console_renderer(
    _logger: WrappedLogger, _method_name: str, event_dict: EventDict
) -> str:
    """Render ``[LEVEL] timestamp | correlation id | logger | event key=value``.

    The correlation id is the request id inside HTTP handling and the job id
    inside rq jobs, ``-`` otherwise.
    """
    level = str(event_dict.get("level", "info")).upper()
    correlation_id = (
        event_dict.get("request_id")
        or event_dict.get("job_id")
        or get_correlation_id()
        or "-"
    )

    parts = [
        f"{LEVEL_COLORS.get(level, Fore.WHITE)}[{level:<8}]{Style.RESET_ALL}",
        f"{event_dict.get('timestamp', '')} |",
        f"{Fore.MAGENTA}{correlation_id}{Style.RESET_ALL} |",
        f"{Fore.BLUE}{event_dict.get('logger', 'root')}{Style.RESET_ALL} |",
        str(event_dict.get("event", "")),
    ]

    fields = " ".join(
        f"{key}={value}"
        for key, value in event_dict.items()
        if key not in CONSOLE_HIDDEN
    )
    if fields:
        parts.append(f"{Fore.YELLOW}{fields}{Style.RESET_ALL}")

    return " ".join(parts)
