"""Local-time helpers for quiet hours and nudge time-of-day windows."""

from datetime import UTC, datetime, time, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from django.conf import settings

import structlog

logger = structlog.get_logger(__name__)


def get_zone(tz_name: str | None) -> ZoneInfo:
    """Return the zone for ``tz_name``, falling back to the service default.

    Unknown names are logged and replaced rather than raised; a bad
    preference must not stop the scheduling policy from deciding.
    """
    for candidate in (tz_name, settings.DEFAULT_NOTIFICATION_TIMEZONE):
        if not candidate:
            continue
        try:
            return ZoneInfo(candidate)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning("unknown_timezone", timezone=candidate)
    return ZoneInfo("UTC")


def to_local(moment: datetime, tz: ZoneInfo) -> datetime:
    """Convert ``moment`` to ``tz``. Naive datetimes are taken as UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(tz)


def parse_hhmm(value: str) -> time:
    """Parse an ``HH:MM`` string."""
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes))


def in_wrapping_window(moment: time, start: time, end: time) -> bool:
    """Check ``moment`` against the half-open window ``[start, end)``.

    The window may wrap past midnight (``22:00-07:00``). ``start == end``
    is an empty window.
    """
    if start == end:
        return False
    if start < end:
        return start <= moment < end
    return moment >= start or moment < end


def in_inclusive_window(moment: time, start: time, end: time) -> bool:
    """Check ``moment`` against the non-wrapping window ``[start, end]``."""
    return start <= moment <= end


def next_boundary(moment: datetime, boundary: time, tz: ZoneInfo) -> datetime:
    """Return the first instant strictly after ``moment`` at ``boundary`` local time.

    The result is expressed in UTC.
    """
    local = to_local(moment, tz)
    candidate = datetime.combine(local.date(), boundary, tzinfo=tz)
    if candidate <= local:
        candidate = datetime.combine(
            local.date() + timedelta(days=1), boundary, tzinfo=tz
        )
    return candidate.astimezone(UTC)


def local_weekday(moment: datetime, tz: ZoneInfo) -> int:
    """Return the local weekday with Sunday = 0 and Saturday = 6."""
    return (to_local(moment, tz).weekday() + 1) % 7
