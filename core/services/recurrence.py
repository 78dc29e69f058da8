"""Next-occurrence arithmetic for recurring reminders."""

from datetime import UTC, datetime, timedelta
from zoneinfo import ZoneInfo

from dateutil.relativedelta import relativedelta

from core.enums import RecurrenceType
from core.schemas.reminder import RecurrencePattern


def _sunday_week_start(moment: datetime) -> datetime:
    days_since_sunday = (moment.weekday() + 1) % 7
    return (moment - timedelta(days=days_since_sunday)).replace(
        hour=0, minute=0, second=0, microsecond=0
    )


def _next_weekly(local: datetime, pattern: RecurrencePattern) -> datetime:
    if not pattern.days_of_week:
        return local + relativedelta(weeks=pattern.interval)

    anchor_week = _sunday_week_start(local)
    for offset in range(1, 7 * pattern.interval + 1):
        candidate = local + timedelta(days=offset)
        weeks_apart = (_sunday_week_start(candidate) - anchor_week).days // 7
        weekday = (candidate.weekday() + 1) % 7
        if weekday in pattern.days_of_week and weeks_apart % pattern.interval == 0:
            return candidate
    return local + relativedelta(weeks=pattern.interval)


def next_occurrence(
    pattern: RecurrencePattern, previous: datetime, tz: ZoneInfo
) -> datetime:
    """Return the occurrence following ``previous``.

    Calendar arithmetic happens on the user's wall clock so that a 09:00
    reminder stays at 09:00 across DST changes. Custom patterns repeat
    every ``interval`` hours.

    Args:
        pattern: Recurrence definition.
        previous: The occurrence just delivered.
        tz: The user's timezone.

    Returns:
        The next occurrence in UTC.
    """
    if pattern.type == RecurrenceType.CUSTOM:
        return (previous + timedelta(hours=pattern.interval)).astimezone(UTC)

    local = previous.astimezone(tz)
    if pattern.type == RecurrenceType.DAILY:
        following = local + relativedelta(days=pattern.interval)
    elif pattern.type == RecurrenceType.WEEKLY:
        following = _next_weekly(local, pattern)
    else:
        following = local + relativedelta(
            months=pattern.interval, day=pattern.day_of_month or local.day
        )
    return following.astimezone(UTC)


def recurrence_finished(
    pattern: RecurrencePattern, upcoming: datetime, occurrence_count: int
) -> bool:
    """Whether a reminder that has produced ``occurrence_count`` occurrences
    should stop before ``upcoming``."""
    if pattern.max_occurrences is not None and occurrence_count >= pattern.max_occurrences:
        return True
    return pattern.end_date is not None and upcoming > pattern.end_date
