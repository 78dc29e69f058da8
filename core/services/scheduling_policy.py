"""Scheduling and suppression policy.

Decides whether a candidate notification is delivered as requested, deferred
past quiet hours, merged into a pending record, or suppressed. Evaluation is
a pure function of the user's preferences, their recent records and the
current time: it reads nothing from the database and never raises.
"""

from collections.abc import Iterable
from datetime import datetime, timedelta

from django.conf import settings

from core.constants import DAILY_WINDOW_SECONDS, HOURLY_WINDOW_SECONDS, OWNER_DATA_KEYS
from core.enums import (
    DecisionOutcome,
    NotificationCategory,
    NotificationPriority,
    SuppressionReason,
)
from core.models import NotificationRecord
from core.schemas.notification import NotificationCandidate, SchedulingDecision
from core.schemas.preferences import NotificationPreferences, QuietHours
from core.services.time_windows import (
    get_zone,
    in_wrapping_window,
    next_boundary,
    parse_hhmm,
    to_local,
)


def in_quiet_hours(moment: datetime, quiet_hours: QuietHours) -> bool:
    """Check whether ``moment`` falls inside the user's quiet-hours window."""
    tz = get_zone(quiet_hours.timezone)
    return in_wrapping_window(
        to_local(moment, tz).time(),
        parse_hhmm(quiet_hours.start_time),
        parse_hhmm(quiet_hours.end_time),
    )


def quiet_hours_end(moment: datetime, quiet_hours: QuietHours) -> datetime:
    """Return the next quiet-hours end boundary after ``moment``."""
    return next_boundary(
        moment, parse_hhmm(quiet_hours.end_time), get_zone(quiet_hours.timezone)
    )


def _suppress(reason: SuppressionReason) -> SchedulingDecision:
    return SchedulingDecision(outcome=DecisionOutcome.SUPPRESSED, reason=reason)


def _is_owned(record: NotificationRecord) -> bool:
    """Check whether a reminder or nudge tracks ``record`` as its own."""
    data = record.data or {}
    return any(data.get(key) for key in OWNER_DATA_KEYS)


class SchedulingPolicy:
    """Fixed-order rule chain applied to every candidate.

    Rules, first match decides:

    1. Master switch off (emergency exempt): suppress.
    2. Category off (emergency exempt): suppress.
    3. Already expired: suppress.
    4. Inside quiet hours and not an exception category: defer to the end
       of the window and keep evaluating with the deferred time.
    5. Hourly or daily cap reached (urgent exempt): suppress.
    6. Similar pending record close by: merge into it. Candidates marked
       unbatchable, and records owned by a reminder or nudge, never merge.
    7. Otherwise accept.
    """

    def __init__(self, batch_window_seconds: int | None = None) -> None:
        """Initialize the policy.

        Args:
            batch_window_seconds: How close a pending record of the same
                category must be for a candidate to be merged into it.
                Defaults to ``NOTIFICATION_BATCH_WINDOW_SECONDS``.
        """
        if batch_window_seconds is None:
            batch_window_seconds = settings.NOTIFICATION_BATCH_WINDOW_SECONDS
        self.batch_window = timedelta(seconds=batch_window_seconds)

    def evaluate(
        self,
        candidate: NotificationCandidate,
        preferences: NotificationPreferences,
        recent_records: Iterable[NotificationRecord],
        now: datetime,
    ) -> SchedulingDecision:
        """Decide what happens to ``candidate``.

        Args:
            candidate: Notification to decide on.
            preferences: The user's current preferences.
            recent_records: Records that may count against caps or receive a
                batched candidate; anything from 24 hours before the
                requested time onwards.
            now: Current time.

        Returns:
            The decision. Accepted and deferred decisions carry the time the
            notification should fire.
        """
        records = list(recent_records)
        is_emergency = candidate.category == NotificationCategory.EMERGENCY
        requested = candidate.requested_time or now
        if requested < now:
            requested = now

        if not preferences.global_enabled and not is_emergency:
            return _suppress(SuppressionReason.GLOBAL_DISABLED)

        if not is_emergency and not preferences.categories.is_enabled(
            candidate.category
        ):
            return _suppress(SuppressionReason.CATEGORY_DISABLED)

        if candidate.expires_at is not None and candidate.expires_at <= now:
            return _suppress(SuppressionReason.EXPIRED)

        deferred = False
        quiet_hours = preferences.quiet_hours
        if (
            quiet_hours.enabled
            and preferences.frequency.respect_quiet_hours
            and candidate.category not in quiet_hours.exceptions
            and in_quiet_hours(requested, quiet_hours)
        ):
            requested = quiet_hours_end(requested, quiet_hours)
            deferred = True

        if candidate.priority != NotificationPriority.URGENT:
            cap_reason = self._cap_reason(records, preferences, requested)
            if cap_reason is not None:
                return _suppress(cap_reason)

        target = self._batch_target(candidate, preferences, records, requested)
        if target is not None:
            return SchedulingDecision(
                outcome=DecisionOutcome.BATCHED,
                reason=SuppressionReason.BATCHED_WITH_PENDING,
                scheduled_for=target.scheduled_for,
                batch_target_id=target.record_id,
            )

        if deferred:
            return SchedulingDecision(
                outcome=DecisionOutcome.DEFERRED,
                reason=SuppressionReason.QUIET_HOURS,
                scheduled_for=requested,
            )
        return SchedulingDecision(
            outcome=DecisionOutcome.ACCEPTED, scheduled_for=requested
        )

    def _cap_reason(
        self,
        records: list[NotificationRecord],
        preferences: NotificationPreferences,
        at: datetime,
    ) -> SuppressionReason | None:
        hour_start = at - timedelta(seconds=HOURLY_WINDOW_SECONDS)
        day_start = at - timedelta(seconds=DAILY_WINDOW_SECONDS)
        counted = [
            record.effective_time
            for record in records
            if record.is_delivered or record.is_pending
        ]

        hourly = sum(1 for moment in counted if hour_start < moment <= at)
        if hourly >= preferences.frequency.max_per_hour:
            return SuppressionReason.HOURLY_CAP

        daily = sum(1 for moment in counted if day_start < moment <= at)
        if daily >= preferences.frequency.max_per_day:
            return SuppressionReason.DAILY_CAP
        return None

    def _batch_target(
        self,
        candidate: NotificationCandidate,
        preferences: NotificationPreferences,
        records: list[NotificationRecord],
        at: datetime,
    ) -> NotificationRecord | None:
        if (
            not candidate.batchable
            or not preferences.frequency.batch_similar
            or candidate.priority == NotificationPriority.URGENT
            or candidate.category == NotificationCategory.EMERGENCY
        ):
            return None

        matches = [
            record
            for record in records
            if record.is_pending
            and record.category == candidate.category
            and not _is_owned(record)
            and record.scheduled_for is not None
            and abs(record.scheduled_for - at) <= self.batch_window
        ]
        if not matches:
            return None
        return min(matches, key=lambda record: abs(record.scheduled_for - at))
