"""Reminder service: user-authored reminders with snooze and recurrence.

A Reminder is the user's intent; every occurrence and every snooze becomes a
NotificationRecord through the scheduling policy. When an occurrence is
delivered, recurring reminders schedule their next occurrence.
"""

from collections.abc import Callable
from datetime import datetime, timedelta

import structlog

from core.constants import DEFAULT_SNOOZE_MINUTES
from core.enums import NotificationCategory, NotificationType, ReminderType
from core.exceptions import NotFoundError, SnoozeLimitExceededError
from core.models import NotificationRecord, Reminder, generate_record_id
from core.schemas.notification import NotificationCandidate, ScheduleResult
from core.schemas.reminder import RecurrencePattern, ReminderCreateRequest
from core.services.notification_service import (
    NotificationService,
    build_notification_service,
)
from core.services.recurrence import next_occurrence, recurrence_finished
from core.services.time_windows import get_zone

logger = structlog.get_logger(__name__)

# Notification type and category each reminder type is delivered as.
REMINDER_NOTIFICATIONS = {
    ReminderType.ASSIGNMENT_DUE.value: (
        NotificationType.ASSIGNMENT_DUE,
        NotificationCategory.DEADLINES,
    ),
    ReminderType.EXAM_SCHEDULED.value: (
        NotificationType.EXAM_ALERT,
        NotificationCategory.DEADLINES,
    ),
    ReminderType.COURSE_DEADLINE.value: (
        NotificationType.DEADLINE,
        NotificationCategory.DEADLINES,
    ),
    ReminderType.STREAK_MAINTENANCE.value: (
        NotificationType.STREAK,
        NotificationCategory.LEARNING,
    ),
}

# Upper bound on occurrences skipped when catching up on missed ones.
MAX_CATCH_UP_STEPS = 1000


class ReminderService:
    """Creates, snoozes, completes and repeats one user's reminders."""

    def __init__(
        self,
        user_id: str,
        notification_service: NotificationService | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize reminder service.

        Args:
            user_id: Owner of the reminders.
            notification_service: Scheduling entry point occurrences go to.
            clock: Source of the current time; defaults to the notification
                service's clock.
        """
        self.user_id = user_id
        self.notifications = notification_service or build_notification_service(
            user_id, clock
        )
        self.clock = clock or self.notifications.clock

    def get_reminder(self, reminder_id: str) -> Reminder:
        """Return one of the user's reminders.

        Raises:
            NotFoundError: If the user has no such reminder.
        """
        try:
            return Reminder.objects.get(user_id=self.user_id, reminder_id=reminder_id)
        except Reminder.DoesNotExist as e:
            raise NotFoundError("Reminder", reminder_id) from e

    def get_reminders(self, active_only: bool = True) -> list[Reminder]:
        """Return the user's reminders ordered by next occurrence."""
        queryset = Reminder.objects.filter(user_id=self.user_id)
        if active_only:
            queryset = queryset.filter(is_active=True, is_completed=False)
        return list(queryset)

    def create_reminder(self, request: ReminderCreateRequest) -> Reminder:
        """Persist a reminder and schedule its first occurrence.

        Raises:
            PermissionDeniedError: If the adapter reports missing permission.
            DeliveryFailedError: If the adapter failed for another reason.
        """
        reminder = Reminder.objects.create(
            reminder_id=generate_record_id("reminder"),
            user_id=self.user_id,
            reminder_type=request.reminder_type,
            title=request.title,
            description=request.description,
            scheduled_for=request.scheduled_for,
            is_recurring=request.is_recurring,
            recurrence=(
                request.recurrence.model_dump(mode="json")
                if request.recurrence
                else None
            ),
            related_entity_id=request.related_entity_id,
            related_entity_type=request.related_entity_type,
            max_snoozes=request.max_snoozes,
        )
        logger.info(
            "reminder_created",
            user_id=self.user_id,
            reminder_id=reminder.reminder_id,
            reminder_type=reminder.reminder_type,
            is_recurring=reminder.is_recurring,
        )

        self._schedule_occurrence(reminder, reminder.scheduled_for)
        return reminder

    def snooze_reminder(
        self, reminder_id: str, minutes: int = DEFAULT_SNOOZE_MINUTES
    ) -> Reminder:
        """Push the pending occurrence ``minutes`` into the future.

        Raises:
            NotFoundError: If the reminder does not exist.
            SnoozeLimitExceededError: If the snooze limit is reached.
        """
        reminder = self.get_reminder(reminder_id)
        if reminder.snooze_count >= reminder.max_snoozes:
            logger.info(
                "reminder_snooze_limit_reached",
                user_id=self.user_id,
                reminder_id=reminder_id,
                snooze_count=reminder.snooze_count,
            )
            raise SnoozeLimitExceededError(reminder_id, reminder.max_snoozes)

        self._cancel_current(reminder)
        reminder.snooze_count += 1
        reminder.save(update_fields=["snooze_count", "updated_at"])

        result = self._schedule_notification(
            reminder, self.clock() + timedelta(minutes=minutes)
        )
        reminder.current_record_id = result.record_id
        reminder.save(update_fields=["current_record_id", "updated_at"])

        logger.info(
            "reminder_snoozed",
            user_id=self.user_id,
            reminder_id=reminder_id,
            minutes=minutes,
            snooze_count=reminder.snooze_count,
        )
        return reminder

    def complete_reminder(self, reminder_id: str) -> Reminder:
        """Mark a reminder done; a pending occurrence is cancelled."""
        reminder = self.get_reminder(reminder_id)
        if reminder.is_completed:
            return reminder

        self._cancel_current(reminder)
        reminder.is_completed = True
        reminder.completed_at = self.clock()
        reminder.save(update_fields=["is_completed", "completed_at", "updated_at"])
        logger.info("reminder_completed", user_id=self.user_id, reminder_id=reminder_id)
        return reminder

    def cancel_reminder(self, reminder_id: str) -> Reminder:
        """Deactivate a reminder and cancel its pending occurrence."""
        reminder = self.get_reminder(reminder_id)
        self._cancel_current(reminder)
        if reminder.is_active:
            reminder.is_active = False
            reminder.save(update_fields=["is_active", "updated_at"])
            logger.info(
                "reminder_cancelled", user_id=self.user_id, reminder_id=reminder_id
            )
        return reminder

    def handle_occurrence_delivered(self, record: NotificationRecord) -> Reminder | None:
        """Schedule the next occurrence of the reminder behind ``record``.

        Returns:
            The reminder when a new occurrence was scheduled, else None.
        """
        reminder_id = (record.data or {}).get("reminder_id")
        if not reminder_id:
            return None
        try:
            reminder = self.get_reminder(reminder_id)
        except NotFoundError:
            logger.warning(
                "reminder_for_record_not_found",
                user_id=self.user_id,
                record_id=record.record_id,
                reminder_id=reminder_id,
            )
            return None

        if not reminder.is_active or reminder.is_completed or not reminder.is_recurring:
            return None
        if reminder.current_record_id not in (None, record.record_id):
            return None

        pattern = RecurrencePattern.model_validate(reminder.recurrence)
        tz = get_zone(self.notifications.get_preferences().quiet_hours.timezone)
        now = self.clock()
        upcoming = next_occurrence(pattern, reminder.scheduled_for, tz)
        for _ in range(MAX_CATCH_UP_STEPS):
            if upcoming > now:
                break
            upcoming = next_occurrence(pattern, upcoming, tz)

        if recurrence_finished(pattern, upcoming, reminder.occurrence_count):
            reminder.is_active = False
            reminder.save(update_fields=["is_active", "updated_at"])
            logger.info(
                "reminder_recurrence_finished",
                user_id=self.user_id,
                reminder_id=reminder_id,
                occurrence_count=reminder.occurrence_count,
            )
            return None

        reminder.scheduled_for = upcoming
        reminder.snooze_count = 0
        reminder.save(update_fields=["scheduled_for", "snooze_count", "updated_at"])
        self._schedule_occurrence(reminder, upcoming)
        return reminder

    def _schedule_occurrence(self, reminder: Reminder, at: datetime) -> ScheduleResult:
        reminder.occurrence_count += 1
        reminder.current_record_id = None
        reminder.save(
            update_fields=["occurrence_count", "current_record_id", "updated_at"]
        )
        result = self._schedule_notification(reminder, at)
        if result.record_id is None:
            logger.info(
                "reminder_occurrence_suppressed",
                user_id=self.user_id,
                reminder_id=reminder.reminder_id,
                reason=result.reason,
            )

        # An occurrence delivered on hand-off may already have scheduled the
        # next one and moved occurrence_count on.
        Reminder.objects.filter(
            reminder_id=reminder.reminder_id,
            occurrence_count=reminder.occurrence_count,
        ).update(current_record_id=result.record_id)
        reminder.refresh_from_db()
        return result

    def _schedule_notification(self, reminder: Reminder, at: datetime) -> ScheduleResult:
        notification_type, category = REMINDER_NOTIFICATIONS.get(
            reminder.reminder_type,
            (NotificationType.REMINDER, NotificationCategory.LEARNING),
        )
        data = {"reminder_id": reminder.reminder_id}
        if reminder.related_entity_id:
            data["related_entity_id"] = reminder.related_entity_id
            data["related_entity_type"] = reminder.related_entity_type

        return self.notifications.schedule_notification(
            NotificationCandidate(
                title=reminder.title,
                body=reminder.description,
                category=category,
                notification_type=notification_type,
                data=data,
                requested_time=at,
                batchable=False,
            )
        )

    def _cancel_current(self, reminder: Reminder) -> None:
        if reminder.current_record_id:
            try:
                self.notifications.cancel_notification(reminder.current_record_id)
            except NotFoundError:
                logger.info(
                    "reminder_record_already_removed",
                    user_id=self.user_id,
                    reminder_id=reminder.reminder_id,
                    record_id=reminder.current_record_id,
                )


def build_reminder_service(
    user_id: str, clock: Callable[[], datetime] | None = None
) -> ReminderService:
    """Build a reminder service wired to the production notification service."""
    return ReminderService(user_id, build_notification_service(user_id, clock))
