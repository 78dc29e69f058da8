"""Signal receivers keeping recurring reminders going."""

from django.dispatch import receiver

import structlog

from core.exceptions import NotificationServiceError
from core.models import NotificationRecord
from core.services.reminder_service import build_reminder_service
from core.signals.notification_signals import notification_delivered

logger = structlog.get_logger(__name__)


@receiver(notification_delivered, sender=NotificationRecord)
def schedule_next_reminder_occurrence(
    sender: type,
    record: NotificationRecord,
    **kwargs: dict,
) -> None:
    """Schedule the next occurrence when a reminder's occurrence is delivered.

    Failing to schedule the next occurrence is logged; it must not undo the
    delivery that triggered it.

    Args:
        sender: The model class (NotificationRecord)
        record: The record that was just delivered
        **kwargs: Additional signal arguments
    """
    if not (record.data or {}).get("reminder_id"):
        return

    try:
        build_reminder_service(record.user_id).handle_occurrence_delivered(record)
    except NotificationServiceError as e:
        logger.error(
            "next_reminder_occurrence_failed",
            user_id=record.user_id,
            record_id=record.record_id,
            reminder_id=record.data.get("reminder_id"),
            error=str(e),
        )
