"""Background job delivering scheduled notifications through the push gateway.

The job runs when a notification is due. It re-reads the record so that a
notification cancelled or expired while waiting in the queue is dropped
instead of delivered, sends the push message, and then confirms delivery
on the record.
"""

import structlog

from core.enums import NotificationPriority
from core.exceptions import DeviceNotRegisteredError, PushGatewayError
from core.logging import clear_job_id, set_job_id
from core.models import NotificationRecord
from core.services.delivery import PushGatewayClient
from core.services.notification_service import build_notification_service

logger = structlog.get_logger(__name__)

GATEWAY_PRIORITIES = {
    NotificationPriority.URGENT.value: "high",
    NotificationPriority.HIGH.value: "high",
    NotificationPriority.NORMAL.value: "default",
    NotificationPriority.LOW.value: "normal",
}


def deliver_push_job(record_id: str, delivery_id: str) -> bool:
    """Deliver one notification.

    This job is executed by RQ workers; ``delivery_id`` is also the job id.

    Args:
        record_id: Record to deliver.
        delivery_id: Identifier the adapter returned for the record.

    Returns:
        True if the push message was sent, False if it was dropped or failed.
    """
    set_job_id(delivery_id)
    try:
        return _deliver(record_id, delivery_id)
    finally:
        clear_job_id()


def _deliver(record_id: str, delivery_id: str) -> bool:
    record = NotificationRecord.objects.filter(record_id=record_id).first()
    if record is None:
        logger.warning("notification_not_found", record_id=record_id)
        return False

    service = build_notification_service(record.user_id)

    if record.is_cancelled:
        logger.info("cancelled_notification_skipped", record_id=record_id)
        return False

    if record.is_expired(service.clock()):
        logger.info(
            "expired_notification_dropped",
            record_id=record_id,
            expires_at=record.expires_at.isoformat(),
        )
        return False

    push_token = service.preferences.get_push_token()
    if not push_token:
        logger.error("push_token_missing", record_id=record_id, user_id=record.user_id)
        service.records.update(
            record_id, delivery_failed=True, delivery_error="No push token registered"
        )
        return False

    try:
        PushGatewayClient().send(
            push_token,
            record.title,
            record.body,
            data={**record.data, "record_id": record_id, "delivery_id": delivery_id},
            priority=GATEWAY_PRIORITIES.get(record.priority, "default"),
        )
    except DeviceNotRegisteredError as e:
        logger.warning(
            "push_token_rejected", record_id=record_id, user_id=record.user_id
        )
        service.preferences.set_push_token(None)
        service.records.update(record_id, delivery_failed=True, delivery_error=str(e))
        return False
    except PushGatewayError as e:
        logger.error(
            "push_delivery_failed",
            record_id=record_id,
            status_code=e.status_code,
            error=str(e),
        )
        service.records.update(record_id, delivery_failed=True, delivery_error=str(e))
        return False

    service.confirm_delivery(record_id)
    logger.info("push_delivered", record_id=record_id, user_id=record.user_id)
    return True
