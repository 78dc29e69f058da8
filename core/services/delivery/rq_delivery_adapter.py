"""Delivery adapter backed by the RQ job queue."""

from datetime import datetime
from typing import Any
from uuid import uuid4

import django_rq
import structlog
from redis.exceptions import RedisError
from rq.exceptions import InvalidJobOperation, NoSuchJobError
from rq.job import Job

from core.exceptions import DeliveryFailedError, PermissionDeniedError
from core.repositories import PreferenceStore
from core.schemas.preferences import PermissionRequestResult, PermissionStatus
from core.services.delivery.base_delivery_adapter import DeliveryAdapter

logger = structlog.get_logger(__name__)

DELIVERY_JOB = "core.jobs.delivery_jobs.deliver_push_job"


class RQDeliveryAdapter(DeliveryAdapter):
    """Enqueues a push delivery job per notification.

    Immediate notifications are enqueued right away and scheduled ones go
    through the RQ scheduler. The delivery id doubles as the job id, so
    cancelling a notification cancels its job. Push permission counts as
    granted once the app has registered a device token.
    """

    def __init__(
        self,
        user_id: str,
        preference_store: PreferenceStore | None = None,
        queue_name: str = "default",
    ) -> None:
        """Initialize the adapter.

        Args:
            user_id: User whose notifications are delivered.
            preference_store: Source of the user's push token.
            queue_name: RQ queue that runs delivery jobs.
        """
        self.user_id = user_id
        self.preference_store = preference_store or PreferenceStore(user_id)
        self.queue = django_rq.get_queue(queue_name)
        self.scheduler = django_rq.get_scheduler(queue_name)

    def schedule(
        self,
        title: str,
        body: str,
        trigger_time: datetime | None,
        data: dict[str, Any],
    ) -> str:
        """Enqueue a delivery job and return its id.

        Raises:
            PermissionDeniedError: If the user has no registered push token.
            DeliveryFailedError: If the job could not be enqueued.
        """
        record_id = data.get("record_id", "")
        status = self.get_permission_status()
        if not status.granted:
            raise PermissionDeniedError(
                can_ask_again=status.can_ask_again, record_id=record_id
            )

        delivery_id = f"dlv_{uuid4().hex}"
        try:
            if trigger_time is None:
                self.queue.enqueue(DELIVERY_JOB, record_id, delivery_id, job_id=delivery_id)
            else:
                self.scheduler.enqueue_at(
                    trigger_time, DELIVERY_JOB, record_id, delivery_id, job_id=delivery_id
                )
        except RedisError as e:
            logger.error(
                "delivery_enqueue_failed",
                user_id=self.user_id,
                record_id=record_id,
                error=str(e),
            )
            raise DeliveryFailedError(record_id, f"Could not enqueue delivery: {e}") from e

        logger.info(
            "delivery_enqueued",
            user_id=self.user_id,
            record_id=record_id,
            delivery_id=delivery_id,
            trigger_time=trigger_time.isoformat() if trigger_time else None,
        )
        return delivery_id

    def cancel(self, delivery_id: str) -> None:
        """Cancel the delivery job; missing or finished jobs are ignored."""
        if delivery_id in self.scheduler:
            self.scheduler.cancel(delivery_id)
            logger.info(
                "delivery_cancelled", user_id=self.user_id, delivery_id=delivery_id
            )
            return

        try:
            job = Job.fetch(delivery_id, connection=self.queue.connection)
            job.cancel()
        except NoSuchJobError:
            logger.info("delivery_job_not_found", delivery_id=delivery_id)
            return
        except InvalidJobOperation:
            logger.info("delivery_job_already_finished", delivery_id=delivery_id)
            return

        logger.info("delivery_cancelled", user_id=self.user_id, delivery_id=delivery_id)

    def get_permission_status(self) -> PermissionStatus:
        """Granted when a push token is registered, undetermined otherwise."""
        if self.preference_store.get_push_token():
            return PermissionStatus(granted=True, can_ask_again=True, status="granted")
        return PermissionStatus(granted=False, can_ask_again=True, status="undetermined")

    def request_permission(self) -> PermissionRequestResult:
        """Report the current status; the prompt itself happens on the device."""
        status = self.get_permission_status()
        message = (
            "Push notifications are enabled"
            if status.granted
            else "Register a push token from the app to enable notifications"
        )
        return PermissionRequestResult(
            granted=status.granted, status=status.status, message=message
        )
