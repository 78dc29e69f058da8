"""Notification service: scheduling, delivery callbacks and record lifecycle.

This module provides the NotificationService class which runs candidates
through the scheduling policy, turns accepted ones into notification records,
hands them to the delivery adapter and applies delivery and interaction
callbacks. One service instance serves one user.
"""

from collections.abc import Callable, Iterable
from datetime import datetime, timedelta
from typing import Any

from django.db import transaction
from django.utils import timezone

import structlog

from core.constants import DAILY_WINDOW_SECONDS
from core.enums import (
    DecisionOutcome,
    NotificationCategory,
    NotificationPriority,
    NotificationType,
)
from core.exceptions import DeliveryFailedError, PermissionDeniedError
from core.models import NotificationRecord
from core.repositories import NotificationRecordStore, PreferenceStore
from core.schemas.notification import (
    NotificationCandidate,
    NotificationFilter,
    NotificationSummary,
    ScheduleResult,
)
from core.schemas.preferences import (
    NotificationPreferences,
    PermissionRequestResult,
    PermissionStatus,
    PreferencesUpdate,
)
from core.services.delivery import DeliveryAdapter, RQDeliveryAdapter
from core.services.scheduling_policy import SchedulingPolicy
from core.signals.notification_signals import notification_delivered

logger = structlog.get_logger(__name__)


class NotificationService:
    """Service deciding and tracking one user's notifications.

    Dependencies are passed in so that tests can supply doubles; anything
    omitted gets the production implementation.
    """

    def __init__(
        self,
        user_id: str,
        preference_store: PreferenceStore | None = None,
        record_store: NotificationRecordStore | None = None,
        adapter: DeliveryAdapter | None = None,
        policy: SchedulingPolicy | None = None,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        """Initialize notification service.

        Args:
            user_id: User the service acts for.
            preference_store: Store of the user's preferences.
            record_store: Store of the user's notification records.
            adapter: Delivery adapter accepted notifications are handed to.
            policy: Scheduling policy.
            clock: Source of the current time.
        """
        self.user_id = user_id
        self.clock = clock
        self.preferences = preference_store or PreferenceStore(user_id, clock)
        self.records = record_store or NotificationRecordStore(user_id, clock)
        self.adapter = adapter or RQDeliveryAdapter(user_id, self.preferences)
        self.policy = policy or SchedulingPolicy()

    # Scheduling

    def schedule_notification(self, candidate: NotificationCandidate) -> ScheduleResult:
        """Run a candidate through the policy and act on the decision.

        Suppression is returned, not raised. Accepted and deferred
        candidates become records that are then handed to the adapter;
        candidates that fire immediately are marked delivered once the
        adapter accepts them.

        Args:
            candidate: Notification to schedule.

        Returns:
            The outcome and, unless suppressed, the record id.

        Raises:
            PermissionDeniedError: If the adapter reports missing permission.
                The record is kept, flagged ``delivery_failed``.
            DeliveryFailedError: If the adapter failed for another reason.
        """
        now = self.clock()
        earliest = max(candidate.requested_time or now, now)

        with transaction.atomic():
            preferences = self.preferences.lock()
            recent = self.records.recent_activity(
                earliest - timedelta(seconds=DAILY_WINDOW_SECONDS)
            )
            decision = self.policy.evaluate(candidate, preferences, recent, now)

            if decision.is_suppressed:
                logger.info(
                    "notification_suppressed",
                    user_id=self.user_id,
                    category=candidate.category,
                    notification_type=candidate.notification_type,
                    reason=decision.reason,
                )
                return ScheduleResult(outcome=decision.outcome, reason=decision.reason)

            if decision.outcome == DecisionOutcome.BATCHED:
                self._merge_into(decision.batch_target_id, candidate)
                logger.info(
                    "notification_batched",
                    user_id=self.user_id,
                    category=candidate.category,
                    record_id=decision.batch_target_id,
                )
                return ScheduleResult(
                    record_id=decision.batch_target_id,
                    outcome=decision.outcome,
                    reason=decision.reason,
                    scheduled_for=decision.scheduled_for,
                )

            record = self.records.append(
                notification_type=candidate.notification_type,
                category=candidate.category,
                priority=candidate.priority,
                title=candidate.title,
                body=candidate.body,
                data=candidate.data,
                is_scheduled=True,
                scheduled_for=decision.scheduled_for,
                expires_at=candidate.expires_at,
                created_at=now,
            )

        logger.info(
            "notification_scheduled",
            user_id=self.user_id,
            record_id=record.record_id,
            outcome=decision.outcome,
            reason=decision.reason,
            scheduled_for=decision.scheduled_for.isoformat(),
        )

        self._hand_off(record, immediate=decision.scheduled_for <= now)

        return ScheduleResult(
            record_id=record.record_id,
            outcome=decision.outcome,
            reason=decision.reason,
            scheduled_for=decision.scheduled_for,
        )

    def send_immediate_notification(
        self,
        title: str,
        body: str,
        data: dict[str, Any] | None = None,
        priority: str = NotificationPriority.NORMAL.value,
        category: str = NotificationCategory.SYSTEM.value,
        notification_type: str = NotificationType.SYSTEM.value,
    ) -> ScheduleResult:
        """Schedule a notification for right now."""
        return self.schedule_notification(
            NotificationCandidate(
                title=title,
                body=body,
                data=data or {},
                priority=priority,
                category=category,
                notification_type=notification_type,
            )
        )

    def schedule_local_notification(
        self,
        title: str,
        body: str,
        scheduled_for: datetime,
        data: dict[str, Any] | None = None,
        category: str = NotificationCategory.LEARNING.value,
        notification_type: str = NotificationType.REMINDER.value,
        priority: str = NotificationPriority.NORMAL.value,
        expires_at: datetime | None = None,
    ) -> ScheduleResult:
        """Schedule a notification for a future time."""
        return self.schedule_notification(
            NotificationCandidate(
                title=title,
                body=body,
                data=data or {},
                category=category,
                notification_type=notification_type,
                priority=priority,
                requested_time=scheduled_for,
                expires_at=expires_at,
            )
        )

    def ingest_server_notifications(
        self, candidates: Iterable[NotificationCandidate]
    ) -> list[ScheduleResult]:
        """Schedule notifications the app fetched from the server.

        Every item goes through the policy on its own. A delivery failure
        on one item is logged and reported in its result instead of
        aborting the rest of the batch.

        Args:
            candidates: Server-side notifications.

        Returns:
            One result per candidate, in order.
        """
        results = []
        for candidate in candidates:
            try:
                results.append(self.schedule_notification(candidate))
            except (PermissionDeniedError, DeliveryFailedError) as e:
                logger.warning(
                    "server_notification_delivery_failed",
                    user_id=self.user_id,
                    record_id=e.record_id,
                    error=str(e),
                )
                results.append(
                    ScheduleResult(
                        record_id=e.record_id,
                        outcome=DecisionOutcome.ACCEPTED,
                        delivery_failed=True,
                    )
                )

        logger.info(
            "server_notifications_ingested",
            user_id=self.user_id,
            received=len(results),
            accepted=sum(1 for result in results if result.accepted),
        )
        return results

    def _merge_into(self, record_id: str, candidate: NotificationCandidate) -> None:
        target = self.records.get(record_id)
        data = dict(target.data or {})
        data["batched"] = [
            *data.get("batched", []),
            {"title": candidate.title, "body": candidate.body, "data": candidate.data},
        ]
        self.records.update(record_id, data=data)

    def _hand_off(self, record: NotificationRecord, immediate: bool) -> None:
        trigger_time = None if immediate else record.scheduled_for
        payload = {**record.data, "record_id": record.record_id}

        try:
            delivery_id = self.adapter.schedule(
                record.title, record.body, trigger_time, payload
            )
        except (PermissionDeniedError, DeliveryFailedError) as e:
            self.records.update(
                record.record_id, delivery_failed=True, delivery_error=str(e)
            )
            logger.warning(
                "notification_hand_off_failed",
                user_id=self.user_id,
                record_id=record.record_id,
                error_code=e.error_code,
                error=str(e),
            )
            e.record_id = record.record_id
            raise

        self.records.update(record.record_id, delivery_id=delivery_id)
        if immediate:
            self.confirm_delivery(record.record_id)

    # Delivery and interaction callbacks

    def confirm_delivery(self, record_id: str) -> NotificationRecord:
        """Mark a record delivered.

        Already delivered and cancelled records are left alone, and an
        expired record is dropped instead of delivered.

        Returns:
            The record in its resulting state.
        """
        record = self.records.get(record_id)
        if record.is_delivered or record.is_cancelled:
            return record
        if record.is_expired(self.clock()):
            logger.info(
                "expired_notification_dropped",
                user_id=self.user_id,
                record_id=record_id,
            )
            return record

        record = self.records.update(record_id, is_delivered=True)
        logger.info(
            "notification_delivered",
            user_id=self.user_id,
            record_id=record_id,
            delivery_id=record.delivery_id,
        )
        notification_delivered.send(sender=NotificationRecord, record=record)
        return record

    def handle_delivery_received(self, delivery_id: str) -> NotificationRecord:
        """Callback: the notification handed off as ``delivery_id`` arrived.

        Raises:
            NotFoundError: If no record carries ``delivery_id``.
        """
        record = self.records.get_by_delivery_id(delivery_id)
        return self.confirm_delivery(record.record_id)

    def handle_delivery_response(
        self, delivery_id: str, action_id: str = "default"
    ) -> NotificationRecord:
        """Callback: the user interacted with a notification.

        An interaction implies delivery, so a record whose delivery
        callback has not arrived yet is marked delivered first.

        Raises:
            NotFoundError: If no record carries ``delivery_id``.
        """
        record = self.records.get_by_delivery_id(delivery_id)
        record = self.confirm_delivery(record.record_id)
        if not record.is_delivered:
            logger.warning(
                "response_for_undelivered_notification",
                user_id=self.user_id,
                record_id=record.record_id,
            )
            return record

        fields: dict[str, Any] = {"action_taken": action_id}
        if not record.is_read:
            fields.update(is_read=True, read_at=self.clock())
        record = self.records.update(record.record_id, **fields)
        logger.info(
            "notification_response_received",
            user_id=self.user_id,
            record_id=record.record_id,
            action_id=action_id,
        )
        return record

    # Record lifecycle

    def cancel_notification(self, record_id: str) -> NotificationRecord:
        """Cancel a pending notification.

        Cancelling twice, or cancelling a delivered record, is a no-op.

        Raises:
            NotFoundError: If the record does not exist.
        """
        record = self.records.get(record_id)
        if record.is_delivered or record.is_cancelled:
            logger.info(
                "notification_cancel_skipped",
                user_id=self.user_id,
                record_id=record_id,
                is_delivered=record.is_delivered,
                is_cancelled=record.is_cancelled,
            )
            return record

        record = self.records.update(
            record_id, is_cancelled=True, cancelled_at=self.clock()
        )
        if record.delivery_id:
            self.adapter.cancel(record.delivery_id)

        logger.info("notification_cancelled", user_id=self.user_id, record_id=record_id)
        return record

    def cancel_all_notifications(self) -> int:
        """Cancel every pending notification.

        Returns:
            Number of records cancelled.
        """
        pending = self.records.pending()
        for record in pending:
            self.cancel_notification(record.record_id)
        logger.info(
            "all_notifications_cancelled", user_id=self.user_id, count=len(pending)
        )
        return len(pending)

    def mark_as_read(self, record_id: str) -> NotificationRecord:
        """Mark a delivered notification as read.

        Raises:
            NotFoundError: If the record does not exist.
            InvalidStateError: If the record has not been delivered.
        """
        record = self.records.get(record_id)
        if record.is_read:
            return record
        record = self.records.update(record_id, is_read=True, read_at=self.clock())
        logger.info("notification_read", user_id=self.user_id, record_id=record_id)
        return record

    def mark_all_as_read(self) -> int:
        """Mark every delivered notification as read."""
        return self.records.mark_all_read()

    def archive_notification(self, record_id: str) -> NotificationRecord:
        """Hide a notification from the user's list."""
        record = self.records.update(record_id, is_archived=True)
        logger.info("notification_archived", user_id=self.user_id, record_id=record_id)
        return record

    def delete_notification(self, record_id: str) -> None:
        """Cancel (if still pending) and permanently remove a notification."""
        self.cancel_notification(record_id)
        self.records.delete(record_id)

    # Queries

    def get_notification(self, record_id: str) -> NotificationRecord:
        """Return one of the user's notifications."""
        return self.records.get(record_id)

    def get_user_notifications(
        self, filters: NotificationFilter | None = None
    ) -> list[NotificationRecord]:
        """Return the user's notifications, newest first."""
        return self.records.query(filters)

    def get_notification_summary(self) -> NotificationSummary:
        """Aggregate counts, with "today" in the user's timezone."""
        preferences = self.preferences.get()
        return self.records.summarize(self.clock(), preferences.quiet_hours.timezone)

    def get_badge_count(self) -> int:
        """Return the app icon badge count (the unread count)."""
        return self.records.unread_count()

    # Preferences and permissions

    def get_preferences(self) -> NotificationPreferences:
        """Return the user's preferences."""
        return self.preferences.get()

    def update_preferences(self, update: PreferencesUpdate) -> NotificationPreferences:
        """Merge a partial update into the user's preferences."""
        return self.preferences.update(update)

    def register_push_token(self, push_token: str | None) -> PermissionStatus:
        """Store the device push token and return the resulting permission."""
        self.preferences.set_push_token(push_token)
        return self.adapter.get_permission_status()

    def get_permission_status(self) -> PermissionStatus:
        """Return the adapter's permission status."""
        return self.adapter.get_permission_status()

    def request_permissions(self) -> PermissionRequestResult:
        """Ask the adapter for push permission."""
        result = self.adapter.request_permission()
        logger.info(
            "notification_permission_requested",
            user_id=self.user_id,
            granted=result.granted,
            status=result.status,
        )
        return result


def build_notification_service(
    user_id: str, clock: Callable[[], datetime] | None = None
) -> NotificationService:
    """Build a service with production stores and the RQ delivery adapter."""
    clock = clock or timezone.now
    preferences = PreferenceStore(user_id, clock)
    return NotificationService(
        user_id,
        preference_store=preferences,
        record_store=NotificationRecordStore(user_id, clock),
        adapter=RQDeliveryAdapter(user_id, preferences),
        clock=clock,
    )


def service_for_delivery(delivery_id: str) -> NotificationService:
    """Build the service owning the record handed off as ``delivery_id``.

    Raises:
        NotFoundError: If no record carries ``delivery_id``.
    """
    record = NotificationRecordStore.find_by_delivery_id(delivery_id)
    return build_notification_service(record.user_id)

