"""NotificationRecord model for scheduled and delivered notifications.

A record is created by the scheduling engine when a candidate is accepted and
is then mutated only by delivery and interaction callbacks, cancellation and
archiving. Suppressed candidates never become records.
"""

import secrets
import time
from typing import ClassVar

from django.db import models

from core.enums import NotificationCategory, NotificationPriority, NotificationType


def generate_record_id(prefix: str = "notif") -> str:
    """Return a collision-resistant id: epoch milliseconds plus a random suffix."""
    return f"{prefix}_{int(time.time() * 1000)}_{secrets.token_hex(4)}"


class NotificationRecord(models.Model):
    """A single notification instance and its lifecycle flags.

    Attributes:
        record_id: Engine-assigned identifier (timestamp + random suffix).
        delivery_id: Opaque identifier returned by the delivery adapter.
        user_id: Owner of the notification.
        notification_type: What kind of event the notification represents.
        category: Preference category used by the scheduling policy.
        priority: urgent, high, normal or low.
        title: Notification title.
        body: Notification body.
        data: Opaque payload (deep links, nudge/reminder ids, batched items).
        is_scheduled: Accepted and handed (or to be handed) to the adapter.
        is_delivered: Delivery confirmed; never reverts.
        is_read: User interacted with the notification; implies delivered.
        is_archived: Hidden from the user's list.
        is_cancelled: Cancelled before delivery.
        delivery_failed: Hand-off to the adapter failed.
        delivery_error: Error reported by the adapter.
        action_taken: Last action id reported by the response callback.
        scheduled_for: When the adapter should fire the notification.
        delivered_at: When delivery was confirmed; immutable once set.
        read_at: When the user read the notification.
        expires_at: After this moment an undelivered record is dropped.
        cancelled_at: When the record was cancelled.
        created_at: When the record was created.
        updated_at: When the record was last updated.
    """

    record_id = models.CharField(
        primary_key=True,
        max_length=64,
        default=generate_record_id,
        editable=False,
        help_text="Engine-assigned notification identifier",
    )
    delivery_id = models.CharField(
        max_length=128,
        unique=True,
        null=True,
        blank=True,
        help_text="Identifier returned by the delivery adapter",
    )
    user_id = models.CharField(
        max_length=64,
        db_index=True,
        help_text="User receiving the notification",
    )
    notification_type = models.CharField(
        max_length=32,
        choices=[(t.value, t.value) for t in NotificationType],
        default=NotificationType.SYSTEM.value,
    )
    category = models.CharField(
        max_length=32,
        choices=[(c.value, c.value) for c in NotificationCategory],
        default=NotificationCategory.SYSTEM.value,
    )
    priority = models.CharField(
        max_length=16,
        choices=[(p.value, p.value) for p in NotificationPriority],
        default=NotificationPriority.NORMAL.value,
    )
    title = models.CharField(max_length=255)
    body = models.TextField(blank=True, default="")
    data = models.JSONField(default=dict, blank=True)
    is_scheduled = models.BooleanField(default=False)
    is_delivered = models.BooleanField(default=False)
    is_read = models.BooleanField(default=False)
    is_archived = models.BooleanField(default=False)
    is_cancelled = models.BooleanField(default=False)
    delivery_failed = models.BooleanField(default=False)
    delivery_error = models.TextField(null=True, blank=True)
    action_taken = models.CharField(max_length=64, null=True, blank=True)
    scheduled_for = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    read_at = models.DateTimeField(null=True, blank=True)
    expires_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Django model metadata."""

        db_table = "notification_records"
        ordering: ClassVar[list[str]] = ["-created_at", "-record_id"]
        indexes: ClassVar[list] = [
            models.Index(fields=["user_id", "-created_at"]),
            models.Index(fields=["user_id", "is_read", "-created_at"]),
            models.Index(fields=["user_id", "category", "scheduled_for"]),
        ]

    def __str__(self) -> str:
        """Return string representation of the record."""
        return f"{self.notification_type} ({self.category}) for user {self.user_id}"

    def __repr__(self) -> str:
        """Return detailed representation of the record."""
        return (
            f"<NotificationRecord(id={self.record_id}, "
            f"category={self.category}, "
            f"user={self.user_id}, "
            f"delivered={self.is_delivered}, "
            f"is_read={self.is_read})>"
        )

    @property
    def is_pending(self) -> bool:
        """Scheduled, not yet delivered, and still able to fire."""
        return (
            self.is_scheduled
            and not self.is_delivered
            and not self.is_cancelled
            and not self.delivery_failed
        )

    @property
    def effective_time(self):
        """Moment the record counts against frequency caps."""
        return self.delivered_at or self.scheduled_for or self.created_at

    def is_expired(self, now) -> bool:
        """Check whether the record expired before it could be delivered."""
        return (
            not self.is_delivered
            and self.expires_at is not None
            and self.expires_at <= now
        )
