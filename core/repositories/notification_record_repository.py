"""Repository for notification records."""

from collections.abc import Callable
from datetime import datetime, time, timedelta
from typing import Any

from django.db.models import Count, Q, QuerySet
from django.utils import timezone

import structlog

from core.constants import SUMMARY_RECENT_LIMIT
from core.exceptions import DuplicateIdError, InvalidStateError, NotFoundError
from core.models import NotificationRecord, generate_record_id
from core.schemas.notification import (
    NotificationFilter,
    NotificationRecordDetail,
    NotificationSummary,
)
from core.services.time_windows import get_zone

logger = structlog.get_logger(__name__)

_UPDATABLE_FIELDS = frozenset(
    {
        "delivery_id",
        "title",
        "body",
        "data",
        "is_scheduled",
        "is_delivered",
        "is_read",
        "is_archived",
        "is_cancelled",
        "delivery_failed",
        "delivery_error",
        "action_taken",
        "scheduled_for",
        "delivered_at",
        "read_at",
        "expires_at",
        "cancelled_at",
        "created_at",
    }
)


def local_midnight(now: datetime, tz_name: str) -> datetime:
    """Return the most recent midnight in ``tz_name`` as an aware datetime."""
    tz = get_zone(tz_name)
    return datetime.combine(now.astimezone(tz).date(), time.min, tzinfo=tz)


class NotificationRecordStore:
    """Collection of one user's notification records.

    The store enforces the record lifecycle: a record is never read before
    it is delivered, delivery never reverts, and ``delivered_at`` and
    ``created_at`` cannot be changed once set.
    """

    def __init__(
        self, user_id: str, clock: Callable[[], datetime] = timezone.now
    ) -> None:
        """Initialize the store.

        Args:
            user_id: Owner of the records.
            clock: Source of the current time.
        """
        self.user_id = user_id
        self.clock = clock

    def _queryset(self) -> QuerySet[NotificationRecord]:
        return NotificationRecord.objects.filter(user_id=self.user_id)

    def append(self, record_id: str | None = None, **fields: Any) -> NotificationRecord:
        """Create a record.

        Args:
            record_id: Explicit identifier; generated when omitted.
            **fields: Model field values.

        Returns:
            The created record.

        Raises:
            DuplicateIdError: If a record with ``record_id`` already exists.
        """
        record_id = record_id or generate_record_id()
        if NotificationRecord.objects.filter(record_id=record_id).exists():
            raise DuplicateIdError(record_id)

        fields.setdefault("created_at", self.clock())
        return NotificationRecord.objects.create(
            record_id=record_id, user_id=self.user_id, **fields
        )

    def get(self, record_id: str) -> NotificationRecord:
        """Return the record with ``record_id``.

        Raises:
            NotFoundError: If the user has no such record.
        """
        try:
            return self._queryset().get(record_id=record_id)
        except NotificationRecord.DoesNotExist as e:
            raise NotFoundError("Notification", record_id) from e

    def get_by_delivery_id(self, delivery_id: str) -> NotificationRecord:
        """Return the user's record handed to the adapter as ``delivery_id``.

        Raises:
            NotFoundError: If the user has no such record.
        """
        try:
            return self._queryset().get(delivery_id=delivery_id)
        except NotificationRecord.DoesNotExist as e:
            raise NotFoundError("Delivery", delivery_id) from e

    @staticmethod
    def find_by_delivery_id(delivery_id: str) -> NotificationRecord:
        """Resolve a delivery id to its record regardless of owner.

        Delivery callbacks only carry the adapter's identifier, so they use
        this lookup to find out which user the record belongs to.

        Raises:
            NotFoundError: If no record carries ``delivery_id``.
        """
        try:
            return NotificationRecord.objects.get(delivery_id=delivery_id)
        except NotificationRecord.DoesNotExist as e:
            raise NotFoundError("Delivery", delivery_id) from e

    def query(self, filters: NotificationFilter | None = None) -> list[NotificationRecord]:
        """Return records matching ``filters``, newest first.

        Args:
            filters: Optional filter; archived records are excluded unless
                ``include_archived`` is set.

        Returns:
            A concrete list ordered by creation time then id, descending.
        """
        filters = filters or NotificationFilter()
        queryset = self._queryset()

        if not filters.include_archived:
            queryset = queryset.filter(is_archived=False)
        if filters.category:
            queryset = queryset.filter(category=filters.category)
        if filters.notification_type:
            queryset = queryset.filter(notification_type=filters.notification_type)
        if filters.since:
            queryset = queryset.filter(created_at__gte=filters.since)
        if filters.is_read is not None:
            queryset = queryset.filter(is_read=filters.is_read)

        return list(queryset.order_by("-created_at", "-record_id"))

    def update(self, record_id: str, **fields: Any) -> NotificationRecord:
        """Apply ``fields`` to a record, enforcing lifecycle invariants.

        Setting ``is_delivered`` without ``delivered_at`` stamps the current
        time.

        Args:
            record_id: Record to update.
            **fields: Field values to set.

        Returns:
            The updated record.

        Raises:
            NotFoundError: If the record does not exist.
            InvalidStateError: If the update would break an invariant.
        """
        unknown = set(fields) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update notification fields: {sorted(unknown)}")

        record = self.get(record_id)

        if "created_at" in fields and fields["created_at"] is None:
            raise InvalidStateError("created_at cannot be unset")
        if record.is_delivered and fields.get("is_delivered") is False:
            raise InvalidStateError(f"Notification {record_id} is already delivered")
        if (
            record.delivered_at is not None
            and "delivered_at" in fields
            and fields["delivered_at"] != record.delivered_at
        ):
            raise InvalidStateError(
                f"delivered_at of notification {record_id} cannot change"
            )
        if fields.get("is_read") and not (
            record.is_delivered or fields.get("is_delivered")
        ):
            raise InvalidStateError(
                f"Notification {record_id} cannot be read before it is delivered"
            )

        if fields.get("is_delivered") and record.delivered_at is None:
            fields.setdefault("delivered_at", self.clock())

        for name, value in fields.items():
            setattr(record, name, value)
        record.save(update_fields=[*fields, "updated_at"])
        return record

    def delete(self, record_id: str) -> None:
        """Remove a record permanently.

        Raises:
            NotFoundError: If the record does not exist.
        """
        self.get(record_id).delete()
        logger.info("notification_deleted", user_id=self.user_id, record_id=record_id)

    def recent_activity(self, since: datetime) -> list[NotificationRecord]:
        """Return records that count against frequency caps from ``since`` on.

        A record counts when it was delivered or is still pending, at its
        effective time (delivered, else scheduled, else created).
        """
        live = Q(is_delivered=True) | Q(
            is_scheduled=True, is_cancelled=False, delivery_failed=False
        )
        in_window = (
            Q(delivered_at__gte=since)
            | Q(delivered_at__isnull=True, scheduled_for__gte=since)
            | Q(
                delivered_at__isnull=True,
                scheduled_for__isnull=True,
                created_at__gte=since,
            )
        )
        return list(self._queryset().filter(live & in_window))

    def pending(self) -> list[NotificationRecord]:
        """Return scheduled records that can still fire."""
        return list(
            self._queryset().filter(
                is_scheduled=True,
                is_delivered=False,
                is_cancelled=False,
                delivery_failed=False,
            )
        )

    def _unread(self) -> QuerySet[NotificationRecord]:
        return self._queryset().filter(
            is_archived=False, is_cancelled=False, is_read=False
        )

    def unread_count(self) -> int:
        """Count records the user has not read yet."""
        return self._unread().count()

    def count_nudge_records(self, nudge_id: str, since: datetime) -> int:
        """Count records produced by a nudge rule since ``since``."""
        return (
            self._queryset()
            .filter(data__nudge_id=nudge_id, created_at__gte=since)
            .count()
        )

    def mark_all_read(self) -> int:
        """Mark every delivered, unread record as read.

        Undelivered records stay unread so that read always implies
        delivered.

        Returns:
            Number of records updated.
        """
        now = self.clock()
        updated = self._unread().filter(is_delivered=True).update(
            is_read=True, read_at=now, updated_at=now
        )
        logger.info("notifications_marked_read", user_id=self.user_id, count=updated)
        return updated

    def summarize(self, now: datetime, tz_name: str) -> NotificationSummary:
        """Aggregate counts over the user's non-archived records.

        Args:
            now: Reference time.
            tz_name: IANA timezone deciding where "today" starts.

        Returns:
            Totals, unread/today/week counts, histograms and recent records.
        """
        queryset = self._queryset().filter(is_archived=False)
        today_start = local_midnight(now, tz_name)
        week_start = today_start - timedelta(days=7)

        by_category = {
            row["category"]: row["count"]
            for row in queryset.order_by()
            .values("category")
            .annotate(count=Count("record_id"))
        }
        by_type = {
            row["notification_type"]: row["count"]
            for row in queryset.order_by()
            .values("notification_type")
            .annotate(count=Count("record_id"))
        }
        recent = queryset.order_by("-created_at", "-record_id")[:SUMMARY_RECENT_LIMIT]

        return NotificationSummary(
            total_notifications=queryset.count(),
            unread_count=self.unread_count(),
            today_count=queryset.filter(created_at__gte=today_start).count(),
            week_count=queryset.filter(created_at__gte=week_start).count(),
            by_category=by_category,
            by_type=by_type,
            recent_notifications=[
                NotificationRecordDetail.model_validate(record) for record in recent
            ],
        )
