"""Notification schemas."""

from core.schemas.notification.delivery_callback import (
    DeliveryReceivedRequest,
    DeliveryResponseRequest,
)
from core.schemas.notification.notification_candidate import NotificationCandidate
from core.schemas.notification.notification_detail import NotificationRecordDetail
from core.schemas.notification.notification_filter import NotificationFilter
from core.schemas.notification.notification_requests import (
    ImmediateNotificationRequest,
    IncomingNotificationsRequest,
    ScheduleNotificationRequest,
)
from core.schemas.notification.notification_summary import NotificationSummary
from core.schemas.notification.scheduling_decision import (
    ScheduleResult,
    SchedulingDecision,
)

__all__ = [
    "DeliveryReceivedRequest",
    "DeliveryResponseRequest",
    "ImmediateNotificationRequest",
    "IncomingNotificationsRequest",
    "NotificationCandidate",
    "NotificationFilter",
    "NotificationRecordDetail",
    "NotificationSummary",
    "ScheduleNotificationRequest",
    "ScheduleResult",
    "SchedulingDecision",
]
