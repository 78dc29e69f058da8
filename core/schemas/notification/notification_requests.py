"""Request bodies for the notification endpoints."""

from typing import Any

from pydantic import AwareDatetime, Field

from core.enums import NotificationCategory, NotificationPriority, NotificationType
from core.schemas.base_schema_model import BaseSchemaModel
from core.schemas.notification.notification_candidate import NotificationCandidate


class ImmediateNotificationRequest(BaseSchemaModel):
    """Body of POST .../notifications/send."""

    title: str = Field(..., min_length=1, max_length=255)
    body: str = ""
    data: dict[str, Any] = Field(default_factory=dict)
    priority: NotificationPriority = NotificationPriority.NORMAL
    category: NotificationCategory = NotificationCategory.SYSTEM
    notification_type: NotificationType = NotificationType.SYSTEM


class ScheduleNotificationRequest(ImmediateNotificationRequest):
    """Body of POST .../notifications/schedule."""

    scheduled_for: AwareDatetime
    category: NotificationCategory = NotificationCategory.LEARNING
    notification_type: NotificationType = NotificationType.REMINDER
    expires_at: AwareDatetime | None = None


class IncomingNotificationsRequest(BaseSchemaModel):
    """Batch of server-side notifications the app just fetched."""

    notifications: list[NotificationCandidate] = Field(..., min_length=1, max_length=100)
