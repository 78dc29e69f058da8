"""Schema for a notification record returned to the app."""

from datetime import datetime
from typing import Any

from core.schemas.base_schema_model import BaseSchemaModel


class NotificationRecordDetail(BaseSchemaModel):
    """Full view of a NotificationRecord."""

    record_id: str
    delivery_id: str | None = None
    user_id: str
    notification_type: str
    category: str
    priority: str
    title: str
    body: str
    data: dict[str, Any]
    is_scheduled: bool
    is_delivered: bool
    is_read: bool
    is_archived: bool
    is_cancelled: bool
    delivery_failed: bool
    action_taken: str | None = None
    scheduled_for: datetime | None = None
    delivered_at: datetime | None = None
    read_at: datetime | None = None
    expires_at: datetime | None = None
    created_at: datetime
    updated_at: datetime | None = None
