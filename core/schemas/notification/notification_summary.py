"""Schema for aggregate notification counts."""

from pydantic import Field

from core.schemas.base_schema_model import BaseSchemaModel
from core.schemas.notification.notification_detail import NotificationRecordDetail


class NotificationSummary(BaseSchemaModel):
    """Counts and histograms over a user's current notification records."""

    total_notifications: int = Field(..., ge=0)
    unread_count: int = Field(..., ge=0)
    today_count: int = Field(..., ge=0)
    week_count: int = Field(..., ge=0)
    by_category: dict[str, int] = Field(default_factory=dict)
    by_type: dict[str, int] = Field(default_factory=dict)
    recent_notifications: list[NotificationRecordDetail] = Field(default_factory=list)
