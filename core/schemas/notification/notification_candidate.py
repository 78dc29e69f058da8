"""Schema for a notification submitted to the scheduling policy."""

from typing import Any

from pydantic import AwareDatetime, Field

from core.enums import NotificationCategory, NotificationPriority, NotificationType
from core.schemas.base_schema_model import BaseSchemaModel


class NotificationCandidate(BaseSchemaModel):
    """A notification the engine has been asked to deliver.

    ``requested_time`` of None means "now"; the policy may move it forward
    (quiet hours) before the record is created.
    Reminder occurrences and nudges set ``batchable`` to False so that each
    one owns its record.
    """

    title: str = Field(..., min_length=1, max_length=255)
    body: str = Field(default="")
    category: NotificationCategory = NotificationCategory.SYSTEM
    notification_type: NotificationType = NotificationType.SYSTEM
    priority: NotificationPriority = NotificationPriority.NORMAL
    data: dict[str, Any] = Field(default_factory=dict)
    requested_time: AwareDatetime | None = None
    expires_at: AwareDatetime | None = None
    batchable: bool = Field(
        default=True, description="False keeps the candidate out of batch merges"
    )
