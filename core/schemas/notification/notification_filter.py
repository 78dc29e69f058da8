"""Query filter for the notification record store."""

from pydantic import AwareDatetime

from core.enums import NotificationCategory, NotificationType
from core.schemas.base_schema_model import BaseSchemaModel


class NotificationFilter(BaseSchemaModel):
    """Optional filters; unset fields do not constrain the query."""

    category: NotificationCategory | None = None
    notification_type: NotificationType | None = None
    since: AwareDatetime | None = None
    is_read: bool | None = None
    include_archived: bool = False
