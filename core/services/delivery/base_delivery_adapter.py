"""Contract between the scheduling engine and the push transport."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from core.schemas.preferences import PermissionRequestResult, PermissionStatus


class DeliveryAdapter(ABC):
    """Receives finalized notifications and returns an opaque delivery id.

    Implementations report failures as ``PermissionDeniedError`` when the
    user has not granted push permission and ``DeliveryFailedError`` for any
    other hand-off failure. The engine is told about delivery and
    interaction through its ``handle_delivery_received`` and
    ``handle_delivery_response`` callbacks.
    """

    @abstractmethod
    def schedule(
        self,
        title: str,
        body: str,
        trigger_time: datetime | None,
        data: dict[str, Any],
    ) -> str:
        """Hand a notification off for delivery.

        Args:
            title: Notification title.
            body: Notification body.
            trigger_time: When to fire; None means immediately.
            data: Payload delivered with the notification.

        Returns:
            Identifier used by later ``cancel`` calls and callbacks.
        """

    @abstractmethod
    def cancel(self, delivery_id: str) -> None:
        """Cancel a scheduled notification. Unknown ids are ignored."""

    @abstractmethod
    def get_permission_status(self) -> PermissionStatus:
        """Report whether the user allows push notifications."""

    @abstractmethod
    def request_permission(self) -> PermissionRequestResult:
        """Ask the user for push permission."""
