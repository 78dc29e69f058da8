"""Custom exceptions for notification scheduling and delivery."""


class NotificationServiceError(Exception):
    """Base exception for notification service errors."""

    status_code = 500
    error_code = "notification_service_error"

    def __init__(self, message: str, detail: str | None = None):
        """Initialize notification service error.

        Args:
            message: Error message
            detail: Additional details about the error
        """
        self.detail = detail
        super().__init__(message)

    def extra_fields(self) -> dict:
        """Fields added to the error body next to the standard envelope."""
        return {"detail": self.detail} if self.detail else {}


class PermissionDeniedError(NotificationServiceError):
    """The delivery adapter reports that push permission is not granted.

    Recoverable by prompting the user; ``can_ask_again`` tells the UI whether
    to prompt in-app or send the user to the device settings.
    """

    status_code = 403
    error_code = "permission_denied"

    def __init__(
        self,
        message: str = "Notification permission has not been granted",
        can_ask_again: bool = False,
        record_id: str | None = None,
    ):
        """Initialize permission denied error.

        Args:
            message: Error message
            can_ask_again: Whether the permission prompt can be shown again
            record_id: Record left flagged as delivery_failed, if any
        """
        self.can_ask_again = can_ask_again
        self.record_id = record_id
        super().__init__(message)

    def extra_fields(self) -> dict:
        return {
            **super().extra_fields(),
            "can_ask_again": self.can_ask_again,
            "record_id": self.record_id,
        }


class DeliveryFailedError(NotificationServiceError):
    """Transient delivery adapter failure.

    The notification record stays in the store flagged ``delivery_failed``.
    """

    status_code = 502
    error_code = "delivery_failed"

    def __init__(self, record_id: str, message: str | None = None):
        """Initialize delivery failed error.

        Args:
            record_id: ID of the record that could not be handed off
            message: Optional custom error message
        """
        self.record_id = record_id
        super().__init__(
            message or f"Delivery of notification {record_id} failed",
        )

    def extra_fields(self) -> dict:
        return {**super().extra_fields(), "record_id": self.record_id}


class DuplicateIdError(NotificationServiceError):
    """A record with the same ID already exists (409)."""

    status_code = 409
    error_code = "duplicate_id"

    def __init__(self, record_id: str):
        """Initialize duplicate ID error.

        Args:
            record_id: The conflicting ID
        """
        self.record_id = record_id
        super().__init__(f"Record with ID {record_id} already exists")


class NotFoundError(NotificationServiceError):
    """Requested record does not exist (404)."""

    status_code = 404
    error_code = "not_found"

    def __init__(self, resource: str, resource_id: str):
        """Initialize not found error.

        Args:
            resource: Kind of resource that was looked up
            resource_id: ID that was not found
        """
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} with ID {resource_id} not found")


class InvalidStateError(NotificationServiceError):
    """Update would break a record lifecycle invariant (409)."""

    status_code = 409
    error_code = "invalid_state"


class SnoozeLimitExceededError(NotificationServiceError):
    """Reminder has already been snoozed the maximum number of times (409)."""

    status_code = 409
    error_code = "snooze_limit_exceeded"

    def __init__(self, reminder_id: str, max_snoozes: int):
        """Initialize snooze limit error.

        Args:
            reminder_id: ID of the reminder
            max_snoozes: Configured snooze limit
        """
        self.reminder_id = reminder_id
        self.max_snoozes = max_snoozes
        super().__init__(
            f"Reminder {reminder_id} cannot be snoozed more than {max_snoozes} times"
        )
