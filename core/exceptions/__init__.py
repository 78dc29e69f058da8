"""Exception handling utilities for the notification service."""

from core.exceptions.handlers import custom_exception_handler
from core.exceptions.notification_exceptions import (
    DeliveryFailedError,
    DuplicateIdError,
    InvalidStateError,
    NotFoundError,
    NotificationServiceError,
    PermissionDeniedError,
    SnoozeLimitExceededError,
)
from core.exceptions.push_gateway_exceptions import (
    DeviceNotRegisteredError,
    PushGatewayError,
    PushGatewayUnavailableError,
)

__all__ = [
    "DeliveryFailedError",
    "DeviceNotRegisteredError",
    "DuplicateIdError",
    "InvalidStateError",
    "NotFoundError",
    "NotificationServiceError",
    "PermissionDeniedError",
    "PushGatewayError",
    "PushGatewayUnavailableError",
    "SnoozeLimitExceededError",
    "custom_exception_handler",
]
