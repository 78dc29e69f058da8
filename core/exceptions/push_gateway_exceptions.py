"""Exceptions raised by the push gateway client."""


class PushGatewayError(Exception):
    """Base exception for push gateway errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
    ):
        """Initialize push gateway error.

        Args:
            message: Error message
            status_code: HTTP status code if applicable
        """
        self.status_code = status_code
        super().__init__(message)


class PushGatewayUnavailableError(PushGatewayError):
    """Push gateway is unreachable or returned a server error (5xx)."""

    def __init__(self, status_code: int | None = None):
        """Initialize push gateway unavailable error.

        Args:
            status_code: HTTP status code if applicable
        """
        super().__init__(
            message="Push gateway is currently unavailable",
            status_code=status_code,
        )


class DeviceNotRegisteredError(PushGatewayError):
    """The gateway rejected the push token; the app must register again."""

    def __init__(self, push_token: str):
        """Initialize device not registered error.

        Args:
            push_token: The rejected token
        """
        self.push_token = push_token
        super().__init__(message="Push token is no longer registered")
