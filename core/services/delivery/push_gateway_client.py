"""HTTP client for the Expo push notification API."""

from typing import Any

from django.conf import settings

import requests
import structlog

from core.exceptions import (
    DeviceNotRegisteredError,
    PushGatewayError,
    PushGatewayUnavailableError,
)

logger = structlog.get_logger(__name__)

SERVICE_NAME = "push-gateway"


class PushGatewayClient:
    """Client posting push messages to the gateway."""

    def __init__(
        self,
        url: str | None = None,
        access_token: str | None = None,
        timeout: int = 10,
    ):
        """Initialize the push gateway client.

        Args:
            url: Send endpoint; defaults to ``PUSH_GATEWAY_URL``.
            access_token: Optional bearer token; defaults to
                ``PUSH_GATEWAY_ACCESS_TOKEN``.
            timeout: Request timeout in seconds.
        """
        self.url = url or settings.PUSH_GATEWAY_URL
        self.access_token = access_token or settings.PUSH_GATEWAY_ACCESS_TOKEN
        self.timeout = timeout

    def _get_headers(self) -> dict[str, str]:
        """Get common HTTP headers for requests.

        Returns:
            Dictionary of headers
        """
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        return headers

    def send(
        self,
        push_token: str,
        title: str,
        body: str,
        data: dict[str, Any] | None = None,
        priority: str = "default",
    ) -> str | None:
        """Send one push message.

        Args:
            push_token: Device token registered by the app.
            title: Notification title.
            body: Notification body.
            data: Payload delivered to the app with the notification.
            priority: Gateway priority (``default``, ``normal`` or ``high``).

        Returns:
            The gateway's ticket id, if it returned one.

        Raises:
            DeviceNotRegisteredError: If the gateway rejected the token.
            PushGatewayError: For other rejected messages and client errors.
            PushGatewayUnavailableError: For server errors and timeouts.
        """
        message = {
            "to": push_token,
            "title": title,
            "body": body,
            "data": data or {},
            "sound": "default",
            "priority": priority,
        }

        logger.info(
            "push_gateway_request",
            service=SERVICE_NAME,
            url=self.url,
            push_token=push_token,
            priority=priority,
        )

        try:
            response = requests.post(
                self.url,
                json=message,
                headers=self._get_headers(),
                timeout=self.timeout,
            )
        except (requests.Timeout, requests.ConnectionError) as e:
            logger.error(
                "push_gateway_unreachable",
                service=SERVICE_NAME,
                url=self.url,
                error=str(e),
            )
            raise PushGatewayUnavailableError() from e

        logger.info(
            "push_gateway_response",
            service=SERVICE_NAME,
            status_code=response.status_code,
        )

        if response.status_code >= 500:
            logger.error(
                "push_gateway_server_error",
                service=SERVICE_NAME,
                status_code=response.status_code,
                response_text=response.text,
            )
            raise PushGatewayUnavailableError(status_code=response.status_code)

        if response.status_code >= 400:
            logger.error(
                "push_gateway_client_error",
                service=SERVICE_NAME,
                status_code=response.status_code,
                response_text=response.text,
            )
            raise PushGatewayError(
                message=f"{SERVICE_NAME} returned {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        ticket = response.json().get("data") or {}
        if ticket.get("status") == "error":
            details = ticket.get("details") or {}
            if details.get("error") == "DeviceNotRegistered":
                raise DeviceNotRegisteredError(push_token)
            raise PushGatewayError(
                message=ticket.get("message", "Push message rejected"),
                status_code=response.status_code,
            )

        return ticket.get("id")
