"""Schemas for push permission and device token registration."""

from pydantic import Field

from core.schemas.base_schema_model import BaseSchemaModel


class PermissionStatus(BaseSchemaModel):
    """Permission state reported by the delivery adapter."""

    granted: bool
    can_ask_again: bool
    status: str = Field(..., description="granted, denied or undetermined")


class PermissionRequestResult(BaseSchemaModel):
    """Outcome of asking the user for permission."""

    granted: bool
    status: str
    message: str = ""


class PushTokenRequest(BaseSchemaModel):
    """Device push token sent by the app after registering with the platform."""

    push_token: str | None = Field(default=None, max_length=255)
