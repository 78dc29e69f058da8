"""Callback bodies reported by the delivery transport."""

from pydantic import Field

from core.schemas.base_schema_model import BaseSchemaModel


class DeliveryReceivedRequest(BaseSchemaModel):
    """A scheduled notification reached the device."""

    delivery_id: str = Field(..., min_length=1)


class DeliveryResponseRequest(BaseSchemaModel):
    """The user interacted with a delivered notification."""

    delivery_id: str = Field(..., min_length=1)
    action_id: str = Field(default="default", max_length=64)
