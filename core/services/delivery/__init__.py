"""Delivery adapters handing accepted notifications to the push transport."""

from core.services.delivery.base_delivery_adapter import DeliveryAdapter
from core.services.delivery.push_gateway_client import PushGatewayClient
from core.services.delivery.rq_delivery_adapter import RQDeliveryAdapter

__all__ = ["DeliveryAdapter", "PushGatewayClient", "RQDeliveryAdapter"]
