"""Pydantic schemas for the notification service."""

from core.schemas.base_schema_model import BaseSchemaModel

__all__ = ["BaseSchemaModel"]
