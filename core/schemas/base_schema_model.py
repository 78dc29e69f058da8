"""Base pydantic model for centralized configuration of schema definitions."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseSchemaModel(BaseModel):
    """Base pydantic model for centralized configuration of schema definitions.

    The mobile client speaks camelCase JSON while Python code uses snake_case
    attributes; ORM rows can be loaded directly through ``from_attributes``.
    """

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        extra="ignore",
        str_strip_whitespace=True,
    )

    def to_response(self) -> dict:
        """Serialize for an API response (camelCase keys, JSON-safe values)."""
        return self.model_dump(mode="json", by_alias=True)
