"""Request bodies for the smart nudge endpoints."""

from typing import Any

from pydantic import Field

from core.enums import NudgeType
from core.schemas.base_schema_model import BaseSchemaModel
from core.schemas.nudge.nudge_rule import (
    NudgeCondition,
    NudgeContent,
    NudgeFrequency,
    NudgeTrigger,
)


class NudgeCreateRequest(BaseSchemaModel):
    """A rule configured by the user or an admin."""

    nudge_type: NudgeType
    trigger: NudgeTrigger
    condition: NudgeCondition = Field(default_factory=NudgeCondition)
    content: NudgeContent
    frequency: NudgeFrequency = Field(default_factory=NudgeFrequency)
    max_triggers: int | None = Field(default=None, ge=1)
    is_active: bool = True


class NudgeTriggerRequest(BaseSchemaModel):
    """Behavioural event emitted by the app."""

    event: str = Field(..., min_length=1, max_length=64)
    context: dict[str, Any] = Field(default_factory=dict)


class NudgeEffectivenessRequest(BaseSchemaModel):
    """Feedback on whether the user acted on a nudge."""

    was_effective: bool


class ActivityRequest(BaseSchemaModel):
    """Records that the user was active without evaluating any rule."""

    event: str = Field(default="app_open", min_length=1, max_length=64)
