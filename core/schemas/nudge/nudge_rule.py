"""Schemas for the parts of a smart nudge rule."""

from datetime import datetime

from pydantic import Field, model_validator

from core.enums import NudgeFrequencyType, NudgeType
from core.schemas.base_schema_model import BaseSchemaModel
from core.schemas.preferences.notification_preferences import HHMM_PATTERN


class TimeRange(BaseSchemaModel):
    """Inclusive, non-wrapping HH:MM window."""

    start: str = Field(..., pattern=HHMM_PATTERN)
    end: str = Field(..., pattern=HHMM_PATTERN)


class NudgeTrigger(BaseSchemaModel):
    """Event the rule listens for and how long to wait before firing."""

    event: str = Field(..., min_length=1, max_length=64)
    delay: int = Field(default=0, ge=0, description="Minutes after the event")


class NudgeCondition(BaseSchemaModel):
    """Extra gating evaluated when the trigger event arrives."""

    time_of_day: TimeRange | None = None
    day_of_week: list[int] | None = Field(
        default=None, description="0-6 with Sunday = 0"
    )

    @model_validator(mode="after")
    def _check_days(self):
        if self.day_of_week is not None and any(
            day < 0 or day > 6 for day in self.day_of_week
        ):
            raise ValueError("day_of_week values must be between 0 and 6")
        return self


class NudgeContent(BaseSchemaModel):
    """Message template; ``{{name}}`` tokens are personalized on fire."""

    title: str = Field(..., min_length=1)
    body: str
    emoji: str | None = None
    action_text: str | None = None
    deep_link: str | None = None
    variables: dict[str, str] = Field(default_factory=dict)


class NudgeFrequency(BaseSchemaModel):
    """How often the rule may fire; ``interval`` is in hours for custom rules."""

    type: NudgeFrequencyType = NudgeFrequencyType.DAILY
    interval: float | None = Field(default=None, gt=0)
    max_per_day: int | None = Field(default=None, ge=1)


class SmartNudgeDetail(BaseSchemaModel):
    """A persisted rule as returned to callers."""

    nudge_id: str
    user_id: str
    nudge_type: NudgeType
    trigger: NudgeTrigger
    condition: NudgeCondition
    content: NudgeContent
    frequency: NudgeFrequency
    max_triggers: int | None = None
    is_active: bool
    trigger_count: int
    last_triggered: datetime | None = None
    effectiveness: float = Field(..., ge=0.0, le=1.0)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_model(cls, nudge) -> "SmartNudgeDetail":
        """Build from a SmartNudge row, parsing its JSON columns."""
        return cls(
            nudge_id=nudge.nudge_id,
            user_id=nudge.user_id,
            nudge_type=nudge.nudge_type,
            trigger=NudgeTrigger(
                event=nudge.trigger_event, delay=nudge.trigger_delay_minutes
            ),
            condition=NudgeCondition.model_validate(nudge.condition or {}),
            content=NudgeContent.model_validate(nudge.content),
            frequency=NudgeFrequency.model_validate(nudge.frequency or {}),
            max_triggers=nudge.max_triggers,
            is_active=nudge.is_active,
            trigger_count=nudge.trigger_count,
            last_triggered=nudge.last_triggered,
            effectiveness=nudge.effectiveness,
            created_at=nudge.created_at,
            updated_at=nudge.updated_at,
        )
