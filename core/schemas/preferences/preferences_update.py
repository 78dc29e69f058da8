"""Typed partial update for notification preferences.

Every field is optional; only the fields a caller sets are merged. Unknown
fields are rejected so that a misspelt key fails loudly instead of being a
silent no-op.
"""

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import ConfigDict, Field, field_validator

from core.schemas.base_schema_model import BaseSchemaModel
from core.schemas.preferences.notification_preferences import HHMM_PATTERN


class _PartialModel(BaseSchemaModel):
    model_config = ConfigDict(extra="forbid")


class CategoryPreferencesUpdate(_PartialModel):
    """Partial category toggles."""

    learning: bool | None = None
    deadlines: bool | None = None
    social: bool | None = None
    achievements: bool | None = None
    system: bool | None = None
    marketing: bool | None = None
    emergency: bool | None = None


class QuietHoursUpdate(_PartialModel):
    """Partial quiet-hours settings."""

    enabled: bool | None = None
    start_time: str | None = Field(default=None, pattern=HHMM_PATTERN)
    end_time: str | None = Field(default=None, pattern=HHMM_PATTERN)
    timezone: str | None = None
    exceptions: list[str] | None = None

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str | None) -> str | None:
        if value is None:
            return value
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {value}") from e
        return value


class FrequencyPreferencesUpdate(_PartialModel):
    """Partial rate caps."""

    max_per_day: int | None = Field(default=None, ge=0)
    max_per_hour: int | None = Field(default=None, ge=0)
    batch_similar: bool | None = None
    respect_quiet_hours: bool | None = None


class ChannelPreferencesUpdate(_PartialModel):
    """Partial channel toggles."""

    push: bool | None = None
    email: bool | None = None
    in_app: bool | None = None
    sms: bool | None = None


class SmartNudgePreferencesUpdate(_PartialModel):
    """Partial nudge toggles."""

    enabled: bool | None = None
    learning_reminders: bool | None = None
    motivational_messages: bool | None = None
    streak_maintenance: bool | None = None
    performance_insights: bool | None = None
    adaptive_frequency: bool | None = None


class PreferencesUpdate(_PartialModel):
    """Partial update deep-merged into the stored preferences."""

    global_enabled: bool | None = None
    categories: CategoryPreferencesUpdate | None = None
    quiet_hours: QuietHoursUpdate | None = None
    frequency: FrequencyPreferencesUpdate | None = None
    channels: ChannelPreferencesUpdate | None = None
    smart_nudges: SmartNudgePreferencesUpdate | None = None

    def changes(self) -> dict:
        """Return only the fields the caller explicitly set, nested."""
        return self.model_dump(exclude_unset=True, exclude_none=True)
