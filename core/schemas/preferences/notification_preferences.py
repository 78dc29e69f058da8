"""Schema for a user's notification preferences.

Defaults mirror what a freshly installed app starts with: everything on
except marketing, quiet hours 22:00-08:00, at most 3 notifications an hour
and 10 a day.
"""

from datetime import datetime

from django.conf import settings

from pydantic import Field

from core.enums import NotificationCategory
from core.schemas.base_schema_model import BaseSchemaModel

HHMM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


def _default_timezone() -> str:
    return settings.DEFAULT_NOTIFICATION_TIMEZONE


class CategoryPreferences(BaseSchemaModel):
    """Per-category enablement."""

    learning: bool = True
    deadlines: bool = True
    social: bool = True
    achievements: bool = True
    system: bool = True
    marketing: bool = False
    emergency: bool = True

    def is_enabled(self, category: str) -> bool:
        """Return whether ``category`` is enabled; unknown categories are on."""
        return getattr(self, NotificationCategory(category).value, True)


class QuietHours(BaseSchemaModel):
    """Nightly window in which non-exempt notifications are deferred."""

    enabled: bool = True
    start_time: str = Field(default="22:00", pattern=HHMM_PATTERN)
    end_time: str = Field(default="08:00", pattern=HHMM_PATTERN)
    timezone: str = Field(default_factory=_default_timezone)
    exceptions: list[str] = Field(
        default_factory=lambda: [NotificationCategory.EMERGENCY.value],
        description="Category classes exempt from quiet-hour deferral",
    )


class FrequencyPreferences(BaseSchemaModel):
    """Rate caps and batching behaviour."""

    max_per_day: int = Field(default=10, ge=0)
    max_per_hour: int = Field(default=3, ge=0)
    batch_similar: bool = True
    respect_quiet_hours: bool = True


class ChannelPreferences(BaseSchemaModel):
    """Delivery channel enablement; only push and in_app are actionable."""

    push: bool = True
    email: bool = False
    in_app: bool = True
    sms: bool = False


class SmartNudgePreferences(BaseSchemaModel):
    """Per-nudge-type toggles."""

    enabled: bool = True
    learning_reminders: bool = True
    motivational_messages: bool = True
    streak_maintenance: bool = True
    performance_insights: bool = True
    adaptive_frequency: bool = True


class NotificationPreferences(BaseSchemaModel):
    """Complete notification configuration for one user."""

    user_id: str
    global_enabled: bool = True
    categories: CategoryPreferences = Field(default_factory=CategoryPreferences)
    quiet_hours: QuietHours = Field(default_factory=QuietHours)
    frequency: FrequencyPreferences = Field(default_factory=FrequencyPreferences)
    channels: ChannelPreferences = Field(default_factory=ChannelPreferences)
    smart_nudges: SmartNudgePreferences = Field(default_factory=SmartNudgePreferences)
    updated_at: datetime | None = None
