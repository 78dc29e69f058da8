"""Notification preference schemas."""

from core.schemas.preferences.notification_preferences import (
    CategoryPreferences,
    ChannelPreferences,
    FrequencyPreferences,
    NotificationPreferences,
    QuietHours,
    SmartNudgePreferences,
)
from core.schemas.preferences.permission_status import (
    PermissionRequestResult,
    PermissionStatus,
    PushTokenRequest,
)
from core.schemas.preferences.preferences_update import PreferencesUpdate

__all__ = [
    "CategoryPreferences",
    "ChannelPreferences",
    "FrequencyPreferences",
    "NotificationPreferences",
    "PermissionRequestResult",
    "PermissionStatus",
    "PreferencesUpdate",
    "PushTokenRequest",
    "QuietHours",
    "SmartNudgePreferences",
]
