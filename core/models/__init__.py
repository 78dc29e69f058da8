"""Database models for core application."""

from core.models.notification_preference import NotificationPreference
from core.models.notification_record import NotificationRecord, generate_record_id
from core.models.reminder import Reminder
from core.models.smart_nudge import NudgeActivity, SmartNudge

__all__ = [
    "NotificationPreference",
    "NotificationRecord",
    "NudgeActivity",
    "Reminder",
    "SmartNudge",
    "generate_record_id",
]
