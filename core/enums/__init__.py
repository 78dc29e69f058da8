"""Enumerations for the core app."""

from core.enums.notification import (
    DecisionOutcome,
    DeliveryChannel,
    NotificationCategory,
    NotificationPriority,
    NotificationType,
    SuppressionReason,
)
from core.enums.nudge import NudgeFrequencyType, NudgeState, NudgeType, TriggerEvent
from core.enums.reminder import RecurrenceType, ReminderType

__all__ = [
    "DecisionOutcome",
    "DeliveryChannel",
    "NotificationCategory",
    "NotificationPriority",
    "NotificationType",
    "NudgeFrequencyType",
    "NudgeState",
    "NudgeType",
    "RecurrenceType",
    "ReminderType",
    "SuppressionReason",
    "TriggerEvent",
]
