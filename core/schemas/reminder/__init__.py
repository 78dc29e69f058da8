"""Reminder schemas."""

from core.schemas.reminder.reminder import (
    RecurrencePattern,
    ReminderCreateRequest,
    ReminderDetail,
    SnoozeRequest,
)

__all__ = [
    "RecurrencePattern",
    "ReminderCreateRequest",
    "ReminderDetail",
    "SnoozeRequest",
]
