"""Reminder enumerations."""

from enum import Enum


class ReminderType(str, Enum):
    """What a user-authored reminder is about."""

    ASSIGNMENT_DUE = "assignment_due"
    EXAM_SCHEDULED = "exam_scheduled"
    COURSE_DEADLINE = "course_deadline"
    STUDY_SESSION = "study_session"
    GOAL_CHECK = "goal_check"
    STREAK_MAINTENANCE = "streak_maintenance"
    CUSTOM = "custom"


class RecurrenceType(str, Enum):
    """Recurrence unit of a repeating reminder."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"
