"""Notification-related enumerations.

This module contains enums for notification types, categories, priorities,
delivery channels and the outcomes of the scheduling policy.
"""

from enum import Enum


class NotificationType(str, Enum):
    """What kind of event a notification represents."""

    REMINDER = "reminder"
    DEADLINE = "deadline"
    STREAK = "streak"
    ACHIEVEMENT = "achievement"
    COURSE_UPDATE = "course_update"
    EXAM_ALERT = "exam_alert"
    ASSIGNMENT_DUE = "assignment_due"
    SOCIAL = "social"
    MARKETING = "marketing"
    SYSTEM = "system"
    SMART_NUDGE = "smart_nudge"


class NotificationCategory(str, Enum):
    """Preference category a notification belongs to.

    Each category can be toggled independently in the user's preferences.
    EMERGENCY is exempt from both the master switch and category toggles.
    """

    LEARNING = "learning"
    DEADLINES = "deadlines"
    SOCIAL = "social"
    ACHIEVEMENTS = "achievements"
    SYSTEM = "system"
    MARKETING = "marketing"
    EMERGENCY = "emergency"


class NotificationPriority(str, Enum):
    """Notification priority. URGENT bypasses frequency caps."""

    URGENT = "urgent"
    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"


class DeliveryChannel(str, Enum):
    """Delivery channels a user can enable.

    Only PUSH and IN_APP are actionable; EMAIL and SMS are informational.
    """

    PUSH = "push"
    EMAIL = "email"
    IN_APP = "in_app"
    SMS = "sms"


class DecisionOutcome(str, Enum):
    """Result of evaluating a candidate against the scheduling policy."""

    ACCEPTED = "accepted"
    DEFERRED = "deferred"
    SUPPRESSED = "suppressed"
    BATCHED = "batched"


class SuppressionReason(str, Enum):
    """Why the scheduling policy or a nudge rule held a notification back."""

    GLOBAL_DISABLED = "global_disabled"
    CATEGORY_DISABLED = "category_disabled"
    EXPIRED = "expired"
    QUIET_HOURS = "quiet_hours"
    HOURLY_CAP = "hourly_cap"
    DAILY_CAP = "daily_cap"
    BATCHED_WITH_PENDING = "batched_with_pending"
    NUDGES_DISABLED = "nudges_disabled"
    MAX_TRIGGERS_REACHED = "max_triggers_reached"
    OUTSIDE_TIME_OF_DAY = "outside_time_of_day"
    WRONG_DAY_OF_WEEK = "wrong_day_of_week"
    FREQUENCY_LIMIT = "frequency_limit"
    ADAPTIVE_BACKOFF = "adaptive_backoff"
