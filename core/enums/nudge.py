"""Smart nudge enumerations."""

from enum import Enum


class NudgeType(str, Enum):
    """Kind of behavioural nudge a rule produces."""

    LEARNING_REMINDER = "learning_reminder"
    STREAK_MAINTENANCE = "streak_maintenance"
    COURSE_COMPLETION = "course_completion"
    PRACTICE_ENCOURAGEMENT = "practice_encouragement"
    PERFORMANCE_INSIGHT = "performance_insight"
    GOAL_PROGRESS = "goal_progress"
    SOCIAL_ENGAGEMENT = "social_engagement"
    HABIT_FORMATION = "habit_formation"


class TriggerEvent(str, Enum):
    """Behavioural events emitted by the app that nudge rules listen for."""

    APP_OPEN = "app_open"
    LESSON_COMPLETE = "lesson_complete"
    QUIZ_COMPLETE = "quiz_complete"
    STREAK_BROKEN = "streak_broken"
    GOAL_MISSED = "goal_missed"
    INACTIVITY = "inactivity"
    LOW_PERFORMANCE = "low_performance"
    COURSE_ENROLLED = "course_enrolled"
    DEADLINE_APPROACHING = "deadline_approaching"


class NudgeFrequencyType(str, Enum):
    """How often a single rule may fire."""

    ONCE = "once"
    DAILY = "daily"
    WEEKLY = "weekly"
    CUSTOM = "custom"


class NudgeState(str, Enum):
    """Per-evaluation state of a nudge rule."""

    IDLE = "idle"
    EVALUATED = "evaluated"
    SUPPRESSED = "suppressed"
    FIRED = "fired"
