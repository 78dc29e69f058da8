"""Smart nudge schemas."""

from core.schemas.nudge.nudge_evaluation import NudgeEvaluation
from core.schemas.nudge.nudge_requests import (
    ActivityRequest,
    NudgeCreateRequest,
    NudgeEffectivenessRequest,
    NudgeTriggerRequest,
)
from core.schemas.nudge.nudge_rule import (
    NudgeCondition,
    NudgeContent,
    NudgeFrequency,
    NudgeTrigger,
    SmartNudgeDetail,
    TimeRange,
)

__all__ = [
    "ActivityRequest",
    "NudgeCondition",
    "NudgeContent",
    "NudgeCreateRequest",
    "NudgeEffectivenessRequest",
    "NudgeEvaluation",
    "NudgeFrequency",
    "NudgeTrigger",
    "NudgeTriggerRequest",
    "SmartNudgeDetail",
    "TimeRange",
]
