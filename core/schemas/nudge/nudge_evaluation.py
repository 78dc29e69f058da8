"""Result of evaluating a single nudge rule against an event."""

from core.enums import DecisionOutcome, NudgeState, SuppressionReason
from core.schemas.base_schema_model import BaseSchemaModel


class NudgeEvaluation(BaseSchemaModel):
    """Where a rule ended up after an event, and why.

    ``record_id`` and ``outcome`` are set when the rule fired and the
    candidate went through the scheduling policy.
    """

    nudge_id: str
    state: NudgeState
    reason: SuppressionReason | None = None
    outcome: DecisionOutcome | None = None
    record_id: str | None = None
