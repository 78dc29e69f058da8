"""Schemas describing what the scheduling policy decided."""

from datetime import datetime

from pydantic import Field

from core.enums import DecisionOutcome, SuppressionReason
from core.schemas.base_schema_model import BaseSchemaModel


class SchedulingDecision(BaseSchemaModel):
    """Pure result of evaluating one candidate.

    ``scheduled_for`` is the (possibly deferred) delivery time for accepted
    and deferred outcomes. ``batch_target_id`` names the pending record a
    batched candidate was merged into.
    """

    outcome: DecisionOutcome
    reason: SuppressionReason | None = None
    scheduled_for: datetime | None = None
    batch_target_id: str | None = None

    @property
    def is_suppressed(self) -> bool:
        """Whether the candidate was dropped."""
        return self.outcome == DecisionOutcome.SUPPRESSED


class ScheduleResult(BaseSchemaModel):
    """What a scheduling call returns to its caller.

    Suppression is a valid outcome, not an error: ``record_id`` is None and
    ``reason`` explains why.
    """

    record_id: str | None = Field(default=None)
    outcome: DecisionOutcome
    reason: SuppressionReason | None = None
    scheduled_for: datetime | None = None
    delivery_failed: bool = False

    @property
    def accepted(self) -> bool:
        """Whether the candidate produced or joined a record."""
        return self.outcome != DecisionOutcome.SUPPRESSED
