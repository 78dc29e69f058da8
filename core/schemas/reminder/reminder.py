"""Schemas for user-authored reminders."""

from datetime import datetime

from pydantic import AwareDatetime, Field, model_validator

from core.constants import DEFAULT_MAX_SNOOZES, DEFAULT_SNOOZE_MINUTES
from core.enums import RecurrenceType, ReminderType
from core.schemas.base_schema_model import BaseSchemaModel


class RecurrencePattern(BaseSchemaModel):
    """How a recurring reminder repeats.

    ``interval`` counts days, weeks or months for the matching types and
    hours for CUSTOM. ``days_of_week`` uses Sunday = 0.
    """

    type: RecurrenceType
    interval: int = Field(default=1, ge=1)
    days_of_week: list[int] | None = None
    day_of_month: int | None = Field(default=None, ge=1, le=31)
    end_date: AwareDatetime | None = None
    max_occurrences: int | None = Field(default=None, ge=1)

    @model_validator(mode="after")
    def _check_days(self):
        if self.days_of_week is not None and any(
            day < 0 or day > 6 for day in self.days_of_week
        ):
            raise ValueError("days_of_week values must be between 0 and 6")
        return self


class ReminderCreateRequest(BaseSchemaModel):
    """Body of POST .../reminders."""

    reminder_type: ReminderType = ReminderType.CUSTOM
    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    scheduled_for: AwareDatetime
    recurrence: RecurrencePattern | None = None
    related_entity_id: str | None = Field(default=None, max_length=64)
    related_entity_type: str | None = Field(default=None, max_length=32)
    max_snoozes: int = Field(default=DEFAULT_MAX_SNOOZES, ge=0)

    @property
    def is_recurring(self) -> bool:
        """Whether a recurrence pattern was supplied."""
        return self.recurrence is not None


class ReminderDetail(BaseSchemaModel):
    """A persisted reminder as returned to callers."""

    reminder_id: str
    user_id: str
    reminder_type: str
    title: str
    description: str
    scheduled_for: datetime
    is_recurring: bool
    recurrence: RecurrencePattern | None = None
    related_entity_id: str | None = None
    related_entity_type: str | None = None
    is_active: bool
    is_completed: bool
    completed_at: datetime | None = None
    snooze_count: int
    max_snoozes: int
    occurrence_count: int
    current_record_id: str | None = None
    created_at: datetime | None = None


class SnoozeRequest(BaseSchemaModel):
    """Body of POST .../reminders/<id>/snooze."""

    minutes: int = Field(default=DEFAULT_SNOOZE_MINUTES, ge=1, le=24 * 60)
