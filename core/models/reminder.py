"""User-authored reminders."""

from typing import ClassVar

from django.db import models

from core.constants import DEFAULT_MAX_SNOOZES
from core.enums import ReminderType


class Reminder(models.Model):
    """A reminder the user asked for, one-shot or recurring.

    Each occurrence or snooze produces a NotificationRecord; ``current_record_id``
    points at the pending one.
    """

    reminder_id = models.CharField(primary_key=True, max_length=64)
    user_id = models.CharField(max_length=64, db_index=True)
    reminder_type = models.CharField(
        max_length=32,
        choices=[(t.value, t.value) for t in ReminderType],
        default=ReminderType.CUSTOM.value,
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    scheduled_for = models.DateTimeField()
    is_recurring = models.BooleanField(default=False)
    recurrence = models.JSONField(null=True, blank=True)
    related_entity_id = models.CharField(max_length=64, null=True, blank=True)
    related_entity_type = models.CharField(max_length=32, null=True, blank=True)
    is_active = models.BooleanField(default=True)
    is_completed = models.BooleanField(default=False)
    completed_at = models.DateTimeField(null=True, blank=True)
    snooze_count = models.PositiveIntegerField(default=0)
    max_snoozes = models.PositiveIntegerField(default=DEFAULT_MAX_SNOOZES)
    occurrence_count = models.PositiveIntegerField(default=0)
    current_record_id = models.CharField(max_length=64, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Django model metadata."""

        db_table = "reminders"
        ordering: ClassVar[list[str]] = ["scheduled_for"]

    def __str__(self) -> str:
        """Return string representation of the reminder."""
        return f"{self.title} at {self.scheduled_for} for user {self.user_id}"
