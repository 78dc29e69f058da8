"""Smart nudge trigger rules and per-user activity tracking."""

from typing import ClassVar

from django.db import models

from core.constants import DEFAULT_NUDGE_EFFECTIVENESS
from core.enums import NudgeType


class SmartNudge(models.Model):
    """A behavioural trigger rule owned by one user.

    ``condition``, ``content`` and ``frequency`` hold documents validated by
    the nudge schemas. Rules are deactivated rather than deleted.
    """

    nudge_id = models.CharField(primary_key=True, max_length=64)
    user_id = models.CharField(max_length=64, db_index=True)
    nudge_type = models.CharField(
        max_length=32,
        choices=[(t.value, t.value) for t in NudgeType],
    )
    trigger_event = models.CharField(max_length=64)
    trigger_delay_minutes = models.PositiveIntegerField(default=0)
    condition = models.JSONField(default=dict, blank=True)
    content = models.JSONField(default=dict)
    frequency = models.JSONField(default=dict)
    max_triggers = models.PositiveIntegerField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    trigger_count = models.PositiveIntegerField(default=0)
    last_triggered = models.DateTimeField(null=True, blank=True)
    effectiveness = models.FloatField(default=DEFAULT_NUDGE_EFFECTIVENESS)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Django model metadata."""

        db_table = "smart_nudges"
        ordering: ClassVar[list[str]] = ["created_at", "nudge_id"]
        indexes: ClassVar[list] = [
            models.Index(fields=["user_id", "trigger_event", "is_active"]),
        ]

    def __str__(self) -> str:
        """Return string representation of the rule."""
        return f"{self.nudge_type} on {self.trigger_event} for user {self.user_id}"

    def __repr__(self) -> str:
        """Return detailed representation of the rule."""
        return (
            f"<SmartNudge(id={self.nudge_id}, type={self.nudge_type}, "
            f"event={self.trigger_event}, active={self.is_active}, "
            f"count={self.trigger_count})>"
        )


class NudgeActivity(models.Model):
    """Last behavioural event seen for a user, used by the inactivity check."""

    user_id = models.CharField(primary_key=True, max_length=64)
    last_event = models.CharField(max_length=64)
    last_active_at = models.DateTimeField(db_index=True)
    inactivity_notified_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        """Django model metadata."""

        db_table = "nudge_activity"

    def __str__(self) -> str:
        """Return string representation of the activity row."""
        return f"{self.user_id} last active at {self.last_active_at}"
