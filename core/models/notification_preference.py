"""Per-user notification preferences."""

from django.db import models


class NotificationPreference(models.Model):
    """Persisted NotificationPreferences for one user.

    The preference document itself is validated and merged by the
    ``NotificationPreferences`` schema; this row only stores it. The row also
    serves as the per-user lock for read-modify-write sequences.
    """

    user_id = models.CharField(primary_key=True, max_length=64)
    preferences = models.JSONField(default=dict)
    push_token = models.CharField(max_length=255, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField()

    class Meta:
        """Django model metadata."""

        db_table = "notification_preferences"

    def __str__(self) -> str:
        """Return string representation of the preferences row."""
        return f"Notification preferences for user {self.user_id}"
