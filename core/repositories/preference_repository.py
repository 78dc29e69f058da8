"""Repository for a user's notification preferences."""

from collections.abc import Callable
from datetime import datetime
from typing import Any

from django.db import transaction
from django.utils import timezone

import structlog

from core.models import NotificationPreference
from core.schemas.preferences import NotificationPreferences, PreferencesUpdate

logger = structlog.get_logger(__name__)


def _deep_merge(base: dict[str, Any], changes: dict[str, Any]) -> dict[str, Any]:
    """Return ``base`` with ``changes`` merged in, recursing into nested dicts."""
    merged = dict(base)
    for key, value in changes.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class PreferenceStore:
    """Load and persist one user's NotificationPreferences.

    Defaults are written on first access so that later reads see the same
    document (including the timezone the user started with).
    """

    def __init__(
        self, user_id: str, clock: Callable[[], datetime] = timezone.now
    ) -> None:
        """Initialize the store.

        Args:
            user_id: Owner of the preferences.
            clock: Source of the current time, used for change timestamps.
        """
        self.user_id = user_id
        self.clock = clock

    def _get_or_create_row(self) -> NotificationPreference:
        row, created = NotificationPreference.objects.get_or_create(
            user_id=self.user_id,
            defaults={
                "preferences": self._serialize(
                    NotificationPreferences(user_id=self.user_id)
                ),
                "updated_at": self.clock(),
            },
        )
        if created:
            logger.info("notification_preferences_created", user_id=self.user_id)
        return row

    def _serialize(self, preferences: NotificationPreferences) -> dict[str, Any]:
        return preferences.model_dump(
            mode="json", exclude={"user_id", "updated_at"}
        )

    def _to_schema(self, row: NotificationPreference) -> NotificationPreferences:
        return NotificationPreferences.model_validate(
            {**row.preferences, "user_id": row.user_id, "updated_at": row.updated_at}
        )

    def get(self) -> NotificationPreferences:
        """Return the current preferences, creating defaults on first access."""
        return self._to_schema(self._get_or_create_row())

    def lock(self) -> NotificationPreferences:
        """Lock the user's preference row and return its preferences.

        Must be called inside ``transaction.atomic()``; the lock is the
        per-user mutex for read-modify-write sequences.
        """
        self._get_or_create_row()
        row = NotificationPreference.objects.select_for_update().get(
            user_id=self.user_id
        )
        return self._to_schema(row)

    def update(self, update: PreferencesUpdate) -> NotificationPreferences:
        """Deep-merge a partial update and persist it.

        Args:
            update: Typed partial update; unset fields are left untouched.

        Returns:
            The merged preferences as stored.
        """
        self._get_or_create_row()
        changes = update.changes()
        with transaction.atomic():
            row = NotificationPreference.objects.select_for_update().get(
                user_id=self.user_id
            )
            merged = NotificationPreferences.model_validate(
                {**_deep_merge(row.preferences, changes), "user_id": self.user_id}
            )
            row.preferences = self._serialize(merged)
            row.updated_at = self.clock()
            row.save(update_fields=["preferences", "updated_at"])

        logger.info(
            "notification_preferences_updated",
            user_id=self.user_id,
            changed_sections=sorted(changes),
        )
        return self._to_schema(row)

    def get_push_token(self) -> str | None:
        """Return the device push token, if the app registered one."""
        return self._get_or_create_row().push_token

    def set_push_token(self, push_token: str | None) -> None:
        """Store (or clear, with None) the device push token."""
        row = self._get_or_create_row()
        row.push_token = push_token
        row.updated_at = self.clock()
        row.save(update_fields=["push_token", "updated_at"])
        logger.info(
            "push_token_registered" if push_token else "push_token_cleared",
            user_id=self.user_id,
        )
