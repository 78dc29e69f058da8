"""Repository for smart nudge rules and user activity."""

import secrets
import time
from datetime import datetime
from typing import Any

from django.db.models import F, Q, QuerySet

from core.exceptions import NotFoundError
from core.models import NudgeActivity, SmartNudge


def generate_nudge_id() -> str:
    """Return a unique rule identifier."""
    return f"nudge_{int(time.time() * 1000)}_{secrets.token_hex(4)}"


class NudgeStore:
    """Persistence for one user's nudge rules and activity row."""

    def __init__(self, user_id: str) -> None:
        """Initialize the store.

        Args:
            user_id: Owner of the rules.
        """
        self.user_id = user_id

    def _queryset(self) -> QuerySet[SmartNudge]:
        return SmartNudge.objects.filter(user_id=self.user_id)

    def has_rules(self) -> bool:
        """Whether the user has any rule, active or not."""
        return self._queryset().exists()

    def all_rules(self, active_only: bool = False) -> list[SmartNudge]:
        """Return the user's rules in creation order."""
        queryset = self._queryset()
        if active_only:
            queryset = queryset.filter(is_active=True)
        return list(queryset)

    def for_event(self, event: str) -> list[SmartNudge]:
        """Return active rules listening for ``event``."""
        return list(self._queryset().filter(trigger_event=event, is_active=True))

    def get(self, nudge_id: str) -> SmartNudge:
        """Return a rule.

        Raises:
            NotFoundError: If the user has no such rule.
        """
        try:
            return self._queryset().get(nudge_id=nudge_id)
        except SmartNudge.DoesNotExist as e:
            raise NotFoundError("Nudge", nudge_id) from e

    def create(self, **fields: Any) -> SmartNudge:
        """Persist a new rule for the user."""
        fields.setdefault("nudge_id", generate_nudge_id())
        return SmartNudge.objects.create(user_id=self.user_id, **fields)

    def save(self, nudge: SmartNudge, *fields: str) -> None:
        """Persist the named fields of ``nudge``."""
        nudge.save(update_fields=[*fields, "updated_at"])

    def record_triggered(self, nudge: SmartNudge, at: datetime) -> None:
        """Increment the trigger counter and stamp ``last_triggered``."""
        SmartNudge.objects.filter(nudge_id=nudge.nudge_id).update(
            trigger_count=F("trigger_count") + 1, last_triggered=at, updated_at=at
        )
        nudge.refresh_from_db(fields=["trigger_count", "last_triggered", "updated_at"])

    def record_activity(self, event: str, at: datetime) -> NudgeActivity:
        """Remember that the user was active at ``at``.

        Any activity re-arms the inactivity check.
        """
        activity, _ = NudgeActivity.objects.update_or_create(
            user_id=self.user_id,
            defaults={
                "last_event": event,
                "last_active_at": at,
                "inactivity_notified_at": None,
            },
        )
        return activity

    def mark_inactivity_notified(self, at: datetime) -> None:
        """Stamp the activity row so the same idle period is not re-reported."""
        NudgeActivity.objects.filter(user_id=self.user_id).update(
            inactivity_notified_at=at
        )

    @staticmethod
    def inactive_users(cutoff: datetime) -> list[str]:
        """Return users idle since before ``cutoff`` and not yet notified."""
        return list(
            NudgeActivity.objects.filter(last_active_at__lt=cutoff)
            .filter(
                Q(inactivity_notified_at__isnull=True)
                | Q(inactivity_notified_at__lt=F("last_active_at"))
            )
            .values_list("user_id", flat=True)
        )
