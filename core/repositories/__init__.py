"""Repositories encapsulating database access for the core app."""

from core.repositories.notification_record_repository import NotificationRecordStore
from core.repositories.nudge_repository import NudgeStore
from core.repositories.preference_repository import PreferenceStore

__all__ = ["NotificationRecordStore", "NudgeStore", "PreferenceStore"]
