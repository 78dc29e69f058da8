"""Pytest configuration and shared fixtures."""

import os
from datetime import UTC, datetime

import django
from django.core.cache import cache
from django.test import Client

import pytest

# Configure Django settings for tests
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "companion_notifications.settings_test")
django.setup()

from core.services.notification_service import NotificationService  # noqa: E402
from core.services.reminder_service import ReminderService  # noqa: E402
from core.services.smart_nudge_service import SmartNudgeService  # noqa: E402
from tests.doubles import FakeDeliveryAdapter, FrozenClock  # noqa: E402

# Wednesday, 12:00 UTC
DEFAULT_NOW = datetime(2024, 3, 6, 12, 0, tzinfo=UTC)


@pytest.fixture
def api_client():
    """Provide Django test client."""
    return Client()


@pytest.fixture(autouse=True)
def clear_cache():
    """Start every test with an empty cache."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def user_id():
    """Id of the user under test."""
    return "learner-1"


@pytest.fixture
def clock():
    """Controllable clock starting at DEFAULT_NOW."""
    return FrozenClock(DEFAULT_NOW)


@pytest.fixture
def adapter():
    """Delivery adapter double that records its calls."""
    return FakeDeliveryAdapter()


@pytest.fixture
def notification_service(user_id, adapter, clock):
    """Notification service wired to the fake adapter and frozen clock."""
    return NotificationService(user_id, adapter=adapter, clock=clock)


@pytest.fixture
def nudge_service(user_id, notification_service, clock):
    """Nudge engine on top of the test notification service."""
    return SmartNudgeService(
        user_id, notification_service, clock=clock, adaptive_unread_threshold=5
    )


@pytest.fixture
def reminder_service(user_id, notification_service, clock):
    """Reminder service on top of the test notification service."""
    return ReminderService(user_id, notification_service, clock=clock)
