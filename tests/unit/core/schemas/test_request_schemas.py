"""Unit tests for request body validation."""

import unittest

from pydantic import ValidationError

from core.schemas.notification.notification_requests import ScheduleNotificationRequest
from core.schemas.nudge.nudge_rule import NudgeCondition
from core.schemas.preferences.preferences_update import PreferencesUpdate


class TestScheduleNotificationRequest(unittest.TestCase):
    """Test cases for the schedule request body."""

    def test_camel_case_body_with_defaults(self):
        """Test camelCase input and the learning/reminder defaults."""
        request = ScheduleNotificationRequest.model_validate(
            {"title": "  Quiz  ", "scheduledFor": "2024-03-06T14:00:00+05:30"}
        )

        self.assertEqual(request.title, "Quiz")
        self.assertEqual(request.category, "learning")
        self.assertEqual(request.notification_type, "reminder")
        self.assertEqual(request.scheduled_for.utcoffset().total_seconds(), 19800)

    def test_naive_datetime_is_rejected(self):
        """Test timestamps must carry an offset."""
        with self.assertRaises(ValidationError):
            ScheduleNotificationRequest.model_validate(
                {"title": "Quiz", "scheduledFor": "2024-03-06T14:00:00"}
            )


class TestNudgeCondition(unittest.TestCase):
    """Test cases for nudge rule conditions."""

    def test_accepts_sunday_through_saturday(self):
        """Test every day from 0 to 6 is valid."""
        condition = NudgeCondition.model_validate({"dayOfWeek": list(range(7))})

        self.assertEqual(condition.day_of_week, [0, 1, 2, 3, 4, 5, 6])

    def test_rejects_out_of_range_days(self):
        """Test days outside 0-6 fail validation."""
        for days in ([7], [-1, 2]):
            with self.subTest(days=days), self.assertRaises(ValidationError):
                NudgeCondition.model_validate({"dayOfWeek": days})


class TestPreferencesUpdate(unittest.TestCase):
    """Test cases for the partial preferences body."""

    def test_changes_only_contain_sent_fields(self):
        """Test unset fields are left out of the merge payload."""
        update = PreferencesUpdate.model_validate(
            {"quietHours": {"enabled": False}, "frequency": {"maxPerDay": 5}}
        )

        self.assertEqual(
            update.changes(),
            {"quiet_hours": {"enabled": False}, "frequency": {"max_per_day": 5}},
        )

    def test_unknown_nested_field_is_rejected(self):
        """Test misspelt nested keys fail validation."""
        with self.assertRaises(ValidationError):
            PreferencesUpdate.model_validate({"categories": {"learnin": False}})

    def test_timezone_must_be_known(self):
        """Test quiet-hour timezones are checked against the tz database."""
        valid = PreferencesUpdate.model_validate(
            {"quietHours": {"timezone": "Asia/Kolkata"}}
        )

        self.assertEqual(valid.quiet_hours.timezone, "Asia/Kolkata")
        with self.assertRaises(ValidationError):
            PreferencesUpdate.model_validate({"quietHours": {"timezone": "Nowhere/City"}})
