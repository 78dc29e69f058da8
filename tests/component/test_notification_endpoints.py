"""Component tests for the notification endpoints.

Requests go through URL routing, the middleware stack, pydantic validation,
the services and the exception handler; only the RQ transport is replaced.
"""

from django.test import Client, TestCase

from core.models import NotificationRecord
from tests.component.mocks import USERS_URL, iso_in, start_service_patches

BASE_URL = f"{USERS_URL}/learner-1/notifications"


class TestNotificationEndpoints(TestCase):
    """Component tests for scheduling and managing notifications."""

    def setUp(self):
        """Set up test fixtures."""
        self.client = Client()
        self.adapter = start_service_patches(self)

    def _post(self, url, data=None):
        return self.client.post(url, data or {}, content_type="application/json")

    def _send(self, **fields):
        payload = {"title": "Welcome back", "body": "Pick up where you left off"}
        payload.update(fields)
        response = self._post(f"{BASE_URL}/send", payload)
        self.assertEqual(response.status_code, 200)
        return response.json()

    def test_send_delivers_immediately(self):
        """Test POST /send accepts and delivers the notification."""
        result = self._send()

        self.assertEqual(result["outcome"], "accepted")
        self.assertFalse(result["deliveryFailed"])
        detail = self.client.get(f"{BASE_URL}/{result['recordId']}").json()
        self.assertTrue(detail["isDelivered"])
        self.assertEqual(detail["category"], "system")
        self.assertEqual(self.adapter.scheduled[0]["trigger_time"], None)

    def test_schedule_future_notification(self):
        """Test POST /schedule keeps the record pending until its time."""
        response = self._post(
            f"{BASE_URL}/schedule",
            {
                "title": "Quiz tomorrow",
                "body": "Chapter 4",
                "scheduledFor": iso_in(hours=2),
                "priority": "high",
            },
        )

        self.assertEqual(response.status_code, 200)
        result = response.json()
        self.assertEqual(result["outcome"], "accepted")
        detail = self.client.get(f"{BASE_URL}/{result['recordId']}").json()
        self.assertFalse(detail["isDelivered"])
        self.assertEqual(detail["category"], "learning")
        self.assertEqual(detail["notificationType"], "reminder")
        self.assertEqual(detail["priority"], "high")

    def test_schedule_rejects_naive_datetime(self):
        """Test timestamps without an offset are rejected."""
        response = self._post(
            f"{BASE_URL}/schedule",
            {"title": "Quiz", "scheduledFor": "2024-03-06T14:00:00"},
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Invalid request parameters")
        self.assertEqual(NotificationRecord.objects.count(), 0)

    def test_schedule_rejects_unknown_category(self):
        """Test enum fields are validated."""
        response = self._post(
            f"{BASE_URL}/schedule",
            {"title": "Quiz", "scheduledFor": iso_in(hours=1), "category": "gossip"},
        )

        self.assertEqual(response.status_code, 400)

    def test_suppressed_notification_is_not_an_error(self):
        """Test a disabled category returns 200 with the suppression reason."""
        result = self._send(category="marketing")

        self.assertEqual(result["outcome"], "suppressed")
        self.assertEqual(result["reason"], "category_disabled")
        self.assertIsNone(result["recordId"])

    def test_quiet_hours_defer(self):
        """Test a learning notification inside quiet hours is deferred."""
        self.client.patch(
            f"{USERS_URL}/learner-1/preferences",
            {"quietHours": {"startTime": "11:00", "endTime": "13:30"}},
            content_type="application/json",
        )

        result = self._send(category="learning")

        self.assertEqual(result["outcome"], "deferred")
        self.assertEqual(result["scheduledFor"], "2024-03-06T13:30:00Z")

    def test_hourly_cap(self):
        """Test the fourth notification within an hour is suppressed."""
        for index in range(3):
            self._send(title=f"Update {index}")

        result = self._send(title="Update 3")
        urgent = self._send(title="Exam moved", priority="urgent")

        self.assertEqual(result["reason"], "hourly_cap")
        self.assertEqual(urgent["outcome"], "accepted")

    def test_list_is_paginated_and_filterable(self):
        """Test GET lists the user's records with page metadata."""
        self._send(category="learning")
        self._send(category="achievements", title="New badge")
        self._send(category="social", title="New follower")

        page = self.client.get(BASE_URL, {"pageSize": 2}).json()
        filtered = self.client.get(BASE_URL, {"category": "achievements"}).json()

        self.assertEqual(page["count"], 3)
        self.assertEqual(page["pageSize"], 2)
        self.assertEqual(len(page["results"]), 2)
        self.assertIsNotNone(page["next"])
        self.assertEqual([r["title"] for r in filtered["results"]], ["New badge"])

    def test_list_only_shows_own_records(self):
        """Test users never see each other's notifications."""
        self._send()

        response = self.client.get(f"{USERS_URL}/someone-else/notifications")

        self.assertEqual(response.json()["count"], 0)

    def test_read_and_summary(self):
        """Test reading a delivered notification lowers the unread count."""
        record_id = self._send()["recordId"]
        before = self.client.get(f"{BASE_URL}/summary").json()

        response = self._post(f"{BASE_URL}/{record_id}/read")
        after = self.client.get(f"{BASE_URL}/summary").json()

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["isRead"])
        self.assertEqual(before["unreadCount"], 1)
        self.assertEqual(after["unreadCount"], 0)
        self.assertEqual(after["byCategory"], {"system": 1})

    def test_read_before_delivery_conflicts(self):
        """Test a pending notification cannot be marked read."""
        result = self._post(
            f"{BASE_URL}/schedule",
            {"title": "Later", "scheduledFor": iso_in(hours=3)},
        ).json()

        response = self._post(f"{BASE_URL}/{result['recordId']}/read")

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["error"], "invalid_state")

    def test_read_all(self):
        """Test POST /read-all marks every delivered record read."""
        self._send(category="learning")
        self._send(category="social")

        response = self._post(f"{BASE_URL}/read-all")

        self.assertEqual(response.json(), {"updated": 2})
        self.assertEqual(self.client.get(f"{BASE_URL}/summary").json()["unreadCount"], 0)

    def test_archive_hides_record(self):
        """Test archived records drop out of the default list."""
        record_id = self._send()["recordId"]

        self._post(f"{BASE_URL}/{record_id}/archive")

        self.assertEqual(self.client.get(BASE_URL).json()["count"], 0)
        self.assertEqual(
            self.client.get(BASE_URL, {"includeArchived": "true"}).json()["count"], 1
        )

    def test_cancel_and_cancel_all(self):
        """Test pending notifications can be cancelled one by one or together."""
        first = self._post(
            f"{BASE_URL}/schedule",
            {"title": "One", "scheduledFor": iso_in(hours=1)},
        ).json()
        self._post(
            f"{BASE_URL}/schedule",
            {"title": "Two", "scheduledFor": iso_in(hours=5), "category": "social"},
        )
        self._post(
            f"{BASE_URL}/schedule",
            {"title": "Three", "scheduledFor": iso_in(hours=9), "category": "system"},
        )

        cancelled = self._post(f"{BASE_URL}/{first['recordId']}/cancel")
        again = self._post(f"{BASE_URL}/{first['recordId']}/cancel")
        remaining = self._post(f"{BASE_URL}/cancel-all")

        self.assertTrue(cancelled.json()["isCancelled"])
        self.assertEqual(again.status_code, 200)
        self.assertEqual(remaining.json(), {"cancelled": 2})
        self.assertEqual(len(self.adapter.cancelled), 3)

    def test_delete(self):
        """Test DELETE removes the record."""
        record_id = self._send()["recordId"]

        response = self.client.delete(f"{BASE_URL}/{record_id}")

        self.assertEqual(response.status_code, 204)
        self.assertEqual(self.client.get(f"{BASE_URL}/{record_id}").status_code, 404)

    def test_unknown_record_returns_404(self):
        """Test lookups of unknown ids return the error envelope."""
        response = self.client.get(f"{BASE_URL}/notif_missing")

        self.assertEqual(response.status_code, 404)
        body = response.json()
        self.assertEqual(body["error"], "not_found")
        self.assertEqual(response["X-Request-ID"], body["request_id"])

    def test_incoming_batch(self):
        """Test server-side notifications are scheduled one by one."""
        response = self._post(
            f"{BASE_URL}/incoming",
            {
                "notifications": [
                    {"title": "Course updated", "category": "learning"},
                    {"title": "Flash sale", "category": "marketing"},
                    {
                        "title": "Exam moved",
                        "category": "deadlines",
                        "requestedTime": iso_in(days=1),
                    },
                ]
            },
        )

        self.assertEqual(response.status_code, 200)
        outcomes = [r["outcome"] for r in response.json()["results"]]
        self.assertEqual(outcomes, ["accepted", "suppressed", "accepted"])

    def test_permission_denied_is_403(self):
        """Test a missing push permission surfaces as 403."""
        self.adapter.granted = False

        response = self._post(f"{BASE_URL}/send", {"title": "Hi"})

        self.assertEqual(response.status_code, 403)
        body = response.json()
        self.assertEqual(body["error"], "permission_denied")
        record = NotificationRecord.objects.get(record_id=body["record_id"])
        self.assertTrue(record.delivery_failed)

    def test_send_read_and_summary_flow(self):
        """Test the full enable, send, list, read and count flow."""
        prefs = self.client.patch(
            f"{USERS_URL}/learner-1/preferences",
            {
                "globalEnabled": True,
                "categories": {"learning": True},
                "quietHours": {"enabled": False},
                "frequency": {"maxPerHour": 10, "maxPerDay": 50},
            },
            content_type="application/json",
        )
        self.assertEqual(prefs.status_code, 200)

        result = self._send(title="Test", body="Body", data={}, priority="normal")
        listed = self.client.get(BASE_URL).json()["results"]
        unread_before = self.client.get(f"{BASE_URL}/summary").json()["unreadCount"]
        self._post(f"{BASE_URL}/{result['recordId']}/read")
        unread_after = self.client.get(f"{BASE_URL}/summary").json()["unreadCount"]

        self.assertEqual([r["recordId"] for r in listed], [result["recordId"]])
        self.assertTrue(listed[0]["isDelivered"])
        self.assertFalse(listed[0]["isRead"])
        self.assertEqual(unread_after, unread_before - 1)
