"""Unit tests for the notification record store."""

from datetime import timedelta

import pytest

from core.exceptions import DuplicateIdError, InvalidStateError, NotFoundError
from core.repositories import NotificationRecordStore
from core.schemas.notification import NotificationFilter


@pytest.fixture
def store(user_id, clock):
    return NotificationRecordStore(user_id, clock)


def append(store, record_id=None, **fields):
    values = {
        "notification_type": "reminder",
        "category": "learning",
        "priority": "normal",
        "title": "Keep going",
        "body": "Ten minutes today",
    }
    values.update(fields)
    return store.append(record_id, **values)


@pytest.mark.django_db
class TestAppendAndGet:
    """Creating and reading records."""

    def test_append_generates_id_and_created_at(self, store, clock):
        record = append(store)

        assert record.record_id.startswith("notif_")
        assert record.created_at == clock()
        assert record.user_id == store.user_id

    def test_duplicate_id_is_rejected(self, store):
        append(store, "notif_fixed")

        with pytest.raises(DuplicateIdError):
            append(store, "notif_fixed")

    def test_other_users_records_are_invisible(self, store, clock):
        other = NotificationRecordStore("someone-else", clock)
        record = append(other)

        with pytest.raises(NotFoundError):
            store.get(record.record_id)

    def test_get_by_delivery_id(self, store):
        record = append(store, delivery_id="dlv_1")

        assert store.get_by_delivery_id("dlv_1").record_id == record.record_id
        assert (
            NotificationRecordStore.find_by_delivery_id("dlv_1").record_id
            == record.record_id
        )

    def test_unknown_delivery_id(self, store):
        with pytest.raises(NotFoundError):
            NotificationRecordStore.find_by_delivery_id("dlv_missing")


@pytest.mark.django_db
class TestLifecycleInvariants:
    """Invariants enforced by update()."""

    def test_read_requires_delivery(self, store):
        record = append(store, is_scheduled=True)

        with pytest.raises(InvalidStateError):
            store.update(record.record_id, is_read=True)

    def test_read_together_with_delivery_is_allowed(self, store):
        record = append(store, is_scheduled=True)

        updated = store.update(record.record_id, is_delivered=True, is_read=True)

        assert updated.is_read
        assert updated.is_delivered

    def test_delivery_stamps_delivered_at(self, store, clock):
        record = append(store, is_scheduled=True)
        clock.advance(minutes=5)

        updated = store.update(record.record_id, is_delivered=True)

        assert updated.delivered_at == clock()

    def test_delivery_cannot_revert(self, store):
        record = append(store, is_scheduled=True)
        store.update(record.record_id, is_delivered=True)

        with pytest.raises(InvalidStateError):
            store.update(record.record_id, is_delivered=False)

    def test_delivered_at_is_immutable(self, store, clock):
        record = append(store, is_scheduled=True)
        store.update(record.record_id, is_delivered=True)

        with pytest.raises(InvalidStateError):
            store.update(record.record_id, delivered_at=clock() + timedelta(hours=1))

    def test_created_at_cannot_be_cleared(self, store):
        record = append(store)

        with pytest.raises(InvalidStateError):
            store.update(record.record_id, created_at=None)

    def test_unknown_fields_are_rejected(self, store):
        record = append(store)

        with pytest.raises(ValueError):
            store.update(record.record_id, user_id="someone-else")


@pytest.mark.django_db
class TestQueries:
    """Filtering, counting and summarizing."""

    def test_query_newest_first_without_archived(self, store, clock):
        first = append(store, title="First")
        clock.advance(minutes=1)
        second = append(store, title="Second")
        clock.advance(minutes=1)
        append(store, title="Archived", is_archived=True)

        records = store.query()

        assert [record.record_id for record in records] == [
            second.record_id,
            first.record_id,
        ]

    def test_query_filters(self, store, clock):
        append(store, category="social", notification_type="social")
        clock.advance(minutes=1)
        learning = append(store, category="learning")

        records = store.query(NotificationFilter(category="learning"))
        since = store.query(NotificationFilter(since=clock()))

        assert [record.record_id for record in records] == [learning.record_id]
        assert [record.record_id for record in since] == [learning.record_id]

    def test_unread_count_ignores_archived_and_cancelled(self, store):
        append(store)
        append(store, is_archived=True)
        append(store, is_scheduled=True, is_cancelled=True)
        read = append(store, is_scheduled=True, is_delivered=True)
        store.update(read.record_id, is_read=True)

        assert store.unread_count() == 1

    def test_mark_all_read_only_touches_delivered(self, store):
        delivered = append(store, is_scheduled=True, is_delivered=True)
        pending = append(store, is_scheduled=True)

        updated = store.mark_all_read()

        assert updated == 1
        assert store.get(delivered.record_id).is_read
        assert not store.get(pending.record_id).is_read

    def test_pending_excludes_failed_cancelled_and_delivered(self, store):
        pending = append(store, is_scheduled=True)
        append(store, is_scheduled=True, is_cancelled=True)
        append(store, is_scheduled=True, delivery_failed=True)
        append(store, is_scheduled=True, is_delivered=True)

        assert [record.record_id for record in store.pending()] == [pending.record_id]

    def test_recent_activity_window(self, store, clock):
        old = clock() - timedelta(days=2)
        append(store, is_scheduled=True, is_delivered=True, delivered_at=old)
        recent = append(store, is_scheduled=True, scheduled_for=clock())
        append(store, is_scheduled=True, is_cancelled=True, scheduled_for=clock())

        records = store.recent_activity(clock() - timedelta(days=1))

        assert [record.record_id for record in records] == [recent.record_id]

    def test_count_nudge_records(self, store, clock):
        append(store, data={"nudge_id": "nudge_a"})
        append(store, data={"nudge_id": "nudge_a"})
        append(store, data={"nudge_id": "nudge_b"})

        assert store.count_nudge_records("nudge_a", clock() - timedelta(hours=1)) == 2
        assert store.count_nudge_records("nudge_a", clock() + timedelta(hours=1)) == 0

    def test_summarize(self, store, clock):
        append(store, category="learning")
        append(store, category="learning", notification_type="streak")
        append(store, category="social", notification_type="social")
        clock.advance(days=2)

        summary = store.summarize(clock(), "UTC")

        assert summary.total_notifications == 3
        assert summary.unread_count == 3
        assert summary.today_count == 0
        assert summary.week_count == 3
        assert summary.by_category == {"learning": 2, "social": 1}
        assert summary.by_type == {"reminder": 1, "streak": 1, "social": 1}
        assert len(summary.recent_notifications) == 3

    def test_delete(self, store):
        record = append(store)

        store.delete(record.record_id)

        with pytest.raises(NotFoundError):
            store.get(record.record_id)
