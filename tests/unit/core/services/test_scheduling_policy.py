"""Unit tests for the scheduling and suppression policy."""

from datetime import UTC, datetime, timedelta

import pytest

from core.enums import DecisionOutcome, SuppressionReason
from core.models import NotificationRecord
from core.schemas.notification import NotificationCandidate
from core.schemas.preferences import (
    CategoryPreferences,
    FrequencyPreferences,
    NotificationPreferences,
    QuietHours,
)
from core.services.scheduling_policy import (
    SchedulingPolicy,
    in_quiet_hours,
    quiet_hours_end,
)

NOON = datetime(2024, 3, 6, 12, 0, tzinfo=UTC)
LATE_NIGHT = datetime(2024, 3, 6, 23, 30, tzinfo=UTC)


def make_preferences(**overrides):
    """Preferences with 22:00-07:00 UTC quiet hours and roomy caps."""
    values = {
        "user_id": "learner-1",
        "quiet_hours": QuietHours(start_time="22:00", end_time="07:00", timezone="UTC"),
        "frequency": FrequencyPreferences(max_per_hour=3, max_per_day=10),
    }
    values.update(overrides)
    return NotificationPreferences(**values)


def make_record(record_id, **fields):
    """Unsaved record; the policy never touches the database."""
    values = {
        "user_id": "learner-1",
        "category": "learning",
        "notification_type": "reminder",
        "priority": "normal",
        "title": "Earlier",
        "created_at": NOON - timedelta(hours=2),
    }
    values.update(fields)
    return NotificationRecord(record_id=record_id, **values)


def delivered_at(record_id, moment):
    return make_record(
        record_id,
        is_scheduled=True,
        is_delivered=True,
        scheduled_for=moment,
        delivered_at=moment,
    )


@pytest.fixture
def policy():
    return SchedulingPolicy(batch_window_seconds=300)


class TestQuietHours:
    """Quiet-hour deferral, including windows that wrap past midnight."""

    def test_defers_to_window_end_next_morning(self, policy):
        candidate = NotificationCandidate(title="Study", category="learning")

        decision = policy.evaluate(candidate, make_preferences(), [], LATE_NIGHT)

        assert decision.outcome == DecisionOutcome.DEFERRED
        assert decision.reason == SuppressionReason.QUIET_HOURS
        assert decision.scheduled_for == datetime(2024, 3, 7, 7, 0, tzinfo=UTC)

    def test_early_morning_defers_to_same_day_end(self, policy):
        now = datetime(2024, 3, 7, 5, 15, tzinfo=UTC)
        candidate = NotificationCandidate(title="Study", category="learning")

        decision = policy.evaluate(candidate, make_preferences(), [], now)

        assert decision.scheduled_for == datetime(2024, 3, 7, 7, 0, tzinfo=UTC)

    def test_midday_is_unaffected(self, policy):
        candidate = NotificationCandidate(title="Study", category="learning")

        decision = policy.evaluate(candidate, make_preferences(), [], NOON)

        assert decision.outcome == DecisionOutcome.ACCEPTED
        assert decision.reason is None
        assert decision.scheduled_for == NOON

    def test_end_of_window_is_outside(self):
        quiet_hours = QuietHours(start_time="22:00", end_time="07:00", timezone="UTC")

        assert in_quiet_hours(datetime(2024, 3, 7, 6, 59, tzinfo=UTC), quiet_hours)
        assert not in_quiet_hours(datetime(2024, 3, 7, 7, 0, tzinfo=UTC), quiet_hours)
        assert in_quiet_hours(datetime(2024, 3, 6, 22, 0, tzinfo=UTC), quiet_hours)

    def test_exception_category_is_not_deferred(self, policy):
        preferences = make_preferences(
            quiet_hours=QuietHours(
                start_time="22:00",
                end_time="07:00",
                timezone="UTC",
                exceptions=["emergency", "deadlines"],
            )
        )
        candidate = NotificationCandidate(title="Due soon", category="deadlines")

        decision = policy.evaluate(candidate, preferences, [], LATE_NIGHT)

        assert decision.outcome == DecisionOutcome.ACCEPTED
        assert decision.scheduled_for == LATE_NIGHT

    def test_disabled_when_quiet_hours_not_respected(self, policy):
        preferences = make_preferences(
            frequency=FrequencyPreferences(respect_quiet_hours=False)
        )
        candidate = NotificationCandidate(title="Study", category="learning")

        decision = policy.evaluate(candidate, preferences, [], LATE_NIGHT)

        assert decision.outcome == DecisionOutcome.ACCEPTED

    def test_window_follows_user_timezone(self, policy):
        # 03:30 UTC is 22:30 the previous evening in New York (EST).
        now = datetime(2024, 1, 10, 3, 30, tzinfo=UTC)
        preferences = make_preferences(
            quiet_hours=QuietHours(
                start_time="22:00", end_time="07:00", timezone="America/New_York"
            )
        )
        candidate = NotificationCandidate(title="Study", category="learning")

        decision = policy.evaluate(candidate, preferences, [], now)

        assert decision.outcome == DecisionOutcome.DEFERRED
        assert decision.scheduled_for == datetime(2024, 1, 10, 12, 0, tzinfo=UTC)

    def test_quiet_hours_end_is_strictly_after(self):
        quiet_hours = QuietHours(start_time="22:00", end_time="07:00", timezone="UTC")
        seven = datetime(2024, 3, 7, 7, 0, tzinfo=UTC)

        assert quiet_hours_end(seven, quiet_hours) == seven + timedelta(days=1)


class TestFrequencyCaps:
    """Hourly and daily caps, and the urgent bypass."""

    def test_fourth_notification_in_an_hour_is_suppressed(self, policy):
        records = [
            delivered_at("r1", NOON - timedelta(minutes=50)),
            delivered_at("r2", NOON - timedelta(minutes=30)),
            delivered_at("r3", NOON - timedelta(minutes=10)),
        ]
        candidate = NotificationCandidate(title="Fourth", category="learning")

        decision = policy.evaluate(candidate, make_preferences(), records, NOON)

        assert decision.outcome == DecisionOutcome.SUPPRESSED
        assert decision.reason == SuppressionReason.HOURLY_CAP
        assert decision.scheduled_for is None

    def test_urgent_bypasses_caps(self, policy):
        records = [
            delivered_at("r1", NOON - timedelta(minutes=50)),
            delivered_at("r2", NOON - timedelta(minutes=30)),
            delivered_at("r3", NOON - timedelta(minutes=10)),
        ]
        candidate = NotificationCandidate(
            title="Exam moved", category="deadlines", priority="urgent"
        )

        decision = policy.evaluate(candidate, make_preferences(), records, NOON)

        assert decision.outcome == DecisionOutcome.ACCEPTED

    def test_record_exactly_one_hour_old_does_not_count(self, policy):
        records = [
            delivered_at("r1", NOON - timedelta(hours=1)),
            delivered_at("r2", NOON - timedelta(minutes=30)),
            delivered_at("r3", NOON - timedelta(minutes=10)),
        ]
        candidate = NotificationCandidate(title="Third", category="learning")

        decision = policy.evaluate(candidate, make_preferences(), records, NOON)

        assert decision.outcome == DecisionOutcome.ACCEPTED

    def test_cancelled_records_do_not_count(self, policy):
        records = [
            delivered_at("r1", NOON - timedelta(minutes=50)),
            delivered_at("r2", NOON - timedelta(minutes=30)),
            make_record(
                "r3",
                is_scheduled=True,
                is_cancelled=True,
                scheduled_for=NOON + timedelta(minutes=20),
            ),
        ]
        candidate = NotificationCandidate(title="Third", category="learning")

        decision = policy.evaluate(candidate, make_preferences(), records, NOON)

        assert decision.outcome == DecisionOutcome.ACCEPTED

    def test_daily_cap(self, policy):
        preferences = make_preferences(
            frequency=FrequencyPreferences(max_per_hour=10, max_per_day=2)
        )
        records = [
            delivered_at("r1", NOON - timedelta(hours=9)),
            delivered_at("r2", NOON - timedelta(hours=5)),
        ]
        candidate = NotificationCandidate(title="Third", category="learning")

        decision = policy.evaluate(candidate, preferences, records, NOON)

        assert decision.outcome == DecisionOutcome.SUPPRESSED
        assert decision.reason == SuppressionReason.DAILY_CAP

    def test_caps_are_checked_at_deferred_time(self, policy):
        # Three deliveries late last night do not block a candidate deferred
        # to 07:00 the next morning.
        records = [
            delivered_at("r1", datetime(2024, 3, 6, 21, 10, tzinfo=UTC)),
            delivered_at("r2", datetime(2024, 3, 6, 21, 30, tzinfo=UTC)),
            delivered_at("r3", datetime(2024, 3, 6, 21, 50, tzinfo=UTC)),
        ]
        candidate = NotificationCandidate(title="Study", category="learning")

        decision = policy.evaluate(candidate, make_preferences(), records, LATE_NIGHT)

        assert decision.outcome == DecisionOutcome.DEFERRED


class TestSwitches:
    """Master switch, category toggles and expiry."""

    def test_kill_switch_suppresses_everything(self, policy):
        preferences = make_preferences(global_enabled=False)
        candidate = NotificationCandidate(title="Study", category="learning")

        decision = policy.evaluate(candidate, preferences, [], NOON)

        assert decision.outcome == DecisionOutcome.SUPPRESSED
        assert decision.reason == SuppressionReason.GLOBAL_DISABLED

    def test_kill_switch_lets_emergency_through(self, policy):
        preferences = make_preferences(global_enabled=False)
        candidate = NotificationCandidate(title="Campus closed", category="emergency")

        decision = policy.evaluate(candidate, preferences, [], NOON)

        assert decision.outcome == DecisionOutcome.ACCEPTED

    def test_disabled_category(self, policy):
        candidate = NotificationCandidate(title="Sale", category="marketing")

        decision = policy.evaluate(candidate, make_preferences(), [], NOON)

        assert decision.outcome == DecisionOutcome.SUPPRESSED
        assert decision.reason == SuppressionReason.CATEGORY_DISABLED

    def test_disabled_emergency_category_still_delivers(self, policy):
        preferences = make_preferences(categories=CategoryPreferences(emergency=False))
        candidate = NotificationCandidate(title="Campus closed", category="emergency")

        decision = policy.evaluate(candidate, preferences, [], NOON)

        assert decision.outcome == DecisionOutcome.ACCEPTED

    def test_expired_candidate(self, policy):
        candidate = NotificationCandidate(
            title="Live session", category="learning", expires_at=NOON
        )

        decision = policy.evaluate(candidate, make_preferences(), [], NOON)

        assert decision.outcome == DecisionOutcome.SUPPRESSED
        assert decision.reason == SuppressionReason.EXPIRED

    def test_past_requested_time_is_clamped_to_now(self, policy):
        candidate = NotificationCandidate(
            title="Late", category="learning", requested_time=NOON - timedelta(hours=3)
        )

        decision = policy.evaluate(candidate, make_preferences(), [], NOON)

        assert decision.outcome == DecisionOutcome.ACCEPTED
        assert decision.scheduled_for == NOON


class TestBatching:
    """Merging candidates into nearby pending records of the same category."""

    @pytest.fixture
    def pending(self):
        return make_record(
            "pending-1",
            is_scheduled=True,
            scheduled_for=NOON + timedelta(minutes=2),
        )

    def test_similar_pending_record_absorbs_candidate(self, policy, pending):
        candidate = NotificationCandidate(
            title="Another",
            category="learning",
            requested_time=NOON + timedelta(minutes=4),
        )

        decision = policy.evaluate(candidate, make_preferences(), [pending], NOON)

        assert decision.outcome == DecisionOutcome.BATCHED
        assert decision.reason == SuppressionReason.BATCHED_WITH_PENDING
        assert decision.batch_target_id == "pending-1"
        assert decision.scheduled_for == pending.scheduled_for

    def test_closest_pending_record_wins(self, policy, pending):
        further = make_record(
            "pending-2",
            is_scheduled=True,
            scheduled_for=NOON + timedelta(minutes=8),
        )
        candidate = NotificationCandidate(
            title="Another",
            category="learning",
            requested_time=NOON + timedelta(minutes=6),
        )

        decision = policy.evaluate(
            candidate, make_preferences(), [pending, further], NOON
        )

        assert decision.batch_target_id == "pending-2"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"category": "social"},
            {"priority": "urgent"},
            {"batchable": False},
            {"requested_time": NOON + timedelta(minutes=10)},
        ],
    )
    def test_not_batched(self, policy, pending, overrides):
        values = {
            "title": "Another",
            "category": "learning",
            "requested_time": NOON + timedelta(minutes=4),
        }
        values.update(overrides)

        decision = policy.evaluate(
            NotificationCandidate(**values), make_preferences(), [pending], NOON
        )

        assert decision.outcome == DecisionOutcome.ACCEPTED

    def test_batching_can_be_switched_off(self, policy, pending):
        preferences = make_preferences(
            frequency=FrequencyPreferences(batch_similar=False)
        )
        candidate = NotificationCandidate(
            title="Another",
            category="learning",
            requested_time=NOON + timedelta(minutes=4),
        )

        decision = policy.evaluate(candidate, preferences, [pending], NOON)

        assert decision.outcome == DecisionOutcome.ACCEPTED

    @pytest.mark.parametrize(
        "owner", [{"reminder_id": "reminder_a"}, {"nudge_id": "nudge_a"}]
    )
    def test_record_owned_by_reminder_or_nudge_is_not_a_target(self, policy, owner):
        owned = make_record(
            "owned-1",
            is_scheduled=True,
            scheduled_for=NOON + timedelta(minutes=2),
            data=owner,
        )
        candidate = NotificationCandidate(
            title="Another",
            category="learning",
            requested_time=NOON + timedelta(minutes=4),
        )

        decision = policy.evaluate(candidate, make_preferences(), [owned], NOON)

        assert decision.outcome == DecisionOutcome.ACCEPTED

    def test_delivered_record_is_not_a_batch_target(self, policy):
        delivered = delivered_at("done-1", NOON - timedelta(minutes=1))
        candidate = NotificationCandidate(title="Another", category="learning")

        decision = policy.evaluate(candidate, make_preferences(), [delivered], NOON)

        assert decision.outcome == DecisionOutcome.ACCEPTED
