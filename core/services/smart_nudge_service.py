"""Smart nudge engine.

Nudge rules listen for behavioural events emitted by the app (inactivity,
a broken streak, a finished quiz). When a rule's event arrives it is
evaluated against the user's nudge preferences, its own gating conditions
and its firing history; rules that pass synthesize a personalized candidate
and submit it to the notification scheduling policy.
"""

import re
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

from django.conf import settings
from django.utils import timezone

import structlog

from core.constants import DEFAULT_NUDGE_EFFECTIVENESS, NUDGE_EFFECTIVENESS_WEIGHT
from core.enums import (
    DecisionOutcome,
    NotificationCategory,
    NotificationPriority,
    NotificationType,
    NudgeFrequencyType,
    NudgeState,
    NudgeType,
    SuppressionReason,
    TriggerEvent,
)
from core.exceptions import NotificationServiceError
from core.models import NudgeActivity, SmartNudge
from core.repositories import NudgeStore
from core.repositories.notification_record_repository import local_midnight
from core.schemas.notification import NotificationCandidate
from core.schemas.nudge import (
    NudgeCondition,
    NudgeContent,
    NudgeCreateRequest,
    NudgeEvaluation,
    NudgeFrequency,
)
from core.schemas.preferences import NotificationPreferences
from core.services.notification_service import (
    NotificationService,
    build_notification_service,
)
from core.services.time_windows import (
    get_zone,
    in_inclusive_window,
    local_weekday,
    parse_hhmm,
    to_local,
)

logger = structlog.get_logger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*(\w+)\s*\}\}")

# Preference toggle governing each nudge type; unlisted types are governed
# by the master nudge switch alone.
NUDGE_TYPE_TOGGLES = {
    NudgeType.LEARNING_REMINDER.value: "learning_reminders",
    NudgeType.STREAK_MAINTENANCE.value: "streak_maintenance",
    NudgeType.PERFORMANCE_INSIGHT.value: "performance_insights",
    NudgeType.PRACTICE_ENCOURAGEMENT.value: "motivational_messages",
    NudgeType.HABIT_FORMATION.value: "motivational_messages",
    NudgeType.GOAL_PROGRESS.value: "motivational_messages",
}

NUDGE_TYPE_CATEGORIES = {
    NudgeType.SOCIAL_ENGAGEMENT.value: NotificationCategory.SOCIAL.value,
}

FREQUENCY_HOURS = {
    NudgeFrequencyType.DAILY.value: 24,
    NudgeFrequencyType.WEEKLY.value: 24 * 7,
}

DEFAULT_NUDGES = [
    {
        "nudge_type": NudgeType.LEARNING_REMINDER.value,
        "trigger_event": TriggerEvent.INACTIVITY.value,
        "trigger_delay_minutes": 60,
        "condition": {
            "time_of_day": {"start": "09:00", "end": "21:00"},
            "day_of_week": [1, 2, 3, 4, 5],
        },
        "content": {
            "title": "📚 Time to learn!",
            "body": "You haven't studied today. Let's continue your learning journey!",
            "emoji": "📚",
            "action_text": "Start Learning",
            "deep_link": "/lessons",
            "variables": {"userName": "Student"},
        },
        "frequency": {"type": NudgeFrequencyType.DAILY.value, "max_per_day": 1},
        "effectiveness": DEFAULT_NUDGE_EFFECTIVENESS,
    },
    {
        "nudge_type": NudgeType.STREAK_MAINTENANCE.value,
        "trigger_event": TriggerEvent.STREAK_BROKEN.value,
        "trigger_delay_minutes": 30,
        "condition": {"time_of_day": {"start": "10:00", "end": "20:00"}},
        "content": {
            "title": "🔥 Keep your streak alive!",
            "body": (
                "Don't break your {{streakDays}}-day learning streak. "
                "Study for just 10 minutes!"
            ),
            "emoji": "🔥",
            "action_text": "Continue Streak",
            "deep_link": "/dashboard",
            "variables": {"streakDays": "7"},
        },
        "frequency": {"type": NudgeFrequencyType.DAILY.value, "max_per_day": 2},
        "effectiveness": 0.8,
    },
]


def personalize(content: NudgeContent, context: dict[str, Any]) -> NudgeContent:
    """Substitute ``{{name}}`` tokens in title and body.

    Values come from the trigger context, falling back to the rule's own
    ``variables``. Tokens with no value in either are left untouched.
    """

    def _replace(match: re.Match) -> str:
        name = match.group(1)
        value = context.get(name)
        if value is None or value == "":
            value = content.variables.get(name)
        return match.group(0) if value is None else str(value)

    return content.model_copy(
        update={
            "title": PLACEHOLDER_PATTERN.sub(_replace, content.title),
            "body": PLACEHOLDER_PATTERN.sub(_replace, content.body),
        }
    )


class SmartNudgeService:
    """Evaluates and fires one user's nudge rules."""

    def __init__(
        self,
        user_id: str,
        notification_service: NotificationService | None = None,
        nudge_store: NudgeStore | None = None,
        clock: Callable[[], datetime] | None = None,
        adaptive_unread_threshold: int | None = None,
    ) -> None:
        """Initialize the nudge engine.

        Args:
            user_id: Owner of the rules.
            notification_service: Scheduling entry point candidates go to.
            nudge_store: Persistence for rules and activity.
            clock: Source of the current time; defaults to the notification
                service's clock.
            adaptive_unread_threshold: Unread count at which nudges back off;
                defaults to ``NUDGE_ADAPTIVE_UNREAD_THRESHOLD``.
        """
        self.user_id = user_id
        self.notifications = notification_service or build_notification_service(
            user_id, clock
        )
        self.store = nudge_store or NudgeStore(user_id)
        self.clock = clock or self.notifications.clock
        if adaptive_unread_threshold is None:
            adaptive_unread_threshold = settings.NUDGE_ADAPTIVE_UNREAD_THRESHOLD
        self.adaptive_unread_threshold = adaptive_unread_threshold

    # Rule management

    def seed_default_nudges(self) -> list[SmartNudge]:
        """Create the starter rules unless the user already has rules.

        Returns:
            The rules created; empty when the user already had some.
        """
        if self.store.has_rules():
            return []

        created = [self.store.create(**rule) for rule in DEFAULT_NUDGES]
        logger.info("default_nudges_seeded", user_id=self.user_id, count=len(created))
        return created

    def create_nudge(self, request: NudgeCreateRequest) -> SmartNudge:
        """Persist a rule configured by the user or an admin."""
        nudge = self.store.create(
            nudge_type=request.nudge_type,
            trigger_event=request.trigger.event,
            trigger_delay_minutes=request.trigger.delay,
            condition=request.condition.model_dump(mode="json", exclude_none=True),
            content=request.content.model_dump(mode="json"),
            frequency=request.frequency.model_dump(mode="json", exclude_none=True),
            max_triggers=request.max_triggers,
            is_active=request.is_active,
        )
        logger.info(
            "nudge_created",
            user_id=self.user_id,
            nudge_id=nudge.nudge_id,
            nudge_type=nudge.nudge_type,
            trigger_event=nudge.trigger_event,
        )
        return nudge

    def get_user_nudges(self) -> list[SmartNudge]:
        """Return every rule of the user, seeding the defaults first."""
        self.seed_default_nudges()
        return self.store.all_rules()

    def get_nudge(self, nudge_id: str) -> SmartNudge:
        """Return one rule."""
        return self.store.get(nudge_id)

    def deactivate_nudge(self, nudge_id: str) -> SmartNudge:
        """Switch a rule off. Rules are never deleted."""
        nudge = self.store.get(nudge_id)
        if nudge.is_active:
            nudge.is_active = False
            self.store.save(nudge, "is_active")
            logger.info("nudge_deactivated", user_id=self.user_id, nudge_id=nudge_id)
        return nudge

    def update_nudge_effectiveness(self, nudge_id: str, was_effective: bool) -> SmartNudge:
        """Fold one piece of feedback into the rule's effectiveness score.

        The score is an exponential moving average with weight 0.1, kept
        within [0, 1]. It is advisory; nothing disables rules based on it.
        """
        nudge = self.store.get(nudge_id)
        sample = 1.0 if was_effective else 0.0
        score = (
            nudge.effectiveness * (1 - NUDGE_EFFECTIVENESS_WEIGHT)
            + sample * NUDGE_EFFECTIVENESS_WEIGHT
        )
        nudge.effectiveness = min(1.0, max(0.0, score))
        self.store.save(nudge, "effectiveness")

        logger.info(
            "nudge_effectiveness_updated",
            user_id=self.user_id,
            nudge_id=nudge_id,
            was_effective=was_effective,
            effectiveness=round(nudge.effectiveness, 4),
        )
        return nudge

    def record_activity(self, event: str = TriggerEvent.APP_OPEN.value) -> NudgeActivity:
        """Note that the user was active, re-arming the inactivity check."""
        return self.store.record_activity(event, self.clock())

    # Evaluation

    def trigger_nudges(
        self, event: str, context: dict[str, Any] | None = None
    ) -> list[NudgeEvaluation]:
        """Evaluate every active rule listening for ``event``.

        Errors while submitting one rule's candidate are logged and do not
        stop the remaining rules.

        Args:
            event: Behavioural event name.
            context: Values available for personalization.

        Returns:
            One evaluation per matching rule.
        """
        context = context or {}
        if event != TriggerEvent.INACTIVITY.value:
            self.record_activity(event)
        self.seed_default_nudges()

        preferences = self.notifications.get_preferences()
        evaluations = []
        for nudge in self.store.for_event(event):
            try:
                evaluations.append(self._evaluate(nudge, context, preferences))
            except NotificationServiceError as e:
                record_id = getattr(e, "record_id", None)
                logger.warning(
                    "nudge_execution_failed",
                    user_id=self.user_id,
                    nudge_id=nudge.nudge_id,
                    record_id=record_id,
                    error_code=e.error_code,
                    error=str(e),
                )
                # The record exists, flagged delivery_failed, so the firing counts
                if record_id:
                    self.store.record_triggered(nudge, self.clock())
                evaluations.append(
                    NudgeEvaluation(
                        nudge_id=nudge.nudge_id,
                        state=NudgeState.FIRED,
                        record_id=record_id,
                    )
                )

        logger.info(
            "nudges_triggered",
            user_id=self.user_id,
            trigger_event=event,
            evaluated=len(evaluations),
            fired=sum(1 for ev in evaluations if ev.state == NudgeState.FIRED),
        )
        return evaluations

    def _evaluate(
        self,
        nudge: SmartNudge,
        context: dict[str, Any],
        preferences: NotificationPreferences,
    ) -> NudgeEvaluation:
        now = self.clock()
        reason = self._suppression_reason(nudge, preferences, now)
        if reason is not None:
            logger.info(
                "nudge_suppressed",
                user_id=self.user_id,
                nudge_id=nudge.nudge_id,
                reason=reason,
            )
            return NudgeEvaluation(
                nudge_id=nudge.nudge_id, state=NudgeState.SUPPRESSED, reason=reason
            )
        return self._fire(nudge, context, now)

    def _suppression_reason(
        self,
        nudge: SmartNudge,
        preferences: NotificationPreferences,
        now: datetime,
    ) -> SuppressionReason | None:
        toggles = preferences.smart_nudges
        toggle = NUDGE_TYPE_TOGGLES.get(nudge.nudge_type)
        if not toggles.enabled or (toggle and not getattr(toggles, toggle)):
            return SuppressionReason.NUDGES_DISABLED

        if nudge.max_triggers is not None and nudge.trigger_count >= nudge.max_triggers:
            nudge.is_active = False
            self.store.save(nudge, "is_active")
            logger.info(
                "nudge_max_triggers_reached",
                user_id=self.user_id,
                nudge_id=nudge.nudge_id,
                trigger_count=nudge.trigger_count,
            )
            return SuppressionReason.MAX_TRIGGERS_REACHED

        tz = get_zone(preferences.quiet_hours.timezone)
        condition = NudgeCondition.model_validate(nudge.condition or {})
        if condition.time_of_day is not None and not in_inclusive_window(
            to_local(now, tz).time().replace(second=0, microsecond=0),
            parse_hhmm(condition.time_of_day.start),
            parse_hhmm(condition.time_of_day.end),
        ):
            return SuppressionReason.OUTSIDE_TIME_OF_DAY

        if condition.day_of_week is not None and local_weekday(
            now, tz
        ) not in condition.day_of_week:
            return SuppressionReason.WRONG_DAY_OF_WEEK

        frequency = NudgeFrequency.model_validate(nudge.frequency or {})
        if self._too_soon(nudge, frequency, now):
            return SuppressionReason.FREQUENCY_LIMIT

        if frequency.max_per_day is not None:
            fired_today = self.notifications.records.count_nudge_records(
                nudge.nudge_id, local_midnight(now, preferences.quiet_hours.timezone)
            )
            if fired_today >= frequency.max_per_day:
                return SuppressionReason.FREQUENCY_LIMIT

        if (
            toggles.adaptive_frequency
            and self.notifications.get_badge_count() >= self.adaptive_unread_threshold
        ):
            return SuppressionReason.ADAPTIVE_BACKOFF
        return None

    def _too_soon(
        self, nudge: SmartNudge, frequency: NudgeFrequency, now: datetime
    ) -> bool:
        if frequency.type == NudgeFrequencyType.ONCE:
            return nudge.trigger_count > 0 or nudge.last_triggered is not None
        if nudge.last_triggered is None:
            return False

        if frequency.type == NudgeFrequencyType.CUSTOM:
            hours = frequency.interval
        else:
            hours = FREQUENCY_HOURS.get(frequency.type)
        if hours is None:
            return False
        return now - nudge.last_triggered < timedelta(hours=hours)

    def _fire(
        self, nudge: SmartNudge, context: dict[str, Any], now: datetime
    ) -> NudgeEvaluation:
        content = personalize(NudgeContent.model_validate(nudge.content), context)
        candidate = NotificationCandidate(
            title=content.title,
            body=content.body,
            category=NUDGE_TYPE_CATEGORIES.get(
                nudge.nudge_type, NotificationCategory.LEARNING.value
            ),
            notification_type=NotificationType.SMART_NUDGE,
            priority=NotificationPriority.NORMAL,
            data={
                "nudge_id": nudge.nudge_id,
                "type": NotificationType.SMART_NUDGE.value,
                "deep_link": content.deep_link,
            },
            requested_time=now + timedelta(minutes=nudge.trigger_delay_minutes),
            batchable=False,
        )

        result = self.notifications.schedule_notification(candidate)
        if result.outcome == DecisionOutcome.SUPPRESSED:
            logger.info(
                "nudge_candidate_suppressed",
                user_id=self.user_id,
                nudge_id=nudge.nudge_id,
                reason=result.reason,
            )
            return NudgeEvaluation(
                nudge_id=nudge.nudge_id,
                state=NudgeState.SUPPRESSED,
                reason=result.reason,
                outcome=result.outcome,
            )

        self.store.record_triggered(nudge, now)
        logger.info(
            "nudge_fired",
            user_id=self.user_id,
            nudge_id=nudge.nudge_id,
            nudge_type=nudge.nudge_type,
            record_id=result.record_id,
            outcome=result.outcome,
            trigger_count=nudge.trigger_count,
        )
        return NudgeEvaluation(
            nudge_id=nudge.nudge_id,
            state=NudgeState.FIRED,
            outcome=result.outcome,
            record_id=result.record_id,
        )


def build_smart_nudge_service(
    user_id: str, clock: Callable[[], datetime] | None = None
) -> SmartNudgeService:
    """Build a nudge engine wired to the production notification service."""
    return SmartNudgeService(user_id, build_notification_service(user_id, clock))


def run_inactivity_check(now: datetime | None = None) -> int:
    """Fire the ``inactivity`` event for every user idle past the threshold.

    Each idle period is reported once; new activity re-arms the check.

    Returns:
        Number of users the event was fired for.
    """
    now = now or timezone.now()
    cutoff = now - timedelta(minutes=settings.NUDGE_INACTIVITY_MINUTES)
    user_ids = NudgeStore.inactive_users(cutoff)

    for user_id in user_ids:
        service = build_smart_nudge_service(user_id, lambda: now)
        service.trigger_nudges(
            TriggerEvent.INACTIVITY.value,
            {"inactiveMinutes": settings.NUDGE_INACTIVITY_MINUTES},
        )
        service.store.mark_inactivity_notified(now)

    logger.info("inactivity_check_completed", inactive_users=len(user_ids))
    return len(user_ids)
