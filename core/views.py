"""API views for core application.

Every user-scoped endpoint takes the user id from the path and builds that
user's services per request. Request bodies are validated with pydantic;
validation and service errors are rendered by the DRF exception handler.
"""

import structlog
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from core.pagination import NotificationRecordPagination
from core.schemas.notification import (
    DeliveryReceivedRequest,
    DeliveryResponseRequest,
    ImmediateNotificationRequest,
    IncomingNotificationsRequest,
    NotificationFilter,
    NotificationRecordDetail,
    ScheduleNotificationRequest,
)
from core.schemas.nudge import (
    ActivityRequest,
    NudgeCreateRequest,
    NudgeEffectivenessRequest,
    NudgeTriggerRequest,
    SmartNudgeDetail,
)
from core.schemas.preferences import PreferencesUpdate, PushTokenRequest
from core.schemas.reminder import ReminderCreateRequest, ReminderDetail, SnoozeRequest
from core.services.notification_service import (
    build_notification_service,
    service_for_delivery,
)
from core.services.reminder_service import build_reminder_service
from core.services.smart_nudge_service import build_smart_nudge_service

logger = structlog.get_logger(__name__)


def _record_response(record) -> dict:
    return NotificationRecordDetail.model_validate(record).to_response()


def _reminder_response(reminder) -> dict:
    return ReminderDetail.model_validate(reminder).to_response()


# Notifications


class ScheduleNotificationView(APIView):
    """Schedule a notification for a future time.

    Suppression by the scheduling policy is a 200 with
    ``outcome="suppressed"``, not an error.
    """

    def post(self, request, user_id):
        """Handle POST request to schedule a notification.

        Args:
            request: HTTP request carrying a ScheduleNotificationRequest body.
            user_id: Owner of the notification.

        Returns:
            200 OK with the ScheduleResult.
            400 Bad Request if validation fails.
            403 Forbidden if push permission is missing.
            502 Bad Gateway if the delivery hand-off failed.
        """
        body = ScheduleNotificationRequest.model_validate(request.data)
        logger.info(
            "schedule_notification_requested",
            user_id=user_id,
            category=body.category,
            notification_type=body.notification_type,
        )

        result = build_notification_service(user_id).schedule_local_notification(
            title=body.title,
            body=body.body,
            scheduled_for=body.scheduled_for,
            data=body.data,
            category=body.category,
            notification_type=body.notification_type,
            priority=body.priority,
            expires_at=body.expires_at,
        )
        return Response(result.to_response(), status=status.HTTP_200_OK)


class SendNotificationView(APIView):
    """Send a notification right away (still subject to the policy)."""

    def post(self, request, user_id):
        """Handle POST request to send an immediate notification.

        Returns:
            200 OK with the ScheduleResult.
        """
        body = ImmediateNotificationRequest.model_validate(request.data)
        logger.info(
            "send_notification_requested",
            user_id=user_id,
            priority=body.priority,
            category=body.category,
        )

        result = build_notification_service(user_id).send_immediate_notification(
            title=body.title,
            body=body.body,
            data=body.data,
            priority=body.priority,
            category=body.category,
            notification_type=body.notification_type,
        )
        return Response(result.to_response(), status=status.HTTP_200_OK)


class IncomingNotificationsView(APIView):
    """Ingest a batch of server-side notifications fetched by the app."""

    def post(self, request, user_id):
        """Handle POST request with server-side notifications.

        Returns:
            200 OK with one ScheduleResult per notification, in order.
        """
        body = IncomingNotificationsRequest.model_validate(request.data)
        logger.info(
            "incoming_notifications_received",
            user_id=user_id,
            count=len(body.notifications),
        )

        results = build_notification_service(user_id).ingest_server_notifications(
            body.notifications
        )
        return Response(
            {"results": [result.to_response() for result in results]},
            status=status.HTTP_200_OK,
        )


class NotificationListView(APIView):
    """Paginated list of a user's notifications, newest first.

    Query parameters: ``category``, ``notificationType``, ``since``,
    ``isRead``, ``includeArchived``, ``page`` and ``pageSize``.
    """

    def get(self, request, user_id):
        filters = NotificationFilter.model_validate(request.query_params.dict())
        records = build_notification_service(user_id).get_user_notifications(filters)

        paginator = NotificationRecordPagination()
        page = paginator.paginate_queryset(records, request, view=self) or []

        logger.info(
            "notifications_listed",
            user_id=user_id,
            total=len(records),
            returned=len(page),
        )
        return paginator.get_paginated_response(
            [_record_response(record) for record in page]
        )


class NotificationSummaryView(APIView):
    """Counts for the notification centre and the app icon badge."""

    def get(self, _request, user_id):
        summary = build_notification_service(user_id).get_notification_summary()
        return Response(summary.to_response(), status=status.HTTP_200_OK)


class MarkAllReadView(APIView):
    """Mark every delivered notification as read."""

    def post(self, _request, user_id):
        updated = build_notification_service(user_id).mark_all_as_read()
        logger.info("all_notifications_marked_read", user_id=user_id, updated=updated)
        return Response({"updated": updated}, status=status.HTTP_200_OK)


class CancelAllView(APIView):
    """Cancel every pending notification."""

    def post(self, _request, user_id):
        cancelled = build_notification_service(user_id).cancel_all_notifications()
        return Response({"cancelled": cancelled}, status=status.HTTP_200_OK)


class NotificationDetailView(APIView):
    """Retrieve or delete a single notification.

    GET: Retrieve the notification record
    DELETE: Cancel it if still pending and remove it
    """

    def get(self, _request, user_id, record_id):
        record = build_notification_service(user_id).get_notification(record_id)
        return Response(_record_response(record), status=status.HTTP_200_OK)

    def delete(self, _request, user_id, record_id):
        """Delete a notification.

        Returns:
            204 No Content on success.
            404 Not Found if the user has no such notification.
        """
        build_notification_service(user_id).delete_notification(record_id)
        logger.info("notification_deleted", user_id=user_id, record_id=record_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class MarkReadView(APIView):
    """Mark one notification as read.

    A notification that has not been delivered yet cannot be read (409).
    """

    def post(self, _request, user_id, record_id):
        record = build_notification_service(user_id).mark_as_read(record_id)
        return Response(_record_response(record), status=status.HTTP_200_OK)


class ArchiveView(APIView):
    """Hide one notification from the default list."""

    def post(self, _request, user_id, record_id):
        record = build_notification_service(user_id).archive_notification(record_id)
        return Response(_record_response(record), status=status.HTTP_200_OK)


class CancelNotificationView(APIView):
    """Cancel one pending notification. Repeating the call is a no-op."""

    def post(self, _request, user_id, record_id):
        record = build_notification_service(user_id).cancel_notification(record_id)
        return Response(_record_response(record), status=status.HTTP_200_OK)


# Preferences and permissions


class PreferencesView(APIView):
    """Read or partially update a user's notification preferences."""

    def get(self, _request, user_id):
        preferences = build_notification_service(user_id).get_preferences()
        return Response(preferences.to_response(), status=status.HTTP_200_OK)

    def patch(self, request, user_id):
        """Merge a partial update.

        Only the fields present in the body change; nested sections merge
        key by key.

        Returns:
            200 OK with the full preferences after the update.
            400 Bad Request if validation fails.
        """
        update = PreferencesUpdate.model_validate(request.data)
        preferences = build_notification_service(user_id).update_preferences(update)
        logger.info(
            "preferences_updated",
            user_id=user_id,
            fields=sorted(update.model_dump(exclude_unset=True)),
        )
        return Response(preferences.to_response(), status=status.HTTP_200_OK)


class PushTokenView(APIView):
    """Register (or clear, with ``pushToken: null``) the device push token."""

    def put(self, request, user_id):
        body = PushTokenRequest.model_validate(request.data)
        permission = build_notification_service(user_id).register_push_token(
            body.push_token
        )
        logger.info(
            "push_token_registered",
            user_id=user_id,
            cleared=body.push_token is None,
        )
        return Response(permission.to_response(), status=status.HTTP_200_OK)


class PermissionStatusView(APIView):
    """Current push permission state."""

    def get(self, _request, user_id):
        permission = build_notification_service(user_id).get_permission_status()
        return Response(permission.to_response(), status=status.HTTP_200_OK)


class PermissionRequestView(APIView):
    """Ask for push permission."""

    def post(self, _request, user_id):
        result = build_notification_service(user_id).request_permissions()
        return Response(result.to_response(), status=status.HTTP_200_OK)


# Smart nudges


class NudgeListView(APIView):
    """List a user's nudge rules or create a new one.

    GET: All rules; the starter rules are seeded on first access
    POST: Create a rule
    """

    def get(self, _request, user_id):
        nudges = build_smart_nudge_service(user_id).get_user_nudges()
        return Response(
            [SmartNudgeDetail.from_model(nudge).to_response() for nudge in nudges],
            status=status.HTTP_200_OK,
        )

    def post(self, request, user_id):
        """Create a nudge rule.

        Returns:
            201 Created with the rule.
            400 Bad Request if validation fails.
        """
        body = NudgeCreateRequest.model_validate(request.data)
        nudge = build_smart_nudge_service(user_id).create_nudge(body)
        return Response(
            SmartNudgeDetail.from_model(nudge).to_response(),
            status=status.HTTP_201_CREATED,
        )


class NudgeTriggerView(APIView):
    """Report a behavioural event and evaluate the rules listening for it."""

    def post(self, request, user_id):
        """Handle a behavioural event.

        Returns:
            200 OK with one evaluation per matching rule.
        """
        body = NudgeTriggerRequest.model_validate(request.data)
        logger.info("nudge_event_received", user_id=user_id, trigger_event=body.event)

        evaluations = build_smart_nudge_service(user_id).trigger_nudges(
            body.event, body.context
        )
        return Response(
            {"evaluations": [evaluation.to_response() for evaluation in evaluations]},
            status=status.HTTP_200_OK,
        )


class NudgeEffectivenessView(APIView):
    """Feedback on whether the user acted on a nudge."""

    def post(self, request, user_id, nudge_id):
        body = NudgeEffectivenessRequest.model_validate(request.data)
        nudge = build_smart_nudge_service(user_id).update_nudge_effectiveness(
            nudge_id, body.was_effective
        )
        return Response(
            SmartNudgeDetail.from_model(nudge).to_response(), status=status.HTTP_200_OK
        )


class NudgeDeactivateView(APIView):
    """Switch a nudge rule off."""

    def post(self, _request, user_id, nudge_id):
        nudge = build_smart_nudge_service(user_id).deactivate_nudge(nudge_id)
        return Response(
            SmartNudgeDetail.from_model(nudge).to_response(), status=status.HTTP_200_OK
        )


class ActivityView(APIView):
    """Record app activity, re-arming the inactivity check."""

    def post(self, request, user_id):
        body = ActivityRequest.model_validate(request.data)
        activity = build_smart_nudge_service(user_id).record_activity(body.event)
        return Response(
            {
                "userId": activity.user_id,
                "lastEvent": activity.last_event,
                "lastActiveAt": activity.last_active_at.isoformat(),
            },
            status=status.HTTP_200_OK,
        )


# Reminders


class ReminderListView(APIView):
    """List a user's reminders or create a new one.

    GET: Active reminders; ``includeInactive=true`` lists all of them
    POST: Create a reminder and schedule its first occurrence
    """

    def get(self, request, user_id):
        include_inactive = (
            request.query_params.get("includeInactive", "false").lower() == "true"
        )
        reminders = build_reminder_service(user_id).get_reminders(
            active_only=not include_inactive
        )
        return Response(
            [_reminder_response(reminder) for reminder in reminders],
            status=status.HTTP_200_OK,
        )

    def post(self, request, user_id):
        """Create a reminder.

        Returns:
            201 Created with the reminder.
            400 Bad Request if validation fails.
            403 Forbidden if push permission is missing.
        """
        body = ReminderCreateRequest.model_validate(request.data)
        reminder = build_reminder_service(user_id).create_reminder(body)
        return Response(_reminder_response(reminder), status=status.HTTP_201_CREATED)


class ReminderDetailView(APIView):
    """Retrieve or cancel a single reminder."""

    def get(self, _request, user_id, reminder_id):
        reminder = build_reminder_service(user_id).get_reminder(reminder_id)
        return Response(_reminder_response(reminder), status=status.HTTP_200_OK)

    def delete(self, _request, user_id, reminder_id):
        build_reminder_service(user_id).cancel_reminder(reminder_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class ReminderSnoozeView(APIView):
    """Postpone a reminder's pending occurrence."""

    def post(self, request, user_id, reminder_id):
        """Snooze a reminder.

        Returns:
            200 OK with the reminder.
            409 Conflict once the snooze limit is reached.
        """
        body = SnoozeRequest.model_validate(request.data or {})
        reminder = build_reminder_service(user_id).snooze_reminder(
            reminder_id, body.minutes
        )
        return Response(_reminder_response(reminder), status=status.HTTP_200_OK)


class ReminderCompleteView(APIView):
    """Mark a reminder done."""

    def post(self, _request, user_id, reminder_id):
        reminder = build_reminder_service(user_id).complete_reminder(reminder_id)
        return Response(_reminder_response(reminder), status=status.HTTP_200_OK)


# Delivery callbacks


class DeliveryReceivedView(APIView):
    """Callback from the delivery transport: a notification arrived."""

    def post(self, request):
        body = DeliveryReceivedRequest.model_validate(request.data)
        record = service_for_delivery(body.delivery_id).handle_delivery_received(
            body.delivery_id
        )
        return Response(_record_response(record), status=status.HTTP_200_OK)


class DeliveryResponseView(APIView):
    """Callback from the delivery transport: the user tapped a notification."""

    def post(self, request):
        body = DeliveryResponseRequest.model_validate(request.data)
        record = service_for_delivery(body.delivery_id).handle_delivery_response(
            body.delivery_id, body.action_id
        )
        return Response(_record_response(record), status=status.HTTP_200_OK)
