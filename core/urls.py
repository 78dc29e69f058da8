"""URL routing configuration for core application."""

from django.urls import path

from .views import (
    ActivityView,
    ArchiveView,
    CancelAllView,
    CancelNotificationView,
    DeliveryReceivedView,
    DeliveryResponseView,
    IncomingNotificationsView,
    MarkAllReadView,
    MarkReadView,
    NotificationDetailView,
    NotificationListView,
    NotificationSummaryView,
    NudgeDeactivateView,
    NudgeEffectivenessView,
    NudgeListView,
    NudgeTriggerView,
    PermissionRequestView,
    PermissionStatusView,
    PreferencesView,
    PushTokenView,
    ReminderCompleteView,
    ReminderDetailView,
    ReminderListView,
    ReminderSnoozeView,
    ScheduleNotificationView,
    SendNotificationView,
)

urlpatterns = [
    # Notification endpoints
    path(
        "users/<str:user_id>/notifications",
        NotificationListView.as_view(),
        name="notification-list",
    ),
    path(
        "users/<str:user_id>/notifications/schedule",
        ScheduleNotificationView.as_view(),
        name="notification-schedule",
    ),
    path(
        "users/<str:user_id>/notifications/send",
        SendNotificationView.as_view(),
        name="notification-send",
    ),
    path(
        "users/<str:user_id>/notifications/incoming",
        IncomingNotificationsView.as_view(),
        name="notification-incoming",
    ),
    path(
        "users/<str:user_id>/notifications/summary",
        NotificationSummaryView.as_view(),
        name="notification-summary",
    ),
    path(
        "users/<str:user_id>/notifications/read-all",
        MarkAllReadView.as_view(),
        name="notification-read-all",
    ),
    path(
        "users/<str:user_id>/notifications/cancel-all",
        CancelAllView.as_view(),
        name="notification-cancel-all",
    ),
    path(
        "users/<str:user_id>/notifications/<str:record_id>",
        NotificationDetailView.as_view(),
        name="notification-detail",
    ),
    path(
        "users/<str:user_id>/notifications/<str:record_id>/read",
        MarkReadView.as_view(),
        name="notification-read",
    ),
    path(
        "users/<str:user_id>/notifications/<str:record_id>/archive",
        ArchiveView.as_view(),
        name="notification-archive",
    ),
    path(
        "users/<str:user_id>/notifications/<str:record_id>/cancel",
        CancelNotificationView.as_view(),
        name="notification-cancel",
    ),
    # Preference and permission endpoints
    path(
        "users/<str:user_id>/preferences",
        PreferencesView.as_view(),
        name="preferences",
    ),
    path(
        "users/<str:user_id>/push-token",
        PushTokenView.as_view(),
        name="push-token",
    ),
    path(
        "users/<str:user_id>/permissions",
        PermissionStatusView.as_view(),
        name="permission-status",
    ),
    path(
        "users/<str:user_id>/permissions/request",
        PermissionRequestView.as_view(),
        name="permission-request",
    ),
    # Smart nudge endpoints
    path(
        "users/<str:user_id>/nudges",
        NudgeListView.as_view(),
        name="nudge-list",
    ),
    path(
        "users/<str:user_id>/nudges/trigger",
        NudgeTriggerView.as_view(),
        name="nudge-trigger",
    ),
    path(
        "users/<str:user_id>/nudges/<str:nudge_id>/effectiveness",
        NudgeEffectivenessView.as_view(),
        name="nudge-effectiveness",
    ),
    path(
        "users/<str:user_id>/nudges/<str:nudge_id>/deactivate",
        NudgeDeactivateView.as_view(),
        name="nudge-deactivate",
    ),
    path(
        "users/<str:user_id>/activity",
        ActivityView.as_view(),
        name="activity",
    ),
    # Reminder endpoints
    path(
        "users/<str:user_id>/reminders",
        ReminderListView.as_view(),
        name="reminder-list",
    ),
    path(
        "users/<str:user_id>/reminders/<str:reminder_id>",
        ReminderDetailView.as_view(),
        name="reminder-detail",
    ),
    path(
        "users/<str:user_id>/reminders/<str:reminder_id>/snooze",
        ReminderSnoozeView.as_view(),
        name="reminder-snooze",
    ),
    path(
        "users/<str:user_id>/reminders/<str:reminder_id>/complete",
        ReminderCompleteView.as_view(),
        name="reminder-complete",
    ),
    # Delivery transport callbacks
    path(
        "delivery/received",
        DeliveryReceivedView.as_view(),
        name="delivery-received",
    ),
    path(
        "delivery/response",
        DeliveryResponseView.as_view(),
        name="delivery-response",
    ),
]
