"""Root URL configuration for the notification service."""

from django.urls import include, path

urlpatterns = [
    path("api/v1/notification/", include("core.urls")),
]
