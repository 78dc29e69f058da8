"""Signals emitted over the notification record lifecycle."""

from django.dispatch import Signal

# Sent with ``record`` once a record transitions to delivered.
notification_delivered = Signal()
