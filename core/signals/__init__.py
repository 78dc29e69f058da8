"""Django signals for the notification record lifecycle.

Receivers live in their own modules and are connected by
``CoreConfig.ready``.
"""

from core.signals.notification_signals import notification_delivered

__all__ = ["notification_delivered"]
