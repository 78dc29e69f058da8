"""Django application configuration for core."""

from django.apps import AppConfig
from django.conf import settings

import structlog

logger = structlog.get_logger(__name__)


class CoreConfig(AppConfig):
    """Configuration class for the core application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "core"

    def ready(self) -> None:
        """Configure logging and connect signal receivers."""
        import core.signals.reminder_signals  # noqa: PLC0415, F401

        if not getattr(settings, "TEST_MODE", False):
            from core.logging import setup_logging  # noqa: PLC0415

            setup_logging()
        logger.info("core_app_ready")
