"""
App configuration for Digital License Service.
"""

import logging
import sys

from django.apps import AppConfig
from django.conf import settings

logger = logging.getLogger(__name__)

# Management commands that never serve requests
SKIP_OBSERVABILITY_COMMANDS = {"migrate", "makemigrations", "collectstatic", "shell", "check"}


class DigitalLicenseServiceConfig(AppConfig):
    """App configuration for DigitalLicenseService."""

    name = "DigitalLicenseService"
    verbose_name = "Digital License Service"

    def ready(self):
        """Wire event handlers and, when enabled, tracing and metrics."""
        from core.infrastructure.event_handlers import register_event_handlers

        register_event_handlers()

        if not getattr(settings, "OBSERVABILITY_ENABLED", False):
            return
        if len(sys.argv) > 1 and sys.argv[1] in SKIP_OBSERVABILITY_COMMANDS:
            return

        from core.instrumentation import setup_opentelemetry

        setup_opentelemetry()
        logger.info("Observability setup complete")
