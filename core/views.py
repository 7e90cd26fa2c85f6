"""
Health and readiness endpoints.

Load balancers poll ``/health/`` for liveness and ``/ready/`` before
routing traffic; the per-component endpoints are for operators.
"""

import logging
from typing import Callable, Dict, Optional

from django.core.cache import cache
from django.db import DatabaseError, connection
from django.http import JsonResponse
from django.views import View

logger = logging.getLogger(__name__)

SERVICE_NAME = "digital-license-service"


def check_database() -> Optional[str]:
    """Run a trivial query; returns an error message, or None when healthy."""
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
    except DatabaseError as e:
        logger.warning("Database health check failed: %s", e)
        return str(e)
    return None


def check_cache() -> Optional[str]:
    """Round-trip a value through the cache; returns an error message, or None."""
    try:
        cache.set("health_check", "ok", 10)
        if cache.get("health_check") != "ok":
            return "cache did not return the value written"
    except Exception as e:  # pylint: disable=broad-exception-caught
        # Cache backends raise their own client errors (redis, memcached...).
        logger.warning("Cache health check failed: %s", e)
        return str(e)
    return None


CHECKS: Dict[str, Callable[[], Optional[str]]] = {
    "database": check_database,
    "cache": check_cache,
}


class HealthView(View):
    """Liveness: the process answers."""

    def get(self, _request):
        return JsonResponse({"status": "healthy", "service": SERVICE_NAME})


class ComponentHealthView(View):
    """Health of one backing service, named by ``component``."""

    component = "database"

    def get(self, _request):
        error = CHECKS[self.component]()
        if error is None:
            return JsonResponse({"status": "healthy", self.component: "connected"})
        return JsonResponse(
            {"status": "unhealthy", self.component: "disconnected", "error": error},
            status=503,
        )


class ReadyView(View):
    """Readiness: every backing service answers."""

    def get(self, _request):
        checks = {name: check() is None for name, check in CHECKS.items()}
        ready = all(checks.values())
        return JsonResponse(
            {"status": "ready" if ready else "not_ready", "checks": checks},
            status=200 if ready else 503,
        )
