"""
Django cache backed CachePort.

Redis in dev and prod, LocMem in tests; see ``CACHES`` in settings.
"""

import logging
from typing import Any, Optional

from asgiref.sync import sync_to_async
from django.core.cache import cache
from django.core.cache.backends.base import DEFAULT_TIMEOUT

from core.infrastructure.cache import CachePort
from core.metrics import cache_hits_total, cache_misses_total

logger = logging.getLogger(__name__)


def _namespace(key: str) -> str:
    """Metric label for a key: everything before the last colon."""
    return key.rsplit(":", 1)[0]


class DjangoCacheAdapter(CachePort):
    """CachePort over ``django.core.cache.cache``."""

    async def get(self, key: str) -> Optional[Any]:
        try:
            value = await sync_to_async(cache.get)(key)
        except Exception:  # pylint: disable=broad-exception-caught
            logger.warning("Cache read of %s failed; treating as a miss", key, exc_info=True)
            return None

        counter = cache_misses_total if value is None else cache_hits_total
        counter.labels(namespace=_namespace(key)).inc()
        return value

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        timeout = DEFAULT_TIMEOUT if ttl is None else ttl
        try:
            await sync_to_async(cache.set)(key, value, timeout)
        except Exception:  # pylint: disable=broad-exception-caught
            logger.warning("Cache write of %s failed", key, exc_info=True)

    async def delete(self, key: str) -> None:
        try:
            await sync_to_async(cache.delete)(key)
        except Exception:  # pylint: disable=broad-exception-caught
            logger.warning("Cache delete of %s failed", key, exc_info=True)


cache_adapter = DjangoCacheAdapter()
