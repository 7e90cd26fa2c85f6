"""
Cache port.

Only read-mostly reference data (products) is cached; license state never
is.
"""
from abc import ABC, abstractmethod
from typing import Any, Optional


class CachePort(ABC):
    """
    Key/value cache with per-entry expiry.

    Implementations must not raise on backend failures: a broken cache
    reads as empty and drops writes.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Return the stored value, or None on a miss."""

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """
        Store a value.

        Args:
            key: Cache key
            value: Picklable value
            ttl: Seconds to keep the entry (None for the backend default)
        """

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Drop an entry if present."""
