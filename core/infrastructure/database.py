"""
Database utilities: bounded persistence calls.
"""

import asyncio
import logging
from typing import Awaitable, Optional, TypeVar

from core.domain.exceptions import PersistenceFailureError
from core.infrastructure.config import licensing_setting

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def with_timeout(
    awaitable: Awaitable[T],
    timeout: Optional[float] = None,
    operation: str = "persistence call",
) -> T:
    """
    Await a store call, failing if it does not answer in time.

    Usage:
        license_key = await with_timeout(repository.find_by_id(license_id))

    Args:
        awaitable: The store call
        timeout: Seconds to wait (defaults to PERSISTENCE_TIMEOUT_SECONDS)
        operation: Name used in logs and the raised error

    Returns:
        Whatever the store call returned

    Raises:
        PersistenceFailureError: If the call times out
    """
    if timeout is None:
        timeout = licensing_setting("PERSISTENCE_TIMEOUT_SECONDS")
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError as e:
        logger.error("%s timed out after %ss", operation, timeout)
        raise PersistenceFailureError(f"{operation} timed out") from e
