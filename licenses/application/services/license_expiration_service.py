"""
License expiration service.

Applies lazy expiration: a license past its expiry is moved to EXPIRED the
first time it is looked at, by whichever request gets there first.
"""
import logging
from datetime import datetime
from typing import Callable, Optional

from core.domain.events import EventBus
from core.domain.time import utc_now
from core.metrics import license_expirations_total
from core.infrastructure.database import with_timeout
from licenses.domain.events import LicenseExpired
from licenses.domain.expiration import ExpirationPolicy
from licenses.domain.license_key import LicenseKey
from licenses.ports.license_key_repository import LicenseKeyRepository

logger = logging.getLogger(__name__)


class LicenseExpirationService:
    """Persists the ACTIVE to EXPIRED transition of licenses found past expiry."""

    def __init__(
        self,
        repository: LicenseKeyRepository,
        event_bus: EventBus,
        timeout: Optional[float] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.repository = repository
        self.event_bus = event_bus
        self.timeout = timeout
        self.clock = clock

    async def expire_if_due(self, license_key: LicenseKey) -> LicenseKey:
        """
        Expire a license whose access window has closed.

        The store update is conditional on the license still being active,
        so concurrent callers can all call this and only one transition is
        recorded. A store failure is logged; the returned license is expired
        either way.

        Args:
            license_key: License as read from the store

        Returns:
            The license, with EXPIRED status if it is past expiry
        """
        now = self.clock()
        if not license_key.is_active or not ExpirationPolicy.is_expired(
            license_key.expires_at, now
        ):
            return license_key

        try:
            transitioned = await with_timeout(
                self.repository.mark_expired(license_key.id, now),
                self.timeout,
                "license expiry",
            )
        except Exception:
            logger.exception("Could not persist expiry of license %s", license_key.id)
            return license_key.mark_expired(now)

        if transitioned:
            license_expirations_total.inc()
            logger.info(
                "License %s expired",
                license_key.id,
                extra={"expires_at": license_key.expires_at.isoformat()},
            )
            await self.event_bus.publish(
                LicenseExpired(license_id=license_key.id, expires_at=license_key.expires_at)
            )
        return license_key.mark_expired(now)
