"""
Activation domain services.

Domain services contain business logic that doesn't naturally
fit within a single entity.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from activations.domain.activation import ActivationOutcome, ActivationResult
from activations.ports.activation_repository import ActivationRepository
from core.domain.time import utc_now
from core.infrastructure.database import with_timeout
from core.metrics import activations_total
from licenses.domain.license_key import LicenseKey

logger = logging.getLogger(__name__)


class ActivationTracker:
    """
    Domain service for binding devices to licenses.

    The tracker never decides on a stale read: the quota check happens at
    the store, in the same atomic operation as the increment. Anything that
    keeps the store from answering (an error, a timeout) resolves to FAILED,
    which callers must treat as not activated.
    """

    def __init__(
        self,
        repository: ActivationRepository,
        timeout: Optional[float] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.repository = repository
        self.timeout = timeout
        self.clock = clock

    async def compare_and_bind(
        self, license_key: LicenseKey, device_fingerprint: str
    ) -> ActivationResult:
        """
        Bind a device to a license if quota is left.

        Args:
            license_key: License as last read
            device_fingerprint: Device to bind

        Returns:
            ActivationResult; FAILED if the store did not answer
        """
        if license_key.is_bound(device_fingerprint):
            result = ActivationResult(
                outcome=ActivationOutcome.ALREADY_BOUND,
                activation_count=license_key.activation_count,
            )
        else:
            try:
                result = await with_timeout(
                    self.repository.compare_and_bind(
                        license_key.id, device_fingerprint, self.clock()
                    ),
                    self.timeout,
                    "device activation",
                )
            except Exception:
                logger.exception(
                    "Device activation failed for license %s; refusing", license_key.id
                )
                result = ActivationResult.failed()

        activations_total.labels(outcome=result.outcome.value).inc()
        logger.info(
            "Activation %s for license %s",
            result.outcome.value,
            license_key.id,
            extra={"activation_count": result.activation_count},
        )
        return result
