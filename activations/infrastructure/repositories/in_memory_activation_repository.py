"""
In-memory implementation of ActivationRepository.

Shares the license store's lock so that the quota check, the increment and
the binding happen as one step, like the database transaction does.
"""

import asyncio
import uuid
from datetime import datetime
from typing import Dict, List, Tuple

from activations.domain.activation import (
    ActivationOutcome,
    ActivationResult,
    DeviceActivation,
)
from activations.ports.activation_repository import ActivationRepository
from core.domain.exceptions import PersistenceFailureError
from core.domain.value_objects import LicenseStatus
from licenses.infrastructure.repositories.in_memory_license_key_repository import (
    InMemoryLicenseKeyRepository,
)


class InMemoryActivationRepository(ActivationRepository):
    """Binds devices on licenses held by an InMemoryLicenseKeyRepository."""

    def __init__(self, licenses: InMemoryLicenseKeyRepository):
        self._licenses = licenses
        self._activations: Dict[Tuple[uuid.UUID, str], DeviceActivation] = {}

    async def compare_and_bind(
        self, license_id: uuid.UUID, device_fingerprint: str, at: datetime
    ) -> ActivationResult:
        await asyncio.sleep(0)
        with self._licenses.lock:
            current = self._licenses.get(license_id)
            if current is None:
                raise PersistenceFailureError(f"License {license_id} vanished")
            if current.is_bound(device_fingerprint):
                return ActivationResult(ActivationOutcome.ALREADY_BOUND, current.activation_count)
            if (
                current.status != LicenseStatus.ACTIVE
                or current.activation_count >= current.max_activations
            ):
                return ActivationResult(ActivationOutcome.REJECTED, current.activation_count)

            activation = DeviceActivation.create(
                license_id=license_id,
                device_fingerprint=device_fingerprint,
                activated_at=at,
            )
            updated = current.bind_device(device_fingerprint, at)
            self._licenses.put(updated)
            self._activations[(license_id, device_fingerprint)] = activation
            return ActivationResult(ActivationOutcome.ACCEPTED, updated.activation_count)

    async def list_by_license(self, license_id: uuid.UUID) -> List[DeviceActivation]:
        activations = [a for a in self._activations.values() if a.license_id == license_id]
        return sorted(activations, key=lambda a: a.activated_at)
