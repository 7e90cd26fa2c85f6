"""
Activation repository port (interface).

This defines the contract for device activation persistence operations.
Implementations are in the infrastructure layer.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List
import uuid

from activations.domain.activation import ActivationResult, DeviceActivation


class ActivationRepository(ABC):
    """
    Abstract repository for DeviceActivation entities.

    This is a port in hexagonal architecture - it defines
    what operations are available, not how they're implemented.
    """

    @abstractmethod
    async def compare_and_bind(
        self, license_id: uuid.UUID, device_fingerprint: str, at: datetime
    ) -> ActivationResult:
        """
        Bind a device to a license if, and only if, quota is left.

        The check and the increment must be one atomic operation at the
        store: the license's activation count is incremented only while the
        license is active and below its activation limit, and the binding
        row is written in the same transaction.

        Args:
            license_id: License UUID
            device_fingerprint: Device to bind
            at: Binding time, also stored as last_accessed_at

        Returns:
            ACCEPTED with the new count, ALREADY_BOUND if the device was
            bound (possibly by a concurrent request), or REJECTED

        Raises:
            PersistenceFailureError: If the store fails
        """
        pass

    @abstractmethod
    async def list_by_license(self, license_id: uuid.UUID) -> List[DeviceActivation]:
        """
        Find all devices bound to a license.

        Args:
            license_id: License UUID

        Returns:
            List of DeviceActivation entities, oldest first
        """
        pass
