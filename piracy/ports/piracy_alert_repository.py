"""
PiracyAlert repository port (interface).

This defines the contract for the alert sink.
Implementations are in the infrastructure layer.
"""
import uuid
from abc import ABC, abstractmethod
from typing import List

from piracy.domain.piracy_alert import PiracyAlert


class PiracyAlertRepository(ABC):
    """
    Abstract repository for PiracyAlert entities.

    This is a port in hexagonal architecture - it defines
    what operations are available, not how they're implemented.
    """

    @abstractmethod
    async def save(self, alert: PiracyAlert) -> PiracyAlert:
        """
        Persist a new alert.

        Args:
            alert: PiracyAlert entity to save

        Returns:
            Saved alert entity
        """
        pass

    @abstractmethod
    async def list_by_license(self, license_id: uuid.UUID) -> List[PiracyAlert]:
        """
        Find all alerts raised for a license.

        Args:
            license_id: License UUID

        Returns:
            List of PiracyAlert entities, oldest first
        """
        pass
