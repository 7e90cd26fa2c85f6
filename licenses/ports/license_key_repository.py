"""
LicenseKey repository port (interface).

This defines the contract for license persistence operations.
Implementations are in the infrastructure layer.

Every mutation here is a single conditional operation at the store, so
that concurrent requests for the same license cannot interleave a read
and a write.
"""
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, Tuple

from licenses.domain.license_key import LicenseKey


class LicenseKeyRepository(ABC):
    """
    Abstract repository for LicenseKey entities.

    This is a port in hexagonal architecture - it defines
    what operations are available, not how they're implemented.
    """

    @abstractmethod
    async def insert(self, license_key: LicenseKey) -> LicenseKey:
        """
        Insert a new license.

        Args:
            license_key: LicenseKey entity to insert

        Returns:
            Stored license key entity

        Raises:
            DuplicateLicenseKeyError: If the key string is already taken.
                Nothing is stored in that case.
        """
        pass

    @abstractmethod
    async def find_by_id(self, license_id: uuid.UUID) -> Optional[LicenseKey]:
        """
        Find a license by ID.

        Args:
            license_id: License UUID

        Returns:
            LicenseKey entity or None if not found
        """
        pass

    @abstractmethod
    async def find_by_key_string(self, key_string: str) -> Optional[LicenseKey]:
        """
        Find a license by its key string.

        Args:
            key_string: License key string

        Returns:
            LicenseKey entity or None if not found
        """
        pass

    @abstractmethod
    async def mark_expired(self, license_id: uuid.UUID, at: datetime) -> bool:
        """
        Move an active license to expired.

        Idempotent: a license that is no longer active is left untouched.

        Args:
            license_id: License UUID
            at: Transition time

        Returns:
            True if this call made the transition, False otherwise
        """
        pass

    @abstractmethod
    async def increment_download_count(
        self, license_id: uuid.UUID, at: datetime
    ) -> Optional[int]:
        """
        Consume one download, only if the license is active and has quota left.

        Args:
            license_id: License UUID
            at: Access time, stored as last_accessed_at

        Returns:
            The new download count, or None if nothing was consumed
        """
        pass

    @abstractmethod
    async def record_download_ip_address(
        self, license_id: uuid.UUID, ip_address: str
    ) -> Optional[Tuple[str, ...]]:
        """
        Add a client address to the license's download addresses.

        Args:
            license_id: License UUID
            ip_address: Address the download came from

        Returns:
            All known addresses, the new one last, or None if the address
            was already known
        """
        pass
