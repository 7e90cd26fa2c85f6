"""
In-memory implementation of LicenseKeyRepository.

Used for local development without a database and in unit tests. The
conditional operations hold a lock for the whole check-and-set, so they
behave like the database's conditional updates.
"""

import asyncio
import threading
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Dict, Optional, Tuple

from core.domain.exceptions import DuplicateLicenseKeyError
from core.domain.value_objects import LicenseStatus
from licenses.domain.license_key import LicenseKey
from licenses.ports.license_key_repository import LicenseKeyRepository


class InMemoryLicenseKeyRepository(LicenseKeyRepository):
    """Dictionary-backed license store with a unique key_string index."""

    def __init__(self):
        self._licenses: Dict[uuid.UUID, LicenseKey] = {}
        self._ids_by_key: Dict[str, uuid.UUID] = {}
        self.lock = threading.RLock()

    def get(self, license_id: uuid.UUID) -> Optional[LicenseKey]:
        """Read a license without yielding; callers may hold ``lock``."""
        return self._licenses.get(license_id)

    def put(self, license_key: LicenseKey) -> None:
        """Replace a stored license; callers must hold ``lock``."""
        self._licenses[license_key.id] = license_key
        self._ids_by_key[license_key.key_string] = license_key.id

    async def insert(self, license_key: LicenseKey) -> LicenseKey:
        await asyncio.sleep(0)
        with self.lock:
            if license_key.key_string in self._ids_by_key:
                raise DuplicateLicenseKeyError(
                    f"License key {license_key.key_string} already exists"
                )
            self.put(license_key)
        return license_key

    async def find_by_id(self, license_id: uuid.UUID) -> Optional[LicenseKey]:
        await asyncio.sleep(0)
        return self.get(license_id)

    async def find_by_key_string(self, key_string: str) -> Optional[LicenseKey]:
        await asyncio.sleep(0)
        license_id = self._ids_by_key.get(key_string)
        return self._licenses.get(license_id) if license_id else None

    async def mark_expired(self, license_id: uuid.UUID, at: datetime) -> bool:
        await asyncio.sleep(0)
        with self.lock:
            current = self.get(license_id)
            if current is None or current.status != LicenseStatus.ACTIVE:
                return False
            self.put(current.mark_expired(at))
            return True

    async def increment_download_count(
        self, license_id: uuid.UUID, at: datetime
    ) -> Optional[int]:
        await asyncio.sleep(0)
        with self.lock:
            current = self.get(license_id)
            if (
                current is None
                or current.status != LicenseStatus.ACTIVE
                or current.download_count >= current.max_downloads
            ):
                return None
            updated = replace(
                current,
                download_count=current.download_count + 1,
                last_accessed_at=at,
                updated_at=at,
            )
            self.put(updated)
            return updated.download_count

    async def record_download_ip_address(
        self, license_id: uuid.UUID, ip_address: str
    ) -> Optional[Tuple[str, ...]]:
        await asyncio.sleep(0)
        with self.lock:
            current = self.get(license_id)
            if current is None or ip_address in current.download_ip_addresses:
                return None
            updated = current.with_download_ip_address(ip_address)
            self.put(updated)
            return updated.download_ip_addresses
