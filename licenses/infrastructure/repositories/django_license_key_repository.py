"""
Django implementation of LicenseKeyRepository port.

This adapter converts between domain entities and Django ORM models.
"""
import uuid
from datetime import datetime
from typing import Optional, Tuple

from asgiref.sync import sync_to_async
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F

from core.domain.exceptions import DuplicateLicenseKeyError, PersistenceFailureError
from core.domain.value_objects import Email, LicenseStatus
from licenses.domain.license_key import LicenseKey
from licenses.infrastructure.models import LicenseKey as LicenseKeyModel
from licenses.ports.license_key_repository import LicenseKeyRepository


class DjangoLicenseKeyRepository(LicenseKeyRepository):
    """
    Django ORM implementation of LicenseKeyRepository.

    This adapter:
    1. Converts Django models to domain entities
    2. Relies on the unique constraint on key_string for issuance
    3. Performs every mutation as one conditional UPDATE
    """

    def _to_domain(self, model: LicenseKeyModel) -> LicenseKey:
        """
        Convert Django model to domain entity.

        Args:
            model: Django LicenseKey model

        Returns:
            LicenseKey domain entity
        """
        fingerprints = model.device_activations.values_list("device_fingerprint", flat=True)
        return LicenseKey(
            id=model.id,
            product_id=model.product_id,
            customer_email=Email(model.customer_email),
            customer_order_id=model.customer_order_id,
            key_string=model.key_string,
            status=LicenseStatus(model.status),
            max_downloads=model.max_downloads,
            download_count=model.download_count,
            max_activations=model.max_activations,
            bound_device_fingerprints=frozenset(fingerprints),
            expires_at=model.expires_at,
            last_accessed_at=model.last_accessed_at,
            created_at=model.created_at,
            updated_at=model.updated_at,
            download_ip_addresses=tuple(model.download_ip_addresses or ()),
        )

    @sync_to_async
    def insert(self, license_key: LicenseKey) -> LicenseKey:
        """
        Insert a new license.

        The insert runs in its own savepoint so that a unique violation
        leaves nothing behind.

        Args:
            license_key: LicenseKey entity to insert

        Returns:
            Stored license key entity

        Raises:
            DuplicateLicenseKeyError: If the key string is already taken
            PersistenceFailureError: On any other database error
        """
        try:
            with transaction.atomic():
                model = LicenseKeyModel.objects.create(
                    id=license_key.id,
                    product_id=license_key.product_id,
                    customer_email=str(license_key.customer_email),
                    customer_order_id=license_key.customer_order_id,
                    key_string=license_key.key_string,
                    status=license_key.status.value,
                    max_downloads=license_key.max_downloads,
                    download_count=license_key.download_count,
                    max_activations=license_key.max_activations,
                    activation_count=license_key.activation_count,
                    expires_at=license_key.expires_at,
                    last_accessed_at=license_key.last_accessed_at,
                    created_at=license_key.created_at,
                    download_ip_addresses=list(license_key.download_ip_addresses),
                )
        except IntegrityError as e:
            if LicenseKeyModel.objects.filter(key_string=license_key.key_string).exists():
                raise DuplicateLicenseKeyError(
                    f"License key {license_key.key_string} already exists"
                ) from e
            raise PersistenceFailureError(f"License insert failed: {e}") from e
        except DatabaseError as e:
            raise PersistenceFailureError(f"License insert failed: {e}") from e
        return self._to_domain(model)

    @sync_to_async
    def find_by_id(self, license_id: uuid.UUID) -> Optional[LicenseKey]:
        """
        Find a license by ID.

        Args:
            license_id: License UUID

        Returns:
            LicenseKey entity or None if not found
        """
        try:
            model = LicenseKeyModel.objects.get(id=license_id)
            return self._to_domain(model)
        except LicenseKeyModel.DoesNotExist:
            return None

    @sync_to_async
    def find_by_key_string(self, key_string: str) -> Optional[LicenseKey]:
        """
        Find a license by key string.

        Args:
            key_string: License key string

        Returns:
            LicenseKey entity or None if not found
        """
        try:
            model = LicenseKeyModel.objects.get(key_string=key_string)
            return self._to_domain(model)
        except LicenseKeyModel.DoesNotExist:
            return None

    @sync_to_async
    def mark_expired(self, license_id: uuid.UUID, at: datetime) -> bool:
        try:
            updated = LicenseKeyModel.objects.filter(
                id=license_id, status=LicenseStatus.ACTIVE.value
            ).update(status=LicenseStatus.EXPIRED.value, updated_at=at)
        except DatabaseError as e:
            raise PersistenceFailureError(f"Expiring license failed: {e}") from e
        return updated == 1

    @sync_to_async
    def increment_download_count(
        self, license_id: uuid.UUID, at: datetime
    ) -> Optional[int]:
        """
        Consume one download with a single conditional UPDATE.

        Args:
            license_id: License UUID
            at: Access time

        Returns:
            The new download count, or None if the license is not active
            or has no download quota left
        """
        try:
            with transaction.atomic():
                updated = LicenseKeyModel.objects.filter(
                    id=license_id,
                    status=LicenseStatus.ACTIVE.value,
                    download_count__lt=F("max_downloads"),
                ).update(
                    download_count=F("download_count") + 1,
                    last_accessed_at=at,
                    updated_at=at,
                )
                if not updated:
                    return None
                return LicenseKeyModel.objects.values_list(
                    "download_count", flat=True
                ).get(id=license_id)
        except DatabaseError as e:
            raise PersistenceFailureError(f"Recording download failed: {e}") from e

    @sync_to_async
    def record_download_ip_address(
        self, license_id: uuid.UUID, ip_address: str
    ) -> Optional[Tuple[str, ...]]:
        """
        Add a client address under a row lock.

        Args:
            license_id: License UUID
            ip_address: Address the download came from

        Returns:
            All known addresses, or None if the address was already known
        """
        try:
            with transaction.atomic():
                known = list(
                    LicenseKeyModel.objects.select_for_update()
                    .values_list("download_ip_addresses", flat=True)
                    .get(id=license_id)
                    or []
                )
                if ip_address in known:
                    return None
                known.append(ip_address)
                LicenseKeyModel.objects.filter(id=license_id).update(download_ip_addresses=known)
                return tuple(known)
        except (DatabaseError, LicenseKeyModel.DoesNotExist) as e:
            raise PersistenceFailureError(f"Recording download address failed: {e}") from e
