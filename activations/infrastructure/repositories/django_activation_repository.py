"""
Django implementation of ActivationRepository port.

This adapter converts between domain entities and Django ORM models.
"""

import uuid
from datetime import datetime
from typing import List

from asgiref.sync import sync_to_async
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F

from activations.domain.activation import (
    ActivationOutcome,
    ActivationResult,
    DeviceActivation,
)
from activations.infrastructure.models import DeviceActivation as DeviceActivationModel
from activations.ports.activation_repository import ActivationRepository
from core.domain.exceptions import PersistenceFailureError
from core.domain.value_objects import LicenseStatus
from licenses.infrastructure.models import LicenseKey as LicenseKeyModel


class DjangoActivationRepository(ActivationRepository):
    """
    Django ORM implementation of ActivationRepository.

    This adapter:
    1. Converts Django models to domain entities
    2. Binds devices with one conditional UPDATE plus an INSERT, atomically
    3. Implements repository interface
    """

    def _to_domain(self, model: DeviceActivationModel) -> DeviceActivation:
        """
        Convert Django model to domain entity.

        Args:
            model: Django DeviceActivation model

        Returns:
            DeviceActivation domain entity
        """
        return DeviceActivation(
            id=model.id,
            license_id=model.license_id,
            device_fingerprint=model.device_fingerprint,
            activated_at=model.activated_at,
        )

    def _current_count(self, license_id: uuid.UUID) -> int:
        return LicenseKeyModel.objects.values_list("activation_count", flat=True).get(
            id=license_id
        )

    def _bind(
        self, license_id: uuid.UUID, device_fingerprint: str, at: datetime
    ) -> ActivationResult:
        try:
            with transaction.atomic():
                # pylint: disable=no-member
                updated = LicenseKeyModel.objects.filter(
                    id=license_id,
                    status=LicenseStatus.ACTIVE.value,
                    activation_count__lt=F("max_activations"),
                ).update(
                    activation_count=F("activation_count") + 1,
                    last_accessed_at=at,
                    updated_at=at,
                )
                if updated:
                    DeviceActivationModel.objects.create(
                        license_id=license_id,
                        device_fingerprint=device_fingerprint,
                        activated_at=at,
                    )
                    return ActivationResult(
                        outcome=ActivationOutcome.ACCEPTED,
                        activation_count=self._current_count(license_id),
                    )
        except IntegrityError:
            # A concurrent request bound the same device first; the
            # increment above was rolled back with the failed insert.
            return ActivationResult(
                outcome=ActivationOutcome.ALREADY_BOUND,
                activation_count=self._current_count(license_id),
            )

        already_bound = DeviceActivationModel.objects.filter(
            license_id=license_id, device_fingerprint=device_fingerprint
        ).exists()
        return ActivationResult(
            outcome=(
                ActivationOutcome.ALREADY_BOUND if already_bound else ActivationOutcome.REJECTED
            ),
            activation_count=self._current_count(license_id),
        )

    @sync_to_async
    def compare_and_bind(
        self, license_id: uuid.UUID, device_fingerprint: str, at: datetime
    ) -> ActivationResult:
        """
        Bind a device with a conditional UPDATE and a binding INSERT.

        Args:
            license_id: License UUID
            device_fingerprint: Device to bind
            at: Binding time

        Returns:
            ActivationResult from the store's point of view

        Raises:
            PersistenceFailureError: On any database error
        """
        try:
            return self._bind(license_id, device_fingerprint, at)
        except (DatabaseError, LicenseKeyModel.DoesNotExist) as e:
            raise PersistenceFailureError(f"Device activation failed: {e}") from e

    async def list_by_license(self, license_id: uuid.UUID) -> List[DeviceActivation]:
        """
        Find all devices bound to a license.

        Args:
            license_id: License UUID

        Returns:
            List of DeviceActivation entities, oldest first
        """
        models = await sync_to_async(
            lambda: list(
                DeviceActivationModel.objects.filter(  # pylint: disable=no-member
                    license_id=license_id
                ).order_by("activated_at")
            )
        )()
        return [self._to_domain(model) for model in models]
