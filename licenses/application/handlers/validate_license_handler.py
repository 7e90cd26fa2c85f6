"""
ValidateLicenseHandler.

Handles the validate license query. This is the license state machine:
a license is ACTIVE until it is found past expiry (EXPIRED) or set aside
by administrative tooling (REVOKED, SUSPENDED); only ACTIVE licenses
validate, and devices are bound on first use when the product asks for it.
"""

import logging
from typing import Optional

from activations.domain.activation import ActivationOutcome
from activations.domain.events import DeviceActivated
from activations.domain.services import ActivationTracker
from catalog.ports.digital_product_repository import DigitalProductRepository
from core.domain.events import EventBus
from core.domain.value_objects import ValidationReason
from core.infrastructure.database import with_timeout
from core.infrastructure.events import event_bus as default_event_bus
from core.metrics import license_validations_total
from licenses.application.dto.license_dto import ValidationResultDTO
from licenses.application.queries.validate_license import ValidateLicenseQuery
from licenses.application.services.license_expiration_service import (
    LicenseExpirationService,
)
from licenses.ports.license_key_repository import LicenseKeyRepository
from piracy.domain.services import PiracyDetector

logger = logging.getLogger(__name__)


class ValidateLicenseHandler:
    """
    Handler for ValidateLicenseQuery.

    Never raises: every failure is reported as a refusal with a reason.
    """

    def __init__(
        self,
        license_key_repository: LicenseKeyRepository,
        product_repository: DigitalProductRepository,
        activation_tracker: ActivationTracker,
        piracy_detector: PiracyDetector,
        expiration_service: Optional[LicenseExpirationService] = None,
        event_bus: Optional[EventBus] = None,
        timeout: Optional[float] = None,
    ):
        """Initialize handler with repositories and domain services."""
        self.license_key_repository = license_key_repository
        self.product_repository = product_repository
        self.activation_tracker = activation_tracker
        self.piracy_detector = piracy_detector
        self.event_bus = event_bus or default_event_bus
        self.expiration_service = expiration_service or LicenseExpirationService(
            license_key_repository, self.event_bus, timeout=timeout
        )
        self.timeout = timeout

    async def handle(self, query: ValidateLicenseQuery) -> ValidationResultDTO:
        """
        Handle validate license query.

        Args:
            query: ValidateLicenseQuery

        Returns:
            ValidationResultDTO; ``valid`` is False with a ``reason`` when the
            license may not be used
        """
        try:
            result = await self._validate(query)
        except Exception:
            logger.exception("License validation failed; refusing")
            result = ValidationResultDTO.refused(ValidationReason.PERSISTENCE_FAILURE)

        license_validations_total.labels(
            valid=str(result.valid).lower(), reason=result.reason or "none"
        ).inc()
        return result

    async def _validate(self, query: ValidateLicenseQuery) -> ValidationResultDTO:
        license_key = await with_timeout(
            self.license_key_repository.find_by_key_string(query.key_string),
            self.timeout,
            "license lookup",
        )
        if license_key is None:
            return ValidationResultDTO.refused(ValidationReason.NOT_FOUND)

        # Stored status wins; expiry is only derived for active licenses.
        if not license_key.is_active:
            return ValidationResultDTO.refused(ValidationReason.from_status(license_key.status))

        license_key = await self.expiration_service.expire_if_due(license_key)
        if not license_key.is_active:
            return ValidationResultDTO.refused(ValidationReason.EXPIRED)

        product = await with_timeout(
            self.product_repository.find_by_id(license_key.product_id),
            self.timeout,
            "product lookup",
        )
        if product is None:
            logger.error("License %s points at a missing product", license_key.id)
            return ValidationResultDTO.refused(ValidationReason.NOT_FOUND)

        activation_count = license_key.activation_count
        if product.requires_activation:
            fingerprint = query.device_fingerprint
            if not fingerprint:
                return ValidationResultDTO.refused(ValidationReason.ACTIVATION_REQUIRED)

            if not license_key.is_bound(fingerprint):
                activation = await self.activation_tracker.compare_and_bind(
                    license_key, fingerprint
                )
                if activation.outcome == ActivationOutcome.FAILED:
                    return ValidationResultDTO.refused(ValidationReason.PERSISTENCE_FAILURE)
                if activation.outcome == ActivationOutcome.REJECTED:
                    await self.piracy_detector.on_activation_limit_exceeded(
                        license_key, fingerprint
                    )
                    return ValidationResultDTO.refused(
                        ValidationReason.ACTIVATION_LIMIT_EXCEEDED
                    )

                activation_count = activation.activation_count
                if activation.outcome == ActivationOutcome.ACCEPTED:
                    await self.event_bus.publish(
                        DeviceActivated(
                            license_id=license_key.id,
                            device_fingerprint=fingerprint,
                            activation_count=activation_count,
                        )
                    )

        return ValidationResultDTO(
            valid=True,
            product_name=product.name,
            status=license_key.status.value,
            expires_at=license_key.expires_at,
            downloads_remaining=license_key.downloads_remaining,
            activations_remaining=max(0, license_key.max_activations - activation_count),
        )
