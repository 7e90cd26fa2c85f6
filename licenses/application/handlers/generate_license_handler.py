"""
GenerateLicenseHandler.

Handles the generate license command.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from catalog.ports.digital_product_repository import DigitalProductRepository
from core.domain.events import EventBus
from core.domain.exceptions import InvalidCustomerEmailError, ProductNotFoundError
from core.domain.time import utc_now
from core.domain.value_objects import Email
from core.infrastructure.config import licensing_setting
from core.infrastructure.database import with_timeout
from core.infrastructure.events import event_bus as default_event_bus
from core.metrics import licenses_generated_total
from licenses.application.commands.generate_license import GenerateLicenseCommand
from licenses.application.dto.license_dto import LicenseKeyDTO
from licenses.domain.events import LicenseKeyGenerated
from licenses.domain.expiration import ExpirationPolicy
from licenses.domain.license_key import LicenseKey
from licenses.domain.services import LicenseKeyGenerator, LicenseQuotaPolicy
from licenses.ports.license_key_repository import LicenseKeyRepository

logger = logging.getLogger(__name__)


class GenerateLicenseHandler:
    """Handler for GenerateLicenseCommand."""

    def __init__(
        self,
        product_repository: DigitalProductRepository,
        license_key_repository: LicenseKeyRepository,
        key_generator: Optional[LicenseKeyGenerator] = None,
        event_bus: Optional[EventBus] = None,
        timeout: Optional[float] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize handler with repositories."""
        self.product_repository = product_repository
        self.license_key_repository = license_key_repository
        self.key_generator = key_generator or LicenseKeyGenerator(
            license_key_repository, timeout=timeout
        )
        self.event_bus = event_bus or default_event_bus
        self.timeout = timeout
        self.clock = clock

    async def handle(self, command: GenerateLicenseCommand) -> LicenseKeyDTO:
        """
        Handle generate license command.

        Args:
            command: GenerateLicenseCommand

        Returns:
            LicenseKeyDTO of the issued license

        Raises:
            InvalidCustomerEmailError: If the customer email is malformed
            ProductNotFoundError: If the product does not exist or is not
                owned by ``command.owner_id``
            KeyspaceExhaustedError: If no unique key could be found
            PersistenceFailureError: If the store failed or timed out
        """
        try:
            Email(command.customer_email)
        except ValueError as e:
            raise InvalidCustomerEmailError(str(e)) from e

        product = await with_timeout(
            self.product_repository.find_by_id(command.product_id),
            self.timeout,
            "product lookup",
        )
        if product is None or (
            command.owner_id is not None and not product.is_owned_by(command.owner_id)
        ):
            raise ProductNotFoundError(f"Product {command.product_id} not found")

        max_downloads, max_activations = LicenseQuotaPolicy.quotas(
            product, command.custom_settings
        )
        created_at = self.clock()
        expires_at = ExpirationPolicy.compute_expiry(created_at, product.access_duration_days)

        def build(key_string: str) -> LicenseKey:
            return LicenseKey.create(
                product_id=product.id,
                customer_email=command.customer_email,
                key_string=key_string,
                max_downloads=max_downloads,
                max_activations=max_activations,
                customer_order_id=command.customer_order_id,
                expires_at=expires_at,
                created_at=created_at,
            )

        prefix = command.prefix or licensing_setting("KEY_PREFIX")
        license_key = await self.key_generator.issue(prefix, build)

        licenses_generated_total.labels(license_type=product.license_type.value).inc()
        logger.info(
            "License %s issued for product %s",
            license_key.id,
            product.id,
            extra={
                "customer_order_id": command.customer_order_id,
                "max_downloads": max_downloads,
                "max_activations": max_activations,
            },
        )

        await self.event_bus.publish(
            LicenseKeyGenerated(
                license_id=license_key.id,
                product_id=product.id,
                customer_email=str(license_key.customer_email),
                customer_order_id=command.customer_order_id,
            )
        )

        return LicenseKeyDTO.from_entity(license_key)
