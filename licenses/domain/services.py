"""
License domain services.

Domain services contain business logic that doesn't naturally
fit within a single entity.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from catalog.domain.digital_product import DigitalProduct
from core.domain.exceptions import DuplicateLicenseKeyError, KeyspaceExhaustedError
from core.domain.value_objects import LicenseType
from core.infrastructure.config import licensing_setting
from core.infrastructure.database import with_timeout
from core.metrics import license_key_collisions_total
from licenses.domain.license_key import LicenseKey, generate_license_key
from licenses.ports.license_key_repository import LicenseKeyRepository

logger = logging.getLogger(__name__)


class LicenseKeyGenerator:
    """
    Domain service for license key issuance.

    Uniqueness is guaranteed by the store's constraint, not by looking the
    key up first: the generator inserts, and on a collision regenerates and
    tries again, sequentially and a bounded number of times.
    """

    def __init__(
        self,
        repository: LicenseKeyRepository,
        max_attempts: Optional[int] = None,
        key_factory: Callable[[str], str] = generate_license_key,
        timeout: Optional[float] = None,
    ):
        self.repository = repository
        self.max_attempts = max_attempts or licensing_setting("MAX_KEY_GENERATION_ATTEMPTS")
        self.key_factory = key_factory
        self.timeout = timeout

    @staticmethod
    def generate(prefix: str) -> str:
        """
        Generate a license key string.

        Args:
            prefix: Key prefix

        Returns:
            Generated license key string
        """
        return generate_license_key(prefix)

    async def issue(self, prefix: str, build: Callable[[str], LicenseKey]) -> LicenseKey:
        """
        Insert a new license under a freshly generated, unique key.

        Args:
            prefix: Key prefix
            build: Builds the entity to insert for a given key string

        Returns:
            The stored LicenseKey entity

        Raises:
            KeyspaceExhaustedError: If every attempt collided
            PersistenceFailureError: If an insert timed out
        """
        for attempt in range(1, self.max_attempts + 1):
            candidate = build(self.key_factory(prefix))
            try:
                return await with_timeout(
                    self.repository.insert(candidate), self.timeout, "license key insert"
                )
            except DuplicateLicenseKeyError:
                license_key_collisions_total.inc()
                logger.warning(
                    "License key collision on attempt %d/%d", attempt, self.max_attempts
                )

        logger.error("Key generation gave up after %d collisions", self.max_attempts)
        raise KeyspaceExhaustedError(
            f"Could not generate a unique license key after {self.max_attempts} attempts"
        )


@dataclass
class CustomLicenseSettings:
    """Per-order overrides of the product's quotas."""

    max_downloads: Optional[int] = None
    max_activations: Optional[int] = None


class LicenseQuotaPolicy:
    """Derives a new license's quotas from its product and any overrides."""

    @staticmethod
    def quotas(
        product: DigitalProduct, custom_settings: Optional[CustomLicenseSettings] = None
    ) -> Tuple[int, int]:
        """
        Compute the download and activation quotas of a new license.

        Overrides win when set to a positive value; otherwise downloads come
        from the product's download limit and activations from its license
        type (unlimited products get a very large activation quota).

        Returns:
            Tuple of (max_downloads, max_activations)
        """
        custom = custom_settings or CustomLicenseSettings()

        max_downloads = (
            custom.max_downloads
            or product.download_limit
            or licensing_setting("DEFAULT_MAX_DOWNLOADS")
        )

        if custom.max_activations:
            max_activations = custom.max_activations
        elif product.license_type == LicenseType.UNLIMITED:
            max_activations = licensing_setting("UNLIMITED_MAX_ACTIVATIONS")
        else:
            max_activations = licensing_setting("DEFAULT_MAX_ACTIVATIONS")

        return max_downloads, max_activations
