"""
Caching decorator for DigitalProductRepository.

Products are read on every validation and change rarely, so lookups are
served from the Django cache and refreshed after the TTL.
"""

import logging
import uuid
from datetime import datetime
from typing import Optional

from catalog.domain.digital_product import DigitalProduct
from catalog.ports.digital_product_repository import DigitalProductRepository
from core.domain.value_objects import LicenseType
from core.infrastructure.cache import CachePort
from core.infrastructure.cache_adapters import cache_adapter
from core.infrastructure.config import licensing_setting

logger = logging.getLogger(__name__)


class CachedDigitalProductRepository(DigitalProductRepository):
    """Read-through cache in front of another DigitalProductRepository."""

    def __init__(
        self,
        inner: DigitalProductRepository,
        cache: CachePort = cache_adapter,
        ttl: Optional[int] = None,
    ):
        self.inner = inner
        self.cache = cache
        self.ttl = ttl if ttl is not None else licensing_setting("PRODUCT_CACHE_TTL_SECONDS")

    @staticmethod
    def _key(product_id: uuid.UUID) -> str:
        return f"catalog:product:{product_id}"

    @staticmethod
    def _serialize(product: DigitalProduct) -> dict:
        return {
            "id": str(product.id),
            "owner_id": str(product.owner_id),
            "name": product.name,
            "license_type": product.license_type.value,
            "download_limit": product.download_limit,
            "access_duration_days": product.access_duration_days,
            "requires_activation": product.requires_activation,
            "is_active": product.is_active,
            "created_at": product.created_at.isoformat(),
            "updated_at": product.updated_at.isoformat(),
        }

    @staticmethod
    def _deserialize(data: dict) -> DigitalProduct:
        return DigitalProduct(
            id=uuid.UUID(data["id"]),
            owner_id=uuid.UUID(data["owner_id"]),
            name=data["name"],
            license_type=LicenseType(data["license_type"]),
            download_limit=data["download_limit"],
            access_duration_days=data["access_duration_days"],
            requires_activation=data["requires_activation"],
            is_active=data["is_active"],
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
        )

    async def save(self, product: DigitalProduct) -> DigitalProduct:
        saved = await self.inner.save(product)
        await self.cache.delete(self._key(saved.id))
        return saved

    async def find_by_id(self, product_id: uuid.UUID) -> Optional[DigitalProduct]:
        cached = await self.cache.get(self._key(product_id))
        if cached is not None:
            try:
                return self._deserialize(cached)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Discarding unreadable cached product %s: %s", product_id, e)

        product = await self.inner.find_by_id(product_id)
        if product is not None:
            await self.cache.set(self._key(product_id), self._serialize(product), ttl=self.ttl)
        return product
