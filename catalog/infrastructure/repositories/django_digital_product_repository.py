"""
Django implementation of DigitalProductRepository port.

This adapter converts between domain entities and Django ORM models.
"""

import uuid
from typing import Optional

from asgiref.sync import sync_to_async

from catalog.domain.digital_product import DigitalProduct
from catalog.infrastructure.models import DigitalProduct as DigitalProductModel
from catalog.ports.digital_product_repository import DigitalProductRepository
from core.domain.value_objects import LicenseType


class DjangoDigitalProductRepository(DigitalProductRepository):
    """Django ORM implementation of DigitalProductRepository."""

    def _to_domain(self, model: DigitalProductModel) -> DigitalProduct:
        return DigitalProduct(
            id=model.id,
            owner_id=model.owner_id,
            name=model.name,
            license_type=LicenseType(model.license_type),
            download_limit=model.download_limit,
            access_duration_days=model.access_duration_days,
            requires_activation=model.requires_activation,
            is_active=model.is_active,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    @sync_to_async
    def save(self, product: DigitalProduct) -> DigitalProduct:
        """
        Save a product entity.

        Args:
            product: DigitalProduct entity to save

        Returns:
            Saved product entity
        """
        model, _ = DigitalProductModel.objects.update_or_create(
            id=product.id,
            defaults={
                "owner_id": product.owner_id,
                "name": product.name,
                "license_type": product.license_type.value,
                "download_limit": product.download_limit,
                "access_duration_days": product.access_duration_days,
                "requires_activation": product.requires_activation,
                "is_active": product.is_active,
            },
        )
        return self._to_domain(model)

    @sync_to_async
    def find_by_id(self, product_id: uuid.UUID) -> Optional[DigitalProduct]:
        """
        Find a product by ID.

        Args:
            product_id: Product UUID

        Returns:
            DigitalProduct entity or None if not found
        """
        try:
            model = DigitalProductModel.objects.get(id=product_id)
            return self._to_domain(model)
        except DigitalProductModel.DoesNotExist:
            return None
