"""
DigitalProduct repository port (interface).

This defines the contract for product catalog lookups.
Implementations are in the infrastructure layer.
"""
import uuid
from abc import ABC, abstractmethod
from typing import Optional

from catalog.domain.digital_product import DigitalProduct


class DigitalProductRepository(ABC):
    """
    Abstract repository for DigitalProduct entities.

    This is a port in hexagonal architecture - it defines
    what operations are available, not how they're implemented.
    """

    @abstractmethod
    async def save(self, product: DigitalProduct) -> DigitalProduct:
        """
        Save a product entity.

        Args:
            product: DigitalProduct entity to save

        Returns:
            Saved product entity
        """
        pass

    @abstractmethod
    async def find_by_id(self, product_id: uuid.UUID) -> Optional[DigitalProduct]:
        """
        Find a product by ID.

        Args:
            product_id: Product UUID

        Returns:
            DigitalProduct entity or None if not found
        """
        pass
