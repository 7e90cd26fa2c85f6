"""
In-memory implementation of DigitalProductRepository.

Used for local development without a database and in unit tests.
"""

import uuid
from typing import Dict, Optional

from catalog.domain.digital_product import DigitalProduct
from catalog.ports.digital_product_repository import DigitalProductRepository


class InMemoryDigitalProductRepository(DigitalProductRepository):
    """Dictionary-backed product catalog."""

    def __init__(self):
        self._products: Dict[uuid.UUID, DigitalProduct] = {}

    async def save(self, product: DigitalProduct) -> DigitalProduct:
        self._products[product.id] = product
        return product

    async def find_by_id(self, product_id: uuid.UUID) -> Optional[DigitalProduct]:
        return self._products.get(product_id)
