"""
DigitalProduct domain entity.

Products are owned and edited by the commerce platform; this service
only reads them to derive license quotas and activation rules.
"""
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from core.domain.value_objects import LicenseType


@dataclass(frozen=True)
class DigitalProduct:
    """
    DigitalProduct domain entity.

    Represents a sellable digital product and its licensing terms.
    """

    id: uuid.UUID
    owner_id: uuid.UUID
    name: str
    license_type: LicenseType
    download_limit: Optional[int]
    access_duration_days: Optional[int]
    requires_activation: bool
    is_active: bool
    created_at: datetime
    updated_at: datetime

    def __post_init__(self):
        """Validate product entity."""
        if not self.name or len(self.name.strip()) == 0:
            raise ValueError("Product name cannot be empty")
        if not self.owner_id:
            raise ValueError("Owner ID is required")
        if self.download_limit is not None and self.download_limit < 0:
            raise ValueError("Download limit cannot be negative")
        if self.access_duration_days is not None and self.access_duration_days < 0:
            raise ValueError("Access duration cannot be negative")

    @classmethod
    def create(
        cls,
        owner_id: uuid.UUID,
        name: str,
        license_type: LicenseType = LicenseType.SINGLE,
        download_limit: Optional[int] = 5,
        access_duration_days: Optional[int] = None,
        requires_activation: bool = False,
        product_id: Optional[uuid.UUID] = None,
    ) -> "DigitalProduct":
        """
        Create a new DigitalProduct entity.

        Args:
            owner_id: UUID of the merchant selling the product
            name: Product display name
            license_type: Licensing model
            download_limit: Downloads granted per license (None for the service default)
            access_duration_days: Days of access per license (None for perpetual)
            requires_activation: Whether use must be bound to devices
            product_id: Optional UUID (generated if not provided)

        Returns:
            DigitalProduct entity instance
        """
        now = datetime.now(timezone.utc)
        return cls(
            id=product_id or uuid.uuid4(),
            owner_id=owner_id,
            name=name.strip(),
            license_type=license_type,
            download_limit=download_limit,
            access_duration_days=access_duration_days,
            requires_activation=requires_activation,
            is_active=True,
            created_at=now,
            updated_at=now,
        )

    def is_owned_by(self, owner_id: uuid.UUID) -> bool:
        """Check whether the product belongs to the given merchant."""
        return self.owner_id == owner_id
