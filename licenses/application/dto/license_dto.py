"""
License DTOs for API responses.
"""
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from licenses.domain.license_key import LicenseKey


@dataclass
class LicenseKeyDTO:
    """DTO for an issued license key."""

    id: uuid.UUID
    key_string: str
    product_id: uuid.UUID
    customer_email: str
    customer_order_id: Optional[str]
    status: str
    max_downloads: int
    download_count: int
    max_activations: int
    activation_count: int
    expires_at: Optional[datetime]
    created_at: datetime

    @classmethod
    def from_entity(cls, license_key: LicenseKey) -> "LicenseKeyDTO":
        return cls(
            id=license_key.id,
            key_string=license_key.key_string,
            product_id=license_key.product_id,
            customer_email=str(license_key.customer_email),
            customer_order_id=license_key.customer_order_id,
            status=license_key.status.value,
            max_downloads=license_key.max_downloads,
            download_count=license_key.download_count,
            max_activations=license_key.max_activations,
            activation_count=license_key.activation_count,
            expires_at=license_key.expires_at,
            created_at=license_key.created_at,
        )


@dataclass
class ValidationResultDTO:
    """
    DTO for a validation result.

    Refusals carry only ``valid`` and ``reason``; the entitlement fields are
    filled in when the license is valid.
    """

    valid: bool
    reason: Optional[str] = None
    product_name: Optional[str] = None
    status: Optional[str] = None
    expires_at: Optional[datetime] = None
    downloads_remaining: Optional[int] = None
    activations_remaining: Optional[int] = None

    @classmethod
    def refused(cls, reason) -> "ValidationResultDTO":
        return cls(valid=False, reason=str(reason))


@dataclass
class DownloadDTO:
    """DTO for a recorded download."""

    license_id: uuid.UUID
    download_count: int
    downloads_remaining: int
    accessed_at: datetime
