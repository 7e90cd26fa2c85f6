"""
LicenseKey domain entity.

This is the core domain entity representing an issued license.
It contains business logic and is independent of infrastructure.
"""

import secrets
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Callable, FrozenSet, Iterable, Optional, Tuple

from core.domain.exceptions import (
    ActivationLimitExceededError,
    DownloadLimitExceededError,
)
from core.domain.value_objects import Email, LicenseStatus

# 32 symbols: no 0/O and no 1/I
KEY_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
KEY_GROUPS = 4
KEY_GROUP_LENGTH = 4


def generate_license_key(prefix: str, choice: Callable[[str], str] = secrets.choice) -> str:
    """
    Generate a license key in format: PREFIX-XXXX-XXXX-XXXX-XXXX.

    Args:
        prefix: Key prefix (e.g., 'DL')
        choice: Symbol picker, ``secrets.choice`` unless overridden

    Returns:
        Generated license key string
    """
    if not prefix:
        raise ValueError("License key prefix cannot be empty")
    groups = [
        "".join(choice(KEY_ALPHABET) for _ in range(KEY_GROUP_LENGTH))
        for _ in range(KEY_GROUPS)
    ]
    return f"{prefix}-{'-'.join(groups)}"


@dataclass(frozen=True)
class LicenseKey:
    """
    LicenseKey domain entity.

    Grants one customer access to one digital product, within download and
    device activation quotas. Instances are immutable; transitions return
    new instances.
    """

    id: uuid.UUID
    product_id: uuid.UUID
    customer_email: Email
    customer_order_id: Optional[str]
    key_string: str
    status: LicenseStatus
    max_downloads: int
    download_count: int
    max_activations: int
    bound_device_fingerprints: FrozenSet[str]
    expires_at: Optional[datetime]
    last_accessed_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime
    # Distinct client addresses seen on downloads, first seen first
    download_ip_addresses: Tuple[str, ...] = ()

    def __post_init__(self):
        """Validate license key entity."""
        object.__setattr__(
            self, "bound_device_fingerprints", frozenset(self.bound_device_fingerprints)
        )
        object.__setattr__(self, "download_ip_addresses", tuple(self.download_ip_addresses))
        if not self.key_string or len(self.key_string.strip()) == 0:
            raise ValueError("License key cannot be empty")
        if len(self.key_string) > 100:
            raise ValueError("License key too long")
        if not self.product_id:
            raise ValueError("Product ID is required")
        if self.max_downloads < 0:
            raise ValueError("Download limit cannot be negative")
        if self.max_activations < 1:
            raise ValueError("Activation limit must be at least 1")
        if self.download_count < 0:
            raise ValueError("Download count cannot be negative")

    @classmethod
    def create(
        cls,
        product_id: uuid.UUID,
        customer_email: str,
        key_string: str,
        max_downloads: int,
        max_activations: int,
        customer_order_id: Optional[str] = None,
        expires_at: Optional[datetime] = None,
        created_at: Optional[datetime] = None,
        license_id: Optional[uuid.UUID] = None,
    ) -> "LicenseKey":
        """
        Create a new, unused LicenseKey entity.

        Args:
            product_id: Licensed product UUID
            customer_email: Customer email address
            key_string: Generated key string
            max_downloads: Download quota
            max_activations: Device activation quota
            customer_order_id: Order reference from the commerce platform
            expires_at: Optional expiration datetime (None for perpetual)
            created_at: Issue time (defaults to now)
            license_id: Optional UUID (generated if not provided)

        Returns:
            LicenseKey entity instance
        """
        now = created_at or datetime.now(timezone.utc)
        return cls(
            id=license_id or uuid.uuid4(),
            product_id=product_id,
            customer_email=Email(customer_email),
            customer_order_id=customer_order_id,
            key_string=key_string,
            status=LicenseStatus.ACTIVE,
            max_downloads=max_downloads,
            download_count=0,
            max_activations=max_activations,
            bound_device_fingerprints=frozenset(),
            expires_at=expires_at,
            last_accessed_at=None,
            created_at=now,
            updated_at=now,
        )

    @property
    def activation_count(self) -> int:
        """Number of devices bound; always the size of the fingerprint set."""
        return len(self.bound_device_fingerprints)

    @property
    def activations_remaining(self) -> int:
        return max(0, self.max_activations - self.activation_count)

    @property
    def downloads_remaining(self) -> int:
        return max(0, self.max_downloads - self.download_count)

    @property
    def is_active(self) -> bool:
        return self.status == LicenseStatus.ACTIVE

    def is_bound(self, device_fingerprint: str) -> bool:
        """Check whether a device already holds one of the activations."""
        return device_fingerprint in self.bound_device_fingerprints

    def bind_device(self, device_fingerprint: str, at: datetime) -> "LicenseKey":
        """
        Create a new LicenseKey instance with the device bound.

        Binding an already bound device returns the same instance.

        Raises:
            ActivationLimitExceededError: If no activation quota is left
        """
        if self.is_bound(device_fingerprint):
            return self
        if self.activation_count >= self.max_activations:
            raise ActivationLimitExceededError()
        return replace(
            self,
            bound_device_fingerprints=self.bound_device_fingerprints | {device_fingerprint},
            last_accessed_at=at,
            updated_at=at,
        )

    def record_download(self, at: datetime) -> "LicenseKey":
        """
        Create a new LicenseKey instance with one more download consumed.

        Raises:
            DownloadLimitExceededError: If no download quota is left
        """
        if self.download_count >= self.max_downloads:
            raise DownloadLimitExceededError()
        return replace(
            self,
            download_count=self.download_count + 1,
            last_accessed_at=at,
            updated_at=at,
        )

    def mark_expired(self, at: Optional[datetime] = None) -> "LicenseKey":
        """
        Create a new LicenseKey instance with expired status.

        Only an active license moves to expired; any other status is kept.
        """
        if self.status != LicenseStatus.ACTIVE:
            return self
        return replace(
            self,
            status=LicenseStatus.EXPIRED,
            updated_at=at or datetime.now(timezone.utc),
        )

    def with_download_ip_address(self, ip_address: str) -> "LicenseKey":
        """
        Create a new LicenseKey instance that remembers a download address.

        A known address returns the same instance.
        """
        if ip_address in self.download_ip_addresses:
            return self
        return replace(self, download_ip_addresses=self.download_ip_addresses + (ip_address,))

    def with_fingerprints(self, fingerprints: Iterable[str]) -> "LicenseKey":
        return replace(self, bound_device_fingerprints=frozenset(fingerprints))
