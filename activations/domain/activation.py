"""
Device activation domain entity and the outcome of a bind attempt.

A device activation binds one device fingerprint to one license. Bindings
are created once and never removed by this service.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class ActivationOutcome(Enum):
    """Result of an attempt to bind a device to a license."""

    ACCEPTED = "accepted"
    ALREADY_BOUND = "already_bound"
    REJECTED = "rejected"
    FAILED = "failed"

    @property
    def is_bound(self) -> bool:
        """True when the device holds an activation after the attempt."""
        return self in (ActivationOutcome.ACCEPTED, ActivationOutcome.ALREADY_BOUND)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ActivationResult:
    """
    Outcome of a compare-and-bind.

    ``activation_count`` is the store's count after the attempt; it is None
    when the attempt failed and the count is unknown.
    """

    outcome: ActivationOutcome
    activation_count: Optional[int] = None

    @classmethod
    def failed(cls) -> "ActivationResult":
        return cls(outcome=ActivationOutcome.FAILED)


@dataclass(frozen=True)
class DeviceActivation:
    """
    DeviceActivation domain entity.

    Represents one device bound to a license.
    """

    id: uuid.UUID
    license_id: uuid.UUID
    device_fingerprint: str
    activated_at: datetime

    def __post_init__(self):
        """Validate device activation entity."""
        if not self.license_id:
            raise ValueError("License ID is required")
        # Fingerprints are opaque; only an empty one is refused.
        if not self.device_fingerprint:
            raise ValueError("Device fingerprint cannot be empty")

    @classmethod
    def create(
        cls,
        license_id: uuid.UUID,
        device_fingerprint: str,
        activated_at: Optional[datetime] = None,
        activation_id: Optional[uuid.UUID] = None,
    ) -> "DeviceActivation":
        """
        Create a new DeviceActivation entity.

        Args:
            license_id: License UUID
            device_fingerprint: Opaque device identifier supplied by the client
            activated_at: Binding time (defaults to now)
            activation_id: Optional UUID (generated if not provided)

        Returns:
            DeviceActivation entity instance
        """
        return cls(
            id=activation_id or uuid.uuid4(),
            license_id=license_id,
            device_fingerprint=device_fingerprint,
            activated_at=activated_at or datetime.now(timezone.utc),
        )
