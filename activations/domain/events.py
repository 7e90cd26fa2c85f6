"""
Activation domain events.
"""
import uuid
from datetime import datetime
from typing import Optional

from core.domain.events import DomainEvent


class DeviceActivated(DomainEvent):
    """
    A new device was bound to a license.

    Not published when an already bound device validates again.
    """

    def __init__(
        self,
        license_id: uuid.UUID,
        device_fingerprint: str,
        activation_count: int,
        occurred_at: Optional[datetime] = None,
    ):
        """
        Args:
            license_id: License UUID
            device_fingerprint: Fingerprint of the newly bound device
            activation_count: Devices bound after this activation
            occurred_at: When the binding was stored
        """
        super().__init__(license_id, occurred_at)
        self.license_id = license_id
        self.device_fingerprint = device_fingerprint
        self.activation_count = activation_count
