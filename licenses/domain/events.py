"""
License domain events.
"""

import uuid
from datetime import datetime
from typing import Optional

from core.domain.events import DomainEvent


class LicenseKeyGenerated(DomainEvent):
    """A license key was issued for a purchase."""

    def __init__(
        self,
        license_id: uuid.UUID,
        product_id: uuid.UUID,
        customer_email: str,
        customer_order_id: Optional[str] = None,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(license_id, occurred_at)
        self.license_id = license_id
        self.product_id = product_id
        self.customer_email = customer_email
        self.customer_order_id = customer_order_id


class LicenseExpired(DomainEvent):
    """
    A license was found past its expiry and moved to EXPIRED.

    Published by the request that made the transition, and only by it.
    """

    def __init__(
        self,
        license_id: uuid.UUID,
        expires_at: Optional[datetime],
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(license_id, occurred_at)
        self.license_id = license_id
        self.expires_at = expires_at


class DownloadRecorded(DomainEvent):
    """A download consumed one unit of a license's download quota."""

    def __init__(
        self,
        license_id: uuid.UUID,
        download_count: int,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(license_id, occurred_at)
        self.license_id = license_id
        self.download_count = download_count
