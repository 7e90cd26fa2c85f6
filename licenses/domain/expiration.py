"""
Expiration policy.

Expiry is derived from the product's access duration at issue time and
checked on demand; nothing sweeps expired licenses in the background.
"""
from datetime import datetime, timedelta
from typing import Optional


class ExpirationPolicy:
    """Pure expiry computation and check."""

    @staticmethod
    def compute_expiry(
        created_at: datetime, access_duration_days: Optional[int]
    ) -> Optional[datetime]:
        """
        Compute when a license stops granting access.

        Args:
            created_at: License issue time
            access_duration_days: Product access window in days, None for perpetual

        Returns:
            Expiration datetime, or None for a perpetual license
        """
        if access_duration_days is None:
            return None
        if access_duration_days < 0:
            raise ValueError("Access duration cannot be negative")
        return created_at + timedelta(days=access_duration_days)

    @staticmethod
    def is_expired(expires_at: Optional[datetime], now: datetime) -> bool:
        """
        Check whether the access window has closed.

        The window is half-open: access ends at ``expires_at`` itself, so a
        zero-day window is expired from the moment it is issued.
        """
        if expires_at is None:
            return False
        return now >= expires_at
