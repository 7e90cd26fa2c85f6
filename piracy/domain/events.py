"""
Piracy domain events.
"""
import uuid
from datetime import datetime
from typing import Optional

from core.domain.events import DomainEvent


class PiracyAlertRaised(DomainEvent):
    """A piracy alert was stored for a license."""

    def __init__(
        self,
        alert_id: uuid.UUID,
        license_id: uuid.UUID,
        alert_type: str,
        severity: str,
        occurred_at: Optional[datetime] = None,
    ):
        """
        Args:
            alert_id: PiracyAlert UUID
            license_id: License the alert is about
            alert_type: Alert type value, e.g. ``key_sharing``
            severity: Severity value, e.g. ``high``
            occurred_at: When the alert was stored
        """
        super().__init__(license_id, occurred_at)
        self.alert_id = alert_id
        self.license_id = license_id
        self.alert_type = alert_type
        self.severity = severity
