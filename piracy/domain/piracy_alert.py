"""
PiracyAlert domain entity.

An alert is written once, when a license is used beyond its quotas, and is
never changed afterwards.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from core.domain.value_objects import AlertSeverity, AlertType


@dataclass(frozen=True)
class PiracyAlert:
    """PiracyAlert domain entity."""

    id: uuid.UUID
    license_id: uuid.UUID
    product_id: uuid.UUID
    alert_type: AlertType
    severity: AlertSeverity
    created_at: datetime
    details: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Validate piracy alert entity."""
        if not self.license_id:
            raise ValueError("License ID is required")
        if not self.product_id:
            raise ValueError("Product ID is required")

    @classmethod
    def create(
        cls,
        license_id: uuid.UUID,
        product_id: uuid.UUID,
        alert_type: AlertType,
        severity: AlertSeverity,
        details: Optional[Dict[str, Any]] = None,
        created_at: Optional[datetime] = None,
        alert_id: Optional[uuid.UUID] = None,
    ) -> "PiracyAlert":
        """
        Create a new PiracyAlert entity.

        Args:
            license_id: License the alert is about
            product_id: Product of that license
            alert_type: What was detected
            severity: How serious it is
            details: Counts and identifiers observed at detection time
            created_at: Detection time (defaults to now)
            alert_id: Optional UUID (generated if not provided)

        Returns:
            PiracyAlert entity instance
        """
        return cls(
            id=alert_id or uuid.uuid4(),
            license_id=license_id,
            product_id=product_id,
            alert_type=alert_type,
            severity=severity,
            created_at=created_at or datetime.now(timezone.utc),
            details=dict(details or {}),
        )
