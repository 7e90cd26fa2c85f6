"""
Django implementation of PiracyAlertRepository port.

This adapter converts between domain entities and Django ORM models.
"""

import uuid
from typing import List

from asgiref.sync import sync_to_async

from core.domain.value_objects import AlertSeverity, AlertType
from piracy.domain.piracy_alert import PiracyAlert
from piracy.infrastructure.models import PiracyAlert as PiracyAlertModel
from piracy.ports.piracy_alert_repository import PiracyAlertRepository


class DjangoPiracyAlertRepository(PiracyAlertRepository):
    """Django ORM implementation of PiracyAlertRepository."""

    def _to_domain(self, model: PiracyAlertModel) -> PiracyAlert:
        return PiracyAlert(
            id=model.id,
            license_id=model.license_id,
            product_id=model.product_id,
            alert_type=AlertType(model.alert_type),
            severity=AlertSeverity(model.severity),
            created_at=model.created_at,
            details=model.details or {},
        )

    @sync_to_async
    def save(self, alert: PiracyAlert) -> PiracyAlert:
        """
        Persist a new alert.

        Args:
            alert: PiracyAlert entity to save

        Returns:
            Saved alert entity
        """
        model = PiracyAlertModel.objects.create(
            id=alert.id,
            license_id=alert.license_id,
            product_id=alert.product_id,
            alert_type=alert.alert_type.value,
            severity=alert.severity.value,
            details=alert.details,
            created_at=alert.created_at,
        )
        return self._to_domain(model)

    async def list_by_license(self, license_id: uuid.UUID) -> List[PiracyAlert]:
        models = await sync_to_async(
            lambda: list(
                PiracyAlertModel.objects.filter(license_id=license_id).order_by("created_at")
            )
        )()
        return [self._to_domain(model) for model in models]
