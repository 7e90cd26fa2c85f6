"""
In-memory implementation of PiracyAlertRepository.

Used for local development without a database and in unit tests.
"""

import asyncio
import uuid
from typing import List

from piracy.domain.piracy_alert import PiracyAlert
from piracy.ports.piracy_alert_repository import PiracyAlertRepository


class InMemoryPiracyAlertRepository(PiracyAlertRepository):
    """List-backed alert sink."""

    def __init__(self):
        self._alerts: List[PiracyAlert] = []

    async def save(self, alert: PiracyAlert) -> PiracyAlert:
        await asyncio.sleep(0)
        self._alerts.append(alert)
        return alert

    async def list_by_license(self, license_id: uuid.UUID) -> List[PiracyAlert]:
        return [a for a in self._alerts if a.license_id == license_id]
