"""
Piracy domain services.

Domain services contain business logic that doesn't naturally
fit within a single entity.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Sequence

from core.domain.events import EventBus
from core.domain.time import utc_now
from core.domain.value_objects import AlertSeverity, AlertType
from core.infrastructure.database import with_timeout
from core.metrics import piracy_alert_failures_total, piracy_alerts_total
from licenses.domain.license_key import LicenseKey
from piracy.domain.events import PiracyAlertRaised
from piracy.domain.piracy_alert import PiracyAlert
from piracy.ports.piracy_alert_repository import PiracyAlertRepository

logger = logging.getLogger(__name__)


class PiracyDetector:
    """
    Domain service that records alerts when a license is used beyond quota.

    Alerting is a side effect of a decision the caller has already made. A
    failure to record an alert is logged and counted, never raised.
    """

    def __init__(
        self,
        repository: PiracyAlertRepository,
        event_bus: Optional[EventBus] = None,
        timeout: Optional[float] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.repository = repository
        self.event_bus = event_bus
        self.timeout = timeout
        self.clock = clock

    async def on_activation_limit_exceeded(
        self, license_key: LicenseKey, device_fingerprint: str
    ) -> Optional[PiracyAlert]:
        """
        Record a key sharing alert for a device refused activation.

        Args:
            license_key: License that ran out of activations
            device_fingerprint: Device that was refused

        Returns:
            The recorded alert, or None if it could not be recorded
        """
        return await self._raise(
            license_key,
            AlertType.KEY_SHARING,
            AlertSeverity.HIGH,
            {
                "activation_count": license_key.activation_count,
                "max_activations": license_key.max_activations,
                "device_fingerprint": device_fingerprint,
            },
        )

    async def on_download_limit_exceeded(
        self, license_key: LicenseKey, ip_address: Optional[str] = None
    ) -> Optional[PiracyAlert]:
        """
        Record an excessive downloads alert for a refused download.

        Args:
            license_key: License that ran out of downloads
            ip_address: Client address of the refused download, if known

        Returns:
            The recorded alert, or None if it could not be recorded
        """
        details: Dict[str, Any] = {
            "download_count": license_key.download_count,
            "max_downloads": license_key.max_downloads,
        }
        if ip_address:
            details["ip_address"] = ip_address
        return await self._raise(
            license_key, AlertType.EXCESSIVE_DOWNLOADS, AlertSeverity.MEDIUM, details
        )

    async def on_multiple_ips(
        self, license_key: LicenseKey, ip_addresses: Sequence[str]
    ) -> Optional[PiracyAlert]:
        """
        Record a multiple IPs alert for a license downloaded from too many addresses.

        Args:
            license_key: License being downloaded
            ip_addresses: Every known download address, the newest last

        Returns:
            The recorded alert, or None if it could not be recorded
        """
        return await self._raise(
            license_key,
            AlertType.MULTIPLE_IPS,
            AlertSeverity.HIGH,
            {"ip_addresses": list(ip_addresses)},
        )

    async def _raise(
        self,
        license_key: LicenseKey,
        alert_type: AlertType,
        severity: AlertSeverity,
        details: Dict[str, Any],
    ) -> Optional[PiracyAlert]:
        alert = PiracyAlert.create(
            license_id=license_key.id,
            product_id=license_key.product_id,
            alert_type=alert_type,
            severity=severity,
            details=details,
            created_at=self.clock(),
        )
        try:
            saved = await with_timeout(
                self.repository.save(alert), self.timeout, "piracy alert write"
            )
        except Exception:
            piracy_alert_failures_total.labels(alert_type=alert_type.value).inc()
            logger.exception(
                "Could not record %s alert for license %s", alert_type.value, license_key.id
            )
            return None

        piracy_alerts_total.labels(alert_type=alert_type.value, severity=severity.value).inc()
        logger.warning(
            "Piracy alert %s raised for license %s",
            alert_type.value,
            license_key.id,
            extra={"alert_id": str(saved.id), "details": details},
        )

        if self.event_bus is not None:
            await self.event_bus.publish(
                PiracyAlertRaised(
                    alert_id=saved.id,
                    license_id=saved.license_id,
                    alert_type=alert_type.value,
                    severity=severity.value,
                )
            )
        return saved
