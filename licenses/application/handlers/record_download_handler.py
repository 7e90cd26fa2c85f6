"""
RecordDownloadHandler.

Handles the record download command.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from core.domain.events import EventBus
from core.domain.exceptions import (
    DownloadLimitExceededError,
    LicenseExpiredError,
    LicenseNotFoundError,
    LicenseRevokedError,
    LicenseSuspendedError,
)
from core.domain.time import utc_now
from core.domain.value_objects import LicenseStatus
from core.infrastructure.config import licensing_setting
from core.infrastructure.database import with_timeout
from core.infrastructure.events import event_bus as default_event_bus
from core.metrics import downloads_total
from licenses.application.commands.record_download import RecordDownloadCommand
from licenses.application.dto.license_dto import DownloadDTO
from licenses.application.services.license_expiration_service import (
    LicenseExpirationService,
)
from licenses.domain.events import DownloadRecorded
from licenses.domain.license_key import LicenseKey
from licenses.ports.license_key_repository import LicenseKeyRepository
from piracy.domain.services import PiracyDetector

logger = logging.getLogger(__name__)

STATUS_ERRORS = {
    LicenseStatus.EXPIRED: LicenseExpiredError,
    LicenseStatus.REVOKED: LicenseRevokedError,
    LicenseStatus.SUSPENDED: LicenseSuspendedError,
}


class RecordDownloadHandler:
    """Handler for RecordDownloadCommand."""

    def __init__(
        self,
        license_key_repository: LicenseKeyRepository,
        piracy_detector: PiracyDetector,
        expiration_service: Optional[LicenseExpirationService] = None,
        event_bus: Optional[EventBus] = None,
        timeout: Optional[float] = None,
        clock: Callable[[], datetime] = utc_now,
        max_distinct_ip_addresses: Optional[int] = None,
    ):
        """Initialize handler with repository and domain services."""
        self.license_key_repository = license_key_repository
        self.piracy_detector = piracy_detector
        self.event_bus = event_bus or default_event_bus
        self.expiration_service = expiration_service or LicenseExpirationService(
            license_key_repository, self.event_bus, timeout=timeout, clock=clock
        )
        self.timeout = timeout
        self.clock = clock
        self.max_distinct_ip_addresses = (
            max_distinct_ip_addresses
            if max_distinct_ip_addresses is not None
            else licensing_setting("MAX_DISTINCT_DOWNLOAD_IPS")
        )

    @staticmethod
    def _ensure_active(license_key: LicenseKey) -> None:
        if not license_key.is_active:
            raise STATUS_ERRORS[license_key.status]()

    async def handle(self, command: RecordDownloadCommand) -> DownloadDTO:
        """
        Handle record download command.

        Args:
            command: RecordDownloadCommand

        Returns:
            DownloadDTO with the remaining download quota

        Raises:
            LicenseNotFoundError: If the key does not exist
            LicenseExpiredError, LicenseRevokedError, LicenseSuspendedError:
                If the license is not active
            DownloadLimitExceededError: If the download quota is used up
            PersistenceFailureError: If the store failed or timed out
        """
        license_key = await with_timeout(
            self.license_key_repository.find_by_key_string(command.key_string),
            self.timeout,
            "license lookup",
        )
        if license_key is None:
            raise LicenseNotFoundError()

        self._ensure_active(license_key)
        license_key = await self.expiration_service.expire_if_due(license_key)
        self._ensure_active(license_key)

        accessed_at = self.clock()
        download_count = await with_timeout(
            self.license_key_repository.increment_download_count(license_key.id, accessed_at),
            self.timeout,
            "download count increment",
        )

        if download_count is None:
            current = await with_timeout(
                self.license_key_repository.find_by_id(license_key.id),
                self.timeout,
                "license lookup",
            )
            current = current or license_key
            # Status may have changed between the read and the update.
            self._ensure_active(current)
            downloads_total.labels(outcome="rejected").inc()
            await self.piracy_detector.on_download_limit_exceeded(current, command.ip_address)
            raise DownloadLimitExceededError(
                f"Download limit of {current.max_downloads} reached"
            )

        downloads_total.labels(outcome="recorded").inc()
        logger.info(
            "Download %d/%d recorded for license %s",
            download_count,
            license_key.max_downloads,
            license_key.id,
        )
        if command.ip_address:
            await self._track_ip_address(license_key, command.ip_address)

        await self.event_bus.publish(
            DownloadRecorded(license_id=license_key.id, download_count=download_count)
        )

        return DownloadDTO(
            license_id=license_key.id,
            download_count=download_count,
            downloads_remaining=max(0, license_key.max_downloads - download_count),
            accessed_at=accessed_at,
        )

    async def _track_ip_address(self, license_key: LicenseKey, ip_address: str) -> None:
        """
        Remember the download's client address.

        A new address beyond the distinct address limit raises a multiple
        IPs alert. Failures here are logged; the download stands.
        """
        try:
            ip_addresses = await with_timeout(
                self.license_key_repository.record_download_ip_address(
                    license_key.id, ip_address
                ),
                self.timeout,
                "download address update",
            )
        except Exception:
            logger.exception("Could not record download address for license %s", license_key.id)
            return

        if ip_addresses is not None and len(ip_addresses) > self.max_distinct_ip_addresses:
            await self.piracy_detector.on_multiple_ips(license_key, ip_addresses)
