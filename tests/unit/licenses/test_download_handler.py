"""
Unit tests for RecordDownloadHandler.
"""

from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from core.domain.exceptions import (
    DownloadLimitExceededError,
    LicenseExpiredError,
    LicenseNotFoundError,
    LicenseRevokedError,
    LicenseSuspendedError,
)
from core.domain.value_objects import AlertSeverity, AlertType, LicenseStatus
from licenses.application.commands.record_download import RecordDownloadCommand
from licenses.application.handlers.record_download_handler import RecordDownloadHandler
from licenses.domain.events import DownloadRecorded, LicenseExpired
from licenses.infrastructure.repositories.in_memory_license_key_repository import (
    InMemoryLicenseKeyRepository,
)

ACCESSED_AT = datetime(2026, 6, 1, 8, 0, tzinfo=timezone.utc)


class AddressBlindLicenseKeyRepository(InMemoryLicenseKeyRepository):
    async def record_download_ip_address(self, license_id, ip_address):
        raise ConnectionError("database is gone")


@pytest.mark.asyncio
class TestRecordDownloadHandler:
    """Tests for download quota consumption."""

    async def test_download_consumes_quota(
        self, download_handler, stored_license, license_key_repository, recorder
    ):
        _, license_key = await stored_license(max_downloads=2)

        result = await download_handler.handle(RecordDownloadCommand(license_key.key_string))

        assert result.license_id == license_key.id
        assert result.download_count == 1
        assert result.downloads_remaining == 1
        stored = await license_key_repository.find_by_id(license_key.id)
        assert stored.download_count == 1
        assert stored.last_accessed_at == result.accessed_at
        events = recorder.of_type(DownloadRecorded)
        assert [e.download_count for e in events] == [1]

    async def test_clock_sets_access_time(
        self, stored_license, license_key_repository, piracy_detector, event_bus
    ):
        handler = RecordDownloadHandler(
            license_key_repository=license_key_repository,
            piracy_detector=piracy_detector,
            event_bus=event_bus,
            clock=lambda: ACCESSED_AT,
        )
        _, license_key = await stored_license()

        result = await handler.handle(RecordDownloadCommand(license_key.key_string))

        assert result.accessed_at == ACCESSED_AT

    async def test_download_beyond_quota(
        self, download_handler, stored_license, license_key_repository, piracy_alert_repository
    ):
        _, license_key = await stored_license(max_downloads=1)
        command = RecordDownloadCommand(license_key.key_string)
        await download_handler.handle(command)

        with pytest.raises(DownloadLimitExceededError):
            await download_handler.handle(command)

        stored = await license_key_repository.find_by_id(license_key.id)
        assert stored.download_count == 1
        alerts = await piracy_alert_repository.list_by_license(license_key.id)
        assert len(alerts) == 1
        assert alerts[0].alert_type == AlertType.EXCESSIVE_DOWNLOADS
        assert alerts[0].severity == AlertSeverity.MEDIUM
        assert alerts[0].details == {"download_count": 1, "max_downloads": 1}

    async def test_zero_download_quota(self, download_handler, stored_license):
        _, license_key = await stored_license(max_downloads=0)

        with pytest.raises(DownloadLimitExceededError):
            await download_handler.handle(RecordDownloadCommand(license_key.key_string))

    async def test_unknown_key(self, download_handler):
        with pytest.raises(LicenseNotFoundError):
            await download_handler.handle(RecordDownloadCommand("DL-NOPE-NOPE-NOPE-NOPE"))

    @pytest.mark.parametrize(
        "status, error",
        [
            (LicenseStatus.EXPIRED, LicenseExpiredError),
            (LicenseStatus.REVOKED, LicenseRevokedError),
            (LicenseStatus.SUSPENDED, LicenseSuspendedError),
        ],
    )
    async def test_inactive_license(
        self,
        status,
        error,
        download_handler,
        product_repository,
        license_key_repository,
        piracy_alert_repository,
        product_factory,
        license_factory,
    ):
        product = await product_repository.save(product_factory())
        license_key = await license_key_repository.insert(
            replace(license_factory(product), status=status)
        )

        with pytest.raises(error):
            await download_handler.handle(RecordDownloadCommand(license_key.key_string))

        stored = await license_key_repository.find_by_id(license_key.id)
        assert stored.download_count == 0
        assert await piracy_alert_repository.list_by_license(license_key.id) == []

    async def test_past_expiry_expires_license(
        self, download_handler, stored_license, license_key_repository, recorder
    ):
        _, license_key = await stored_license(
            expires_at=datetime.now(timezone.utc) - timedelta(minutes=1)
        )

        with pytest.raises(LicenseExpiredError):
            await download_handler.handle(RecordDownloadCommand(license_key.key_string))

        stored = await license_key_repository.find_by_id(license_key.id)
        assert stored.status == LicenseStatus.EXPIRED
        assert stored.download_count == 0
        assert len(recorder.of_type(LicenseExpired)) == 1

    async def test_client_addresses_are_remembered(
        self, download_handler, stored_license, license_key_repository, piracy_alert_repository
    ):
        _, license_key = await stored_license(max_downloads=5)

        for address in ("10.0.0.1", "10.0.0.2", "10.0.0.1"):
            await download_handler.handle(RecordDownloadCommand(license_key.key_string, address))

        stored = await license_key_repository.find_by_id(license_key.id)
        assert stored.download_ip_addresses == ("10.0.0.1", "10.0.0.2")
        assert await piracy_alert_repository.list_by_license(license_key.id) == []

    async def test_new_address_past_limit_is_alerted(
        self, download_handler, stored_license, piracy_alert_repository
    ):
        _, license_key = await stored_license(max_downloads=10)
        addresses = ["10.0.0.1", "10.0.0.2", "10.0.0.3", "10.0.0.3", "10.0.0.4", "10.0.0.4"]

        for address in addresses:
            await download_handler.handle(RecordDownloadCommand(license_key.key_string, address))

        alerts = await piracy_alert_repository.list_by_license(license_key.id)
        assert len(alerts) == 1
        assert alerts[0].alert_type == AlertType.MULTIPLE_IPS
        assert alerts[0].severity == AlertSeverity.HIGH
        assert alerts[0].details == {
            "ip_addresses": ["10.0.0.1", "10.0.0.2", "10.0.0.3", "10.0.0.4"]
        }

    async def test_every_address_past_limit_is_alerted(
        self,
        stored_license,
        license_key_repository,
        piracy_detector,
        piracy_alert_repository,
        event_bus,
    ):
        handler = RecordDownloadHandler(
            license_key_repository=license_key_repository,
            piracy_detector=piracy_detector,
            event_bus=event_bus,
            max_distinct_ip_addresses=1,
        )
        _, license_key = await stored_license(max_downloads=10)

        for address in ("10.0.0.1", "10.0.0.2", "10.0.0.3"):
            await handler.handle(RecordDownloadCommand(license_key.key_string, address))

        alerts = await piracy_alert_repository.list_by_license(license_key.id)
        assert [len(a.details["ip_addresses"]) for a in alerts] == [2, 3]

    async def test_download_without_address(
        self, download_handler, stored_license, license_key_repository
    ):
        _, license_key = await stored_license()

        await download_handler.handle(RecordDownloadCommand(license_key.key_string))

        stored = await license_key_repository.find_by_id(license_key.id)
        assert stored.download_ip_addresses == ()

    async def test_address_store_failure_keeps_download(
        self,
        product_repository,
        piracy_detector,
        piracy_alert_repository,
        event_bus,
        product_factory,
        license_factory,
    ):
        license_key_repository = AddressBlindLicenseKeyRepository()
        product = await product_repository.save(product_factory())
        license_key = await license_key_repository.insert(license_factory(product))
        handler = RecordDownloadHandler(
            license_key_repository=license_key_repository,
            piracy_detector=piracy_detector,
            event_bus=event_bus,
            max_distinct_ip_addresses=0,
        )

        result = await handler.handle(RecordDownloadCommand(license_key.key_string, "10.0.0.1"))

        assert result.download_count == 1
        assert await piracy_alert_repository.list_by_license(license_key.id) == []

    async def test_refused_download_alert_carries_address(
        self, download_handler, stored_license, piracy_alert_repository
    ):
        _, license_key = await stored_license(max_downloads=0)

        with pytest.raises(DownloadLimitExceededError):
            await download_handler.handle(
                RecordDownloadCommand(license_key.key_string, "10.0.0.9")
            )

        alerts = await piracy_alert_repository.list_by_license(license_key.id)
        assert alerts[0].details["ip_address"] == "10.0.0.9"
