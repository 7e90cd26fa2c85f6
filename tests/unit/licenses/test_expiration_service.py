"""
Unit tests for LicenseExpirationService.
"""
from datetime import datetime, timedelta, timezone

import pytest

from core.domain.value_objects import LicenseStatus
from licenses.application.services.license_expiration_service import (
    LicenseExpirationService,
)
from licenses.domain.events import LicenseExpired
from licenses.infrastructure.repositories.in_memory_license_key_repository import (
    InMemoryLicenseKeyRepository,
)

NOW = datetime(2026, 7, 1, tzinfo=timezone.utc)


class UnreachableLicenseKeyRepository(InMemoryLicenseKeyRepository):
    async def mark_expired(self, license_id, at):
        raise ConnectionError("database is gone")


@pytest.mark.asyncio
class TestLicenseExpirationService:
    async def test_expires_at_the_boundary(
        self, stored_license, license_key_repository, event_bus, recorder
    ):
        service = LicenseExpirationService(license_key_repository, event_bus, clock=lambda: NOW)
        _, license_key = await stored_license(expires_at=NOW)

        result = await service.expire_if_due(license_key)

        assert result.status == LicenseStatus.EXPIRED
        stored = await license_key_repository.find_by_id(license_key.id)
        assert stored.status == LicenseStatus.EXPIRED
        events = recorder.of_type(LicenseExpired)
        assert len(events) == 1
        assert events[0].expires_at == NOW

    async def test_before_expiry_is_untouched(
        self, stored_license, license_key_repository, event_bus, recorder
    ):
        service = LicenseExpirationService(license_key_repository, event_bus, clock=lambda: NOW)
        _, license_key = await stored_license(expires_at=NOW + timedelta(seconds=1))

        assert await service.expire_if_due(license_key) is license_key
        assert recorder.events == []

    async def test_stale_read_does_not_publish_twice(
        self, stored_license, license_key_repository, event_bus, recorder
    ):
        service = LicenseExpirationService(license_key_repository, event_bus, clock=lambda: NOW)
        _, license_key = await stored_license(expires_at=NOW - timedelta(days=1))

        first = await service.expire_if_due(license_key)
        second = await service.expire_if_due(license_key)

        assert first.status == second.status == LicenseStatus.EXPIRED
        assert len(recorder.of_type(LicenseExpired)) == 1

    async def test_store_failure_still_reports_expired(
        self, product_factory, license_factory, event_bus, recorder
    ):
        repository = UnreachableLicenseKeyRepository()
        service = LicenseExpirationService(
            repository, event_bus, timeout=0.1, clock=lambda: NOW
        )
        license_key = await repository.insert(
            license_factory(product_factory(), expires_at=NOW - timedelta(days=1))
        )

        result = await service.expire_if_due(license_key)

        assert result.status == LicenseStatus.EXPIRED
        assert recorder.events == []
