"""
Unit tests for GenerateLicenseHandler.
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from core.domain.exceptions import InvalidCustomerEmailError, ProductNotFoundError
from core.domain.value_objects import LicenseType
from licenses.application.commands.generate_license import GenerateLicenseCommand
from licenses.application.handlers.generate_license_handler import GenerateLicenseHandler
from licenses.domain.events import LicenseKeyGenerated
from licenses.domain.services import CustomLicenseSettings

ISSUED_AT = datetime(2026, 5, 4, 9, 30, tzinfo=timezone.utc)


@pytest.mark.asyncio
class TestGenerateLicenseHandler:
    """Tests for license issuance."""

    async def test_generates_license_with_product_quotas(
        self, generate_handler, product_repository, license_key_repository, product_factory
    ):
        product = await product_repository.save(
            product_factory(license_type=LicenseType.SINGLE, download_limit=3)
        )

        result = await generate_handler.handle(
            GenerateLicenseCommand(
                product_id=product.id,
                customer_email="buyer@example.com",
                customer_order_id="order-42",
            )
        )

        assert result.product_id == product.id
        assert result.key_string.startswith("DL-")
        assert result.status == "active"
        assert result.max_downloads == 3
        assert result.max_activations == 1
        assert result.download_count == 0
        assert result.activation_count == 0
        assert result.expires_at is None
        stored = await license_key_repository.find_by_key_string(result.key_string)
        assert stored.id == result.id
        assert stored.customer_order_id == "order-42"

    async def test_unlimited_product_gets_large_activation_quota(
        self, generate_handler, product_repository, product_factory
    ):
        product = await product_repository.save(
            product_factory(license_type=LicenseType.UNLIMITED)
        )

        result = await generate_handler.handle(
            GenerateLicenseCommand(product_id=product.id, customer_email="buyer@example.com")
        )

        assert result.max_activations == 999

    async def test_custom_settings_override_product(
        self, generate_handler, product_repository, product_factory
    ):
        product = await product_repository.save(product_factory(download_limit=3))

        result = await generate_handler.handle(
            GenerateLicenseCommand(
                product_id=product.id,
                customer_email="buyer@example.com",
                custom_settings=CustomLicenseSettings(max_downloads=10, max_activations=3),
            )
        )

        assert result.max_downloads == 10
        assert result.max_activations == 3

    async def test_expiry_from_access_duration(
        self, product_repository, license_key_repository, event_bus, product_factory
    ):
        product = await product_repository.save(product_factory(access_duration_days=30))
        handler = GenerateLicenseHandler(
            product_repository=product_repository,
            license_key_repository=license_key_repository,
            event_bus=event_bus,
            clock=lambda: ISSUED_AT,
        )

        result = await handler.handle(
            GenerateLicenseCommand(product_id=product.id, customer_email="buyer@example.com")
        )

        assert result.created_at == ISSUED_AT
        assert result.expires_at == ISSUED_AT + timedelta(days=30)

    async def test_unknown_product(self, generate_handler, license_key_repository):
        with pytest.raises(ProductNotFoundError):
            await generate_handler.handle(
                GenerateLicenseCommand(product_id=uuid.uuid4(), customer_email="buyer@example.com")
            )

    async def test_product_of_another_owner(
        self, generate_handler, product_repository, product_factory
    ):
        product = await product_repository.save(product_factory())

        with pytest.raises(ProductNotFoundError):
            await generate_handler.handle(
                GenerateLicenseCommand(
                    product_id=product.id,
                    customer_email="buyer@example.com",
                    owner_id=uuid.uuid4(),
                )
            )

    async def test_owner_may_issue(self, generate_handler, product_repository, product_factory):
        product = await product_repository.save(product_factory())

        result = await generate_handler.handle(
            GenerateLicenseCommand(
                product_id=product.id,
                customer_email="buyer@example.com",
                owner_id=product.owner_id,
            )
        )

        assert result.product_id == product.id

    @pytest.mark.parametrize("email", ["nobody", "", "two words@example.com"])
    async def test_invalid_email_rejected(
        self,
        generate_handler,
        product_repository,
        license_key_repository,
        product_factory,
        email,
    ):
        product = await product_repository.save(product_factory())

        with pytest.raises(InvalidCustomerEmailError) as exc_info:
            await generate_handler.handle(
                GenerateLicenseCommand(product_id=product.id, customer_email=email)
            )

        assert exc_info.value.code == "INVALID_CUSTOMER_EMAIL"
        assert license_key_repository._licenses == {}

    async def test_publishes_event(
        self, generate_handler, product_repository, recorder, product_factory
    ):
        product = await product_repository.save(product_factory())

        result = await generate_handler.handle(
            GenerateLicenseCommand(
                product_id=product.id,
                customer_email="buyer@example.com",
                customer_order_id="order-42",
            )
        )

        events = recorder.of_type(LicenseKeyGenerated)
        assert len(events) == 1
        assert events[0].license_id == result.id
        assert events[0].product_id == product.id
        assert events[0].customer_order_id == "order-42"

    async def test_each_license_gets_its_own_key(
        self, generate_handler, product_repository, product_factory
    ):
        product = await product_repository.save(product_factory())
        command = GenerateLicenseCommand(product_id=product.id, customer_email="buyer@example.com")

        keys = {(await generate_handler.handle(command)).key_string for _ in range(20)}

        assert len(keys) == 20
