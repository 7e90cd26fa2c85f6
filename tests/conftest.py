"""
Pytest configuration and shared fixtures.

Unit tests run against the in-memory adapters; integration tests use the
Django adapters and the database.
"""

import uuid

import pytest

from activations.domain.services import ActivationTracker
from activations.infrastructure.repositories.django_activation_repository import (
    DjangoActivationRepository,
)
from activations.infrastructure.repositories.in_memory_activation_repository import (
    InMemoryActivationRepository,
)
from catalog.domain.digital_product import DigitalProduct
from catalog.infrastructure.repositories.django_digital_product_repository import (
    DjangoDigitalProductRepository,
)
from catalog.infrastructure.repositories.in_memory_digital_product_repository import (
    InMemoryDigitalProductRepository,
)
from core.domain.events import DomainEvent, EventHandler
from core.domain.value_objects import LicenseType
from core.infrastructure.events import InMemoryEventBus
from licenses.application.handlers.generate_license_handler import GenerateLicenseHandler
from licenses.application.handlers.record_download_handler import RecordDownloadHandler
from licenses.application.handlers.validate_license_handler import ValidateLicenseHandler
from licenses.domain.license_key import LicenseKey, generate_license_key
from licenses.infrastructure.repositories.django_license_key_repository import (
    DjangoLicenseKeyRepository,
)
from licenses.infrastructure.repositories.in_memory_license_key_repository import (
    InMemoryLicenseKeyRepository,
)
from piracy.domain.services import PiracyDetector
from piracy.infrastructure.repositories.django_piracy_alert_repository import (
    DjangoPiracyAlertRepository,
)
from piracy.infrastructure.repositories.in_memory_piracy_alert_repository import (
    InMemoryPiracyAlertRepository,
)


class RecordingHandler(EventHandler):
    """Collects every event it is given."""

    def __init__(self):
        self.events = []

    async def handle(self, event: DomainEvent) -> None:
        self.events.append(event)

    def of_type(self, event_type):
        return [e for e in self.events if isinstance(e, event_type)]


def make_product(**overrides) -> DigitalProduct:
    """Build a product entity with sensible defaults."""
    fields = {
        "owner_id": uuid.uuid4(),
        "name": "Photo Presets Pack",
        "license_type": LicenseType.SINGLE,
        "download_limit": 5,
        "access_duration_days": None,
        "requires_activation": True,
    }
    fields.update(overrides)
    return DigitalProduct.create(**fields)


def make_license(product: DigitalProduct, **overrides) -> LicenseKey:
    """Build an unused license entity for a product."""
    fields = {
        "product_id": product.id,
        "customer_email": "buyer@example.com",
        "key_string": generate_license_key("DL"),
        "max_downloads": 5,
        "max_activations": 1,
        "customer_order_id": "order-1001",
    }
    fields.update(overrides)
    return LicenseKey.create(**fields)


# In-memory adapters


@pytest.fixture
def event_bus():
    """Fixture for an isolated event bus."""
    return InMemoryEventBus()


@pytest.fixture
def recorder(event_bus):
    """Records every event published on the ``event_bus`` fixture."""
    from activations.domain.events import DeviceActivated
    from licenses.domain.events import DownloadRecorded, LicenseExpired, LicenseKeyGenerated
    from piracy.domain.events import PiracyAlertRaised

    handler = RecordingHandler()
    for event_type in (
        LicenseKeyGenerated,
        LicenseExpired,
        DownloadRecorded,
        DeviceActivated,
        PiracyAlertRaised,
    ):
        event_bus.subscribe(event_type, handler)
    return handler


@pytest.fixture
def product_repository():
    """Fixture for an in-memory DigitalProductRepository."""
    return InMemoryDigitalProductRepository()


@pytest.fixture
def license_key_repository():
    """Fixture for an in-memory LicenseKeyRepository."""
    return InMemoryLicenseKeyRepository()


@pytest.fixture
def activation_repository(license_key_repository):
    """Fixture for an in-memory ActivationRepository."""
    return InMemoryActivationRepository(license_key_repository)


@pytest.fixture
def piracy_alert_repository():
    """Fixture for an in-memory PiracyAlertRepository."""
    return InMemoryPiracyAlertRepository()


@pytest.fixture
def piracy_detector(piracy_alert_repository, event_bus):
    return PiracyDetector(piracy_alert_repository, event_bus=event_bus)


@pytest.fixture
def activation_tracker(activation_repository):
    return ActivationTracker(activation_repository)


@pytest.fixture
def generate_handler(product_repository, license_key_repository, event_bus):
    return GenerateLicenseHandler(
        product_repository=product_repository,
        license_key_repository=license_key_repository,
        event_bus=event_bus,
    )


@pytest.fixture
def validate_handler(
    license_key_repository, product_repository, activation_tracker, piracy_detector, event_bus
):
    return ValidateLicenseHandler(
        license_key_repository=license_key_repository,
        product_repository=product_repository,
        activation_tracker=activation_tracker,
        piracy_detector=piracy_detector,
        event_bus=event_bus,
    )


@pytest.fixture
def download_handler(license_key_repository, piracy_detector, event_bus):
    return RecordDownloadHandler(
        license_key_repository=license_key_repository,
        piracy_detector=piracy_detector,
        event_bus=event_bus,
    )


# Django adapters


@pytest.fixture
def django_product_repository():
    """Fixture for DjangoDigitalProductRepository."""
    return DjangoDigitalProductRepository()


@pytest.fixture
def django_license_key_repository():
    """Fixture for DjangoLicenseKeyRepository."""
    return DjangoLicenseKeyRepository()


@pytest.fixture
def django_activation_repository():
    """Fixture for DjangoActivationRepository."""
    return DjangoActivationRepository()


@pytest.fixture
def django_piracy_alert_repository():
    """Fixture for DjangoPiracyAlertRepository."""
    return DjangoPiracyAlertRepository()


@pytest.fixture
def api_client():
    """Fixture for DRF API client."""
    from rest_framework.test import APIClient

    return APIClient()


@pytest.fixture
def product_factory():
    """Fixture returning ``make_product``."""
    return make_product


@pytest.fixture
def license_factory():
    """Fixture returning ``make_license``."""
    return make_license


@pytest.fixture
def stored_license(product_repository, license_key_repository):
    """Store a product and a license for it in the in-memory adapters."""

    async def store(product_overrides=None, **license_overrides):
        product = await product_repository.save(make_product(**(product_overrides or {})))
        license_key = await license_key_repository.insert(
            make_license(product, **license_overrides)
        )
        return product, license_key

    return store
