"""
Unit tests for the in-memory event bus.
"""
import uuid

import pytest

from core.domain.events import EventHandler
from core.infrastructure.events import InMemoryEventBus
from licenses.domain.events import DownloadRecorded, LicenseExpired


class CountingHandler(EventHandler):
    def __init__(self):
        self.calls = 0

    async def handle(self, event):
        self.calls += 1


class FailingHandler(EventHandler):
    async def handle(self, event):
        raise RuntimeError("handler down")


@pytest.mark.asyncio
class TestInMemoryEventBus:
    """Tests for InMemoryEventBus."""

    async def test_publish_reaches_subscribers_of_the_type_only(self):
        bus = InMemoryEventBus()
        handler = CountingHandler()
        bus.subscribe(DownloadRecorded, handler)

        await bus.publish(DownloadRecorded(license_id=uuid.uuid4(), download_count=1))
        await bus.publish(LicenseExpired(license_id=uuid.uuid4(), expires_at=None))

        assert handler.calls == 1

    async def test_subscribing_twice_delivers_once(self):
        bus = InMemoryEventBus()
        handler = CountingHandler()
        bus.subscribe(DownloadRecorded, handler)
        bus.subscribe(DownloadRecorded, handler)

        await bus.publish(DownloadRecorded(license_id=uuid.uuid4(), download_count=1))

        assert handler.calls == 1

    async def test_failing_handler_does_not_reach_publisher(self):
        bus = InMemoryEventBus()
        healthy = CountingHandler()
        bus.subscribe(DownloadRecorded, FailingHandler())
        bus.subscribe(DownloadRecorded, healthy)

        await bus.publish(DownloadRecorded(license_id=uuid.uuid4(), download_count=1))

        assert healthy.calls == 1

    async def test_clear_drops_subscriptions(self):
        bus = InMemoryEventBus()
        handler = CountingHandler()
        bus.subscribe(DownloadRecorded, handler)
        bus.clear()

        await bus.publish(DownloadRecorded(license_id=uuid.uuid4(), download_count=1))

        assert handler.calls == 0


class TestDomainEvents:
    """Tests for domain event construction."""

    def test_event_carries_type_and_aggregate(self):
        license_id = uuid.uuid4()
        event = DownloadRecorded(license_id=license_id, download_count=3)

        assert event.event_type == "DownloadRecorded"
        assert event.aggregate_id == str(license_id)
        assert event.to_dict()["event_type"] == "DownloadRecorded"
        assert event.download_count == 3

    def test_payload_holds_subclass_attributes(self):
        license_id = uuid.uuid4()
        event = DownloadRecorded(license_id=license_id, download_count=3)

        assert event.to_dict()["payload"] == {
            "license_id": str(license_id),
            "download_count": 3,
        }
