"""
Unit tests for audit and security event handlers.
"""
import logging
import uuid

import pytest

from core.infrastructure.event_handlers import (
    AUDITED_EVENTS,
    AuditLogEventHandler,
    PiracyAlertNotificationHandler,
    register_event_handlers,
)
from licenses.domain.events import DownloadRecorded
from piracy.domain.events import PiracyAlertRaised


@pytest.mark.asyncio
class TestEventHandlers:
    async def test_audit_log(self, caplog):
        event = DownloadRecorded(license_id=uuid.uuid4(), download_count=2)

        with caplog.at_level(logging.INFO, logger="audit"):
            await AuditLogEventHandler().handle(event)

        record = caplog.records[-1]
        assert record.name == "audit"
        assert record.event_type == "DownloadRecorded"
        assert record.aggregate_id == str(event.license_id)

    async def test_piracy_alert_goes_to_security_log(self, caplog):
        event = PiracyAlertRaised(
            alert_id=uuid.uuid4(),
            license_id=uuid.uuid4(),
            alert_type="key_sharing",
            severity="high",
        )

        with caplog.at_level(logging.WARNING, logger="security"):
            await PiracyAlertNotificationHandler().handle(event)

        record = caplog.records[-1]
        assert record.name == "security"
        assert record.alert_type == "key_sharing"
        assert record.severity == "high"

    async def test_other_events_are_ignored_by_security_log(self, caplog):
        with caplog.at_level(logging.WARNING, logger="security"):
            await PiracyAlertNotificationHandler().handle(
                DownloadRecorded(license_id=uuid.uuid4(), download_count=1)
            )

        assert [r for r in caplog.records if r.name == "security"] == []


class TestRegisterEventHandlers:
    def test_registering_twice_subscribes_once(self, event_bus):
        register_event_handlers(event_bus)
        register_event_handlers(event_bus)

        for event_type in AUDITED_EVENTS:
            if event_type is not PiracyAlertRaised:
                assert len(event_bus._handlers[event_type]) == 1
        assert len(event_bus._handlers[PiracyAlertRaised]) == 2
