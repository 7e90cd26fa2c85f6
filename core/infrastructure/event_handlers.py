"""
Audit and security consumers of domain events.

License rows are never deleted; the ``audit`` log stream is the record of
every change applied to them. Piracy alerts are also copied to the
``security`` stream, which operations watch.
"""

import logging

from activations.domain.events import DeviceActivated
from core.domain.events import DomainEvent, EventHandler
from licenses.domain.events import DownloadRecorded, LicenseExpired, LicenseKeyGenerated
from piracy.domain.events import PiracyAlertRaised

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("audit")
security_logger = logging.getLogger("security")

AUDITED_EVENTS = (
    LicenseKeyGenerated,
    LicenseExpired,
    DownloadRecorded,
    DeviceActivated,
    PiracyAlertRaised,
)


class AuditLogEventHandler(EventHandler):
    """Writes each event, with its payload, to the audit stream."""

    async def handle(self, event: DomainEvent) -> None:
        audit_logger.info(
            "%s on license %s", event.event_type, event.aggregate_id, extra=event.to_dict()
        )


class PiracyAlertNotificationHandler(EventHandler):
    """Copies raised piracy alerts to the security stream."""

    async def handle(self, event: DomainEvent) -> None:
        if not isinstance(event, PiracyAlertRaised):
            return
        security_logger.warning(
            "Piracy alert %s (%s) on license %s",
            event.alert_type,
            event.severity,
            event.license_id,
            extra={
                "alert_id": str(event.alert_id),
                "license_id": str(event.license_id),
                "alert_type": event.alert_type,
                "severity": event.severity,
            },
        )


_audit_handler = AuditLogEventHandler()
_security_handler = PiracyAlertNotificationHandler()


def register_event_handlers(bus=None):
    """
    Subscribe the audit and security handlers.

    Safe to call more than once; the bus ignores repeat subscriptions.

    Args:
        bus: Event bus to wire (defaults to the process-wide bus)
    """
    if bus is None:
        from core.infrastructure.events import event_bus as bus

    for event_type in AUDITED_EVENTS:
        bus.subscribe(event_type, _audit_handler)
    bus.subscribe(PiracyAlertRaised, _security_handler)
    logger.debug("Audit and security event handlers registered")
