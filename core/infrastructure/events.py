"""
In-process event bus.

Every app runs in the same process, so events are delivered by awaiting
the subscribed handlers directly.
"""

import asyncio
import logging
from typing import Dict, List, Type

from core.domain.events import DomainEvent, EventBus, EventHandler

logger = logging.getLogger(__name__)


class InMemoryEventBus(EventBus):
    """
    Fans each event out to the handlers subscribed to its exact type.

    Handlers run concurrently. A failing handler is logged; the other
    handlers and the publisher are unaffected.
    """

    def __init__(self):
        self._handlers: Dict[Type[DomainEvent], List[EventHandler]] = {}

    def subscribe(self, event_type: Type[DomainEvent], handler: EventHandler) -> None:
        subscribed = self._handlers.setdefault(event_type, [])
        if handler not in subscribed:
            subscribed.append(handler)
            logger.debug("%s listens to %s", type(handler).__name__, event_type.__name__)

    def clear(self) -> None:
        """Drop every subscription."""
        self._handlers.clear()

    async def publish(self, event: DomainEvent) -> None:
        handlers = list(self._handlers.get(type(event), ()))
        if not handlers:
            return
        await asyncio.gather(*(self._deliver(handler, event) for handler in handlers))

    @staticmethod
    async def _deliver(handler: EventHandler, event: DomainEvent) -> None:
        try:
            await handler.handle(event)
        except Exception:  # pylint: disable=broad-exception-caught
            logger.exception(
                "%s failed on %s for license %s",
                type(handler).__name__,
                event.event_type,
                event.aggregate_id,
            )


# Process-wide bus; handlers are wired in DigitalLicenseServiceConfig.ready()
event_bus = InMemoryEventBus()
