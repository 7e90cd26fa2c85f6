"""
Domain event primitives.

Events record facts about licenses: a key was issued, a license expired, a
device was bound, a download was consumed, a piracy alert was raised. They
are published once the state change is stored and are consumed for audit
and security logging.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, fields
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import UUID, uuid4


def _plain(value: Any) -> Any:
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return value


@dataclass(frozen=True, init=False)
class DomainEvent(ABC):
    """
    Base class for license domain events.

    ``aggregate_id`` is the id of the license the event is about and
    ``event_type`` is the subclass name. Subclasses call the base
    initializer, then set their own attributes.
    """

    event_id: UUID
    occurred_at: datetime
    aggregate_id: str
    event_type: str

    def __init__(self, aggregate_id: Any, occurred_at: Optional[datetime] = None):
        object.__setattr__(self, "event_id", uuid4())
        object.__setattr__(self, "occurred_at", occurred_at or datetime.now(timezone.utc))
        object.__setattr__(self, "aggregate_id", str(aggregate_id))
        object.__setattr__(self, "event_type", type(self).__name__)

    def payload(self) -> Dict[str, Any]:
        """Attributes a subclass adds to the base fields, JSON-friendly."""
        base = {f.name for f in fields(DomainEvent)}
        return {
            name: _plain(value) for name, value in vars(self).items() if name not in base
        }

    def to_dict(self) -> Dict[str, Any]:
        """Flatten the event for logging."""
        return {
            "event_id": str(self.event_id),
            "occurred_at": self.occurred_at.isoformat(),
            "aggregate_id": self.aggregate_id,
            "event_type": self.event_type,
            "payload": self.payload(),
        }


class EventHandler(ABC):
    """Reacts to published events; must not assume any delivery order."""

    @abstractmethod
    async def handle(self, event: DomainEvent) -> None:
        """
        Handle a domain event.

        Args:
            event: The published event
        """


class EventBus(ABC):
    """Port through which application handlers announce state changes."""

    @abstractmethod
    async def publish(self, event: DomainEvent) -> None:
        """
        Deliver an event to every handler subscribed to its type.

        Publishing never fails because a handler failed.

        Args:
            event: The event to deliver
        """

    @abstractmethod
    def subscribe(self, event_type: type, handler: EventHandler) -> None:
        """
        Register a handler for one event type.

        Args:
            event_type: DomainEvent subclass to listen for
            handler: Handler to call on each matching event
        """
