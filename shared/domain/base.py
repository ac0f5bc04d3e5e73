"""
Base Domain Classes

Building blocks shared by the pricing, promotion and commission domains:
- Entity: objects with identity
- ValueObject: immutable objects compared by value
- Aggregate: consistency boundary that collects domain events
- DomainEvent: something that happened, published after commit
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Optional
from uuid import UUID, uuid4


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Entity(ABC):
    """
    Base class for all entities

    Two entities are equal if their IDs are equal.
    """
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utcnow)

    def __eq__(self, other):
        if not isinstance(other, self.__class__):
            return False
        return self.id == other.id

    def __hash__(self):
        return hash(self.id)


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects

    Value objects are immutable and have no identity.
    """
    pass


@dataclass(eq=False)
class Aggregate(Entity):
    """
    Base class for aggregate roots

    Events are collected here and handed over to the unit of work,
    which publishes them once the transaction has committed.
    """
    _events: List['DomainEvent'] = field(default_factory=list, repr=False, init=False)

    def add_event(self, event: 'DomainEvent'):
        self._events.append(event)

    def clear_events(self):
        self._events.clear()

    @property
    def events(self) -> List['DomainEvent']:
        """Copy of collected events"""
        return self._events.copy()


@dataclass
class DomainEvent:
    """
    Base class for domain events

    aggregate_id is whatever identifies the aggregate in its own context
    (a database primary key or a UUID).
    """
    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=utcnow)
    aggregate_id: Optional[Any] = None

    def to_dict(self) -> dict:
        return {
            'event_id': str(self.event_id),
            'event_type': self.__class__.__name__,
            'occurred_at': self.occurred_at.isoformat(),
            'aggregate_id': str(self.aggregate_id) if self.aggregate_id is not None else None,
        }
