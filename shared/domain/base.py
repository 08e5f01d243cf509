"""
Base Domain Classes

Building blocks shared by the domain apps:
- ValueObject: Immutable objects compared by value
- AggregateRoot: Mixin for models that record domain events
- DomainEvent: Something that happened, published after commit
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects

    Value objects are immutable and have no identity.
    Two value objects are equal if all their attributes are equal.
    """
    pass


@dataclass
class DomainEvent:
    """
    Base class for domain events

    Events are collected by the unit of work and handed to the message
    bus once the surrounding transaction has committed.
    """
    event_id: UUID = field(default_factory=uuid4, kw_only=True)
    occurred_at: datetime = field(default_factory=datetime.now, kw_only=True)
    aggregate_id: Optional[int] = field(default=None, kw_only=True)

    def to_dict(self) -> dict:
        return {
            'event_id': str(self.event_id),
            'event_type': self.__class__.__name__,
            'occurred_at': self.occurred_at.isoformat(),
            'aggregate_id': self.aggregate_id,
        }


class AggregateRoot:
    """
    Mixin for aggregate roots backed by Django models

    Aggregates are the consistency boundaries. Events recorded here are
    pulled by ``DjangoUnitOfWork.collect_events`` and published only after
    a successful commit.
    """

    def _pending_events(self) -> List[DomainEvent]:
        if not hasattr(self, '_domain_events'):
            self._domain_events: List[DomainEvent] = []
        return self._domain_events

    def add_event(self, event: DomainEvent):
        """Add a domain event to be published"""
        self._pending_events().append(event)

    def clear_events(self):
        """Clear all collected events (called after publishing)"""
        self._pending_events().clear()

    @property
    def events(self) -> List[DomainEvent]:
        """Get copy of collected events"""
        return self._pending_events().copy()
