"""Capability protocols that together make something an aggregate root.

Repositories and the unit of work only rely on these protocols, so a root
is any object exposing identity, a version, pending events and ownership of
its sub-collections. :class:`~aggregate_kit.kernel.ddd.aggregate.AggregateRoot`
is the stock composition of all four.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from aggregate_kit.kernel.ddd.domain_event import DomainEvent
from aggregate_kit.kernel.types.ids import EntityId


@runtime_checkable
class Identifiable(Protocol):
    @property
    def id(self) -> EntityId: ...


@runtime_checkable
class Versioned(Protocol):
    """Optimistic-concurrency version; 0 means never persisted."""

    @property
    def version(self) -> int: ...

    def mark_persisted(self, version: int) -> None: ...


@runtime_checkable
class EventSource(Protocol):
    def peek_events(self) -> list[DomainEvent]: ...

    def pull_events(self) -> list[DomainEvent]: ...


@runtime_checkable
class CollectionOwner(Protocol):
    @property
    def details_loaded(self) -> bool: ...


@runtime_checkable
class AggregateRootLike(Identifiable, Versioned, EventSource, CollectionOwner, Protocol):
    """Everything the persistence layer needs from a root."""


__all__ = [
    "AggregateRootLike",
    "CollectionOwner",
    "EventSource",
    "Identifiable",
    "Versioned",
]
