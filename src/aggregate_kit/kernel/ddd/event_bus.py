"""DomainEventBus port – receives events after a unit of work commits."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from aggregate_kit.kernel.ddd.domain_event import DomainEventEnvelope


@runtime_checkable
class DomainEventBus(Protocol):
    """Port: downstream notification of committed domain events.

    The coordinator calls :meth:`publish` once per event, in the order the
    aggregates were saved, and only after the physical commit succeeded.
    Delivery (in-process handlers, a broker, an outbox) is up to the
    implementation.
    """

    async def publish(self, envelope: DomainEventEnvelope) -> None:
        """Deliver one committed event."""
        ...


__all__ = ["DomainEventBus"]
