"""Testing fakes – in-memory doubles for kernel ports."""
from aggregate_kit.testing.fakes.event_bus import InMemoryDomainEventBus
from aggregate_kit.testing.fakes.store import FailingStore

__all__ = ["FailingStore", "InMemoryDomainEventBus"]
