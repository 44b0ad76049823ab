"""In-memory adapter – dict-backed aggregate store for tests and prototypes."""
from aggregate_kit.adapters.memory.store import InMemoryAggregateStore, InMemoryTransaction

__all__ = ["InMemoryAggregateStore", "InMemoryTransaction"]
