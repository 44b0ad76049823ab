"""DDD building blocks – public re-export surface."""

from aggregate_kit.kernel.ddd.aggregate import AggregateRoot
from aggregate_kit.kernel.ddd.capabilities import (
    AggregateRootLike,
    CollectionOwner,
    EventSource,
    Identifiable,
    Versioned,
)
from aggregate_kit.kernel.ddd.collection import (
    BoundedCollection,
    CollectionView,
    SubCollection,
)
from aggregate_kit.kernel.ddd.domain_event import DomainEvent, DomainEventEnvelope
from aggregate_kit.kernel.ddd.entity import SubEntity
from aggregate_kit.kernel.ddd.event_bus import DomainEventBus
from aggregate_kit.kernel.ddd.guard import (
    DEFAULT_MAX_COLLECTION_SIZE,
    ConsistencyGuard,
    configure_guard,
    default_guard,
    is_aggregate_root_type,
)
from aggregate_kit.kernel.ddd.invariant import Invariant, ensure
from aggregate_kit.kernel.ddd.repository import Repository
from aggregate_kit.kernel.ddd.unit_of_work import IsolationLevel, UnitOfWork, UnitOfWorkState
from aggregate_kit.kernel.ddd.value_object import ValueObject

__all__ = [
    "DEFAULT_MAX_COLLECTION_SIZE",
    "AggregateRoot",
    "AggregateRootLike",
    "BoundedCollection",
    "CollectionOwner",
    "CollectionView",
    "ConsistencyGuard",
    "DomainEvent",
    "DomainEventBus",
    "DomainEventEnvelope",
    "EventSource",
    "Identifiable",
    "Invariant",
    "IsolationLevel",
    "Repository",
    "SubCollection",
    "SubEntity",
    "UnitOfWork",
    "UnitOfWorkState",
    "ValueObject",
    "Versioned",
    "configure_guard",
    "default_guard",
    "ensure",
    "is_aggregate_root_type",
]
