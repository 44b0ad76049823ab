"""Application UnitOfWork – coordinator, scope-bound repositories and storage port."""
from aggregate_kit.kernel.ddd import UnitOfWork, UnitOfWorkState
from aggregate_kit.application.uow.options import IsolationLevel, ScopeReuse, TransactionOptions
from aggregate_kit.application.uow.store import AggregateStore, StoredAggregate, StoreTransaction
from aggregate_kit.application.uow.scope import MutationKind, PendingMutation, ScopeRecord
from aggregate_kit.application.uow.coordinator import (
    JoinedUnitOfWork,
    ScopedUnitOfWork,
    UnitOfWorkCoordinator,
)
from aggregate_kit.application.uow.repository import AggregateRepository
from aggregate_kit.application.uow.decorators import unit_of_work

__all__ = [
    "AggregateRepository",
    "AggregateStore",
    "IsolationLevel",
    "JoinedUnitOfWork",
    "MutationKind",
    "PendingMutation",
    "ScopeRecord",
    "ScopeReuse",
    "ScopedUnitOfWork",
    "StoreTransaction",
    "StoredAggregate",
    "TransactionOptions",
    "UnitOfWork",
    "UnitOfWorkCoordinator",
    "UnitOfWorkState",
    "unit_of_work",
]
