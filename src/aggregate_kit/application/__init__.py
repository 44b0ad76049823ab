"""Application – use-case boundary: units of work and scope-bound repositories."""

from aggregate_kit.application.uow import (
    AggregateRepository,
    AggregateStore,
    ScopeReuse,
    TransactionOptions,
    UnitOfWork,
    UnitOfWorkCoordinator,
    unit_of_work,
)

__all__ = [
    "AggregateRepository",
    "AggregateStore",
    "ScopeReuse",
    "TransactionOptions",
    "UnitOfWork",
    "UnitOfWorkCoordinator",
    "unit_of_work",
]
