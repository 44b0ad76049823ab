"""Kernel – framework-agnostic aggregate building blocks."""

from aggregate_kit.kernel.errors import (
    ApplicationError,
    BaseError,
    CapacityExceededError,
    ConcurrencyConflictError,
    ConflictError,
    CrossAggregateReferenceError,
    DomainError,
    InfrastructureError,
    InvariantViolationError,
    NotFoundError,
    NotLoadedError,
    StorageError,
    TransactionFailureError,
    UnitOfWorkStateError,
    ValidationError,
)

__all__ = [
    "ApplicationError",
    "BaseError",
    "CapacityExceededError",
    "ConcurrencyConflictError",
    "ConflictError",
    "CrossAggregateReferenceError",
    "DomainError",
    "InfrastructureError",
    "InvariantViolationError",
    "NotFoundError",
    "NotLoadedError",
    "StorageError",
    "TransactionFailureError",
    "UnitOfWorkStateError",
    "ValidationError",
]
