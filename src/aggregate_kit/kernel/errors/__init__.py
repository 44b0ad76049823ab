"""Kernel error hierarchy – public re-export surface.

Hierarchy::

    BaseError
    ├── DomainError              (domain.py)
    │   ├── ValidationError
    │   │   └── InvariantViolationError
    │   ├── CapacityExceededError
    │   ├── CrossAggregateReferenceError
    │   ├── NotFoundError
    │   └── ConflictError
    │       └── ConcurrencyConflictError
    ├── ApplicationError         (application.py)
    │   ├── NotLoadedError
    │   └── UnitOfWorkStateError
    └── InfrastructureError      (infrastructure.py)
        ├── StorageError
        └── TransactionFailureError
"""

from aggregate_kit.kernel.errors.application import (
    ApplicationError,
    NotLoadedError,
    UnitOfWorkStateError,
)
from aggregate_kit.kernel.errors.base import BaseError
from aggregate_kit.kernel.errors.domain import (
    CapacityExceededError,
    ConcurrencyConflictError,
    ConflictError,
    CrossAggregateReferenceError,
    DomainError,
    InvariantViolationError,
    NotFoundError,
    ValidationError,
)
from aggregate_kit.kernel.errors.infrastructure import (
    InfrastructureError,
    StorageError,
    TransactionFailureError,
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
