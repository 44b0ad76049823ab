"""Domain errors – invalid input, aggregate-shape and version violations."""

from __future__ import annotations

from typing import Any

from aggregate_kit.kernel.errors.base import BaseError


class DomainError(BaseError):
    """Raised when a domain rule / invariant is violated."""

    default_code = "domain_error"


class ValidationError(DomainError):
    """A constructor or mutator received invalid input.

    ``errors`` is a list of field-level validation failures.
    """

    default_code = "validation_error"

    def __init__(
        self,
        message: str,
        *,
        errors: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.errors: list[dict[str, Any]] = errors or []

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        """Build an error carrying a single field-level failure."""
        return cls(f"{field}: {message}", errors=[{"field": field, "message": message}])

    def to_dict(self) -> dict[str, Any]:
        base = super().to_dict()
        base["errors"] = self.errors
        return base


class InvariantViolationError(ValidationError):
    """An aggregate invariant was violated."""

    default_code = "invariant_violation"


class CapacityExceededError(DomainError):
    """A sub-collection would grow past its configured maximum.

    Not retryable: the aggregate boundary has to be redesigned.
    """

    default_code = "capacity_exceeded"

    def __init__(self, collection: str, max_size: int, **kwargs: Any) -> None:
        super().__init__(
            f"Collection '{collection}' cannot hold more than {max_size} items",
            detail={"collection": collection, "max_size": max_size},
            **kwargs,
        )
        self.collection = collection
        self.max_size = max_size


class CrossAggregateReferenceError(DomainError):
    """A model declares an object reference to another aggregate root."""

    default_code = "cross_aggregate_reference"

    def __init__(self, owner: str, field: str, target: str, **kwargs: Any) -> None:
        super().__init__(
            f"{owner}.{field} references aggregate root {target}; "
            f"store its identifier instead",
            detail={"owner": owner, "field": field, "target": target},
            **kwargs,
        )
        self.owner = owner
        self.field = field
        self.target = target


class NotFoundError(DomainError):
    """The requested aggregate does not exist."""

    default_code = "not_found"

    def __init__(
        self,
        resource: str,
        identifier: Any = None,
        **kwargs: Any,
    ) -> None:
        msg = f"{resource} not found"
        if identifier is not None:
            msg = f"{resource} '{identifier}' not found"
        super().__init__(msg, **kwargs)
        self.resource = resource
        self.identifier = identifier


class ConflictError(DomainError):
    """The operation conflicts with existing state."""

    default_code = "conflict"


class ConcurrencyConflictError(ConflictError):
    """The stored version diverged from the version held in memory.

    Recoverable by the caller: reload the aggregate and repeat the use case.
    """

    default_code = "concurrency_conflict"
    retryable = True

    def __init__(
        self,
        aggregate_type: str,
        aggregate_id: Any,
        expected: int,
        actual: int | None,
        **kwargs: Any,
    ) -> None:
        found = "nothing" if actual is None else f"version {actual}"
        super().__init__(
            f"Concurrency conflict on {aggregate_type} '{aggregate_id}': "
            f"expected version {expected}, found {found}",
            detail={
                "aggregate_type": aggregate_type,
                "aggregate_id": str(aggregate_id),
                "expected": expected,
                "actual": actual,
            },
            **kwargs,
        )
        self.aggregate_type = aggregate_type
        self.aggregate_id = aggregate_id
        self.expected = expected
        self.actual = actual


__all__ = [
    "CapacityExceededError",
    "ConcurrencyConflictError",
    "ConflictError",
    "CrossAggregateReferenceError",
    "DomainError",
    "InvariantViolationError",
    "NotFoundError",
    "ValidationError",
]
