"""Infrastructure errors – storage and transaction failures."""

from __future__ import annotations

from typing import Any

from aggregate_kit.kernel.errors.base import BaseError


class InfrastructureError(BaseError):
    """Infrastructure / I/O failure that is not a business rule violation."""

    default_code = "infrastructure_error"


class StorageError(InfrastructureError):
    """A storage adapter failed to read or write."""

    default_code = "storage_error"

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.operation = operation


class TransactionFailureError(InfrastructureError):
    """Flushing or committing a unit of work failed; nothing was persisted."""

    default_code = "transaction_failure"


__all__ = [
    "InfrastructureError",
    "StorageError",
    "TransactionFailureError",
]
