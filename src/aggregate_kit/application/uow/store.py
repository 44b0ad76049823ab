"""Storage adapter port consumed by the unit of work.

An adapter stores each aggregate as one record: the root's ``state`` and,
separately, its ``details`` (every sub-collection). Keeping the two apart is
what lets ``include_details=False`` skip the sub-collections entirely.
"""

from __future__ import annotations

import abc
import dataclasses
from typing import Any

from aggregate_kit.kernel.ddd.unit_of_work import IsolationLevel


@dataclasses.dataclass(frozen=True)
class StoredAggregate:
    """One persisted aggregate.

    ``details`` is ``None`` when it was not read, and on write means "leave
    the stored sub-collections untouched".
    """

    aggregate_type: str
    aggregate_id: str
    version: int
    state: dict[str, Any]
    details: dict[str, list[Any]] | None = None

    @property
    def key(self) -> tuple[str, str]:
        return (self.aggregate_type, self.aggregate_id)


class StoreTransaction(abc.ABC):
    """One physical transaction opened by :meth:`AggregateStore.begin`."""

    @abc.abstractmethod
    async def read(
        self,
        aggregate_type: str,
        aggregate_id: str,
        include_details: bool = True,
    ) -> StoredAggregate | None: ...

    @abc.abstractmethod
    async def write(self, record: StoredAggregate, expected_version: int) -> int:
        """Insert (``expected_version == 0``) or update; return the new version.

        Raises ``ConcurrencyConflictError`` when the stored version is not
        *expected_version*.
        """

    @abc.abstractmethod
    async def remove(self, aggregate_type: str, aggregate_id: str, expected_version: int) -> None:
        """Delete root and details; ``NotFoundError`` / ``ConcurrencyConflictError``."""

    @abc.abstractmethod
    async def commit(self) -> None: ...

    @abc.abstractmethod
    async def rollback(self) -> None: ...


class AggregateStore(abc.ABC):
    """Port: a storage engine able to run atomic transactions."""

    @abc.abstractmethod
    async def begin(self, isolation_level: IsolationLevel | None = None) -> StoreTransaction: ...


__all__ = ["AggregateStore", "StoreTransaction", "StoredAggregate"]
