"""In-memory adapter – InMemoryAggregateStore."""

from __future__ import annotations

import asyncio
import copy
import enum

from aggregate_kit.application.uow.store import AggregateStore, StoredAggregate, StoreTransaction
from aggregate_kit.kernel.ddd.unit_of_work import IsolationLevel
from aggregate_kit.kernel.errors import (
    ConcurrencyConflictError,
    NotFoundError,
    UnitOfWorkStateError,
)

Key = tuple[str, str]


class _Op(enum.Enum):
    WRITE = "write"
    REMOVE = "remove"


class InMemoryAggregateStore(AggregateStore):
    """Dict-backed aggregate store with atomic, version-checked commits.

    Each transaction buffers its writes and only publishes them on commit,
    under a lock, after re-checking every expected version against the
    committed rows. Readers therefore see committed data only, which is the
    ``READ COMMITTED`` behaviour regardless of the requested level.
    """

    def __init__(self) -> None:
        self._rows: dict[Key, StoredAggregate] = {}
        self._lock = asyncio.Lock()

    async def begin(self, isolation_level: IsolationLevel | None = None) -> "InMemoryTransaction":
        return InMemoryTransaction(self, isolation_level)

    # -- inspection helpers (tests) -------------------------------------

    def count(self, aggregate_type: str | None = None) -> int:
        if aggregate_type is None:
            return len(self._rows)
        return sum(1 for t, _ in self._rows if t == aggregate_type)

    def snapshot(self, aggregate_type: str, aggregate_id: str) -> StoredAggregate | None:
        """Deep copy of the committed record, or ``None``."""
        row = self._rows.get((aggregate_type, str(aggregate_id)))
        return copy.deepcopy(row)

    def clear(self) -> None:
        self._rows.clear()


class InMemoryTransaction(StoreTransaction):
    """Buffered transaction over an :class:`InMemoryAggregateStore`."""

    def __init__(self, store: InMemoryAggregateStore, isolation_level: IsolationLevel | None) -> None:
        self._store = store
        self.isolation_level = isolation_level
        self._overlay: dict[Key, StoredAggregate | None] = {}
        self._ops: list[tuple[_Op, Key, int, StoredAggregate | None]] = []
        self._closed = False

    async def read(
        self,
        aggregate_type: str,
        aggregate_id: str,
        include_details: bool = True,
    ) -> StoredAggregate | None:
        self._require_open()
        row = self._visible((aggregate_type, aggregate_id))
        if row is None:
            return None
        return StoredAggregate(
            aggregate_type=row.aggregate_type,
            aggregate_id=row.aggregate_id,
            version=row.version,
            state=copy.deepcopy(row.state),
            details=copy.deepcopy(row.details) if include_details else None,
        )

    async def write(self, record: StoredAggregate, expected_version: int) -> int:
        self._require_open()
        key = record.key
        existing = self._visible(key)
        actual = existing.version if existing else 0
        if actual != expected_version:
            raise ConcurrencyConflictError(
                record.aggregate_type, record.aggregate_id, expected_version, actual or None
            )
        if record.details is not None:
            details = copy.deepcopy(record.details)
        else:
            details = copy.deepcopy(existing.details) if existing else {}
        row = StoredAggregate(
            aggregate_type=record.aggregate_type,
            aggregate_id=record.aggregate_id,
            version=expected_version + 1,
            state=copy.deepcopy(record.state),
            details=details,
        )
        self._overlay[key] = row
        self._ops.append((_Op.WRITE, key, expected_version, row))
        return row.version

    async def remove(self, aggregate_type: str, aggregate_id: str, expected_version: int) -> None:
        self._require_open()
        key = (aggregate_type, aggregate_id)
        existing = self._visible(key)
        if existing is None:
            raise NotFoundError(aggregate_type, aggregate_id)
        if existing.version != expected_version:
            raise ConcurrencyConflictError(
                aggregate_type, aggregate_id, expected_version, existing.version
            )
        self._overlay[key] = None
        self._ops.append((_Op.REMOVE, key, expected_version, None))

    async def commit(self) -> None:
        self._require_open()
        async with self._store._lock:
            staged: dict[Key, StoredAggregate | None] = {}
            for op, key, expected, row in self._ops:
                current = staged[key] if key in staged else self._store._rows.get(key)
                actual = current.version if current else 0
                if actual != expected:
                    raise ConcurrencyConflictError(key[0], key[1], expected, actual or None)
                staged[key] = row if op is _Op.WRITE else None
            for key, row in staged.items():
                if row is None:
                    self._store._rows.pop(key, None)
                else:
                    self._store._rows[key] = row
        self._finish()

    async def rollback(self) -> None:
        if not self._closed:
            self._finish()

    def _visible(self, key: Key) -> StoredAggregate | None:
        if key in self._overlay:
            return self._overlay[key]
        return self._store._rows.get(key)

    def _require_open(self) -> None:
        if self._closed:
            raise UnitOfWorkStateError("Transaction is already closed")

    def _finish(self) -> None:
        self._overlay.clear()
        self._ops.clear()
        self._closed = True

    def __repr__(self) -> str:  # pragma: no cover
        return f"InMemoryTransaction(ops={len(self._ops)}, closed={self._closed})"


__all__ = ["InMemoryAggregateStore", "InMemoryTransaction"]
