"""Repository port – load/save/delete one aggregate type as a unit."""

from __future__ import annotations

import abc
from typing import Generic, TypeVar

from aggregate_kit.kernel.ddd.capabilities import AggregateRootLike
from aggregate_kit.kernel.types.ids import EntityId

TAggregate = TypeVar("TAggregate", bound=AggregateRootLike)


class Repository(abc.ABC, Generic[TAggregate]):
    """Port: per-aggregate-type repository.

    Every call runs inside the unit of work the repository is bound to;
    nothing is committed until that unit of work completes.
    """

    @abc.abstractmethod
    async def get(self, id: EntityId, include_details: bool = True) -> TAggregate:  # noqa: A002
        """Return the aggregate or raise ``NotFoundError``.

        With ``include_details`` every sub-collection is populated by the same
        retrieval; without it they are *not loaded* and reading them raises
        ``NotLoadedError``.
        """

    @abc.abstractmethod
    async def find(self, id: EntityId, include_details: bool = True) -> TAggregate | None:  # noqa: A002
        """Like :meth:`get` but return ``None`` when absent."""

    @abc.abstractmethod
    async def save(self, aggregate: TAggregate) -> None:
        """Register a write of the full object graph.

        Raises ``ConcurrencyConflictError`` when the stored version no longer
        matches ``aggregate.version``.
        """

    @abc.abstractmethod
    async def delete(self, id: EntityId) -> None:  # noqa: A002
        """Register removal of the root and its sub-entities; ``NotFoundError`` if absent."""


__all__ = ["Repository"]
