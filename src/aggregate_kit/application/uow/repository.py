"""Application UoW – AggregateRepository, the scope-bound repository base."""

from __future__ import annotations

import abc
import functools
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar

from aggregate_kit.application.uow.scope import MutationKind, PendingMutation, ScopeRecord
from aggregate_kit.application.uow.store import StoredAggregate, StoreTransaction
from aggregate_kit.kernel.ddd.capabilities import AggregateRootLike
from aggregate_kit.kernel.ddd.repository import Repository
from aggregate_kit.kernel.errors import (
    ConcurrencyConflictError,
    NotFoundError,
    ValidationError,
)
from aggregate_kit.kernel.types.ids import EntityId
from aggregate_kit.observability.logging import get_logger

if TYPE_CHECKING:
    from aggregate_kit.application.uow.coordinator import ScopedUnitOfWork

TAggregate = TypeVar("TAggregate", bound=AggregateRootLike)
F = TypeVar("F", bound=Callable[..., Awaitable[Any]])

logger = get_logger(__name__)


def _rollback_on_error(func: F) -> F:
    """Roll the bound unit of work back before re-raising any failure."""

    @functools.wraps(func)
    async def wrapper(self: "AggregateRepository[Any]", *args: Any, **kwargs: Any) -> Any:
        try:
            return await func(self, *args, **kwargs)
        except BaseException as exc:
            await self._uow.abort(exc)
            raise

    return wrapper  # type: ignore[return-value]


class AggregateRepository(Repository[TAggregate], Generic[TAggregate]):
    """Repository of one aggregate type, bound to one unit of work.

    Obtain instances with ``uow.repository(IssueRepository)``; the unit of
    work hands out one instance per repository class. Subclasses declare the
    aggregate class and map it to and from plain JSON-able data::

        class IssueRepository(AggregateRepository[Issue]):
            aggregate_type = Issue
            id_type = IssueId

            def _to_state(self, issue): ...
            def _to_details(self, issue): ...
            def _from_state(self, id, version, state): ...
            def _load_details(self, issue, details): ...

    Reads go through an identity map, so a use case sees its own saves and
    deletes before they are committed.
    """

    aggregate_type: ClassVar[type]
    id_type: ClassVar[type[EntityId]] = EntityId
    stored_name: ClassVar[str | None] = None

    def __init__(self, uow: Any) -> None:
        self._uow: ScopedUnitOfWork = uow.outermost
        self._log = logger.bind(uow_id=self._uow.id, aggregate_type=self.type_name)

    @property
    def type_name(self) -> str:
        """Name under which the aggregate type is stored."""
        return self.stored_name or self.aggregate_type.__name__

    # ------------------------------------------------------------------
    # Mapping hooks
    # ------------------------------------------------------------------

    @abc.abstractmethod
    def _to_state(self, aggregate: TAggregate) -> dict[str, Any]:
        """Root fields only (no sub-collections)."""

    @abc.abstractmethod
    def _to_details(self, aggregate: TAggregate) -> dict[str, list[Any]]:
        """Every sub-collection, keyed by collection name."""

    @abc.abstractmethod
    def _from_state(self, id: EntityId, version: int, state: dict[str, Any]) -> TAggregate:  # noqa: A002
        """Rebuild the root (sub-collections not loaded), usually via ``_restore``."""

    @abc.abstractmethod
    def _load_details(self, aggregate: TAggregate, details: dict[str, list[Any]]) -> None:
        """Hydrate every sub-collection of *aggregate* from *details*."""

    def snapshot(self, aggregate: TAggregate) -> StoredAggregate:
        """The record ``save`` would write for *aggregate* at its current version."""
        return StoredAggregate(
            aggregate_type=self.type_name,
            aggregate_id=str(aggregate.id),
            version=aggregate.version,
            state=self._to_state(aggregate),
            details=self._to_details(aggregate) if aggregate.details_loaded else None,
        )

    # ------------------------------------------------------------------
    # Repository port
    # ------------------------------------------------------------------

    @_rollback_on_error
    async def find(self, id: EntityId, include_details: bool = True) -> TAggregate | None:  # noqa: A002
        return await self._find(id, include_details)

    @_rollback_on_error
    async def get(self, id: EntityId, include_details: bool = True) -> TAggregate:  # noqa: A002
        aggregate = await self._find(id, include_details)
        if aggregate is None:
            raise NotFoundError(self.type_name, id)
        return aggregate

    @_rollback_on_error
    async def save(self, aggregate: TAggregate) -> None:
        self._check_type(aggregate)
        scope = self._scope
        scope.claim(aggregate)
        key = self._key(aggregate.id)
        held = scope.held_version(key, aggregate)
        current = await self._current_version(key)
        if held != current:
            raise ConcurrencyConflictError(
                self.type_name, aggregate.id, held, current or None
            )

        record = StoredAggregate(
            aggregate_type=self.type_name,
            aggregate_id=str(aggregate.id),
            version=current + 1,
            state=self._to_state(aggregate),
            details=self._to_details(aggregate) if aggregate.details_loaded else None,
        )
        scope.register_write(
            PendingMutation(
                kind=MutationKind.WRITE,
                aggregate_type=self.type_name,
                aggregate_id=str(aggregate.id),
                expected_version=current,
                record=record,
                aggregate=aggregate,
                events=aggregate.pull_events(),
            )
        )
        self._log.debug(
            "repository.save",
            aggregate_id=str(aggregate.id),
            expected_version=current,
            details=record.details is not None,
        )

    @_rollback_on_error
    async def delete(self, id: EntityId) -> None:  # noqa: A002
        scope = self._scope
        key = self._key(id)
        current = await self._current_version(key)
        if current == 0:
            raise NotFoundError(self.type_name, id)
        cached = scope.lookup(key)
        if cached is not None:
            held = scope.held_version(key, cached)
            if held != current:
                raise ConcurrencyConflictError(self.type_name, id, held, current)
        scope.register_remove(
            PendingMutation(
                kind=MutationKind.REMOVE,
                aggregate_type=self.type_name,
                aggregate_id=str(id),
                expected_version=current,
            )
        )
        self._log.debug("repository.delete", aggregate_id=str(id), expected_version=current)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @property
    def _scope(self) -> ScopeRecord:
        return self._uow.active_scope()

    @property
    def _tx(self) -> StoreTransaction:
        return self._uow.transaction

    def _key(self, id: Any) -> tuple[str, str]:  # noqa: A002
        return (self.type_name, str(id))

    def _check_type(self, aggregate: Any) -> None:
        if not isinstance(aggregate, self.aggregate_type):
            raise ValidationError.for_field(
                "aggregate",
                f"{type(self).__name__} stores {self.aggregate_type.__name__}, "
                f"got {type(aggregate).__name__}",
            )

    async def _current_version(self, key: tuple[str, str]) -> int:
        """Stored version as seen by this scope; 0 when absent or removed."""
        known, version = self._scope.known_version(key)
        if known:
            return version
        record = await self._tx.read(key[0], key[1], include_details=False)
        return 0 if record is None else record.version

    async def _find(self, id: EntityId, include_details: bool) -> TAggregate | None:  # noqa: A002
        scope = self._scope
        key = self._key(id)
        if scope.is_removed(key):
            return None

        cached = scope.lookup(key)
        if cached is not None:
            if include_details and not cached.details_loaded:
                record = await self._tx.read(key[0], key[1], include_details=True)
                if record is None:
                    scope.forget(key)
                    return None
                # details must come from the version the root was read at
                if record.version != cached.version:
                    raise ConcurrencyConflictError(
                        self.type_name, id, cached.version, record.version
                    )
                self._load_details(cached, record.details or {})  # type: ignore[arg-type]
            return cached  # type: ignore[return-value]

        record = await self._tx.read(key[0], key[1], include_details=include_details)
        if record is None:
            return None
        aggregate = self._from_state(self._typed_id(id), record.version, record.state)
        if include_details:
            self._load_details(aggregate, record.details or {})
        scope.remember(key, aggregate)
        self._log.debug(
            "repository.load",
            aggregate_id=record.aggregate_id,
            version=record.version,
            details=include_details,
        )
        return aggregate

    def _typed_id(self, id: Any) -> EntityId:  # noqa: A002
        if isinstance(id, self.id_type):
            return id
        return self.id_type(str(id))


__all__ = ["AggregateRepository"]
