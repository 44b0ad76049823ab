"""AggregateRoot – identity, version, pending events and owned sub-collections."""

from __future__ import annotations

from typing import Any, ClassVar, TypeVar

from aggregate_kit.kernel.ddd.collection import BoundedCollection, SubCollection
from aggregate_kit.kernel.ddd.domain_event import DomainEvent
from aggregate_kit.kernel.ddd.guard import default_guard
from aggregate_kit.kernel.errors.domain import ValidationError
from aggregate_kit.kernel.types.ids import EntityId

TRoot = TypeVar("TRoot", bound="AggregateRoot")


class AggregateRoot:
    """Stock implementation of :class:`~aggregate_kit.kernel.ddd.capabilities.AggregateRootLike`.

    Subclasses:

    * call ``super().__init__(id)`` from a validating constructor or factory;
      every declared :class:`SubCollection` starts empty and loaded,
    * expose state through read-only properties and change it only in
      methods that validate first and then call :meth:`_record_event`,
    * override :meth:`_restore` so repositories can rebuild persisted
      instances without going through validation.

    Fields typed as another aggregate root are rejected when the subclass is
    defined; reference other aggregates by identifier only.
    """

    __aggregate_root__: ClassVar[bool] = True
    __sub_collections__: ClassVar[dict[str, SubCollection[Any]]] = {}

    _id: EntityId
    _version: int
    _pending_events: list[DomainEvent]
    _collections: dict[str, BoundedCollection[Any]]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        collections: dict[str, SubCollection[Any]] = {}
        for klass in reversed(cls.__mro__):
            for name, attr in vars(klass).items():
                if isinstance(attr, SubCollection):
                    collections[name] = attr
        cls.__sub_collections__ = collections
        default_guard().check_definition(
            cls, {name: sc.item_type for name, sc in collections.items()}
        )

    def __init__(self, id: EntityId) -> None:  # noqa: A002
        if not isinstance(id, EntityId):
            raise ValidationError.for_field("id", f"expected an EntityId, got {type(id).__name__}")
        self._init_root(id, version=0, details_loaded=True)

    def _init_root(self, id: EntityId, *, version: int, details_loaded: bool) -> None:  # noqa: A002
        default_guard().ensure_checked(type(self))
        self._id = id
        self._version = version
        self._pending_events = []
        self._collections = {
            name: sc.create(self, loaded=details_loaded)
            for name, sc in type(self).__sub_collections__.items()
        }

    @classmethod
    def _restore(cls: type[TRoot], id: EntityId, version: int) -> TRoot:  # noqa: A002
        """Rebuild a persisted instance; sub-collections start *not loaded*.

        Storage adapters only. Overrides set their own fields on the returned
        instance and must not validate or record events.
        """
        root = cls.__new__(cls)
        root._init_root(id, version=version, details_loaded=False)
        return root

    # -- identity ------------------------------------------------------

    @property
    def id(self) -> EntityId:
        return self._id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, type(self)):
            return False
        return self._id == other._id

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._id))

    def __repr__(self) -> str:  # pragma: no cover
        return f"{type(self).__name__}(id={self._id!r}, version={self._version})"

    # -- version -------------------------------------------------------

    @property
    def version(self) -> int:
        return self._version

    @property
    def is_transient(self) -> bool:
        """``True`` until the first successful commit."""
        return self._version == 0

    def mark_persisted(self, version: int) -> None:
        """Called by the unit of work after a commit wrote *version*."""
        self._version = version

    # -- events --------------------------------------------------------

    def _record_event(self, event: DomainEvent) -> None:
        self._pending_events.append(event)

    def peek_events(self) -> list[DomainEvent]:
        return list(self._pending_events)

    def pull_events(self) -> list[DomainEvent]:
        """Return and clear pending domain events."""
        events = list(self._pending_events)
        self._pending_events.clear()
        return events

    # -- sub-collections -----------------------------------------------

    def _collection(self, name: str) -> BoundedCollection[Any]:
        try:
            return self._collections[name]
        except KeyError:
            raise AttributeError(f"{type(self).__name__} has no sub-collection {name!r}") from None

    @property
    def details_loaded(self) -> bool:
        return all(c.loaded for c in self._collections.values())

    def _hydrate(self, name: str, items: Any) -> None:
        self._collection(name).hydrate(items)


__all__ = ["AggregateRoot"]
