"""Bounded sub-collections owned by an aggregate root.

Declare them on the root class::

    class Issue(AggregateRoot):
        comments = SubCollection(Comment, max_size=50)

        def add_comment(self, ...):
            self._collection("comments").add(Comment(...))

``issue.comments`` is a read-only :class:`CollectionView`; only root methods
can change the underlying :class:`BoundedCollection`.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Sequence
from typing import TYPE_CHECKING, Any, Generic, TypeVar, overload

from aggregate_kit.kernel.ddd.guard import ConsistencyGuard, default_guard
from aggregate_kit.kernel.errors.application import NotLoadedError
from aggregate_kit.kernel.errors.domain import ValidationError

if TYPE_CHECKING:
    from aggregate_kit.kernel.ddd.aggregate import AggregateRoot

T = TypeVar("T")


class CollectionView(Sequence[T]):
    """Read-only snapshot of a loaded sub-collection."""

    __slots__ = ("_items",)

    def __init__(self, items: Iterable[T]) -> None:
        self._items: tuple[T, ...] = tuple(items)

    @overload
    def __getitem__(self, index: int) -> T: ...

    @overload
    def __getitem__(self, index: slice) -> Sequence[T]: ...

    def __getitem__(self, index: Any) -> Any:
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CollectionView):
            return self._items == other._items
        if isinstance(other, (list, tuple)):
            return self._items == tuple(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._items)

    def __repr__(self) -> str:
        return f"CollectionView({list(self._items)!r})"


class BoundedCollection(Generic[T]):
    """Per-instance storage behind a :class:`SubCollection`.

    A collection is either *loaded* (possibly empty) or *not loaded*. A root
    fetched without details holds not-loaded collections, and any read or
    write on them raises :class:`NotLoadedError`.
    """

    def __init__(
        self,
        owner: str,
        name: str,
        item_type: type[T],
        max_size: int,
        guard: ConsistencyGuard,
        *,
        loaded: bool = True,
    ) -> None:
        self._owner = owner
        self._name = name
        self._item_type = item_type
        self._max_size = max_size
        self._guard = guard
        self._loaded = loaded
        self._items: list[T] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def loaded(self) -> bool:
        return self._loaded

    def _require_loaded(self) -> list[T]:
        if not self._loaded:
            raise NotLoadedError(self._owner, self._name)
        return self._items

    def _check_item(self, item: Any) -> None:
        if not isinstance(item, self._item_type):
            raise ValidationError.for_field(
                self._name,
                f"expected {self._item_type.__name__}, got {type(item).__name__}",
            )

    # -- reads ---------------------------------------------------------

    def view(self) -> CollectionView[T]:
        return CollectionView(self._require_loaded())

    def __len__(self) -> int:
        return len(self._require_loaded())

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._require_loaded()))

    def __contains__(self, item: object) -> bool:
        return item in self._require_loaded()

    def find(self, predicate: Callable[[T], bool]) -> T | None:
        for item in self._require_loaded():
            if predicate(item):
                return item
        return None

    # -- writes (root methods only) -----------------------------------

    def add(self, item: T) -> T:
        items = self._require_loaded()
        self._check_item(item)
        if item in items:
            raise ValidationError.for_field(self._name, f"already contains {item!r}")
        self._guard.check_capacity(f"{self._owner}.{self._name}", len(items), self._max_size)
        items.append(item)
        return item

    def remove(self, item: T) -> None:
        items = self._require_loaded()
        try:
            items.remove(item)
        except ValueError:
            raise ValidationError.for_field(self._name, f"does not contain {item!r}") from None

    def remove_where(self, predicate: Callable[[T], bool]) -> list[T]:
        items = self._require_loaded()
        removed: list[T] = []
        kept: list[T] = []
        for item in items:
            (removed if predicate(item) else kept).append(item)
        items[:] = kept
        return removed

    def replace_all(self, new_items: Iterable[T]) -> None:
        items = self._require_loaded()
        staged: list[T] = []
        for item in new_items:
            self._check_item(item)
            if item in staged:
                raise ValidationError.for_field(self._name, f"already contains {item!r}")
            staged.append(item)
        self._guard.check_capacity(f"{self._owner}.{self._name}", 0, self._max_size, len(staged))
        items[:] = staged

    def clear(self) -> None:
        self._require_loaded().clear()

    def hydrate(self, items: Iterable[T]) -> None:
        """Fill from storage and mark loaded (no capacity check)."""
        self._items = list(items)
        self._loaded = True


class SubCollection(Generic[T]):
    """Descriptor declaring a bounded sub-collection on an aggregate root.

    Args:
        item_type: Sub-entity or value-object class held by the collection.
            Aggregate roots are rejected when the owning class is defined.
        max_size: Per-collection cap; defaults to the guard's configured cap.
    """

    def __init__(self, item_type: type[T], *, max_size: int | None = None) -> None:
        if not isinstance(item_type, type):
            raise TypeError("SubCollection item_type must be a class")
        self.item_type = item_type
        self.max_size = max_size
        self.name = ""

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def create(
        self,
        owner: "AggregateRoot",
        *,
        loaded: bool,
        guard: ConsistencyGuard | None = None,
    ) -> BoundedCollection[T]:
        guard = guard or default_guard()
        return BoundedCollection(
            type(owner).__name__,
            self.name,
            self.item_type,
            guard.resolve_max_size(self.max_size),
            guard,
            loaded=loaded,
        )

    @overload
    def __get__(self, instance: None, owner: type) -> "SubCollection[T]": ...

    @overload
    def __get__(self, instance: object, owner: type) -> CollectionView[T]: ...

    def __get__(self, instance: Any, owner: type) -> Any:
        if instance is None:
            return self
        return instance._collection(self.name).view()

    def __set__(self, instance: Any, value: Any) -> None:
        raise AttributeError(
            f"{type(instance).__name__}.{self.name} can only be changed through root methods"
        )


__all__ = ["BoundedCollection", "CollectionView", "SubCollection"]
