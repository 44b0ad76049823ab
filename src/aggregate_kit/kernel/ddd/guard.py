"""Consistency guard – aggregate-shape rules.

Two rules are enforced here:

* **No object references between aggregates.** Checked when a model class
  is defined: an annotated field (or sub-collection item type) whose type is
  an aggregate root class raises
  :class:`~aggregate_kit.kernel.errors.CrossAggregateReferenceError`.
  Only identifier fields may point at another aggregate.
* **Bounded sub-collections.** Every sub-collection has a maximum size
  (default 100). Growing past it raises
  :class:`~aggregate_kit.kernel.errors.CapacityExceededError` synchronously,
  inside the mutating call, and the collection is left unchanged.

Capacity is only checked at mutation time; rehydration from storage and
``save`` do not re-validate it.
"""

from __future__ import annotations

import inspect
import re
import typing
from collections.abc import Iterator, Mapping
from typing import Any

from aggregate_kit.kernel.errors.domain import (
    CapacityExceededError,
    CrossAggregateReferenceError,
)

DEFAULT_MAX_COLLECTION_SIZE = 100

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def is_aggregate_root_type(tp: Any) -> bool:
    """``True`` for classes tagged as aggregate roots."""
    return isinstance(tp, type) and bool(getattr(tp, "__aggregate_root__", False))


def _referenced_roots(tp: Any) -> Iterator[type]:
    if typing.get_origin(tp) is typing.ClassVar:
        return
    if is_aggregate_root_type(tp):
        yield tp
        return
    for arg in typing.get_args(tp):
        yield from _referenced_roots(arg)


class ConsistencyGuard:
    """Definition-time and mutation-time checks for aggregate shape."""

    def __init__(self, max_collection_size: int = DEFAULT_MAX_COLLECTION_SIZE) -> None:
        self._max_collection_size = self._positive(max_collection_size)
        self._pending: set[type] = set()
        self._root_names: set[str] = set()

    @staticmethod
    def _positive(value: int) -> int:
        if value < 1:
            raise ValueError(f"max_collection_size must be positive, got {value}")
        return value

    @property
    def max_collection_size(self) -> int:
        return self._max_collection_size

    @max_collection_size.setter
    def max_collection_size(self, value: int) -> None:
        self._max_collection_size = self._positive(value)

    # ------------------------------------------------------------------
    # Definition time
    # ------------------------------------------------------------------

    def check_definition(
        self,
        cls: type,
        collections: Mapping[str, type] | None = None,
    ) -> None:
        """Reject *cls* if it holds an object reference to an aggregate root.

        Annotations that cannot be resolved yet (forward references to names
        defined later in the module) are re-checked by :meth:`ensure_checked`
        on first construction.
        """
        if is_aggregate_root_type(cls):
            self._root_names.add(cls.__name__)
        for name, item_type in (collections or {}).items():
            if is_aggregate_root_type(item_type):
                raise CrossAggregateReferenceError(cls.__name__, name, item_type.__name__)
        try:
            hints = typing.get_type_hints(cls)
        except NameError:
            self._check_raw_annotations(cls)
            self._pending.add(cls)
            return
        self._check_hints(cls, hints)

    def ensure_checked(self, cls: type) -> None:
        """Finish a deferred definition check; cheap once done."""
        if cls not in self._pending:
            return
        try:
            hints = typing.get_type_hints(cls)
        except NameError:
            # names only imported under TYPE_CHECKING never resolve
            self._check_raw_annotations(cls)
        else:
            self._check_hints(cls, hints)
        self._pending.discard(cls)

    def is_pending(self, cls: type) -> bool:
        return cls in self._pending

    @staticmethod
    def _check_hints(cls: type, hints: Mapping[str, Any]) -> None:
        for name, hint in hints.items():
            for target in _referenced_roots(hint):
                raise CrossAggregateReferenceError(cls.__name__, name, target.__name__)

    def _check_raw_annotations(self, cls: type) -> None:
        for klass in cls.__mro__:
            for name, raw in inspect.get_annotations(klass).items():
                if not isinstance(raw, str) or "ClassVar" in raw:
                    continue
                for token in _IDENTIFIER.findall(raw):
                    if token in self._root_names:
                        raise CrossAggregateReferenceError(cls.__name__, name, token)

    # ------------------------------------------------------------------
    # Mutation time
    # ------------------------------------------------------------------

    def resolve_max_size(self, max_size: int | None) -> int:
        return self._max_collection_size if max_size is None else self._positive(max_size)

    def check_capacity(
        self,
        collection: str,
        current_size: int,
        max_size: int,
        adding: int = 1,
    ) -> None:
        """Raise if adding *adding* items to a collection of *current_size* breaks the cap."""
        if current_size + adding > max_size:
            raise CapacityExceededError(collection, max_size)


_default_guard = ConsistencyGuard()


def default_guard() -> ConsistencyGuard:
    """Return the process-wide guard used by the model base classes."""
    return _default_guard


def configure_guard(max_collection_size: int) -> ConsistencyGuard:
    """Set the default sub-collection cap for collections created from now on."""
    _default_guard.max_collection_size = max_collection_size
    return _default_guard


__all__ = [
    "DEFAULT_MAX_COLLECTION_SIZE",
    "ConsistencyGuard",
    "configure_guard",
    "default_guard",
    "is_aggregate_root_type",
]
