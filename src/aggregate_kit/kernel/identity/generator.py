"""Identity generators – produce root identifiers before anything is stored."""

from __future__ import annotations

import itertools
import threading
import uuid
from typing import Protocol, TypeVar, runtime_checkable

import uuid_utils

from aggregate_kit.kernel.types.ids import EntityId

TId = TypeVar("TId", bound=EntityId)


@runtime_checkable
class IdentityGenerator(Protocol):
    """Port: hand out globally unique aggregate identifiers.

    Application services call it before constructing an aggregate so that
    identity never depends on the storage engine::

        issue = Issue.create(id=ids.new_id(IssueId), ...)
    """

    def new_id(self, id_type: type[TId] = EntityId) -> TId:  # type: ignore[assignment]
        ...


class UuidV7IdentityGenerator:
    """Time-ordered UUIDv7 identifiers (index friendly)."""

    def new_id(self, id_type: type[TId] = EntityId) -> TId:  # type: ignore[assignment]
        return id_type(str(uuid_utils.uuid7()))


class UuidV4IdentityGenerator:
    """Random UUIDv4 identifiers."""

    def new_id(self, id_type: type[TId] = EntityId) -> TId:  # type: ignore[assignment]
        return id_type(str(uuid.uuid4()))


class SequentialIdentityGenerator:
    """Deterministic ``<prefix>-<n>`` identifiers for tests and fixtures.

    Unique only within one generator instance.
    """

    def __init__(self, prefix: str = "id", start: int = 1) -> None:
        self._prefix = prefix
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def new_id(self, id_type: type[TId] = EntityId) -> TId:  # type: ignore[assignment]
        with self._lock:
            n = next(self._counter)
        return id_type(f"{self._prefix}-{n}")


_default: IdentityGenerator = UuidV7IdentityGenerator()


def new_id(id_type: type[TId] = EntityId) -> TId:  # type: ignore[assignment]
    """Return a new identifier from the default (UUIDv7) generator."""
    return _default.new_id(id_type)


__all__ = [
    "IdentityGenerator",
    "SequentialIdentityGenerator",
    "UuidV4IdentityGenerator",
    "UuidV7IdentityGenerator",
    "new_id",
]
