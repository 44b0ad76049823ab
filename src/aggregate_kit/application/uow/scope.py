"""Transaction scope record – what one unit of work has touched so far."""

from __future__ import annotations

import dataclasses
import enum
from typing import TYPE_CHECKING, Any

from aggregate_kit.application.uow.store import StoredAggregate
from aggregate_kit.kernel.ddd.capabilities import AggregateRootLike
from aggregate_kit.kernel.ddd.domain_event import DomainEvent
from aggregate_kit.kernel.errors.application import UnitOfWorkStateError

if TYPE_CHECKING:
    from aggregate_kit.kernel.ddd.repository import Repository

Key = tuple[str, str]

_CLAIM_ATTR = "_uow_claim"


class MutationKind(enum.Enum):
    WRITE = "write"
    REMOVE = "remove"


@dataclasses.dataclass
class PendingMutation:
    """One registered repository effect, flushed at commit in issuance order."""

    kind: MutationKind
    aggregate_type: str
    aggregate_id: str
    expected_version: int
    record: StoredAggregate | None = None
    aggregate: AggregateRootLike | None = None
    events: list[DomainEvent] = dataclasses.field(default_factory=list)

    @property
    def key(self) -> Key:
        return (self.aggregate_type, self.aggregate_id)

    @property
    def new_version(self) -> int | None:
        return self.expected_version + 1 if self.kind is MutationKind.WRITE else None


class ScopeRecord:
    """Per-unit-of-work bookkeeping.

    Holds the repositories touched, the pending mutations, an identity map
    (one in-memory instance per aggregate key) and the versions the scope
    will have written once its mutations are flushed.
    """

    def __init__(self, owner: object) -> None:
        self._owner = owner
        self.repositories: dict[type, Repository[Any]] = {}
        self.mutations: list[PendingMutation] = []
        self._identity_map: dict[Key, AggregateRootLike] = {}
        # key -> version after this scope's mutations; None once removed
        self._versions: dict[Key, int | None] = {}
        self._claimed: list[AggregateRootLike] = []

    # -- identity map --------------------------------------------------

    def lookup(self, key: Key) -> AggregateRootLike | None:
        return self._identity_map.get(key)

    def remember(self, key: Key, aggregate: AggregateRootLike) -> None:
        self.claim(aggregate)
        self._identity_map[key] = aggregate

    def forget(self, key: Key) -> None:
        self._identity_map.pop(key, None)

    def is_removed(self, key: Key) -> bool:
        return key in self._versions and self._versions[key] is None

    def known_version(self, key: Key) -> tuple[bool, int]:
        """``(True, version)`` when this scope already decided *key*'s version."""
        if key not in self._versions:
            return (False, 0)
        version = self._versions[key]
        return (True, 0 if version is None else version)

    def held_version(self, key: Key, aggregate: AggregateRootLike) -> int:
        """Version *aggregate* stands at from this scope's point of view."""
        if self._identity_map.get(key) is aggregate and self._versions.get(key) is not None:
            return self._versions[key]  # type: ignore[return-value]
        return aggregate.version

    # -- ownership -----------------------------------------------------

    def claim(self, aggregate: AggregateRootLike) -> None:
        """Bind *aggregate* to this scope; refuse if another live scope holds it."""
        holder = getattr(aggregate, _CLAIM_ATTR, None)
        if holder is self._owner:
            return
        if holder is not None and not holder.state.is_terminal:
            raise UnitOfWorkStateError(
                f"{type(aggregate).__name__} '{aggregate.id}' belongs to another active unit of work"
            )
        setattr(aggregate, _CLAIM_ATTR, self._owner)
        self._claimed.append(aggregate)

    def release(self) -> None:
        for aggregate in self._claimed:
            if getattr(aggregate, _CLAIM_ATTR, None) is self._owner:
                setattr(aggregate, _CLAIM_ATTR, None)
        self._claimed.clear()

    # -- mutations -----------------------------------------------------

    def register_write(self, mutation: PendingMutation) -> None:
        self.mutations.append(mutation)
        self._versions[mutation.key] = mutation.new_version
        if mutation.aggregate is not None:
            self._identity_map[mutation.key] = mutation.aggregate

    def register_remove(self, mutation: PendingMutation) -> None:
        self.mutations.append(mutation)
        self._versions[mutation.key] = None
        self._identity_map.pop(mutation.key, None)

    def written(self) -> dict[Key, tuple[AggregateRootLike, int]]:
        """Final ``(aggregate, version)`` per written key, in first-write order."""
        result: dict[Key, tuple[AggregateRootLike, int]] = {}
        for m in self.mutations:
            if m.kind is MutationKind.WRITE:
                result[m.key] = (m.aggregate, m.new_version)  # type: ignore[assignment]
            else:
                result.pop(m.key, None)
        return result

    def discard(self) -> None:
        """Drop every pending effect (rollback)."""
        self.mutations.clear()
        self._identity_map.clear()
        self._versions.clear()
        self.release()


__all__ = ["MutationKind", "PendingMutation", "ScopeRecord"]
