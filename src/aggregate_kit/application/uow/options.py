"""Unit-of-work options – isolation hint and ambient-scope reuse policy."""

from __future__ import annotations

import dataclasses
import enum

from aggregate_kit.kernel.ddd.unit_of_work import IsolationLevel


class ScopeReuse(enum.Enum):
    """What ``begin`` does when called inside an active unit of work."""

    JOIN = "join"
    """Join the active scope; only the outermost commits or rolls back."""

    REQUIRES_NEW = "requires_new"
    """Open an independent unit of work with its own physical transaction."""


@dataclasses.dataclass(frozen=True)
class TransactionOptions:
    """Options accepted by ``UnitOfWorkCoordinator.begin``.

    ``None`` fields fall back to the coordinator's settings.
    """

    isolation_level: IsolationLevel | None = None
    reuse: ScopeReuse = ScopeReuse.JOIN
    publish_events: bool | None = None


__all__ = ["IsolationLevel", "ScopeReuse", "TransactionOptions"]
