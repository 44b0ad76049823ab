"""Domain events and the envelope they are published in after commit."""

from __future__ import annotations

import dataclasses
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4


@dataclasses.dataclass(frozen=True)
class DomainEvent:
    """Base class for domain events.

    Subclasses extend this and add their own payload fields.

    Example::

        @dataclasses.dataclass(frozen=True)
        class IssueClosed(DomainEvent):
            issue_id: str = ""
            reason: str = ""
    """

    event_id: str = dataclasses.field(default_factory=lambda: str(uuid4()))
    occurred_at: datetime = dataclasses.field(
        default_factory=lambda: datetime.now(UTC)
    )

    @property
    def event_type(self) -> str:
        return type(self).__name__


@dataclasses.dataclass(frozen=True)
class DomainEventEnvelope:
    """A committed ``DomainEvent`` together with the aggregate that raised it.

    ``version`` is the aggregate version that the commit produced.
    """

    event: DomainEvent
    aggregate_id: str
    aggregate_type: str
    version: int
    metadata: dict[str, Any] = dataclasses.field(default_factory=dict)

    @property
    def event_type(self) -> str:
        return self.event.event_type


__all__ = ["DomainEvent", "DomainEventEnvelope"]
