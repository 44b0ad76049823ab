"""String-based identifier value objects.

Cross-aggregate references are always expressed with these types (or plain
``str``), never with the referenced root object itself.
"""

from __future__ import annotations

import dataclasses

import uuid_utils

from aggregate_kit.kernel.errors.domain import ValidationError


@dataclasses.dataclass(frozen=True, slots=True)
class _StrId:
    """Base for string-typed identifiers."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not self.value.strip():
            raise ValidationError(f"{type(self).__name__} must be a non-empty string")

    def __str__(self) -> str:
        return self.value


@dataclasses.dataclass(frozen=True, slots=True)
class EntityId(_StrId):
    """Generic entity identifier.

    Subclass it to give each aggregate type its own identifier type::

        class IssueId(EntityId): ...

        iid = IssueId.generate()          # new time-ordered UUIDv7
        iid = IssueId.from_str("abc-123")  # from an existing string
    """

    @classmethod
    def generate(cls) -> "EntityId":
        """Return a new random identifier (UUIDv7)."""
        return cls(str(uuid_utils.uuid7()))

    @classmethod
    def from_str(cls, value: str) -> "EntityId":
        """Construct from an existing string identifier."""
        return cls(value)


@dataclasses.dataclass(frozen=True, slots=True)
class UserId(EntityId):
    """Identifier of a user aggregate that lives outside this model."""


@dataclasses.dataclass(frozen=True, slots=True)
class CompositeKey:
    """Identity of a sub-entity inside its owning root: parent id + local key."""

    parent_id: EntityId
    local_key: str

    def __post_init__(self) -> None:
        if not self.local_key:
            raise ValidationError("CompositeKey.local_key must not be empty")

    def __str__(self) -> str:
        return f"{self.parent_id}/{self.local_key}"


__all__ = ["CompositeKey", "EntityId", "UserId"]
