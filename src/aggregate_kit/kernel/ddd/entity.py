"""Sub-entities – identity-bearing parts of an aggregate."""

from __future__ import annotations

from typing import Any

from aggregate_kit.kernel.ddd.guard import default_guard
from aggregate_kit.kernel.errors.domain import ValidationError
from aggregate_kit.kernel.types.ids import CompositeKey, EntityId


class SubEntity:
    """Entity owned by exactly one aggregate root.

    Identified inside its parent either by its own ``EntityId`` or by a
    local string key, in which case the identity is the
    :class:`CompositeKey` ``(parent_id, local_key)``. Equality is identity
    based. Instances are only created, changed and removed by root methods.
    """

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        default_guard().check_definition(cls)

    def __init__(self, parent_id: EntityId, key: EntityId | str) -> None:
        default_guard().ensure_checked(type(self))
        if not isinstance(parent_id, EntityId):
            raise ValidationError.for_field("parent_id", "expected an EntityId")
        if isinstance(key, str):
            self._identity: EntityId | CompositeKey = CompositeKey(parent_id, key)
        elif isinstance(key, EntityId):
            self._identity = key
        else:
            raise ValidationError.for_field("key", "expected an EntityId or a local key string")
        self._parent_id = parent_id

    @property
    def parent_id(self) -> EntityId:
        return self._parent_id

    @property
    def identity(self) -> EntityId | CompositeKey:
        return self._identity

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, type(self)):
            return False
        return self._identity == other._identity

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._identity))

    def __repr__(self) -> str:  # pragma: no cover
        return f"{type(self).__name__}(identity={self._identity!s})"


__all__ = ["SubEntity"]
