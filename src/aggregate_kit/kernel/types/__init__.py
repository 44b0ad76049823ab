"""Kernel identifier types – public re-export surface."""

from aggregate_kit.kernel.types.ids import CompositeKey, EntityId, UserId

__all__ = ["CompositeKey", "EntityId", "UserId"]
