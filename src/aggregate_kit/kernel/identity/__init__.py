"""Identity generation for aggregate roots."""

from aggregate_kit.kernel.identity.generator import (
    IdentityGenerator,
    SequentialIdentityGenerator,
    UuidV4IdentityGenerator,
    UuidV7IdentityGenerator,
    new_id,
)

__all__ = [
    "IdentityGenerator",
    "SequentialIdentityGenerator",
    "UuidV4IdentityGenerator",
    "UuidV7IdentityGenerator",
    "new_id",
]
