"""ValueObject base class."""

from __future__ import annotations

import dataclasses
from typing import Any

from aggregate_kit.kernel.ddd.guard import default_guard


@dataclasses.dataclass(frozen=True)
class ValueObject:
    """Base class for value objects.

    Subclasses should be ``@dataclass(frozen=True)``. Equality and hashing
    are based on field values. Override :meth:`_validate` for cross-field
    checks; subclasses that define ``__post_init__`` must call
    ``super().__post_init__()``.
    """

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        default_guard().check_definition(cls)

    def __post_init__(self) -> None:
        default_guard().ensure_checked(type(self))
        self._validate()

    def _validate(self) -> None:
        """Override to add cross-field invariant checks."""

    def copy_with(self, **changes: Any) -> "ValueObject":
        """Return a new, re-validated instance with given fields replaced."""
        return dataclasses.replace(self, **changes)


__all__ = ["ValueObject"]
