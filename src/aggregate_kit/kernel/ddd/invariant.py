"""Invariant helpers used by constructors and root methods."""

from __future__ import annotations

from typing import Any, TypeVar

from aggregate_kit.kernel.errors.domain import InvariantViolationError, ValidationError

T = TypeVar("T")


class Invariant:
    """Namespace for invariant assertions."""

    @staticmethod
    def require(condition: bool, message: str) -> None:
        """Raise ``InvariantViolationError`` when *condition* is False."""
        if not condition:
            raise InvariantViolationError(message)

    @staticmethod
    def not_none(value: T | None, name: str = "value") -> T:
        """Assert *value* is not None, returning it typed."""
        if value is None:
            raise ValidationError.for_field(name, "is required")
        return value

    @staticmethod
    def text(
        value: Any,
        name: str,
        *,
        max_length: int | None = None,
        required: bool = True,
    ) -> str | None:
        """Validate a text field and return it stripped.

        Empty or whitespace-only values count as missing. With
        ``required=False`` a missing value returns ``None``.
        """
        if value is None or (isinstance(value, str) and not value.strip()):
            if required:
                raise ValidationError.for_field(name, "is required")
            return None
        if not isinstance(value, str):
            raise ValidationError.for_field(name, f"expected str, got {type(value).__name__}")
        value = value.strip()
        if max_length is not None and len(value) > max_length:
            raise ValidationError.for_field(name, f"must be at most {max_length} characters")
        return value

    @staticmethod
    def instance_of(value: Any, expected: type[T], name: str) -> T:
        if not isinstance(value, expected):
            raise ValidationError.for_field(
                name, f"expected {expected.__name__}, got {type(value).__name__}"
            )
        return value


def ensure(condition: bool, message: str) -> None:
    """Shorthand for ``Invariant.require``."""
    Invariant.require(condition, message)


__all__ = ["Invariant", "ensure"]
