"""Application-layer errors – programming defects at use-case level."""

from __future__ import annotations

from typing import Any

from aggregate_kit.kernel.errors.base import BaseError


class ApplicationError(BaseError):
    """Cross-cutting application-layer concern."""

    default_code = "application_error"


class NotLoadedError(ApplicationError):
    """A sub-collection was accessed on a root loaded without details.

    Always a defect in the calling code: request ``include_details=True``.
    """

    default_code = "not_loaded"

    def __init__(self, owner: str, collection: str, **kwargs: Any) -> None:
        super().__init__(
            f"{owner}.{collection} was not loaded; "
            f"fetch the aggregate with include_details=True",
            detail={"owner": owner, "collection": collection},
            **kwargs,
        )
        self.owner = owner
        self.collection = collection


class UnitOfWorkStateError(ApplicationError):
    """A unit of work was used in a state that does not allow the call."""

    default_code = "unit_of_work_state"

    def __init__(self, message: str, *, state: str | None = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.state = state


__all__ = [
    "ApplicationError",
    "NotLoadedError",
    "UnitOfWorkStateError",
]
