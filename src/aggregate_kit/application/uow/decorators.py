"""Application UoW – unit_of_work decorator."""

from __future__ import annotations

import functools
from typing import Any, Callable, TypeVar

from aggregate_kit.application.uow.coordinator import UnitOfWorkCoordinator
from aggregate_kit.application.uow.options import TransactionOptions
from aggregate_kit.kernel.ddd.unit_of_work import UnitOfWorkState

F = TypeVar("F", bound=Callable[..., Any])


def unit_of_work(
    options: TransactionOptions | None = None,
    *,
    coordinator_attribute: str = "_coordinator",
    uow_kwarg: str = "uow",
) -> Callable[[F], F]:
    """Decorator: run an async use-case method as exactly one unit of work.

    The coordinator is read from ``self.<coordinator_attribute>``. The active
    unit of work is passed as the ``uow`` keyword argument and completed when
    the method returns normally; any exception rolls it back. A caller that
    already holds a unit of work may pass it as ``uow=...``, and the method
    then joins it (or opens a new one, per ``options.reuse``).

    Example::

        class CommentOnIssue:
            def __init__(self, coordinator):
                self._coordinator = coordinator

            @unit_of_work()
            async def __call__(self, issue_id, user_id, text, *, uow):
                issues = uow.repository(IssueRepository)
                issue = await issues.get(issue_id)
                issue.add_comment(user_id, text)
                await issues.save(issue)
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
            coordinator: UnitOfWorkCoordinator | None = getattr(self, coordinator_attribute, None)
            if coordinator is None:
                raise AttributeError(
                    f"{type(self).__name__}.{coordinator_attribute} must hold a UnitOfWorkCoordinator"
                )
            parent = kwargs.pop(uow_kwarg, None)
            async with coordinator.begin(options, parent=parent) as uow:
                kwargs[uow_kwarg] = uow
                result = await func(self, *args, **kwargs)
                if uow.state is UnitOfWorkState.ACTIVE:
                    await uow.complete()
                return result

        return wrapper  # type: ignore[return-value]

    return decorator


__all__ = ["unit_of_work"]
