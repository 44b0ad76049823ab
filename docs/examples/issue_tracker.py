"""Issue tracker walkthrough on SQLite.

Opens a repository and an issue, comments on it from two concurrent use
cases (the second loses with a conflict), then closes the issue without
loading its comments.

Run with::

    pip install "aggregate-kit[sqlite]"
    python docs/examples/issue_tracker.py

Configuration comes from ``AGGREGATES_*`` environment variables (or a
``.env`` file), for example::

    AGGREGATES_DATABASE_URL=sqlite+aiosqlite:///issues.db
    AGGREGATES_LOG_LEVEL=DEBUG

Output
------
JSON log lines from the coordinator (``uow.begin``, ``repository.save``,
``uow.commit`` ...) followed by a short summary of the stored issue.
"""

from __future__ import annotations

import asyncio

from aggregate_kit.adapters.sqlalchemy import SqlAlchemyAggregateStore, SqlAlchemySessionFactory
from aggregate_kit.application.uow import UnitOfWork, UnitOfWorkCoordinator, unit_of_work
from aggregate_kit.config import AggregateSettings, DotenvSettingsLoader
from aggregate_kit.kernel.errors import ConcurrencyConflictError
from aggregate_kit.kernel.types import UserId
from aggregate_kit.observability.logging import JsonLoggerFactory, get_logger
from aggregate_kit.testing import InMemoryDomainEventBus
from aggregate_kit.testing.sample import (
    GitRepository,
    GitRepositoryRepository,
    Issue,
    IssueCloseReason,
    IssueId,
    IssueRepository,
)

logger = get_logger("issue_tracker")


class IssueService:
    """Use cases of the tracker; each public method is one unit of work."""

    def __init__(self, coordinator: UnitOfWorkCoordinator) -> None:
        self._coordinator = coordinator

    @unit_of_work()
    async def open_issue(self, repository_name: str, title: str, *, uow: UnitOfWork) -> IssueId:
        repository = GitRepository.create(repository_name)
        issue = Issue.create(repository.id, title)
        await uow.repository(GitRepositoryRepository).save(repository)  # type: ignore[attr-defined]
        await uow.repository(IssueRepository).save(issue)  # type: ignore[attr-defined]
        return issue.id

    @unit_of_work()
    async def comment(self, issue_id: IssueId, user: str, text: str, *, uow: UnitOfWork) -> None:
        issues = uow.repository(IssueRepository)  # type: ignore[attr-defined]
        issue = await issues.get(issue_id)
        issue.add_comment(UserId(user), text)
        await issues.save(issue)

    @unit_of_work()
    async def close(self, issue_id: IssueId, *, uow: UnitOfWork) -> None:
        issues = uow.repository(IssueRepository)  # type: ignore[attr-defined]
        issue = await issues.get(issue_id, include_details=False)
        issue.close(IssueCloseReason.COMPLETED)
        await issues.save(issue)


async def race(coordinator: UnitOfWorkCoordinator, issue_id: IssueId) -> None:
    """Two scopes load the same issue; the one that commits second conflicts."""
    async with coordinator.begin() as first, coordinator.begin() as second:
        mine = await first.repository(IssueRepository).get(issue_id)  # type: ignore[attr-defined]
        theirs = await second.repository(IssueRepository).get(issue_id)  # type: ignore[attr-defined]
        theirs.add_comment(UserId("bob"), "Seen it too")
        await second.repository(IssueRepository).save(theirs)  # type: ignore[attr-defined]
        await second.complete()

        mine.add_comment(UserId("alice"), "On it")
        try:
            await first.repository(IssueRepository).save(mine)  # type: ignore[attr-defined]
        except ConcurrencyConflictError as exc:
            logger.warning("example.conflict", expected=exc.expected, actual=exc.actual)


async def main() -> None:
    settings = DotenvSettingsLoader().load(AggregateSettings)
    JsonLoggerFactory.from_settings(settings)
    settings.apply_guard()

    sessions = SqlAlchemySessionFactory.from_settings(settings)
    await sessions.create_schema()
    bus = InMemoryDomainEventBus()
    coordinator = UnitOfWorkCoordinator(
        SqlAlchemyAggregateStore(sessions), event_bus=bus, settings=settings
    )
    service = IssueService(coordinator)

    try:
        issue_id = await service.open_issue("aggregate-kit", "Flush order is wrong")
        await service.comment(issue_id, "carol", "Reproduced on main")
        await race(coordinator, issue_id)
        await service.close(issue_id)

        async with coordinator.begin() as uow:
            issue = await uow.repository(IssueRepository).get(issue_id)  # type: ignore[attr-defined]
        logger.info(
            "example.summary",
            issue_id=str(issue.id),
            version=issue.version,
            closed=issue.is_closed,
            comments=[c.text for c in issue.comments],
            published=[e.event_type for e in bus.published],
        )
    finally:
        await sessions.dispose()


if __name__ == "__main__":
    asyncio.run(main())
