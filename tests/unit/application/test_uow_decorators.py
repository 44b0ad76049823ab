"""Tests for the @unit_of_work use-case decorator."""
from __future__ import annotations

import asyncio
from typing import Any

import pytest

from aggregate_kit.adapters.memory import InMemoryAggregateStore
from aggregate_kit.application.uow import (
    ScopeReuse,
    TransactionOptions,
    UnitOfWork,
    UnitOfWorkCoordinator,
    UnitOfWorkState,
    unit_of_work,
)
from aggregate_kit.kernel.types import UserId
from aggregate_kit.testing.sample import GitRepositoryId, Issue, IssueId, IssueRepository


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class OpenIssue:
    def __init__(self, coordinator: UnitOfWorkCoordinator) -> None:
        self._coordinator = coordinator
        self.seen: list[UnitOfWork] = []

    @unit_of_work()
    async def __call__(self, iid: str, title: str, *, uow: UnitOfWork) -> Issue:
        self.seen.append(uow)
        issue = Issue(IssueId(iid), GitRepositoryId("R1"), title)
        await uow.repository(IssueRepository).save(issue)  # type: ignore[attr-defined]
        return issue


class CommentOnIssue:
    def __init__(self, coordinator: UnitOfWorkCoordinator) -> None:
        self._coordinator = coordinator

    @unit_of_work()
    async def __call__(self, iid: str, text: str, *, uow: UnitOfWork) -> None:
        issues = uow.repository(IssueRepository)  # type: ignore[attr-defined]
        issue = await issues.get(IssueId(iid))
        issue.add_comment(UserId("U1"), text)
        await issues.save(issue)
        if text == "boom":
            raise RuntimeError("boom")


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestUnitOfWorkDecorator:
    def test_commits_on_normal_return(self) -> None:
        store = InMemoryAggregateStore()
        use_case = OpenIssue(UnitOfWorkCoordinator(store))

        issue = asyncio.run(use_case("I1", "Bug"))

        assert issue.version == 1
        assert store.count("Issue") == 1
        assert use_case.seen[0].state is UnitOfWorkState.COMMITTED

    def test_rolls_back_on_exception(self) -> None:
        store = InMemoryAggregateStore()
        coordinator = UnitOfWorkCoordinator(store)
        asyncio.run(OpenIssue(coordinator)("I1", "Bug"))

        with pytest.raises(RuntimeError, match="boom"):
            asyncio.run(CommentOnIssue(coordinator)("I1", "boom"))

        record = store.snapshot("Issue", "I1")
        assert record is not None
        assert record.version == 1
        assert record.details["comments"] == []  # type: ignore[index]

    def test_preserves_metadata(self) -> None:
        assert OpenIssue.__call__.__name__ == "__call__"

    def test_missing_coordinator(self) -> None:
        class Broken:
            @unit_of_work()
            async def run(self, *, uow: Any) -> None:
                pass

        with pytest.raises(AttributeError, match="_coordinator"):
            asyncio.run(Broken().run())

    def test_custom_attribute_and_kwarg(self) -> None:
        store = InMemoryAggregateStore()

        class Service:
            def __init__(self) -> None:
                self.coordinator = UnitOfWorkCoordinator(store)

            @unit_of_work(coordinator_attribute="coordinator", uow_kwarg="scope")
            async def run(self, *, scope: Any) -> str:
                await scope.repository(IssueRepository).save(
                    Issue(IssueId("I1"), GitRepositoryId("R1"), "Bug")
                )
                return scope.state.value

        assert asyncio.run(Service().run()) == "active"
        assert store.count() == 1

    def test_joins_caller_unit_of_work(self) -> None:
        store = InMemoryAggregateStore()
        coordinator = UnitOfWorkCoordinator(store)
        use_case = OpenIssue(coordinator)

        async def _run() -> None:
            async with coordinator.begin() as uow:
                await use_case("I1", "Bug", uow=uow)
                await use_case("I2", "Crash", uow=uow)
                assert store.count() == 0
                await uow.complete()

        asyncio.run(_run())
        assert store.count("Issue") == 2

    def test_failing_joined_call_dooms_caller(self) -> None:
        store = InMemoryAggregateStore()
        coordinator = UnitOfWorkCoordinator(store)
        asyncio.run(OpenIssue(coordinator)("I1", "Bug"))
        comment = CommentOnIssue(coordinator)

        async def _run() -> Any:
            async with coordinator.begin() as uow:
                await comment("I1", "fine", uow=uow)
                with pytest.raises(RuntimeError):
                    await comment("I1", "boom", uow=uow)
                assert uow.is_rollback_only  # type: ignore[attr-defined]
            return uow

        assert asyncio.run(_run()).state is UnitOfWorkState.ROLLED_BACK
        assert store.snapshot("Issue", "I1").version == 1  # type: ignore[union-attr]

    def test_requires_new_commits_independently(self) -> None:
        store = InMemoryAggregateStore()
        coordinator = UnitOfWorkCoordinator(store)

        class Audit:
            def __init__(self) -> None:
                self._coordinator = coordinator

            @unit_of_work(TransactionOptions(reuse=ScopeReuse.REQUIRES_NEW))
            async def record(self, *, uow: Any) -> None:
                await uow.repository(IssueRepository).save(
                    Issue(IssueId("audit"), GitRepositoryId("R1"), "Audit")
                )

        async def _run() -> None:
            async with coordinator.begin() as uow:
                await Audit().record(uow=uow)

        asyncio.run(_run())
        assert store.snapshot("Issue", "audit") is not None
