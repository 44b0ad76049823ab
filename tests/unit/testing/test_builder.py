"""Unit tests for Builder[T] and IssueBuilder."""
from __future__ import annotations

import dataclasses

import pytest

from aggregate_kit.kernel.errors import ValidationError
from aggregate_kit.kernel.identity import SequentialIdentityGenerator
from aggregate_kit.kernel.types import UserId
from aggregate_kit.testing.generators.builder import Builder, IssueBuilder
from aggregate_kit.testing.sample import CommentAdded, GitRepositoryId, IssueCreated, IssueId


@dataclasses.dataclass
class Point:
    x: int
    y: int


class PointBuilder(Builder[Point]):
    def __init__(self) -> None:
        super().__init__()
        self._attrs = {"x": 0, "y": 0}

    def build(self) -> Point:
        return Point(**self._attrs)


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


class TestBuilder:
    def test_with_returns_new_builder(self) -> None:
        base = PointBuilder()
        moved = base.with_(x=3)
        assert moved is not base
        assert base.attrs == {"x": 0, "y": 0}
        assert moved.attrs == {"x": 3, "y": 0}

    def test_call_applies_overrides(self) -> None:
        builder = PointBuilder()
        assert builder() == Point(0, 0)
        assert builder(y=5) == Point(0, 5)

    def test_attrs_is_a_copy(self) -> None:
        builder = PointBuilder()
        builder.attrs["x"] = 99
        assert builder.build() == Point(0, 0)


# ---------------------------------------------------------------------------
# IssueBuilder
# ---------------------------------------------------------------------------


class TestIssueBuilder:
    def test_defaults(self) -> None:
        issue = IssueBuilder().build()
        assert issue.id == IssueId("issue-1")
        assert issue.repository_id == GitRepositoryId("repo-1")
        assert issue.title == "Bug"
        assert issue.comments == []
        assert issue.version == 0

    def test_sequential_ids_per_builder(self) -> None:
        builder = IssueBuilder()
        assert [str(builder().id) for _ in range(2)] == ["issue-1", "issue-2"]

    def test_explicit_id_and_fields(self) -> None:
        issue = IssueBuilder()(id=IssueId("I1"), title="Crash", text="steps")
        assert issue.id == IssueId("I1")
        assert issue.title == "Crash"
        assert issue.text == "steps"

    def test_comments_and_labels(self) -> None:
        ids = SequentialIdentityGenerator(prefix="x")
        issue = IssueBuilder(ids).with_(
            comments=[("U1", "first"), (UserId("U2"), "second")],
            labels=["Bug", "ui"],
        ).build()
        assert [(str(c.user_id), c.text) for c in issue.comments] == [("U1", "first"), ("U2", "second")]
        assert [str(c.id) for c in issue.comments] == ["x-2", "x-3"]
        assert [lbl.name for lbl in issue.labels] == ["bug", "ui"]

    def test_keeps_pending_events(self) -> None:
        issue = IssueBuilder().with_(comments=[("U1", "x")]).build()
        assert [type(e) for e in issue.peek_events()] == [IssueCreated, CommentAdded]

    def test_invalid_values_surface(self) -> None:
        with pytest.raises(ValidationError):
            IssueBuilder()(title="  ")
