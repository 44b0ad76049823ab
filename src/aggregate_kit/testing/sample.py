"""Testing sample – a small issue-tracking domain.

Two aggregates: :class:`GitRepository` and :class:`Issue`. An issue points
at its repository by :class:`GitRepositoryId` only and owns two bounded
sub-collections, ``comments`` (:class:`Comment`) and ``labels``
(:class:`IssueLabel`, keyed by ``(issue_id, name)``).
"""
from __future__ import annotations

import dataclasses
import enum
from datetime import UTC, datetime
from typing import Any

from aggregate_kit.application.uow.repository import AggregateRepository
from aggregate_kit.kernel.ddd import AggregateRoot, DomainEvent, Invariant, SubCollection, SubEntity
from aggregate_kit.kernel.errors import InvariantViolationError, ValidationError
from aggregate_kit.kernel.identity import IdentityGenerator, new_id
from aggregate_kit.kernel.types import EntityId, UserId


@dataclasses.dataclass(frozen=True, slots=True)
class GitRepositoryId(EntityId):
    pass


@dataclasses.dataclass(frozen=True, slots=True)
class IssueId(EntityId):
    pass


@dataclasses.dataclass(frozen=True, slots=True)
class CommentId(EntityId):
    pass


class IssueCloseReason(enum.Enum):
    COMPLETED = "completed"
    NOT_PLANNED = "not_planned"
    DUPLICATE = "duplicate"


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclasses.dataclass(frozen=True)
class IssueCreated(DomainEvent):
    issue_id: str = ""
    repository_id: str = ""


@dataclasses.dataclass(frozen=True)
class CommentAdded(DomainEvent):
    issue_id: str = ""
    comment_id: str = ""
    user_id: str = ""


@dataclasses.dataclass(frozen=True)
class IssueClosed(DomainEvent):
    issue_id: str = ""
    reason: str = ""


@dataclasses.dataclass(frozen=True)
class IssueReopened(DomainEvent):
    issue_id: str = ""


# ---------------------------------------------------------------------------
# GitRepository
# ---------------------------------------------------------------------------


class GitRepository(AggregateRoot):
    """A source repository issues are filed against."""

    _name: str

    def __init__(self, id: GitRepositoryId, name: str) -> None:  # noqa: A002
        super().__init__(id)
        self._name = Invariant.text(name, "name", max_length=128)  # type: ignore[assignment]

    @classmethod
    def create(cls, name: str, *, ids: IdentityGenerator | None = None) -> "GitRepository":
        rid = ids.new_id(GitRepositoryId) if ids else new_id(GitRepositoryId)
        return cls(rid, name)

    @classmethod
    def _restore(cls, id: EntityId, version: int, *, name: str = "") -> "GitRepository":  # type: ignore[override]  # noqa: A002
        repo = super()._restore(id, version)
        repo._name = name
        return repo

    @property
    def name(self) -> str:
        return self._name

    def rename(self, name: str) -> None:
        self._name = Invariant.text(name, "name", max_length=128)  # type: ignore[assignment]


# ---------------------------------------------------------------------------
# Issue
# ---------------------------------------------------------------------------


class Comment(SubEntity):
    """A comment on an issue; identified by its own :class:`CommentId`."""

    def __init__(
        self,
        issue_id: IssueId,
        comment_id: CommentId,
        user_id: UserId,
        text: str,
        created_at: datetime | None = None,
    ) -> None:
        super().__init__(issue_id, comment_id)
        self._user_id = Invariant.instance_of(user_id, UserId, "user_id")
        self._text = Invariant.text(text, "text", max_length=4096)
        self._created_at = created_at or datetime.now(UTC)

    @property
    def id(self) -> CommentId:
        return self.identity  # type: ignore[return-value]

    @property
    def user_id(self) -> UserId:
        return self._user_id

    @property
    def text(self) -> str:
        return self._text  # type: ignore[return-value]

    @property
    def created_at(self) -> datetime:
        return self._created_at


class IssueLabel(SubEntity):
    """A label attached to an issue; identity is ``(issue_id, name)``."""

    def __init__(self, issue_id: IssueId, name: str) -> None:
        name = Invariant.text(name, "name", max_length=50)  # type: ignore[assignment]
        super().__init__(issue_id, name.lower())

    @property
    def name(self) -> str:
        return self.identity.local_key  # type: ignore[union-attr]


class Issue(AggregateRoot):
    """An issue filed against a :class:`GitRepository`."""

    comments = SubCollection(Comment)
    labels = SubCollection(IssueLabel, max_size=20)

    _repository_id: GitRepositoryId
    _title: str
    _text: str | None
    _is_closed: bool
    _close_reason: IssueCloseReason | None

    def __init__(
        self,
        id: IssueId,  # noqa: A002
        repository_id: GitRepositoryId,
        title: str,
        text: str | None = None,
    ) -> None:
        super().__init__(id)
        self._repository_id = Invariant.instance_of(repository_id, GitRepositoryId, "repository_id")
        self._title = Invariant.text(title, "title", max_length=256)  # type: ignore[assignment]
        self._text = Invariant.text(text, "text", required=False)
        self._is_closed = False
        self._close_reason = None
        self._record_event(IssueCreated(issue_id=str(id), repository_id=str(repository_id)))

    @classmethod
    def create(
        cls,
        repository_id: GitRepositoryId,
        title: str,
        text: str | None = None,
        *,
        ids: IdentityGenerator | None = None,
    ) -> "Issue":
        iid = ids.new_id(IssueId) if ids else new_id(IssueId)
        return cls(iid, repository_id, title, text)

    @classmethod
    def _restore(  # type: ignore[override]
        cls,
        id: EntityId,  # noqa: A002
        version: int,
        *,
        repository_id: GitRepositoryId,
        title: str,
        text: str | None = None,
        is_closed: bool = False,
        close_reason: IssueCloseReason | None = None,
    ) -> "Issue":
        issue = super()._restore(id, version)
        issue._repository_id = repository_id
        issue._title = title
        issue._text = text
        issue._is_closed = is_closed
        issue._close_reason = close_reason
        return issue

    # -- state -----------------------------------------------------------

    @property
    def repository_id(self) -> GitRepositoryId:
        return self._repository_id

    @property
    def title(self) -> str:
        return self._title

    @property
    def text(self) -> str | None:
        return self._text

    @text.setter
    def text(self, value: str | None) -> None:
        self._text = Invariant.text(value, "text", required=False)

    @property
    def is_closed(self) -> bool:
        return self._is_closed

    @property
    def close_reason(self) -> IssueCloseReason | None:
        return self._close_reason

    # -- behaviour -------------------------------------------------------

    def set_title(self, title: str) -> None:
        self._title = Invariant.text(title, "title", max_length=256)  # type: ignore[assignment]

    def close(self, reason: IssueCloseReason) -> None:
        if not isinstance(reason, IssueCloseReason):
            raise ValidationError.for_field("reason", "a close reason is required")
        if self._is_closed:
            raise InvariantViolationError("Issue is already closed")
        self._is_closed = True
        self._close_reason = reason
        self._record_event(IssueClosed(issue_id=str(self.id), reason=reason.value))

    def reopen(self) -> None:
        if not self._is_closed:
            raise InvariantViolationError("Issue is not closed")
        self._is_closed = False
        self._close_reason = None
        self._record_event(IssueReopened(issue_id=str(self.id)))

    def add_comment(
        self,
        user_id: UserId,
        text: str,
        *,
        ids: IdentityGenerator | None = None,
    ) -> Comment:
        cid = ids.new_id(CommentId) if ids else new_id(CommentId)
        comment = self._collection("comments").add(Comment(self.id, cid, user_id, text))  # type: ignore[arg-type]
        self._record_event(
            CommentAdded(issue_id=str(self.id), comment_id=str(cid), user_id=str(user_id))
        )
        return comment

    def remove_comment(self, comment_id: CommentId) -> None:
        removed = self._collection("comments").remove_where(lambda c: c.id == comment_id)
        if not removed:
            raise ValidationError.for_field("comment_id", f"no comment '{comment_id}'")

    def add_label(self, name: str) -> IssueLabel:
        label = IssueLabel(self.id, name)  # type: ignore[arg-type]
        if label in self._collection("labels"):
            return label
        return self._collection("labels").add(label)

    def remove_label(self, name: str) -> None:
        self._collection("labels").remove_where(lambda lbl: lbl.name == name.strip().lower())


# ---------------------------------------------------------------------------
# Repositories
# ---------------------------------------------------------------------------


class GitRepositoryRepository(AggregateRepository[GitRepository]):
    aggregate_type = GitRepository
    id_type = GitRepositoryId

    def _to_state(self, aggregate: GitRepository) -> dict[str, Any]:
        return {"name": aggregate.name}

    def _to_details(self, aggregate: GitRepository) -> dict[str, list[Any]]:
        return {}

    def _from_state(self, id: EntityId, version: int, state: dict[str, Any]) -> GitRepository:  # noqa: A002
        return GitRepository._restore(id, version, name=state["name"])

    def _load_details(self, aggregate: GitRepository, details: dict[str, list[Any]]) -> None:
        pass


class IssueRepository(AggregateRepository[Issue]):
    aggregate_type = Issue
    id_type = IssueId

    def _to_state(self, aggregate: Issue) -> dict[str, Any]:
        return {
            "repository_id": str(aggregate.repository_id),
            "title": aggregate.title,
            "text": aggregate.text,
            "is_closed": aggregate.is_closed,
            "close_reason": aggregate.close_reason.value if aggregate.close_reason else None,
        }

    def _to_details(self, aggregate: Issue) -> dict[str, list[Any]]:
        return {
            "comments": [
                {
                    "id": str(c.id),
                    "user_id": str(c.user_id),
                    "text": c.text,
                    "created_at": c.created_at.isoformat(),
                }
                for c in aggregate.comments
            ],
            "labels": [label.name for label in aggregate.labels],
        }

    def _from_state(self, id: EntityId, version: int, state: dict[str, Any]) -> Issue:  # noqa: A002
        reason = state.get("close_reason")
        return Issue._restore(
            id,
            version,
            repository_id=GitRepositoryId(state["repository_id"]),
            title=state["title"],
            text=state.get("text"),
            is_closed=bool(state.get("is_closed", False)),
            close_reason=IssueCloseReason(reason) if reason else None,
        )

    def _load_details(self, aggregate: Issue, details: dict[str, list[Any]]) -> None:
        issue_id = aggregate.id
        aggregate._hydrate(
            "comments",
            [
                Comment(
                    issue_id,  # type: ignore[arg-type]
                    CommentId(c["id"]),
                    UserId(c["user_id"]),
                    c["text"],
                    datetime.fromisoformat(c["created_at"]),
                )
                for c in details.get("comments", [])
            ],
        )
        aggregate._hydrate("labels", [IssueLabel(issue_id, n) for n in details.get("labels", [])])  # type: ignore[arg-type]


__all__ = [
    "Comment",
    "CommentAdded",
    "CommentId",
    "GitRepository",
    "GitRepositoryId",
    "GitRepositoryRepository",
    "Issue",
    "IssueClosed",
    "IssueCloseReason",
    "IssueCreated",
    "IssueId",
    "IssueLabel",
    "IssueReopened",
    "IssueRepository",
]
