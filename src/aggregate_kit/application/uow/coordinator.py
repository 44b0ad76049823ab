"""Unit-of-work coordinator – one atomic scope per use case.

Usage::

    coordinator = UnitOfWorkCoordinator(store, event_bus=bus)

    async with coordinator.begin() as uow:
        issues = uow.repository(IssueRepository)
        issue = await issues.get(issue_id)
        issue.add_comment(user_id, "x")
        await issues.save(issue)
        await uow.complete()

Nothing reaches the store before :meth:`ScopedUnitOfWork.complete`. Leaving
the block without completing rolls everything back.
"""

from __future__ import annotations

import asyncio
import uuid
from typing import Any, TypeVar

from aggregate_kit.application.uow.options import ScopeReuse, TransactionOptions
from aggregate_kit.application.uow.scope import MutationKind, ScopeRecord
from aggregate_kit.application.uow.store import AggregateStore, StoreTransaction
from aggregate_kit.config.settings.aggregate import AggregateSettings
from aggregate_kit.kernel.ddd.domain_event import DomainEventEnvelope
from aggregate_kit.kernel.ddd.event_bus import DomainEventBus
from aggregate_kit.kernel.ddd.unit_of_work import IsolationLevel, UnitOfWork, UnitOfWorkState
from aggregate_kit.kernel.errors import (
    DomainError,
    TransactionFailureError,
    UnitOfWorkStateError,
)
from aggregate_kit.observability.logging import get_logger

R = TypeVar("R")

logger = get_logger(__name__)


class UnitOfWorkCoordinator:
    """Hands out units of work bound to one :class:`AggregateStore`.

    The coordinator is shared and stateless between use cases; each call to
    :meth:`begin` returns a fresh unit of work that must not be shared with
    another concurrently running use case.
    """

    def __init__(
        self,
        store: AggregateStore,
        *,
        event_bus: DomainEventBus | None = None,
        settings: AggregateSettings | None = None,
    ) -> None:
        self._store = store
        self._event_bus = event_bus
        self._settings = settings or AggregateSettings()

    @property
    def store(self) -> AggregateStore:
        return self._store

    @property
    def settings(self) -> AggregateSettings:
        return self._settings

    def begin(
        self,
        options: TransactionOptions | None = None,
        *,
        parent: UnitOfWork | None = None,
    ) -> UnitOfWork:
        """Return an idle unit of work; enter it (``async with``) to start.

        With an active *parent* and ``ScopeReuse.JOIN`` the returned handle
        joins the parent's scope instead of opening a new transaction.
        """
        options = options or TransactionOptions()
        if (
            parent is not None
            and parent.state is UnitOfWorkState.ACTIVE
            and options.reuse is ScopeReuse.JOIN
        ):
            return JoinedUnitOfWork(_outermost(parent), self)
        return ScopedUnitOfWork(self, options)

    # internals used by ScopedUnitOfWork

    def _isolation_for(self, options: TransactionOptions) -> IsolationLevel | None:
        return options.isolation_level or self._settings.isolation

    def _publishes(self, options: TransactionOptions) -> bool:
        if self._event_bus is None:
            return False
        if options.publish_events is None:
            return self._settings.publish_events
        return options.publish_events


class ScopedUnitOfWork(UnitOfWork):
    """Outermost unit of work: owns the scope record and the physical transaction."""

    def __init__(self, coordinator: UnitOfWorkCoordinator, options: TransactionOptions) -> None:
        self.id = uuid.uuid4().hex
        self._coordinator = coordinator
        self._options = options
        self._state = UnitOfWorkState.IDLE
        self._tx: StoreTransaction | None = None
        self._scope: ScopeRecord | None = None
        self._task: asyncio.Task[Any] | None = None
        self._rollback_only: str | None = None
        self._committed_events: list[DomainEventEnvelope] = []
        self._log = logger.bind(uow_id=self.id)

    @property
    def state(self) -> UnitOfWorkState:
        return self._state

    @property
    def options(self) -> TransactionOptions:
        return self._options

    @property
    def committed_events(self) -> list[DomainEventEnvelope]:
        """Events made visible by a successful commit, in publish order."""
        return list(self._committed_events)

    @property
    def is_rollback_only(self) -> bool:
        return self._rollback_only is not None

    @property
    def outermost(self) -> "ScopedUnitOfWork":
        return self

    # -- lifecycle -----------------------------------------------------

    async def begin(self) -> None:
        if self._state is not UnitOfWorkState.IDLE:
            raise UnitOfWorkStateError(
                "A unit of work can only be begun once", state=self._state.value
            )
        self._task = asyncio.current_task()
        isolation = self._coordinator._isolation_for(self._options)
        try:
            self._tx = await self._coordinator.store.begin(isolation)
        except DomainError:
            raise
        except Exception as exc:
            raise TransactionFailureError("Could not open a transaction", cause=exc) from exc
        self._scope = ScopeRecord(self)
        self._state = UnitOfWorkState.ACTIVE
        self._log.debug(
            "uow.begin",
            isolation_level=isolation.value if isolation else None,
        )

    def nested(self, options: TransactionOptions | None = None) -> UnitOfWork:
        """``coordinator.begin(options, parent=self)``."""
        return self._coordinator.begin(options, parent=self)

    def repository(self, repository_cls: type[R]) -> R:
        """Return the scope-bound repository of *repository_cls* (one per scope)."""
        scope = self.active_scope()
        repo = scope.repositories.get(repository_cls)
        if repo is None:
            repo = repository_cls(self)  # type: ignore[call-arg]
            scope.repositories[repository_cls] = repo  # type: ignore[assignment]
        return repo  # type: ignore[return-value]

    def set_rollback_only(self, reason: str) -> None:
        """Doom the scope: :meth:`complete` will roll back instead of committing."""
        if self._rollback_only is None:
            self._rollback_only = reason
            self._log.info("uow.rollback_only", reason=reason)

    async def complete(self) -> None:
        self._ensure_active()
        if self._rollback_only is not None:
            reason = self._rollback_only
            await self.rollback()
            raise TransactionFailureError(f"Unit of work was rolled back: {reason}")

        assert self._tx is not None and self._scope is not None
        self._state = UnitOfWorkState.COMMITTING
        mutations = list(self._scope.mutations)
        try:
            for mutation in mutations:
                if mutation.kind is MutationKind.WRITE:
                    await self._tx.write(mutation.record, mutation.expected_version)  # type: ignore[arg-type]
                else:
                    await self._tx.remove(
                        mutation.aggregate_type, mutation.aggregate_id, mutation.expected_version
                    )
            await self._tx.commit()
        except DomainError as exc:
            await self._rollback_after_failure(exc)
            raise
        except TransactionFailureError as exc:
            await self._rollback_after_failure(exc)
            raise
        except Exception as exc:
            await self._rollback_after_failure(exc)
            raise TransactionFailureError(
                f"Commit failed: {exc}", cause=exc
            ) from exc
        except BaseException as exc:
            await self._rollback_after_failure(exc)
            raise

        self._state = UnitOfWorkState.COMMITTED
        envelopes: list[DomainEventEnvelope] = []
        for aggregate, version in self._scope.written().values():
            aggregate.mark_persisted(version)
        for mutation in mutations:
            if mutation.kind is MutationKind.WRITE:
                envelopes.extend(
                    DomainEventEnvelope(
                        event=event,
                        aggregate_id=mutation.aggregate_id,
                        aggregate_type=mutation.aggregate_type,
                        version=mutation.new_version or 0,
                    )
                    for event in mutation.events
                )
        self._scope.release()
        self._committed_events = envelopes
        self._log.info("uow.commit", mutations=len(mutations), events=len(envelopes))
        await self._publish(envelopes)

    async def rollback(self) -> None:
        """Undo every registered effect; idempotent once terminal."""
        if self._state.is_terminal:
            return
        if self._state is UnitOfWorkState.IDLE:
            self._state = UnitOfWorkState.ROLLED_BACK
            return
        self._state = UnitOfWorkState.ROLLING_BACK
        try:
            if self._tx is not None:
                await self._tx.rollback()
        except Exception as exc:
            self._log.error("uow.rollback_failed", error=repr(exc))
            raise TransactionFailureError("Rollback failed", cause=exc) from exc
        finally:
            self._discard()
            self._state = UnitOfWorkState.ROLLED_BACK
        self._log.info("uow.rollback", reason=self._rollback_only)

    async def abort(self, cause: BaseException) -> None:
        """Roll back because a repository call inside the scope failed."""
        if self._state is UnitOfWorkState.ACTIVE and self._owned_by_current_task():
            self.set_rollback_only(f"{type(cause).__name__}: {cause}")
            await self.rollback()

    # -- helpers -------------------------------------------------------

    def active_scope(self) -> ScopeRecord:
        self._ensure_active()
        assert self._scope is not None
        return self._scope

    @property
    def transaction(self) -> StoreTransaction:
        self._ensure_active()
        assert self._tx is not None
        return self._tx

    def _ensure_active(self) -> None:
        if self._state is not UnitOfWorkState.ACTIVE:
            raise UnitOfWorkStateError(
                f"Unit of work is {self._state.value}, not active", state=self._state.value
            )
        if not self._owned_by_current_task():
            raise UnitOfWorkStateError(
                "A unit of work cannot be used from a different task than the one that began it",
                state=self._state.value,
            )

    def _owned_by_current_task(self) -> bool:
        current = asyncio.current_task()
        return self._task is None or current is None or current is self._task

    def _discard(self) -> None:
        # events pulled at save time are dropped with the mutations
        if self._scope is not None:
            self._scope.discard()

    async def _rollback_after_failure(self, cause: BaseException) -> None:
        self._log.warning("uow.commit_failed", error=repr(cause))
        self._state = UnitOfWorkState.ROLLING_BACK
        try:
            if self._tx is not None:
                await self._tx.rollback()
        except Exception as exc:  # original cause wins; the rollback error is logged
            self._log.error("uow.rollback_failed", error=repr(exc))
        finally:
            self._discard()
            self._state = UnitOfWorkState.ROLLED_BACK

    async def _publish(self, envelopes: list[DomainEventEnvelope]) -> None:
        if not envelopes or not self._coordinator._publishes(self._options):
            return
        bus = self._coordinator._event_bus
        assert bus is not None
        for envelope in envelopes:
            try:
                await bus.publish(envelope)
            except Exception as exc:
                self._log.error(
                    "uow.publish_failed",
                    event_type=envelope.event_type,
                    aggregate_id=envelope.aggregate_id,
                    error=repr(exc),
                )
                raise


class JoinedUnitOfWork(UnitOfWork):
    """Handle for a nested ``begin`` that joined an active scope.

    Completing it commits nothing; leaving it without completing dooms the
    outer scope, which then rolls back on its own ``complete``.
    """

    def __init__(self, outer: ScopedUnitOfWork, coordinator: UnitOfWorkCoordinator) -> None:
        self._outer = outer
        self._coordinator = coordinator
        self._state = UnitOfWorkState.IDLE

    @property
    def state(self) -> UnitOfWorkState:
        return self._state

    @property
    def id(self) -> str:
        return self._outer.id

    @property
    def outermost(self) -> ScopedUnitOfWork:
        return self._outer

    async def begin(self) -> None:
        if self._state is not UnitOfWorkState.IDLE:
            raise UnitOfWorkStateError(
                "A unit of work can only be begun once", state=self._state.value
            )
        self._outer._ensure_active()
        self._state = UnitOfWorkState.ACTIVE

    def nested(self, options: TransactionOptions | None = None) -> UnitOfWork:
        return self._coordinator.begin(options, parent=self)

    def repository(self, repository_cls: type[R]) -> R:
        self._ensure_active()
        return self._outer.repository(repository_cls)

    async def complete(self) -> None:
        self._ensure_active()
        self._outer._ensure_active()
        self._state = UnitOfWorkState.COMMITTED

    async def rollback(self) -> None:
        if self._state.is_terminal:
            return
        if self._state is UnitOfWorkState.ACTIVE and self._outer.state is UnitOfWorkState.ACTIVE:
            self._outer.set_rollback_only("nested unit of work did not complete")
        self._state = UnitOfWorkState.ROLLED_BACK

    def _ensure_active(self) -> None:
        if self._state is not UnitOfWorkState.ACTIVE:
            raise UnitOfWorkStateError(
                f"Unit of work is {self._state.value}, not active", state=self._state.value
            )


def _outermost(uow: UnitOfWork) -> ScopedUnitOfWork:
    outer = getattr(uow, "outermost", None)
    if not isinstance(outer, ScopedUnitOfWork):
        raise UnitOfWorkStateError(f"{type(uow).__name__} is not managed by a coordinator")
    return outer


__all__ = [
    "JoinedUnitOfWork",
    "ScopedUnitOfWork",
    "UnitOfWorkCoordinator",
]
