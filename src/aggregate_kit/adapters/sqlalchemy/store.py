"""SQLAlchemy adapter – SqlAlchemyAggregateStore.

Optimistic concurrency is enforced by the database itself: updates and
deletes carry ``WHERE version = :expected`` and a zero row count means a
concurrent writer got there first.
"""
from __future__ import annotations

from collections.abc import Callable
from typing import Any

from sqlalchemy import and_, delete, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from aggregate_kit.adapters.sqlalchemy.schema import aggregates_table
from aggregate_kit.adapters.sqlalchemy.session import SqlAlchemySessionFactory
from aggregate_kit.application.uow.store import AggregateStore, StoredAggregate, StoreTransaction
from aggregate_kit.config.settings.aggregate import AggregateSettings
from aggregate_kit.kernel.ddd.unit_of_work import IsolationLevel
from aggregate_kit.kernel.errors import (
    ConcurrencyConflictError,
    NotFoundError,
    StorageError,
    UnitOfWorkStateError,
)
from aggregate_kit.observability.logging import get_logger

logger = get_logger(__name__)

_t = aggregates_table


def _row_key(aggregate_type: str, aggregate_id: str) -> Any:
    return and_(_t.c.aggregate_type == aggregate_type, _t.c.aggregate_id == aggregate_id)


class SqlAlchemyAggregateStore(AggregateStore):
    """Aggregate store on an async SQLAlchemy engine.

    Parameters
    ----------
    session_factory:
        Zero-argument callable returning a fresh
        :class:`~sqlalchemy.ext.asyncio.AsyncSession`, typically a
        :class:`SqlAlchemySessionFactory`.
    """

    def __init__(self, session_factory: Callable[[], AsyncSession]) -> None:
        self._session_factory = session_factory

    @classmethod
    def from_settings(cls, settings: AggregateSettings) -> "SqlAlchemyAggregateStore":
        return cls(SqlAlchemySessionFactory.from_settings(settings))

    @property
    def session_factory(self) -> Callable[[], AsyncSession]:
        return self._session_factory

    async def begin(self, isolation_level: IsolationLevel | None = None) -> "SqlAlchemyTransaction":
        session = self._session_factory()
        try:
            if isolation_level is not None:
                # must run before the session's first statement
                await session.connection(
                    execution_options={"isolation_level": isolation_level.value}
                )
        except SQLAlchemyError as exc:
            await session.close()
            raise StorageError(
                f"Could not begin a {isolation_level.value} transaction",  # type: ignore[union-attr]
                operation="begin",
                cause=exc,
            ) from exc
        return SqlAlchemyTransaction(session)


class SqlAlchemyTransaction(StoreTransaction):
    """One :class:`AsyncSession` transaction."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._closed = False

    @property
    def session(self) -> AsyncSession:
        return self._session

    async def read(
        self,
        aggregate_type: str,
        aggregate_id: str,
        include_details: bool = True,
    ) -> StoredAggregate | None:
        self._require_open()
        columns = [_t.c.version, _t.c.state]
        if include_details:
            columns.append(_t.c.details)
        stmt = select(*columns).where(_row_key(aggregate_type, aggregate_id))
        try:
            row = (await self._session.execute(stmt)).one_or_none()
        except SQLAlchemyError as exc:
            raise StorageError(f"Reading {aggregate_type} '{aggregate_id}' failed", operation="read", cause=exc) from exc
        if row is None:
            return None
        return StoredAggregate(
            aggregate_type=aggregate_type,
            aggregate_id=aggregate_id,
            version=row.version,
            state=dict(row.state),
            details=dict(row.details or {}) if include_details else None,
        )

    async def write(self, record: StoredAggregate, expected_version: int) -> int:
        self._require_open()
        new_version = expected_version + 1
        try:
            if expected_version == 0:
                await self._insert(record, new_version)
            else:
                values: dict[str, Any] = {"version": new_version, "state": record.state}
                if record.details is not None:
                    values["details"] = record.details
                stmt = (
                    update(_t)
                    .where(_row_key(record.aggregate_type, record.aggregate_id))
                    .where(_t.c.version == expected_version)
                    .values(**values)
                )
                result = await self._session.execute(stmt)
                if result.rowcount == 0:
                    actual = await self._stored_version(record.aggregate_type, record.aggregate_id)
                    raise ConcurrencyConflictError(
                        record.aggregate_type, record.aggregate_id, expected_version, actual
                    )
        except SQLAlchemyError as exc:
            raise StorageError(
                f"Writing {record.aggregate_type} '{record.aggregate_id}' failed",
                operation="write",
                cause=exc,
            ) from exc
        return new_version

    async def _insert(self, record: StoredAggregate, new_version: int) -> None:
        actual = await self._stored_version(record.aggregate_type, record.aggregate_id)
        if actual is not None:
            raise ConcurrencyConflictError(record.aggregate_type, record.aggregate_id, 0, actual)
        stmt = insert(_t).values(
            aggregate_type=record.aggregate_type,
            aggregate_id=record.aggregate_id,
            version=new_version,
            state=record.state,
            details=record.details or {},
        )
        try:
            await self._session.execute(stmt)
        except IntegrityError as exc:
            # a concurrent transaction inserted the same key first
            raise ConcurrencyConflictError(
                record.aggregate_type, record.aggregate_id, 0, None, cause=exc
            ) from exc

    async def remove(self, aggregate_type: str, aggregate_id: str, expected_version: int) -> None:
        self._require_open()
        stmt = (
            delete(_t)
            .where(_row_key(aggregate_type, aggregate_id))
            .where(_t.c.version == expected_version)
        )
        try:
            result = await self._session.execute(stmt)
            if result.rowcount == 0:
                actual = await self._stored_version(aggregate_type, aggregate_id)
                if actual is None:
                    raise NotFoundError(aggregate_type, aggregate_id)
                raise ConcurrencyConflictError(aggregate_type, aggregate_id, expected_version, actual)
        except SQLAlchemyError as exc:
            raise StorageError(
                f"Removing {aggregate_type} '{aggregate_id}' failed", operation="remove", cause=exc
            ) from exc

    async def commit(self) -> None:
        self._require_open()
        try:
            await self._session.commit()
        except SQLAlchemyError as exc:
            raise StorageError("Commit failed", operation="commit", cause=exc) from exc
        finally:
            await self._close()

    async def rollback(self) -> None:
        if self._closed:
            return
        try:
            await self._session.rollback()
        except SQLAlchemyError as exc:
            raise StorageError("Rollback failed", operation="rollback", cause=exc) from exc
        finally:
            await self._close()

    async def _stored_version(self, aggregate_type: str, aggregate_id: str) -> int | None:
        stmt = select(_t.c.version).where(_row_key(aggregate_type, aggregate_id))
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def _close(self) -> None:
        self._closed = True
        try:
            await self._session.close()
        except SQLAlchemyError as exc:
            logger.warning("sqlalchemy.session_close_failed", error=repr(exc))

    def _require_open(self) -> None:
        if self._closed:
            raise UnitOfWorkStateError("Transaction is already closed")


__all__ = ["SqlAlchemyAggregateStore", "SqlAlchemyTransaction"]
