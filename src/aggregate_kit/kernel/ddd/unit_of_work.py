"""Unit of Work port – the transactional boundary of one use case."""

from __future__ import annotations

import abc
import enum
from typing import Any


class IsolationLevel(enum.Enum):
    """Isolation hint handed to the storage adapter.

    Adapters apply what their engine supports; ``value`` is the SQL
    spelling.
    """

    READ_UNCOMMITTED = "READ UNCOMMITTED"
    READ_COMMITTED = "READ COMMITTED"
    REPEATABLE_READ = "REPEATABLE READ"
    SERIALIZABLE = "SERIALIZABLE"

    @classmethod
    def parse(cls, value: "str | IsolationLevel | None") -> "IsolationLevel | None":
        """Accept ``"read_committed"``, ``"READ COMMITTED"`` or an enum member."""
        if value is None or isinstance(value, IsolationLevel):
            return value
        normalised = value.strip().upper().replace("_", " ")
        if not normalised:
            return None
        for member in cls:
            if member.value == normalised:
                return member
        raise ValueError(f"Unknown isolation level: {value!r}")


class UnitOfWorkState(enum.Enum):
    """``IDLE → ACTIVE → {COMMITTING → COMMITTED | ROLLING_BACK → ROLLED_BACK}``."""

    IDLE = "idle"
    ACTIVE = "active"
    COMMITTING = "committing"
    COMMITTED = "committed"
    ROLLING_BACK = "rolling_back"
    ROLLED_BACK = "rolled_back"

    @property
    def is_terminal(self) -> bool:
        return self in (UnitOfWorkState.COMMITTED, UnitOfWorkState.ROLLED_BACK)


class UnitOfWork(abc.ABC):
    """Port: transactional unit of work.

    Unlike a plain commit-on-exit context manager, leaving the ``async with``
    block commits nothing: the use case must call :meth:`complete`. Leaving
    the block any other way (exception, cancellation, early return) rolls
    back.
    """

    @property
    @abc.abstractmethod
    def state(self) -> UnitOfWorkState: ...

    @abc.abstractmethod
    async def begin(self) -> None:
        """``IDLE → ACTIVE``."""

    @abc.abstractmethod
    async def complete(self) -> None:
        """Flush registered mutations in order and commit."""

    @abc.abstractmethod
    async def rollback(self) -> None:
        """Undo every registered effect."""

    async def __aenter__(self) -> "UnitOfWork":
        await self.begin()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        if not self.state.is_terminal:
            await self.rollback()


__all__ = ["IsolationLevel", "UnitOfWork", "UnitOfWorkState"]
