"""Config settings – AggregateSettings for the persistence coordinator."""
from __future__ import annotations

import dataclasses
import logging
from typing import ClassVar

from aggregate_kit.kernel.ddd.unit_of_work import IsolationLevel
from aggregate_kit.config.settings.base import Settings
from aggregate_kit.config.validation.errors import InvalidSettingValueError
from aggregate_kit.kernel.ddd.guard import DEFAULT_MAX_COLLECTION_SIZE, configure_guard


@dataclasses.dataclass
class AggregateSettings(Settings):
    """Settings read from ``AGGREGATES_*`` environment variables.

    ``isolation_level`` empty means "use the engine default".
    """

    _prefix: ClassVar[str] = "AGGREGATES"

    max_collection_size: int = DEFAULT_MAX_COLLECTION_SIZE
    isolation_level: str = ""
    publish_events: bool = True
    database_url: str = "sqlite+aiosqlite:///aggregates.db"
    echo_sql: bool = False
    log_level: str = "INFO"

    def _validate(self) -> None:
        if self.max_collection_size < 1:
            raise InvalidSettingValueError(
                "max_collection_size", self.max_collection_size, "must be positive"
            )
        try:
            IsolationLevel.parse(self.isolation_level)
        except ValueError as exc:
            raise InvalidSettingValueError("isolation_level", self.isolation_level, str(exc)) from exc
        if logging.getLevelName(self.log_level.upper()) not in range(0, 51):
            raise InvalidSettingValueError("log_level", self.log_level, "unknown logging level")

    @property
    def isolation(self) -> IsolationLevel | None:
        return IsolationLevel.parse(self.isolation_level)

    @property
    def log_level_number(self) -> int:
        return int(logging.getLevelName(self.log_level.upper()))

    def apply_guard(self) -> None:
        """Make ``max_collection_size`` the default cap for new collections."""
        configure_guard(self.max_collection_size)


__all__ = ["AggregateSettings"]
