"""SQLAlchemy adapter – async aggregate store, session factory and table."""
from aggregate_kit.adapters.sqlalchemy.schema import aggregates_table, metadata
from aggregate_kit.adapters.sqlalchemy.session import SqlAlchemySessionFactory
from aggregate_kit.adapters.sqlalchemy.store import SqlAlchemyAggregateStore, SqlAlchemyTransaction

__all__ = [
    "SqlAlchemyAggregateStore",
    "SqlAlchemySessionFactory",
    "SqlAlchemyTransaction",
    "aggregates_table",
    "metadata",
]
