"""SQLAlchemy adapter – the ``aggregates`` table.

One row per aggregate. The root's fields live in ``state`` and every
sub-collection in ``details``, so a load without details never reads the
second column.
"""
from __future__ import annotations

from sqlalchemy import JSON, Column, Integer, MetaData, String, Table

metadata = MetaData()

aggregates_table = Table(
    "aggregates",
    metadata,
    Column("aggregate_type", String(200), primary_key=True),
    Column("aggregate_id", String(200), primary_key=True),
    Column("version", Integer, nullable=False),
    Column("state", JSON, nullable=False),
    Column("details", JSON, nullable=False, default=dict),
)


__all__ = ["aggregates_table", "metadata"]
