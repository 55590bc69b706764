"""Table definitions for the ordered document store.

Each portfolio collection shares one table; a row is one document whose
opaque fields live in the JSON ``payload`` column. ``item_order`` is a plain
integer column with no uniqueness constraint: keeping it contiguous is the
job of the reordering helpers, not of the database.
"""

from __future__ import annotations

import logging

from sqlalchemy import Column, DateTime, Index, Integer, MetaData, String, Table, Text
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

metadata = MetaData()

ordered_item = Table(
    "ordered_item",
    metadata,
    Column("item_id", String(36), primary_key=True),
    Column("collection", String(64), nullable=False),
    Column("item_order", Integer, nullable=False, default=0),
    Column("payload", Text, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    Index("ix_ordered_item_collection_order", "collection", "item_order"),
)


def ensure_schema(engine: Engine) -> None:
    """Create missing tables; existing tables are left untouched."""
    metadata.create_all(engine, checkfirst=True)
    logger.info("schema_ensured tables=%s", sorted(metadata.tables))


__all__ = ["metadata", "ordered_item", "ensure_schema"]
