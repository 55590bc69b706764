"""Database bootstrap utilities for the portfolio content service.

This module exposes convenience imports for engine construction and schema
creation. The DB layer is intentionally minimal and does not leak table
objects into route handlers.
"""

from portfolio.db.base import get_engine
from portfolio.db.schema import ensure_schema

__all__ = [
    "get_engine",
    "ensure_schema",
]
