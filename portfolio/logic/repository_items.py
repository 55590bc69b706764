"""Ordered document data access helpers.

Encapsulates the SQL for the shared ``ordered_item`` table so route handlers
stay free of inline statements. Documents are returned in their wire shape:
``{"_id", <payload fields>, "order", "createdAt", "updatedAt"}``.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import text as sql_text

from portfolio.db.base import get_engine

logger = logging.getLogger(__name__)

_COLUMNS = "item_id, item_order, payload, created_at, updated_at"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: Any) -> str:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()
    # SQLite hands back text for DateTime columns read through raw SQL
    return str(value)


def _row_to_document(row: Any) -> Dict[str, Any]:
    item_id, item_order, payload, created_at, updated_at = row
    doc: Dict[str, Any] = {"_id": str(item_id)}
    try:
        doc.update(json.loads(payload or "{}"))
    except json.JSONDecodeError:
        logger.error("ordered_item payload is not valid JSON item_id=%s", item_id)
    doc["order"] = int(item_order)
    doc["createdAt"] = _iso(created_at)
    doc["updatedAt"] = _iso(updated_at)
    return doc


def _split_payload(fields: Dict[str, Any]) -> tuple[int, str]:
    body = {k: v for k, v in fields.items() if k not in {"_id", "order", "createdAt", "updatedAt"}}
    return int(fields.get("order") or 0), json.dumps(body, sort_keys=True)


def list_items(collection: str) -> List[Dict[str, Any]]:
    """Return every document in ``collection`` sorted by order, then creation."""
    eng = get_engine()
    with eng.connect() as conn:
        rows = conn.execute(
            sql_text(
                f"SELECT {_COLUMNS} FROM ordered_item WHERE collection = :c "
                "ORDER BY item_order ASC, created_at ASC, item_id ASC"
            ),
            {"c": collection},
        ).fetchall()
    return [_row_to_document(r) for r in rows]


def get_item(collection: str, item_id: str) -> Optional[Dict[str, Any]]:
    eng = get_engine()
    with eng.connect() as conn:
        row = conn.execute(
            sql_text(f"SELECT {_COLUMNS} FROM ordered_item WHERE collection = :c AND item_id = :id"),
            {"c": collection, "id": str(item_id)},
        ).fetchone()
    return _row_to_document(row) if row is not None else None


def create_item(collection: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    """Insert a document with a fresh id; the order is stored as given."""
    item_id = str(uuid.uuid4())
    order, payload = _split_payload(fields)
    ts = _now().isoformat()
    eng = get_engine()
    with eng.begin() as conn:
        conn.execute(
            sql_text(
                "INSERT INTO ordered_item (item_id, collection, item_order, payload, created_at, updated_at) "
                "VALUES (:id, :c, :ord, :payload, :ts, :ts)"
            ),
            {"id": item_id, "c": collection, "ord": order, "payload": payload, "ts": ts},
        )
    logger.info("ordered_item.created collection=%s item_id=%s order=%s", collection, item_id, order)
    return get_item(collection, item_id) or {"_id": item_id, "order": order}


def replace_item(collection: str, item_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Overwrite the payload and order of an existing document.

    Returns the stored document, or None when ``item_id`` is absent.
    """
    order, payload = _split_payload(fields)
    eng = get_engine()
    with eng.begin() as conn:
        res = conn.execute(
            sql_text(
                "UPDATE ordered_item SET item_order = :ord, payload = :payload, updated_at = :ts "
                "WHERE collection = :c AND item_id = :id"
            ),
            {"ord": order, "payload": payload, "ts": _now().isoformat(), "c": collection, "id": str(item_id)},
        )
        if res.rowcount == 0:
            return None
    return get_item(collection, item_id)


def delete_item(collection: str, item_id: str) -> bool:
    eng = get_engine()
    with eng.begin() as conn:
        res = conn.execute(
            sql_text("DELETE FROM ordered_item WHERE collection = :c AND item_id = :id"),
            {"c": collection, "id": str(item_id)},
        )
    deleted = res.rowcount > 0
    if deleted:
        logger.info("ordered_item.deleted collection=%s item_id=%s", collection, item_id)
    return deleted


def purge_collection(collection: str) -> int:
    """Remove every document of ``collection``; returns the number removed."""
    eng = get_engine()
    with eng.begin() as conn:
        res = conn.execute(sql_text("DELETE FROM ordered_item WHERE collection = :c"), {"c": collection})
    return int(res.rowcount or 0)


__all__ = [
    "list_items",
    "get_item",
    "create_item",
    "replace_item",
    "delete_item",
    "purge_collection",
]
