"""Admin management flows for order-carrying collections.

Drives the reordering helpers the same way the admin dashboard does: take a
fresh snapshot, shift neighbours, write the item itself, re-fetch, then run a
repair pass as a safety net. Every method returns the authoritative snapshot
fetched at the end of the flow.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from portfolio.logic.collection_store import OrderedCollectionStore
from portfolio.logic.order_sequences import (
    ID_FIELD,
    ORDER_FIELD,
    reorder_all_contiguously,
    reorder_for_deletion,
    reorder_for_insertion,
    reorder_for_update,
)

logger = logging.getLogger(__name__)


class CollectionManager:
    """One admin session over one collection endpoint (e.g. ``/timeline``)."""

    def __init__(self, store: OrderedCollectionStore, endpoint: str, token: Optional[str]) -> None:
        self.store = store
        self.endpoint = endpoint
        self.token = token

    def list(self) -> List[Dict[str, Any]]:
        return self.store.fetch_all(self.endpoint, self.token)

    def _find(self, items: List[Dict[str, Any]], item_id: str) -> Optional[Dict[str, Any]]:
        return next((it for it in items if str(it.get(ID_FIELD)) == str(item_id)), None)

    def _repaired(self) -> List[Dict[str, Any]]:
        refreshed = self.list()
        if not refreshed:
            return refreshed
        result = reorder_all_contiguously(refreshed, self.store, self.endpoint, self.token)
        if not result.applied and not result.failed:
            return refreshed
        return self.list()

    def create(self, payload: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Insert ``payload`` at its ``order``; non-positive orders append."""
        items = self.list()
        requested = int(payload.get(ORDER_FIELD) or 0)
        target = requested if requested >= 1 else len(items) + 1
        reorder_for_insertion(items, target, self.store, self.endpoint, self.token)
        created = self.store.create(self.endpoint, {**payload, ORDER_FIELD: target}, self.token)
        logger.info(
            "collection.create endpoint=%s item_id=%s order=%s",
            self.endpoint,
            created.get(ID_FIELD),
            target,
        )
        return self._repaired()

    def update(self, item_id: str, payload: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Write ``payload`` over ``item_id``, moving it when ``order`` changes.

        Unknown ids leave the collection untouched.
        """
        items = self.list()
        current = self._find(items, item_id)
        if current is None:
            logger.info("collection.update.missing endpoint=%s item_id=%s", self.endpoint, item_id)
            return items
        merged = {**current, **payload}
        if payload.get(ORDER_FIELD) is None:
            merged[ORDER_FIELD] = current.get(ORDER_FIELD)
        else:
            reorder_for_update(items, item_id, int(payload[ORDER_FIELD]), self.store, self.endpoint, self.token)
        if not self.store.replace(self.endpoint, str(item_id), merged, self.token):
            logger.error("collection.update.failed endpoint=%s item_id=%s", self.endpoint, item_id)
        return self._repaired()

    def delete(self, item_id: str) -> List[Dict[str, Any]]:
        """Compact the neighbours of ``item_id``, delete it, then repair."""
        items = self.list()
        current = self._find(items, item_id)
        if current is None:
            logger.info("collection.delete.missing endpoint=%s item_id=%s", self.endpoint, item_id)
            return items
        reorder_for_deletion(items, int(current.get(ORDER_FIELD) or 0), self.store, self.endpoint, self.token)
        self.store.delete(self.endpoint, str(item_id), self.token)
        return self._repaired()

    def repair(self) -> List[Dict[str, Any]]:
        return self._repaired()


__all__ = ["CollectionManager"]
