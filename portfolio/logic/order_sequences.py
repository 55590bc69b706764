"""Order reindexing helpers for order-carrying collections.

Keeps the ``order`` field of timeline entries, tech skills, interests and
tech stack categories contiguous and 1-based. Each operation is split in two:

- a pure ``plan_*`` function that takes a snapshot (list of item dicts) and
  returns the ordered list of :class:`OrderUpdate` to issue;
- a ``reorder_*`` entry point that plans and then applies the updates against
  an :class:`~portfolio.logic.collection_store.OrderedCollectionStore` one at
  a time, in plan order.

Increment shifts are planned from the highest current order down so that an
item is never moved onto an order still held by its neighbour. Application
is best-effort: a rejected update is logged and the rest of the plan is still
issued. Nothing here retains the snapshot after returning.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Sequence

if TYPE_CHECKING:  # pragma: no cover - typing only
    from portfolio.logic.collection_store import OrderedCollectionStore

logger = logging.getLogger(__name__)

ID_FIELD = "_id"
ORDER_FIELD = "order"

Item = Mapping[str, Any]


@dataclass(frozen=True)
class OrderUpdate:
    """One planned write: ``item_id`` moves from ``old_order`` to ``new_order``.

    ``payload`` is the full item as found in the snapshot with ``order``
    replaced, ready to be sent as a full-resource update.
    """

    item_id: str
    old_order: int
    new_order: int
    payload: Dict[str, Any]


@dataclass
class OrderApplyResult:
    applied: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    def as_dict(self) -> Dict[str, List[str]]:
        return {"applied": list(self.applied), "failed": list(self.failed)}


def _order_of(item: Item) -> int:
    return int(item.get(ORDER_FIELD) or 0)


def _id_of(item: Item) -> str:
    return str(item.get(ID_FIELD))


def _update(item: Item, new_order: int) -> OrderUpdate:
    payload = dict(item)
    payload[ORDER_FIELD] = int(new_order)
    return OrderUpdate(
        item_id=_id_of(item),
        old_order=_order_of(item),
        new_order=int(new_order),
        payload=payload,
    )


def _compact(items: Sequence[Item]) -> List[OrderUpdate]:
    # sorted() is stable: ties keep snapshot order
    ranked = sorted(items, key=_order_of)
    return [
        _update(item, index + 1)
        for index, item in enumerate(ranked)
        if _order_of(item) != index + 1
    ]


def plan_insertion(items: Sequence[Item], target_order: int) -> List[OrderUpdate]:
    """Plan the shifts that free ``target_order`` for a new item.

    Every item with ``order >= target_order`` moves up by one, highest first.
    ``target_order`` below 1 is treated as 1.
    """
    target = max(1, int(target_order))
    to_shift = sorted(
        (item for item in items if _order_of(item) >= target),
        key=_order_of,
        reverse=True,
    )
    return [_update(item, _order_of(item) + 1) for item in to_shift]


def plan_deletion(items: Sequence[Item], deleted_order: int) -> List[OrderUpdate]:
    """Plan the compaction of the items left after removing ``deleted_order``.

    Remaining items are renumbered ``1..N-1`` ascending; items already in
    place are skipped.
    """
    remaining = [item for item in items if _order_of(item) != int(deleted_order)]
    return _compact(remaining)


def plan_move(items: Sequence[Item], item_id: str, new_order: int) -> List[OrderUpdate]:
    """Plan the displacement of neighbours when ``item_id`` moves to ``new_order``.

    The moved item itself is not part of the plan; the caller writes it.
    Returns an empty plan when the item is absent or already at ``new_order``.
    ``new_order`` is not clamped.
    """
    current = next((item for item in items if _id_of(item) == str(item_id)), None)
    if current is None:
        return []
    old_order = _order_of(current)
    new_order = int(new_order)
    if new_order == old_order:
        return []

    others = [item for item in items if _id_of(item) != str(item_id)]
    if new_order > old_order:
        # Moving down: the range (old, new] slides one slot towards the gap
        to_shift = [item for item in others if old_order < _order_of(item) <= new_order]
        step = -1
    else:
        # Moving up: the range [new, old) slides one slot away from the target
        to_shift = [item for item in others if new_order <= _order_of(item) < old_order]
        step = 1
    to_shift.sort(key=_order_of, reverse=True)
    return [_update(item, _order_of(item) + step) for item in to_shift]


def plan_repair(items: Sequence[Item]) -> List[OrderUpdate]:
    """Plan a full renumbering to ``1..N`` by current order (stable on ties)."""
    return _compact(items)


def apply_order_updates(
    store: "OrderedCollectionStore",
    endpoint: str,
    updates: Sequence[OrderUpdate],
    token: Optional[str],
) -> OrderApplyResult:
    """Issue ``updates`` sequentially through ``store.replace``.

    A failed update is recorded and logged; the remaining updates are still
    issued. There is no rollback.
    """
    result = OrderApplyResult()
    for upd in updates:
        try:
            ok = store.replace(endpoint, upd.item_id, upd.payload, token)
        except Exception:
            logger.error(
                "order_update_failed endpoint=%s item_id=%s order=%s->%s",
                endpoint,
                upd.item_id,
                upd.old_order,
                upd.new_order,
                exc_info=True,
            )
            ok = False
        if ok:
            result.applied.append(upd.item_id)
        else:
            result.failed.append(upd.item_id)
    if updates:
        logger.info(
            "order_updates_applied endpoint=%s planned=%s applied=%s failed=%s",
            endpoint,
            len(updates),
            len(result.applied),
            result.failed,
        )
    return result


def reorder_for_insertion(
    items: Sequence[Item],
    target_order: int,
    store: "OrderedCollectionStore",
    endpoint: str,
    token: Optional[str],
) -> OrderApplyResult:
    """Shift existing items so a new item can be created at ``target_order``."""
    return apply_order_updates(store, endpoint, plan_insertion(items, target_order), token)


def reorder_for_deletion(
    items: Sequence[Item],
    deleted_order: int,
    store: "OrderedCollectionStore",
    endpoint: str,
    token: Optional[str],
) -> OrderApplyResult:
    """Close the gap left by the item at ``deleted_order``."""
    return apply_order_updates(store, endpoint, plan_deletion(items, deleted_order), token)


def reorder_for_update(
    items: Sequence[Item],
    item_id: str,
    new_order: int,
    store: "OrderedCollectionStore",
    endpoint: str,
    token: Optional[str],
) -> OrderApplyResult:
    """Displace neighbours so ``item_id`` can be written at ``new_order``."""
    return apply_order_updates(store, endpoint, plan_move(items, item_id, new_order), token)


def reorder_all_contiguously(
    items: Sequence[Item],
    store: "OrderedCollectionStore",
    endpoint: str,
    token: Optional[str],
) -> OrderApplyResult:
    """Renumber the whole collection to ``1..N``."""
    return apply_order_updates(store, endpoint, plan_repair(items), token)


__all__ = [
    "ID_FIELD",
    "ORDER_FIELD",
    "OrderUpdate",
    "OrderApplyResult",
    "plan_insertion",
    "plan_deletion",
    "plan_move",
    "plan_repair",
    "apply_order_updates",
    "reorder_for_insertion",
    "reorder_for_deletion",
    "reorder_for_update",
    "reorder_all_contiguously",
]
