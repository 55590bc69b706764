"""In-memory TTL cache for API client reads.

The cache is an injected service rather than a module-level singleton:
:class:`~portfolio.logic.collection_store.HttpCollectionStore` receives one at
construction, tests pass :class:`NullCache`, and a shared backend can be
dropped in behind the same ``get/set/invalidate`` surface.
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 5 * 60.0


@dataclass
class _CacheEntry:
    data: Any
    stored_at: float
    ttl: float


class TtlCache:
    """Process-local key/value cache with per-entry expiry."""

    def __init__(self, default_ttl: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.monotonic) -> None:
        self.default_ttl = float(default_ttl)
        self._clock = clock
        self._entries: Dict[str, _CacheEntry] = {}

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None when missing or expired.

        Expired entries are evicted on read.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.stored_at > entry.ttl:
            del self._entries[key]
            return None
        return entry.data

    def set(self, key: str, data: Any, ttl: Optional[float] = None) -> None:
        self._entries[key] = _CacheEntry(
            data=data,
            stored_at=self._clock(),
            ttl=self.default_ttl if ttl is None else float(ttl),
        )

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def invalidate(self, pattern: str) -> int:
        """Drop every key fully matching ``pattern`` (``*`` matches anything).

        Returns the number of evicted entries.
        """
        regex = re.compile("^" + ".*".join(re.escape(part) for part in pattern.split("*")) + "$")
        doomed = [key for key in self._entries if regex.match(key)]
        for key in doomed:
            del self._entries[key]
        if doomed:
            logger.debug("cache_invalidate pattern=%s evicted=%s", pattern, len(doomed))
        return len(doomed)

    def stats(self) -> Dict[str, Any]:
        return {"size": len(self._entries), "entries": list(self._entries)}


class NullCache:
    """Cache that never stores anything."""

    default_ttl = 0.0

    def get(self, key: str) -> Optional[Any]:
        return None

    def set(self, key: str, data: Any, ttl: Optional[float] = None) -> None:
        return None

    def has(self, key: str) -> bool:
        return False

    def delete(self, key: str) -> None:
        return None

    def clear(self) -> None:
        return None

    def invalidate(self, pattern: str) -> int:
        return 0

    def stats(self) -> Dict[str, Any]:
        return {"size": 0, "entries": []}


def collection_name(endpoint: str) -> str:
    """``'/tech-skills'`` -> ``'tech-skills'``."""
    return endpoint.strip("/").split("/")[-1]


def all_items_key(endpoint: str) -> str:
    return f"{collection_name(endpoint)}:all"


def item_key(endpoint: str, item_id: str) -> str:
    return f"{collection_name(endpoint)}:{item_id}"


def collection_pattern(endpoint: str) -> str:
    """Pattern matching every key cached for ``endpoint``."""
    return f"{collection_name(endpoint)}:*"


__all__ = [
    "DEFAULT_TTL_SECONDS",
    "TtlCache",
    "NullCache",
    "all_items_key",
    "item_key",
    "collection_pattern",
    "collection_name",
]
