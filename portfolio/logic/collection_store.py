"""Ordered collection store adapters.

The reordering helpers only need ``replace``; the admin flows also fetch,
create and delete. Two adapters implement the same surface:

- :class:`HttpCollectionStore` talks to the REST API over an injected
  ``httpx.Client`` and caches reads through an injected cache.
- :class:`RepositoryCollectionStore` calls the SQL repository in-process; the
  server-side repair endpoint uses it.

``replace`` reports failure by returning False (after logging the item id and
response body); the other operations raise :class:`CollectionStoreError`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Protocol

import httpx

from portfolio.logic import repository_items
from portfolio.logic.cache import (
    NullCache,
    TtlCache,
    all_items_key,
    collection_name,
    collection_pattern,
    item_key,
)

if TYPE_CHECKING:
    from portfolio.config import AppConfig

logger = logging.getLogger(__name__)


class CollectionStoreError(RuntimeError):
    """A store call failed; carries the HTTP status when there was one."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class OrderedCollectionStore(Protocol):
    def fetch_all(self, endpoint: str, token: Optional[str] = None) -> List[Dict[str, Any]]: ...

    def fetch_one(self, endpoint: str, item_id: str, token: Optional[str] = None) -> Optional[Dict[str, Any]]: ...

    def create(self, endpoint: str, payload: Dict[str, Any], token: Optional[str]) -> Dict[str, Any]: ...

    def replace(self, endpoint: str, item_id: str, payload: Dict[str, Any], token: Optional[str]) -> bool: ...

    def delete(self, endpoint: str, item_id: str, token: Optional[str]) -> bool: ...


def _auth_headers(token: Optional[str]) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"} if token else {}


def _sorted(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return sorted(items, key=lambda it: int(it.get("order") or 0))


class HttpCollectionStore:
    """REST adapter for ``{base_url}{endpoint}[/{id}]`` resources.

    ``base_url`` may be empty when ``client`` already carries a base URL
    (e.g. a ``TestClient``). Pass ``NullCache()`` to disable read caching.
    """

    def __init__(
        self,
        base_url: str = "",
        *,
        client: Optional[httpx.Client] = None,
        cache: TtlCache | NullCache | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self.client = client or httpx.Client(timeout=timeout)
        self.cache = cache if cache is not None else TtlCache()

    @classmethod
    def from_config(cls, cfg: "AppConfig", *, client: Optional[httpx.Client] = None) -> "HttpCollectionStore":
        """Build a store for ``cfg.api.base_url`` caching reads for ``cfg.cache.ttl_seconds``."""
        return cls(cfg.api.base_url, client=client, cache=TtlCache(cfg.cache.ttl_seconds))

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "HttpCollectionStore":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _url(self, endpoint: str, item_id: Optional[str] = None) -> str:
        path = f"{self.base_url}/{endpoint.strip('/')}"
        return f"{path}/{item_id}" if item_id is not None else path

    def _request(self, method: str, url: str, token: Optional[str], **kwargs: Any) -> httpx.Response:
        headers = {**_auth_headers(token), **kwargs.pop("headers", {})}
        try:
            return self.client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise CollectionStoreError(f"{method} {url} failed: {e}") from e

    def fetch_all(self, endpoint: str, token: Optional[str] = None) -> List[Dict[str, Any]]:
        key = all_items_key(endpoint)
        cached = self.cache.get(key)
        if cached is not None:
            return [dict(it) for it in cached]
        resp = self._request("GET", self._url(endpoint), token)
        if resp.status_code != 200:
            raise CollectionStoreError(
                f"Failed to fetch {collection_name(endpoint)}: {resp.status_code} - {resp.text}",
                resp.status_code,
            )
        items = _sorted(list(resp.json()))
        self.cache.set(key, items)
        return [dict(it) for it in items]

    def fetch_one(self, endpoint: str, item_id: str, token: Optional[str] = None) -> Optional[Dict[str, Any]]:
        key = item_key(endpoint, item_id)
        cached = self.cache.get(key)
        if cached is not None:
            return dict(cached)
        resp = self._request("GET", self._url(endpoint, item_id), token)
        if resp.status_code == 404:
            return None
        if resp.status_code != 200:
            raise CollectionStoreError(
                f"Failed to fetch {collection_name(endpoint)} item {item_id}: {resp.status_code} - {resp.text}",
                resp.status_code,
            )
        item = resp.json()
        self.cache.set(key, item)
        return dict(item)

    def create(self, endpoint: str, payload: Dict[str, Any], token: Optional[str]) -> Dict[str, Any]:
        resp = self._request("POST", self._url(endpoint), token, json=payload)
        self.cache.invalidate(collection_pattern(endpoint))
        if resp.status_code not in (200, 201):
            raise CollectionStoreError(
                f"Failed to create {collection_name(endpoint)} item: {resp.status_code} - {resp.text}",
                resp.status_code,
            )
        return resp.json()

    def replace(self, endpoint: str, item_id: str, payload: Dict[str, Any], token: Optional[str]) -> bool:
        try:
            resp = self._request("PUT", self._url(endpoint, item_id), token, json=payload)
        except CollectionStoreError:
            logger.error("Failed to update order for item %s: transport error", item_id, exc_info=True)
            return False
        finally:
            self.cache.invalidate(collection_pattern(endpoint))
        if not resp.is_success:
            logger.error("Failed to update order for item %s: %s", item_id, resp.text)
            return False
        return True

    def delete(self, endpoint: str, item_id: str, token: Optional[str]) -> bool:
        resp = self._request("DELETE", self._url(endpoint, item_id), token)
        self.cache.invalidate(collection_pattern(endpoint))
        if resp.status_code == 404:
            return False
        if not resp.is_success:
            raise CollectionStoreError(
                f"Failed to delete {collection_name(endpoint)} item: {resp.status_code} - {resp.text}",
                resp.status_code,
            )
        return True


class RepositoryCollectionStore:
    """In-process adapter over :mod:`portfolio.logic.repository_items`.

    Tokens are accepted for interface parity and ignored; authorization
    happens at the HTTP edge.
    """

    def fetch_all(self, endpoint: str, token: Optional[str] = None) -> List[Dict[str, Any]]:
        return repository_items.list_items(collection_name(endpoint))

    def fetch_one(self, endpoint: str, item_id: str, token: Optional[str] = None) -> Optional[Dict[str, Any]]:
        return repository_items.get_item(collection_name(endpoint), item_id)

    def create(self, endpoint: str, payload: Dict[str, Any], token: Optional[str]) -> Dict[str, Any]:
        return repository_items.create_item(collection_name(endpoint), payload)

    def replace(self, endpoint: str, item_id: str, payload: Dict[str, Any], token: Optional[str]) -> bool:
        try:
            stored = repository_items.replace_item(collection_name(endpoint), item_id, payload)
        except Exception:
            logger.error("Failed to update order for item %s", item_id, exc_info=True)
            return False
        if stored is None:
            logger.error("Failed to update order for item %s: not found", item_id)
            return False
        return True

    def delete(self, endpoint: str, item_id: str, token: Optional[str]) -> bool:
        return repository_items.delete_item(collection_name(endpoint), item_id)


__all__ = [
    "CollectionStoreError",
    "OrderedCollectionStore",
    "HttpCollectionStore",
    "RepositoryCollectionStore",
]
