"""Functional tests for the admin collection flows.

Drives :class:`CollectionManager` through :class:`HttpCollectionStore` wired
to the in-process app, so every shift is a real authorized PUT against the
API and every assertion reads back the stored state.
"""

from __future__ import annotations

from typing import Dict, List

import httpx
import pytest

from portfolio.logic.admin_flows import CollectionManager
from portfolio.logic.cache import NullCache, TtlCache
from portfolio.logic.collection_store import (
    CollectionStoreError,
    HttpCollectionStore,
    RepositoryCollectionStore,
)

ENDPOINT = "/tech-skills"


@pytest.fixture()
def store(client) -> HttpCollectionStore:
    return HttpCollectionStore("/api", client=client, cache=NullCache())


@pytest.fixture()
def manager(store, admin_token) -> CollectionManager:
    return CollectionManager(store, ENDPOINT, admin_token)


def _names(items: List[Dict]) -> List[str]:
    return [it["name"] for it in items]


def _orders(items: List[Dict]) -> List[int]:
    return [it["order"] for it in items]


def _seed(manager: CollectionManager, names: List[str]) -> List[Dict]:
    items: List[Dict] = []
    for name in names:
        items = manager.create({"name": name, "level": 70, "order": 0})
    return items


def test_create_appends_when_order_not_positive(manager) -> None:
    items = _seed(manager, ["Python", "Go", "Rust"])
    assert _names(items) == ["Python", "Go", "Rust"]
    assert _orders(items) == [1, 2, 3]


def test_create_inserts_at_requested_order(manager) -> None:
    _seed(manager, ["Python", "Go", "Rust", "SQL"])
    items = manager.create({"name": "TypeScript", "level": 60, "order": 2})
    assert _names(items) == ["Python", "TypeScript", "Go", "Rust", "SQL"]
    assert _orders(items) == [1, 2, 3, 4, 5]


def test_create_far_beyond_end_is_repaired_to_tail(manager) -> None:
    _seed(manager, ["Python", "Go"])
    items = manager.create({"name": "Rust", "level": 50, "order": 40})
    assert _names(items) == ["Python", "Go", "Rust"]
    assert _orders(items) == [1, 2, 3]


def test_update_moves_item_down_and_up(manager) -> None:
    items = _seed(manager, ["A", "B", "C", "D", "E"])
    b_id = items[1]["_id"]

    items = manager.update(b_id, {"order": 5})
    assert _names(items) == ["A", "C", "D", "E", "B"]
    assert _orders(items) == [1, 2, 3, 4, 5]

    items = manager.update(b_id, {"order": 2, "level": 95})
    assert _names(items) == ["A", "B", "C", "D", "E"]
    assert items[1]["level"] == 95


def test_update_without_order_change_keeps_sequence(manager) -> None:
    items = _seed(manager, ["A", "B", "C"])
    items = manager.update(items[2]["_id"], {"category": "backend"})
    assert _names(items) == ["A", "B", "C"]
    assert items[2]["category"] == "backend"


def test_update_unknown_item_is_noop(manager) -> None:
    before = _seed(manager, ["A", "B"])
    after = manager.update("missing", {"order": 1})
    assert after == before


def test_delete_compacts_remaining_items(manager) -> None:
    items = _seed(manager, ["A", "B", "C", "D"])
    items = manager.delete(items[1]["_id"])
    assert _names(items) == ["A", "C", "D"]
    assert _orders(items) == [1, 2, 3]


def test_delete_unknown_item_is_noop(manager) -> None:
    before = _seed(manager, ["A"])
    assert manager.delete("missing") == before


def test_repair_fixes_external_corruption(manager, client, auth_headers) -> None:
    for order, name in [(4, "A"), (4, "B"), (9, "C")]:
        resp = client.post("/api/tech-skills", json={"name": name, "level": 10, "order": order}, headers=auth_headers)
        assert resp.status_code == 201
    items = manager.repair()
    assert _names(items) == ["A", "B", "C"]
    assert _orders(items) == [1, 2, 3]


def test_replace_failure_is_logged_not_raised(client, caplog: pytest.LogCaptureFixture) -> None:
    store = HttpCollectionStore("/api", client=client, cache=NullCache())
    with caplog.at_level("ERROR", logger="portfolio.logic.collection_store"):
        ok = store.replace(ENDPOINT, "some-id", {"name": "x", "order": 1}, "not-a-valid-token")
    assert ok is False
    assert "some-id" in caplog.text
    assert "Invalid or expired token" in caplog.text


def test_fetch_failure_raises_store_error(client) -> None:
    store = HttpCollectionStore("/api", client=client, cache=NullCache())
    with pytest.raises(CollectionStoreError) as exc_info:
        store.fetch_all(ENDPOINT, token=None)
    assert exc_info.value.status_code == 401
    assert "Failed to fetch tech-skills: 401" in str(exc_info.value)


def test_transport_error_on_replace_returns_false() -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with httpx.Client(transport=httpx.MockTransport(refuse), base_url="http://api.invalid") as raw:
        store = HttpCollectionStore("/api", client=raw, cache=NullCache())
        assert store.replace(ENDPOINT, "x", {"order": 1}, "t") is False
        with pytest.raises(CollectionStoreError):
            store.fetch_all(ENDPOINT, "t")


def test_reads_are_cached_until_a_mutation(client, admin_token) -> None:
    calls: List[str] = []

    def on_request(request: httpx.Request) -> None:
        calls.append(f"{request.method} {request.url.path}")

    client.event_hooks["request"].append(on_request)
    try:
        store = HttpCollectionStore("/api", client=client, cache=TtlCache())
        manager = CollectionManager(store, ENDPOINT, admin_token)

        store.fetch_all(ENDPOINT, admin_token)
        store.fetch_all(ENDPOINT, admin_token)
        assert calls.count("GET /api/tech-skills") == 1

        manager.create({"name": "Python", "level": 90, "order": 1})
        assert store.cache.stats()["size"] == 1
        assert [it["name"] for it in store.fetch_all(ENDPOINT, admin_token)] == ["Python"]
    finally:
        client.event_hooks["request"].remove(on_request)


def test_repository_store_matches_http_store(manager) -> None:
    items = _seed(manager, ["A", "B"])
    repo = RepositoryCollectionStore()
    assert repo.fetch_all(ENDPOINT) == items
    assert repo.fetch_one(ENDPOINT, items[0]["_id"]) == items[0]
    assert repo.replace(ENDPOINT, "missing", {"order": 1}, None) is False


def test_update_with_null_order_keeps_slot(manager) -> None:
    items = _seed(manager, ["A", "B", "C"])
    items = manager.update(items[1]["_id"], {"order": None, "level": 40})
    assert _names(items) == ["A", "B", "C"]
    assert _orders(items) == [1, 2, 3]
    assert items[1]["level"] == 40


def test_delete_repairs_colliding_neighbour(manager, client, auth_headers) -> None:
    for order, name in [(1, "A"), (2, "B"), (2, "C"), (3, "D")]:
        resp = client.post("/api/tech-skills", json={"name": name, "level": 10, "order": order}, headers=auth_headers)
        assert resp.status_code == 201
    b_id = next(it["_id"] for it in manager.list() if it["name"] == "B")

    items = manager.delete(b_id)

    assert sorted(_names(items)) == ["A", "C", "D"]
    assert _orders(items) == [1, 2, 3]


def test_store_from_config_uses_api_base_url_and_cache_ttl(client, admin_token, monkeypatch) -> None:
    from portfolio.config import load_config

    monkeypatch.setenv("PORTFOLIO_API_BASE_URL", "http://testserver")
    monkeypatch.setenv("CACHE_TTL_SECONDS", "42")
    store = HttpCollectionStore.from_config(load_config(), client=client)

    assert store.base_url == "http://testserver/api"
    assert isinstance(store.cache, TtlCache)
    assert store.cache.default_ttl == 42
    CollectionManager(store, ENDPOINT, admin_token).create({"name": "Python", "level": 90, "order": 1})
    assert [it["name"] for it in store.fetch_all(ENDPOINT, admin_token)] == ["Python"]
