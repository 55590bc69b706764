"""Behave environment hooks for the reordering integration features.

Boots the FastAPI app in-process against a throwaway SQLite file (or the
database named by ``TEST_DATABASE_URL``), logs in once as the configured
admin and hands each scenario a fresh ``TestClient`` plus a clean set of
collections. Set ``TEST_BASE_URL`` to run the same steps against a live API
instead; each live scenario then starts by deleting every item through the
API, so point it at a disposable database.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any

import httpx

_TMP_DIR = Path(tempfile.mkdtemp(prefix="portfolio-behave-"))
os.environ.setdefault("TEST_DATABASE_URL", f"sqlite:///{_TMP_DIR / 'integration.db'}")
os.environ.setdefault("AUTH_SECRET", "integration-secret")
os.environ.setdefault("ADMIN_USERNAME", "admin")
os.environ.setdefault("ADMIN_PASSWORD", "admin-pass")


def before_all(context: Any) -> None:
    base_url = os.getenv("TEST_BASE_URL", "").strip().rstrip("/")
    context.live = bool(base_url)
    if context.live:
        context.http = httpx.Client(base_url=base_url, timeout=10.0)
    else:
        from fastapi.testclient import TestClient

        from portfolio.main import create_app

        context.app = create_app()
        context.http = TestClient(context.app)
    resp = context.http.post(
        "/api/auth/login",
        json={"username": os.environ["ADMIN_USERNAME"], "password": os.environ["ADMIN_PASSWORD"]},
    )
    assert resp.status_code == 200, f"admin login failed: {resp.status_code} {resp.text}"
    context.token = resp.json()["token"]


LIVE_COLLECTIONS = ("timeline", "tech-skills", "interests", "tech-stack-categories")


def _clear_live_collections(context: Any) -> None:
    headers = {"Authorization": f"Bearer {context.token}"}
    for name in LIVE_COLLECTIONS:
        resp = context.http.get(f"/api/{name}", headers=headers)
        assert resp.status_code == 200, f"listing {name} failed: {resp.status_code} {resp.text}"
        for item in resp.json():
            deleted = context.http.delete(f"/api/{name}/{item['_id']}", headers=headers)
            assert deleted.status_code in (204, 404), f"clearing {name} failed: {deleted.status_code}"


def before_scenario(context: Any, scenario: Any) -> None:
    context.ids = {}
    if context.live:
        _clear_live_collections(context)
        return
    from portfolio.logic.repository_items import purge_collection
    from portfolio.models.collections import COLLECTION_MODELS

    for name in COLLECTION_MODELS:
        purge_collection(name)


def after_all(context: Any) -> None:
    http = getattr(context, "http", None)
    if http is not None:
        http.close()
