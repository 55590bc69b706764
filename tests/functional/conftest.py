from __future__ import annotations

"""Functional test bootstrap.

Points the app at a file-backed SQLite database under ``tmp/`` before any
application import, creates the schema once per session and empties every
collection between tests. Fixtures hand out an in-process ``TestClient`` and
a valid admin bearer token.
"""

import os
import pathlib
from typing import Dict, Iterator

import pytest

_ROOT = pathlib.Path(__file__).resolve().parents[2]
_DB_FILE = _ROOT / "tmp" / "functional_tests.db"
_DB_FILE.parent.mkdir(parents=True, exist_ok=True)
if _DB_FILE.exists():
    _DB_FILE.unlink()

os.environ["TEST_DATABASE_URL"] = f"sqlite:///{_DB_FILE}"
os.environ["DATABASE_URL"] = os.environ["TEST_DATABASE_URL"]
os.environ["AUTH_SECRET"] = "functional-test-secret"
os.environ["ADMIN_USERNAME"] = "admin"
os.environ["ADMIN_PASSWORD"] = "s3cret-pass"

ADMIN_CREDENTIALS = {"username": "admin", "password": "s3cret-pass"}


@pytest.fixture(scope="session")
def app():
    from portfolio.main import create_app

    return create_app()


@pytest.fixture()
def client(app) -> Iterator:
    from fastapi.testclient import TestClient

    with TestClient(app) as c:
        yield c


@pytest.fixture(autouse=True)
def clean_collections(app) -> Iterator[None]:
    """Empty every collection before each test."""
    from portfolio.logic.repository_items import purge_collection
    from portfolio.models.collections import COLLECTION_MODELS

    for name in COLLECTION_MODELS:
        purge_collection(name)
    yield


@pytest.fixture()
def admin_token(client) -> str:
    resp = client.post("/api/auth/login", json=ADMIN_CREDENTIALS)
    assert resp.status_code == 200, resp.text
    return resp.json()["token"]


@pytest.fixture()
def auth_headers(admin_token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {admin_token}"}
