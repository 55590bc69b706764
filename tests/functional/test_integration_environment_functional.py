"""Functional tests for the behave environment hooks.

Loads ``tests/integration/features/environment.py`` by path and drives its
live-mode scenario reset against the in-process client.
"""

from __future__ import annotations

import importlib.util
import pathlib
from types import SimpleNamespace

ENVIRONMENT_FILE = pathlib.Path(__file__).resolve().parents[1] / "integration" / "features" / "environment.py"


def _load_environment():
    spec = importlib.util.spec_from_file_location("behave_environment", ENVIRONMENT_FILE)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_live_scenarios_start_from_empty_collections(client, admin_token, auth_headers) -> None:
    for order, role in [(1, "Engineer"), (2, "Lead")]:
        resp = client.post(
            "/api/timeline",
            json={"year": "2020", "role": role, "company": "Acme", "description": "", "order": order},
            headers=auth_headers,
        )
        assert resp.status_code == 201
    resp = client.post("/api/interests", json={"icon": "chess", "label": "Chess", "order": 1}, headers=auth_headers)
    assert resp.status_code == 201

    environment = _load_environment()
    context = SimpleNamespace(live=True, http=client, token=admin_token)
    environment.before_scenario(context, scenario=None)
    environment.before_scenario(context, scenario=None)

    assert context.ids == {}
    for name in environment.LIVE_COLLECTIONS:
        assert client.get(f"/api/{name}", headers=auth_headers).json() == []
