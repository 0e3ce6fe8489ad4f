from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import FastAPI
from fastapi.testclient import TestClient


def _client(domains: Optional[Dict[str, Any]] = None, **kwargs: Any) -> TestClient:
    from wpgate.api.middleware import install_rest_gate
    from wpgate.gates.rest_api import RestApiGate
    from wpgate.providers.config_provider import StaticConfigProvider

    app = FastAPI()

    @app.get("/wp-json/wp/v2/posts")
    def _posts() -> Dict[str, Any]:
        return {"posts": []}

    @app.get("/wp-json/wp/v2/users")
    def _users() -> Dict[str, Any]:
        return {"users": []}

    @app.get("/")
    def _index() -> Dict[str, Any]:
        return {"ok": True}

    @app.get("/healthz")
    def _health() -> Dict[str, Any]:
        return {"ok": True}

    gate = RestApiGate(StaticConfigProvider.from_mapping({"domains": domains or {}}))
    install_rest_gate(app, gate, **kwargs)
    return TestClient(app)


def test_anonymous_request_is_rejected_with_401() -> None:
    r = _client().get("/wp-json/wp/v2/posts")
    assert r.status_code == 401
    assert r.json() == {
        "code": "rest_unauthorized",
        "message": "REST API access is restricted.",
        "data": {"status": 401},
    }


def test_logged_in_without_capability_is_rejected_with_403() -> None:
    r = _client().get("/wp-json/wp/v2/posts", headers={"X-WP-User": "alice", "X-WP-Capabilities": "read"})
    assert r.status_code == 403


def test_editor_passes_through() -> None:
    r = _client().get("/wp-json/wp/v2/users", headers={"X-WP-User": "ed", "X-WP-Capabilities": "read, edit_posts"})
    assert r.status_code == 200
    assert r.json() == {"users": []}


def test_allowed_namespace_passes_but_users_blocked() -> None:
    client = _client({"rest-routes": {"allow": ["wp/v2"]}})
    assert client.get("/wp-json/wp/v2/posts").status_code == 200
    assert client.get("/wp-json/wp/v2/users").status_code == 401


def test_non_rest_paths_are_not_gated() -> None:
    assert _client().get("/healthz").status_code == 200


def test_rest_route_query_parameter_is_gated() -> None:
    client = _client()
    assert client.get("/", params={"rest_route": "/wp/v2/posts"}).status_code == 401
    assert client.get("/").status_code == 200


def test_custom_prefix_and_context_resolver() -> None:
    from wpgate.core.models import GateContext

    client = _client(prefix="api/", context_resolver=lambda _req: GateContext(capabilities={"edit_posts"}))
    # Routes live under /wp-json, so with the /api prefix they are not REST requests at all.
    assert client.get("/wp-json/wp/v2/users").status_code == 200


def test_install_from_env_uses_prefix_and_config(tmp_path, monkeypatch) -> None:  # type: ignore[no-untyped-def]
    from wpgate.api.middleware import install_rest_gate_from_env

    cfg = tmp_path / "gate.yaml"
    cfg.write_text("domains:\n  rest-routes:\n    allow: [my-plugin/v1]\n")
    monkeypatch.setenv("WPGATE_CONFIG", str(cfg))
    monkeypatch.setenv("WPGATE_REST_PREFIX", "/api/")

    app = FastAPI()

    @app.get("/api/my-plugin/v1/items")
    def _items() -> Dict[str, Any]:
        return {"items": []}

    @app.get("/api/wp/v2/posts")
    def _posts() -> Dict[str, Any]:
        return {"posts": []}

    install_rest_gate_from_env(app)
    client = TestClient(app)
    assert client.get("/api/my-plugin/v1/items").status_code == 200
    assert client.get("/api/wp/v2/posts").status_code == 401
