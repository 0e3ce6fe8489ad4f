"""
FastAPI integration for the REST API gate.

`install_rest_gate` wraps an app so every request under the REST prefix is
checked before it reaches a route handler. Who the caller is comes from a
context resolver; the default one reads trusted headers set by an upstream
auth proxy.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from wpgate.config import GateSettings, _split_csv, load_gate_settings
from wpgate.core.models import GateContext
from wpgate.gates.rest_api import RestApiGate
from wpgate.providers.config_provider import build_config_provider

logger = logging.getLogger(__name__)

USER_HEADER = "x-wp-user"
CAPABILITIES_HEADER = "x-wp-capabilities"

ContextResolver = Callable[[Request], GateContext]


def context_from_headers(request: Request) -> GateContext:
    user = (request.headers.get(USER_HEADER) or "").strip()
    caps = _split_csv(request.headers.get(CAPABILITIES_HEADER) or "")
    return GateContext(logged_in=bool(user), capabilities=set(caps))


def rest_route_for(request: Request, prefix: str) -> Optional[str]:
    """
    The REST route a request targets, or None if it is not a REST request.

    Pretty permalinks (`/wp-json/wp/v2/posts`) and `?rest_route=/wp/v2/posts` both count.
    """
    path = request.url.path
    if path == prefix or path.startswith(prefix + "/"):
        return path[len(prefix):] or "/"
    route = request.query_params.get("rest_route")
    if route is not None:
        return "/" + route.lstrip("/")
    return None


def install_rest_gate(
    app: FastAPI,
    gate: RestApiGate,
    *,
    prefix: str = "/wp-json",
    context_resolver: ContextResolver = context_from_headers,
) -> None:
    prefix = "/" + prefix.strip("/")

    @app.middleware("http")
    async def _rest_gate(request: Request, call_next):  # type: ignore[no-untyped-def]
        route = rest_route_for(request, prefix)
        if route is None:
            return await call_next(request)
        rejection = gate.check(route, context_resolver(request))
        if rejection is not None:
            return JSONResponse(status_code=rejection.status, content=rejection.to_body())
        return await call_next(request)

    logger.info("REST gate installed on %s", prefix)


def install_rest_gate_from_env(app: FastAPI, settings: Optional[GateSettings] = None) -> RestApiGate:
    """Build the gate from WPGATE_* settings and install it on `app`."""
    settings = settings or load_gate_settings()
    gate = RestApiGate(build_config_provider(settings.config_path))
    install_rest_gate(app, gate, prefix=settings.rest_prefix)
    return gate
