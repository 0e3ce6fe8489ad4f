from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Optional


def _env_bool(name: str, default: bool = False) -> bool:
    raw = (os.getenv(name) or "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "y", "on")


def _split_csv(raw: str) -> List[str]:
    return [x.strip() for x in (raw or "").split(",") if x.strip()]


@dataclass(frozen=True)
class GateSettings:
    # YAML gate config; when unset, config comes from WPGATE_* env vars.
    config_path: Optional[str]
    log_level: str
    # Requests under this path prefix are REST routes; the prefix is stripped before evaluation.
    rest_prefix: str


def load_gate_settings() -> GateSettings:
    """
    Load process settings from env.

    Recommended vars:
    - WPGATE_CONFIG=/etc/wpgate/gate.yaml
    - WPGATE_LOG_LEVEL=INFO
    - WPGATE_REST_PREFIX=/wp-json
    """
    level = (os.getenv("WPGATE_LOG_LEVEL") or "").strip().upper() or "INFO"
    prefix = (os.getenv("WPGATE_REST_PREFIX") or "").strip() or "/wp-json"
    if not prefix.startswith("/"):
        prefix = "/" + prefix
    return GateSettings(
        config_path=(os.getenv("WPGATE_CONFIG") or "").strip() or None,
        log_level=level,
        rest_prefix=prefix.rstrip("/") or "/wp-json",
    )
