"""
Gate configuration: which resources each domain explicitly permits or blocks.

Configuration is layered. Built-in defaults come first; every contribution
(YAML file, env vars, programmatic dicts) is unioned on top of them unless it
sets `replace_defaults`. The provider hands the evaluator and differ one
already-merged set per domain.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field

from wpgate.authz.differ import group_identifiers
from wpgate.config import _env_bool, _split_csv
from wpgate.core import domains as d
from wpgate.core.domains import get_domain_spec
from wpgate.core.models import Category, GateContext, ResourceId, merge_grouped, merge_identifiers

logger = logging.getLogger(__name__)

DEFAULT_FORBIDDEN_ROUTES = ["/wp/v2/users"]  # user enumeration
DEFAULT_REST_OVERRIDE_CAPABILITIES = ["edit_posts"]  # block editor needs the full API
DEFAULT_ALLOWED_BLOCK_TYPES = [
    "core/embed",
    "core/heading",
    "core/image",
    "core/list",
    "core/list-item",
    "core/paragraph",
]
DEFAULT_DASHBOARD_REDIRECT_URL = "edit.php"

AllowConfig = Union[List[str], Dict[str, List[str]]]


class DomainConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    allow: AllowConfig = Field(default_factory=list)
    deny: List[str] = Field(default_factory=list)
    # Holding any of these capabilities bypasses allow and deny evaluation.
    override_capabilities: List[str] = Field(default_factory=list)
    replace_defaults: bool = False


class GateConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    domains: Dict[str, DomainConfig] = Field(default_factory=dict)
    dashboard_redirect_url: Optional[str] = None


def default_gate_config() -> GateConfig:
    return GateConfig(
        domains={
            d.REST_ROUTES: DomainConfig(
                deny=list(DEFAULT_FORBIDDEN_ROUTES),
                override_capabilities=list(DEFAULT_REST_OVERRIDE_CAPABILITIES),
            ),
            d.BLOCK_TYPES: DomainConfig(allow=list(DEFAULT_ALLOWED_BLOCK_TYPES)),
        },
        dashboard_redirect_url=DEFAULT_DASHBOARD_REDIRECT_URL,
    )


def _merge_allow(base: AllowConfig, extra: AllowConfig) -> AllowConfig:
    if isinstance(base, dict) or isinstance(extra, dict):
        b = base if isinstance(base, dict) else group_identifiers(base)
        e = extra if isinstance(extra, dict) else group_identifiers(extra)
        return {k: list(v) for k, v in merge_grouped(b, e).items()}
    return list(merge_identifiers(base, extra))


def merge_gate_configs(*configs: Optional[GateConfig]) -> GateConfig:
    """Layer configs left to right: unions per domain, last non-empty redirect URL wins."""
    out = GateConfig()
    for cfg in configs:
        if cfg is None:
            continue
        for name, dc in cfg.domains.items():
            cur = out.domains.get(name)
            if cur is None or dc.replace_defaults:
                out.domains[name] = dc.model_copy(update={"replace_defaults": False})
                continue
            out.domains[name] = DomainConfig(
                allow=_merge_allow(cur.allow, dc.allow),
                deny=list(merge_identifiers(cur.deny, dc.deny)),
                override_capabilities=list(merge_identifiers(cur.override_capabilities, dc.override_capabilities)),
            )
        if cfg.dashboard_redirect_url:
            out.dashboard_redirect_url = cfg.dashboard_redirect_url
    return out


def load_gate_config(path: Union[str, Path], *, with_defaults: bool = True) -> GateConfig:
    """
    Load a YAML gate config file.

    Example:
        domains:
          rest-routes:
            allow: [wp/v2, my-plugin/v1]
            deny: [/wp/v2/settings]
          block-styles:
            allow: ["core/button:outline"]
          block-variations:
            allow:
              core/embed: [youtube, vimeo]
    """
    with open(path) as f:
        raw = yaml.safe_load(f) or {}
    cfg = GateConfig.model_validate(raw)
    unknown = [name for name in cfg.domains if name not in d.DOMAIN_SPECS]
    if unknown:
        # Kept in the config so the provider can surface UnknownDomainError on use.
        logger.warning("Gate config %s names unknown domains: %s", path, ", ".join(sorted(unknown)))
    return merge_gate_configs(default_gate_config(), cfg) if with_defaults else cfg


def _env_key(domain: str) -> str:
    return "WPGATE_" + domain.upper().replace("-", "_")


def load_gate_config_from_env(*, with_defaults: bool = True) -> GateConfig:
    """
    Load gate config from env (ConfigMap/Secret friendly).

    Per domain (dashes become underscores):
    - WPGATE_REST_ROUTES_ALLOW=wp/v2,my-plugin/v1
    - WPGATE_REST_ROUTES_DENY=/wp/v2/settings
    - WPGATE_REST_ROUTES_OVERRIDE=edit_posts
    - WPGATE_REST_ROUTES_REPLACE_DEFAULTS=0
    - WPGATE_BLOCK_VARIATIONS_ALLOW=core/embed:youtube,core/embed:vimeo
    - WPGATE_DASHBOARD_REDIRECT_URL=edit.php
    """
    domains: Dict[str, DomainConfig] = {}
    for name, spec in d.DOMAIN_SPECS.items():
        key = _env_key(name)
        allow = _split_csv(os.getenv(f"{key}_ALLOW", ""))
        deny = _split_csv(os.getenv(f"{key}_DENY", ""))
        override = _split_csv(os.getenv(f"{key}_OVERRIDE", ""))
        replace = _env_bool(f"{key}_REPLACE_DEFAULTS", False)
        if not (allow or deny or override or replace):
            continue
        domains[name] = DomainConfig(
            allow={k: sorted(v) for k, v in group_identifiers(allow).items()} if spec.grouped_allow else allow,
            deny=deny,
            override_capabilities=override,
            replace_defaults=replace,
        )
    cfg = GateConfig(
        domains=domains,
        dashboard_redirect_url=(os.getenv("WPGATE_DASHBOARD_REDIRECT_URL") or "").strip() or None,
    )
    return merge_gate_configs(default_gate_config(), cfg) if with_defaults else cfg


class ConfigProvider(Protocol):
    """Per-domain allow/deny/override source. Implementations raise UnknownDomainError for unknown domains."""

    def get_allow_set(self, domain: str) -> Union[Tuple[ResourceId, ...], Dict[Category, Tuple[ResourceId, ...]]]:
        ...

    def get_deny_set(self, domain: str) -> Tuple[ResourceId, ...]:
        ...

    def get_override(self, domain: str, context: Optional[GateContext]) -> bool:
        ...


class StaticConfigProvider:
    """ConfigProvider over one merged GateConfig."""

    def __init__(self, config: Optional[GateConfig] = None) -> None:
        self.config = config if config is not None else default_gate_config()

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], *, with_defaults: bool = True) -> "StaticConfigProvider":
        cfg = GateConfig.model_validate(dict(raw))
        return cls(merge_gate_configs(default_gate_config(), cfg) if with_defaults else cfg)

    def _domain(self, domain: str) -> DomainConfig:
        get_domain_spec(domain)
        return self.config.domains.get(domain) or DomainConfig()

    def get_allow_set(self, domain: str) -> Union[Tuple[ResourceId, ...], Dict[Category, Tuple[ResourceId, ...]]]:
        spec = get_domain_spec(domain)
        allow = self._domain(domain).allow
        if spec.grouped_allow:
            grouped = allow if isinstance(allow, dict) else group_identifiers(allow)
            return merge_grouped(grouped)
        if isinstance(allow, dict):
            logger.warning("Domain %s takes a flat allow list; flattening category mapping", domain)
            return merge_identifiers(*allow.values())
        return merge_identifiers(allow)

    def get_deny_set(self, domain: str) -> Tuple[ResourceId, ...]:
        spec = get_domain_spec(domain)
        if not spec.has_deny:
            return ()
        return merge_identifiers(self._domain(domain).deny)

    def get_override(self, domain: str, context: Optional[GateContext]) -> bool:
        caps = self._domain(domain).override_capabilities
        if context is None or not caps:
            return False
        return any(context.can(c) for c in caps)

    @property
    def dashboard_redirect_url(self) -> str:
        return self.config.dashboard_redirect_url or DEFAULT_DASHBOARD_REDIRECT_URL


def build_config_provider(config_path: Optional[str] = None) -> StaticConfigProvider:
    """YAML file when a path is given, env vars otherwise."""
    if config_path:
        logger.info("Loading gate config from %s", config_path)
        return StaticConfigProvider(load_gate_config(config_path))
    return StaticConfigProvider(load_gate_config_from_env())
