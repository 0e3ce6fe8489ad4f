"""
Block editor gates.

Every editor domain is allowlist-driven: the registry snapshot says what exists,
config says what stays, and the differ computes what the editor must unregister.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Set

from pydantic import BaseModel, Field

from wpgate.authz.differ import broadcast_allow, coerce_catalog, diff_disabled, flatten_diff
from wpgate.authz.evaluator import evaluate
from wpgate.core import domains as d
from wpgate.core.domains import DomainSpec, get_domain_spec
from wpgate.core.errors import UnknownDomainError
from wpgate.core.models import CatalogItem, SuppressionDiff, is_valid_identifier
from wpgate.gates.context import InitContext
from wpgate.providers.catalog_provider import EMBED_BLOCK, CatalogProvider
from wpgate.providers.config_provider import ConfigProvider

logger = logging.getLogger(__name__)

HIDE_GENERIC_EMBED_ASSET = "hide-generic-url-embed"
GENERIC_EMBED_VARIATION = "url"


class EditorPlan(BaseModel):
    """Everything the editor boot code needs to apply, for one page load."""

    allowed_block_types: List[str] = Field(default_factory=list)
    disabled_block_styles: Dict[str, List[str]] = Field(default_factory=dict)
    disabled_block_variations: Dict[str, List[str]] = Field(default_factory=dict)
    disabled_embed_variations: List[str] = Field(default_factory=list)
    disabled_text_formats: List[str] = Field(default_factory=list)
    hide_generic_url_embed: bool = False


def _resolve_allow(catalog: List[CatalogItem], deny: Any, allow: Any, spec: DomainSpec) -> Dict[str, Set[str]]:
    # Prefix entries never equal a catalog id and deny entries must win, so resolve each item through the evaluator.
    out: Dict[str, Set[str]] = {}
    for item in catalog:
        if not is_valid_identifier(item.resource_id):
            continue
        permitted = out.setdefault(item.effective_category, set())
        candidates = [*allow, item.resource_id] if spec.deny_only else allow
        if evaluate(item.resource_id, False, deny, candidates, match=spec.match).allowed:
            permitted.add(item.resource_id)
    return out


def suppression_diff(config: ConfigProvider, catalogs: CatalogProvider, domain: str) -> SuppressionDiff:
    """Catalog minus allow set for `domain`; empty (nothing suppressed) if the domain is unknown."""
    try:
        spec = get_domain_spec(domain)
        catalog = coerce_catalog(catalogs.get_catalog(domain))
        allow: Any = config.get_allow_set(domain)
        deny = config.get_deny_set(domain)
    except UnknownDomainError as e:
        logger.error("Cannot compute suppression diff: %s", e)
        return {}

    if spec.match == "prefix" or spec.has_deny:
        allow = _resolve_allow(catalog, deny, allow, spec)
    elif not isinstance(allow, Mapping):
        allow = broadcast_allow(catalog, allow)
    diff = diff_disabled(catalog, allow, absent_category=spec.absent_category)
    if diff:
        logger.debug("Suppressing in %s: %s", domain, diff)
    return diff


class EditorGate:
    def __init__(self, config: ConfigProvider, catalogs: CatalogProvider) -> None:
        self.config = config
        self.catalogs = catalogs

    def suppression_diff(self, domain: str) -> SuppressionDiff:
        return suppression_diff(self.config, self.catalogs, domain)

    def allowed_block_types(self) -> List[str]:
        try:
            return list(self.config.get_allow_set(d.BLOCK_TYPES))
        except UnknownDomainError as e:
            logger.error("Block type allow list unavailable, allowing none: %s", e)
            return []

    def disabled_block_styles(self) -> SuppressionDiff:
        return self.suppression_diff(d.BLOCK_STYLES)

    def disabled_block_variations(self) -> SuppressionDiff:
        return self.suppression_diff(d.BLOCK_VARIATIONS)

    def disabled_embed_variations(self) -> List[str]:
        return self.suppression_diff(d.EMBED_VARIATIONS).get(EMBED_BLOCK, [])

    def disabled_text_formats(self) -> List[str]:
        return flatten_diff(self.suppression_diff(d.TEXT_FORMATS))

    def _generic_embed_enabled(self, domain: str) -> bool:
        try:
            allow: Any = self.config.get_allow_set(domain)
        except UnknownDomainError:
            return False
        if isinstance(allow, Mapping):
            return GENERIC_EMBED_VARIATION in (allow.get(EMBED_BLOCK) or ())
        return GENERIC_EMBED_VARIATION in allow

    def claim_generic_embed_hide(self, domain: str, init: InitContext) -> bool:
        """
        Whether `domain`'s gate should deliver the generic URL embed hider now.

        Both variation domains want it unless they enable the `url` variation; the
        init context makes sure it is delivered at most once per page load.
        """
        if self._generic_embed_enabled(domain):
            return False
        return init.claim(HIDE_GENERIC_EMBED_ASSET)

    def plan(self, init: InitContext) -> EditorPlan:
        hide = False
        for domain in (d.BLOCK_VARIATIONS, d.EMBED_VARIATIONS):
            hide = self.claim_generic_embed_hide(domain, init) or hide
        return EditorPlan(
            allowed_block_types=self.allowed_block_types(),
            disabled_block_styles=self.disabled_block_styles(),
            disabled_block_variations=self.disabled_block_variations(),
            disabled_embed_variations=self.disabled_embed_variations(),
            disabled_text_formats=self.disabled_text_formats(),
            hide_generic_url_embed=hide,
        )
