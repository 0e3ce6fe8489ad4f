from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from wpgate.core.errors import UnknownDomainError
from wpgate.core.models import AbsentCategoryPolicy, MatchMode

REST_ROUTES = "rest-routes"
BLOCK_TYPES = "block-types"
BLOCK_STYLES = "block-styles"
BLOCK_VARIATIONS = "block-variations"
EMBED_VARIATIONS = "embed-variations"
TEXT_FORMATS = "text-formats"
CONTENT_EDITOR = "content-editor"
QUICK_EDIT = "quick-edit"
DASHBOARD = "dashboard"
IMAGE_SIZES = "image-sizes"


@dataclass(frozen=True)
class DomainSpec:
    name: str
    match: MatchMode = "exact"
    # What the differ does with a catalog category that has no entry in the allow mapping.
    absent_category: AbsentCategoryPolicy = "suppress"
    has_deny: bool = False
    # Allow set is keyed by category (block name); flat `block:item` config is grouped on read.
    grouped_allow: bool = False
    # Every resource the caller names is implicitly allowed; only the deny set (minus override) hides it.
    deny_only: bool = False


DOMAIN_SPECS: Dict[str, DomainSpec] = {
    s.name: s
    for s in (
        DomainSpec(REST_ROUTES, match="prefix", has_deny=True),
        DomainSpec(BLOCK_TYPES),
        # Flat `block:style` allow list; a block with no enabled style loses all its non-default styles.
        DomainSpec(BLOCK_STYLES, grouped_allow=True),
        # Only blocks named in the allow mapping are touched.
        DomainSpec(BLOCK_VARIATIONS, absent_category="untouched", grouped_allow=True),
        DomainSpec(EMBED_VARIATIONS),
        DomainSpec(TEXT_FORMATS),
        DomainSpec(CONTENT_EDITOR, has_deny=True, deny_only=True),
        DomainSpec(QUICK_EDIT),
        DomainSpec(DASHBOARD),
        DomainSpec(IMAGE_SIZES),
    )
}


def get_domain_spec(domain: str) -> DomainSpec:
    try:
        return DOMAIN_SPECS[domain]
    except KeyError:
        raise UnknownDomainError(domain) from None
