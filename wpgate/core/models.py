"""Shared data model for the gating core.

Catalog entries arrive from many registries (block registry, route table,
format store), so `CatalogItem.coerce` accepts tuples and mappings as well as
model instances. Identifiers stay plain strings.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Iterable, List, Literal, Mapping, Optional, Set, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

UNCATEGORIZED = "uncategorized"

ResourceId = str
Category = str

MatchMode = Literal["exact", "prefix"]
AbsentCategoryPolicy = Literal["suppress", "untouched"]

# Flat set of identifiers, or category -> identifiers.
AllowSet = Union[Iterable[ResourceId], Mapping[Category, Iterable[ResourceId]]]
# Category -> disabled identifiers (catalog order).
SuppressionDiff = Dict[Category, List[ResourceId]]


class PolicyDecision(str, Enum):
    ALLOW = "allow"
    DENY = "deny"

    @property
    def allowed(self) -> bool:
        return self is PolicyDecision.ALLOW


class BaseModelStrict(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class CatalogItem(BaseModelStrict):
    # Left as Any so malformed entries reach the differ and degrade there instead of failing validation.
    resource_id: Any
    category: Optional[Category] = None
    always_allowed: bool = False

    @classmethod
    def coerce(cls, raw: Any) -> "CatalogItem":
        if isinstance(raw, CatalogItem):
            return raw
        if isinstance(raw, Mapping):
            rid, category, flag = raw.get("resource_id", raw.get("name")), raw.get("category"), raw.get("always_allowed")
        elif isinstance(raw, (tuple, list)):
            rid, category, flag = (list(raw) + [None, None, None])[:3]
        else:
            rid, category, flag = raw, None, None
        # A non-string category lands in uncategorized; the flag goes through pydantic's bool parsing ("false" -> False).
        return cls(
            resource_id=rid,
            category=category if isinstance(category, str) else None,
            always_allowed=False if flag is None else flag,
        )

    @property
    def effective_category(self) -> Category:
        c = self.category
        if isinstance(c, str) and c.strip():
            return c
        return UNCATEGORIZED


class GateContext(BaseModel):
    """
    Per-request facts the override predicate is evaluated against.

    Built by the gate caller for one request and discarded afterwards.
    """

    logged_in: bool = False
    capabilities: Set[str] = Field(default_factory=set)
    post_type: Optional[str] = None

    def can(self, capability: str) -> bool:
        return capability in self.capabilities


def is_valid_identifier(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def merge_identifiers(*sources: Optional[Iterable[ResourceId]]) -> Tuple[ResourceId, ...]:
    """
    Union several contributions into one ordered, de-duplicated tuple.

    First occurrence wins the position; None sources are skipped.
    """
    seen: Set[ResourceId] = set()
    out: List[ResourceId] = []
    for src in sources:
        if not src:
            continue
        for rid in src:
            if rid in seen:
                continue
            seen.add(rid)
            out.append(rid)
    return tuple(out)


def merge_grouped(*sources: Optional[Mapping[Category, Iterable[ResourceId]]]) -> Dict[Category, Tuple[ResourceId, ...]]:
    out: Dict[Category, Tuple[ResourceId, ...]] = {}
    for src in sources:
        if not src:
            continue
        for category, ids in src.items():
            out[category] = merge_identifiers(out.get(category), ids)
    return out
