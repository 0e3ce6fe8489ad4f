"""
Catalog-wide suppression diffs.

For every category in a catalog snapshot, the differ returns the items that are
neither always-allowed nor named in the allow mapping. The result is sparse
(categories with nothing to suppress are omitted) and keeps catalog order so
identical snapshots always produce identical output.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from pydantic import ValidationError

from wpgate.core.errors import ConfigurationError
from wpgate.core.models import (
    UNCATEGORIZED,
    AbsentCategoryPolicy,
    CatalogItem,
    Category,
    ResourceId,
    SuppressionDiff,
    is_valid_identifier,
)

logger = logging.getLogger(__name__)


def group_identifiers(flat: Optional[Iterable[Any]], *, separator: str = ":") -> Dict[Category, Set[ResourceId]]:
    """
    Turn `category:item` identifiers into a category -> items mapping.

    Identifiers without a separator are filed under the synthetic uncategorized category.
    """
    out: Dict[Category, Set[ResourceId]] = {}
    for raw in flat or []:
        if not is_valid_identifier(raw):
            continue
        if separator in raw:
            category, item = raw.split(separator, 1)
        else:
            category, item = UNCATEGORIZED, raw
        out.setdefault(category or UNCATEGORIZED, set()).add(item)
    return out


def broadcast_allow(catalog: Iterable[Any], flat: Optional[Iterable[ResourceId]]) -> Dict[Category, Set[ResourceId]]:
    """Apply one flat allow set to every category present in the catalog."""
    allowed = set(flat or [])
    out: Dict[Category, Set[ResourceId]] = {}
    for item in coerce_catalog(catalog):
        out.setdefault(item.effective_category, allowed)
    return out


def _allowed_for(allow_set: Optional[Mapping[Category, Iterable[ResourceId]]], category: Category) -> Optional[Set[ResourceId]]:
    if not allow_set or category not in allow_set:
        return None
    return set(allow_set[category] or [])


def coerce_catalog(catalog: Iterable[Any]) -> List[CatalogItem]:
    """Catalog entries as `CatalogItem`s; entries that do not validate are logged and dropped."""
    items: List[CatalogItem] = []
    for raw in catalog or []:
        try:
            items.append(CatalogItem.coerce(raw))
        except ValidationError as e:
            err = ConfigurationError("catalog entry does not validate", value=raw)
            logger.warning("Skipping catalog entry %r: %s (%s)", raw, err, e)
    return items


def diff_disabled(
    catalog: Iterable[Any],
    allow_set: Optional[Mapping[Category, Iterable[ResourceId]]],
    *,
    absent_category: AbsentCategoryPolicy = "suppress",
) -> SuppressionDiff:
    """
    Compute `catalog - allow_set` per category.

    Args:
        catalog: ordered entries; `CatalogItem`, `(id, category, always_allowed)` tuples or mappings
        allow_set: category -> permitted identifiers
        absent_category: "suppress" treats a category missing from `allow_set` as an empty allow set,
            "untouched" leaves such a category out of the result entirely

    Returns:
        category -> disabled identifiers, in catalog order; categories with nothing disabled are omitted
    """
    out: SuppressionDiff = {}
    seen: Dict[Category, Set[ResourceId]] = {}

    for item in coerce_catalog(catalog):
        if not is_valid_identifier(item.resource_id):
            err = ConfigurationError("catalog entry has no usable identifier", value=item.resource_id)
            logger.warning("Skipping catalog entry %r: %s", item.resource_id, err)
            continue
        if item.always_allowed:
            continue

        category = item.effective_category
        allowed = _allowed_for(allow_set, category)
        if allowed is None:
            if absent_category == "untouched":
                continue
            allowed = set()
        if item.resource_id in allowed:
            continue

        done = seen.setdefault(category, set())
        if item.resource_id in done:
            continue
        done.add(item.resource_id)
        out.setdefault(category, []).append(item.resource_id)

    return out


def flatten_diff(diff: SuppressionDiff) -> List[ResourceId]:
    """Disabled identifiers across all categories, category order first."""
    out: List[ResourceId] = []
    for ids in diff.values():
        out.extend(ids)
    return out
