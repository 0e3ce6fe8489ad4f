"""
Catalogs of gateable resources, read from an explicit registry snapshot.

The snapshot loader is called on every `get_catalog` so a changed registry is
picked up on the next evaluation; nothing here is cached.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Protocol, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

from wpgate.core import domains as d
from wpgate.core.domains import get_domain_spec
from wpgate.core.errors import UnknownDomainError
from wpgate.core.models import CatalogItem

logger = logging.getLogger(__name__)

EMBED_BLOCK = "core/embed"
DASHBOARD_PAGE = "index.php"


class StyleEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    is_default: bool = False

    @model_validator(mode="before")
    @classmethod
    def _accept_camel_case_default(cls, data: Any) -> Any:
        # Block registries report the default flag as either `isDefault` or `is_default`.
        if isinstance(data, dict) and "isDefault" in data:
            data = dict(data)
            data["is_default"] = bool(data.get("is_default")) or bool(data.pop("isDefault"))
        return data


class VariationEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str


class BlockEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    category: Optional[str] = None
    styles: List[StyleEntry] = Field(default_factory=list)
    variations: List[VariationEntry] = Field(default_factory=list)


class RegistrySnapshot(BaseModel):
    """What the host has registered right now. Category membership is explicit, never inferred."""

    model_config = ConfigDict(extra="forbid")

    blocks: List[BlockEntry] = Field(default_factory=list)
    routes: List[str] = Field(default_factory=list)
    formats: List[str] = Field(default_factory=list)
    post_types: List[str] = Field(default_factory=list)
    image_sizes: List[str] = Field(default_factory=list)


def load_registry_snapshot(path: Union[str, Path]) -> RegistrySnapshot:
    with open(path) as f:
        raw = yaml.safe_load(f) or {}
    return RegistrySnapshot.model_validate(raw)


def route_namespace(route: str) -> Optional[str]:
    """`/wp/v2/posts` -> `wp/v2`; routes with fewer than two segments have no namespace."""
    parts = [p for p in (route or "").split("/") if p]
    if len(parts) < 2:
        return None
    return "/".join(parts[:2])


class CatalogProvider(Protocol):
    def get_catalog(self, domain: str) -> List[CatalogItem]:
        """Ordered catalog for the domain. Raises UnknownDomainError for unknown domains."""


def _block_types(snap: RegistrySnapshot) -> List[CatalogItem]:
    return [CatalogItem(resource_id=b.name, category=b.category) for b in snap.blocks]


def _block_styles(snap: RegistrySnapshot) -> List[CatalogItem]:
    return [
        CatalogItem(resource_id=s.name, category=b.name, always_allowed=s.is_default)
        for b in snap.blocks
        for s in b.styles
    ]


def _block_variations(snap: RegistrySnapshot) -> List[CatalogItem]:
    return [CatalogItem(resource_id=v.name, category=b.name) for b in snap.blocks for v in b.variations]


def _embed_variations(snap: RegistrySnapshot) -> List[CatalogItem]:
    return [
        CatalogItem(resource_id=v.name, category=EMBED_BLOCK)
        for b in snap.blocks
        if b.name == EMBED_BLOCK
        for v in b.variations
    ]


def _routes(snap: RegistrySnapshot) -> List[CatalogItem]:
    return [CatalogItem(resource_id=r, category=route_namespace(r)) for r in snap.routes]


def _formats(snap: RegistrySnapshot) -> List[CatalogItem]:
    return [CatalogItem(resource_id=f) for f in snap.formats]


def _post_types(snap: RegistrySnapshot) -> List[CatalogItem]:
    return [CatalogItem(resource_id=p) for p in snap.post_types]


def _image_sizes(snap: RegistrySnapshot) -> List[CatalogItem]:
    return [CatalogItem(resource_id=s) for s in snap.image_sizes]


def _dashboard(_snap: RegistrySnapshot) -> List[CatalogItem]:
    return [CatalogItem(resource_id=DASHBOARD_PAGE)]


_BUILDERS: Dict[str, Callable[[RegistrySnapshot], List[CatalogItem]]] = {
    d.REST_ROUTES: _routes,
    d.BLOCK_TYPES: _block_types,
    d.BLOCK_STYLES: _block_styles,
    d.BLOCK_VARIATIONS: _block_variations,
    d.EMBED_VARIATIONS: _embed_variations,
    d.TEXT_FORMATS: _formats,
    d.CONTENT_EDITOR: _post_types,
    d.QUICK_EDIT: _post_types,
    d.DASHBOARD: _dashboard,
    d.IMAGE_SIZES: _image_sizes,
}


class RegistryCatalogProvider:
    """CatalogProvider that rebuilds each catalog from a fresh registry snapshot."""

    def __init__(self, loader: Callable[[], RegistrySnapshot]) -> None:
        self._loader = loader

    @classmethod
    def from_snapshot(cls, snapshot: RegistrySnapshot) -> "RegistryCatalogProvider":
        return cls(lambda: snapshot)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "RegistryCatalogProvider":
        return cls(lambda: load_registry_snapshot(path))

    def get_catalog(self, domain: str) -> List[CatalogItem]:
        get_domain_spec(domain)
        builder = _BUILDERS.get(domain)
        if builder is None:
            raise UnknownDomainError(domain)
        items = builder(self._loader())
        logger.debug("Catalog for %s: %d items", domain, len(items))
        return items
