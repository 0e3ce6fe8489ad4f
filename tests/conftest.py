"""
Pytest config.

Tests import the local `wpgate/` package; pin the repo root on sys.path so that
works even when a global `pytest` entrypoint is used without an editable install.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest


def _ensure_repo_root_on_syspath() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    repo_root_str = str(repo_root)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)


_ensure_repo_root_on_syspath()


@pytest.fixture(autouse=True)
def _clear_wpgate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's WPGATE_* env from leaking into config loading."""
    for name in list(os.environ):
        if name.startswith("WPGATE_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def registry():  # type: ignore[no-untyped-def]
    from wpgate.providers.catalog_provider import RegistrySnapshot

    return RegistrySnapshot.model_validate(
        {
            "blocks": [
                {"name": "core/paragraph", "category": "text"},
                {
                    "name": "core/button",
                    "category": "design",
                    "styles": [{"name": "fill", "isDefault": True}, {"name": "outline"}],
                },
                {
                    "name": "core/image",
                    "category": "media",
                    "styles": [{"name": "default", "is_default": True}, {"name": "rounded"}],
                },
                {
                    "name": "core/embed",
                    "category": "embed",
                    "variations": [{"name": "youtube"}, {"name": "vimeo"}, {"name": "twitter"}, {"name": "url"}],
                },
                {
                    "name": "core/group",
                    "category": "design",
                    "variations": [{"name": "group"}, {"name": "group-row"}, {"name": "group-stack"}],
                },
            ],
            "routes": ["/wp/v2/posts", "/wp/v2/users", "/my-plugin/v1/items", "/"],
            "formats": ["core/bold", "core/italic", "core/link", "core/code"],
            "post_types": ["post", "page", "author"],
            "image_sizes": ["thumbnail", "medium", "hero"],
        }
    )


@pytest.fixture
def catalogs(registry):  # type: ignore[no-untyped-def]
    from wpgate.providers.catalog_provider import RegistryCatalogProvider

    return RegistryCatalogProvider.from_snapshot(registry)
