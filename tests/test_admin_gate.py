from __future__ import annotations

from typing import Any, Dict, Optional


def _gate(domains: Optional[Dict[str, Any]] = None):  # type: ignore[no-untyped-def]
    from wpgate.gates.admin import AdminGate
    from wpgate.providers.config_provider import StaticConfigProvider

    p = StaticConfigProvider.from_mapping({"domains": domains or {}})
    return AdminGate(p, dashboard_redirect_url=p.dashboard_redirect_url)


def test_dashboard_redirects_everyone_by_default() -> None:
    from wpgate.core.models import GateContext

    d = _gate().dashboard_access(GateContext(logged_in=True, capabilities={"manage_options"}))
    assert d.allowed is False
    assert d.redirect_url == "edit.php"


def test_dashboard_opens_for_configured_capability() -> None:
    from wpgate.core.models import GateContext

    gate = _gate({"dashboard": {"override_capabilities": ["manage_options", "edit_others_posts"]}})
    assert gate.dashboard_access(GateContext(capabilities={"edit_others_posts"})).allowed is True
    denied = gate.dashboard_access(GateContext(capabilities={"read"}))
    assert denied.allowed is False
    assert denied.redirect_url == "edit.php"


def test_content_editor_hidden_for_denied_post_types() -> None:
    from wpgate.core.models import GateContext

    gate = _gate({"content-editor": {"deny": ["author"]}})
    assert gate.content_editor_enabled(GateContext(post_type="author")) is False
    assert gate.content_editor_enabled(GateContext(post_type="post")) is True
    # No post being edited: nothing to hide.
    assert gate.content_editor_enabled(GateContext()) is True
    assert gate.content_editor_enabled(None) is True


def test_content_editor_only_hides_denied_post_types() -> None:
    from wpgate.core.models import GateContext

    # Nothing configured: every post type keeps the editor, registered or not.
    assert _gate().content_editor_enabled(GateContext(post_type="post")) is True
    assert _gate().content_editor_enabled(GateContext(post_type="ghost")) is True
    gate = _gate({"content-editor": {"deny": ["ghost"], "override_capabilities": ["manage_options"]}})
    assert gate.content_editor_enabled(GateContext(post_type="ghost")) is False
    assert gate.content_editor_enabled(GateContext(post_type="ghost", capabilities={"manage_options"})) is True


def test_quick_edit_is_opt_in() -> None:
    assert _gate().quick_edit_enabled("post") is False
    gate = _gate({"quick-edit": {"allow": ["page"]}})
    assert gate.quick_edit_enabled("page") is True
    assert gate.quick_edit_enabled("post") is False


def test_image_sizes_filtered_to_custom_sizes() -> None:
    sizes = {
        "thumbnail": {"width": 150},
        "medium": {"width": 300},
        "hero": {"width": 1600},
    }
    assert _gate().filter_image_sizes(sizes) == {}
    gate = _gate({"image-sizes": {"allow": ["hero", "og-image"]}})
    assert gate.filter_image_sizes(sizes) == {"hero": {"width": 1600}}
