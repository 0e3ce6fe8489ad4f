from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel

from wpgate.authz.differ import broadcast_allow, diff_disabled, flatten_diff
from wpgate.authz.evaluator import evaluate, explain
from wpgate.core import domains as d
from wpgate.core.errors import UnknownDomainError
from wpgate.core.models import CatalogItem, GateContext, PolicyDecision
from wpgate.providers.catalog_provider import DASHBOARD_PAGE
from wpgate.providers.config_provider import DEFAULT_DASHBOARD_REDIRECT_URL, ConfigProvider

logger = logging.getLogger(__name__)


class DashboardDecision(BaseModel):
    allowed: bool
    redirect_url: Optional[str] = None


class AdminGate:
    """Admin screen gates: dashboard, content editor, quick edit, image sizes."""

    def __init__(
        self,
        config: ConfigProvider,
        *,
        dashboard_redirect_url: str = DEFAULT_DASHBOARD_REDIRECT_URL,
    ) -> None:
        self.config = config
        self.dashboard_redirect_url = dashboard_redirect_url

    def dashboard_access(self, context: Optional[GateContext]) -> DashboardDecision:
        # Nothing opens the dashboard except holding one of the configured capabilities.
        try:
            override = self.config.get_override(d.DASHBOARD, context)
            allow = self.config.get_allow_set(d.DASHBOARD)
        except UnknownDomainError as e:
            logger.error("Dashboard gate config unavailable: %s", e)
            return DashboardDecision(allowed=False, redirect_url=self.dashboard_redirect_url)
        decision, reason = explain(DASHBOARD_PAGE, override, (), allow)
        if decision is PolicyDecision.ALLOW:
            return DashboardDecision(allowed=True)
        logger.debug("Dashboard redirected to %s (%s)", self.dashboard_redirect_url, reason)
        return DashboardDecision(allowed=False, redirect_url=self.dashboard_redirect_url)

    def content_editor_enabled(self, context: Optional[GateContext]) -> bool:
        """
        Whether the content editor stays visible for the post being edited.

        No post in context means there is nothing to hide. Only post types in the
        deny set lose the editor, whether or not the registry knows them.
        """
        post_type = context.post_type if context is not None else None
        if not post_type:
            return True
        try:
            override = self.config.get_override(d.CONTENT_EDITOR, context)
            deny = self.config.get_deny_set(d.CONTENT_EDITOR)
        except UnknownDomainError as e:
            logger.error("Content editor gate unavailable, hiding editor: %s", e)
            return False
        return evaluate(post_type, override, deny, [post_type]).allowed

    def quick_edit_enabled(self, post_type: str, context: Optional[GateContext] = None) -> bool:
        try:
            override = self.config.get_override(d.QUICK_EDIT, context)
            allow = self.config.get_allow_set(d.QUICK_EDIT)
        except UnknownDomainError as e:
            logger.error("Quick edit gate unavailable: %s", e)
            return False
        return evaluate(post_type, override, (), allow).allowed

    def filter_image_sizes(self, sizes: Mapping[str, Any]) -> Dict[str, Any]:
        """Keep only the configured custom sizes out of the sizes the host would generate."""
        catalog = [CatalogItem(resource_id=name) for name in sizes]
        try:
            allow = self.config.get_allow_set(d.IMAGE_SIZES)
        except UnknownDomainError as e:
            logger.error("Image size gate unavailable, generating no sizes: %s", e)
            return {}
        disabled = set(flatten_diff(diff_disabled(catalog, broadcast_allow(catalog, allow))))
        return {name: spec for name, spec in sizes.items() if name not in disabled}
