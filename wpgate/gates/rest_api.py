"""
REST API access gate.

By default every route is rejected except for callers holding an override
capability (`edit_posts`, which the block editor needs). Namespaces can be
opened with the allow list; forbidden routes win over the allow list.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel

from wpgate.authz.evaluator import explain
from wpgate.core.domains import REST_ROUTES, get_domain_spec
from wpgate.core.errors import UnknownDomainError
from wpgate.core.models import GateContext, PolicyDecision
from wpgate.providers.config_provider import ConfigProvider

logger = logging.getLogger(__name__)

REJECTION_CODE = "rest_unauthorized"
REJECTION_MESSAGE = "REST API access is restricted."


class RestRejection(BaseModel):
    code: str = REJECTION_CODE
    message: str = REJECTION_MESSAGE
    status: int

    def to_body(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "data": {"status": self.status}}


def authorization_required_status(context: Optional[GateContext]) -> int:
    # Logged-in callers are forbidden; anonymous ones are asked to authenticate.
    return 403 if (context is not None and context.logged_in) else 401


class RestApiGate:
    def __init__(self, config: ConfigProvider) -> None:
        self.config = config

    def check(self, route: str, context: Optional[GateContext] = None) -> Optional[RestRejection]:
        """Return None to let the request through, or the rejection to send back."""
        try:
            spec = get_domain_spec(REST_ROUTES)
            override = self.config.get_override(REST_ROUTES, context)
            deny = self.config.get_deny_set(REST_ROUTES)
            allow = self.config.get_allow_set(REST_ROUTES)
        except UnknownDomainError as e:
            logger.error("REST gate config unavailable, rejecting %s: %s", route, e)
            return RestRejection(status=authorization_required_status(context))

        decision, reason = explain(route, override, deny, allow, match=spec.match)
        if decision is PolicyDecision.ALLOW:
            logger.debug("REST route %s allowed (%s)", route, reason)
            return None
        logger.info("REST route %s rejected (%s)", route, reason)
        return RestRejection(status=authorization_required_status(context))
