"""
Single-resource policy decisions.

Precedence is fixed and total:
1) override predicate -> allow
2) any deny entry matches -> deny
3) any allow entry matches -> allow
4) default deny

Callers merge every configuration source into one deny set and one allow set
before calling; the evaluator never looks anything up.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Literal, Optional, Tuple

from wpgate.core.errors import ConfigurationError
from wpgate.core.models import MatchMode, PolicyDecision, is_valid_identifier

logger = logging.getLogger(__name__)

DecisionReason = Literal["override", "denied", "allowed", "default_deny", "invalid_identifier"]


def _namespace_prefix(entry: str) -> str:
    # Namespaces are written without the leading slash ("wp/v2"), routes always carry one.
    return "/" + entry.lstrip("/")


def _matches_deny(resource_id: str, entry: str, match: MatchMode) -> bool:
    if match == "prefix":
        return resource_id.startswith(entry)
    return resource_id == entry


def _matches_allow(resource_id: str, entry: str, match: MatchMode) -> bool:
    if match == "prefix":
        return resource_id.startswith(_namespace_prefix(entry))
    return resource_id == entry


def _any_match(resource_id: str, entries: Optional[Iterable[Any]], match: MatchMode, *, deny: bool) -> bool:
    if not entries:
        return False
    test = _matches_deny if deny else _matches_allow
    for entry in entries:
        if not is_valid_identifier(entry):
            # A blank entry would prefix-match everything.
            continue
        if test(resource_id, entry, match):
            return True
    return False


def explain(
    resource_id: Any,
    override: bool,
    deny_set: Optional[Iterable[str]],
    allow_set: Optional[Iterable[str]],
    *,
    match: MatchMode = "exact",
) -> Tuple[PolicyDecision, DecisionReason]:
    """Like `evaluate`, but also returns which rule decided."""
    if not is_valid_identifier(resource_id):
        err = ConfigurationError("resource id must be a non-empty string", value=resource_id)
        logger.warning("Denying malformed resource id %r: %s", resource_id, err)
        return PolicyDecision.DENY, "invalid_identifier"

    if override:
        return PolicyDecision.ALLOW, "override"
    if _any_match(resource_id, deny_set, match, deny=True):
        return PolicyDecision.DENY, "denied"
    if _any_match(resource_id, allow_set, match, deny=False):
        return PolicyDecision.ALLOW, "allowed"
    return PolicyDecision.DENY, "default_deny"


def evaluate(
    resource_id: Any,
    override: bool,
    deny_set: Optional[Iterable[str]],
    allow_set: Optional[Iterable[str]],
    *,
    match: MatchMode = "exact",
) -> PolicyDecision:
    decision, _ = explain(resource_id, override, deny_set, allow_set, match=match)
    return decision
