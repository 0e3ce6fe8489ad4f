from __future__ import annotations

import pytest


def test_override_allows_even_denied_routes() -> None:
    from wpgate.authz.evaluator import evaluate
    from wpgate.core.models import PolicyDecision

    d = evaluate("/wp/v2/users", True, ["/wp/v2/users"], [], match="prefix")
    assert d is PolicyDecision.ALLOW


@pytest.mark.parametrize("allow,deny", [([], []), (["a"], ["b"]), (["wp/v2"], ["/wp/v2/users"])])
def test_override_ignores_set_contents(allow, deny) -> None:  # type: ignore[no-untyped-def]
    from wpgate.authz.evaluator import evaluate
    from wpgate.core.models import PolicyDecision

    assert evaluate("/anything", True, deny, allow, match="prefix") is PolicyDecision.ALLOW
    assert evaluate("anything", True, deny, allow) is PolicyDecision.ALLOW


def test_unlisted_resource_is_default_deny() -> None:
    from wpgate.authz.evaluator import explain
    from wpgate.core.models import PolicyDecision

    decision, reason = explain("core/table", False, [], ["core/paragraph"])
    assert decision is PolicyDecision.DENY
    assert reason == "default_deny"


def test_deny_wins_over_allowed_namespace() -> None:
    from wpgate.authz.evaluator import explain
    from wpgate.core.models import PolicyDecision

    decision, reason = explain("/wp/v2/users", False, ["/wp/v2/users"], ["wp/v2"], match="prefix")
    assert decision is PolicyDecision.DENY
    assert reason == "denied"


def test_allowed_namespace_when_not_denied() -> None:
    from wpgate.authz.evaluator import explain
    from wpgate.core.models import PolicyDecision

    decision, reason = explain("/wp/v2/posts", False, ["/wp/v2/users"], ["wp/v2"], match="prefix")
    assert decision is PolicyDecision.ALLOW
    assert reason == "allowed"


def test_deny_prefix_covers_sub_routes() -> None:
    from wpgate.authz.evaluator import evaluate
    from wpgate.core.models import PolicyDecision

    assert evaluate("/wp/v2/users/1", False, ["/wp/v2/users"], ["wp/v2"], match="prefix") is PolicyDecision.DENY


def test_namespace_with_leading_slash_still_matches() -> None:
    from wpgate.authz.evaluator import evaluate
    from wpgate.core.models import PolicyDecision

    assert evaluate("/my-plugin/v1/items", False, [], ["/my-plugin/v1"], match="prefix") is PolicyDecision.ALLOW


def test_exact_mode_does_not_prefix_match() -> None:
    from wpgate.authz.evaluator import evaluate
    from wpgate.core.models import PolicyDecision

    assert evaluate("core/list-item", False, [], ["core/list"]) is PolicyDecision.DENY
    assert evaluate("core/list", False, [], ["core/list"]) is PolicyDecision.ALLOW


def test_blank_entries_are_ignored() -> None:
    from wpgate.authz.evaluator import evaluate
    from wpgate.core.models import PolicyDecision

    # A blank allow entry must not open every route.
    assert evaluate("/wp/v2/posts", False, [], ["", "  "], match="prefix") is PolicyDecision.DENY


@pytest.mark.parametrize("bad", [None, "", "   ", 42, ["/wp/v2"]])
def test_malformed_identifier_fails_closed(bad, caplog) -> None:  # type: ignore[no-untyped-def]
    from wpgate.authz.evaluator import explain
    from wpgate.core.models import PolicyDecision

    decision, reason = explain(bad, True, [], ["wp/v2"], match="prefix")
    assert decision is PolicyDecision.DENY
    assert reason == "invalid_identifier"
    assert any("malformed resource id" in r.getMessage() for r in caplog.records)


def test_evaluator_does_not_mutate_inputs() -> None:
    from wpgate.authz.evaluator import evaluate

    deny = ["/wp/v2/users"]
    allow = ["wp/v2"]
    evaluate("/wp/v2/posts", False, deny, allow, match="prefix")
    assert deny == ["/wp/v2/users"]
    assert allow == ["wp/v2"]


def test_none_sets_behave_as_empty() -> None:
    from wpgate.authz.evaluator import evaluate
    from wpgate.core.models import PolicyDecision

    assert evaluate("core/paragraph", False, None, None) is PolicyDecision.DENY
