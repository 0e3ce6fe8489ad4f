"""
Command line entry point.

    wpgate evaluate --domain rest-routes --resource /wp/v2/posts --capability edit_posts
    wpgate diff --domain block-styles --registry registry.yaml
    wpgate editor-plan --registry registry.yaml

Output is JSON on stdout; logs go to stderr.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, List, Mapping, Optional

import yaml
from pydantic import ValidationError

from wpgate.authz.evaluator import explain
from wpgate.config import load_gate_settings
from wpgate.core.domains import DASHBOARD, DOMAIN_SPECS, get_domain_spec
from wpgate.core.errors import UnknownDomainError
from wpgate.core.models import UNCATEGORIZED, GateContext, is_valid_identifier
from wpgate.gates.context import InitContext
from wpgate.gates.editor import EditorGate, suppression_diff
from wpgate.providers.catalog_provider import RegistryCatalogProvider
from wpgate.providers.config_provider import StaticConfigProvider, build_config_provider

logger = logging.getLogger(__name__)

# The dashboard is a single page, not a catalog.
DIFF_DOMAINS = sorted(n for n in DOMAIN_SPECS if n != DASHBOARD)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="wpgate", description="Resource gating for headless WordPress")
    parser.add_argument("--config", help="YAML gate config (default: $WPGATE_CONFIG, else WPGATE_* env vars)")
    parser.add_argument("--log-level", help="Logging level (default: $WPGATE_LOG_LEVEL or INFO)")
    sub = parser.add_subparsers(dest="command", required=True)

    ev = sub.add_parser("evaluate", help="Decide allow/deny for one resource")
    ev.add_argument("--domain", required=True, choices=sorted(DOMAIN_SPECS))
    ev.add_argument("--resource", required=True)
    ev.add_argument("--capability", action="append", default=[], help="Capability held by the caller (repeatable)")
    ev.add_argument("--logged-in", action="store_true")

    df = sub.add_parser("diff", help="Print the suppression diff for a catalog domain")
    df.add_argument("--domain", required=True, choices=DIFF_DOMAINS)
    df.add_argument("--registry", required=True, help="YAML registry snapshot")

    plan = sub.add_parser("editor-plan", help="Print everything the block editor must suppress")
    plan.add_argument("--registry", required=True, help="YAML registry snapshot")
    return parser


def _emit(payload: Mapping[str, Any]) -> None:
    print(json.dumps(payload, indent=2, sort_keys=False))


def _cmd_evaluate(args: argparse.Namespace, config: StaticConfigProvider) -> int:
    spec = get_domain_spec(args.domain)
    ctx = GateContext(logged_in=bool(args.logged_in), capabilities=set(args.capability))
    resource = args.resource
    allow: Any = config.get_allow_set(args.domain)
    if isinstance(allow, Mapping):
        category = (resource.split(":", 1)[0] if ":" in resource else "") or UNCATEGORIZED
        if spec.absent_category == "untouched" and is_valid_identifier(resource) and category not in allow:
            # A block missing from config keeps all its items.
            _emit({"domain": args.domain, "resource": resource, "decision": "allow", "reason": "untouched"})
            return 0
        allow = [f"{cat}:{rid}" for cat, ids in allow.items() for rid in ids]
    if spec.deny_only:
        allow = [*allow, resource]
    decision, reason = explain(
        resource,
        config.get_override(args.domain, ctx),
        config.get_deny_set(args.domain),
        allow,
        match=spec.match,
    )
    _emit({"domain": args.domain, "resource": resource, "decision": decision.value, "reason": reason})
    return 0 if decision.allowed else 1


def _cmd_diff(args: argparse.Namespace, config: StaticConfigProvider) -> int:
    catalogs = RegistryCatalogProvider.from_file(args.registry)
    _emit({"domain": args.domain, "disabled": suppression_diff(config, catalogs, args.domain)})
    return 0


def _cmd_editor_plan(args: argparse.Namespace, config: StaticConfigProvider) -> int:
    gate = EditorGate(config, RegistryCatalogProvider.from_file(args.registry))
    _emit(gate.plan(InitContext()).model_dump(mode="json"))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    settings = load_gate_settings()
    logging.basicConfig(
        level=(args.log_level or settings.log_level).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        config = build_config_provider(args.config or settings.config_path)
        if args.command == "evaluate":
            return _cmd_evaluate(args, config)
        if args.command == "diff":
            return _cmd_diff(args, config)
        return _cmd_editor_plan(args, config)
    except UnknownDomainError as e:
        logger.error("%s", e)
        return 2
    except OSError as e:
        logger.error("Cannot read input: %s", e)
        return 2
    except (ValidationError, yaml.YAMLError) as e:
        logger.error("Invalid config or registry file: %s", e)
        return 2
