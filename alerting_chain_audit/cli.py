"""Command line interface for the alerting-chain audit tool."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Dict, List, Optional

import boto3

from .compliance import expand_compliance_frameworks
from .core import evaluate_rules, is_actionable, print_verdicts, select_rules
from .engine import EvaluationContext
from .gateway import Boto3ResourceGateway, ResourceGateway
from .rules import DEFAULT_RULES, AlertingRule, load_rules_file
from .snapshot import load_snapshot

PRIMARY_REGION_ATTRIBUTE = "default_aws_region"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Return parsed command line arguments."""

    parser = argparse.ArgumentParser(
        description="Verify CloudTrail → metric filter → alarm → SNS alerting chains."
    )
    parser.add_argument("--profile", help="AWS CLI profile to use", default=None)
    parser.add_argument("--region", help="AWS region to inspect", default=None)
    parser.add_argument(
        "--rules",
        nargs="*",
        default=None,
        help="Subset of rule identifiers to evaluate (defaults to all known rules)",
    )
    parser.add_argument(
        "--rules-file",
        dest="rules_file",
        help="JSON file with additional rule definitions",
    )
    parser.add_argument(
        "--compliance",
        nargs="*",
        default=None,
        help="Limit evaluation to rules aligned with compliance frameworks (e.g., cis)",
    )
    parser.add_argument(
        "--snapshot",
        dest="snapshot_path",
        help="Evaluate a recorded JSON snapshot instead of querying AWS",
    )
    parser.add_argument(
        "--attribute",
        dest="attributes",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Environment attribute used by rule applicability checks (repeatable)",
    )
    parser.add_argument(
        "--primary-region",
        dest="primary_region",
        help=f"Shorthand for --attribute {PRIMARY_REGION_ATTRIBUTE}=REGION",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Number of rules to evaluate in parallel",
    )
    parser.add_argument("--json", dest="json_path", help="Optional path to export verdicts as JSON")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log progress (-v) or gateway calls (-vv) to stderr",
    )
    return parser.parse_args(argv)


def _parse_attributes(pairs: List[str]) -> Dict[str, str]:
    attributes: Dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Invalid attribute '{pair}'. Expected KEY=VALUE")
        attributes[key.strip()] = value.strip()
    return attributes


def _configure_logging(verbosity: int) -> None:
    if verbosity <= 0:
        return
    level = logging.DEBUG if verbosity > 1 else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point used by ``python -m alerting_chain_audit``."""

    args = parse_args(argv)
    _configure_logging(args.verbose)

    if args.workers < 1:
        print("Error: --workers must be at least 1.", file=sys.stderr)
        return 1

    try:
        attributes = _parse_attributes(args.attributes)
        available: Dict[str, AlertingRule] = dict(DEFAULT_RULES)
        if args.rules_file:
            for rule in load_rules_file(args.rules_file):
                available[rule.control_id.lower()] = rule
    except (OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    if args.primary_region:
        attributes[PRIMARY_REGION_ATTRIBUTE] = args.primary_region

    selected_ids = list(args.rules) if args.rules else sorted(available)
    if args.compliance:
        try:
            compliance_ids = expand_compliance_frameworks(args.compliance, available)
        except (RuntimeError, ValueError) as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1

        if args.rules:
            filtered_ids = []
            excluded_ids = []
            for control_id in args.rules:
                if control_id.lower() in compliance_ids:
                    filtered_ids.append(control_id)
                else:
                    excluded_ids.append(control_id)

            if excluded_ids:
                print(
                    "Warning: Ignoring rules not covered by the selected compliance "
                    f"frameworks: {', '.join(sorted(set(excluded_ids)))}",
                    file=sys.stderr,
                )

            if not filtered_ids:
                print(
                    "Error: None of the requested rules are part of the selected compliance frameworks.",
                    file=sys.stderr,
                )
                return 1

            selected_ids = filtered_ids
        else:
            selected_ids = sorted(compliance_ids)

    try:
        rules = select_rules(selected_ids, available)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    gateway: ResourceGateway
    if args.snapshot_path:
        try:
            gateway = load_snapshot(args.snapshot_path)
        except (OSError, ValueError) as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1
        region = args.region
    else:
        session = boto3.Session(profile_name=args.profile, region_name=args.region)
        gateway = Boto3ResourceGateway(session)
        region = session.region_name

    context = EvaluationContext(region=region, attributes=attributes)
    verdicts = evaluate_rules(gateway, rules, context, max_workers=args.workers)
    print_verdicts(verdicts)

    if args.json_path:
        with open(args.json_path, "w", encoding="utf-8") as fh:
            json.dump([verdict.to_dict() for verdict in verdicts], fh, indent=2, default=str)
        print(f"Verdicts exported to {args.json_path}")

    return 2 if any(is_actionable(verdict) for verdict in verdicts) else 0


__all__ = ["main", "parse_args"]
