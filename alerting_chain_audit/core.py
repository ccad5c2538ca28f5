"""Core orchestration utilities for the alerting-chain audit."""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
import logging
from typing import Iterable, List, Mapping, Optional, Sequence

from .engine import EvaluationContext, RuleEngine
from .errors import GatewayUnavailableError
from .findings import Verdict
from .gateway import ResourceGateway, SnapshotGateway
from .rules import DEFAULT_RULES, AlertingRule
from .utils import verdict_from_exception

logger = logging.getLogger(__name__)


def select_rules(
    control_ids: Iterable[str],
    available: Mapping[str, AlertingRule] = DEFAULT_RULES,
) -> List[AlertingRule]:
    """Return the rules named by *control_ids*, de-duplicated and in request order."""

    normalized = {key.lower(): rule for key, rule in available.items()}
    selected: List[AlertingRule] = []
    for control_id in dict.fromkeys(item.strip().lower() for item in control_ids):
        if control_id not in normalized:
            valid = ", ".join(sorted(normalized))
            raise ValueError(f"Unknown rule '{control_id}'. Valid rules: {valid}")
        selected.append(normalized[control_id])
    return selected


def evaluate_rules(
    gateway: ResourceGateway,
    rules: Sequence[AlertingRule],
    context: Optional[EvaluationContext] = None,
    *,
    max_workers: int = 1,
) -> List[Verdict]:
    """Evaluate every rule against one snapshot of *gateway*.

    Returns one verdict per rule in the order given. A rule whose lookups hit
    an unreachable data source yields an ``ERROR`` verdict instead of aborting
    the run.
    """

    engine = RuleEngine(SnapshotGateway(gateway), context)

    def evaluate(rule: AlertingRule) -> Verdict:
        try:
            return engine.evaluate(rule)
        except GatewayUnavailableError as exc:
            logger.warning("Could not evaluate %s: %s", rule.control_id, exc)
            return verdict_from_exception(
                rule,
                "Resource lookup failed",
                exc,
                applicability_note=engine.applicability(rule),
            )

    if max_workers > 1 and len(rules) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            return list(executor.map(evaluate, rules))
    return [evaluate(rule) for rule in rules]


def is_actionable(verdict: Verdict) -> bool:
    """Return ``True`` for verdicts that should fail an audit run."""

    return not verdict.passed and verdict.impact > 0.0


def print_verdicts(verdicts: Iterable[Verdict]) -> None:
    """Pretty-print verdicts and their reasons to stdout."""

    verdicts = list(verdicts)
    if not verdicts:
        print("No rules evaluated.")
        return

    header = f"{'Control':<28} {'Status':<13} {'Impact':<6} Title"
    print(header)
    print("-" * len(header))
    for verdict in verdicts:
        title = (verdict.title[:57] + "...") if len(verdict.title) > 60 else verdict.title
        print(f"{verdict.control_id:<28} {verdict.status:<13} {verdict.impact:<6.1f} {title}")
        for reason in verdict.reasons:
            print(f"    {reason}")


__all__ = [
    "evaluate_rules",
    "is_actionable",
    "print_verdicts",
    "select_rules",
]
