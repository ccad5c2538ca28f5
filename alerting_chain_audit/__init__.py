"""CloudTrail alerting-chain compliance toolkit."""

from __future__ import annotations

from .arns import extract_log_group_name, parse_arn
from .core import evaluate_rules, print_verdicts, select_rules
from .engine import EvaluationContext, RuleEngine
from .errors import AuditError, GatewayUnavailableError
from .findings import CheckResult, Verdict
from .gateway import Boto3ResourceGateway, ResourceGateway, SnapshotGateway
from .rules import DEFAULT_RULES, AlertingRule, ResolutionStrategy
from .snapshot import StaticResourceGateway, load_snapshot

__all__ = [
    "AlertingRule",
    "AuditError",
    "Boto3ResourceGateway",
    "CheckResult",
    "DEFAULT_RULES",
    "EvaluationContext",
    "GatewayUnavailableError",
    "ResolutionStrategy",
    "ResourceGateway",
    "RuleEngine",
    "SnapshotGateway",
    "StaticResourceGateway",
    "Verdict",
    "evaluate_rules",
    "extract_log_group_name",
    "load_snapshot",
    "parse_arn",
    "print_verdicts",
    "select_rules",
]
