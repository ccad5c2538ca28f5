"""Evaluate a single alerting rule against a resource gateway."""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Dict, List, Optional

from .arns import parse_arn
from .chain import ChainBranch, ChainBundle, ChainResolver, TopicLink
from .findings import CheckResult, Verdict
from .gateway import ResourceGateway
from .quantifiers import at_least_one, every, partition
from .resources import Trail
from .rules import AlertingRule, ResolutionStrategy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EvaluationContext:
    """Environment the rules are evaluated in.

    ``region`` is the region under inspection; ``attributes`` carries
    string-valued environment attributes such as ``default_aws_region``.
    """

    region: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)


@dataclass
class _BranchResult:
    checks: List[CheckResult]

    @property
    def passed(self) -> bool:
        return every(self.checks, lambda check: not check.failed)


class RuleEngine:
    """Resolve and score the alerting chain for rules, one verdict per rule.

    Missing resources become failing checks. Only
    :class:`~alerting_chain_audit.errors.GatewayUnavailableError` escapes
    :meth:`evaluate`.
    """

    def __init__(self, gateway: ResourceGateway, context: Optional[EvaluationContext] = None) -> None:
        self._gateway = gateway
        self._context = context or EvaluationContext()

    def evaluate(self, rule: AlertingRule) -> Verdict:
        checks: List[CheckResult] = []
        impact = rule.impact

        note = self.applicability(rule)
        if note is not None:
            impact = 0.0
            checks.append(CheckResult("NOTE", note))

        bundle = ChainResolver(self._gateway).resolve(rule)
        if bundle.strategy is ResolutionStrategy.TRAIL_FIRST:
            passed = self._evaluate_trail_first(bundle, checks)
        else:
            passed = self._evaluate_filter_first(bundle, checks)

        if passed:
            status = "PASSED"
        elif any(check.status == "INCONCLUSIVE" for check in checks):
            status = "INCONCLUSIVE"
        else:
            status = "FAILED"
        logger.info("%s evaluated as %s (impact %.1f)", rule.control_id, status, impact)
        return Verdict(
            control_id=rule.control_id,
            title=rule.title,
            status=status,
            impact=impact,
            checks=checks,
        )

    def applicability(self, rule: AlertingRule) -> Optional[str]:
        """Return a note when *rule* does not apply to the inspected region.

        A note means the rule's impact is reported as ``0.0``, whatever the
        outcome of the evaluation.
        """

        attribute = rule.primary_region_attribute
        if not attribute:
            return None
        primary_region = self._context.attributes.get(attribute)
        if primary_region and primary_region == self._context.region:
            return None
        if not primary_region:
            return (
                f"Primary region attribute '{attribute}' is not set; "
                f"currently inspected region {self._context.region} is not the primary AWS region"
            )
        return (
            f"Currently inspected region {self._context.region} is not the primary AWS region "
            f"({primary_region})"
        )

    def _evaluate_filter_first(self, bundle: ChainBundle, checks: List[CheckResult]) -> bool:
        branch = bundle.branches[0]
        branch_checks = _trail_checks(branch.trails, branch.log_group_name)
        # Unparseable ARNs only block the verdict while no trail is associated.
        unparseable_status = "NOTE" if branch.trails else "INCONCLUSIVE"
        branch_checks.extend(
            CheckResult(
                unparseable_status,
                f"{_trail_label(trail)} {_unparseable_detail(trail.log_group_arn)}",
            )
            for trail in branch.unparseable_trails
        )
        branch_checks.append(_metric_filter_check(branch))
        branch_checks.extend(_alarm_checks(branch))
        checks.extend(branch_checks)
        return _BranchResult(branch_checks).passed

    def _evaluate_trail_first(self, bundle: ChainBundle, checks: List[CheckResult]) -> bool:
        if bundle.trails_found == 0:
            checks.append(CheckResult("FAIL", "no CloudTrail trails found"))
            return False

        results: List[_BranchResult] = []
        for branch in bundle.branches:
            trail = branch.trails[0]
            branch_checks: List[CheckResult] = []
            if not branch.log_group_arn:
                branch_checks.append(
                    CheckResult("FAIL", "trail is not integrated with a CloudWatch Logs log group")
                )
            elif branch.unparseable:
                branch_checks.append(
                    CheckResult("INCONCLUSIVE", _unparseable_detail(branch.log_group_arn))
                )
            else:
                branch_checks.extend(_trail_checks(branch.trails, branch.log_group_name))
                branch_checks.append(_metric_filter_check(branch))
                branch_checks.extend(_alarm_checks(branch))
            checks.extend(
                CheckResult(check.status, f"trail '{trail.name}': {check.message}")
                for check in branch_checks
            )
            results.append(_BranchResult(branch_checks))

        if not at_least_one(bundle.branches, lambda branch: branch.metric_filter is not None):
            checks.append(
                CheckResult(
                    "FAIL",
                    "no associated trail: no trail's log group has a metric filter "
                    "with the required pattern",
                )
            )
        return at_least_one(results, lambda result: result.passed)


def _trail_label(trail: Trail) -> str:
    if trail.home_region:
        return f"trail '{trail.name}' ({trail.home_region})"
    return f"trail '{trail.name}'"


def _unparseable_detail(arn: Optional[str]) -> str:
    """Describe why a trail's log group ARN yielded no log group name."""

    parsed = parse_arn(arn)
    if parsed is None:
        return f"log group ARN '{arn}' could not be parsed"
    return (
        f"log group ARN '{arn}' could not be parsed: "
        f"{parsed.service} resource '{parsed.resource}' is not a log group"
    )


def _metric_filter_check(branch: ChainBranch) -> CheckResult:
    metric_filter = branch.metric_filter
    if metric_filter is None:
        if branch.log_group_name:
            return CheckResult(
                "FAIL",
                f"no metric filter with the required pattern exists on log group '{branch.log_group_name}'",
            )
        return CheckResult("FAIL", "no metric filter with the required pattern exists")
    return CheckResult(
        "PASS",
        f"metric filter '{metric_filter.filter_name}' exists on log group '{metric_filter.log_group_name}'",
    )


def _trail_checks(trails: List[Trail], log_group_name: Optional[str]) -> List[CheckResult]:
    """Check that the log group has trails and that one of them is compliant."""

    if not trails:
        if log_group_name:
            return [CheckResult("FAIL", f"no associated trail delivers to log group '{log_group_name}'")]
        return [CheckResult("FAIL", "no associated trail: the pattern is not tied to any log group")]

    if at_least_one(trails, Trail.is_compliant):
        compliant, _ = partition(trails, Trail.is_compliant)
        return [
            CheckResult(
                "PASS",
                f"{_trail_label(compliant[0])} is multi-region, logging and captures all management events",
            )
        ]
    return [
        CheckResult("FAIL", f"{_trail_label(trail)} {', '.join(trail.compliance_problems())}")
        for trail in trails
    ]


def _alarm_checks(branch: ChainBranch) -> List[CheckResult]:
    """Check the alarm and its topics; empty when the branch short-circuits."""

    metric_filter = branch.metric_filter
    if metric_filter is None:
        return []
    if not metric_filter.has_metric():
        return [
            CheckResult(
                "NOTE",
                f"metric filter '{metric_filter.filter_name}' publishes no metric; "
                "alarm and topic checks skipped",
            )
        ]

    metric_label = f"{metric_filter.metric_namespace}/{metric_filter.metric_name}"
    alarm = branch.alarm
    if alarm is None:
        return [CheckResult("FAIL", f"no alarm exists for metric {metric_label}")]

    checks = [CheckResult("PASS", f"alarm '{alarm.alarm_name}' exists for metric {metric_label}")]
    if not alarm.alarm_actions:
        checks.append(CheckResult("FAIL", f"alarm '{alarm.alarm_name}' has no alarm actions"))
        return checks

    checks.extend(_topic_check(link) for link in branch.topics)
    return checks


def _topic_check(link: TopicLink) -> CheckResult:
    if link.topic is None:
        return CheckResult("FAIL", f"topic '{link.arn}' does not exist")
    count = link.topic.confirmed_subscription_count
    if count < 1:
        return CheckResult("FAIL", f"topic '{link.arn}' has no confirmed subscriptions")
    return CheckResult("PASS", f"topic '{link.arn}' has {count} confirmed subscription(s)")


__all__ = ["EvaluationContext", "RuleEngine"]
