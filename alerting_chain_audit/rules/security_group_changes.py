"""Security group changes must be monitored in the primary region."""
from __future__ import annotations

from . import AlertingRule, ResolutionStrategy, register_rule

SECURITY_GROUP_CHANGES = register_rule(
    AlertingRule(
        control_id="cis-aws-foundations-3.10",
        title="Ensure a log metric filter and alarm exist for security group changes",
        pattern=(
            "{ ($.eventName = AuthorizeSecurityGroupIngress) || "
            "($.eventName = AuthorizeSecurityGroupEgress) || "
            "($.eventName = RevokeSecurityGroupIngress) || "
            "($.eventName = RevokeSecurityGroupEgress) || "
            "($.eventName = CreateSecurityGroup) || "
            "($.eventName = DeleteSecurityGroup) }"
        ),
        impact=0.7,
        strategy=ResolutionStrategy.TRAIL_FIRST,
        primary_region_attribute="default_aws_region",
        frameworks=("cis", "cis-aws-foundations-v1.2"),
    )
)

__all__ = ["SECURITY_GROUP_CHANGES"]
