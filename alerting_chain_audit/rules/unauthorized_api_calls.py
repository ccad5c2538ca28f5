"""Unauthorized API calls must be monitored."""
from __future__ import annotations

from . import AlertingRule, ResolutionStrategy, register_rule

UNAUTHORIZED_API_CALLS = register_rule(
    AlertingRule(
        control_id="cis-aws-foundations-4.1",
        title="Ensure unauthorized API calls are monitored",
        pattern='{ ($.errorCode = "*UnauthorizedOperation") || ($.errorCode = "AccessDenied*") }',
        impact=0.5,
        strategy=ResolutionStrategy.FILTER_FIRST,
        frameworks=("cis", "cis-aws-foundations-v3.0"),
    )
)

__all__ = ["UNAUTHORIZED_API_CALLS"]
