"""Shared helpers for AWS lookups and verdict construction."""
from __future__ import annotations

from typing import Iterator, List, Optional

import boto3
from botocore.exceptions import ClientError, OperationNotPageableError

from .findings import CheckResult, Verdict
from .rules import AlertingRule


def safe_paginate(client: boto3.client, method_name: str, result_key: str, **kwargs) -> Iterator[dict]:
    """Iterate through paginated boto3 results while handling pagination gaps."""

    try:
        paginator = client.get_paginator(method_name)
    except OperationNotPageableError:
        response = getattr(client, method_name)(**kwargs)
        for item in response.get(result_key, []):
            yield item
        return

    for page in paginator.paginate(**kwargs):
        for item in page.get(result_key, []):
            yield item


def error_code(exc: Exception) -> str:
    """Return the AWS error code from a botocore exception, if present."""

    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Code", "")
    return ""


def verdict_from_exception(
    rule: AlertingRule,
    action: str,
    exc: Exception,
    *,
    applicability_note: Optional[str] = None,
) -> Verdict:
    """Create an ``ERROR`` :class:`Verdict` describing an exception raised by ``action``.

    The verdict carries the rule's configured impact unless
    ``applicability_note`` says the rule does not apply, in which case the
    impact is ``0.0`` and the note leads the reasons.
    """

    action = action.rstrip(".")
    checks: List[CheckResult] = []
    impact = rule.impact
    if applicability_note is not None:
        impact = 0.0
        checks.append(CheckResult("NOTE", applicability_note))
    checks.append(CheckResult("INCONCLUSIVE", f"{action}: {exc}"))
    return Verdict(
        control_id=rule.control_id,
        title=rule.title,
        status="ERROR",
        impact=impact,
        checks=checks,
    )


__all__ = ["error_code", "safe_paginate", "verdict_from_exception"]
