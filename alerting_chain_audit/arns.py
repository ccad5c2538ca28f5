"""Helpers for recovering relationships encoded in AWS ARN strings."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

_LOG_GROUP_PATTERN = re.compile(r"log-group:([^:]+):")


@dataclass(frozen=True)
class Arn:
    """Structured view of an ``arn:partition:service:region:account:resource`` string."""

    partition: str
    service: str
    region: str
    account_id: str
    resource: str


def parse_arn(arn: Optional[str]) -> Optional[Arn]:
    """Split *arn* into its components, or return ``None`` when it is not an ARN."""

    if not arn or not arn.startswith("arn:"):
        return None
    parts = arn.split(":", 5)
    if len(parts) < 6:
        return None
    _, partition, service, region, account_id, resource = parts
    if not partition or not service or not resource:
        return None
    return Arn(
        partition=partition,
        service=service,
        region=region,
        account_id=account_id,
        resource=resource,
    )


def extract_log_group_name(arn: Optional[str]) -> Optional[str]:
    """Return the log group name embedded in a CloudWatch Logs ARN.

    ``arn:aws:logs:eu-west-1:111111111111:log-group:NewGroup:*`` yields
    ``NewGroup``. ``None`` is returned for a missing or non-matching ARN; a
    trail without CloudWatch Logs integration is an expected state, not an
    error.
    """

    if not arn:
        return None
    match = _LOG_GROUP_PATTERN.search(arn)
    if match is None:
        return None
    return match.group(1)


def references_log_group(arn: Optional[str], log_group_name: str) -> bool:
    """Return ``True`` when ``log-group:<log_group_name>:`` appears literally in *arn*."""

    if not arn or not log_group_name:
        return False
    return re.search(f"log-group:{re.escape(log_group_name)}:", arn) is not None


__all__ = ["Arn", "extract_log_group_name", "parse_arn", "references_log_group"]
