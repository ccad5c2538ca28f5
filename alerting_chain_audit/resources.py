"""Point-in-time snapshots of the resources that make up an alerting chain."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class ReadWriteType(str, Enum):
    """Read/write scope of a CloudTrail management event selector."""

    READ_ONLY = "ReadOnly"
    WRITE_ONLY = "WriteOnly"
    ALL = "All"


@dataclass(frozen=True)
class EventSelector:
    """Management event coverage for a trail."""

    include_management_events: bool
    read_write_type: ReadWriteType = ReadWriteType.ALL

    def covers_all_management_events(self) -> bool:
        return self.include_management_events and self.read_write_type is ReadWriteType.ALL


@dataclass(frozen=True)
class Trail:
    """A CloudTrail trail and the status attributes relevant to alerting."""

    name: str
    arn: str
    is_multi_region: bool = False
    is_logging: bool = False
    log_group_arn: Optional[str] = None
    event_selectors: List[EventSelector] = field(default_factory=list)
    home_region: Optional[str] = None

    def has_full_management_coverage(self) -> bool:
        """Return ``True`` when a selector captures all management events."""

        return any(selector.covers_all_management_events() for selector in self.event_selectors)

    def compliance_problems(self) -> List[str]:
        """Return the reasons this trail cannot back a compliant alerting chain."""

        problems: List[str] = []
        if not self.is_multi_region:
            problems.append("is not multi-region")
        if not self.is_logging:
            problems.append("is not logging")
        if not self.has_full_management_coverage():
            problems.append("has no event selector for all (read and write) management events")
        return problems

    def is_compliant(self) -> bool:
        return not self.compliance_problems()


@dataclass(frozen=True)
class MetricFilter:
    """A CloudWatch Logs metric filter and the metric it publishes."""

    filter_name: str
    log_group_name: str
    pattern: str
    metric_name: Optional[str] = None
    metric_namespace: Optional[str] = None

    def has_metric(self) -> bool:
        """Return ``True`` unless the metric transformation is entirely absent."""

        return not (self.metric_name is None and self.metric_namespace is None)


@dataclass(frozen=True)
class Alarm:
    """A CloudWatch alarm keyed by the metric it watches."""

    alarm_name: str
    metric_name: str
    metric_namespace: str
    alarm_actions: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class NotificationTopic:
    """An SNS topic and its confirmed subscriber count."""

    arn: str
    confirmed_subscription_count: int = 0


__all__ = [
    "Alarm",
    "EventSelector",
    "MetricFilter",
    "NotificationTopic",
    "ReadWriteType",
    "Trail",
]
