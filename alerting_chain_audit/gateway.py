"""Resource gateways that supply alerting-chain snapshots."""
from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, Hashable, List, Mapping, Optional, Protocol, TypeVar

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from .errors import GatewayUnavailableError
from .resources import Alarm, EventSelector, MetricFilter, NotificationTopic, ReadWriteType, Trail
from .utils import error_code, safe_paginate

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Error codes that mean "the resource does not exist" rather than "the
# service could not answer".
NOT_FOUND_ERROR_CODES = frozenset(
    {
        "InvalidParameter",
        "NotFound",
        "NotFoundException",
        "ResourceNotFoundException",
        "TrailNotFoundException",
    }
)

DEFAULT_CLIENT_CONFIG = Config(retries={"max_attempts": 5, "mode": "standard"})


class ResourceGateway(Protocol):
    """Read-only source of alerting-chain resources."""

    def get_trails(self) -> List[Trail]:
        ...

    def get_trail(self, identifier: str) -> Optional[Trail]:
        ...

    def get_metric_filter(
        self, pattern: str, log_group_name: Optional[str] = None
    ) -> Optional[MetricFilter]:
        ...

    def get_alarm(self, metric_name: str, metric_namespace: str) -> Optional[Alarm]:
        ...

    def get_topic(self, arn: str) -> Optional[NotificationTopic]:
        ...


class Boto3ResourceGateway:
    """Gateway backed by live CloudTrail, CloudWatch Logs, CloudWatch and SNS APIs."""

    def __init__(
        self,
        session: boto3.session.Session,
        *,
        client_config: Optional[Config] = None,
    ) -> None:
        config = client_config or DEFAULT_CLIENT_CONFIG
        self.region = session.region_name
        self._cloudtrail = session.client("cloudtrail", config=config)
        self._logs = session.client("logs", config=config)
        self._cloudwatch = session.client("cloudwatch", config=config)
        self._sns = session.client("sns", config=config)

    def _call(self, operation: str, func: Callable[[], T]) -> Optional[T]:
        """Run *func*, mapping not-found errors to ``None`` and others to gateway errors."""

        logger.debug("Calling %s", operation)
        try:
            return func()
        except ClientError as exc:
            if error_code(exc) in NOT_FOUND_ERROR_CODES:
                logger.debug("%s reported %s", operation, error_code(exc))
                return None
            logger.warning("%s failed: %s", operation, exc)
            raise GatewayUnavailableError(operation, str(exc)) from exc
        except BotoCoreError as exc:
            logger.warning("%s failed: %s", operation, exc)
            raise GatewayUnavailableError(operation, str(exc)) from exc

    def get_trails(self) -> List[Trail]:
        response = self._call(
            "DescribeTrails",
            lambda: self._cloudtrail.describe_trails(includeShadowTrails=True),
        )
        if response is None:
            return []
        return [self._build_trail(data) for data in response.get("trailList", [])]

    def get_trail(self, identifier: str) -> Optional[Trail]:
        response = self._call(
            f"DescribeTrails({identifier})",
            lambda: self._cloudtrail.describe_trails(trailNameList=[identifier]),
        )
        if not response or not response.get("trailList"):
            return None
        return self._build_trail(response["trailList"][0])

    def _build_trail(self, data: Mapping[str, Any]) -> Trail:
        arn = data.get("TrailARN") or data.get("Name", "")
        status = self._call(
            f"GetTrailStatus({arn})",
            lambda: self._cloudtrail.get_trail_status(Name=arn),
        )
        selectors = self._call(
            f"GetEventSelectors({arn})",
            lambda: self._cloudtrail.get_event_selectors(TrailName=arn),
        )
        return Trail(
            name=data.get("Name", arn),
            arn=arn,
            is_multi_region=bool(data.get("IsMultiRegionTrail", False)),
            is_logging=bool(status and status.get("IsLogging", False)),
            log_group_arn=data.get("CloudWatchLogsLogGroupArn") or None,
            event_selectors=_parse_event_selectors(selectors or {}),
            home_region=data.get("HomeRegion"),
        )

    def get_metric_filter(
        self, pattern: str, log_group_name: Optional[str] = None
    ) -> Optional[MetricFilter]:
        kwargs: Dict[str, str] = {"logGroupName": log_group_name} if log_group_name else {}
        filters = self._call(
            f"DescribeMetricFilters({log_group_name or '*'})",
            lambda: list(safe_paginate(self._logs, "describe_metric_filters", "metricFilters", **kwargs)),
        )
        for data in filters or []:
            if data.get("filterPattern") != pattern:
                continue
            transformations = data.get("metricTransformations") or [{}]
            return MetricFilter(
                filter_name=data.get("filterName", ""),
                log_group_name=data.get("logGroupName", log_group_name or ""),
                pattern=pattern,
                metric_name=transformations[0].get("metricName"),
                metric_namespace=transformations[0].get("metricNamespace"),
            )
        return None

    def get_alarm(self, metric_name: str, metric_namespace: str) -> Optional[Alarm]:
        response = self._call(
            f"DescribeAlarmsForMetric({metric_namespace}/{metric_name})",
            lambda: self._cloudwatch.describe_alarms_for_metric(
                MetricName=metric_name, Namespace=metric_namespace
            ),
        )
        alarms = (response or {}).get("MetricAlarms", [])
        if not alarms:
            return None
        data = alarms[0]
        return Alarm(
            alarm_name=data.get("AlarmName", ""),
            metric_name=data.get("MetricName", metric_name),
            metric_namespace=data.get("Namespace", metric_namespace),
            alarm_actions=list(dict.fromkeys(data.get("AlarmActions", []))),
        )

    def get_topic(self, arn: str) -> Optional[NotificationTopic]:
        response = self._call(
            f"GetTopicAttributes({arn})",
            lambda: self._sns.get_topic_attributes(TopicArn=arn),
        )
        if response is None:
            return None
        attributes = response.get("Attributes", {})
        try:
            confirmed = int(attributes.get("SubscriptionsConfirmed", 0))
        except (TypeError, ValueError):
            confirmed = 0
        return NotificationTopic(arn=arn, confirmed_subscription_count=max(confirmed, 0))


def _parse_event_selectors(response: Mapping[str, Any]) -> List[EventSelector]:
    """Return management event coverage from a ``GetEventSelectors`` response."""

    selectors: List[EventSelector] = []
    for data in response.get("EventSelectors") or []:
        try:
            read_write_type = ReadWriteType(data.get("ReadWriteType", "All"))
        except ValueError:
            continue
        selectors.append(
            EventSelector(
                include_management_events=bool(data.get("IncludeManagementEvents", True)),
                read_write_type=read_write_type,
            )
        )

    # Advanced selectors express the same thing through field conditions.
    for data in response.get("AdvancedEventSelectors") or []:
        fields = {
            item.get("Field"): item.get("Equals") or []
            for item in data.get("FieldSelectors", [])
        }
        if "Management" not in fields.get("eventCategory", []):
            continue
        read_only = fields.get("readOnly")
        if read_only == ["true"]:
            read_write_type = ReadWriteType.READ_ONLY
        elif read_only == ["false"]:
            read_write_type = ReadWriteType.WRITE_ONLY
        else:
            read_write_type = ReadWriteType.ALL
        selectors.append(EventSelector(include_management_events=True, read_write_type=read_write_type))
    return selectors


class SnapshotGateway:
    """Memoize another gateway so one evaluation run sees a single snapshot.

    Failed lookups are not cached. The cache is shared safely between threads
    evaluating different rules.
    """

    def __init__(self, inner: ResourceGateway) -> None:
        self._inner = inner
        self._cache: Dict[Hashable, Any] = {}
        self._lock = threading.Lock()

    def _cached(self, key: Hashable, loader: Callable[[], T]) -> T:
        with self._lock:
            if key in self._cache:
                return self._cache[key]
        value = loader()
        with self._lock:
            return self._cache.setdefault(key, value)

    def get_trails(self) -> List[Trail]:
        return list(self._cached(("trails",), lambda: tuple(self._inner.get_trails())))

    def get_trail(self, identifier: str) -> Optional[Trail]:
        return self._cached(("trail", identifier), lambda: self._inner.get_trail(identifier))

    def get_metric_filter(
        self, pattern: str, log_group_name: Optional[str] = None
    ) -> Optional[MetricFilter]:
        return self._cached(
            ("metric_filter", pattern, log_group_name),
            lambda: self._inner.get_metric_filter(pattern, log_group_name),
        )

    def get_alarm(self, metric_name: str, metric_namespace: str) -> Optional[Alarm]:
        return self._cached(
            ("alarm", metric_name, metric_namespace),
            lambda: self._inner.get_alarm(metric_name, metric_namespace),
        )

    def get_topic(self, arn: str) -> Optional[NotificationTopic]:
        return self._cached(("topic", arn), lambda: self._inner.get_topic(arn))


__all__ = [
    "Boto3ResourceGateway",
    "DEFAULT_CLIENT_CONFIG",
    "NOT_FOUND_ERROR_CODES",
    "ResourceGateway",
    "SnapshotGateway",
]
