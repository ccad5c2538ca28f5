"""In-memory resource gateway for offline evaluation of recorded snapshots."""
from __future__ import annotations

import json
from typing import Any, Iterable, List, Mapping, Optional

from .resources import Alarm, EventSelector, MetricFilter, NotificationTopic, ReadWriteType, Trail


class StaticResourceGateway:
    """Serve alerting-chain resources from fixed collections.

    Lookups return the first match in the order resources were supplied.
    """

    def __init__(
        self,
        *,
        trails: Iterable[Trail] = (),
        metric_filters: Iterable[MetricFilter] = (),
        alarms: Iterable[Alarm] = (),
        topics: Iterable[NotificationTopic] = (),
    ) -> None:
        self.trails = list(trails)
        self.metric_filters = list(metric_filters)
        self.alarms = list(alarms)
        self.topics = list(topics)

    def get_trails(self) -> List[Trail]:
        return list(self.trails)

    def get_trail(self, identifier: str) -> Optional[Trail]:
        return next(
            (trail for trail in self.trails if identifier in {trail.name, trail.arn}),
            None,
        )

    def get_metric_filter(
        self, pattern: str, log_group_name: Optional[str] = None
    ) -> Optional[MetricFilter]:
        for metric_filter in self.metric_filters:
            if metric_filter.pattern != pattern:
                continue
            if log_group_name is not None and metric_filter.log_group_name != log_group_name:
                continue
            return metric_filter
        return None

    def get_alarm(self, metric_name: str, metric_namespace: str) -> Optional[Alarm]:
        return next(
            (
                alarm
                for alarm in self.alarms
                if alarm.metric_name == metric_name and alarm.metric_namespace == metric_namespace
            ),
            None,
        )

    def get_topic(self, arn: str) -> Optional[NotificationTopic]:
        return next((topic for topic in self.topics if topic.arn == arn), None)

    @classmethod
    def from_dict(cls, document: Mapping[str, Any]) -> "StaticResourceGateway":
        """Build a gateway from a JSON-style snapshot document.

        The document holds optional ``trails``, ``metric_filters``, ``alarms``
        and ``topics`` lists whose entries use the dataclass field names.
        """

        if not isinstance(document, Mapping):
            raise ValueError("Snapshot document must be a JSON object")
        try:
            trails = [
                Trail(
                    name=item["name"],
                    arn=item.get("arn", item["name"]),
                    is_multi_region=bool(item.get("is_multi_region", False)),
                    is_logging=bool(item.get("is_logging", False)),
                    log_group_arn=item.get("log_group_arn") or None,
                    event_selectors=[
                        EventSelector(
                            include_management_events=bool(selector.get("include_management_events", True)),
                            read_write_type=ReadWriteType(selector.get("read_write_type", "All")),
                        )
                        for selector in item.get("event_selectors", [])
                    ],
                    home_region=item.get("home_region"),
                )
                for item in document.get("trails", [])
            ]
            metric_filters = [
                MetricFilter(
                    filter_name=item["filter_name"],
                    log_group_name=item["log_group_name"],
                    pattern=item["pattern"],
                    metric_name=item.get("metric_name"),
                    metric_namespace=item.get("metric_namespace"),
                )
                for item in document.get("metric_filters", [])
            ]
            alarms = [
                Alarm(
                    alarm_name=item["alarm_name"],
                    metric_name=item["metric_name"],
                    metric_namespace=item["metric_namespace"],
                    alarm_actions=list(dict.fromkeys(item.get("alarm_actions", []))),
                )
                for item in document.get("alarms", [])
            ]
            topics = [
                NotificationTopic(
                    arn=item["arn"],
                    confirmed_subscription_count=int(item.get("confirmed_subscription_count", 0)),
                )
                for item in document.get("topics", [])
            ]
        except KeyError as exc:
            raise ValueError(f"Snapshot entry is missing required key {exc}") from exc
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Snapshot document is malformed: {exc}") from exc

        return cls(trails=trails, metric_filters=metric_filters, alarms=alarms, topics=topics)


def load_snapshot(path: str) -> StaticResourceGateway:
    """Read a JSON snapshot from *path* and return a gateway serving it."""

    with open(path, "r", encoding="utf-8") as fh:
        try:
            document = json.load(fh)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Snapshot file '{path}' is not valid JSON: {exc}") from exc
    return StaticResourceGateway.from_dict(document)


__all__ = ["StaticResourceGateway", "load_snapshot"]
