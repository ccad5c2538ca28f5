"""Resolve the trail → log group → metric filter → alarm → topic chain for a rule."""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import List, Optional

from .arns import extract_log_group_name, references_log_group
from .gateway import ResourceGateway
from .resources import Alarm, MetricFilter, NotificationTopic, Trail
from .rules import AlertingRule, ResolutionStrategy

logger = logging.getLogger(__name__)


@dataclass
class TopicLink:
    """An alarm action and the topic it resolved to, if any."""

    arn: str
    topic: Optional[NotificationTopic]


@dataclass
class ChainBranch:
    """One candidate path from trails through to notification topics.

    ``metric_filter`` is ``None`` when no filter matched; ``alarm`` is only
    looked up when the filter publishes a metric, and ``topics`` only when the
    alarm exists.
    """

    log_group_name: Optional[str]
    trails: List[Trail] = field(default_factory=list)
    metric_filter: Optional[MetricFilter] = None
    alarm: Optional[Alarm] = None
    topics: List[TopicLink] = field(default_factory=list)
    log_group_arn: Optional[str] = None
    unparseable: bool = False
    unparseable_trails: List[Trail] = field(default_factory=list)

    @property
    def short_circuited(self) -> bool:
        """Return ``True`` when alarm and topic checks do not apply to this branch."""

        return self.metric_filter is None or not self.metric_filter.has_metric()


@dataclass
class ChainBundle:
    """All branches resolved for a rule's pattern."""

    strategy: ResolutionStrategy
    pattern: str
    trails_found: int
    branches: List[ChainBranch] = field(default_factory=list)


class ChainResolver:
    """Walk the alerting chain for a rule using its configured strategy."""

    def __init__(self, gateway: ResourceGateway) -> None:
        self._gateway = gateway

    def resolve(self, rule: AlertingRule) -> ChainBundle:
        if rule.strategy is ResolutionStrategy.TRAIL_FIRST:
            return self._resolve_trail_first(rule.pattern)
        return self._resolve_filter_first(rule.pattern)

    def _resolve_filter_first(self, pattern: str) -> ChainBundle:
        metric_filter = self._gateway.get_metric_filter(pattern)
        trails = self._gateway.get_trails()
        bundle = ChainBundle(
            strategy=ResolutionStrategy.FILTER_FIRST,
            pattern=pattern,
            trails_found=len(trails),
        )
        if metric_filter is None:
            logger.debug("No metric filter matches pattern %r", pattern)
            bundle.branches.append(ChainBranch(log_group_name=None))
            return bundle

        log_group_name = metric_filter.log_group_name
        branch = ChainBranch(log_group_name=log_group_name, metric_filter=metric_filter)
        for trail in trails:
            if references_log_group(trail.log_group_arn, log_group_name):
                branch.trails.append(trail)
            elif trail.log_group_arn and extract_log_group_name(trail.log_group_arn) is None:
                branch.unparseable_trails.append(trail)
        self._resolve_alarm(branch)
        bundle.branches.append(branch)
        return bundle

    def _resolve_trail_first(self, pattern: str) -> ChainBundle:
        trails = self._gateway.get_trails()
        bundle = ChainBundle(
            strategy=ResolutionStrategy.TRAIL_FIRST,
            pattern=pattern,
            trails_found=len(trails),
        )
        for trail in trails:
            log_group_name = extract_log_group_name(trail.log_group_arn)
            branch = ChainBranch(
                log_group_name=log_group_name,
                trails=[trail],
                log_group_arn=trail.log_group_arn,
                unparseable=bool(trail.log_group_arn) and log_group_name is None,
            )
            if log_group_name is not None:
                branch.metric_filter = self._gateway.get_metric_filter(pattern, log_group_name)
                self._resolve_alarm(branch)
            bundle.branches.append(branch)
        return bundle

    def _resolve_alarm(self, branch: ChainBranch) -> None:
        if branch.short_circuited:
            return
        metric_filter = branch.metric_filter
        if metric_filter.metric_name is None or metric_filter.metric_namespace is None:
            return
        branch.alarm = self._gateway.get_alarm(
            metric_filter.metric_name, metric_filter.metric_namespace
        )
        if branch.alarm is None:
            return
        branch.topics = [
            TopicLink(arn=action, topic=self._gateway.get_topic(action))
            for action in dict.fromkeys(branch.alarm.alarm_actions)
        ]


__all__ = ["ChainBranch", "ChainBundle", "ChainResolver", "TopicLink"]
