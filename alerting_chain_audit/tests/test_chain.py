"""Tests for alerting-chain resolution strategies."""

from __future__ import annotations

import sys
from pathlib import Path
from unittest.mock import MagicMock, call


PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


from alerting_chain_audit.chain import ChainResolver
from alerting_chain_audit.rules import ResolutionStrategy
from alerting_chain_audit.snapshot import StaticResourceGateway

from conftest import TOPIC_ARN, make_alarm, make_filter, make_topic, make_trail


def test_filter_first_selects_trails_by_log_group_segment(filter_first_rule) -> None:
    """Only trails whose ARN contains ``log-group:<name>:`` are associated."""

    metric_filter = make_filter(filter_first_rule.pattern)
    other = make_trail("other", log_group_arn="arn:aws:logs:us-east-1:111111111111:log-group:CloudTrail/Audit2:*")
    gateway = StaticResourceGateway(
        trails=[make_trail("main"), other, make_trail("no-logs", log_group_arn=None)],
        metric_filters=[metric_filter],
        alarms=[make_alarm(metric_filter, TOPIC_ARN, TOPIC_ARN)],
        topics=[make_topic()],
    )

    bundle = ChainResolver(gateway).resolve(filter_first_rule)

    assert bundle.strategy is ResolutionStrategy.FILTER_FIRST
    assert bundle.trails_found == 3
    [branch] = bundle.branches
    assert branch.log_group_name == "CloudTrail/Audit"
    assert [trail.name for trail in branch.trails] == ["main"]
    assert branch.alarm is not None
    assert [link.arn for link in branch.topics] == [TOPIC_ARN]


def test_trail_first_looks_up_filters_per_log_group(trail_first_rule) -> None:
    """Each trail's own log group scopes its metric filter lookup."""

    gateway = MagicMock()
    gateway.get_trails.return_value = [
        make_trail("a", log_group_arn="arn:aws:logs:us-east-1:111111111111:log-group:GroupA:*"),
        make_trail("b", log_group_arn="arn:aws:logs:us-east-1:111111111111:log-group:GroupB:*"),
        make_trail("c", log_group_arn=None),
    ]
    gateway.get_metric_filter.return_value = None

    bundle = ChainResolver(gateway).resolve(trail_first_rule)

    assert [branch.log_group_name for branch in bundle.branches] == ["GroupA", "GroupB", None]
    assert gateway.get_metric_filter.call_args_list == [
        call(trail_first_rule.pattern, "GroupA"),
        call(trail_first_rule.pattern, "GroupB"),
    ]
    gateway.get_alarm.assert_not_called()


def test_partial_metric_pair_skips_alarm_lookup(filter_first_rule) -> None:
    """A filter missing half of its metric pair cannot be matched to an alarm."""

    gateway = MagicMock()
    gateway.get_metric_filter.return_value = make_filter(filter_first_rule.pattern, metric_namespace=None)
    gateway.get_trails.return_value = [make_trail()]

    bundle = ChainResolver(gateway).resolve(filter_first_rule)

    assert not bundle.branches[0].short_circuited
    assert bundle.branches[0].alarm is None
    gateway.get_alarm.assert_not_called()
