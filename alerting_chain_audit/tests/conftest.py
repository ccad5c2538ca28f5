"""Shared fixtures for alerting-chain audit tests."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


from alerting_chain_audit.resources import (
    Alarm,
    EventSelector,
    MetricFilter,
    NotificationTopic,
    ReadWriteType,
    Trail,
)
from alerting_chain_audit.rules.security_group_changes import SECURITY_GROUP_CHANGES
from alerting_chain_audit.rules.unauthorized_api_calls import UNAUTHORIZED_API_CALLS

ACCOUNT_ID = "111111111111"
LOG_GROUP_NAME = "CloudTrail/Audit"
LOG_GROUP_ARN = f"arn:aws:logs:us-east-1:{ACCOUNT_ID}:log-group:{LOG_GROUP_NAME}:*"
TOPIC_ARN = f"arn:aws:sns:us-east-1:{ACCOUNT_ID}:security-alerts"
SECOND_TOPIC_ARN = f"arn:aws:sns:us-east-1:{ACCOUNT_ID}:pager"


def make_trail(name: str = "org-trail", **overrides: Any) -> Trail:
    """Return a trail that satisfies every compliance requirement unless overridden."""

    values: Dict[str, Any] = {
        "name": name,
        "arn": f"arn:aws:cloudtrail:us-east-1:{ACCOUNT_ID}:trail/{name}",
        "is_multi_region": True,
        "is_logging": True,
        "log_group_arn": LOG_GROUP_ARN,
        "event_selectors": [EventSelector(include_management_events=True, read_write_type=ReadWriteType.ALL)],
        "home_region": "us-east-1",
    }
    values.update(overrides)
    return Trail(**values)


def make_filter(pattern: str, name: str = "alert-filter", **overrides: Any) -> MetricFilter:
    values: Dict[str, Any] = {
        "filter_name": name,
        "log_group_name": LOG_GROUP_NAME,
        "pattern": pattern,
        "metric_name": f"{name}-metric",
        "metric_namespace": "CISBenchmark",
    }
    values.update(overrides)
    return MetricFilter(**values)


def make_alarm(metric_filter: MetricFilter, *actions: str) -> Alarm:
    return Alarm(
        alarm_name=f"{metric_filter.filter_name}-alarm",
        metric_name=metric_filter.metric_name,
        metric_namespace=metric_filter.metric_namespace,
        alarm_actions=list(actions),
    )


def make_topic(arn: str = TOPIC_ARN, confirmed: int = 1) -> NotificationTopic:
    return NotificationTopic(arn=arn, confirmed_subscription_count=confirmed)


@pytest.fixture
def filter_first_rule():
    return UNAUTHORIZED_API_CALLS


@pytest.fixture
def trail_first_rule():
    return SECURITY_GROUP_CHANGES
