"""Tests for rule configuration, registry and compliance presets."""

from __future__ import annotations

import json
import sys
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest

from alerting_chain_audit.compliance import expand_compliance_frameworks, framework_index
from alerting_chain_audit.rules import (
    DEFAULT_RULES,
    AlertingRule,
    ResolutionStrategy,
    RuleRegistry,
    load_rules_file,
    rule_from_dict,
)


def test_builtin_rules_are_registered() -> None:
    """Both shipped controls are discovered from the rules package."""

    assert "cis-aws-foundations-4.1" in DEFAULT_RULES
    assert "cis-aws-foundations-3.10" in DEFAULT_RULES

    security_groups = DEFAULT_RULES["cis-aws-foundations-3.10"]
    assert security_groups.strategy is ResolutionStrategy.TRAIL_FIRST
    assert security_groups.primary_region_attribute == "default_aws_region"
    assert DEFAULT_RULES["cis-aws-foundations-4.1"].strategy is ResolutionStrategy.FILTER_FIRST


def test_registry_rejects_conflicting_duplicates() -> None:
    """Registering a different rule under an existing identifier fails."""

    registry = RuleRegistry()
    rule = AlertingRule(control_id="Custom-1", title="Custom", pattern="{ $.x = 1 }")
    registry.register(rule)
    registry.register(rule)

    assert "custom-1" in registry
    assert registry["CUSTOM-1"] is rule
    with pytest.raises(ValueError):
        registry.register(AlertingRule(control_id="custom-1", title="Other", pattern="{ $.y = 1 }"))


def test_rule_validation() -> None:
    """Rules need a pattern and an impact within [0, 1]."""

    with pytest.raises(ValueError):
        AlertingRule(control_id="x", title="x", pattern="")
    with pytest.raises(ValueError):
        AlertingRule(control_id="x", title="x", pattern="p", impact=1.5)


def test_rule_from_dict_parses_strategy_and_defaults() -> None:
    rule = rule_from_dict(
        {
            "control_id": "custom-2",
            "title": "Console sign-in without MFA",
            "pattern": '{ ($.eventName = "ConsoleLogin") }',
            "strategy": "trail-first",
            "impact": 0.3,
        }
    )

    assert rule.strategy is ResolutionStrategy.TRAIL_FIRST
    assert rule.impact == pytest.approx(0.3)
    assert rule.primary_region_attribute is None


def test_rule_from_dict_rejects_unknown_strategy() -> None:
    with pytest.raises(ValueError, match="Unknown resolution strategy"):
        rule_from_dict({"control_id": "c", "title": "t", "pattern": "p", "strategy": "guess"})
    with pytest.raises(ValueError, match="missing required key"):
        rule_from_dict({"control_id": "c"})


def test_load_rules_file(tmp_path) -> None:
    """Rule files hold a JSON list of definitions."""

    path = tmp_path / "rules.json"
    path.write_text(json.dumps([{"control_id": "c", "title": "t", "pattern": "p"}]), encoding="utf-8")

    [rule] = load_rules_file(str(path))

    assert rule.control_id == "c"
    assert rule.strategy is ResolutionStrategy.FILTER_FIRST

    path.write_text(json.dumps({"control_id": "c"}), encoding="utf-8")
    with pytest.raises(ValueError, match="JSON list"):
        load_rules_file(str(path))


def test_expand_compliance_frameworks() -> None:
    """Framework presets expand to the rules that declare them."""

    assert expand_compliance_frameworks(["CIS"]) == {
        "cis-aws-foundations-3.10",
        "cis-aws-foundations-4.1",
    }
    assert expand_compliance_frameworks(["cis-aws-foundations-v1.2"]) == {"cis-aws-foundations-3.10"}
    with pytest.raises(ValueError, match="Unknown compliance framework"):
        expand_compliance_frameworks(["hipaa"])


def test_rule_from_dict_reads_frameworks() -> None:
    """JSON rules can join a framework preset, normalized to lower case."""

    rule = rule_from_dict(
        {"control_id": "custom-3", "title": "t", "pattern": "p", "frameworks": [" CIS ", "internal", "cis"]}
    )

    assert rule.frameworks == ("cis", "internal")
    assert framework_index({"custom-3": rule}) == {"cis": ("custom-3",), "internal": ("custom-3",)}
    with pytest.raises(ValueError, match="frameworks must be a list of strings"):
        rule_from_dict({"control_id": "c", "title": "t", "pattern": "p", "frameworks": "cis"})


def test_framework_membership_comes_from_rules() -> None:
    """A rule that declares no frameworks is left out of every preset."""

    rules = dict(DEFAULT_RULES)
    rules["custom-4"] = AlertingRule(control_id="custom-4", title="t", pattern="p")

    assert "custom-4" not in expand_compliance_frameworks(["cis"], rules)
    assert framework_index(rules) == framework_index()
