"""Alerting rule configuration and registry helpers."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import importlib
import json
import pkgutil
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple


class ResolutionStrategy(str, Enum):
    """How the alerting chain is located for a rule."""

    FILTER_FIRST = "filter-first"
    TRAIL_FIRST = "trail-first"


@dataclass(frozen=True)
class AlertingRule:
    """Configuration for one alerting-chain control.

    ``pattern`` is compared verbatim against stored metric filter patterns.
    When ``primary_region_attribute`` is set, the rule only carries impact in
    the region named by that environment attribute. ``frameworks`` names the
    compliance presets the rule belongs to.
    """

    control_id: str
    title: str
    pattern: str
    impact: float = 0.5
    strategy: ResolutionStrategy = ResolutionStrategy.FILTER_FIRST
    primary_region_attribute: Optional[str] = None
    frameworks: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "frameworks",
            tuple(dict.fromkeys(name.strip().lower() for name in self.frameworks if name.strip())),
        )
        if not self.control_id:
            raise ValueError("Rule control_id must be a non-empty string")
        if not self.pattern:
            raise ValueError(f"Rule '{self.control_id}' must define a filter pattern")
        if not 0.0 <= self.impact <= 1.0:
            raise ValueError(
                f"Rule '{self.control_id}' impact must be between 0.0 and 1.0, got {self.impact}"
            )


class RuleRegistry:
    """Registry that stores available alerting rules by control identifier."""

    def __init__(self) -> None:
        self._rules: Dict[str, AlertingRule] = {}

    @staticmethod
    def _normalize(control_id: str) -> str:
        if not control_id:
            raise ValueError("Control identifier must be a non-empty string")
        return control_id.strip().lower()

    def register(self, rule: AlertingRule) -> AlertingRule:
        """Add *rule* to the registry and return it."""

        normalized = self._normalize(rule.control_id)
        if normalized in self._rules and self._rules[normalized] != rule:
            raise ValueError(f"Rule '{rule.control_id}' is already registered")
        self._rules[normalized] = rule
        return rule

    def __contains__(self, control_id: object) -> bool:
        if not isinstance(control_id, str):
            return False
        return self._normalize(control_id) in self._rules

    def __getitem__(self, control_id: str) -> AlertingRule:
        return self._rules[self._normalize(control_id)]

    def keys(self) -> Iterator[str]:
        return iter(self._rules)

    def items(self) -> Iterator[tuple[str, AlertingRule]]:
        return iter(self._rules.items())

    def as_mapping(self) -> Mapping[str, AlertingRule]:
        return MappingProxyType(self._rules)


RULE_REGISTRY = RuleRegistry()
register_rule = RULE_REGISTRY.register


def get_rules() -> Mapping[str, AlertingRule]:
    """Return a read-only mapping of registered rules."""

    return RULE_REGISTRY.as_mapping()


def rule_from_dict(data: Mapping[str, Any]) -> AlertingRule:
    """Build an :class:`AlertingRule` from a JSON-style mapping."""

    if not isinstance(data, Mapping):
        raise ValueError(f"Rule definition must be an object, got {type(data).__name__}")
    missing = [key for key in ("control_id", "title", "pattern") if not data.get(key)]
    if missing:
        raise ValueError(f"Rule definition is missing required key(s): {', '.join(missing)}")

    strategy_value = data.get("strategy", ResolutionStrategy.FILTER_FIRST.value)
    try:
        strategy = ResolutionStrategy(strategy_value)
    except ValueError:
        valid = ", ".join(item.value for item in ResolutionStrategy)
        raise ValueError(
            f"Unknown resolution strategy '{strategy_value}'. Valid strategies: {valid}"
        ) from None

    try:
        impact = float(data.get("impact", 0.5))
    except (TypeError, ValueError):
        raise ValueError(f"Rule '{data['control_id']}' impact must be a number") from None

    frameworks = data.get("frameworks", [])
    if not isinstance(frameworks, (list, tuple)) or not all(isinstance(name, str) for name in frameworks):
        raise ValueError(f"Rule '{data['control_id']}' frameworks must be a list of strings")

    return AlertingRule(
        control_id=str(data["control_id"]),
        title=str(data["title"]),
        pattern=str(data["pattern"]),
        impact=impact,
        strategy=strategy,
        primary_region_attribute=data.get("primary_region_attribute") or None,
        frameworks=tuple(frameworks),
    )


def load_rules_file(path: str) -> List[AlertingRule]:
    """Load a JSON list of rule definitions from *path*."""

    with open(path, "r", encoding="utf-8") as fh:
        try:
            document = json.load(fh)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Rules file '{path}' is not valid JSON: {exc}") from exc
    if not isinstance(document, list):
        raise ValueError(f"Rules file '{path}' must contain a JSON list of rules")
    return [rule_from_dict(entry) for entry in document]


def _import_rule_modules() -> None:
    """Import modules that register rules at import time."""

    package_name = __name__
    package_paths = getattr(__spec__, "submodule_search_locations", None)
    if not package_paths:
        return

    for module_info in pkgutil.iter_modules(package_paths):
        module_name = module_info.name
        if module_name.startswith("_"):
            continue
        importlib.import_module(f"{package_name}.{module_name}")


_import_rule_modules()

DEFAULT_RULES: Mapping[str, AlertingRule] = get_rules()

__all__ = [
    "AlertingRule",
    "DEFAULT_RULES",
    "RULE_REGISTRY",
    "ResolutionStrategy",
    "RuleRegistry",
    "get_rules",
    "load_rules_file",
    "register_rule",
    "rule_from_dict",
]
