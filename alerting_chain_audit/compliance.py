"""Compliance framework presets derived from rule configuration."""

from __future__ import annotations

from typing import Dict, Iterable, Mapping, Set, Tuple

from .rules import DEFAULT_RULES, AlertingRule


def framework_index(
    rules: Mapping[str, AlertingRule] = DEFAULT_RULES,
) -> Dict[str, Tuple[str, ...]]:
    """Return framework names mapped to the sorted identifiers of their rules.

    Framework names are lowercase, as normalized by :class:`AlertingRule`.
    """

    index: Dict[str, Set[str]] = {}
    for key, rule in rules.items():
        for framework in rule.frameworks:
            index.setdefault(framework, set()).add(key.lower())
    return {framework: tuple(sorted(ids)) for framework, ids in sorted(index.items())}


def expand_compliance_frameworks(
    frameworks: Iterable[str],
    rules: Mapping[str, AlertingRule] = DEFAULT_RULES,
) -> Set[str]:
    """Return the identifiers of the *rules* that belong to any of *frameworks*.

    Raises a :class:`ValueError` when no rule declares a requested framework.
    """

    index = framework_index(rules)
    normalized = {framework.strip().lower() for framework in frameworks}
    missing = sorted(normalized - set(index))
    if missing:
        valid = ", ".join(index) or "(none)"
        raise ValueError(
            f"Unknown compliance framework(s): {', '.join(missing)}. Valid options: {valid}"
        )

    control_ids: Set[str] = set()
    for framework in normalized:
        control_ids.update(index[framework])
    return control_ids


__all__ = ["expand_compliance_frameworks", "framework_index"]
