"""Tests for quantification helpers."""

from __future__ import annotations

import sys
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


from alerting_chain_audit.quantifiers import at_least_one, every, partition


def test_at_least_one_is_false_for_empty_candidates() -> None:
    """An empty candidate set never satisfies the existential check."""

    assert not at_least_one([], lambda value: True)
    assert at_least_one([1, 2, 3], lambda value: value == 2)
    assert not at_least_one([1, 3], lambda value: value == 2)


def test_every_requires_non_empty_candidates() -> None:
    """The universal check fails on an empty set."""

    assert not every([], lambda value: True)
    assert every([2, 4], lambda value: value % 2 == 0)
    assert not every([2, 3], lambda value: value % 2 == 0)


def test_partition_preserves_discovery_order() -> None:
    """Passing and failing candidates keep their original order."""

    passing, failing = partition([5, 1, 4, 2, 3], lambda value: value > 2)

    assert passing == [5, 4, 3]
    assert failing == [1, 2]
