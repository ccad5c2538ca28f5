"""Quantification helpers over explicit candidate sequences."""
from __future__ import annotations

from typing import Callable, List, Sequence, Tuple, TypeVar

T = TypeVar("T")


def at_least_one(candidates: Sequence[T], predicate: Callable[[T], bool]) -> bool:
    """Return ``True`` if any candidate satisfies *predicate*; ``False`` when empty."""

    return any(predicate(candidate) for candidate in candidates)


def every(candidates: Sequence[T], predicate: Callable[[T], bool]) -> bool:
    """Return ``True`` if all candidates satisfy *predicate*.

    Unlike :func:`all`, an empty sequence yields ``False``.
    """

    return bool(candidates) and all(predicate(candidate) for candidate in candidates)


def partition(
    candidates: Sequence[T], predicate: Callable[[T], bool]
) -> Tuple[List[T], List[T]]:
    """Split *candidates* into ``(passing, failing)`` keeping discovery order."""

    passing: List[T] = []
    failing: List[T] = []
    for candidate in candidates:
        (passing if predicate(candidate) else failing).append(candidate)
    return passing, failing


__all__ = ["at_least_one", "every", "partition"]
