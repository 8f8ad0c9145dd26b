"""
General utility functions for the voyagemath package.
"""

from typing import Any, Dict, Iterable, List, Optional, TypeVar

import numpy as np

T = TypeVar('T')


def make_rng(rng: Optional[np.random.Generator] = None,
             seed: Optional[int] = None) -> np.random.Generator:
    """
    Resolve the random generator used by an operation.

    Args:
        rng: Generator to use as is
        seed: Seed for a new generator when rng is not given

    Returns:
        numpy Generator (OS-seeded when neither argument is given)
    """
    if rng is not None:
        return rng
    return np.random.default_rng(seed)


def distinct(coll: Iterable[T]) -> List[T]:
    """
    Return a list with duplicates removed, preserving order.

    Args:
        coll: Collection to process

    Returns:
        List with duplicates removed
    """
    seen = set()
    result = []
    for item in coll:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


def median(values: Iterable[float], default: float = 0.0) -> float:
    """
    Calculate the median of a collection of numbers.

    For an even count this is the mean of the two middle values.

    Args:
        values: Values to summarize
        default: Value returned for an empty collection

    Returns:
        Median value
    """
    ordered = sorted(values)
    if not ordered:
        return default

    mid = len(ordered) // 2
    if len(ordered) % 2 == 0:
        return (ordered[mid - 1] + ordered[mid]) / 2
    return ordered[mid]


def mode(values: Iterable[T], default: Optional[T] = None) -> Optional[T]:
    """
    Return the most frequent value.

    Ties go to the value that was encountered first.

    Args:
        values: Values to summarize
        default: Value returned for an empty collection

    Returns:
        Most frequent value
    """
    counts: Dict[Any, int] = {}
    for value in values:
        counts[value] = counts.get(value, 0) + 1

    best = default
    best_count = 0
    for value, count in counts.items():
        if count > best_count:
            best = value
            best_count = count
    return best


def first_differences(values: List[float]) -> List[float]:
    """
    Differences between consecutive values, ``values[i] - values[i + 1]``.

    Args:
        values: Sequence of numbers

    Returns:
        List one shorter than the input (empty for fewer than two values)
    """
    return [values[i] - values[i + 1] for i in range(len(values) - 1)]


def argmax_first(values: List[float]) -> int:
    """Index of the largest value, the earliest one on ties (-1 when empty)."""
    if not values:
        return -1
    return int(np.argmax(np.asarray(values, dtype=float)))
