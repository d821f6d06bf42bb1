"""Small statistics helpers for working-weight estimation."""

import math
from typing import Callable, List, Sequence, TypeVar

T = TypeVar("T")


def median(values: Sequence[float]) -> float:
    """Median of ``values``; 0 for an empty sequence."""
    if not values:
        return 0.0
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2 == 0:
        return (ordered[mid - 1] + ordered[mid]) / 2
    return float(ordered[mid])


def filter_outliers(
    items: Sequence[T],
    get_value: Callable[[T], float],
    std_dev_threshold: float = 2.0,
) -> List[T]:
    """
    Drop items further than ``std_dev_threshold`` population standard
    deviations from the mean.

    Fewer than 3 items, or zero spread, returns the items unchanged.
    """
    if len(items) < 3:
        return list(items)

    values = [get_value(item) for item in items]
    mean = sum(values) / len(values)
    variance = sum((v - mean) ** 2 for v in values) / len(values)
    std_dev = math.sqrt(variance)

    if std_dev == 0:
        return list(items)

    return [
        item for item, value in zip(items, values)
        if abs(value - mean) <= std_dev_threshold * std_dev
    ]
