"""Geometry and order-statistic utilities (no external dependencies)."""

from __future__ import annotations

import math
from typing import Iterable


def distance_px(x1: float, y1: float, x2: float, y2: float) -> float:
    """Compute the Euclidean distance in pixels between two points."""

    return math.hypot(x2 - x1, y2 - y1)


def clamp(value: float, lo: float, hi: float) -> float:
    """Clamp value into the closed interval [lo, hi]."""

    return max(lo, min(hi, value))


def percentile(values: Iterable[float], p: float) -> float:
    """Nearest-rank percentile without interpolation.

    Args:
        values: Sample values in any order.
        p: Percentile in [0, 100].

    Returns:
        The value at index ``floor(p / 100 * (n - 1))`` of the sorted values,
        or 0.0 when there are no values.
    """

    ordered = sorted(values)
    n = len(ordered)
    if n == 0:
        return 0.0
    index = int(clamp(math.floor((p / 100.0) * (n - 1)), 0, n - 1))
    return ordered[index]
