"""Timestamp formatting and sampling-interval utilities."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Iterable


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with millisecond precision, e.g. 2026-01-02T03:04:05.678Z."""

    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def file_stamp(iso_text: str) -> str:
    """Make an ISO timestamp safe for file names by replacing ':' with '-'."""

    return iso_text.replace(":", "-")


@dataclass(frozen=True, slots=True)
class DeltaStats:
    """Sampling interval stats (milliseconds)."""

    count: int
    min_ms: float
    median_ms: float
    p95_ms: float
    max_ms: float


def delta_stats(timestamps_ms: Iterable[float]) -> DeltaStats | None:
    """Compute basic sampling-interval statistics.

    Args:
        timestamps_ms: Timestamps in arrival order. Non-positive intervals
            (duplicates or out-of-order samples) are ignored.

    Returns:
        DeltaStats or None if there is no positive interval.
    """

    ms = list(timestamps_ms)
    if len(ms) < 2:
        return None
    deltas = [ms[i] - ms[i - 1] for i in range(1, len(ms)) if ms[i] > ms[i - 1]]
    if not deltas:
        return None
    deltas.sort()
    n = len(deltas)
    median = deltas[n // 2] if n % 2 == 1 else 0.5 * (deltas[n // 2 - 1] + deltas[n // 2])
    p95 = deltas[int(0.95 * (n - 1))]
    return DeltaStats(
        count=n,
        min_ms=deltas[0],
        median_ms=median,
        p95_ms=p95,
        max_ms=deltas[-1],
    )
