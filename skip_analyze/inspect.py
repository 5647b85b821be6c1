"""Inspect a pointer trace before analysing it."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from skip_analyze.models import EVENT_LEAVE, TraceRow
from skip_analyze.timeutils import DeltaStats, delta_stats


@dataclass(frozen=True, slots=True)
class InspectResult:
    """High-level trace inspection result."""

    rows: int
    moves: int
    leaves: int
    min_time_ms: float | None
    max_time_ms: float | None
    delta: DeltaStats | None
    min_x: float | None
    max_x: float | None
    min_y: float | None
    max_y: float | None
    duplicate_timestamps: int
    backwards_timestamps: int

    @property
    def duration_seconds(self) -> float:
        if self.min_time_ms is None or self.max_time_ms is None:
            return 0.0
        return max(0.0, (self.max_time_ms - self.min_time_ms) / 1000.0)


def inspect_trace(rows: Sequence[TraceRow]) -> InspectResult:
    """Inspect already-loaded trace rows.

    Duplicate and backwards timestamps are counted between consecutive move
    rows; the classifier drops exactly those samples.
    """

    moves = [r for r in rows if r.event != EVENT_LEAVE]
    if not moves:
        return InspectResult(
            rows=len(rows),
            moves=0,
            leaves=len(rows),
            min_time_ms=None,
            max_time_ms=None,
            delta=None,
            min_x=None,
            max_x=None,
            min_y=None,
            max_y=None,
            duplicate_timestamps=0,
            backwards_timestamps=0,
        )

    times = [r.t for r in moves]
    dupe = 0
    back = 0
    for i in range(1, len(times)):
        if times[i] == times[i - 1]:
            dupe += 1
        elif times[i] < times[i - 1]:
            back += 1

    xs = [r.x for r in moves]
    ys = [r.y for r in moves]
    return InspectResult(
        rows=len(rows),
        moves=len(moves),
        leaves=len(rows) - len(moves),
        min_time_ms=min(times),
        max_time_ms=max(times),
        delta=delta_stats(times),
        min_x=min(xs),
        max_x=max(xs),
        min_y=min(ys),
        max_y=max(ys),
        duplicate_timestamps=dupe,
        backwards_timestamps=back,
    )
