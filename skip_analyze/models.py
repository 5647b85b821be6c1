"""Data models for pointer samples, segments, skips and session reports."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True, slots=True)
class PointerPoint:
    """A single raw pointer sample.

    Attributes:
        x: Horizontal position in capture-surface pixels.
        y: Vertical position in capture-surface pixels.
        t: Monotonic timestamp in milliseconds.
    """

    x: float
    y: float
    t: float


@dataclass(frozen=True, slots=True)
class TraceRow:
    """A recorded pointer event as stored in a trace file.

    Attributes:
        t: Timestamp in milliseconds.
        x: Horizontal position (px). Ignored for "leave" rows.
        y: Vertical position (px). Ignored for "leave" rows.
        event: "move" or "leave" (pointer left the capture surface).
    """

    t: float
    x: float
    y: float
    event: str = "move"


@dataclass(frozen=True, slots=True)
class Segment:
    """Movement between two consecutive recorded points.

    The segment carries the position and timestamp of its end point. ``dt`` is
    always positive; samples with non-positive elapsed time never become
    segments.

    Attributes:
        x: End point x (px).
        y: End point y (px).
        t: End point timestamp (ms).
        distance: Euclidean distance from the previous point (px).
        dt: Milliseconds since the previous point.
        speed: ``distance / dt`` in px/ms.
        is_skip: Whether the segment was classified as an artifact jump.
        reason: Skip reason, empty for normal segments.
    """

    x: float
    y: float
    t: float
    distance: float
    dt: float
    speed: float
    is_skip: bool
    reason: str = ""


@dataclass(frozen=True, slots=True)
class SkipEvent:
    """A flagged segment as shown in the recent-skips log."""

    at: float
    distance: float
    dt: float
    speed: float
    reason: str


@dataclass(frozen=True, slots=True)
class SessionStats:
    """Aggregate statistics over the recorded segments of one session."""

    sample_count: int = 0
    skip_count: int = 0
    total_distance: float = 0.0
    skip_density_per_1000px: float = 0.0
    avg_speed: float = 0.0
    peak_speed: float = 0.0
    avg_dt: float = 0.0
    effective_hz: float = 0.0
    session_seconds: float = 0.0
    score: int = 100


@dataclass(frozen=True, slots=True)
class SessionReport:
    """Snapshot issued when a capture is stopped.

    Note:
        Both the stats and the skip log are immutable, so later changes to the
        live session cannot reach an issued report.
    """

    generated_at: str
    stats: SessionStats
    recent_skips: tuple[SkipEvent, ...]

    @property
    def label(self) -> str:
        """Human readable verdict for the report score."""

        from skip_analyze.aggregate import score_label

        return score_label(self.stats.score)


SAMPLE_LIMIT: Final[int] = 12_000
RECENT_SKIPS_LIMIT: Final[int] = 8
COUNTDOWN_SECONDS: Final[int] = 3

REASON_DISTANCE_SPIKE: Final[str] = "distance spike"
REASON_GAP_JUMP: Final[str] = "time gap + jump"

EVENT_MOVE: Final[str] = "move"
EVENT_LEAVE: Final[str] = "leave"
