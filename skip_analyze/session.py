"""Capture session context and its run-state machine.

A CaptureSession owns every piece of mutable state of one capture: the
reference point, the bounded segment log, the recent-skips log, the countdown
and the last issued report. Classification and aggregation stay pure
functions; the session only sequences them.

States::

    idle --start--> countdown --tick x N--> capturing --stop--> idle
                       |                                         ^
                       +------------------cancel-----------------+
"""

from __future__ import annotations

import logging
import math
from collections import deque
from enum import Enum
from typing import Callable, Iterable, Sequence

from skip_analyze.aggregate import compute_stats
from skip_analyze.classifier import DEFAULT_PARAMS, SkipParams, classify_segment
from skip_analyze.models import (
    COUNTDOWN_SECONDS,
    EVENT_LEAVE,
    RECENT_SKIPS_LIMIT,
    SAMPLE_LIMIT,
    PointerPoint,
    Segment,
    SessionReport,
    SessionStats,
    SkipEvent,
    TraceRow,
)
from skip_analyze.render import SegmentStroke
from skip_analyze.timeutils import utc_now_iso

logger = logging.getLogger(__name__)


class RunState(str, Enum):
    IDLE = "idle"
    COUNTDOWN = "countdown"
    CAPTURING = "capturing"


class SessionStateError(RuntimeError):
    """Raised when a transition is requested from a state that does not allow it."""


class CaptureSession:
    """Mutable state of one capture session."""

    def __init__(
        self,
        params: SkipParams = DEFAULT_PARAMS,
        on_segment: Callable[[SegmentStroke], None] | None = None,
        *,
        sample_limit: int = SAMPLE_LIMIT,
        recent_skips_limit: int = RECENT_SKIPS_LIMIT,
        countdown_seconds: int = COUNTDOWN_SECONDS,
    ) -> None:
        self.params = params
        self.on_segment = on_segment
        self._countdown_seconds = countdown_seconds
        self._segments: deque[Segment] = deque(maxlen=sample_limit)
        # newest first
        self._skips: deque[SkipEvent] = deque(maxlen=recent_skips_limit)
        self._last: PointerPoint | None = None
        self._report: SessionReport | None = None
        self.state = RunState.IDLE
        self.countdown = countdown_seconds

    # ── Read views ──────────────────────────────────────────────────────

    @property
    def segments(self) -> Sequence[Segment]:
        return tuple(self._segments)

    @property
    def recent_skips(self) -> Sequence[SkipEvent]:
        return tuple(self._skips)

    @property
    def report(self) -> SessionReport | None:
        return self._report

    @property
    def reference_point(self) -> PointerPoint | None:
        return self._last

    @property
    def stats(self) -> SessionStats:
        """Statistics recomputed from the current segment log."""

        return compute_stats(self._segments)

    # ── Transitions ─────────────────────────────────────────────────────

    def reset(self) -> None:
        """Discard everything recorded and go back to idle."""

        self.state = RunState.IDLE
        self.countdown = self._countdown_seconds
        self._segments.clear()
        self._skips.clear()
        self._report = None
        self._last = None
        logger.debug("session reset")

    def start(self) -> None:
        """Begin a fresh countdown. Previous segments and report are discarded."""

        if self.state is not RunState.IDLE:
            raise SessionStateError(f"cannot start while {self.state.value}")
        self.reset()
        self.state = RunState.COUNTDOWN
        logger.debug("countdown started (%ss)", self.countdown)
        if self.countdown <= 0:
            self._begin_capture()

    def tick(self) -> None:
        """Advance the countdown by one second. Does nothing outside countdown."""

        if self.state is not RunState.COUNTDOWN:
            return
        self.countdown -= 1
        if self.countdown <= 0:
            self._begin_capture()

    def skip_countdown(self) -> None:
        """Run the remaining countdown ticks at once."""

        while self.state is RunState.COUNTDOWN:
            self.tick()

    def cancel(self) -> None:
        """Abort a running countdown."""

        if self.state is not RunState.COUNTDOWN:
            raise SessionStateError(f"cannot cancel while {self.state.value}")
        self.state = RunState.IDLE
        self.countdown = self._countdown_seconds
        self._last = None
        logger.debug("countdown cancelled")

    def stop(self) -> SessionReport | None:
        """Stop capturing and freeze a report if anything was recorded.

        Returns:
            The new report, or None when no segment was recorded.
        """

        if self.state is not RunState.CAPTURING:
            raise SessionStateError(f"cannot stop while {self.state.value}")
        self.state = RunState.IDLE
        self._last = None
        if not self._segments:
            logger.info("capture stopped without segments, no report issued")
            return None
        stats = self.stats
        self._report = SessionReport(
            generated_at=utc_now_iso(),
            stats=stats,
            recent_skips=tuple(self._skips),
        )
        logger.info(
            "capture stopped: segments=%s skips=%s score=%s",
            stats.sample_count,
            stats.skip_count,
            stats.score,
        )
        return self._report

    def toggle(self) -> SessionReport | None:
        """Start, cancel or stop depending on the current state."""

        if self.state is RunState.CAPTURING:
            return self.stop()
        if self.state is RunState.COUNTDOWN:
            self.cancel()
            return None
        self.start()
        return None

    def _begin_capture(self) -> None:
        self.state = RunState.CAPTURING
        self.countdown = 0
        self._last = None
        logger.debug("capturing")

    # ── Pointer input ───────────────────────────────────────────────────

    def pointer_move(self, x: float, y: float, t: float) -> Segment | None:
        """Feed one pointer sample.

        Returns:
            The classified segment, or None when nothing was recorded (not
            capturing, first sample after entry, non-finite sample or
            non-positive dt).
        """

        if self.state is not RunState.CAPTURING:
            return None

        if not (math.isfinite(x) and math.isfinite(y) and math.isfinite(t)):
            logger.debug("ignoring non-finite sample (%s, %s, %s)", x, y, t)
            return None

        point = PointerPoint(x=x, y=y, t=t)
        last = self._last
        if last is None:
            self._last = point
            return None

        segment = classify_segment(last, point, self._segments, self.params)
        if segment is None:
            return None

        self._segments.append(segment)
        if segment.is_skip:
            self._skips.appendleft(
                SkipEvent(
                    at=segment.t,
                    distance=segment.distance,
                    dt=segment.dt,
                    speed=segment.speed,
                    reason=segment.reason,
                )
            )
            logger.info(
                "skip at t=%.1f: %s (d=%.1fpx dt=%.1fms)",
                segment.t,
                segment.reason,
                segment.distance,
                segment.dt,
            )

        if self.on_segment is not None:
            self.on_segment(SegmentStroke(last.x, last.y, segment.x, segment.y, segment.is_skip))
        self._last = point
        return segment

    def pointer_leave(self) -> None:
        """Forget the reference point; the next sample starts a new stroke."""

        self._last = None


def replay(
    rows: Iterable[TraceRow],
    params: SkipParams = DEFAULT_PARAMS,
    on_segment: Callable[[SegmentStroke], None] | None = None,
) -> CaptureSession:
    """Run a recorded trace through a fresh session, from start to stop.

    Args:
        rows: Trace rows in recorded order.
        params: Classification thresholds.
        on_segment: Optional stroke callback.

    Returns:
        The stopped session. Its report is set if any segment was recorded.
    """

    session = CaptureSession(params, on_segment)
    session.start()
    session.skip_countdown()
    for row in rows:
        if row.event == EVENT_LEAVE:
            session.pointer_leave()
        else:
            session.pointer_move(row.x, row.y, row.t)
    session.stop()
    return session
