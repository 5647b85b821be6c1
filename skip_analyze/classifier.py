"""Adaptive skip classification for pointer movement segments."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from itertools import islice
from typing import Reversible

from skip_analyze.geometry import distance_px, percentile
from skip_analyze.models import REASON_DISTANCE_SPIKE, REASON_GAP_JUMP, PointerPoint, Segment

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SkipParams:
    """Parameters controlling skip classification.

    The defaults are empirical; they reproduce the reference behaviour and can be
    tuned per device.
    """

    # Number of most recent segments the baseline is computed from.
    window: int = 250
    percentile: float = 95.0
    # Distance spike: a jump much larger than usual inside a very short time.
    spike_factor: float = 2.2
    spike_max_dt_ms: float = 25.0
    # Gap jump: a stall followed by a jump above both a fixed floor and the baseline.
    gap_factor: float = 1.8
    jump_floor_px: float = 12.0
    jump_factor: float = 1.1

    def __post_init__(self) -> None:
        if self.window < 1:
            raise ValueError(f"window must be >= 1, got {self.window!r}")
        if not 0.0 <= self.percentile <= 100.0:
            raise ValueError(f"percentile must be within [0, 100], got {self.percentile!r}")
        for name in ("spike_factor", "spike_max_dt_ms", "gap_factor", "jump_floor_px", "jump_factor"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)!r}")


DEFAULT_PARAMS = SkipParams()


@dataclass(frozen=True, slots=True)
class Baseline:
    """Adaptive scale references taken from the trailing window."""

    p95_distance: float
    p95_dt: float


def trailing_baseline(prior_segments: Reversible[Segment], params: SkipParams = DEFAULT_PARAMS) -> Baseline:
    """Compute percentile baselines over the most recent ``params.window`` segments.

    Zero distances and non-positive dt values are excluded. An empty selection
    yields 0.0, which disables both outlier rules.
    """

    recent = list(islice(reversed(prior_segments), params.window))
    return Baseline(
        p95_distance=percentile((s.distance for s in recent if s.distance > 0), params.percentile),
        p95_dt=percentile((s.dt for s in recent if s.dt > 0), params.percentile),
    )


def is_distance_spike(distance: float, dt: float, baseline: Baseline, params: SkipParams = DEFAULT_PARAMS) -> bool:
    """Large jump within a very small elapsed time."""

    return (
        baseline.p95_distance > 0
        and distance > baseline.p95_distance * params.spike_factor
        and dt < params.spike_max_dt_ms
    )


def is_gap_jump(distance: float, dt: float, baseline: Baseline, params: SkipParams = DEFAULT_PARAMS) -> bool:
    """Long gap followed by a jump larger than the floor and the baseline."""

    return (
        baseline.p95_dt > 0
        and dt > baseline.p95_dt * params.gap_factor
        and distance > max(params.jump_floor_px, baseline.p95_distance * params.jump_factor)
    )


def classify_segment(
    last: PointerPoint,
    point: PointerPoint,
    prior_segments: Reversible[Segment],
    params: SkipParams = DEFAULT_PARAMS,
) -> Segment | None:
    """Classify the movement from ``last`` to ``point``.

    Args:
        last: Current reference point.
        point: Newly observed point.
        prior_segments: Segments recorded so far in arrival order. Only the
            trailing window is read.
        params: Classification thresholds.

    Returns:
        The classified Segment, or None when the elapsed time is not positive
        (duplicate or out-of-order timestamp) or the sample is not finite. In
        that case the caller must keep its reference point.
    """

    dt = point.t - last.t
    if not math.isfinite(dt) or dt <= 0:
        logger.debug("dropping sample at t=%s: unusable dt=%s", point.t, dt)
        return None

    distance = distance_px(last.x, last.y, point.x, point.y)
    if not math.isfinite(distance):
        logger.debug("dropping sample at t=%s: non-finite position (%s, %s)", point.t, point.x, point.y)
        return None
    speed = distance / dt
    baseline = trailing_baseline(prior_segments, params)

    spike = is_distance_spike(distance, dt, baseline, params)
    gap = is_gap_jump(distance, dt, baseline, params)
    is_skip = spike or gap
    reason = ""
    if is_skip:
        reason = REASON_DISTANCE_SPIKE if spike else REASON_GAP_JUMP

    return Segment(
        x=point.x,
        y=point.y,
        t=point.t,
        distance=distance,
        dt=dt,
        speed=speed,
        is_skip=is_skip,
        reason=reason,
    )
