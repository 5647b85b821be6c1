"""Session statistics and the 0-100 quality score."""

from __future__ import annotations

import math
from typing import Sequence

from skip_analyze.geometry import clamp
from skip_analyze.models import SessionStats, Segment

SKIP_PENALTY_PER_SKIP = 1.8


def density_penalty(skips_per_1000px: float) -> float:
    """Piecewise linear penalty for skip density.

    Densities up to 0.25 skips per 1000 px are treated as noise. The slope is 10
    up to a density of 1 and 16 beyond, continuous at both breakpoints.
    """

    d = skips_per_1000px
    if d <= 0.25:
        return 0.0
    if d <= 1.0:
        return (d - 0.25) * 10.0
    return 7.5 + (d - 1.0) * 16.0


def session_score(skip_count: int, skips_per_1000px: float) -> int:
    """Combine skip count and density into an integer score in [0, 100]."""

    raw = 100.0 - skip_count * SKIP_PENALTY_PER_SKIP - density_penalty(skips_per_1000px)
    # half-up rounding, not banker's rounding
    return int(math.floor(clamp(raw, 0.0, 100.0) + 0.5))


def score_label(score: int) -> str:
    """Map a score to its verdict."""

    if score >= 92:
        return "Excellent"
    if score >= 80:
        return "Acceptable"
    if score >= 65:
        return "Needs work"
    return "Poor"


def compute_stats(segments: Sequence[Segment]) -> SessionStats:
    """Fold the full segment sequence into SessionStats.

    Args:
        segments: Recorded segments in arrival order.

    Returns:
        SessionStats. An empty sequence yields all zeros and score 100.
    """

    if not segments:
        return SessionStats()

    skip_count = 0
    total_distance = 0.0
    speed_sum = 0.0
    peak_speed = 0.0
    dt_sum = 0.0
    dt_count = 0
    for s in segments:
        if s.is_skip:
            skip_count += 1
        total_distance += s.distance
        speed_sum += s.speed
        peak_speed = max(peak_speed, s.speed)
        if s.dt > 0:
            dt_sum += s.dt
            dt_count += 1

    density = skip_count / (total_distance / 1000.0) if total_distance > 0 else 0.0
    avg_dt = dt_sum / dt_count if dt_count else 0.0
    session_seconds = max(0.001, (segments[-1].t - segments[0].t) / 1000.0)

    return SessionStats(
        sample_count=len(segments),
        skip_count=skip_count,
        total_distance=total_distance,
        skip_density_per_1000px=density,
        avg_speed=speed_sum / len(segments),
        peak_speed=peak_speed,
        avg_dt=avg_dt,
        effective_hz=1000.0 / avg_dt if avg_dt > 0 else 0.0,
        session_seconds=session_seconds,
        score=session_score(skip_count, density),
    )
