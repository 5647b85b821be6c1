from __future__ import annotations

import pytest

from skip_analyze.models import Segment
from skip_analyze.session import CaptureSession


def steady_segments(n: int, distance: float = 5.0, dt: float = 10.0) -> list[Segment]:
    """n normal segments moving right along y=0."""

    return [
        Segment(
            x=(i + 1) * distance,
            y=0.0,
            t=(i + 1) * dt,
            distance=distance,
            dt=dt,
            speed=distance / dt,
            is_skip=False,
        )
        for i in range(n)
    ]


def feed_line(session: CaptureSession, n_points: int, x0: float = 0.0, t0: float = 0.0, dx: float = 5.0, dt: float = 10.0):
    """Feed n_points samples along y=0; returns (last_x, last_t)."""

    x, t = x0, t0
    for i in range(n_points):
        x = x0 + i * dx
        t = t0 + i * dt
        session.pointer_move(x, 0.0, t)
    return x, t


@pytest.fixture()
def capturing() -> CaptureSession:
    session = CaptureSession()
    session.start()
    session.skip_countdown()
    return session
