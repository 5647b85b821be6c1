"""Drawing hints handed to whatever renders accepted segments."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SegmentStroke:
    """Endpoints of an accepted segment plus its skip flag."""

    x1: float
    y1: float
    x2: float
    y2: float
    is_skip: bool


@dataclass(frozen=True, slots=True)
class StrokeStyle:
    color: str
    width: float


SKIP_STYLE = StrokeStyle(color="#ef4444", width=2.4)
NORMAL_STYLE = StrokeStyle(color="#38bdf8", width=1.2)


def stroke_style(is_skip: bool) -> StrokeStyle:
    return SKIP_STYLE if is_skip else NORMAL_STYLE
