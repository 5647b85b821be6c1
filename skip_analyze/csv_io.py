"""CSV input/output for recorded pointer traces and classified segments."""

from __future__ import annotations

import csv
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Sequence

from skip_analyze.models import EVENT_LEAVE, EVENT_MOVE, Segment, TraceRow

logger = logging.getLogger(__name__)

SEGMENT_FIELDS = ["t", "x", "y", "distance", "dt", "speed", "is_skip", "reason"]


@dataclass(frozen=True, slots=True)
class CsvSummary:
    """Quick summary of CSV parsing."""

    rows_total: int
    rows_parsed: int
    rows_skipped: int
    fieldnames: Sequence[str]


def _parse_float(value: str) -> float:
    v = float(value.strip())
    if not math.isfinite(v):
        raise ValueError(f"non-finite value {value!r}")
    return v


def _parse_row(row: dict[str, str]) -> TraceRow:
    event = (row.get("event") or EVENT_MOVE).strip().lower() or EVENT_MOVE
    if event == EVENT_LEAVE:
        # Leave rows only need a timestamp.
        return TraceRow(
            t=_parse_float(row["t"]),
            x=_parse_float(row.get("x") or "0"),
            y=_parse_float(row.get("y") or "0"),
            event=EVENT_LEAVE,
        )
    if event != EVENT_MOVE:
        raise ValueError(f"unknown event {event!r}")
    return TraceRow(t=_parse_float(row["t"]), x=_parse_float(row["x"]), y=_parse_float(row["y"]))


def _check_fieldnames(fieldnames: Sequence[str] | None) -> None:
    missing = [c for c in ("t", "x", "y") if c not in (fieldnames or ())]
    if missing:
        raise KeyError(f"CSV is missing required columns {missing}. Found: {list(fieldnames or ())}")


def iter_pointer_trace(csv_path: str | Path) -> Iterator[TraceRow]:
    """Yield TraceRow objects from a pointer trace CSV.

    Args:
        csv_path: Path to the trace.

    Yields:
        Rows parsed successfully, in file order.

    Raises:
        KeyError: If a required column (t, x, y) is missing.

    Notes:
        Columns:
          - t: timestamp in milliseconds
          - x, y: position in capture-surface pixels
          - event (optional): "move" (default) or "leave"
    """

    p = Path(csv_path)
    with p.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        if reader.fieldnames is None:
            return
        _check_fieldnames(reader.fieldnames)

        for row in reader:
            try:
                yield _parse_row(row)
            except (ValueError, TypeError, AttributeError):
                # damaged or blank line
                continue


def load_pointer_trace(csv_path: str | Path) -> tuple[list[TraceRow], CsvSummary]:
    """Load a whole trace into memory.

    Args:
        csv_path: Path to the trace.

    Returns:
        (rows, summary)

    Raises:
        KeyError: If a required column (t, x, y) is missing.
    """

    p = Path(csv_path)
    with p.open("r", encoding="utf-8", newline="") as f:
        return read_pointer_trace(f, source=str(p))


def read_pointer_trace(lines: Iterable[str], source: str = "<stream>") -> tuple[list[TraceRow], CsvSummary]:
    """Parse a trace from any iterable of CSV lines (open file, uploaded buffer)."""

    rows_total = 0
    parsed: list[TraceRow] = []
    reader = csv.DictReader(lines)
    fieldnames: Sequence[str] = reader.fieldnames or ()
    if fieldnames:
        _check_fieldnames(fieldnames)
    for row in reader:
        rows_total += 1
        try:
            parsed.append(_parse_row(row))
        except (ValueError, TypeError, AttributeError):
            continue

    summary = CsvSummary(
        rows_total=rows_total,
        rows_parsed=len(parsed),
        rows_skipped=rows_total - len(parsed),
        fieldnames=fieldnames,
    )
    if summary.rows_skipped > 0:
        logger.warning("skipped %s unparsable rows in %s", summary.rows_skipped, source)
    return parsed, summary


def write_trace_csv(rows: Iterable[TraceRow], out_path: str | Path) -> None:
    """Write trace rows in the format read by load_pointer_trace."""

    p = Path(out_path)
    with p.open("w", encoding="utf-8", newline="") as f:
        w = csv.DictWriter(f, fieldnames=["t", "x", "y", "event"])
        w.writeheader()
        for r in rows:
            w.writerow({"t": r.t, "x": r.x, "y": r.y, "event": r.event})


def write_segments_csv(segments: Iterable[Segment], out_path: str | Path) -> int:
    """Write classified segments, one per row.

    Returns:
        Number of rows written.
    """

    p = Path(out_path)
    n = 0
    with p.open("w", encoding="utf-8", newline="") as f:
        w = csv.DictWriter(f, fieldnames=SEGMENT_FIELDS)
        w.writeheader()
        for s in segments:
            w.writerow(
                {
                    "t": s.t,
                    "x": s.x,
                    "y": s.y,
                    "distance": f"{s.distance:.3f}",
                    "dt": f"{s.dt:.3f}",
                    "speed": f"{s.speed:.5f}",
                    "is_skip": int(s.is_skip),
                    "reason": s.reason,
                }
            )
            n += 1
    return n
