"""JSON export of live sessions and frozen reports."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict
from pathlib import Path
from typing import Any

from skip_analyze.models import SessionReport
from skip_analyze.session import CaptureSession
from skip_analyze.timeutils import file_stamp, utc_now_iso

logger = logging.getLogger(__name__)

SESSION_FILE_PREFIX = "mouse-skip-session"
REPORT_FILE_PREFIX = "mouse-skip-report"


def session_payload(session: CaptureSession, exported_at: str | None = None) -> dict[str, Any]:
    """Plain-data view of the live session: stats, recent skips and every segment."""

    segments = session.segments
    return {
        "exported_at": exported_at or utc_now_iso(),
        "stats": asdict(session.stats),
        "recent_skips": [asdict(e) for e in session.recent_skips],
        "sample_count": len(segments),
        "samples": [asdict(s) for s in segments],
    }


def report_payload(report: SessionReport) -> dict[str, Any]:
    """Plain-data view of a frozen report."""

    return {
        "generated_at": report.generated_at,
        "stats": asdict(report.stats),
        "recent_skips": [asdict(e) for e in report.recent_skips],
        "label": report.label,
    }


def _resolve_target(out: str | Path, prefix: str, stamp_source: str) -> Path:
    p = Path(out)
    # an existing directory, "dir/" or a suffix-less name all mean "write into this directory"
    if p.is_dir() or str(out).endswith(("/", os.sep)) or not p.suffix:
        return p / f"{prefix}-{file_stamp(stamp_source)}.json"
    return p


def _dump(payload: dict[str, Any], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")


def write_session_json(session: CaptureSession, out: str | Path) -> Path:
    """Export the live session.

    Args:
        session: Session with at least one recorded segment.
        out: Output file, or an existing directory to place
            ``mouse-skip-session-<stamp>.json`` in.

    Returns:
        The written path.

    Raises:
        ValueError: If the session has no segments.
    """

    if not session.segments:
        raise ValueError("nothing to export: the session has no recorded segments")
    exported_at = utc_now_iso()
    path = _resolve_target(out, SESSION_FILE_PREFIX, exported_at)
    _dump(session_payload(session, exported_at), path)
    logger.info("session exported to %s", path)
    return path


def write_report_json(report: SessionReport, out: str | Path) -> Path:
    """Export a frozen report; a directory target gets ``mouse-skip-report-<stamp>.json``."""

    path = _resolve_target(out, REPORT_FILE_PREFIX, report.generated_at)
    _dump(report_payload(report), path)
    logger.info("report exported to %s", path)
    return path
