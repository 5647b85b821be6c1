from __future__ import annotations

import json
from pathlib import Path

import streamlit as st

from skip_analyze.classifier import DEFAULT_PARAMS, SkipParams
from skip_analyze.csv_io import load_pointer_trace, read_pointer_trace
from skip_analyze.export import REPORT_FILE_PREFIX, SESSION_FILE_PREFIX, report_payload, session_payload
from skip_analyze.models import TraceRow
from skip_analyze.render import SegmentStroke, stroke_style
from skip_analyze.session import CaptureSession, replay
from skip_analyze.timeutils import file_stamp, utc_now_iso

METHODOLOGY = [
    ("Sampling", "Captures position and timestamp on each pointer event in the test area."),
    ("Motion features", "Computes distance, dt and speed for every movement segment."),
    ("Adaptive baseline", "Uses recent p95 values to adapt to the current movement style."),
    ("Skip rule A", "Flags a large distance spike in a very short time window."),
    ("Skip rule B", "Flags a time gap followed by a jump in cursor position."),
    ("Density metric", "Reports skips per 1000 px traveled to normalize by movement amount."),
    ("Score", "Produces a 0-100 score from skip count and skip density."),
    ("Limitation", "Pointer events are not raw sensor data, so hardware-level causes are inferred."),
]


@st.cache_data(show_spinner=False)
def _load_trace(path: str, mtime: float) -> list[TraceRow]:
    _ = mtime  # part of cache key so updated files reload automatically
    rows, _summary = load_pointer_trace(path)
    return rows


def _run(rows: list[TraceRow], params: SkipParams) -> tuple[CaptureSession, list[SegmentStroke]]:
    strokes: list[SegmentStroke] = []
    session = replay(rows, params, on_segment=strokes.append)
    return session, strokes


def _stroke_rows(strokes: list[SegmentStroke]) -> list[dict[str, object]]:
    rows: list[dict[str, object]] = []
    for s in strokes:
        style = stroke_style(s.is_skip)
        # y grows downwards on the capture surface
        rows.append({"x": s.x2, "y": -s.y2, "color": style.color, "size": style.width * 10})
    return rows


def main() -> None:
    st.set_page_config(page_title="Mouse skip detector", layout="wide")
    st.title("Mouse skip detector: trace replay")

    with st.sidebar:
        st.subheader("Trace")
        uploaded = st.file_uploader("Upload trace CSV (t, x, y[, event])", type=["csv"])
        trace_path = st.text_input("...or trace CSV path", value="sample_data/trace.csv")

        with st.expander("Skip thresholds (usually unchanged)", expanded=False):
            d = DEFAULT_PARAMS
            window = st.number_input("window (segments)", value=d.window, min_value=1, step=10)
            pct = st.number_input("baseline percentile", value=d.percentile, min_value=0.0, max_value=100.0)
            spike_factor = st.number_input("spike factor", value=d.spike_factor, step=0.1)
            spike_max_dt_ms = st.number_input("spike max dt (ms)", value=d.spike_max_dt_ms, step=1.0)
            gap_factor = st.number_input("gap factor", value=d.gap_factor, step=0.1)
            jump_floor_px = st.number_input("jump floor (px)", value=d.jump_floor_px, step=1.0)
            jump_factor = st.number_input("jump factor", value=d.jump_factor, step=0.1)

        with st.expander("Methodology", expanded=False):
            for title, text in METHODOLOGY:
                st.markdown(f"**{title}**: {text}")

    try:
        params = SkipParams(
            window=int(window),
            percentile=float(pct),
            spike_factor=float(spike_factor),
            spike_max_dt_ms=float(spike_max_dt_ms),
            gap_factor=float(gap_factor),
            jump_floor_px=float(jump_floor_px),
            jump_factor=float(jump_factor),
        )
    except ValueError as exc:
        st.error(str(exc))
        return

    if uploaded is not None:
        rows, summary = read_pointer_trace(uploaded.getvalue().decode("utf-8").splitlines(), source=uploaded.name)
        if summary.rows_skipped:
            st.warning(f"Skipped {summary.rows_skipped} unparsable rows.")
    else:
        p = Path(trace_path)
        if not p.exists():
            st.error(
                f"File not found: {trace_path!r}. Upload a trace or generate one with "
                "scripts/generate_sample_trace_csv.py."
            )
            return
        try:
            rows = _load_trace(trace_path, p.stat().st_mtime)
        except KeyError as exc:
            st.exception(exc)
            return

    session, strokes = _run(rows, params)
    stats = session.stats
    report = session.report

    st.subheader("Metrics")
    c1, c2, c3, c4, c5 = st.columns(5)
    c1.metric("Samples", str(stats.sample_count))
    c2.metric("Detected skips", str(stats.skip_count))
    c3.metric("Skip density", f"{stats.skip_density_per_1000px:.2f} / 1000 px")
    c4.metric("Effective Hz", f"{stats.effective_hz:.1f}")
    c5.metric("Session score", f"{stats.score}/100")

    c6, c7, c8, c9, c10 = st.columns(5)
    c6.metric("Total distance", f"{stats.total_distance:.0f} px")
    c7.metric("Average speed", f"{stats.avg_speed:.3f} px/ms")
    c8.metric("Peak speed", f"{stats.peak_speed:.3f} px/ms")
    c9.metric("Average dt", f"{stats.avg_dt:.2f} ms")
    c10.metric("Duration", f"{stats.session_seconds:.1f} s")

    st.subheader("Segments")
    if strokes:
        st.scatter_chart(_stroke_rows(strokes), x="x", y="y", color="color", size="size", height=480)
    else:
        st.info("No segments recorded.")

    st.subheader("Latest skips")
    if not session.recent_skips:
        st.caption("No flagged events.")
    else:
        st.dataframe(
            [
                {"reason": e.reason, "at_ms": round(e.at, 1), "d_px": round(e.distance, 1), "dt_ms": round(e.dt, 1)}
                for e in session.recent_skips
            ],
            use_container_width=True,
        )

    if report is None:
        return

    st.subheader("Session report")
    st.write(f"Generated at {report.generated_at}")
    st.metric("Score", f"{report.stats.score}/100", help=report.label)
    st.write(f"Verdict: **{report.label}**")

    d1, d2 = st.columns(2)
    exported_at = utc_now_iso()
    d1.download_button(
        "Export session JSON",
        data=json.dumps(session_payload(session, exported_at), ensure_ascii=False, indent=2),
        file_name=f"{SESSION_FILE_PREFIX}-{file_stamp(exported_at)}.json",
        mime="application/json",
    )
    d2.download_button(
        "Export report JSON",
        data=json.dumps(report_payload(report), ensure_ascii=False, indent=2),
        file_name=f"{REPORT_FILE_PREFIX}-{file_stamp(report.generated_at)}.json",
        mime="application/json",
    )


if __name__ == "__main__":
    main()
