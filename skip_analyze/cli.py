"""Command-line interface for skip_analyze.

Run:
    python -m skip_analyze analyze --csv trace.csv
"""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict

from skip_analyze.classifier import DEFAULT_PARAMS, SkipParams
from skip_analyze.csv_io import load_pointer_trace, write_segments_csv
from skip_analyze.export import report_payload, write_report_json, write_session_json
from skip_analyze.inspect import inspect_trace
from skip_analyze.session import replay


def _params_from_args(args: argparse.Namespace) -> SkipParams:
    return SkipParams(
        window=args.window,
        percentile=args.percentile,
        spike_factor=args.spike_factor,
        spike_max_dt_ms=args.spike_max_dt_ms,
        gap_factor=args.gap_factor,
        jump_floor_px=args.jump_floor_px,
        jump_factor=args.jump_factor,
    )


def _cmd_inspect(args: argparse.Namespace) -> int:
    rows, summary = load_pointer_trace(args.csv)
    res = inspect_trace(rows)

    print("### CSV columns")
    print(", ".join(summary.fieldnames))
    print()

    print("### Rows")
    print(f"total_rows={summary.rows_total}, parsed={summary.rows_parsed}, skipped={summary.rows_skipped}")
    print(f"moves={res.moves}, leaves={res.leaves}")
    print()

    if res.min_time_ms is not None and res.max_time_ms is not None:
        print("### Time range (ms)")
        print(f"start={res.min_time_ms:.1f}, end={res.max_time_ms:.1f}, duration={res.duration_seconds:.3f}s")
        print()

    if res.delta is not None:
        print("### Sampling interval (ms)")
        print(
            f"count={res.delta.count}, min={res.delta.min_ms:.2f}, median={res.delta.median_ms:.2f}, "
            f"p95={res.delta.p95_ms:.2f}, max={res.delta.max_ms:.2f}, "
            f"approx_hz={1000.0 / res.delta.median_ms if res.delta.median_ms > 0 else 0.0:.1f}"
        )
        print()

    print("### Position range (px)")
    print(f"x=[{res.min_x}, {res.max_x}], y=[{res.min_y}, {res.max_y}]")
    print()

    print("### Timestamps dropped by the classifier")
    print(f"duplicate={res.duplicate_timestamps}, backwards={res.backwards_timestamps}")
    print()

    if args.json:
        payload = asdict(res) | {
            "rows_total": summary.rows_total,
            "rows_parsed": summary.rows_parsed,
            "rows_skipped": summary.rows_skipped,
            "fieldnames": list(summary.fieldnames),
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


def _cmd_analyze(args: argparse.Namespace) -> int:
    rows, _ = load_pointer_trace(args.csv)
    session = replay(rows, args.params)
    stats = session.stats
    report = session.report

    print("### Metrics")
    print(f"samples={stats.sample_count}, skips={stats.skip_count}")
    print(f"total_distance={stats.total_distance:.0f}px, skip_density={stats.skip_density_per_1000px:.2f}/1000px")
    print(f"effective_hz={stats.effective_hz:.1f}, avg_dt={stats.avg_dt:.2f}ms")
    print(f"avg_speed={stats.avg_speed:.3f}px/ms, peak_speed={stats.peak_speed:.3f}px/ms")
    print(f"duration={stats.session_seconds:.1f}s")
    print()

    print("### Latest skips")
    if not session.recent_skips:
        print("No flagged events.")
    for e in session.recent_skips:
        print(f"t={e.at:.1f}ms  {e.reason:<16} d={e.distance:.1f}px dt={e.dt:.1f}ms")
    print()

    if report is None:
        print("No segments recorded, no report issued.")
        return 1

    print("### Report")
    print(f"score={report.stats.score}/100 ({report.label})")

    if args.json:
        print(json.dumps(report_payload(report), ensure_ascii=False, indent=2))
    if args.session_out:
        print(f"Session exported: {write_session_json(session, args.session_out)}")
    if args.report_out:
        print(f"Report exported: {write_report_json(report, args.report_out)}")
    return 0


def _cmd_export_segments(args: argparse.Namespace) -> int:
    rows, _ = load_pointer_trace(args.csv)
    session = replay(rows, args.params)
    n = write_segments_csv(session.segments, args.out)
    print(f"Exported {n} segments ({session.stats.skip_count} skips): {args.out}")
    return 0


def _add_threshold_args(p: argparse.ArgumentParser) -> None:
    d = DEFAULT_PARAMS
    g = p.add_argument_group("skip thresholds")
    g.add_argument("--window", type=int, default=d.window, help="Trailing segments used for the baseline")
    g.add_argument("--percentile", type=float, default=d.percentile, help="Baseline percentile")
    g.add_argument(
        "--spike-factor", type=float, default=d.spike_factor, help="Distance spike: multiple of baseline distance"
    )
    g.add_argument(
        "--spike-max-dt-ms", type=float, default=d.spike_max_dt_ms, help="Distance spike: maximum elapsed ms"
    )
    g.add_argument("--gap-factor", type=float, default=d.gap_factor, help="Gap jump: multiple of baseline dt")
    g.add_argument("--jump-floor-px", type=float, default=d.jump_floor_px, help="Gap jump: minimum jump distance")
    g.add_argument(
        "--jump-factor", type=float, default=d.jump_factor, help="Gap jump: multiple of baseline distance"
    )


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""

    p = argparse.ArgumentParser(prog="skip_analyze")
    p.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (stderr)",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    p_ins = sub.add_parser("inspect", help="Summarise a pointer trace: rows, time range, sampling interval")
    p_ins.add_argument("--csv", type=str, default="trace.csv", help="Input trace CSV")
    p_ins.add_argument("--json", action="store_true", help="Also print JSON")
    p_ins.set_defaults(func=_cmd_inspect)

    p_an = sub.add_parser("analyze", help="Replay a trace through the skip detector and print the report")
    p_an.add_argument("--csv", type=str, default="trace.csv", help="Input trace CSV")
    p_an.add_argument("--json", action="store_true", help="Also print the report as JSON")
    p_an.add_argument("--session-out", type=str, default=None, help="Session JSON file or directory")
    p_an.add_argument("--report-out", type=str, default=None, help="Report JSON file or directory")
    _add_threshold_args(p_an)
    p_an.set_defaults(func=_cmd_analyze)

    p_seg = sub.add_parser("export-segments", help="Write every classified segment to CSV")
    p_seg.add_argument("--csv", type=str, default="trace.csv", help="Input trace CSV")
    p_seg.add_argument("--out", type=str, default="segments.csv", help="Output CSV")
    _add_threshold_args(p_seg)
    p_seg.set_defaults(func=_cmd_export_segments)

    return p


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint."""

    parser = build_parser()
    args = parser.parse_args(argv)
    if hasattr(args, "window"):
        try:
            args.params = _params_from_args(args)
        except ValueError as exc:
            parser.error(str(exc))
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
