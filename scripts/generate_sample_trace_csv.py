from __future__ import annotations

import argparse
import math
import random
from dataclasses import dataclass
from pathlib import Path

from skip_analyze.csv_io import write_trace_csv
from skip_analyze.models import EVENT_LEAVE, TraceRow


@dataclass(frozen=True, slots=True)
class Surface:
    width: float
    height: float


def generate_trace(
    *,
    rows: int,
    seed: int,
    surface: Surface,
    rate_hz: float = 125.0,
    spike_rate: float = 0.004,
    gap_rate: float = 0.003,
    leave_rate: float = 0.001,
    duplicate_rate: float = 0.002,
) -> list[TraceRow]:
    """Generate a fake pointer trace with realistic-ish motion and injected artifacts.

    The cursor follows a slowly drifting Lissajous curve with small jitter.
    Artifacts injected at the given per-sample rates:
      - spike: the path is displaced by 150-400 px within a few ms
      - gap: 150-450 ms without events while the cursor keeps moving
      - leave: the pointer leaves the surface and re-enters elsewhere
      - duplicate: a second event with the same timestamp
    """

    rng = random.Random(seed)
    base_dt = 1000.0 / rate_hz
    cx, cy = surface.width / 2.0, surface.height / 2.0
    ax, ay = surface.width * 0.4, surface.height * 0.4
    off_x = off_y = 0.0
    phase = rng.uniform(0, 2 * math.pi)
    t = 0.0
    u = 0.0

    out: list[TraceRow] = []

    def position(param: float) -> tuple[float, float]:
        x = cx + off_x + ax * math.sin(param * 0.0011 + phase) + rng.uniform(-0.6, 0.6)
        y = cy + off_y + ay * math.sin(param * 0.0017) + rng.uniform(-0.6, 0.6)
        return x, y

    for _ in range(rows):
        step = base_dt + rng.uniform(-1.5, 1.5)
        roll = rng.random()
        if roll < spike_rate:
            # teleport: big displacement in almost no time
            angle = rng.uniform(0, 2 * math.pi)
            jump = rng.uniform(150, 400)
            off_x += jump * math.cos(angle)
            off_y += jump * math.sin(angle)
            step = rng.uniform(2.0, 6.0)
        elif roll < spike_rate + gap_rate:
            # stall: events stop while the hand keeps moving
            step = rng.uniform(150, 450)
        elif roll < spike_rate + gap_rate + leave_rate:
            out.append(TraceRow(t=t, x=0.0, y=0.0, event=EVENT_LEAVE))
            step = rng.uniform(300, 1500)

        t += step
        u += step
        x, y = position(u)
        out.append(TraceRow(t=round(t, 3), x=round(x, 2), y=round(y, 2)))
        if rng.random() < duplicate_rate:
            out.append(TraceRow(t=round(t, 3), x=round(x, 2), y=round(y, 2)))

    return out


def main() -> int:
    p = argparse.ArgumentParser(description="Generate a synthetic pointer trace CSV for demo/testing.")
    p.add_argument("--out", type=str, default="sample_data/trace.csv", help="Output CSV path")
    p.add_argument("--rows", type=int, default=3000, help="Number of move samples")
    p.add_argument("--seed", type=int, default=42, help="Random seed (reproducible)")
    p.add_argument("--rate-hz", type=float, default=125.0, help="Nominal event rate")
    p.add_argument("--width", type=float, default=960.0, help="Capture surface width (px)")
    p.add_argument("--height", type=float, default=540.0, help="Capture surface height (px)")
    p.add_argument("--spike-rate", type=float, default=0.004, help="Per-sample probability of a distance spike")
    p.add_argument("--gap-rate", type=float, default=0.003, help="Per-sample probability of a time gap")
    args = p.parse_args()

    rows = generate_trace(
        rows=args.rows,
        seed=args.seed,
        surface=Surface(args.width, args.height),
        rate_hz=args.rate_hz,
        spike_rate=args.spike_rate,
        gap_rate=args.gap_rate,
    )
    out_path = Path(args.out)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    write_trace_csv(rows, out_path)

    print(f"Generated: {out_path} (rows={len(rows)}, seed={args.seed})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
