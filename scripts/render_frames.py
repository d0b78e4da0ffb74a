#!/usr/bin/env python3
"""
Render still pattern frames from an existing sweep run.

Picks evenly spaced drive frequencies from the run, renders each pattern
and optionally writes its nodal points (pixel coordinates) next to it.
A different plate size can be given to compare patterns across plates.

Usage:
    python scripts/render_frames.py out/run_20240101_120000_abc123/ --frames 12
    python scripts/render_frames.py out/run_20240101_120000_abc123/ --size 0.6 --points
"""

import argparse
import sys
from pathlib import Path

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import matplotlib.pyplot as plt

from chladni_plate.io import load_results, save_nodal_points
from chladni_plate.pipeline import PlateSimulator
from chladni_plate.plots import plot_pattern
from chladni_plate.sweep import select_frame_frequencies


def main():
    parser = argparse.ArgumentParser(
        description="Render still pattern frames from an existing sweep run."
    )
    parser.add_argument(
        "run_path",
        type=Path,
        help="Path to run folder."
    )
    parser.add_argument(
        "--frames",
        type=int,
        default=None,
        help="Number of frames (default: sweep.n_frames from the run config)."
    )
    parser.add_argument(
        "--size",
        type=float,
        default=None,
        help="Plate size to render at (default: the run's plate size)."
    )
    parser.add_argument(
        "--points",
        action="store_true",
        help="Also write each frame's nodal points to CSV."
    )
    parser.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Output directory (default: <run_path>/frames)."
    )
    parser.add_argument(
        "--dpi",
        type=int,
        default=150,
        help="Image resolution (default: 150)."
    )

    args = parser.parse_args()

    if not args.run_path.exists():
        print(f"Error: Run folder not found: {args.run_path}")
        sys.exit(1)
    if args.size is not None and args.size <= 0:
        print("Error: --size must be positive")
        sys.exit(1)

    print(f"Loading results from: {args.run_path}")
    result = load_results(args.run_path)
    config = result.config

    n_frames = config.sweep.n_frames if args.frames is None else args.frames
    out_dir = args.out if args.out is not None else args.run_path / "frames"
    out_dir.mkdir(parents=True, exist_ok=True)

    simulator = PlateSimulator.from_config(config)
    params = config.plate_params()
    if args.size is not None:
        params = params.with_changes(plate_size=args.size)
    viewport = config.to_viewport()

    print(f"Rendering {n_frames} frames at L={params.plate_size} ({params.shape.value})...")
    for k, freq in enumerate(select_frame_frequencies(result, n_frames)):
        frame = simulator.compute(params.with_changes(freq_hz=float(freq)))
        stem = f"frame_{k:02d}_{freq:.0f}hz_L{params.plate_size:g}"

        fig = plot_pattern(
            frame, viewport,
            save_path=out_dir / f"{stem}.png",
            dot_size=config.viewport.dot_size,
            dpi=args.dpi
        )
        plt.close(fig)

        line = f"  - {stem}.png: {frame.field.nodal_count} nodal points"
        if args.points:
            save_nodal_points(frame, out_dir / f"{stem}.csv", viewport)
            line += f", {stem}.csv"
        print(line)

    print(f"Frames written to: {out_dir}")


if __name__ == "__main__":
    main()
