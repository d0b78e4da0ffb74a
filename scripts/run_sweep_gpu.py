#!/usr/bin/env python3
"""
Run a JAX-accelerated frequency sweep from a configuration file.

Usage:
    python scripts/run_sweep_gpu.py configs/default.yaml
"""

import argparse
import logging
import sys
from pathlib import Path

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from chladni_plate.config import load_config
from chladni_plate.gpu_sweep import run_sweep_gpu
from chladni_plate.sweep import get_sweep_summary
from chladni_plate.io import create_run_folder, save_results
from chladni_plate.logging_config import setup_logging
from chladni_plate.plots import plot_all


def main():
    parser = argparse.ArgumentParser(description="Run a Chladni frequency sweep with JAX.")
    parser.add_argument("config", type=Path, help="Path to YAML configuration file.")
    parser.add_argument(
        "--output-dir",
        "-o",
        type=Path,
        default=None,
        help="Override output directory from config.",
    )
    parser.add_argument("--no-plots", action="store_true", help="Skip plot generation.")
    parser.add_argument(
        "--quiet", "-q", action="store_true", help="Suppress progress output."
    )

    args = parser.parse_args()
    setup_logging(logging.WARNING if args.quiet else logging.INFO)

    if not args.quiet:
        print(f"Loading config: {args.config}")
    config = load_config(args.config)

    if args.output_dir is not None:
        config.run.out_dir = str(args.output_dir)

    if not args.quiet:
        print(f"Plate: {config.plate.shape}, L={config.plate.plate_size}")
        print(
            f"Sweep: {config.sweep.f_start:g}-{config.sweep.f_stop:g} Hz, "
            f"{config.sweep.n_freq} points ({config.sweep.spacing})"
        )
        print(f"Sampling: R={config.sampling.resolution}")
        print("Running GPU sweep...")

    result = run_sweep_gpu(config)

    run_path = create_run_folder(config, result.timestamp)
    save_results(result, run_path)

    if not args.quiet:
        print(f"Results saved to: {run_path}")

    if not args.no_plots:
        if not args.quiet:
            print("Generating plots...")
        plot_paths = plot_all(result, run_path)
        if not args.quiet:
            for name, path in plot_paths.items():
                print(f"  - {name}: {path.name}")

    summary = get_sweep_summary(result)
    if not args.quiet:
        print()
        print("Summary:")
        print(f"  Distinct dominant modes: {summary['distinct_primary_modes']}")
        print(f"  Mean nodal fraction: {summary['nodal_fraction_mean']:.3f}")
        print(
            f"  Elapsed time: {summary['elapsed_seconds']:.2f}s ({summary['points_per_second']:.1f} points/s)"
        )

    print(f"\nRun complete: {run_path}")
    return str(run_path)


if __name__ == "__main__":
    main()
