"""
Drive frequency sweeps.

Runs the pattern pipeline over a range of drive frequencies at a fixed
plate shape and size, collecting the blend position, nodal density and
mode diagnostics at every step.
"""

import logging
import numpy as np
from numpy.typing import NDArray
from dataclasses import dataclass
from typing import Optional
from datetime import datetime
import time

from .config import Config, SweepConfig
from .pipeline import PlateParams, PlateSimulator

logger = logging.getLogger(__name__)


@dataclass
class SweepResult:
    """Results from a complete frequency sweep."""
    # Sweep axis
    frequencies: NDArray[np.float64]        # Shape (n_freq,), requested drive

    # Result arrays (all shape (n_freq,))
    drive_frequencies: NDArray[np.float64]  # After clamping
    positions: NDArray[np.float64]
    alphas: NDArray[np.float64]
    i0: NDArray[np.int32]
    i1: NDArray[np.int32]
    nodal_counts: NDArray[np.int32]
    nodal_fractions: NDArray[np.float64]
    max_abs: NDArray[np.float64]
    closest_eigen: NDArray[np.float64]
    detuning: NDArray[np.float64]
    primary_labels: list[str]
    primary_weights: NDArray[np.float64]

    # Metadata
    config: Config
    config_hash: str
    timestamp: str
    elapsed_seconds: float
    total_points: int

    def get_point(self, i: int) -> dict:
        """Get results for a single sweep step."""
        return {
            "freq_hz": float(self.frequencies[i]),
            "drive_hz": float(self.drive_frequencies[i]),
            "position": float(self.positions[i]),
            "alpha": float(self.alphas[i]),
            "i0": int(self.i0[i]),
            "i1": int(self.i1[i]),
            "nodal_count": int(self.nodal_counts[i]),
            "nodal_fraction": float(self.nodal_fractions[i]),
            "max_abs": float(self.max_abs[i]),
            "closest_eigen_hz": float(self.closest_eigen[i]),
            "detuning_hz": float(self.detuning[i]),
            "primary_mode": self.primary_labels[i],
            "primary_weight": float(self.primary_weights[i]),
        }


def frequency_grid(sweep: SweepConfig) -> NDArray[np.float64]:
    """
    Drive frequencies visited by a sweep.

    Parameters
    ----------
    sweep : SweepConfig
        Sweep range, number of points and spacing.

    Returns
    -------
    frequencies : ndarray of shape (n_freq,)
        Log- or linearly spaced frequencies from f_start to f_stop.
    """
    if sweep.spacing == "log":
        return np.geomspace(sweep.f_start, sweep.f_stop, sweep.n_freq)
    elif sweep.spacing == "linear":
        return np.linspace(sweep.f_start, sweep.f_stop, sweep.n_freq)
    else:
        raise ValueError(f"Unknown spacing: {sweep.spacing}")


def run_sweep(
    config: Config,
    progress_callback: Optional[callable] = None
) -> SweepResult:
    """
    Run a drive frequency sweep.

    Parameters
    ----------
    config : Config
        Complete configuration for the sweep.
    progress_callback : callable, optional
        Called with (current_point, total_points) for progress updates.

    Returns
    -------
    result : SweepResult
        Complete sweep results.
    """
    from .io import compute_config_hash

    start_time = time.time()
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    simulator = PlateSimulator.from_config(config)
    base_params = PlateParams.from_config(config)
    frequencies = frequency_grid(config.sweep)

    n_freq = len(frequencies)
    logger.info(
        "Sweeping %d frequencies on %s plate (L=%.3f)",
        n_freq, base_params.shape.value, base_params.plate_size
    )

    # Preallocate result arrays
    drive_arr = np.zeros(n_freq, dtype=np.float64)
    position_arr = np.zeros(n_freq, dtype=np.float64)
    alpha_arr = np.zeros(n_freq, dtype=np.float64)
    i0_arr = np.full(n_freq, -1, dtype=np.int32)
    i1_arr = np.full(n_freq, -1, dtype=np.int32)
    count_arr = np.zeros(n_freq, dtype=np.int32)
    fraction_arr = np.zeros(n_freq, dtype=np.float64)
    max_abs_arr = np.zeros(n_freq, dtype=np.float64)
    closest_arr = np.full(n_freq, np.nan, dtype=np.float64)
    detuning_arr = np.full(n_freq, np.nan, dtype=np.float64)
    primary_weights = np.zeros(n_freq, dtype=np.float64)
    primary_labels = []

    for i, freq in enumerate(frequencies):
        frame = simulator.compute(base_params.with_changes(freq_hz=float(freq)))
        blend = frame.blend
        summary = frame.summary

        drive_arr[i] = blend.drive_frequency
        position_arr[i] = blend.position
        alpha_arr[i] = blend.alpha
        if not blend.is_empty:
            i0_arr[i] = blend.i0
            i1_arr[i] = blend.i1
        count_arr[i] = frame.field.nodal_count
        fraction_arr[i] = frame.field.nodal_fraction
        max_abs_arr[i] = frame.field.max_abs
        if summary.closest_mode is not None:
            closest_arr[i] = summary.closest_eigen_frequency
            detuning_arr[i] = summary.detuning
        if summary.primary is not None:
            primary_labels.append(summary.primary.mode.label())
            primary_weights[i] = summary.primary.weight
        else:
            primary_labels.append("")

        if progress_callback is not None:
            progress_callback(i + 1, n_freq)

    elapsed = time.time() - start_time
    config_hash = compute_config_hash(config)
    logger.info("Sweep finished in %.2fs", elapsed)

    return SweepResult(
        frequencies=frequencies,
        drive_frequencies=drive_arr,
        positions=position_arr,
        alphas=alpha_arr,
        i0=i0_arr,
        i1=i1_arr,
        nodal_counts=count_arr,
        nodal_fractions=fraction_arr,
        max_abs=max_abs_arr,
        closest_eigen=closest_arr,
        detuning=detuning_arr,
        primary_labels=primary_labels,
        primary_weights=primary_weights,
        config=config,
        config_hash=config_hash,
        timestamp=timestamp,
        elapsed_seconds=elapsed,
        total_points=n_freq
    )


def select_frame_frequencies(result: SweepResult, n_frames: int) -> NDArray[np.float64]:
    """
    Pick evenly spaced sweep frequencies for still frames.

    Parameters
    ----------
    result : SweepResult
        Sweep results.
    n_frames : int
        Number of frames wanted; capped at the sweep length.

    Returns
    -------
    frequencies : ndarray
        Requested drive frequencies of the chosen sweep steps, in sweep
        order.
    """
    n = min(n_frames, result.total_points)
    if n <= 0:
        return np.zeros(0, dtype=np.float64)
    idx = np.unique(np.round(np.linspace(0, result.total_points - 1, n)).astype(int))
    return result.frequencies[idx]


def get_sweep_summary(result: SweepResult) -> dict:
    """
    Get a summary of sweep results.

    Parameters
    ----------
    result : SweepResult
        Sweep results.

    Returns
    -------
    summary : dict
        Summary statistics.
    """
    # Count how many sweep steps each dominant mode held
    mode_counts = {}
    for label in result.primary_labels:
        if label:
            mode_counts[label] = mode_counts.get(label, 0) + 1

    has_points = result.total_points > 0
    return {
        "total_points": result.total_points,
        "distinct_primary_modes": len(mode_counts),
        "mode_counts": mode_counts,
        "nodal_fraction_mean": float(np.mean(result.nodal_fractions)) if has_points else 0.0,
        "nodal_fraction_min": float(np.min(result.nodal_fractions)) if has_points else 0.0,
        "nodal_fraction_max": float(np.max(result.nodal_fractions)) if has_points else 0.0,
        "detuning_mean": float(np.nanmean(result.detuning)) if np.any(np.isfinite(result.detuning)) else 0.0,
        "elapsed_seconds": result.elapsed_seconds,
        "points_per_second": result.total_points / result.elapsed_seconds if result.elapsed_seconds > 0 else 0.0
    }
