"""
GPU-accelerated frequency sweep using JAX.
"""

import logging
import time
from datetime import datetime

import jax
import jax.numpy as jnp
import numpy as np

from .config import Config
from .displacement import CIRCLE_DAMPING
from .pipeline import PlateParams, PlateSimulator
from .modes import Shape
from .sampler import plate_mask, sample_grid
from .summary import summarize
from .sweep import SweepResult, frequency_grid

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# JAX-compatible displacement fields
# -----------------------------------------------------------------------------


def square_field_jax(xn: jnp.ndarray, yn: jnp.ndarray, m: float, n: float) -> jnp.ndarray:
    """
    Square plate mode displacement (JAX version).
    """
    X = (xn + 1.0) * 0.5
    Y = (yn + 1.0) * 0.5
    u = jnp.cos(n * jnp.pi * X) * jnp.cos(m * jnp.pi * Y) - jnp.cos(m * jnp.pi * X) * jnp.cos(n * jnp.pi * Y)
    return jnp.where(m == n, 0.0, u)


def circle_field_jax(xn: jnp.ndarray, yn: jnp.ndarray, m: float, n_radial: float) -> jnp.ndarray:
    """
    Circular plate mode displacement (JAX version).
    """
    r = jnp.hypot(xn, yn)
    theta = jnp.arctan2(yn, xn)
    u = jnp.cos(m * theta) * jnp.cos(n_radial * jnp.pi * r) * jnp.exp(-CIRCLE_DAMPING * r * r)
    return jnp.where(r > 1.0, 0.0, u)


def make_blend_evaluator(is_square: bool, xn: jnp.ndarray, yn: jnp.ndarray,
                         inside: jnp.ndarray, threshold_fraction: float):
    """
    Build a jitted, vmapped evaluator of blended fields.

    The returned function maps arrays of (a0, b0, a1, b1, alpha) of length B
    to (max_abs, nodal_count) arrays of length B.
    """
    field_fn = square_field_jax if is_square else circle_field_jax

    def evaluate(a0, b0, a1, b1, alpha):
        v0 = field_fn(xn, yn, a0, b0)
        v1 = field_fn(xn, yn, a1, b1)
        u = jnp.where(inside, (1.0 - alpha) * v0 + alpha * v1, 0.0)
        max_abs = jnp.max(jnp.abs(u))
        threshold = threshold_fraction * jnp.maximum(max_abs, 1.0)
        nodal = jnp.abs(u) <= threshold
        return max_abs, jnp.sum(nodal)

    return jax.jit(jax.vmap(evaluate))


# -----------------------------------------------------------------------------
# Batch Sweep
# -----------------------------------------------------------------------------


def run_sweep_gpu(config: Config, batch_size: int = 256) -> SweepResult:
    """
    Run the frequency sweep with field evaluation on the JAX backend.

    Blends and summaries are cheap and computed on CPU; the R x R field
    evaluations for all frequencies are batched through jax.vmap.

    Parameters
    ----------
    config : Config
        Complete configuration for the sweep.
    batch_size : int, optional
        Frequencies evaluated per device call (default 256).

    Returns
    -------
    result : SweepResult
        Sweep results in the same layout as run_sweep().
    """
    from .io import compute_config_hash

    logger.info("JAX backend: %s", jax.devices()[0])

    start_time = time.time()
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    simulator = PlateSimulator.from_config(config)
    base_params = PlateParams.from_config(config)
    frequencies = frequency_grid(config.sweep)
    n_freq = len(frequencies)

    # 1. Blends and summaries on CPU
    blends = []
    summaries = []
    catalog = simulator.catalog_for(base_params)
    for freq in frequencies:
        params = base_params.with_changes(freq_hz=float(freq))
        blend = simulator.blend(params)
        blends.append(blend)
        summaries.append(summarize(blend, catalog))

    # 2. Grid and plate mask, moved to device
    resolution = config.sampling.resolution
    xn_np, yn_np = sample_grid(resolution)
    inside_np = plate_mask(base_params.shape, xn_np, yn_np)
    n_grid = resolution * resolution

    evaluator = make_blend_evaluator(
        base_params.shape == Shape.SQUARE,
        jnp.array(xn_np), jnp.array(yn_np), jnp.array(inside_np),
        config.sampling.node_threshold,
    )

    max_abs_arr = np.zeros(n_freq, dtype=np.float64)
    count_arr = np.zeros(n_freq, dtype=np.int32)

    # Empty blends render nothing and are skipped
    live = [i for i, b in enumerate(blends) if not b.is_empty]
    n_batches = int(np.ceil(len(live) / batch_size)) if live else 0
    logger.info("Evaluating %d fields in %d batches", len(live), n_batches)

    for k in range(n_batches):
        idx = live[k * batch_size:(k + 1) * batch_size]
        a0 = jnp.array([blends[i].mode0.a for i in idx], dtype=jnp.float32)
        b0 = jnp.array([blends[i].mode0.b for i in idx], dtype=jnp.float32)
        a1 = jnp.array([blends[i].mode1.a for i in idx], dtype=jnp.float32)
        b1 = jnp.array([blends[i].mode1.b for i in idx], dtype=jnp.float32)
        alpha = jnp.array([blends[i].alpha for i in idx], dtype=jnp.float32)

        max_abs_b, count_b = evaluator(a0, b0, a1, b1, alpha)
        max_abs_b.block_until_ready()

        max_abs_arr[idx] = np.asarray(max_abs_b)
        count_arr[idx] = np.asarray(count_b)

    # 3. Assemble result arrays
    drive_arr = np.array([b.drive_frequency for b in blends], dtype=np.float64)
    position_arr = np.array([b.position for b in blends], dtype=np.float64)
    alpha_arr = np.array([b.alpha for b in blends], dtype=np.float64)
    i0_arr = np.array([b.i0 if not b.is_empty else -1 for b in blends], dtype=np.int32)
    i1_arr = np.array([b.i1 if not b.is_empty else -1 for b in blends], dtype=np.int32)
    fraction_arr = count_arr / n_grid

    closest_arr = np.array(
        [s.closest_eigen_frequency if s.closest_mode is not None else np.nan for s in summaries],
        dtype=np.float64
    )
    detuning_arr = np.array(
        [s.detuning if s.closest_mode is not None else np.nan for s in summaries],
        dtype=np.float64
    )
    primary_labels = [s.primary.mode.label() if s.primary else "" for s in summaries]
    primary_weights = np.array([s.primary.weight if s.primary else 0.0 for s in summaries])

    elapsed = time.time() - start_time
    logger.info("GPU sweep completed in %.2fs", elapsed)

    return SweepResult(
        frequencies=frequencies,
        drive_frequencies=drive_arr,
        positions=position_arr,
        alphas=alpha_arr,
        i0=i0_arr,
        i1=i1_arr,
        nodal_counts=count_arr,
        nodal_fractions=np.asarray(fraction_arr, dtype=np.float64),
        max_abs=max_abs_arr,
        closest_eigen=closest_arr,
        detuning=detuning_arr,
        primary_labels=primary_labels,
        primary_weights=primary_weights,
        config=config,
        config_hash=compute_config_hash(config),
        timestamp=timestamp,
        elapsed_seconds=elapsed,
        total_points=n_freq,
    )
