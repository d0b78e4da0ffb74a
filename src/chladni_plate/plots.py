"""
Plotting functions for Chladni patterns and frequency sweeps.

Provides functions to render nodal patterns onto a plate outline and to
chart how the mode blend and nodal density evolve across a sweep.
"""

import numpy as np
from pathlib import Path
from typing import Optional, Union
import matplotlib
matplotlib.use('Agg')  # Use non-interactive backend
import matplotlib.pyplot as plt
import matplotlib.patches as mpatches
from matplotlib.colors import to_rgb

from .pipeline import Frame, PlateSimulator
from .sampler import Viewport, plate_outline
from .modes import Shape
from .summary import describe_summary
from .sweep import SweepResult, select_frame_frequencies

# Canvas palette
BACKGROUND_INNER = "#05060c"
BACKGROUND_OUTER = "#020208"
OUTLINE_COLOR = (230 / 255, 235 / 255, 1.0, 0.9)
NODE_COLOR = (120 / 255, 220 / 255, 1.0, 0.9)


def _radial_background(ax, viewport: Viewport) -> None:
    """Fill the axes with a dark radial gradient."""
    w, h = viewport.width, viewport.height
    yy, xx = np.mgrid[0:h:complex(0, 128), 0:w:complex(0, 128)]
    cx, cy = viewport.center
    radius = max(w, h) * 0.6
    t = np.clip(np.hypot(xx - cx, yy - cy) / radius, 0, 1)

    inner = np.array(to_rgb(BACKGROUND_INNER))
    outer = np.array(to_rgb(BACKGROUND_OUTER))
    img = inner[None, None, :] * (1 - t[..., None]) + outer[None, None, :] * t[..., None]

    ax.imshow(img, extent=(0, w, h, 0), interpolation='bilinear', zorder=0)


def plot_pattern(
    frame: Frame,
    viewport: Optional[Viewport] = None,
    save_path: Optional[Union[str, Path]] = None,
    dot_size: float = 1.4,
    dpi: int = 150,
    show_labels: bool = True
) -> plt.Figure:
    """
    Plot the nodal pattern of a frame on its plate outline.

    Parameters
    ----------
    frame : Frame
        Frame to draw.
    viewport : Viewport, optional
        Output surface in pixels (default 600 x 400).
    save_path : str or Path, optional
        Path to save the figure. If None, figure is not saved.
    dot_size : float, optional
        Nodal dot size in pixels (default 1.4).
    dpi : int, optional
        Resolution for saving (default 150).
    show_labels : bool, optional
        Whether to print the mode summary under the plate (default True).

    Returns
    -------
    fig : matplotlib.figure.Figure
        The generated figure.
    """
    if viewport is None:
        viewport = Viewport(width=600, height=400)

    fig = plt.figure(figsize=(viewport.width / 100, viewport.height / 100))
    ax = fig.add_axes([0, 0, 1, 1])
    _radial_background(ax, viewport)

    # Plate outline
    outline = plate_outline(frame.params.shape, frame.params.plate_size, viewport)
    if outline.shape == Shape.SQUARE:
        left, top, width, height = outline.bounds
        patch = mpatches.Rectangle(
            (left, top), width, height,
            fill=False, edgecolor=OUTLINE_COLOR, linewidth=2
        )
    else:
        patch = mpatches.Circle(
            outline.center, outline.half_extent,
            fill=False, edgecolor=OUTLINE_COLOR, linewidth=2
        )
    ax.add_patch(patch)

    # Nodal points; marker size is in points^2
    points = frame.pixel_points(viewport)
    if len(points):
        marker_pts = dot_size * 72.0 / 100
        ax.scatter(
            points[:, 0], points[:, 1],
            s=marker_pts ** 2, marker='s', color=NODE_COLOR,
            linewidths=0, zorder=2
        )

    if show_labels:
        mode_line, freq_line = describe_summary(frame.summary)
        ax.text(
            0.5, 0.02, f"{mode_line}\n{freq_line}".strip(),
            transform=ax.transAxes, ha='center', va='bottom',
            color=OUTLINE_COLOR, fontsize=6
        )

    ax.set_xlim(0, viewport.width)
    ax.set_ylim(viewport.height, 0)
    ax.set_axis_off()

    if save_path is not None:
        fig.savefig(save_path, dpi=dpi, facecolor=BACKGROUND_OUTER)

    return fig


def plot_sweep_position(
    result: SweepResult,
    save_path: Optional[Union[str, Path]] = None,
    figsize: tuple[float, float] = (10, 6),
    dpi: int = 150
) -> plt.Figure:
    """
    Plot the catalog position p against drive frequency.

    Parameters
    ----------
    result : SweepResult
        Sweep results to plot.
    save_path : str or Path, optional
        Path to save the figure. If None, figure is not saved.
    figsize : tuple, optional
        Figure size in inches (default (10, 6)).
    dpi : int, optional
        Resolution for saving (default 150).

    Returns
    -------
    fig : matplotlib.figure.Figure
        The generated figure.
    """
    fig, ax = plt.subplots(figsize=figsize)

    ax.plot(result.frequencies, result.positions, 'b-', linewidth=2, label='Catalog position $p$')
    ax.step(
        result.frequencies, result.i0, where='post',
        color='gray', linewidth=1, linestyle='--', label='Lower mode index $i_0$'
    )

    ax.set_xscale('log')
    ax.set_xlabel('Drive frequency (Hz)', fontsize=12)
    ax.set_ylabel('Mode index', fontsize=12)
    shape = result.config.plate.shape
    ax.set_title(
        f'Mode Blend Position ({shape}, $L={result.config.plate.plate_size}$)',
        fontsize=14
    )
    ax.legend(loc='best')
    ax.grid(True, alpha=0.3, which='both', linestyle=':')

    plt.tight_layout()

    if save_path is not None:
        fig.savefig(save_path, dpi=dpi, bbox_inches='tight')

    return fig


def plot_nodal_density(
    result: SweepResult,
    save_path: Optional[Union[str, Path]] = None,
    figsize: tuple[float, float] = (10, 6),
    dpi: int = 150
) -> plt.Figure:
    """
    Plot nodal fraction and detuning against drive frequency.

    Parameters
    ----------
    result : SweepResult
        Sweep results to plot.
    save_path : str or Path, optional
        Path to save the figure. If None, figure is not saved.
    figsize : tuple, optional
        Figure size in inches (default (10, 6)).
    dpi : int, optional
        Resolution for saving (default 150).

    Returns
    -------
    fig : matplotlib.figure.Figure
        The generated figure.
    """
    fig, ax = plt.subplots(figsize=figsize)

    ax.plot(result.frequencies, result.nodal_fractions, 'g-', linewidth=2, label='Nodal fraction')
    ax.set_xscale('log')
    ax.set_xlabel('Drive frequency (Hz)', fontsize=12)
    ax.set_ylabel('Nodal fraction of plate', fontsize=12)
    ax.set_ylim(0, max(1e-3, float(np.max(result.nodal_fractions, initial=0.0))) * 1.1)

    ax2 = ax.twinx()
    ax2.plot(result.frequencies, result.detuning, 'r--', linewidth=1, label=r'Detuning $\Delta f$')
    ax2.set_ylabel(r'Detuning $\Delta f$ (Hz)', fontsize=12)

    handles = ax.get_legend_handles_labels()[0] + ax2.get_legend_handles_labels()[0]
    ax.legend(handles=handles, loc='upper left')
    ax.set_title('Nodal Density Across Sweep', fontsize=14)
    ax.grid(True, alpha=0.3, linestyle=':')

    plt.tight_layout()

    if save_path is not None:
        fig.savefig(save_path, dpi=dpi, bbox_inches='tight')

    return fig


def plot_frames(
    result: SweepResult,
    output_dir: Union[str, Path],
    n_frames: Optional[int] = None,
    dpi: int = 150
) -> list[Path]:
    """
    Render still pattern frames at evenly spaced sweep frequencies.

    Parameters
    ----------
    result : SweepResult
        Sweep results; its config supplies plate and sampling settings.
    output_dir : str or Path
        Directory to save frames.
    n_frames : int, optional
        Number of frames. If None, uses the config value.
    dpi : int, optional
        Resolution for saving (default 150).

    Returns
    -------
    paths : list of Path
        Saved frame paths, in sweep order.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    config = result.config
    if n_frames is None:
        n_frames = config.sweep.n_frames

    simulator = PlateSimulator.from_config(config)
    params = config.plate_params()
    viewport = config.to_viewport()

    paths = []
    for k, freq in enumerate(select_frame_frequencies(result, n_frames)):
        frame = simulator.compute(params.with_changes(freq_hz=float(freq)))
        path = output_dir / f"frame_{k:02d}_{freq:.0f}hz.png"
        fig = plot_pattern(frame, viewport, save_path=path, dot_size=config.viewport.dot_size, dpi=dpi)
        plt.close(fig)
        paths.append(path)

    return paths


def plot_all(
    result: SweepResult,
    output_dir: Union[str, Path],
    dpi: int = 150
) -> dict[str, Path]:
    """
    Generate all standard sweep plots and save to output directory.

    Parameters
    ----------
    result : SweepResult
        Sweep results to plot.
    output_dir : str or Path
        Directory to save plots.
    dpi : int, optional
        Resolution for saving (default 150).

    Returns
    -------
    paths : dict
        Dictionary mapping plot names to file paths.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    paths = {}

    position_path = output_dir / "plot_sweep_position.png"
    fig = plot_sweep_position(result, save_path=position_path, dpi=dpi)
    plt.close(fig)
    paths["sweep_position"] = position_path

    density_path = output_dir / "plot_nodal_density.png"
    fig = plot_nodal_density(result, save_path=density_path, dpi=dpi)
    plt.close(fig)
    paths["nodal_density"] = density_path

    for k, frame_path in enumerate(plot_frames(result, output_dir, dpi=dpi)):
        paths[f"frame_{k:02d}"] = frame_path

    return paths
