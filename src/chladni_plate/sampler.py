"""
Field sampling and nodal-point extraction.

Evaluates the blended displacement over a uniform grid of normalized
coordinates and keeps the grid points whose displacement is close to zero.
Those points trace the nodal lines where sand collects on a real plate.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Union

import numpy as np
from numpy.typing import NDArray

from .displacement import mode_displacement
from .mapping import BlendDescriptor
from .modes import Shape, parse_shape

logger = logging.getLogger(__name__)

DEFAULT_RESOLUTION = 320
DEFAULT_NODE_THRESHOLD = 0.08
DEFAULT_FILL = 0.45


@dataclass(frozen=True)
class Viewport:
    """
    Output surface the pattern is mapped onto.

    The plate is centered, and its half extent is `fill` times the smaller
    dimension, scaled by plate size.
    """
    width: float
    height: float
    fill: float = DEFAULT_FILL
    y_down: bool = True  # Pixel rows grow downward

    @property
    def center(self) -> tuple[float, float]:
        return (self.width / 2.0, self.height / 2.0)

    def half_extent(self, plate_size: float) -> float:
        return self.fill * min(self.width, self.height) * plate_size

    def to_pixels(self, points: NDArray[np.float64], plate_size: float) -> NDArray[np.float64]:
        """
        Convert normalized (x, y) points to output coordinates.

        Parameters
        ----------
        points : ndarray of shape (K, 2)
            Normalized coordinates.
        plate_size : float
            Relative plate size.

        Returns
        -------
        pixels : ndarray of shape (K, 2)
            Output coordinates.
        """
        points = np.asarray(points, dtype=np.float64).reshape(-1, 2)
        cx, cy = self.center
        half = self.half_extent(plate_size)
        y_sign = -1.0 if self.y_down else 1.0

        pixels = np.empty_like(points)
        pixels[:, 0] = cx + points[:, 0] * half
        pixels[:, 1] = cy + y_sign * points[:, 1] * half
        return pixels


@dataclass(frozen=True)
class PlateOutline:
    """Outline geometry of the plate in output coordinates."""
    shape: Shape
    center: tuple[float, float]
    half_extent: float  # Half side for squares, radius for circles

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        """(left, top, width, height) of the bounding square."""
        cx, cy = self.center
        h = self.half_extent
        return (cx - h, cy - h, 2 * h, 2 * h)


def plate_outline(shape: Union[str, Shape], plate_size: float, viewport: Viewport) -> PlateOutline:
    """Outline of the plate for a given viewport."""
    return PlateOutline(
        shape=parse_shape(shape),
        center=viewport.center,
        half_extent=viewport.half_extent(plate_size),
    )


@dataclass
class SampledField:
    """Displacement samples and nodal points from one sampling pass."""
    amplitudes: NDArray[np.float64]     # Shape (R, R), row = y, column = x
    inside: NDArray[np.bool_]           # Shape (R, R)
    nodal_points: NDArray[np.float64]   # Shape (K, 2), normalized (x, y)
    max_abs: float
    threshold: float
    resolution: int
    plate_size: float

    @property
    def nodal_count(self) -> int:
        return int(self.nodal_points.shape[0])

    @property
    def nodal_fraction(self) -> float:
        """Share of all grid points that are nodal."""
        if self.amplitudes.size == 0:
            return 0.0
        return self.nodal_count / self.amplitudes.size

    def pixel_points(self, viewport: Viewport) -> NDArray[np.float64]:
        return viewport.to_pixels(self.nodal_points, self.plate_size)


@lru_cache(maxsize=8)
def sample_grid(resolution: int) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """
    Uniform grid of normalized coordinates.

    Parameters
    ----------
    resolution : int
        Points per axis, at least 2.

    Returns
    -------
    xn, yn : ndarray of shape (resolution, resolution)
        Coordinates stepping from -1 to 1 by 2 / (resolution - 1); row
        index follows y, column index follows x. The arrays are cached and
        read-only.
    """
    if resolution < 2:
        raise ValueError("resolution must be at least 2")

    step = 2.0 / (resolution - 1)
    axis = -1.0 + np.arange(resolution, dtype=np.float64) * step
    yn, xn = np.meshgrid(axis, axis, indexing="ij")
    xn.setflags(write=False)
    yn.setflags(write=False)
    return xn, yn


def plate_mask(
    shape: Union[str, Shape],
    xn: NDArray[np.float64],
    yn: NDArray[np.float64]
) -> NDArray[np.bool_]:
    """
    Membership of grid points in the plate.

    Square plates cover the whole [-1, 1]^2 grid; circular plates the unit
    disc.
    """
    shape = parse_shape(shape)
    if shape == Shape.SQUARE:
        return (np.abs(xn) <= 1.0) & (np.abs(yn) <= 1.0)
    elif shape == Shape.CIRCLE:
        return np.hypot(xn, yn) <= 1.0
    else:
        raise ValueError(f"Unknown shape: {shape}")


def node_threshold(max_abs: float, threshold_fraction: float) -> float:
    """
    Absolute nodal threshold for a field.

    The floor of 1 on max_abs keeps a degenerate all-zero field from
    collapsing the threshold to zero.
    """
    return threshold_fraction * max(max_abs, 1.0)


def sample_field(
    blend: BlendDescriptor,
    shape: Union[str, Shape],
    plate_size: float,
    resolution: int = DEFAULT_RESOLUTION,
    threshold_fraction: float = DEFAULT_NODE_THRESHOLD
) -> SampledField:
    """
    Sample the blended displacement and extract the nodal points.

    Parameters
    ----------
    blend : BlendDescriptor
        Modes and weight to evaluate.
    shape : str or Shape
        Plate shape, selects the inside-plate test.
    plate_size : float
        Relative plate size, kept for output-coordinate mapping.
    resolution : int, optional
        Grid points per axis (default 320).
    threshold_fraction : float, optional
        Nodal threshold relative to max(max_abs, 1) (default 0.08).

    Returns
    -------
    field : SampledField
        Amplitudes, inside mask, nodal points in row-major grid order and
        the observed maximum absolute displacement. Points off the plate
        have zero displacement and so count as nodal. An empty blend
        yields an all-zero field with no nodal points.

    Raises
    ------
    ValueError
        If the threshold fraction is negative or the blend was computed
        for a different shape.
    """
    if threshold_fraction < 0:
        raise ValueError("threshold_fraction must be non-negative")

    shape = parse_shape(shape)
    if blend.shape != shape:
        raise ValueError(
            f"Blend shape ({blend.shape.value}) does not match shape ({shape.value})"
        )
    xn, yn = sample_grid(resolution)
    inside = plate_mask(shape, xn, yn)
    amplitudes = np.zeros((resolution, resolution), dtype=np.float64)

    if blend.is_empty:
        return SampledField(
            amplitudes=amplitudes,
            inside=inside,
            nodal_points=np.zeros((0, 2), dtype=np.float64),
            max_abs=0.0,
            threshold=0.0,
            resolution=resolution,
            plate_size=plate_size,
        )

    alpha = blend.alpha
    x_in = xn[inside]
    y_in = yn[inside]

    v0 = mode_displacement(blend.mode0, x_in, y_in)
    v1 = mode_displacement(blend.mode1, x_in, y_in)
    amplitudes[inside] = (1.0 - alpha) * v0 + alpha * v1

    max_abs = float(np.max(np.abs(amplitudes))) if amplitudes.size else 0.0
    threshold = node_threshold(max_abs, threshold_fraction)

    nodal = np.abs(amplitudes) <= threshold
    nodal_points = np.column_stack([xn[nodal], yn[nodal]])

    logger.debug(
        "Sampled %s field at R=%d: max_abs=%.4f, %d nodal points",
        shape.value, resolution, max_abs, nodal_points.shape[0]
    )

    return SampledField(
        amplitudes=amplitudes,
        inside=inside,
        nodal_points=nodal_points,
        max_abs=max_abs,
        threshold=threshold,
        resolution=resolution,
        plate_size=plate_size,
    )
