"""
Mapping from driving frequency to a blend of two catalog modes.

The drive frequency is projected onto the catalog's base-frequency axis
(undoing the plate-size rescaling), placed on a log scale between F_MIN and
F_MAX, and turned into a fractional catalog position p. The two modes
bracketing p are blended with weight alpha = p - floor(p).
"""

import math
from dataclasses import dataclass
from typing import Optional, Union

from .modes import (
    F_MAX,
    F_MIN,
    LOG_F_MAX,
    LOG_F_MIN,
    Mode,
    ModeCatalog,
    Shape,
    parse_shape,
)


@dataclass(frozen=True)
class BlendDescriptor:
    """Interpolation between two adjacent catalog modes."""
    shape: Shape
    drive_frequency: float          # Clamped to [F_MIN, F_MAX]
    plate_size: float
    mode0: Optional[Mode]           # None for an empty catalog
    mode1: Optional[Mode]
    alpha: float                    # Weight of mode1, in [0, 1]
    position: float = 0.0           # Fractional catalog index p
    i0: Optional[int] = None
    i1: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        """True when there is no field to render."""
        return self.mode0 is None or self.mode1 is None

    @property
    def weights(self) -> tuple[float, float]:
        """Blend weights of (mode0, mode1)."""
        return (1.0 - self.alpha, self.alpha)


def clamp_frequency(freq_hz: float) -> float:
    """
    Clamp a frequency to [F_MIN, F_MAX].

    Out-of-range values are pinned to the nearest bound rather than
    rejected; NaN is pinned to F_MIN.
    """
    if math.isnan(freq_hz):
        return F_MIN
    return min(max(float(freq_hz), F_MIN), F_MAX)


def log_position(freq_hz: float) -> float:
    """
    Normalized position t in [0, 1] of a frequency on the log axis.
    """
    t = (math.log(clamp_frequency(freq_hz)) - LOG_F_MIN) / (LOG_F_MAX - LOG_F_MIN)
    return min(max(t, 0.0), 1.0)


def compute_blend(
    shape: Union[str, Shape],
    drive_frequency_hz: float,
    plate_size: float,
    catalog: ModeCatalog
) -> BlendDescriptor:
    """
    Compute which two modes are blended at a drive frequency and plate size.

    Parameters
    ----------
    shape : str or Shape
        Plate shape; must match the catalog.
    drive_frequency_hz : float
        Driving frequency. Clamped to [F_MIN, F_MAX], never rejected.
    plate_size : float
        Relative plate size, strictly positive.
    catalog : ModeCatalog
        Mode catalog for the shape.

    Returns
    -------
    blend : BlendDescriptor
        Modes catalog[i0], catalog[i1] and weight alpha. An empty catalog
        gives a descriptor with no modes and alpha = 0.

    Raises
    ------
    ValueError
        If the catalog was built for a different shape.
    """
    shape = parse_shape(shape)
    if catalog.shape != shape:
        raise ValueError(
            f"Catalog shape ({catalog.shape.value}) does not match shape ({shape.value})"
        )

    drive_hz = clamp_frequency(drive_frequency_hz)
    N = len(catalog)

    if N == 0:
        return BlendDescriptor(
            shape=shape,
            drive_frequency=drive_hz,
            plate_size=plate_size,
            mode0=None,
            mode1=None,
            alpha=0.0,
        )

    # Base frequencies live at plate size 1: f_base = f_drive * L^2
    f_base = clamp_frequency(drive_hz * plate_size * plate_size)
    t = log_position(f_base)

    p = t * (N - 1)
    i0 = int(math.floor(p))
    i1 = min(i0 + 1, N - 1)
    alpha = p - i0

    return BlendDescriptor(
        shape=shape,
        drive_frequency=drive_hz,
        plate_size=plate_size,
        mode0=catalog[i0],
        mode1=catalog[i1],
        alpha=alpha,
        position=p,
        i0=i0,
        i1=i1,
    )
