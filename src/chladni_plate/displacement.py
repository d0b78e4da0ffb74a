"""
Closed-form displacement fields for single plate modes.

All functions accept scalars or broadcastable arrays of normalized
coordinates in [-1, 1] and are free of side effects.
"""

from typing import Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .modes import Mode, Shape

# Gaussian damping of the radial profile on circular plates
CIRCLE_DAMPING = 1.2

FieldValue = Union[float, NDArray[np.float64]]


def _as_result(u: NDArray[np.float64]) -> FieldValue:
    """Unwrap 0-d arrays to Python floats."""
    if u.ndim == 0:
        return float(u)
    return u


def square_displacement(xn: ArrayLike, yn: ArrayLike, m: int, n: int) -> FieldValue:
    """
    Displacement of the (m, n) mode of a square plate.

    Uses the antisymmetric cosine form

        u = cos(n pi X) cos(m pi Y) - cos(m pi X) cos(n pi Y)

    with X = (xn + 1) / 2 and Y = (yn + 1) / 2 in [0, 1].

    Parameters
    ----------
    xn, yn : float or ndarray
        Normalized coordinates in [-1, 1].
    m, n : int
        Mode indices.

    Returns
    -------
    u : float or ndarray
        Displacement. Exactly zero everywhere when m == n.
    """
    xn = np.asarray(xn, dtype=np.float64)
    yn = np.asarray(yn, dtype=np.float64)

    if m == n:
        # Trivial solution; the two terms cancel identically
        return _as_result(np.zeros(np.broadcast(xn, yn).shape, dtype=np.float64))

    X = (xn + 1.0) * 0.5
    Y = (yn + 1.0) * 0.5

    term1 = np.cos(n * np.pi * X) * np.cos(m * np.pi * Y)
    term2 = np.cos(m * np.pi * X) * np.cos(n * np.pi * Y)
    return _as_result(term1 - term2)


def circle_displacement(xn: ArrayLike, yn: ArrayLike, m: int, n_radial: int) -> FieldValue:
    """
    Approximate displacement of the (m, n_r) mode of a circular plate.

        u = cos(m theta) * cos(n_r pi r) * exp(-1.2 r^2)

    This is a cosine-in-radius stand-in for the true Bessel mode. It gives
    the familiar picture of m diametral node lines and concentric node rings
    but is not a physical eigenfunction.

    Parameters
    ----------
    xn, yn : float or ndarray
        Normalized coordinates in [-1, 1].
    m : int
        Angular order.
    n_radial : int
        Radial index.

    Returns
    -------
    u : float or ndarray
        Displacement; exactly zero where hypot(xn, yn) > 1.
    """
    xn = np.asarray(xn, dtype=np.float64)
    yn = np.asarray(yn, dtype=np.float64)

    r = np.hypot(xn, yn)
    theta = np.arctan2(yn, xn)

    radial = np.cos(n_radial * np.pi * r) * np.exp(-CIRCLE_DAMPING * r * r)
    angular = np.cos(m * theta)

    u = np.where(r > 1.0, 0.0, radial * angular)
    return _as_result(u)


def mode_displacement(mode: Mode, xn: ArrayLike, yn: ArrayLike) -> FieldValue:
    """
    Evaluate a catalog mode at normalized coordinates.

    Parameters
    ----------
    mode : Mode
        Mode to evaluate; its shape selects the formula.
    xn, yn : float or ndarray
        Normalized coordinates in [-1, 1].

    Returns
    -------
    u : float or ndarray
        Displacement.
    """
    if mode.shape == Shape.SQUARE:
        return square_displacement(xn, yn, mode.a, mode.b)
    elif mode.shape == Shape.CIRCLE:
        return circle_displacement(xn, yn, mode.a, mode.b)
    else:
        raise ValueError(f"Unknown shape: {mode.shape}")
