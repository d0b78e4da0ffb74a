"""
Vibration mode catalog for square and circular plates.

Builds the fixed, ordered list of modes available for a plate shape. Modes are
sorted by complexity index sqrt(a^2 + b^2) and assigned reference frequencies
spaced uniformly on a logarithmic axis between F_MIN and F_MAX.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Union

import numpy as np
from numpy.typing import NDArray

logger = logging.getLogger(__name__)

# Audible band covered by the catalog
F_MIN = 20.0
F_MAX = 20000.0
LOG_F_MIN = math.log(F_MIN)
LOG_F_MAX = math.log(F_MAX)

# Default bound on both mode indices
DEFAULT_MAX_INDEX = 7


class Shape(str, Enum):
    """Plate shapes supported by the catalog."""
    SQUARE = "square"
    CIRCLE = "circle"


# Labels for display
SHAPE_NAMES = {
    Shape.SQUARE: "Square plate",
    Shape.CIRCLE: "Circular plate",
}


def parse_shape(shape: Union[str, Shape]) -> Shape:
    """
    Convert a string or Shape to Shape.

    Parameters
    ----------
    shape : str or Shape
        Shape name ("square" or "circle"), case-insensitive.

    Returns
    -------
    shape : Shape
        Parsed shape.

    Raises
    ------
    ValueError
        If the name does not match a known shape.
    """
    if isinstance(shape, Shape):
        return shape
    try:
        return Shape(str(shape).strip().lower())
    except ValueError:
        raise ValueError(f"Unknown shape: {shape}") from None


@dataclass(eq=False)
class Mode:
    """
    A single standing-wave mode of a plate.

    For square plates (a, b) is the index pair (m, n). For circular plates
    a is the angular order m and b the radial index n_r.
    """
    shape: Shape
    a: int
    b: int
    complexity_index: float
    base_frequency: float = F_MIN
    eigen_frequency: float = F_MIN  # Rescaled by plate size

    @property
    def m(self) -> int:
        return self.a

    @property
    def n(self) -> int:
        return self.b

    @property
    def n_radial(self) -> int:
        return self.b

    @property
    def indices(self) -> tuple[int, int]:
        return (self.a, self.b)

    def label(self) -> str:
        """Short human-readable index label, e.g. "(m=1, n=2)"."""
        if self.shape == Shape.CIRCLE:
            return f"(m={self.a}, nᵣ={self.b})"
        return f"(m={self.a}, n={self.b})"

    def __repr__(self) -> str:
        return (
            f"Mode({self.shape.value}, {self.a}, {self.b}, "
            f"eigen={self.eigen_frequency:.2f} Hz)"
        )


class ModeCatalog:
    """
    Ordered, read-only sequence of modes for one plate shape.

    Only the eigen frequencies change after construction, through
    set_plate_size().
    """

    def __init__(self, shape: Shape, modes: list[Mode]):
        self.shape = shape
        self._modes = list(modes)
        self.plate_size = 1.0

    def __len__(self) -> int:
        return len(self._modes)

    def __getitem__(self, index: int) -> Mode:
        return self._modes[index]

    def __iter__(self) -> Iterator[Mode]:
        return iter(self._modes)

    def __repr__(self) -> str:
        return f"ModeCatalog({self.shape.value}, N={len(self)}, plate_size={self.plate_size})"

    @property
    def complexity_indices(self) -> NDArray[np.float64]:
        return np.array([m.complexity_index for m in self._modes], dtype=np.float64)

    @property
    def base_frequencies(self) -> NDArray[np.float64]:
        return np.array([m.base_frequency for m in self._modes], dtype=np.float64)

    @property
    def eigen_frequencies(self) -> NDArray[np.float64]:
        return np.array([m.eigen_frequency for m in self._modes], dtype=np.float64)

    def set_plate_size(self, plate_size: float) -> None:
        """
        Rescale every eigen frequency to a new plate size.

        eigen_frequency = base_frequency / plate_size^2, so smaller plates
        ring higher. plate_size must be strictly positive.
        """
        scale = 1.0 / (plate_size * plate_size)
        for mode in self._modes:
            mode.eigen_frequency = mode.base_frequency * scale
        self.plate_size = plate_size
        logger.debug("Rescaled %s catalog to plate_size=%.4f", self.shape.value, plate_size)


def enumerate_pairs(
    shape: Shape,
    max_m: int = DEFAULT_MAX_INDEX,
    max_n: int = DEFAULT_MAX_INDEX
) -> list[tuple[int, int]]:
    """
    Enumerate the valid index pairs for a shape, in construction order.

    Square plates use m, n in [1, max_m] x [1, max_n] with the diagonal
    m == n dropped (that mode is identically zero). Circular plates use
    m in [0, max_m] and n_r in [1, max_n].

    Parameters
    ----------
    shape : Shape
        Plate shape.
    max_m : int, optional
        Upper bound of the first index (default 7).
    max_n : int, optional
        Upper bound of the second index (default 7).

    Returns
    -------
    pairs : list of (int, int)
        Index pairs, first index in the outer loop.
    """
    shape = parse_shape(shape)
    if shape == Shape.SQUARE:
        return [
            (m, n)
            for m in range(1, max_m + 1)
            for n in range(1, max_n + 1)
            if m != n
        ]
    return [
        (m, nr)
        for m in range(0, max_m + 1)
        for nr in range(1, max_n + 1)
    ]


def log_spaced_frequencies(N: int) -> NDArray[np.float64]:
    """
    Reference frequencies for a catalog of N modes.

    Uniform on a log axis from F_MIN to F_MAX; a single mode sits at F_MIN.
    """
    if N == 0:
        return np.zeros(0, dtype=np.float64)
    if N == 1:
        return np.array([F_MIN], dtype=np.float64)
    t = np.arange(N, dtype=np.float64) / (N - 1)
    return np.exp(LOG_F_MIN + t * (LOG_F_MAX - LOG_F_MIN))


def build_catalog(
    shape: Union[str, Shape],
    max_m: int = DEFAULT_MAX_INDEX,
    max_n: int = DEFAULT_MAX_INDEX
) -> ModeCatalog:
    """
    Build the ordered mode catalog for a plate shape.

    Modes are sorted by complexity index with a stable sort, so ties keep
    their enumeration order, then assigned log-spaced base frequencies.
    Eigen frequencies start equal to the base frequencies (plate size 1).

    Parameters
    ----------
    shape : str or Shape
        Plate shape.
    max_m : int, optional
        Upper bound of the first index (default 7).
    max_n : int, optional
        Upper bound of the second index (default 7).

    Returns
    -------
    catalog : ModeCatalog
        Freshly built catalog. Callers that want one catalog per shape
        should keep the result (see PlateSimulator).
    """
    shape = parse_shape(shape)
    pairs = enumerate_pairs(shape, max_m, max_n)

    modes = [
        Mode(shape=shape, a=a, b=b, complexity_index=math.sqrt(a * a + b * b))
        for a, b in pairs
    ]
    modes.sort(key=lambda mode: mode.complexity_index)

    freqs = log_spaced_frequencies(len(modes))
    for mode, f in zip(modes, freqs):
        mode.base_frequency = float(f)
        mode.eigen_frequency = float(f)

    logger.debug("Built %s catalog with %d modes", shape.value, len(modes))
    return ModeCatalog(shape, modes)


def set_plate_size(catalog: ModeCatalog, plate_size: float) -> None:
    """
    Rescale a catalog's eigen frequencies in place.

    Parameters
    ----------
    catalog : ModeCatalog
        Catalog to update.
    plate_size : float
        Relative plate size, strictly positive.
    """
    catalog.set_plate_size(plate_size)
