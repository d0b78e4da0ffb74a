"""
Tests for the mode catalog.

Verifies enumeration bounds, ordering, frequency assignment and plate-size
rescaling for both plate shapes.
"""

import math
import numpy as np
import pytest
import sys
from pathlib import Path

# Add src to path for development testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from chladni_plate.modes import (
    F_MAX,
    F_MIN,
    Mode,
    Shape,
    build_catalog,
    enumerate_pairs,
    log_spaced_frequencies,
    parse_shape,
    set_plate_size,
)


class TestShape:
    """Tests for shape parsing."""

    def test_parse_strings(self):
        """Shape names should parse case-insensitively."""
        assert parse_shape("square") is Shape.SQUARE
        assert parse_shape("Circle") is Shape.CIRCLE
        assert parse_shape(Shape.CIRCLE) is Shape.CIRCLE

    def test_unknown_shape(self):
        """Unknown names should raise ValueError."""
        with pytest.raises(ValueError, match="Unknown shape"):
            parse_shape("triangle")


class TestSquareCatalog:
    """Tests for the square plate catalog."""

    def test_size_excludes_diagonal(self):
        """7x7 pairs minus the 7 diagonal pairs."""
        catalog = build_catalog("square")
        assert len(catalog) == 42
        assert all(mode.m != mode.n for mode in catalog)

    def test_index_bounds(self):
        """Both indices should lie in [1, 7]."""
        catalog = build_catalog("square")
        for mode in catalog:
            assert 1 <= mode.m <= 7
            assert 1 <= mode.n <= 7

    def test_first_modes_stable_order(self):
        """Ties keep enumeration order: (1, 2) before (2, 1)."""
        catalog = build_catalog("square")
        assert catalog[0].indices == (1, 2)
        assert catalog[1].indices == (2, 1)
        assert catalog[-2].indices == (6, 7)
        assert catalog[-1].indices == (7, 6)

    def test_complexity_non_decreasing(self):
        """Complexity index should be sorted ascending."""
        catalog = build_catalog("square")
        ci = catalog.complexity_indices
        assert np.all(np.diff(ci) >= 0)
        assert catalog[0].complexity_index == pytest.approx(math.sqrt(5))


class TestCircleCatalog:
    """Tests for the circular plate catalog."""

    def test_size(self):
        """Angular order 0..7 times radial index 1..7."""
        catalog = build_catalog(Shape.CIRCLE)
        assert len(catalog) == 56

    def test_first_modes(self):
        """(0, 1) is simplest, then (1, 1), then (0, 2)."""
        catalog = build_catalog("circle")
        assert catalog[0].indices == (0, 1)
        assert catalog[1].indices == (1, 1)
        assert catalog[2].indices == (0, 2)
        assert catalog[-1].indices == (7, 7)

    def test_complexity_non_decreasing(self):
        """Complexity index should be sorted ascending."""
        ci = build_catalog("circle").complexity_indices
        assert np.all(np.diff(ci) >= 0)

    def test_label_uses_radial_index(self):
        """Circular labels name the radial index."""
        catalog = build_catalog("circle")
        assert catalog[0].label() == "(m=0, nᵣ=1)"
        assert catalog[0].n_radial == 1


class TestFrequencies:
    """Tests for base and eigen frequency assignment."""

    def test_log_spacing_endpoints(self):
        """First mode at F_MIN, last at F_MAX."""
        catalog = build_catalog("square")
        assert catalog[0].base_frequency == pytest.approx(F_MIN)
        assert catalog[-1].base_frequency == pytest.approx(F_MAX)

    def test_constant_log_ratio(self):
        """Neighbouring base frequencies share one ratio."""
        base = build_catalog("circle").base_frequencies
        ratios = base[1:] / base[:-1]
        np.testing.assert_allclose(ratios, ratios[0], rtol=1e-10)
        assert ratios[0] == pytest.approx((F_MAX / F_MIN) ** (1 / 55))

    def test_single_mode_at_fmin(self):
        """A one-mode catalog sits at F_MIN."""
        catalog = build_catalog("square", max_m=1, max_n=2)
        assert len(catalog) == 1
        assert catalog[0].base_frequency == F_MIN

    def test_empty_catalog(self):
        """Zero bounds give an empty catalog."""
        catalog = build_catalog("square", max_m=0, max_n=0)
        assert len(catalog) == 0
        assert log_spaced_frequencies(0).size == 0

    def test_eigen_starts_at_base(self):
        """Freshly built catalogs are at plate size 1."""
        catalog = build_catalog("square")
        np.testing.assert_array_equal(catalog.eigen_frequencies, catalog.base_frequencies)
        assert catalog.plate_size == 1.0


class TestPlateSize:
    """Tests for plate-size rescaling."""

    def test_rescale_inverse_square(self):
        """eigen = base / L^2."""
        catalog = build_catalog("square")
        set_plate_size(catalog, 0.5)
        np.testing.assert_allclose(catalog.eigen_frequencies, catalog.base_frequencies * 4.0)
        assert catalog.plate_size == 0.5

    def test_base_untouched(self):
        """Rescaling never changes base frequencies."""
        catalog = build_catalog("circle")
        before = catalog.base_frequencies.copy()
        set_plate_size(catalog, 1.2)
        set_plate_size(catalog, 0.7)
        np.testing.assert_array_equal(catalog.base_frequencies, before)

    def test_rescale_not_cumulative(self):
        """Rescaling twice to the same size matches rescaling once."""
        catalog = build_catalog("square")
        set_plate_size(catalog, 0.8)
        once = catalog.eigen_frequencies.copy()
        set_plate_size(catalog, 0.8)
        np.testing.assert_array_equal(catalog.eigen_frequencies, once)


class TestEnumeration:
    """Tests for raw pair enumeration."""

    def test_square_order(self):
        """First index in the outer loop."""
        pairs = enumerate_pairs(Shape.SQUARE, 3, 3)
        assert pairs == [(1, 2), (1, 3), (2, 1), (2, 3), (3, 1), (3, 2)]

    def test_circle_includes_zero_order(self):
        """Angular order starts at 0, radial index at 1."""
        pairs = enumerate_pairs(Shape.CIRCLE, 1, 2)
        assert pairs == [(0, 1), (0, 2), (1, 1), (1, 2)]

    def test_mode_repr(self):
        """Repr should show shape and indices."""
        mode = Mode(Shape.SQUARE, 2, 3, math.sqrt(13))
        assert "square" in repr(mode)
        assert mode.label() == "(m=2, n=3)"
