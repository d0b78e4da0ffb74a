"""
Tests for single-mode displacement fields.
"""

import numpy as np
import pytest
import sys
from pathlib import Path

# Add src to path for development testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from chladni_plate.displacement import (
    CIRCLE_DAMPING,
    circle_displacement,
    mode_displacement,
    square_displacement,
)
from chladni_plate.modes import build_catalog


@pytest.fixture
def grid():
    """A small grid of normalized coordinates."""
    axis = np.linspace(-1, 1, 41)
    yn, xn = np.meshgrid(axis, axis, indexing="ij")
    return xn, yn


class TestSquareDisplacement:
    """Tests for the square plate formula."""

    def test_equal_indices_exactly_zero(self, grid):
        """m == n is the trivial solution everywhere."""
        xn, yn = grid
        for m in range(1, 8):
            u = square_displacement(xn, yn, m, m)
            assert np.all(u == 0.0)

    def test_known_corner_value(self):
        """At X=1, Y=0: (-1)^n - (-1)^m."""
        assert square_displacement(1.0, -1.0, 1, 2) == pytest.approx(2.0)
        assert square_displacement(1.0, -1.0, 2, 4) == pytest.approx(0.0)

    def test_diagonal_is_nodal(self):
        """The two terms cancel on the line x == y."""
        t = np.linspace(-1, 1, 101)
        for m, n in [(1, 2), (3, 5), (7, 6)]:
            assert np.all(square_displacement(t, t, m, n) == 0.0)

    def test_swapping_indices_flips_sign(self, grid):
        """(n, m) is the negative of (m, n)."""
        xn, yn = grid
        np.testing.assert_allclose(
            square_displacement(xn, yn, 2, 5),
            -square_displacement(xn, yn, 5, 2),
            atol=1e-12
        )

    def test_bounded(self, grid):
        """Displacement magnitude never exceeds 2."""
        xn, yn = grid
        u = square_displacement(xn, yn, 3, 7)
        assert np.max(np.abs(u)) <= 2.0 + 1e-12

    def test_scalar_returns_float(self):
        """Scalar inputs give Python floats."""
        assert isinstance(square_displacement(0.1, 0.2, 1, 3), float)
        assert isinstance(square_displacement(0.1, 0.2, 3, 3), float)


class TestCircleDisplacement:
    """Tests for the circular plate approximation."""

    def test_outside_exactly_zero(self):
        """Points beyond the unit disc have zero displacement."""
        assert circle_displacement(0.8, 0.8, 0, 1) == 0.0
        assert circle_displacement(-1.0, 0.5, 3, 4) == 0.0
        corners = np.array([[1.0, 1.0], [-1.0, 1.0], [0.9, -0.9]])
        u = circle_displacement(corners[:, 0], corners[:, 1], 2, 3)
        assert np.all(u == 0.0)

    def test_center_value(self):
        """At the origin theta = 0, r = 0."""
        assert circle_displacement(0.0, 0.0, 0, 1) == pytest.approx(1.0)
        assert circle_displacement(0.0, 0.0, 5, 3) == pytest.approx(1.0)

    def test_rim_value(self):
        """On the rim r = 1 the value is cos(m theta) cos(n_r pi) exp(-1.2)."""
        assert circle_displacement(1.0, 0.0, 0, 1) == pytest.approx(-np.exp(-CIRCLE_DAMPING))
        assert circle_displacement(0.0, 1.0, 2, 2) == pytest.approx(-np.exp(-CIRCLE_DAMPING))

    def test_angular_nodes(self):
        """m = 1 has a nodal diameter along the y axis, away from the origin."""
        half = np.linspace(0.1, 0.9, 9)
        y = np.concatenate([-half, half])
        u = circle_displacement(np.zeros_like(y), y, 1, 2)
        np.testing.assert_allclose(u, 0.0, atol=1e-12)

    def test_radial_rings(self):
        """m = 0 has node rings where cos(n_r pi r) = 0."""
        assert circle_displacement(0.5, 0.0, 0, 1) == pytest.approx(0.0, abs=1e-12)
        assert circle_displacement(0.25, 0.0, 0, 2) == pytest.approx(0.0, abs=1e-12)


class TestModeDispatch:
    """Tests for evaluating catalog modes."""

    def test_dispatch_by_shape(self, grid):
        """mode_displacement picks the formula from the mode's shape."""
        xn, yn = grid
        square = build_catalog("square")[5]
        circle = build_catalog("circle")[5]
        np.testing.assert_array_equal(
            mode_displacement(square, xn, yn),
            square_displacement(xn, yn, square.m, square.n)
        )
        np.testing.assert_array_equal(
            mode_displacement(circle, xn, yn),
            circle_displacement(xn, yn, circle.m, circle.n_radial)
        )
