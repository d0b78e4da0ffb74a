"""
Tests for blend summaries and their display text.
"""

import json
import pytest
import sys
from pathlib import Path

# Add src to path for development testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from chladni_plate.mapping import BlendDescriptor, compute_blend
from chladni_plate.modes import Mode, ModeCatalog, Shape, build_catalog
from chladni_plate.summary import closest_mode, describe_summary, summarize


def _manual_blend(catalog, alpha, drive=150.0):
    return BlendDescriptor(
        shape=catalog.shape,
        drive_frequency=drive,
        plate_size=1.0,
        mode0=catalog[0],
        mode1=catalog[1],
        alpha=alpha,
        i0=0,
        i1=1,
    )


@pytest.fixture
def two_mode_catalog():
    """Two square modes at 100 Hz and 200 Hz."""
    modes = [
        Mode(Shape.SQUARE, 1, 2, 5 ** 0.5, 100.0, 100.0),
        Mode(Shape.SQUARE, 2, 1, 5 ** 0.5, 200.0, 200.0),
    ]
    return ModeCatalog(Shape.SQUARE, modes)


class TestPrimary:
    """Tests for primary/secondary labelling."""

    def test_low_alpha_favours_mode0(self, two_mode_catalog):
        summary = summarize(_manual_blend(two_mode_catalog, 0.2), two_mode_catalog)
        assert summary.primary.mode is two_mode_catalog[0]
        assert summary.primary.weight == pytest.approx(0.8)
        assert summary.secondary.mode is two_mode_catalog[1]
        assert summary.secondary.weight == pytest.approx(0.2)

    def test_high_alpha_favours_mode1(self, two_mode_catalog):
        summary = summarize(_manual_blend(two_mode_catalog, 0.75), two_mode_catalog)
        assert summary.primary.mode is two_mode_catalog[1]
        assert summary.primary.weight == pytest.approx(0.75)

    def test_half_alpha_tie_goes_to_mode0(self, two_mode_catalog):
        summary = summarize(_manual_blend(two_mode_catalog, 0.5), two_mode_catalog)
        assert summary.primary.mode is two_mode_catalog[0]
        assert summary.primary.weight == 0.5


class TestClosestMode:
    """Tests for the nearest eigen frequency search."""

    def test_equidistant_first_wins(self, two_mode_catalog):
        mode, detuning = closest_mode(two_mode_catalog, 150.0)
        assert mode is two_mode_catalog[0]
        assert detuning == 50.0

    def test_nearest(self, two_mode_catalog):
        mode, detuning = closest_mode(two_mode_catalog, 190.0)
        assert mode is two_mode_catalog[1]
        assert detuning == pytest.approx(10.0)

    def test_drive_at_eigen_frequency(self):
        catalog = build_catalog("circle")
        catalog.set_plate_size(0.8)
        target = catalog[10]
        blend = compute_blend("circle", target.eigen_frequency, 0.8, catalog)
        summary = summarize(blend, catalog)
        assert summary.closest_mode is target
        assert summary.detuning == pytest.approx(0.0, abs=1e-6)

    def test_empty_catalog(self):
        catalog = build_catalog("square", max_m=0, max_n=0)
        assert closest_mode(catalog, 440.0) == (None, None)


class TestDescribe:
    """Tests for the two display lines."""

    def test_lowest_square_mode(self):
        catalog = build_catalog("square")
        summary = summarize(compute_blend("square", 20.0, 1.0, catalog), catalog)
        mode_line, freq_line = describe_summary(summary)
        assert mode_line == (
            "Square plate · blend between (m=1, n=2) and (m=2, n=1), α ≈ 0.00"
        )
        assert freq_line.startswith("Drive: 20.0 Hz · closest eigen ≈ 20.0 Hz (Δf ≈ 0.0 Hz)")
        assert freq_line.endswith("dominant mode ~ (m=1, n=2), weight ≈ 100%")

    def test_circle_labels(self):
        catalog = build_catalog("circle")
        summary = summarize(compute_blend("circle", 20.0, 1.0, catalog), catalog)
        mode_line, _ = describe_summary(summary)
        assert mode_line.startswith("Circular plate · blend between (m=0, nᵣ=1)")

    def test_empty_catalog(self):
        catalog = build_catalog("square", max_m=0, max_n=0)
        summary = summarize(compute_blend("square", 440.0, 1.0, catalog), catalog)
        assert summary.primary is None
        assert summary.closest_mode is None
        assert describe_summary(summary) == ("", "Drive: 440.0 Hz")

    def test_to_dict_serializable(self):
        catalog = build_catalog("square")
        summary = summarize(compute_blend("square", 1000.0, 0.9, catalog), catalog)
        d = json.loads(json.dumps(summary.to_dict()))
        assert d["shape"] == "square"
        assert d["primary"]["weight"] >= 0.5
        assert set(d["mode0"]) == {"m", "n", "eigen_frequency"}
