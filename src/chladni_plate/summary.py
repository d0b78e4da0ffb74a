"""
Human-readable diagnostics for the current mode blend.
"""

from dataclasses import dataclass
from typing import Optional

from .mapping import BlendDescriptor
from .modes import SHAPE_NAMES, Mode, ModeCatalog, Shape


@dataclass(frozen=True)
class WeightedMode:
    """
    A catalog mode annotated with its blend weight.

    The eigen frequency is copied at construction; catalog modes are
    rescaled in place when the plate size changes.
    """
    mode: Mode
    weight: float
    eigen_frequency: float

    @classmethod
    def of(cls, mode: Mode, weight: float) -> "WeightedMode":
        return cls(mode, weight, mode.eigen_frequency)

    def to_dict(self) -> dict:
        return {
            "m": self.mode.a,
            "n": self.mode.b,
            "eigen_frequency": self.eigen_frequency,
            "weight": self.weight,
        }


@dataclass(frozen=True)
class ModeSummary:
    """Diagnostic state derived from a blend."""
    shape: Shape
    drive_frequency: float
    plate_size: float
    alpha: float
    mode0: Optional[Mode]
    mode1: Optional[Mode]
    primary: Optional[WeightedMode]
    secondary: Optional[WeightedMode]
    closest_mode: Optional[Mode]
    closest_eigen_frequency: Optional[float]
    detuning: Optional[float]
    mode0_eigen_frequency: Optional[float] = None
    mode1_eigen_frequency: Optional[float] = None

    def to_dict(self) -> dict:
        """Convert to a JSON-serializable dictionary."""
        def _mode(mode: Optional[Mode], eigen: Optional[float]) -> Optional[dict]:
            if mode is None:
                return None
            return {"m": mode.a, "n": mode.b, "eigen_frequency": eigen}

        return {
            "shape": self.shape.value,
            "drive_frequency": self.drive_frequency,
            "plate_size": self.plate_size,
            "alpha": self.alpha,
            "mode0": _mode(self.mode0, self.mode0_eigen_frequency),
            "mode1": _mode(self.mode1, self.mode1_eigen_frequency),
            "primary": self.primary.to_dict() if self.primary else None,
            "secondary": self.secondary.to_dict() if self.secondary else None,
            "closest_mode": _mode(self.closest_mode, self.closest_eigen_frequency),
            "closest_eigen_frequency": self.closest_eigen_frequency,
            "detuning": self.detuning,
        }


def closest_mode(catalog: ModeCatalog, freq_hz: float) -> tuple[Optional[Mode], Optional[float]]:
    """
    Find the mode whose eigen frequency is nearest a frequency.

    Linear scan; on ties the first mode in catalog order wins.

    Returns
    -------
    mode, detuning : Mode or None, float or None
        Closest mode and its absolute frequency difference, or (None, None)
        for an empty catalog.
    """
    best = None
    best_diff = float("inf")
    for mode in catalog:
        diff = abs(mode.eigen_frequency - freq_hz)
        if diff < best_diff:
            best_diff = diff
            best = mode
    if best is None:
        return None, None
    return best, best_diff


def summarize(blend: BlendDescriptor, catalog: ModeCatalog) -> ModeSummary:
    """
    Summarize a blend for display.

    The primary mode is whichever blend endpoint carries weight >= 0.5;
    at exactly alpha = 0.5 mode0 is primary.

    Parameters
    ----------
    blend : BlendDescriptor
        Current blend.
    catalog : ModeCatalog
        Catalog the blend was computed from.

    Returns
    -------
    summary : ModeSummary
        Closest eigen mode, detuning and primary/secondary labelling.
    """
    closest, detuning = closest_mode(catalog, blend.drive_frequency)

    if blend.is_empty:
        primary = None
        secondary = None
    elif blend.alpha <= 0.5:
        primary = WeightedMode.of(blend.mode0, 1.0 - blend.alpha)
        secondary = WeightedMode.of(blend.mode1, blend.alpha)
    else:
        primary = WeightedMode.of(blend.mode1, blend.alpha)
        secondary = WeightedMode.of(blend.mode0, 1.0 - blend.alpha)

    return ModeSummary(
        shape=blend.shape,
        drive_frequency=blend.drive_frequency,
        plate_size=blend.plate_size,
        alpha=blend.alpha,
        mode0=blend.mode0,
        mode1=blend.mode1,
        primary=primary,
        secondary=secondary,
        closest_mode=closest,
        closest_eigen_frequency=closest.eigen_frequency if closest is not None else None,
        detuning=detuning,
        mode0_eigen_frequency=blend.mode0.eigen_frequency if blend.mode0 is not None else None,
        mode1_eigen_frequency=blend.mode1.eigen_frequency if blend.mode1 is not None else None,
    )


def describe_summary(summary: ModeSummary) -> tuple[str, str]:
    """
    Format a summary as two display lines.

    Returns
    -------
    mode_line, frequency_line : str
        Blend description (empty for an empty catalog) and drive-frequency
        description.
    """
    drive = f"Drive: {summary.drive_frequency:.1f} Hz"

    if summary.mode0 is None or summary.mode1 is None:
        return "", drive

    mode_line = (
        f"{SHAPE_NAMES[summary.shape]} · blend between {summary.mode0.label()} "
        f"and {summary.mode1.label()}, α ≈ {summary.alpha:.2f}"
    )

    primary_text = ""
    if summary.primary is not None:
        primary_text = (
            f"dominant mode ~ {summary.primary.mode.label()}, "
            f"weight ≈ {summary.primary.weight * 100:.0f}%"
        )

    if summary.closest_eigen_frequency is not None and summary.detuning is not None:
        frequency_line = (
            f"{drive} · closest eigen ≈ {summary.closest_eigen_frequency:.1f} Hz "
            f"(Δf ≈ {summary.detuning:.1f} Hz) · {primary_text}"
        )
    else:
        frequency_line = f"{drive} · {primary_text}"

    return mode_line, frequency_line
