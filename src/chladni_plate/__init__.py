"""
chladni-plate: Chladni nodal-line patterns

Computes the nodal-line patterns of a vibrating square or circular plate as
a function of drive frequency and plate size. A fixed catalog of plate modes
is laid out on a logarithmic frequency axis; any drive frequency maps to a
blend of the two neighbouring modes, whose displacement is sampled on a grid
to find the near-zero (nodal) region.

NOTE: Mode frequencies and circular-plate mode shapes are approximations
chosen for continuous visual morphing, not exact plate eigenmodes.
"""

__version__ = "0.1.0"
__author__ = "chladni-plate developers"

from .config import Config, load_config, validate_config, save_config
from .modes import (
    F_MIN,
    F_MAX,
    Mode,
    ModeCatalog,
    Shape,
    build_catalog,
    set_plate_size,
)
from .displacement import square_displacement, circle_displacement, mode_displacement
from .mapping import BlendDescriptor, compute_blend, clamp_frequency
from .sampler import SampledField, Viewport, sample_field, plate_outline
from .summary import ModeSummary, WeightedMode, summarize, describe_summary
from .pipeline import PlateParams, PlateSimulator, Frame
from .sweep import run_sweep, SweepResult
from .io import save_results, load_results, create_run_folder, compute_config_hash
from .logging_config import setup_logging

__all__ = [
    # Version info
    "__version__",
    "__author__",
    # Config
    "Config",
    "load_config",
    "validate_config",
    "save_config",
    # Modes
    "F_MIN",
    "F_MAX",
    "Mode",
    "ModeCatalog",
    "Shape",
    "build_catalog",
    "set_plate_size",
    # Displacement
    "square_displacement",
    "circle_displacement",
    "mode_displacement",
    # Mapping
    "BlendDescriptor",
    "compute_blend",
    "clamp_frequency",
    # Sampling
    "SampledField",
    "Viewport",
    "sample_field",
    "plate_outline",
    # Summary
    "ModeSummary",
    "WeightedMode",
    "summarize",
    "describe_summary",
    # Pipeline
    "PlateParams",
    "PlateSimulator",
    "Frame",
    # Sweep
    "run_sweep",
    "SweepResult",
    # I/O
    "save_results",
    "load_results",
    "create_run_folder",
    "compute_config_hash",
    # Logging
    "setup_logging",
]
