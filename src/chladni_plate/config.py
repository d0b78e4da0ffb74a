"""
Configuration management for Chladni pattern runs.

Handles loading, validation, and defaulting of YAML configuration files.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union, Literal
import yaml


@dataclass
class RunConfig:
    """Run-level configuration."""
    out_dir: str = "out"
    run_name: Optional[str] = None


@dataclass
class PlateConfig:
    """Plate shape, size and drive."""
    shape: Literal["square", "circle"] = "square"
    plate_size: float = 0.9  # Relative size L, typically 0.6-1.2
    freq_hz: float = 440.0


@dataclass
class CatalogConfig:
    """Bounds of the mode catalog indices."""
    max_m: int = 7
    max_n: int = 7


@dataclass
class SamplingConfig:
    """Field sampling parameters."""
    resolution: int = 320
    node_threshold: float = 0.08


@dataclass
class ViewportConfig:
    """Output surface for rendered patterns."""
    width: int = 600
    height: int = 400
    fill: float = 0.45  # Plate half extent as a fraction of min(width, height)
    dot_size: float = 1.4


@dataclass
class SweepConfig:
    """Drive frequency sweep configuration."""
    f_start: float = 20.0
    f_stop: float = 20000.0
    n_freq: int = 61
    spacing: Literal["log", "linear"] = "log"
    n_frames: int = 6  # Still frames rendered from the sweep


SECTIONS = ("run", "plate", "catalog", "sampling", "viewport", "sweep")


@dataclass
class Config:
    """Complete configuration for a Chladni run."""
    run: RunConfig = field(default_factory=RunConfig)
    plate: PlateConfig = field(default_factory=PlateConfig)
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    sampling: SamplingConfig = field(default_factory=SamplingConfig)
    viewport: ViewportConfig = field(default_factory=ViewportConfig)
    sweep: SweepConfig = field(default_factory=SweepConfig)

    def to_dict(self) -> dict:
        """Convert config to nested dictionary."""
        return {
            "run": {
                "out_dir": self.run.out_dir,
                "run_name": self.run.run_name,
            },
            "plate": {
                "shape": self.plate.shape,
                "plate_size": self.plate.plate_size,
                "freq_hz": self.plate.freq_hz,
            },
            "catalog": {
                "max_m": self.catalog.max_m,
                "max_n": self.catalog.max_n,
            },
            "sampling": {
                "resolution": self.sampling.resolution,
                "node_threshold": self.sampling.node_threshold,
            },
            "viewport": {
                "width": self.viewport.width,
                "height": self.viewport.height,
                "fill": self.viewport.fill,
                "dot_size": self.viewport.dot_size,
            },
            "sweep": {
                "f_start": self.sweep.f_start,
                "f_stop": self.sweep.f_stop,
                "n_freq": self.sweep.n_freq,
                "spacing": self.sweep.spacing,
                "n_frames": self.sweep.n_frames,
            },
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Config":
        """Create Config from nested dictionary; unknown keys are ignored."""
        config = cls()

        for section in SECTIONS:
            if section not in d or d[section] is None:
                continue
            target = getattr(config, section)
            for key, value in d[section].items():
                if hasattr(target, key):
                    setattr(target, key, value)

        return config

    def plate_params(self):
        """Immutable plate parameters for a single recomputation."""
        from .pipeline import PlateParams
        return PlateParams.from_config(self)

    def to_viewport(self):
        """Viewport used to map nodal points to output coordinates."""
        from .sampler import Viewport
        return Viewport(
            width=self.viewport.width,
            height=self.viewport.height,
            fill=self.viewport.fill,
        )


def load_config(path: Union[str, Path]) -> Config:
    """
    Load configuration from a YAML file.

    Parameters
    ----------
    path : str or Path
        Path to YAML configuration file.

    Returns
    -------
    Config
        Loaded and validated configuration.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    if data is None:
        data = {}

    config = Config.from_dict(data)
    validate_config(config)
    return config


def validate_config(config: Config) -> None:
    """
    Validate configuration values.

    Parameters
    ----------
    config : Config
        Configuration to validate.

    Raises
    ------
    ValueError
        If any configuration value is invalid.
    """
    # Plate validation
    if config.plate.shape not in ("square", "circle"):
        raise ValueError(f"Unknown shape: {config.plate.shape}")
    if config.plate.plate_size <= 0:
        raise ValueError("plate_size must be positive")

    # Catalog validation
    if config.catalog.max_m < 0:
        raise ValueError("max_m must be non-negative")
    if config.catalog.max_n < 0:
        raise ValueError("max_n must be non-negative")

    # Sampling validation
    if config.sampling.resolution < 2:
        raise ValueError("resolution must be at least 2")
    if not 0 <= config.sampling.node_threshold <= 1:
        raise ValueError("node_threshold must be in [0, 1]")

    # Viewport validation
    if config.viewport.width <= 0 or config.viewport.height <= 0:
        raise ValueError("viewport width and height must be positive")
    if not 0 < config.viewport.fill <= 1:
        raise ValueError("fill must be in (0, 1]")
    if config.viewport.dot_size <= 0:
        raise ValueError("dot_size must be positive")

    # Sweep validation
    if config.sweep.f_start <= 0:
        raise ValueError("f_start must be positive")
    if config.sweep.f_stop < config.sweep.f_start:
        raise ValueError("f_stop must not be less than f_start")
    if config.sweep.n_freq < 1:
        raise ValueError("n_freq must be at least 1")
    if config.sweep.spacing not in ("log", "linear"):
        raise ValueError(f"Unknown spacing: {config.sweep.spacing}")
    if config.sweep.n_frames < 0:
        raise ValueError("n_frames must be non-negative")


def save_config(config: Config, path: Union[str, Path]) -> None:
    """
    Save configuration to a YAML file.

    Parameters
    ----------
    config : Config
        Configuration to save.
    path : str or Path
        Path to save YAML file.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        yaml.dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)
