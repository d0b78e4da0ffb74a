"""
Input/Output functionality for Chladni pattern runs.

Handles saving and loading sweep results, creating run folders,
exporting nodal point sets and computing reproducibility hashes.
"""

import json
import hashlib
import logging
import numpy as np
from pathlib import Path
from typing import Union, Optional
from datetime import datetime

import pandas as pd

from .config import Config, save_config
from .pipeline import Frame
from .sampler import Viewport
from .sweep import SweepResult

logger = logging.getLogger(__name__)


def compute_config_hash(config: Config) -> str:
    """
    Compute a stable hash of the configuration.

    The hash is deterministic and based on the resolved config values.

    Parameters
    ----------
    config : Config
        Configuration to hash.

    Returns
    -------
    hash_str : str
        SHA256 hash of the configuration (first 12 characters).
    """
    config_dict = config.to_dict()
    config_json = json.dumps(config_dict, sort_keys=True)
    hash_full = hashlib.sha256(config_json.encode()).hexdigest()
    return hash_full[:12]


def create_run_folder(
    config: Config,
    timestamp: Optional[str] = None
) -> Path:
    """
    Create a unique folder for a run.

    Folder name format: run_<YYYYmmdd_HHMMSS>_<hash>

    Parameters
    ----------
    config : Config
        Configuration for the run.
    timestamp : str, optional
        Timestamp string. If None, uses current time.

    Returns
    -------
    run_path : Path
        Path to the created run folder.
    """
    if timestamp is None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    config_hash = compute_config_hash(config)
    folder_name = f"run_{timestamp}_{config_hash}"

    run_path = Path(config.run.out_dir) / folder_name
    run_path.mkdir(parents=True, exist_ok=True)

    return run_path


def save_results(
    result: SweepResult,
    run_path: Union[str, Path]
) -> dict[str, Path]:
    """
    Save sweep results to a run folder.

    Saves:
    - config_resolved.yaml: The resolved configuration
    - results.json: Metadata and arrays as JSON
    - results.csv: One row per sweep step

    Parameters
    ----------
    result : SweepResult
        Sweep results to save.
    run_path : str or Path
        Path to the run folder.

    Returns
    -------
    paths : dict
        Dictionary mapping output names to file paths.
    """
    run_path = Path(run_path)
    run_path.mkdir(parents=True, exist_ok=True)

    paths = {}

    config_path = run_path / "config_resolved.yaml"
    save_config(result.config, config_path)
    paths["config"] = config_path

    json_path = run_path / "results.json"
    with open(json_path, "w") as f:
        json.dump(_result_to_json_dict(result), f, indent=2)
    paths["json"] = json_path

    csv_path = run_path / "results.csv"
    _result_to_dataframe(result).to_csv(csv_path, index=False)
    paths["csv"] = csv_path

    logger.info("Saved results to %s", run_path)
    return paths


def _result_to_json_dict(result: SweepResult) -> dict:
    """Convert SweepResult to JSON-serializable dictionary."""
    return {
        "metadata": {
            "config_hash": result.config_hash,
            "timestamp": result.timestamp,
            "elapsed_seconds": result.elapsed_seconds,
            "total_points": result.total_points
        },
        "sweep": {
            "frequencies": result.frequencies.tolist(),
            "n_freq": len(result.frequencies)
        },
        "results": {
            "drive_frequencies": result.drive_frequencies.tolist(),
            "positions": result.positions.tolist(),
            "alphas": result.alphas.tolist(),
            "i0": result.i0.tolist(),
            "i1": result.i1.tolist(),
            "nodal_counts": result.nodal_counts.tolist(),
            "nodal_fractions": result.nodal_fractions.tolist(),
            "max_abs": result.max_abs.tolist(),
            "closest_eigen": result.closest_eigen.tolist(),
            "detuning": result.detuning.tolist(),
            "primary_labels": list(result.primary_labels),
            "primary_weights": result.primary_weights.tolist()
        },
        "config": result.config.to_dict()
    }


def _result_to_dataframe(result: SweepResult) -> pd.DataFrame:
    """Convert SweepResult to a DataFrame with one row per sweep step."""
    rows = [result.get_point(i) for i in range(result.total_points)]
    return pd.DataFrame(rows)


def load_results(run_path: Union[str, Path]) -> SweepResult:
    """
    Load sweep results from a run folder.

    Parameters
    ----------
    run_path : str or Path
        Path to the run folder.

    Returns
    -------
    result : SweepResult
        Loaded sweep results.
    """
    from .config import load_config

    run_path = Path(run_path)

    config = load_config(run_path / "config_resolved.yaml")

    json_path = run_path / "results.json"
    if not json_path.exists():
        raise FileNotFoundError(f"Results file not found: {json_path}")
    with open(json_path, "r") as f:
        data = json.load(f)

    res = data["results"]
    return SweepResult(
        frequencies=np.array(data["sweep"]["frequencies"], dtype=np.float64),
        drive_frequencies=np.array(res["drive_frequencies"], dtype=np.float64),
        positions=np.array(res["positions"], dtype=np.float64),
        alphas=np.array(res["alphas"], dtype=np.float64),
        i0=np.array(res["i0"], dtype=np.int32),
        i1=np.array(res["i1"], dtype=np.int32),
        nodal_counts=np.array(res["nodal_counts"], dtype=np.int32),
        nodal_fractions=np.array(res["nodal_fractions"], dtype=np.float64),
        max_abs=np.array(res["max_abs"], dtype=np.float64),
        closest_eigen=np.array(res["closest_eigen"], dtype=np.float64),
        detuning=np.array(res["detuning"], dtype=np.float64),
        primary_labels=list(res["primary_labels"]),
        primary_weights=np.array(res["primary_weights"], dtype=np.float64),
        config=config,
        config_hash=data["metadata"]["config_hash"],
        timestamp=data["metadata"]["timestamp"],
        elapsed_seconds=data["metadata"]["elapsed_seconds"],
        total_points=data["metadata"]["total_points"]
    )


def export_results(
    run_path: Union[str, Path],
    formats: list[str] = ["json", "csv"]
) -> dict[str, Path]:
    """
    Export results from a run folder in specified formats.

    Parameters
    ----------
    run_path : str or Path
        Path to the run folder.
    formats : list of str
        Formats to export ("json", "csv").

    Returns
    -------
    paths : dict
        Dictionary mapping format names to file paths.
    """
    run_path = Path(run_path)
    result = load_results(run_path)

    paths = {}

    if "json" in formats:
        json_path = run_path / "results.json"
        with open(json_path, "w") as f:
            json.dump(_result_to_json_dict(result), f, indent=2)
        paths["json"] = json_path

    if "csv" in formats:
        csv_path = run_path / "results.csv"
        _result_to_dataframe(result).to_csv(csv_path, index=False)
        paths["csv"] = csv_path

    return paths


def save_nodal_points(
    frame: Frame,
    path: Union[str, Path],
    viewport: Optional[Viewport] = None
) -> Path:
    """
    Write a frame's nodal points to CSV.

    Parameters
    ----------
    frame : Frame
        Frame whose nodal points to write.
    path : str or Path
        Output CSV path.
    viewport : Viewport, optional
        If given, points are written in output coordinates (columns px, py);
        otherwise in normalized coordinates (columns x, y).

    Returns
    -------
    path : Path
        Path written.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    if viewport is None:
        df = pd.DataFrame(frame.field.nodal_points, columns=["x", "y"])
    else:
        df = pd.DataFrame(frame.pixel_points(viewport), columns=["px", "py"])
    df.to_csv(path, index=False)

    logger.info("Wrote %d nodal points to %s", len(df), path)
    return path


def list_runs(out_dir: Union[str, Path] = "out") -> list[Path]:
    """
    List all run folders in an output directory.

    Parameters
    ----------
    out_dir : str or Path
        Output directory to search.

    Returns
    -------
    runs : list of Path
        List of run folder paths, sorted by name (most recent last).
    """
    out_path = Path(out_dir)
    if not out_path.exists():
        return []

    runs = [p for p in out_path.iterdir() if p.is_dir() and p.name.startswith("run_")]
    return sorted(runs)


def get_latest_run(out_dir: Union[str, Path] = "out") -> Optional[Path]:
    """
    Get the most recent run folder, or None if no runs exist.
    """
    runs = list_runs(out_dir)
    return runs[-1] if runs else None
