"""
Command-line interface for Chladni pattern rendering.

Provides commands for rendering single patterns, inspecting mode catalogs,
running frequency sweeps, and managing sweep results.
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn
from rich.table import Table

app = typer.Typer(
    name="chladni-plate",
    help="Chladni plate nodal-line patterns for square and circular plates.",
    add_completion=False
)
console = Console()


def _fail(message: str) -> None:
    console.print(f"[bold red]Error:[/] {message}")
    raise typer.Exit(code=1)


def _resolve_config(
    config: Optional[Path],
    shape: Optional[str],
    size: Optional[float],
    freq: Optional[float],
    resolution: Optional[int] = None,
    threshold: Optional[float] = None
):
    """Load a config file (or defaults) and apply command-line overrides."""
    from .config import Config, load_config, validate_config

    cfg = load_config(config) if config is not None else Config()
    if shape is not None:
        cfg.plate.shape = shape.lower()
    if size is not None:
        cfg.plate.plate_size = size
    if freq is not None:
        cfg.plate.freq_hz = freq
    if resolution is not None:
        cfg.sampling.resolution = resolution
    if threshold is not None:
        cfg.sampling.node_threshold = threshold
    validate_config(cfg)
    return cfg


@app.callback()
def main_callback(
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable debug logging."
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Also write logs to this file."
    )
):
    """
    Chladni plate nodal-line patterns.
    """
    from .logging_config import setup_logging

    setup_logging(
        level=logging.DEBUG if verbose else logging.WARNING,
        log_file=str(log_file) if log_file else None
    )


@app.command()
def render(
    config: Optional[Path] = typer.Option(
        None,
        "--config", "-c",
        help="Path to YAML configuration file.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True
    ),
    shape: Optional[str] = typer.Option(None, "--shape", "-s", help="Plate shape (square or circle)."),
    size: Optional[float] = typer.Option(None, "--size", "-L", help="Relative plate size."),
    freq: Optional[float] = typer.Option(None, "--freq", "-f", help="Drive frequency in Hz."),
    resolution: Optional[int] = typer.Option(None, "--resolution", "-r", help="Grid points per axis."),
    threshold: Optional[float] = typer.Option(None, "--threshold", help="Nodal threshold fraction."),
    output: Path = typer.Option(
        Path("chladni.png"),
        "--output", "-o",
        help="Output PNG path."
    ),
    points_csv: Optional[Path] = typer.Option(
        None,
        "--points-csv",
        help="Also write nodal points (pixel coordinates) to this CSV file."
    ),
    dpi: int = typer.Option(150, "--dpi", help="Image resolution."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress output.")
):
    """
    Render the nodal pattern for one shape, size and drive frequency.
    """
    from .pipeline import PlateSimulator
    from .plots import plot_pattern
    from .summary import describe_summary
    from .io import save_nodal_points
    import matplotlib.pyplot as plt

    try:
        cfg = _resolve_config(config, shape, size, freq, resolution, threshold)
    except (ValueError, FileNotFoundError) as e:
        _fail(str(e))

    simulator = PlateSimulator.from_config(cfg)
    frame = simulator.compute(cfg.plate_params())
    viewport = cfg.to_viewport()

    output.parent.mkdir(parents=True, exist_ok=True)
    fig = plot_pattern(frame, viewport, save_path=output, dot_size=cfg.viewport.dot_size, dpi=dpi)
    plt.close(fig)

    if points_csv is not None:
        save_nodal_points(frame, points_csv, viewport)

    if not quiet:
        mode_line, freq_line = describe_summary(frame.summary)
        if mode_line:
            console.print(mode_line)
        console.print(freq_line)
        console.print(f"[bold]Nodal points:[/] {frame.field.nodal_count}")
        console.print(f"[bold green]Pattern saved to:[/] {output}")


@app.command()
def catalog(
    shape: str = typer.Option("square", "--shape", "-s", help="Plate shape (square or circle)."),
    size: float = typer.Option(1.0, "--size", "-L", help="Relative plate size."),
    max_m: int = typer.Option(7, "--max-m", help="Upper bound of the first mode index."),
    max_n: int = typer.Option(7, "--max-n", help="Upper bound of the second mode index.")
):
    """
    List the mode catalog for a plate shape.
    """
    from .modes import build_catalog, set_plate_size

    if size <= 0:
        _fail("size must be positive")
    try:
        cat = build_catalog(shape, max_m, max_n)
    except ValueError as e:
        _fail(str(e))
    set_plate_size(cat, size)

    table = Table(title=f"{cat.shape.value.title()} plate modes (L={size})")
    table.add_column("#", style="dim")
    table.add_column("Mode", style="cyan")
    table.add_column("Complexity", style="yellow")
    table.add_column("Base (Hz)", style="green")
    table.add_column("Eigen (Hz)", style="green")

    for i, mode in enumerate(cat):
        table.add_row(
            str(i),
            mode.label(),
            f"{mode.complexity_index:.3f}",
            f"{mode.base_frequency:.1f}",
            f"{mode.eigen_frequency:.1f}"
        )

    console.print(table)


@app.command()
def summary(
    shape: str = typer.Option("square", "--shape", "-s", help="Plate shape (square or circle)."),
    size: float = typer.Option(0.9, "--size", "-L", help="Relative plate size."),
    freq: float = typer.Option(440.0, "--freq", "-f", help="Drive frequency in Hz.")
):
    """
    Show which modes are blended at a drive frequency.
    """
    from .pipeline import PlateParams, PlateSimulator
    from .summary import describe_summary, summarize

    if size <= 0:
        _fail("size must be positive")
    try:
        params = PlateParams(shape=shape, plate_size=size, freq_hz=freq)
    except ValueError as e:
        _fail(str(e))

    simulator = PlateSimulator()
    blend = simulator.blend(params)
    s = summarize(blend, simulator.catalog_for(params))

    table = Table(title="Mode Summary")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Shape", s.shape.value)
    table.add_row("Drive", f"{s.drive_frequency:.1f} Hz")
    table.add_row("Plate Size", f"{s.plate_size}")
    if s.mode0 is not None:
        table.add_row("Blend", f"{s.mode0.label()} → {s.mode1.label()}")
        table.add_row("Alpha", f"{s.alpha:.3f}")
        table.add_row("Catalog Position", f"{blend.position:.3f}")
    if s.primary is not None:
        table.add_row("Dominant Mode", f"{s.primary.mode.label()} ({s.primary.weight * 100:.0f}%)")
    if s.closest_mode is not None:
        table.add_row("Closest Eigen", f"{s.closest_mode.label()} at {s.closest_eigen_frequency:.1f} Hz")
        table.add_row("Detuning", f"{s.detuning:.1f} Hz")

    console.print(table)
    for line in describe_summary(s):
        if line:
            console.print(line)


@app.command()
def sweep(
    config: Path = typer.Option(
        ...,
        "--config", "-c",
        help="Path to YAML configuration file.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True
    ),
    out_dir: Optional[Path] = typer.Option(
        None,
        "--out-dir", "-o",
        help="Override output directory from config."
    ),
    no_plots: bool = typer.Option(
        False,
        "--no-plots",
        help="Skip plot generation."
    ),
    gpu: bool = typer.Option(
        False,
        "--gpu",
        help="Evaluate fields with JAX."
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet", "-q",
        help="Suppress progress output."
    )
):
    """
    Run a drive frequency sweep from a configuration file.

    Produces per-frequency results, blend and nodal density plots, and
    still pattern frames.
    """
    from .config import load_config
    from .sweep import run_sweep, get_sweep_summary
    from .io import create_run_folder, save_results

    if not quiet:
        console.print(f"[bold blue]Loading config:[/] {config}")

    try:
        cfg = load_config(config)
    except ValueError as e:
        _fail(str(e))

    if out_dir is not None:
        cfg.run.out_dir = str(out_dir)

    total_points = cfg.sweep.n_freq

    if not quiet:
        console.print(f"[bold]Plate:[/] {cfg.plate.shape}, L={cfg.plate.plate_size}")
        console.print(
            f"[bold]Sweep:[/] {cfg.sweep.f_start:g}-{cfg.sweep.f_stop:g} Hz, "
            f"{total_points} points ({cfg.sweep.spacing})"
        )
        console.print(f"[bold]Sampling:[/] R={cfg.sampling.resolution}, threshold={cfg.sampling.node_threshold}")

    if gpu:
        try:
            from .gpu_sweep import run_sweep_gpu
        except ImportError:
            _fail("JAX is not installed; install the 'gpu' extra or drop --gpu.")
        result = run_sweep_gpu(cfg)
    elif not quiet:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console
        ) as progress:
            task = progress.add_task("Running sweep...", total=total_points)

            def update_progress(current, total):
                progress.update(task, completed=current)

            result = run_sweep(cfg, progress_callback=update_progress)
    else:
        result = run_sweep(cfg)

    run_path = create_run_folder(cfg, result.timestamp)
    save_results(result, run_path)

    if not quiet:
        console.print(f"[bold green]Results saved to:[/] {run_path}")

    if not no_plots:
        from .plots import plot_all
        if not quiet:
            console.print("[bold blue]Generating plots...[/]")
        plot_paths = plot_all(result, run_path)
        if not quiet:
            for name, path in plot_paths.items():
                console.print(f"  - {name}: {path.name}")

    if not quiet:
        s = get_sweep_summary(result)
        console.print()
        console.print("[bold]Summary:[/]")
        console.print(f"  Distinct dominant modes: {s['distinct_primary_modes']}")
        console.print(f"  Mean nodal fraction: {s['nodal_fraction_mean']:.3f}")
        console.print(f"  Elapsed time: {s['elapsed_seconds']:.2f}s ({s['points_per_second']:.1f} points/s)")

    console.print(f"\n[bold green]Run complete:[/] {run_path}")


@app.command()
def plot(
    run: Path = typer.Option(
        ...,
        "--run", "-r",
        help="Path to run folder.",
        exists=True,
        file_okay=False,
        dir_okay=True,
        readable=True
    ),
    dpi: int = typer.Option(
        150,
        "--dpi",
        help="Plot resolution."
    )
):
    """
    Regenerate plots from an existing run folder.
    """
    from .io import load_results
    from .plots import plot_all

    console.print(f"[bold blue]Loading results from:[/] {run}")
    try:
        result = load_results(run)
    except FileNotFoundError as e:
        _fail(str(e))

    console.print("[bold blue]Generating plots...[/]")
    plot_paths = plot_all(result, run, dpi=dpi)

    for name, path in plot_paths.items():
        console.print(f"  - {name}: {path}")

    console.print("[bold green]Plots generated.[/]")


@app.command()
def export(
    run: Path = typer.Option(
        ...,
        "--run", "-r",
        help="Path to run folder.",
        exists=True,
        file_okay=False,
        dir_okay=True,
        readable=True
    ),
    format: str = typer.Option(
        "json,csv",
        "--format", "-f",
        help="Comma-separated list of formats to export (json, csv)."
    )
):
    """
    Export results from a run folder in specified formats.
    """
    from .io import export_results

    formats = [f.strip() for f in format.split(",")]

    console.print(f"[bold blue]Exporting from:[/] {run}")
    console.print(f"[bold]Formats:[/] {', '.join(formats)}")

    try:
        paths = export_results(run, formats)
    except FileNotFoundError as e:
        _fail(str(e))

    for fmt, path in paths.items():
        console.print(f"  - {fmt}: {path}")

    console.print("[bold green]Export complete.[/]")


@app.command()
def info(
    run: Path = typer.Option(
        ...,
        "--run", "-r",
        help="Path to run folder.",
        exists=True,
        file_okay=False,
        dir_okay=True,
        readable=True
    )
):
    """
    Display information about a run.
    """
    from .io import load_results
    from .sweep import get_sweep_summary

    try:
        result = load_results(run)
    except FileNotFoundError as e:
        _fail(str(e))
    s = get_sweep_summary(result)

    table = Table(title=f"Run: {run.name}")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Config Hash", result.config_hash)
    table.add_row("Timestamp", result.timestamp)
    table.add_row("Shape", result.config.plate.shape)
    table.add_row("Plate Size", str(result.config.plate.plate_size))
    table.add_row("Frequency Range", f"{result.config.sweep.f_start:g}-{result.config.sweep.f_stop:g} Hz")
    table.add_row("Total Points", str(s['total_points']))
    table.add_row("Distinct Dominant Modes", str(s['distinct_primary_modes']))
    table.add_row("Mean Nodal Fraction", f"{s['nodal_fraction_mean']:.4f}")
    table.add_row("Elapsed Time", f"{s['elapsed_seconds']:.2f}s")

    console.print(table)

    if s['mode_counts']:
        mode_table = Table(title="Dominant Mode Distribution")
        mode_table.add_column("Mode", style="cyan")
        mode_table.add_column("Steps", style="green")
        for mode, count in s['mode_counts'].items():
            mode_table.add_row(mode, str(count))
        console.print(mode_table)


@app.command()
def list_runs(
    out_dir: Path = typer.Option(
        Path("out"),
        "--out-dir", "-o",
        help="Output directory to search."
    )
):
    """
    List all runs in an output directory.
    """
    from .io import list_runs as _list_runs

    runs = _list_runs(out_dir)

    if not runs:
        console.print(f"[yellow]No runs found in {out_dir}[/]")
        return

    table = Table(title=f"Runs in {out_dir}")
    table.add_column("#", style="dim")
    table.add_column("Run Name", style="cyan")
    table.add_column("Timestamp", style="green")
    table.add_column("Hash", style="yellow")

    for i, run_path in enumerate(runs, 1):
        # Run name: run_YYYYmmdd_HHMMSS_hash
        parts = run_path.name.split("_")
        if len(parts) >= 4:
            timestamp = f"{parts[1]}_{parts[2]}"
            hash_val = parts[3]
        else:
            timestamp = ""
            hash_val = ""
        table.add_row(str(i), run_path.name, timestamp, hash_val)

    console.print(table)


@app.command()
def version():
    """
    Display version information.
    """
    from . import __version__
    console.print(f"chladni-plate version {__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
