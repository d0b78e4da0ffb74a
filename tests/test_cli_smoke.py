"""
Smoke tests for the CLI.

Verifies that CLI commands run without errors and produce expected outputs.
"""

import importlib.util
import sys
import pytest
from pathlib import Path

# Add src to path for development testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from typer.testing import CliRunner

from chladni_plate.cli import app


@pytest.fixture
def runner():
    return CliRunner()


class TestCLISmoke:
    """Smoke tests for CLI commands."""

    @pytest.fixture
    def tiny_config_file(self, tmp_path):
        """Create a tiny config file for testing."""
        config_content = """
run:
  out_dir: "{out_dir}"
  run_name: "test_run"

plate:
  shape: "square"
  plate_size: 0.9
  freq_hz: 440.0

sampling:
  resolution: 32
  node_threshold: 0.08

viewport:
  width: 200
  height: 200

sweep:
  f_start: 50.0
  f_stop: 5000.0
  n_freq: 5
  spacing: "log"
  n_frames: 2
"""
        out_dir = tmp_path / "out"
        out_dir.mkdir()

        config_path = tmp_path / "test_config.yaml"
        config_path.write_text(config_content.format(out_dir=str(out_dir)))

        return config_path, out_dir

    def test_sweep_creates_output(self, runner, tiny_config_file):
        """Sweep command should create output folder with required files."""
        config_path, out_dir = tiny_config_file

        result = runner.invoke(app, ["sweep", "--config", str(config_path), "--quiet"])

        # Check command succeeded
        assert result.exit_code == 0, f"CLI failed: {result.output}"

        runs = list(out_dir.glob("run_*"))
        assert len(runs) == 1, "No run folder created"
        run_path = runs[0]

        assert (run_path / "config_resolved.yaml").exists(), "config_resolved.yaml not found"
        assert (run_path / "results.json").exists(), "results.json not found"
        assert (run_path / "results.csv").exists(), "results.csv not found"
        assert (run_path / "plot_sweep_position.png").exists(), "plot_sweep_position.png not found"
        assert (run_path / "plot_nodal_density.png").exists(), "plot_nodal_density.png not found"
        assert len(list(run_path.glob("frame_*.png"))) == 2

    def test_sweep_no_plots(self, runner, tiny_config_file):
        """--no-plots should skip plot generation."""
        config_path, out_dir = tiny_config_file

        result = runner.invoke(app, ["sweep", "--config", str(config_path), "--quiet", "--no-plots"])
        assert result.exit_code == 0, f"CLI failed: {result.output}"

        run_path = list(out_dir.glob("run_*"))[0]
        assert (run_path / "results.json").exists()
        assert not list(run_path.glob("*.png"))

    def test_sweep_with_progress(self, runner, tiny_config_file):
        """Non-quiet sweep prints a summary."""
        config_path, _ = tiny_config_file

        result = runner.invoke(app, ["sweep", "--config", str(config_path), "--no-plots"])
        assert result.exit_code == 0, f"CLI failed: {result.output}"
        assert "Distinct dominant modes" in result.output

    def test_sweep_invalid_config(self, runner, tmp_path):
        config_path = tmp_path / "bad.yaml"
        config_path.write_text("plate:\n  shape: hexagon\n")

        result = runner.invoke(app, ["sweep", "--config", str(config_path), "--quiet"])
        assert result.exit_code == 1
        assert "Unknown shape" in result.output

    def test_plot_regeneration(self, runner, tiny_config_file):
        """Plot command should regenerate plots from a run folder."""
        config_path, out_dir = tiny_config_file
        runner.invoke(app, ["sweep", "--config", str(config_path), "--quiet", "--no-plots"])
        run_path = list(out_dir.glob("run_*"))[0]

        result = runner.invoke(app, ["plot", "--run", str(run_path)])
        assert result.exit_code == 0, f"CLI failed: {result.output}"
        assert (run_path / "plot_sweep_position.png").exists()

    def test_info_and_export(self, runner, tiny_config_file):
        config_path, out_dir = tiny_config_file
        runner.invoke(app, ["sweep", "--config", str(config_path), "--quiet", "--no-plots"])
        run_path = list(out_dir.glob("run_*"))[0]
        (run_path / "results.csv").unlink()

        result = runner.invoke(app, ["info", "--run", str(run_path)])
        assert result.exit_code == 0, f"CLI failed: {result.output}"
        assert "Config Hash" in result.output

        result = runner.invoke(app, ["export", "--run", str(run_path), "--format", "csv"])
        assert result.exit_code == 0, f"CLI failed: {result.output}"
        assert (run_path / "results.csv").exists()

    def test_list_runs(self, runner, tiny_config_file):
        config_path, out_dir = tiny_config_file

        result = runner.invoke(app, ["list-runs", "--out-dir", str(out_dir)])
        assert result.exit_code == 0
        assert "No runs found" in result.output

        runner.invoke(app, ["sweep", "--config", str(config_path), "--quiet", "--no-plots"])
        result = runner.invoke(app, ["list-runs", "--out-dir", str(out_dir)])
        assert result.exit_code == 0
        assert "run_" in result.output


class TestSingleFrameCommands:
    """Tests for render, catalog and summary."""

    def test_render(self, runner, tmp_path):
        output = tmp_path / "plate.png"
        points = tmp_path / "points.csv"

        result = runner.invoke(app, [
            "render", "--shape", "circle", "--size", "0.8", "--freq", "1200",
            "--resolution", "40", "--output", str(output), "--points-csv", str(points),
            "--dpi", "50"
        ])
        assert result.exit_code == 0, f"CLI failed: {result.output}"
        assert output.exists()
        assert points.read_text().startswith("px,py")
        assert "Circular plate" in result.output

    def test_render_bad_shape(self, runner, tmp_path):
        result = runner.invoke(app, [
            "render", "--shape", "triangle", "--output", str(tmp_path / "x.png")
        ])
        assert result.exit_code == 1
        assert not (tmp_path / "x.png").exists()

    def test_catalog(self, runner):
        result = runner.invoke(app, ["catalog", "--shape", "square"])
        assert result.exit_code == 0, f"CLI failed: {result.output}"
        assert "(m=1, n=2)" in result.output

    def test_summary(self, runner):
        result = runner.invoke(app, ["summary", "--shape", "square", "--freq", "20", "--size", "1"])
        assert result.exit_code == 0, f"CLI failed: {result.output}"
        assert "Dominant Mode" in result.output
        assert "Drive: 20.0 Hz" in result.output

    def test_version(self, runner):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output


class TestRenderFramesScript:
    """Tests for scripts/render_frames.py."""

    @staticmethod
    def _load_script():
        path = Path(__file__).parent.parent / "scripts" / "render_frames.py"
        spec = importlib.util.spec_from_file_location("render_frames", path)
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module

    def test_frames_with_size_override(self, runner, tmp_path, monkeypatch):
        """Frame count and plate size come from the command line."""
        config_path = tmp_path / "config.yaml"
        out_dir = tmp_path / "out"
        config_path.write_text(
            f'run:\n  out_dir: "{out_dir}"\n'
            "sampling:\n  resolution: 24\n"
            "viewport:\n  width: 120\n  height: 120\n"
            "sweep:\n  n_freq: 4\n  n_frames: 1\n"
        )
        result = runner.invoke(app, ["sweep", "--config", str(config_path), "--quiet", "--no-plots"])
        assert result.exit_code == 0, f"CLI failed: {result.output}"
        run_path = list(out_dir.glob("run_*"))[0]

        script = self._load_script()
        monkeypatch.setattr(sys, "argv", [
            "render_frames.py", str(run_path),
            "--frames", "2", "--size", "0.6", "--points", "--dpi", "40"
        ])
        script.main()

        frames_dir = run_path / "frames"
        pngs = sorted(frames_dir.glob("frame_*.png"))
        csvs = sorted(frames_dir.glob("frame_*.csv"))
        assert len(pngs) == 2
        assert len(csvs) == 2
        assert all("_L0.6" in p.name for p in pngs)
        assert csvs[0].read_text().startswith("px,py")
