"""Tests for CLI run/plot flow."""

from __future__ import annotations

from pathlib import Path

from cli.main import run_cli
from data.logger import SimulationLogger


def _write_config(tmp_path, params: str = "") -> Path:
    config_path = tmp_path / "colony.yaml"
    config_path.write_text(
        "simulation: dwarf_colony\n"
        "params:\n"
        "  initial_dwarves: 3\n"
        "  map_width: 16\n"
        "  map_height: 12\n"
        f"{params}"
        "run:\n"
        "  steps: 20\n"
        "  random_seed: 9\n"
        "logging:\n"
        "  level: WARNING\n"
        "  log_interval: 1\n",
        encoding="utf-8",
    )
    return config_path


def test_cli_run_and_plot(tmp_path, capsys) -> None:
    db_path = tmp_path / "sim.db"
    config_path = _write_config(tmp_path)

    assert run_cli(["run", "--config", str(config_path), "--db", str(db_path), "--steps", "8", "--summary"]) == 0
    output = capsys.readouterr().out
    assert "Tick 8: 3 dwarves" in output

    logger = SimulationLogger(db_path)
    run_id = logger.latest_run_id()
    rows = logger.fetch_metrics(run_id) if run_id else []
    logger.close()
    assert run_id is not None
    assert run_id in output
    assert len(rows) == 8

    out_path = tmp_path / "plots" / "colony.png"
    assert run_cli(["plot", "--run", run_id, "--db", str(db_path), "--out", str(out_path)]) == 0
    assert out_path.exists()

    latest_path = tmp_path / "latest.png"
    assert run_cli(["plot", "--db", str(db_path), "--out", str(latest_path)]) == 0
    assert latest_path.exists()


def test_cli_rejects_invalid_config(tmp_path, capsys) -> None:
    db_path = tmp_path / "sim.db"

    assert run_cli(["run", "--config", str(tmp_path / "missing.yaml"), "--db", str(db_path)]) == 2
    bad_rules = _write_config(tmp_path, params="  hunger_seek_threshold: 90.0\n")
    assert run_cli(["run", "--config", str(bad_rules), "--db", str(db_path)]) == 2
    assert "Invalid config" in capsys.readouterr().err


def test_cli_plot_without_runs(tmp_path) -> None:
    assert run_cli(["plot", "--db", str(tmp_path / "empty.db"), "--out", str(tmp_path / "x.png")]) == 1
