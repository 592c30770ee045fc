"""Tests for run config loading, schema validation, and colony rules."""

from __future__ import annotations

import pytest

from core.config_loader import ConfigValidationError, load_config
from simulations.dwarf_colony.rules import ColonyConfigurationError, ColonyRules


def _config_yaml(params: str = "  initial_dwarves: 4\n  map_width: 20\n") -> str:
    return (
        "simulation: dwarf_colony\n"
        "params:\n"
        f"{params}"
        "run:\n"
        "  steps: 10\n"
        "  random_seed: 5\n"
        "logging:\n"
        "  level: info\n"
        "  log_interval: 2\n"
    )


def _write(tmp_path, text: str):
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_load_valid_config_applies_defaults(tmp_path) -> None:
    config = load_config(_write(tmp_path, _config_yaml()))

    assert config["simulation"] == "dwarf_colony"
    assert config["seed"] == 5
    assert config["run_config"] == {"steps": 10, "random_seed": 5}
    assert config["logging_config"]["level"] == "INFO"
    params = config["simulation_config"]
    assert params["initial_dwarves"] == 4
    assert params["map_width"] == 20
    assert params["map_height"] == 30
    assert params["lethal_starvation"] is False


def test_integer_is_widened_for_float_params(tmp_path) -> None:
    config = load_config(_write(tmp_path, _config_yaml("  initial_dwarves: 4\n  hunger_per_tick: 1\n")))

    value = config["simulation_config"]["hunger_per_tick"]
    assert value == 1.0
    assert isinstance(value, float)


def test_wrong_param_type_is_rejected(tmp_path) -> None:
    with pytest.raises(ConfigValidationError, match="expected int"):
        load_config(_write(tmp_path, _config_yaml("  initial_dwarves: many\n")))
    with pytest.raises(ConfigValidationError, match="expected bool"):
        load_config(_write(tmp_path, _config_yaml("  initial_dwarves: 4\n  lethal_starvation: 1\n")))


def test_missing_required_param(tmp_path) -> None:
    with pytest.raises(ConfigValidationError, match="missing required parameter"):
        load_config(_write(tmp_path, _config_yaml("  map_width: 20\n")))


def test_unknown_param_strict_errors_and_lenient_warns(tmp_path) -> None:
    path = _write(tmp_path, _config_yaml("  initial_dwarves: 4\n  dragons: 3\n"))

    with pytest.raises(ConfigValidationError, match="Unknown parameter"):
        load_config(path, strict=True)

    with pytest.warns(UserWarning, match="dragons"):
        config = load_config(path, strict=False)
    assert "dragons" not in config["simulation_config"]


def test_section_errors(tmp_path) -> None:
    with pytest.raises(ConfigValidationError, match="Missing required top-level"):
        load_config(_write(tmp_path, "simulation: dwarf_colony\nparams: {}\n"))
    with pytest.raises(ConfigValidationError, match="logging.level"):
        load_config(_write(tmp_path, _config_yaml().replace("level: info", "level: loud")))
    with pytest.raises(ConfigValidationError, match="non-negative"):
        load_config(_write(tmp_path, _config_yaml().replace("steps: 10", "steps: -1")))
    with pytest.raises(ConfigValidationError, match="not found"):
        load_config(_write(tmp_path, _config_yaml().replace("dwarf_colony", "elf_colony")))
    with pytest.raises(ConfigValidationError, match="Config file not found"):
        load_config(tmp_path / "missing.yaml")


def test_rules_reject_inconsistent_thresholds() -> None:
    with pytest.raises(ColonyConfigurationError, match="seek < critical"):
        ColonyRules(hunger_seek_threshold=90.0)
    with pytest.raises(ColonyConfigurationError, match="starvation_threshold"):
        ColonyRules(lethal_starvation=True, starvation_threshold=70.0)
    with pytest.raises(ColonyConfigurationError, match="probability"):
        ColonyRules(task_spawn_chance=1.5)
    with pytest.raises(ColonyConfigurationError, match="text_provider"):
        ColonyRules(text_provider="oracle")


def test_rules_from_params_ignores_framework_keys() -> None:
    rules = ColonyRules.from_params({"initial_dwarves": 2, "terrain_rows": ["...", "..."], "unused": 1})

    assert rules.initial_dwarves == 2
    assert rules.terrain_rows == ("...", "...")
