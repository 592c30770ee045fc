"""Top-level run config loading and validation for plugin-driven simulations."""

from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Any, Mapping

import yaml

from core.plugin_registry import SimulationPluginNotFoundError, get_simulation_class
from core.schema_validator import SchemaValidationError, validate_simulation_params


class ConfigValidationError(ValueError):
    """Raised when runtime config fails validation."""


_REQUIRED_TOP_LEVEL = {"simulation", "params", "run", "logging"}
_RUN_FIELDS = {
    "steps": int,
    "random_seed": int,
}
_LOGGING_FIELDS = {
    "level": str,
    "log_interval": int,
}
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _load_yaml_or_raise(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ConfigValidationError(f"Config file not found: {path}")

    try:
        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigValidationError(f"Failed to parse YAML config '{path}': {exc}") from exc

    if not isinstance(payload, Mapping):
        raise ConfigValidationError("Top-level config must be a mapping.")
    return dict(payload)


def _validate_section(
    section_name: str,
    section_value: Any,
    fields: Mapping[str, type[Any]],
) -> dict[str, Any]:
    if not isinstance(section_value, Mapping):
        raise ConfigValidationError(f"Section '{section_name}' must be a mapping.")

    section = dict(section_value)
    missing = [key for key in fields if key not in section]
    if missing:
        raise ConfigValidationError(
            f"Section '{section_name}' missing required field(s): {missing}."
        )

    extras = [key for key in section if key not in fields]
    if extras:
        raise ConfigValidationError(
            f"Section '{section_name}' has unknown field(s): {extras}."
        )

    for key, expected_type in fields.items():
        if type(section[key]) is not expected_type:
            raise ConfigValidationError(
                f"Field '{section_name}.{key}' expected {expected_type.__name__}, got {type(section[key]).__name__}."
            )

    return section


def load_config(path: str | Path, strict: bool = True) -> dict[str, Any]:
    """Load and validate a YAML run configuration.

    Returns normalized config with keys:
    - simulation
    - simulation_config
    - run_config
    - logging_config
    - seed
    """
    config = _load_yaml_or_raise(Path(path))

    missing_top = sorted(key for key in _REQUIRED_TOP_LEVEL if key not in config)
    if missing_top:
        raise ConfigValidationError(
            f"Missing required top-level section(s): {missing_top}."
        )

    extras_top = sorted(key for key in config if key not in _REQUIRED_TOP_LEVEL)
    if extras_top:
        raise ConfigValidationError(
            f"Unknown top-level field(s): {extras_top}."
        )

    simulation_name = config.get("simulation")
    if not isinstance(simulation_name, str) or not simulation_name:
        raise ConfigValidationError("Field 'simulation' must be a non-empty string.")

    try:
        get_simulation_class(simulation_name)
    except SimulationPluginNotFoundError as exc:
        raise ConfigValidationError(str(exc)) from exc

    run_config = _validate_section("run", config["run"], _RUN_FIELDS)
    if run_config["steps"] < 0:
        raise ConfigValidationError("Field 'run.steps' must be non-negative.")

    logging_config = _validate_section("logging", config["logging"], _LOGGING_FIELDS)
    logging_config["level"] = logging_config["level"].upper()
    if logging_config["level"] not in _LOG_LEVELS:
        raise ConfigValidationError(
            f"Field 'logging.level' must be one of {sorted(_LOG_LEVELS)}, got '{logging_config['level']}'."
        )
    if logging_config["log_interval"] <= 0:
        raise ConfigValidationError("Field 'logging.log_interval' must be positive.")

    raw_params = config["params"]
    if raw_params is None:
        raw_params = {}
    if not isinstance(raw_params, Mapping):
        raise ConfigValidationError("Section 'params' must be a mapping.")

    schema_module_name = f"simulations.{simulation_name}.config_schema"
    try:
        schema_module = importlib.import_module(schema_module_name)
    except ImportError as exc:
        raise ConfigValidationError(
            f"Could not load schema for simulation '{simulation_name}' ({schema_module_name})."
        ) from exc

    try:
        simulation_params = validate_simulation_params(
            params=dict(raw_params),
            schema_module=schema_module,
            simulation_name=simulation_name,
            strict=strict,
        )
    except SchemaValidationError as exc:
        raise ConfigValidationError(str(exc)) from exc

    return {
        "simulation": simulation_name,
        "simulation_config": simulation_params,
        "run_config": run_config,
        "logging_config": logging_config,
        "seed": int(run_config["random_seed"]),
    }


def configure_logging(logging_config: Mapping[str, Any]) -> None:
    """Apply the config's log level to the root logger."""
    logging.basicConfig(
        level=getattr(logging, str(logging_config.get("level", "INFO")).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
