"""Schema validation utilities for simulation plugin parameters."""

from __future__ import annotations

import warnings
from typing import Any, Mapping


class SchemaValidationError(ValueError):
    """Raised when simulation params fail schema validation."""


def _matches(value: Any, expected_type: type[Any]) -> bool:
    # bool is an int subclass; keep it out of numeric params
    if expected_type is float:
        return type(value) in (int, float)
    return type(value) is expected_type


def _checked(key: str, value: Any, expected_type: type[Any]) -> Any:
    if not _matches(value, expected_type):
        raise SchemaValidationError(
            f"Parameter '{key}' expected {expected_type.__name__}, got {type(value).__name__}."
        )
    return float(value) if expected_type is float else value


def validate_simulation_params(
    params: dict[str, Any],
    schema_module: Any,
    simulation_name: str,
    strict: bool = True,
) -> dict[str, Any]:
    """Validate simulation params against a plugin schema module.

    Applies ``DEFAULTS``, checks ``REQUIRED_PARAMS`` and ``OPTIONAL_PARAMS``
    types (integers are accepted and widened where a float is declared), and
    treats unknown keys as errors in strict mode or warnings otherwise.
    """
    required: Mapping[str, type[Any]] = getattr(schema_module, "REQUIRED_PARAMS", {})
    defaults: Mapping[str, Any] = getattr(schema_module, "DEFAULTS", {})
    optional: Mapping[str, type[Any]] = getattr(schema_module, "OPTIONAL_PARAMS", {})

    for label, table in (("REQUIRED_PARAMS", required), ("DEFAULTS", defaults), ("OPTIONAL_PARAMS", optional)):
        if not isinstance(table, Mapping):
            raise SchemaValidationError(
                f"Simulation '{simulation_name}' schema attribute {label} must be a mapping."
            )

    merged = dict(defaults)
    merged.update(params)

    missing = [key for key in required if key not in merged]
    if missing:
        raise SchemaValidationError(
            f"Simulation '{simulation_name}' missing required parameter(s): {missing}."
        )

    for table in (required, optional):
        for key, expected_type in table.items():
            if key in merged:
                merged[key] = _checked(key, merged[key], expected_type)

    allowed = set(required) | set(optional) | set(defaults)
    extras = sorted(key for key in merged if key not in allowed)
    if extras:
        message = f"Unknown parameter(s) {extras} for simulation '{simulation_name}'."
        if strict:
            raise SchemaValidationError(message)
        warnings.warn(message, stacklevel=2)
        for key in extras:
            merged.pop(key)

    return merged
