"""Simulation plugin discovery and lookup by name."""

from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Type

import simulations
from simulations.base_simulation import Simulation

LOGGER = logging.getLogger(__name__)

_DISCOVERED: dict[str, Type[Simulation]] | None = None


class SimulationPluginNotFoundError(LookupError):
    """Raised when requested simulation plugin cannot be resolved."""


def _load_plugin(package_name: str) -> Type[Simulation] | None:
    module_name = f"simulations.{package_name}.sim"
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        LOGGER.warning("Skipping simulation package '%s': %s", package_name, exc)
        return None

    sim_class = getattr(module, "SimulationClass", None)
    if isinstance(sim_class, type) and issubclass(sim_class, Simulation):
        return sim_class
    LOGGER.debug("Module %s does not export a Simulation subclass.", module_name)
    return None


def discover_simulations(refresh: bool = False) -> dict[str, Type[Simulation]]:
    """Map ``SIMULATION_NAME`` to plugin class for every ``simulations/<pkg>/sim.py``."""
    global _DISCOVERED
    if _DISCOVERED is not None and not refresh:
        return dict(_DISCOVERED)

    discovered: dict[str, Type[Simulation]] = {}
    package_names = sorted(
        {
            entry.name
            for root in simulations.__path__
            for entry in Path(root).iterdir()
            if entry.is_dir() and not entry.name.startswith("_") and (entry / "sim.py").is_file()
        }
    )
    for package_name in package_names:
        sim_class = _load_plugin(package_name)
        if sim_class is None:
            continue
        module = importlib.import_module(f"simulations.{package_name}.sim")
        sim_name = getattr(module, "SIMULATION_NAME", package_name)
        discovered[str(sim_name)] = sim_class

    _DISCOVERED = discovered
    return dict(discovered)


def get_simulation_class(name: str) -> Type[Simulation]:
    """Return simulation class by name or raise descriptive error."""
    discovered = discover_simulations()
    if name in discovered:
        return discovered[name]

    available = ", ".join(sorted(discovered.keys())) or "<none>"
    raise SimulationPluginNotFoundError(
        f"Simulation plugin '{name}' not found. Available simulations: {available}"
    )
