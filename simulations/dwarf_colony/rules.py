"""Validated runtime rules for the dwarf colony simulation."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping


class ColonyConfigurationError(ValueError):
    """Raised when colony rules are inconsistent or describe an unusable world."""


_TEXT_PROVIDERS = {"none", "ollama"}


@dataclass(frozen=True)
class ColonyRules:
    """Runtime parameters for one colony.

    Hunger counts upward from 0 (sated). ``hunger_seek_threshold`` sends a dwarf
    looking for food, ``hunger_critical_threshold`` overrides all other work,
    and in lethal mode ``starvation_threshold`` removes the dwarf.
    """

    map_width: int = 40
    map_height: int = 30
    terrain_rows: tuple[str, ...] = ()
    initial_dwarves: int = 7
    initial_food_sources: int = 6
    food_stock_min: int = 8
    food_stock_max: int = 13
    food_reach: int = 1
    food_respawn_chance: float = 0.02
    hunger_per_tick: float = 0.12
    hunger_seek_threshold: float = 55.0
    hunger_critical_threshold: float = 80.0
    hunger_max: float = 95.0
    eat_hunger_restore: float = 30.0
    lethal_starvation: bool = False
    starvation_threshold: float = 95.0
    initial_tasks: int = 6
    max_open_tasks: int = 20
    task_spawn_chance: float = 0.03
    work_amount: float = 4.0
    energy_drain_per_tick: float = 0.05
    rest_energy_threshold: float = 15.0
    rest_energy_gain: float = 2.0
    social_range: int = 4
    meeting_halls: int = 1
    hall_initial_stock: float = 120.0
    hall_capacity: float = 200.0
    hall_stock_regen: float = 0.05
    feast_threshold: float = 30.0
    feast_cooldown: int = 200
    feast_radius: int = 6
    feast_hunger_restore: float = 40.0
    production_yield: int = 10
    population_recovery: bool = True
    recovery_cohort_size: int = 3
    recovery_food_sources: int = 5
    recovery_food_stock: int = 8
    spawn_attempts: int = 50
    thought_cooldown: int = 20
    log_capacity: int = 500
    text_provider: str = "none"
    text_base_url: str = "http://localhost:11434"
    text_model: str = "llama3.2"
    text_timeout: float = 30.0
    text_workers: int = 2

    def __post_init__(self) -> None:
        if self.map_width <= 0 or self.map_height <= 0:
            raise ColonyConfigurationError(
                f"Map dimensions must be positive, got {self.map_width}x{self.map_height}."
            )
        if not 0.0 < self.hunger_seek_threshold < self.hunger_critical_threshold <= self.hunger_max:
            raise ColonyConfigurationError(
                "Hunger thresholds must satisfy 0 < seek < critical <= hunger_max "
                f"(got {self.hunger_seek_threshold}, {self.hunger_critical_threshold}, {self.hunger_max})."
            )
        if self.lethal_starvation and not (
            self.hunger_critical_threshold < self.starvation_threshold <= self.hunger_max
        ):
            raise ColonyConfigurationError(
                "starvation_threshold must lie in (hunger_critical_threshold, hunger_max] when lethal_starvation is on."
            )
        if self.food_stock_min <= 0 or self.food_stock_min > self.food_stock_max:
            raise ColonyConfigurationError("food_stock_min must be positive and not exceed food_stock_max.")
        for name in ("food_respawn_chance", "task_spawn_chance"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ColonyConfigurationError(f"{name} must be a probability in [0, 1], got {value}.")
        for name in (
            "initial_dwarves",
            "initial_food_sources",
            "initial_tasks",
            "max_open_tasks",
            "meeting_halls",
            "recovery_cohort_size",
            "recovery_food_sources",
            "feast_cooldown",
            "feast_radius",
            "social_range",
            "food_reach",
            "thought_cooldown",
        ):
            if getattr(self, name) < 0:
                raise ColonyConfigurationError(f"{name} must be non-negative.")
        if self.spawn_attempts <= 0:
            raise ColonyConfigurationError("spawn_attempts must be at least 1.")
        if self.hall_initial_stock > self.hall_capacity:
            raise ColonyConfigurationError("hall_initial_stock cannot exceed hall_capacity.")
        if self.text_provider not in _TEXT_PROVIDERS:
            raise ColonyConfigurationError(
                f"Unknown text_provider '{self.text_provider}'. Expected one of {sorted(_TEXT_PROVIDERS)}."
            )

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "ColonyRules":
        """Build rules from validated plugin params, ignoring framework-only keys."""
        known = {item.name for item in fields(cls)}
        values = {key: value for key, value in params.items() if key in known}
        if "terrain_rows" in values:
            values["terrain_rows"] = tuple(str(row) for row in values["terrain_rows"] or ())
        return cls(**values)
