"""Simulation plugin for dwarf_colony."""

from __future__ import annotations

import logging
from typing import Any

from core.deterministic_rng import DeterministicRNG
from simulations.base_simulation import Simulation
from simulations.dwarf_colony.environment import ColonyEnvironment
from simulations.dwarf_colony.events import LogEntry
from simulations.dwarf_colony.rules import ColonyRules
from simulations.dwarf_colony.text import OllamaTextProvider, TextChannel

LOGGER = logging.getLogger(__name__)


def build_text_channel(rules: ColonyRules) -> TextChannel | None:
    if rules.text_provider == "ollama":
        provider = OllamaTextProvider(
            base_url=rules.text_base_url,
            model=rules.text_model,
            timeout=rules.text_timeout,
        )
        LOGGER.info("Requesting generated text from %s (model %s).", rules.text_base_url, rules.text_model)
        return TextChannel(provider, max_workers=rules.text_workers)
    return None


class DwarfColonySimulation(Simulation):
    """Colony of autonomous dwarves driven by needs, tasks, and relationships."""

    def __init__(self, params: dict[str, Any], rng: DeterministicRNG) -> None:
        super().__init__(params=params, rng=rng)
        self.rules = ColonyRules.from_params(params)
        self.environment = ColonyEnvironment(
            rules=self.rules,
            rng=rng,
            text_channel=build_text_channel(self.rules),
        )
        self._messages: list[LogEntry] = []
        self.environment.event_log.subscribe(self._messages.append)

    def reset(self) -> None:
        self.environment.reset()

    def step(self) -> None:
        self.environment.step()

    def get_metrics(self) -> dict[str, float]:
        return self.environment.get_metrics()

    def get_render_state(self) -> dict[str, Any]:
        return self.environment.get_render_state()

    def drain_messages(self) -> list[dict[str, Any]]:
        drained = [entry.to_dict() for entry in self._messages]
        self._messages.clear()
        return drained

    def close(self) -> None:
        self.environment.close()


SIMULATION_NAME = "dwarf_colony"
SimulationClass = DwarfColonySimulation
