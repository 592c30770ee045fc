"""Typed environmental events and their effect on dwarf mood and fulfillment."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

from simulations.dwarf_colony.needs import NeedAxis, adjust_mood


class WeatherKind(str, enum.Enum):
    RAIN = "rain"
    SNOW = "snow"
    FOG = "fog"
    MIASMA = "miasma"
    SMOKE = "smoke"
    MIST = "mist"
    SPORES = "spores"


MOOD_EFFECT: dict[WeatherKind, float] = {
    WeatherKind.RAIN: -5.0,
    WeatherKind.SNOW: 0.0,
    WeatherKind.FOG: -3.0,
    WeatherKind.MIASMA: -15.0,
    WeatherKind.SMOKE: -8.0,
    WeatherKind.MIST: -2.0,
    WeatherKind.SPORES: -12.0,
}

FULFILLMENT_EFFECT: dict[WeatherKind, dict[NeedAxis, float]] = {
    WeatherKind.RAIN: {NeedAxis.TRANQUILITY: -5.0},
    WeatherKind.SNOW: {NeedAxis.TRANQUILITY: 3.0, NeedAxis.CREATIVITY: 2.0},
    WeatherKind.FOG: {NeedAxis.EXPLORATION: -8.0, NeedAxis.TRANQUILITY: -3.0},
    WeatherKind.MIASMA: {NeedAxis.TRANQUILITY: -10.0, NeedAxis.CREATIVITY: -5.0},
    WeatherKind.SMOKE: {NeedAxis.TRANQUILITY: -8.0},
    WeatherKind.MIST: {NeedAxis.CREATIVITY: 1.0},
    WeatherKind.SPORES: {NeedAxis.TRANQUILITY: -7.0, NeedAxis.CREATIVITY: -2.0},
}

MOOD_SCALE = 0.1
FULFILLMENT_SCALE = 0.5


@dataclass(frozen=True)
class EnvironmentalEvent:
    """Weather exposure for one dwarf, or for everyone when ``dwarf_id`` is None."""

    dwarf_id: int | None
    kind: WeatherKind
    intensity: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", WeatherKind(self.kind))
        if not 0.0 <= float(self.intensity) <= 1.0:
            raise ValueError(f"Event intensity must be in [0, 1], got {self.intensity}.")


def apply_event(agent: Any, event: EnvironmentalEvent) -> None:
    adjust_mood(agent, MOOD_EFFECT[event.kind] * event.intensity * MOOD_SCALE)
    for axis, change in FULFILLMENT_EFFECT[event.kind].items():
        agent.fulfillment.set(axis, agent.fulfillment.get(axis) + change * event.intensity * FULFILLMENT_SCALE)
