"""Hunger, mood, and fulfillment dynamics for individual dwarves.

Every function mutates exactly one dwarf and clamps what it touches, so
callers never see a need outside its range.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from simulations.dwarf_colony.rules import ColonyRules


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, float(value)))


class NeedAxis(str, enum.Enum):
    """Fulfillment axes, in tie-break order."""

    SOCIAL = "social"
    EXPLORATION = "exploration"
    CREATIVITY = "creativity"
    TRANQUILITY = "tranquility"


@dataclass(frozen=True)
class NeedProfile:
    """Decay and satisfaction constants for one fulfillment axis."""

    trait: str
    trait_threshold: float
    decay_rate: float
    satisfy_amount: float


NEED_PROFILES: dict[NeedAxis, NeedProfile] = {
    NeedAxis.SOCIAL: NeedProfile("friendliness", 0.6, 0.3, 25.0),
    NeedAxis.EXPLORATION: NeedProfile("curiosity", 0.6, 0.2, 15.0),
    NeedAxis.CREATIVITY: NeedProfile("creativity", 0.6, 0.15, 20.0),
    NeedAxis.TRANQUILITY: NeedProfile("melancholy", 0.5, 0.1, 30.0),
}

TRAIT_DECAY_MULTIPLIER = 1.5
SATISFY_MOOD_FACTOR = 0.3
URGENCY_FLOOR = 30.0


class Fulfillment:
    """Four named fulfillment values, each clamped to [0, 100] on assignment."""

    __slots__ = ("social", "exploration", "creativity", "tranquility")

    def __init__(
        self,
        social: float = 50.0,
        exploration: float = 50.0,
        creativity: float = 50.0,
        tranquility: float = 50.0,
    ) -> None:
        self.social = social
        self.exploration = exploration
        self.creativity = creativity
        self.tranquility = tranquility

    def __setattr__(self, name: str, value: float) -> None:
        object.__setattr__(self, name, clamp(value, 0.0, 100.0))

    def __repr__(self) -> str:
        body = ", ".join(f"{axis.value}={self.get(axis):.1f}" for axis in NeedAxis)
        return f"Fulfillment({body})"

    def get(self, axis: NeedAxis) -> float:
        return float(getattr(self, axis.value))

    def set(self, axis: NeedAxis, value: float) -> None:
        setattr(self, axis.value, value)

    def to_dict(self) -> dict[str, float]:
        return {axis.value: round(self.get(axis), 2) for axis in NeedAxis}


@dataclass(frozen=True)
class PressingNeed:
    axis: NeedAxis
    urgency: float


def _trait(agent: Any, name: str) -> float:
    return float(getattr(agent.personality, name))


def apply_hunger(agent: Any, rules: "ColonyRules") -> None:
    """Advance hunger by one tick."""
    agent.hunger = agent.hunger + rules.hunger_per_tick


def decay(agent: Any) -> None:
    """Decay every fulfillment axis once; trait-aligned axes decay faster."""
    for axis, profile in NEED_PROFILES.items():
        rate = profile.decay_rate
        if _trait(agent, profile.trait) > profile.trait_threshold:
            rate *= TRAIT_DECAY_MULTIPLIER
        agent.fulfillment.set(axis, agent.fulfillment.get(axis) - rate)


def satisfy(agent: Any, axis: NeedAxis, multiplier: float = 1.0) -> float:
    """Raise one fulfillment axis and lift mood by a fixed share of the gain.

    Returns the amount applied before clamping.
    """
    if multiplier < 0:
        raise ValueError(f"satisfy multiplier must be non-negative, got {multiplier}")
    axis = NeedAxis(axis)
    amount = NEED_PROFILES[axis].satisfy_amount * float(multiplier)
    agent.fulfillment.set(axis, agent.fulfillment.get(axis) + amount)
    agent.mood = agent.mood + amount * SATISFY_MOOD_FACTOR
    return amount


def most_pressing_need(agent: Any) -> PressingNeed | None:
    """Return the most urgent fulfillment axis, or None when nothing is urgent."""
    best: PressingNeed | None = None
    for axis, profile in NEED_PROFILES.items():
        urgency = (100.0 - agent.fulfillment.get(axis)) * (0.5 + _trait(agent, profile.trait))
        if urgency <= URGENCY_FLOOR:
            continue
        if best is None or urgency > best.urgency:
            best = PressingNeed(axis=axis, urgency=urgency)
    return best


def adjust_mood(agent: Any, delta: float) -> None:
    """Shift mood, softened by optimism for losses and dampened by melancholy for gains."""
    personality = agent.personality
    change = float(delta)
    if change < 0 and personality.optimism > 0.7:
        change += abs(change) * 0.2
    elif change > 0 and personality.melancholy > 0.7:
        change -= change * 0.2
    agent.mood = agent.mood + change


def is_hungry(agent: Any, rules: "ColonyRules") -> bool:
    return agent.hunger >= rules.hunger_seek_threshold


def is_critical(agent: Any, rules: "ColonyRules") -> bool:
    return agent.hunger >= rules.hunger_critical_threshold


def is_starving(agent: Any, rules: "ColonyRules") -> bool:
    return rules.lethal_starvation and agent.hunger >= rules.starvation_threshold
