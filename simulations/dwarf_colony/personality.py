"""Procedural personality, aspiration, and starting fulfillment for new dwarves."""

from __future__ import annotations

import enum
import random
from dataclasses import asdict, dataclass, fields
from typing import Mapping

from simulations.dwarf_colony.needs import NEED_PROFILES, Fulfillment

TRAIT_NAMES: tuple[str, ...] = (
    "curiosity",
    "friendliness",
    "bravery",
    "humor",
    "melancholy",
    "patience",
    "creativity",
    "loyalty",
    "stubbornness",
    "optimism",
)

STANDOUT_CHANCE = 0.3
FULFILLMENT_BASE = 50.0
FULFILLMENT_TRAIT_BONUS = 20.0
DOMINANT_TRAIT_THRESHOLD = 0.6


@dataclass(frozen=True)
class Personality:
    """Ten fixed traits in [0, 1]; never changes after creation."""

    curiosity: float
    friendliness: float
    bravery: float
    humor: float
    melancholy: float
    patience: float
    creativity: float
    loyalty: float
    stubbornness: float
    optimism: float

    def __post_init__(self) -> None:
        for item in fields(self):
            value = getattr(self, item.name)
            if not isinstance(value, (int, float)) or not 0.0 <= float(value) <= 1.0:
                raise ValueError(f"Trait '{item.name}' must be a number in [0, 1], got {value!r}.")

    @classmethod
    def from_mapping(cls, values: Mapping[str, float]) -> "Personality":
        missing = [name for name in TRAIT_NAMES if name not in values]
        unknown = [name for name in values if name not in TRAIT_NAMES]
        if missing or unknown:
            raise ValueError(f"Personality traits mismatch: missing={missing}, unknown={unknown}.")
        return cls(**{name: float(values[name]) for name in TRAIT_NAMES})

    def to_dict(self) -> dict[str, float]:
        return {name: round(value, 3) for name, value in asdict(self).items()}


class Aspiration(str, enum.Enum):
    MASTER_CRAFTSMAN = "master_craftsman"
    ARCHITECT = "architect"
    EXPLORER = "explorer"
    SOCIAL_BUTTERFLY = "social_butterfly"
    HERMIT = "hermit"
    LEADER = "leader"


def _aspiration_weights(p: Personality) -> dict[Aspiration, float]:
    return {
        Aspiration.MASTER_CRAFTSMAN: p.creativity + p.patience,
        Aspiration.ARCHITECT: p.creativity + p.bravery,
        Aspiration.EXPLORER: p.curiosity + p.bravery,
        Aspiration.SOCIAL_BUTTERFLY: p.friendliness + p.humor,
        Aspiration.HERMIT: p.melancholy + (1.0 - p.friendliness),
        Aspiration.LEADER: p.bravery + p.loyalty,
    }


def generate_personality(rng: random.Random) -> Personality:
    """Roll a personality: 0.3 + U(0, 0.4), with an occasional standout boost."""
    values: dict[str, float] = {}
    for name in TRAIT_NAMES:
        value = 0.3 + rng.uniform(0.0, 0.4)
        if rng.random() < STANDOUT_CHANCE:
            value += rng.uniform(0.0, 0.3)
        values[name] = min(1.0, value)
    return Personality(**values)


def choose_aspiration(personality: Personality, rng: random.Random) -> Aspiration:
    """Pick an aspiration by personality-weighted roulette."""
    weights = _aspiration_weights(personality)
    total = sum(weights.values())
    roll = rng.uniform(0.0, total)
    for aspiration, weight in weights.items():
        roll -= weight
        if roll <= 0:
            return aspiration
    return Aspiration.MASTER_CRAFTSMAN


def initial_fulfillment(personality: Personality) -> Fulfillment:
    """Start every axis at 50; dwarves who crave an axis start a little fuller."""
    fulfillment = Fulfillment()
    for axis, profile in NEED_PROFILES.items():
        value = FULFILLMENT_BASE
        if getattr(personality, profile.trait) > profile.trait_threshold:
            value += FULFILLMENT_TRAIT_BONUS
        fulfillment.set(axis, value)
    return fulfillment


def dominant_traits(personality: Personality, limit: int = 3) -> list[str]:
    ranked = sorted(asdict(personality).items(), key=lambda item: (-item[1], item[0]))
    strong = [name for name, value in ranked if value > DOMINANT_TRAIT_THRESHOLD][:limit]
    return strong or ["balanced"]


def describe_personality(personality: Personality) -> str:
    words: list[str] = []
    if personality.curiosity > 0.7:
        words.append("curious")
    if personality.friendliness > 0.7:
        words.append("friendly")
    elif personality.friendliness < 0.3:
        words.append("grumpy")
    if personality.bravery > 0.7:
        words.append("brave")
    elif personality.bravery < 0.3:
        words.append("cautious")
    if personality.humor > 0.7:
        words.append("witty")
    if personality.melancholy > 0.7:
        words.append("melancholic")
    return ", ".join(words) if words else "average"


def describe_mood(mood: float) -> str:
    if mood > 80:
        return "happy and content"
    if mood > 60:
        return "relatively good"
    if mood > 40:
        return "neutral"
    if mood > 20:
        return "a bit down"
    return "miserable"

