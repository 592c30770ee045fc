"""Named skill levels and their personality-seeded starting values."""

from __future__ import annotations

import enum
import random

from simulations.dwarf_colony.needs import clamp
from simulations.dwarf_colony.personality import Personality


class Skill(str, enum.Enum):
    MINING = "mining"
    MASONRY = "masonry"
    CARPENTRY = "carpentry"
    CRAFTING = "crafting"
    COOKING = "cooking"
    SOCIAL = "social"
    EXPLORATION = "exploration"


# trait that nudges each skill's starting level
SKILL_TRAITS: dict[Skill, str] = {
    Skill.MINING: "stubbornness",
    Skill.MASONRY: "patience",
    Skill.CARPENTRY: "creativity",
    Skill.CRAFTING: "creativity",
    Skill.COOKING: "patience",
    Skill.SOCIAL: "friendliness",
    Skill.EXPLORATION: "curiosity",
}


class Skills:
    """Seven skill levels in [0, 1], clamped on assignment."""

    __slots__ = tuple(skill.value for skill in Skill)

    def __init__(self, **levels: float) -> None:
        unknown = [name for name in levels if name not in self.__slots__]
        if unknown:
            raise ValueError(f"Unknown skill(s): {unknown}")
        for name in self.__slots__:
            setattr(self, name, levels.get(name, 0.3))

    def __setattr__(self, name: str, value: float) -> None:
        object.__setattr__(self, name, clamp(value, 0.0, 1.0))

    def level(self, skill: Skill) -> float:
        return float(getattr(self, Skill(skill).value))

    def improve(self, skill: Skill, amount: float) -> None:
        setattr(self, Skill(skill).value, self.level(skill) + amount)

    def to_dict(self) -> dict[str, float]:
        return {name: round(float(getattr(self, name)), 3) for name in self.__slots__}


def initial_skills(personality: Personality, rng: random.Random) -> Skills:
    levels = {
        skill.value: 0.1 + getattr(personality, trait) * 0.3 + rng.uniform(0.0, 0.1)
        for skill, trait in SKILL_TRAITS.items()
    }
    return Skills(**levels)
