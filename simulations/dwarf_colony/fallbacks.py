"""Deterministic local text used whenever generated text is missing or late."""

from __future__ import annotations

import random
from typing import Any

from simulations.dwarf_colony.personality import Personality

DWARF_NAMES: tuple[str, ...] = (
    "Urist", "Bomrek", "Fikod", "Kadol", "Morul", "Thikut", "Zefon",
    "Datan", "Erith", "Aban", "Lokum", "Ingiz", "Asob", "Eshtan",
    "Dodok", "Rigoth", "Litast", "Sibrek", "Zasit", "Tholtig",
)

EPITHETS: dict[str, tuple[str, ...]] = {
    "curious": ("the Wanderer", "Far-Seer", "the Seeker"),
    "gregarious": ("the Beloved", "Friend-Maker", "the Merry"),
    "solitary": ("the Lone", "Stone-Silent", "the Recluse"),
    "bold": ("the Brave", "Iron-Heart", "the Dauntless"),
    "mirthful": ("Laugh-Bringer", "the Jolly", "Bright-Eye"),
    "melancholic": ("the Sorrowful", "Tear-Touched", "the Brooding"),
    "patient": ("the Steady", "Long-Wait", "the Enduring"),
    "inventive": ("the Maker", "Clever-Hands", "the Deviser"),
    "steadfast": ("the Loyal", "True-Heart", "the Unwavering"),
    "stubborn": ("the Unyielding", "Stone-Head", "the Obstinate"),
    "hopeful": ("the Bright", "Dawn-Watcher", "the Optimist"),
}

DEFAULT_EPITHETS: tuple[str, ...] = ("Stone-Born", "of the Depths", "the Worker", "Deep-Dweller", "the Stout")

BIOS: dict[str, tuple[str, ...]] = {
    "curious": (
        "Forever poking about in places best left undisturbed.",
        "Peers into every shadow and questions every certainty.",
    ),
    "gregarious": (
        "Knows every dwarf by name and most by their secrets.",
        "Cannot pass another soul without a word, often several.",
    ),
    "solitary": (
        "Prefers stone to company and silence to conversation.",
        "Has mastered the art of being alone in a crowded hall.",
    ),
    "bold": (
        "Rushes toward danger with enthusiasm bordering on foolishness.",
        "Has never backed down from a challenge, to occasional regret.",
    ),
    "mirthful": (
        "Laughs easily, even at things that warrant tears.",
        "Finds joy in small things and spreads it indiscriminately.",
    ),
    "melancholic": (
        "Carries sorrows like precious gems, polished by attention.",
        "The weight of existence sits heavy, but familiar.",
    ),
    "patient": (
        "Waits with the stillness of deep stone.",
        "Rushes nothing, regrets less.",
    ),
    "inventive": (
        "Sees possibility where others see only rock.",
        "Every problem is merely a solution waiting to be discovered.",
    ),
    "steadfast": (
        "Loyalty runs deeper than the deepest mine.",
        "A promise made is a debt owed to the stone itself.",
    ),
    "stubborn": (
        "Bends like granite, which is to say: not at all.",
        "Changing this mind requires tools not yet invented.",
    ),
    "hopeful": (
        "Believes tomorrow will improve upon today, despite evidence.",
        "Optimism persists like a stubborn fungus.",
    ),
}

DEFAULT_BIO = "A dwarf of quiet determination."

IDLE_THOUGHTS: tuple[str, ...] = (
    "I wonder what today will bring...",
    "This place feels different somehow.",
    "The others seem busy today.",
    "What was that noise?",
    "I feel like exploring.",
    "Maybe I should rest.",
)

GREETINGS: tuple[str, ...] = (
    "Hey there.",
    "How are things?",
    "Nice day, isn't it?",
    "Have you seen any food around?",
    "I was just thinking...",
    "Hmm.",
)


class SeededSequence:
    """Linear congruential sequence so fallback text is stable per dwarf id."""

    def __init__(self, seed: int) -> None:
        self.state = int(seed) & 0x7FFFFFFF

    def random(self) -> float:
        self.state = (self.state * 1103515245 + 12345) & 0x7FFFFFFF
        return self.state / 0x7FFFFFFF

    def pick(self, options: tuple[str, ...]) -> str:
        return options[min(len(options) - 1, int(self.random() * len(options)))]


def signature_trait(personality: Personality) -> str | None:
    """Return the single most pronounced trait label, if any stands out."""
    p = personality
    candidates = [
        ("curious", p.curiosity, p.curiosity > 0.7),
        ("gregarious", p.friendliness, p.friendliness > 0.7),
        ("solitary", 1.0 - p.friendliness, p.friendliness < 0.3),
        ("bold", p.bravery, p.bravery > 0.7),
        ("mirthful", p.humor, p.humor > 0.7),
        ("melancholic", p.melancholy, p.melancholy > 0.7),
        ("patient", p.patience, p.patience > 0.7),
        ("inventive", p.creativity, p.creativity > 0.7),
        ("steadfast", p.loyalty, p.loyalty > 0.7),
        ("stubborn", p.stubbornness, p.stubbornness > 0.7),
        ("hopeful", p.optimism, p.optimism > 0.7),
    ]
    ranked = sorted((item for item in candidates if item[2]), key=lambda item: -item[1])
    return ranked[0][0] if ranked else None


def fallback_identity(dwarf_id: int, base_name: str, personality: Personality) -> dict[str, str]:
    sequence = SeededSequence(dwarf_id)
    trait = signature_trait(personality)
    epithet = sequence.pick(EPITHETS.get(trait, DEFAULT_EPITHETS) if trait else DEFAULT_EPITHETS)
    name = f"{base_name} {epithet}" if sequence.random() > 0.4 else base_name
    bio = sequence.pick(BIOS[trait]) if trait in BIOS else DEFAULT_BIO
    return {"name": name, "bio": bio}


def fallback_thought(agent: Any, rng: random.Random) -> str:
    if agent.hunger > 70:
        return "I really need to find food..."
    if agent.mood < 30:
        return "Nothing ever goes right..."
    return rng.choice(IDLE_THOUGHTS)


def fallback_speech(rng: random.Random) -> str:
    return rng.choice(GREETINGS)
