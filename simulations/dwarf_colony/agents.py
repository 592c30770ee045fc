"""Dwarf record, shared id/name sequence, and new-dwarf factory."""

from __future__ import annotations

import enum
import random
from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from simulations.dwarf_colony.fallbacks import DWARF_NAMES, fallback_identity
from simulations.dwarf_colony.memory import MemoryLedger, RelationshipLedger
from simulations.dwarf_colony.needs import Fulfillment, clamp
from simulations.dwarf_colony.personality import (
    Aspiration,
    Personality,
    choose_aspiration,
    generate_personality,
    initial_fulfillment,
)
from simulations.dwarf_colony.skills import Skills, initial_skills
from simulations.dwarf_colony.text import TextArtifact, TextKind

if TYPE_CHECKING:
    from simulations.dwarf_colony.tasks import Task

Position = tuple[int, int]


def manhattan(a: Position, b: Position) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


@dataclass(frozen=True)
class EntityRef:
    """Reference to another entity used as a task target."""

    kind: str
    entity_id: int


class AgentState(str, enum.Enum):
    IDLE = "idle"
    SEEKING_FOOD = "seeking_food"
    WORKING = "working"
    SOCIALIZING = "socializing"
    CRITICAL = "critical"
    RESTING = "resting"


_BOUNDED = {"mood": 100.0, "energy": 100.0}


@dataclass
class Dwarf:
    """Single dwarf: identity, needs, behavior, and memories.

    ``hunger``, ``mood`` and ``energy`` are clamped on every assignment.
    """

    dwarf_id: int
    name: str
    position: Position
    personality: Personality
    aspiration: Aspiration
    skills: Skills
    hunger_max: float = 95.0
    hunger: float = 0.0
    mood: float = 70.0
    energy: float = 100.0
    fulfillment: Fulfillment = field(default_factory=Fulfillment)
    state: AgentState = AgentState.IDLE
    current_task: "Task | None" = None
    task_queue: deque = field(default_factory=deque)
    memory: MemoryLedger = field(default_factory=MemoryLedger)
    relationships: RelationshipLedger = field(default_factory=RelationshipLedger)
    identity: TextArtifact | None = None
    thought: TextArtifact | None = None
    speech: TextArtifact | None = None
    conversation_partner: int | None = None
    last_interaction_tick: int = -1
    last_thought_tick: int = -(10**9)
    visited: set[Position] = field(default_factory=set)
    age: int = 0

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "hunger":
            value = clamp(value, 0.0, getattr(self, "hunger_max", 100.0))
        elif name in _BOUNDED:
            value = clamp(value, 0.0, _BOUNDED[name])
        object.__setattr__(self, name, value)

    def __post_init__(self) -> None:
        if self.identity is None:
            self.identity = TextArtifact(
                kind=TextKind.IDENTITY,
                fallback=fallback_identity(self.dwarf_id, self.name, self.personality),
            )

    @property
    def display_name(self) -> str:
        if self.identity is None:
            return self.name
        return self.identity.value("name") or self.name

    @property
    def bio(self) -> str:
        if self.identity is None:
            return ""
        return self.identity.value("bio")

    @property
    def current_thought(self) -> str:
        if self.thought is not None and self.thought.value("text"):
            return self.thought.value("text")
        recent = self.memory.recent_thoughts(1)
        return recent[0] if recent else ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.dwarf_id,
            "name": self.display_name,
            "x": int(self.position[0]),
            "y": int(self.position[1]),
            "state": self.state.value,
            "hunger": round(self.hunger, 2),
            "mood": round(self.mood, 2),
            "energy": round(self.energy, 2),
            "aspiration": self.aspiration.value,
            "task": self.current_task.kind.value if self.current_task is not None else None,
            "fulfillment": self.fulfillment.to_dict(),
        }


class IdSequence:
    """Monotonic entity ids and cycling dwarf names for one colony."""

    def __init__(self, names: tuple[str, ...] = DWARF_NAMES, start: int = 1) -> None:
        if not names:
            raise ValueError("IdSequence needs at least one name.")
        self._names = tuple(names)
        self._start = int(start)
        self.reset()

    def reset(self) -> None:
        self._next_id = self._start
        self._name_index = 0

    def next_id(self) -> int:
        value = self._next_id
        self._next_id += 1
        return value

    def next_name(self) -> str:
        name = self._names[self._name_index % len(self._names)]
        self._name_index += 1
        return name


def create_dwarf(ids: IdSequence, position: Position, rng: random.Random, hunger_max: float = 95.0) -> Dwarf:
    """Roll a fresh dwarf with personality, aspiration, skills, and starting needs."""
    personality = generate_personality(rng)
    aspiration = choose_aspiration(personality, rng)
    skills = initial_skills(personality, rng)
    return Dwarf(
        dwarf_id=ids.next_id(),
        name=ids.next_name(),
        position=position,
        personality=personality,
        aspiration=aspiration,
        skills=skills,
        hunger_max=hunger_max,
        hunger=0.0,
        mood=70.0 + rng.randint(0, 29),
        energy=100.0,
        fulfillment=initial_fulfillment(personality),
    )
