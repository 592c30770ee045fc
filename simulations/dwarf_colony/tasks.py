"""Task catalog, task lifecycle, suitability scoring, and the colony job board."""

from __future__ import annotations

import enum
import random
from dataclasses import dataclass
from typing import Any, Callable, Iterable

from simulations.dwarf_colony.agents import EntityRef, Position, manhattan
from simulations.dwarf_colony.needs import NeedAxis, clamp
from simulations.dwarf_colony.personality import Aspiration
from simulations.dwarf_colony.skills import Skill


class TaskStateError(RuntimeError):
    """Raised on a status change that would move a task backwards."""


class TaskCategory(str, enum.Enum):
    CONSTRUCTION = "construction"
    CRAFTING = "crafting"
    SOCIAL = "social"
    EXPLORATION = "exploration"
    FOOD_PRODUCTION = "food_production"
    SURVIVAL = "survival"
    REST = "rest"


class TaskKind(str, enum.Enum):
    DIG = "dig"
    BUILD = "build"
    SMOOTH = "smooth"
    CRAFT = "craft"
    HAUL = "haul"
    SOCIALIZE = "socialize"
    GATHER = "gather"
    EXPLORE = "explore"
    SCOUT = "scout"
    FARM = "farm"
    HUNT = "hunt"
    FISH = "fish"
    BREW = "brew"
    GATHER_WILD = "gather_wild"
    FEAST = "feast"
    FORAGE = "forage"
    EAT = "eat"
    REST = "rest"
    IDLE = "idle"


class TaskStatus(str, enum.Enum):
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Priority(enum.IntEnum):
    CRITICAL = 100
    HIGH = 75
    NORMAL = 50
    LOW = 25
    IDLE = 0


@dataclass(frozen=True)
class TaskSpec:
    category: TaskCategory
    required_skill: Skill | None
    base_priority: int
    description: str
    fulfills: NeedAxis | None = None
    fulfill_multiplier: float = 0.0


CATALOG: dict[TaskKind, TaskSpec] = {
    TaskKind.DIG: TaskSpec(TaskCategory.CONSTRUCTION, Skill.MINING, Priority.NORMAL, "carving stone", NeedAxis.CREATIVITY, 0.3),
    TaskKind.BUILD: TaskSpec(TaskCategory.CONSTRUCTION, Skill.MASONRY, Priority.NORMAL, "building", NeedAxis.CREATIVITY, 0.8),
    TaskKind.SMOOTH: TaskSpec(TaskCategory.CONSTRUCTION, Skill.MASONRY, Priority.LOW, "smoothing walls", NeedAxis.CREATIVITY, 0.3),
    TaskKind.CRAFT: TaskSpec(TaskCategory.CRAFTING, Skill.CRAFTING, Priority.NORMAL, "crafting", NeedAxis.CREATIVITY, 0.8),
    TaskKind.HAUL: TaskSpec(TaskCategory.CRAFTING, None, Priority.LOW, "hauling goods"),
    TaskKind.SOCIALIZE: TaskSpec(TaskCategory.SOCIAL, Skill.SOCIAL, Priority.LOW, "chatting", NeedAxis.SOCIAL, 0.5),
    TaskKind.GATHER: TaskSpec(TaskCategory.SOCIAL, Skill.SOCIAL, Priority.LOW, "gathering with others", NeedAxis.SOCIAL, 0.4),
    TaskKind.EXPLORE: TaskSpec(TaskCategory.EXPLORATION, Skill.EXPLORATION, Priority.LOW, "exploring", NeedAxis.EXPLORATION, 0.5),
    TaskKind.SCOUT: TaskSpec(TaskCategory.EXPLORATION, Skill.EXPLORATION, Priority.NORMAL, "scouting", NeedAxis.EXPLORATION, 0.3),
    TaskKind.FARM: TaskSpec(TaskCategory.FOOD_PRODUCTION, Skill.COOKING, Priority.HIGH, "tending crops"),
    TaskKind.HUNT: TaskSpec(TaskCategory.FOOD_PRODUCTION, Skill.EXPLORATION, Priority.HIGH, "hunting"),
    TaskKind.FISH: TaskSpec(TaskCategory.FOOD_PRODUCTION, Skill.EXPLORATION, Priority.HIGH, "fishing", NeedAxis.TRANQUILITY, 0.2),
    TaskKind.BREW: TaskSpec(TaskCategory.FOOD_PRODUCTION, Skill.COOKING, Priority.NORMAL, "brewing"),
    TaskKind.GATHER_WILD: TaskSpec(TaskCategory.FOOD_PRODUCTION, Skill.EXPLORATION, Priority.HIGH, "gathering wild food"),
    TaskKind.FEAST: TaskSpec(TaskCategory.FOOD_PRODUCTION, None, Priority.HIGH, "feasting", NeedAxis.SOCIAL, 1.5),
    TaskKind.FORAGE: TaskSpec(TaskCategory.SURVIVAL, Skill.EXPLORATION, Priority.HIGH, "foraging"),
    TaskKind.EAT: TaskSpec(TaskCategory.SURVIVAL, None, Priority.CRITICAL, "eating"),
    TaskKind.REST: TaskSpec(TaskCategory.REST, None, Priority.LOW, "resting", NeedAxis.TRANQUILITY, 0.3),
    TaskKind.IDLE: TaskSpec(TaskCategory.REST, None, Priority.IDLE, "wandering"),
}

# kinds the orchestrator posts to the job board
BOARD_KINDS: tuple[TaskKind, ...] = (
    TaskKind.DIG,
    TaskKind.BUILD,
    TaskKind.SMOOTH,
    TaskKind.CRAFT,
    TaskKind.HAUL,
    TaskKind.SCOUT,
    TaskKind.FARM,
    TaskKind.HUNT,
    TaskKind.FISH,
    TaskKind.BREW,
    TaskKind.GATHER_WILD,
)

NEED_TASKS: dict[NeedAxis, tuple[TaskKind, ...]] = {
    NeedAxis.SOCIAL: (TaskKind.SOCIALIZE, TaskKind.GATHER),
    NeedAxis.EXPLORATION: (TaskKind.EXPLORE, TaskKind.SCOUT),
    NeedAxis.CREATIVITY: (TaskKind.CRAFT, TaskKind.BUILD, TaskKind.SMOOTH),
    NeedAxis.TRANQUILITY: (TaskKind.REST,),
}

ASPIRATION_BONUS: dict[Aspiration, dict[TaskKind, float]] = {
    Aspiration.MASTER_CRAFTSMAN: {TaskKind.CRAFT: 20.0, TaskKind.SMOOTH: 10.0},
    Aspiration.ARCHITECT: {TaskKind.BUILD: 20.0, TaskKind.DIG: 15.0},
    Aspiration.EXPLORER: {TaskKind.EXPLORE: 25.0, TaskKind.SCOUT: 15.0},
    Aspiration.SOCIAL_BUTTERFLY: {TaskKind.SOCIALIZE: 25.0, TaskKind.GATHER: 15.0},
    Aspiration.HERMIT: {TaskKind.DIG: 15.0, TaskKind.CRAFT: 10.0},
    Aspiration.LEADER: {TaskKind.GATHER: 20.0, TaskKind.BUILD: 10.0},
}

_TRAIT_BONUS: dict[TaskKind, tuple[tuple[str, float], ...]] = {
    TaskKind.DIG: (("stubbornness", 10.0), ("bravery", 5.0)),
    TaskKind.BUILD: (("creativity", 10.0), ("patience", 5.0)),
    TaskKind.SMOOTH: (("patience", 10.0),),
    TaskKind.CRAFT: (("creativity", 15.0), ("patience", 10.0)),
    TaskKind.SOCIALIZE: (("friendliness", 15.0), ("humor", 10.0)),
    TaskKind.GATHER: (("friendliness", 10.0), ("loyalty", 5.0)),
    TaskKind.EXPLORE: (("curiosity", 15.0), ("bravery", 10.0)),
    TaskKind.SCOUT: (("curiosity", 10.0), ("bravery", 10.0)),
    TaskKind.REST: (("melancholy", 10.0), ("patience", 5.0)),
}

BASE_SUITABILITY = 50.0
SKILL_WEIGHT = 30.0
DISTANCE_WEIGHT = 0.5
MAX_DISTANCE_PENALTY = 20.0
SKILL_GAIN_CHANCE = 0.1
SKILL_GAIN = 0.01

_TRANSITIONS: dict[TaskStatus, set[TaskStatus]] = {
    TaskStatus.PENDING: {TaskStatus.ACTIVE, TaskStatus.COMPLETED, TaskStatus.CANCELLED},
    TaskStatus.ACTIVE: {TaskStatus.COMPLETED, TaskStatus.CANCELLED},
    TaskStatus.COMPLETED: set(),
    TaskStatus.CANCELLED: set(),
}

Target = Position | EntityRef
Locator = Callable[[EntityRef], "Position | None"]


@dataclass
class Task:
    """A unit of work owned by at most one dwarf."""

    task_id: int
    kind: TaskKind
    target: Target
    priority: float
    required_skill: Skill | None = None
    assignee: int | None = None
    progress: float = 0.0
    status: TaskStatus = TaskStatus.PENDING
    personal: bool = False

    @property
    def spec(self) -> TaskSpec:
        return CATALOG[self.kind]

    @property
    def category(self) -> TaskCategory:
        return CATALOG[self.kind].category

    @property
    def finished(self) -> bool:
        return self.status in {TaskStatus.COMPLETED, TaskStatus.CANCELLED}

    def _move_to(self, status: TaskStatus) -> None:
        if status == self.status:
            return
        if status not in _TRANSITIONS[self.status]:
            raise TaskStateError(
                f"Task {self.task_id} cannot move from {self.status.value} to {status.value}."
            )
        self.status = status

    def assign(self, dwarf_id: int) -> None:
        if self.finished:
            raise TaskStateError(f"Task {self.task_id} is {self.status.value} and cannot be assigned.")
        self.assignee = dwarf_id

    def activate(self) -> None:
        self._move_to(TaskStatus.ACTIVE)

    def cancel(self) -> None:
        self._move_to(TaskStatus.CANCELLED)

    def describe(self) -> str:
        return CATALOG[self.kind].description

    def to_dict(self) -> dict[str, Any]:
        target: Any = list(self.target) if isinstance(self.target, tuple) else {
            "kind": self.target.kind,
            "id": self.target.entity_id,
        }
        return {
            "id": self.task_id,
            "kind": self.kind.value,
            "target": target,
            "priority": float(self.priority),
            "assignee": self.assignee,
            "progress": round(self.progress, 2),
            "status": self.status.value,
        }


def make_task(task_id: int, kind: TaskKind, target: Target, priority: float | None = None, personal: bool = False) -> Task:
    spec = CATALOG[kind]
    return Task(
        task_id=task_id,
        kind=kind,
        target=target,
        priority=float(spec.base_priority if priority is None else priority),
        required_skill=spec.required_skill,
        personal=personal,
    )


def target_position(task: Task, locate: Locator | None = None) -> Position | None:
    if isinstance(task.target, EntityRef):
        return locate(task.target) if locate is not None else None
    return task.target


def suitability(agent: Any, task: Task, locate: Locator | None = None) -> float:
    """Score how well ``agent`` fits ``task`` on a 0-100 scale; no randomness."""
    score = BASE_SUITABILITY
    if task.required_skill is not None:
        score += agent.skills.level(task.required_skill) * SKILL_WEIGHT
    score += ASPIRATION_BONUS.get(agent.aspiration, {}).get(task.kind, 0.0)
    for trait, weight in _TRAIT_BONUS.get(task.kind, ()):
        score += getattr(agent.personality, trait) * weight
    where = target_position(task, locate)
    if where is not None:
        score -= min(MAX_DISTANCE_PENALTY, manhattan(agent.position, where) * DISTANCE_WEIGHT)
    return clamp(score, 0.0, 100.0)


def progress_task(task: Task, agent: Any, amount: float, rng: random.Random) -> bool:
    """Advance ``task`` by ``amount`` scaled by the agent's skill.

    Returns True when this call completed the task. Finished tasks are left
    untouched.
    """
    if amount < 0:
        raise ValueError(f"Task progress amount must be non-negative, got {amount}.")
    if task.finished:
        return False
    multiplier = 1.0
    if task.required_skill is not None:
        multiplier = 0.5 + agent.skills.level(task.required_skill) * 1.5
    task.activate()
    task.progress = min(100.0, task.progress + amount * multiplier)
    if task.required_skill is not None and rng.random() < SKILL_GAIN_CHANCE:
        agent.skills.improve(task.required_skill, SKILL_GAIN)
    if task.progress >= 100.0:
        task._move_to(TaskStatus.COMPLETED)
        return True
    return False


def best_task(agent: Any, candidates: Iterable[Task], locate: Locator | None = None) -> Task | None:
    """Highest suitability wins; ties go to the lowest task id."""
    best: tuple[float, int, Task] | None = None
    for task in candidates:
        score = suitability(agent, task, locate)
        key = (-score, task.task_id)
        if best is None or key < best[:2]:
            best = (key[0], key[1], task)
    return best[2] if best is not None else None


class JobBoard:
    """Shared colony tasks, compacted once per tick."""

    def __init__(self) -> None:
        self._tasks: dict[int, Task] = {}

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self):
        return iter([self._tasks[key] for key in sorted(self._tasks)])

    def post(self, task: Task) -> Task:
        self._tasks[task.task_id] = task
        return task

    def get(self, task_id: int) -> Task | None:
        return self._tasks.get(task_id)

    def open_count(self) -> int:
        return sum(1 for task in self._tasks.values() if not task.finished)

    def pending(self, kinds: Iterable[TaskKind] | None = None) -> list[Task]:
        """Unassigned, unfinished tasks in id order."""
        wanted = set(kinds) if kinds is not None else None
        return [
            task
            for task in self
            if task.assignee is None and not task.finished and (wanted is None or task.kind in wanted)
        ]

    def release(self, task: Task, successor_id: int) -> Task:
        """Cancel ``task`` and post an unassigned copy that keeps its progress."""
        task.cancel()
        successor = Task(
            task_id=successor_id,
            kind=task.kind,
            target=task.target,
            priority=task.priority,
            required_skill=task.required_skill,
            progress=task.progress,
        )
        return self.post(successor)

    def compact(self) -> list[Task]:
        removed = [task for task in self if task.finished]
        for task in removed:
            del self._tasks[task.task_id]
        return removed

    def clear(self) -> None:
        self._tasks.clear()
