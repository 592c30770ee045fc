"""Colony world state and the per-tick orchestration of every dwarf."""

from __future__ import annotations

import logging
from typing import Any, Callable

import numpy as np

from core.deterministic_rng import DeterministicRNG
from simulations.dwarf_colony.agents import Dwarf, EntityRef, IdSequence, Position, create_dwarf, manhattan
from simulations.dwarf_colony.behavior import DwarfBrain
from simulations.dwarf_colony.events import EventLog
from simulations.dwarf_colony.needs import apply_hunger, decay, is_starving
from simulations.dwarf_colony.personality import describe_personality
from simulations.dwarf_colony.rules import ColonyRules
from simulations.dwarf_colony.structures import FoodSource, MeetingHall, attendees, hold_feast
from simulations.dwarf_colony.tasks import BOARD_KINDS, JobBoard, Task, TaskKind, make_task
from simulations.dwarf_colony.terrain import GridTerrain, Terrain
from simulations.dwarf_colony.text import TextArtifact, TextChannel, TextKind, TextStatus
from simulations.dwarf_colony.weather import EnvironmentalEvent, apply_event

LOGGER = logging.getLogger(__name__)

HUNGER_STRESS_THRESHOLD = 60.0
HUNGER_STRESS_SOCIAL = 0.4
HUNGER_STRESS_TRANQUILITY = 0.3
COHORT_SPREAD = 5
HALL_SPREAD = 3

_FOOD_PRODUCERS = {TaskKind.FARM, TaskKind.HUNT, TaskKind.FISH, TaskKind.GATHER_WILD}


def build_terrain(rules: ColonyRules) -> GridTerrain:
    if rules.terrain_rows:
        return GridTerrain(rules.terrain_rows)
    return GridTerrain.open_room(rules.map_width, rules.map_height)


class ColonyEnvironment:
    """Owns every entity of one colony and advances it one tick at a time.

    A tick runs these phases in order: generated-text polling, need decay and
    environmental events, one state-machine update per dwarf in id order, food
    claim resolution, meeting hall upkeep and feasts, starvation, population
    recovery, and end-of-tick compaction and spawning.
    """

    def __init__(
        self,
        rules: ColonyRules,
        rng: DeterministicRNG,
        terrain: Terrain | None = None,
        text_channel: TextChannel | None = None,
    ) -> None:
        self.rules = rules
        self.rng = rng
        self.terrain = terrain if terrain is not None else build_terrain(rules)
        self.text_channel = text_channel
        self.population_rng = rng.stream("population")
        self.behavior_rng = rng.stream("behavior")
        self.learning_rng = rng.stream("learning")
        self.world_rng = rng.stream("world")

        self.ids = IdSequence()
        self.event_log = EventLog(rules.log_capacity)
        self.board = JobBoard()
        self.brain = DwarfBrain(self)

        self.tick = 0
        self.dwarves: list[Dwarf] = []
        self.food_sources: list[FoodSource] = []
        self.halls: list[MeetingHall] = []
        self.totals: dict[str, int] = {}
        self._by_id: dict[int, Dwarf] = {}
        self._pending_events: list[EnvironmentalEvent] = []
        self._claims: list[tuple[int, int]] = []
        self._skipped: set[int] = set()
        self._last_metrics: dict[str, float] = {}

    @property
    def center(self) -> Position:
        return (self.terrain.width // 2, self.terrain.height // 2)

    # -- lifecycle ------------------------------------------------------

    def reset(self) -> None:
        """Rebuild the colony from the rules, restarting ids and the log."""
        self.tick = 0
        self.ids.reset()
        self.event_log.clear()
        self.board.clear()
        self.dwarves = []
        self.food_sources = []
        self.halls = []
        self._by_id = {}
        self._pending_events = []
        self._claims = []
        self._skipped = set()
        self.totals = {
            "deaths": 0,
            "feasts": 0,
            "meals": 0,
            "faults": 0,
            "recoveries": 0,
            "tasks_completed": 0,
        }

        for _ in range(self.rules.meeting_halls):
            self.add_hall()
        for _ in range(self.rules.initial_dwarves):
            self.spawn_dwarf(self.center)
        for _ in range(self.rules.initial_food_sources):
            self.spawn_food(self.world_rng.randint(self.rules.food_stock_min, self.rules.food_stock_max))
        for _ in range(self.rules.initial_tasks):
            self.post_random_job()

        self.log(f"An expedition of {len(self.dwarves)} dwarves arrives.")
        self._last_metrics = self._compute_metrics()

    def close(self) -> None:
        if self.text_channel is not None:
            self.text_channel.close()

    # -- entity management ---------------------------------------------

    def add_dwarf(self, dwarf: Dwarf) -> Dwarf:
        self.dwarves.append(dwarf)
        self.dwarves.sort(key=lambda item: item.dwarf_id)
        self._by_id[dwarf.dwarf_id] = dwarf
        return dwarf

    def spawn_dwarf(self, near: Position) -> Dwarf | None:
        position = self.terrain.walkable_near(near, self.population_rng, COHORT_SPREAD, self.rules.spawn_attempts)
        if position is None:
            LOGGER.debug("No walkable tile near %s after %s attempts; dwarf not spawned.", near, self.rules.spawn_attempts)
            return None
        dwarf = self.add_dwarf(create_dwarf(self.ids, position, self.population_rng, self.rules.hunger_max))
        if dwarf.identity is not None:
            self.request_text(
                dwarf,
                dwarf.identity,
                {"name": dwarf.name, "personality": describe_personality(dwarf.personality)},
            )
        return dwarf

    def spawn_food(self, stock: int, position: Position | None = None) -> FoodSource | None:
        if position is None:
            position = self.terrain.random_walkable(self.world_rng, self.rules.spawn_attempts)
        if position is None:
            LOGGER.debug("No walkable tile for a food source; skipped.")
            return None
        source = FoodSource(source_id=self.ids.next_id(), position=position, stock=int(stock))
        self.food_sources.append(source)
        return source

    def add_hall(self, position: Position | None = None) -> MeetingHall | None:
        if position is None:
            position = self.terrain.walkable_near(self.center, self.world_rng, HALL_SPREAD, self.rules.spawn_attempts)
        if position is None:
            LOGGER.debug("No walkable tile for a meeting hall; skipped.")
            return None
        hall = MeetingHall(
            hall_id=self.ids.next_id(),
            position=position,
            stock=self.rules.hall_initial_stock,
            capacity=self.rules.hall_capacity,
            feast_threshold=self.rules.feast_threshold,
            feast_cooldown=self.rules.feast_cooldown,
        )
        self.halls.append(hall)
        return hall

    def post_job(self, kind: TaskKind, target: Position) -> Task:
        return self.board.post(make_task(self.ids.next_id(), kind, target))

    def post_random_job(self) -> Task | None:
        if self.board.open_count() >= self.rules.max_open_tasks:
            return None
        kind = self.world_rng.choice(BOARD_KINDS)
        position = self.terrain.random_walkable(self.world_rng, self.rules.spawn_attempts)
        if position is None:
            return None
        return self.post_job(kind, position)

    def dwarf_by_id(self, dwarf_id: int) -> Dwarf | None:
        return self._by_id.get(dwarf_id)

    def hall_by_id(self, hall_id: int) -> MeetingHall | None:
        for hall in self.halls:
            if hall.hall_id == hall_id:
                return hall
        return None

    def locate(self, ref: EntityRef) -> Position | None:
        if ref.kind == "dwarf":
            dwarf = self._by_id.get(ref.entity_id)
            return dwarf.position if dwarf is not None else None
        if ref.kind == "hall":
            hall = self.hall_by_id(ref.entity_id)
            return hall.position if hall is not None else None
        return None

    # -- hooks used by DwarfBrain --------------------------------------

    def log(self, message: str) -> None:
        self.event_log.append(self.tick, message)

    def claim_food(self, dwarf: Dwarf, source: FoodSource) -> None:
        self._claims.append((dwarf.dwarf_id, source.source_id))

    def release_task(self, task: Task) -> Task:
        return self.board.release(task, self.ids.next_id())

    def request_text(self, dwarf: Dwarf, artifact: TextArtifact, context: dict[str, Any]) -> None:
        if self.text_channel is not None:
            self.text_channel.request(dwarf.dwarf_id, artifact, context)

    def push_event(self, event: EnvironmentalEvent) -> None:
        """Queue a weather exposure to apply during the next tick's need phase."""
        self._pending_events.append(event)

    def on_task_completed(self, dwarf: Dwarf, task: Task) -> None:
        self.totals["tasks_completed"] += 1
        if task.personal:
            return
        if task.kind in _FOOD_PRODUCERS and isinstance(task.target, tuple):
            self._stock_food_at(task.target, self.rules.production_yield)
        elif task.kind == TaskKind.BREW and self.halls:
            hall = min(self.halls, key=lambda h: (manhattan(dwarf.position, h.position), h.hall_id))
            hall.add_stock(self.rules.production_yield)
        self.log(f"{dwarf.display_name} finished {task.describe()}.")

    def _stock_food_at(self, position: Position, amount: int) -> None:
        for source in self.food_sources:
            if source.position == position and not source.depleted:
                source.restock(amount)
                return
        self.spawn_food(amount, position=position)

    # -- tick -----------------------------------------------------------

    def step(self) -> None:
        """Advance the colony by exactly one tick."""
        self.tick += 1
        self._claims = []
        self._skipped = set()

        self._poll_text()

        events = self._pending_events
        self._pending_events = []
        for dwarf in list(self.dwarves):
            self._guarded(dwarf, lambda d: self._advance_needs(d, events))

        for dwarf in list(self.dwarves):
            if dwarf.dwarf_id in self._skipped:
                continue
            self._guarded(dwarf, self.brain.update)

        self._resolve_food_claims()
        self._update_halls()
        self._prune_starved()
        self._recover_population()

        self.board.compact()
        self.food_sources = [source for source in self.food_sources if not source.depleted]
        if self.world_rng.random() < self.rules.food_respawn_chance:
            self.spawn_food(self.world_rng.randint(self.rules.food_stock_min, self.rules.food_stock_max))
        if self.world_rng.random() < self.rules.task_spawn_chance:
            self.post_random_job()
        for dwarf in self.dwarves:
            dwarf.age += 1
        self._last_metrics = self._compute_metrics()

    def _guarded(self, dwarf: Dwarf, update: Callable[[Dwarf], Any]) -> None:
        try:
            update(dwarf)
        except Exception:
            LOGGER.warning(
                "Update for dwarf %s failed at tick %s; skipping it for this tick.",
                dwarf.dwarf_id,
                self.tick,
                exc_info=True,
            )
            self._skipped.add(dwarf.dwarf_id)
            self.totals["faults"] += 1

    def _poll_text(self) -> None:
        if self.text_channel is None:
            return
        for result in self.text_channel.poll():
            if result.artifact.kind != TextKind.IDENTITY or result.artifact.status != TextStatus.RESOLVED:
                continue
            dwarf = self._by_id.get(result.owner_id)
            if dwarf is not None and dwarf.display_name != dwarf.name:
                self.log(f"{dwarf.name} is now known as {dwarf.display_name}.")

    def _advance_needs(self, dwarf: Dwarf, events: list[EnvironmentalEvent]) -> None:
        before = dwarf.hunger
        apply_hunger(dwarf, self.rules)
        decay(dwarf)
        if dwarf.hunger > HUNGER_STRESS_THRESHOLD:
            dwarf.fulfillment.social -= HUNGER_STRESS_SOCIAL
            dwarf.fulfillment.tranquility -= HUNGER_STRESS_TRANQUILITY
        for event in events:
            if event.dwarf_id is None or event.dwarf_id == dwarf.dwarf_id:
                apply_event(dwarf, event)
        if before < self.rules.hunger_seek_threshold <= dwarf.hunger:
            self.log(f"{dwarf.display_name} is getting hungry.")

    def _resolve_food_claims(self) -> None:
        sources = {source.source_id: source for source in self.food_sources}
        for dwarf_id, source_id in sorted(self._claims):
            dwarf = self._by_id.get(dwarf_id)
            source = sources.get(source_id)
            if dwarf is None or dwarf_id in self._skipped or source is None:
                continue
            if not source.take_one():
                continue
            dwarf.hunger = dwarf.hunger - self.rules.eat_hunger_restore
            self.totals["meals"] += 1
            self.log(f"{dwarf.display_name} eats.")
            if source.depleted:
                self.log(f"The food at {source.position} is gone.")
        self._claims = []

    def _update_halls(self) -> None:
        present = [dwarf for dwarf in self.dwarves if dwarf.dwarf_id not in self._skipped]
        for hall in self.halls:
            guests = attendees(hall, present, self.rules.feast_radius)
            if guests and hold_feast(hall, guests, self.tick, self.rules.feast_hunger_restore):
                self.totals["feasts"] += 1
                self.log(f"A grand feast is held at the meeting hall! {len(guests)} dwarves attend.")
            hall.regenerate(self.rules.hall_stock_regen)

    def _prune_starved(self) -> None:
        if not self.rules.lethal_starvation:
            return
        for dwarf in [item for item in self.dwarves if is_starving(item, self.rules)]:
            self.remove_dwarf(dwarf)
            self.totals["deaths"] += 1
            self.log(f"{dwarf.display_name} has starved to death.")

    def remove_dwarf(self, dwarf: Dwarf) -> None:
        task = dwarf.current_task
        if task is not None and not task.finished and not task.personal:
            self.release_task(task)
        dwarf.current_task = None
        for other in self.dwarves:
            if other.conversation_partner == dwarf.dwarf_id:
                other.conversation_partner = None
        self.dwarves = [item for item in self.dwarves if item.dwarf_id != dwarf.dwarf_id]
        self._by_id.pop(dwarf.dwarf_id, None)

    def _recover_population(self) -> None:
        if self.dwarves or not self.rules.population_recovery or self.rules.recovery_cohort_size <= 0:
            return
        self.log("All dwarves have perished... A new group arrives!")
        self.totals["recoveries"] += 1
        for _ in range(self.rules.recovery_cohort_size):
            self.spawn_dwarf(self.center)
        for _ in range(self.rules.recovery_food_sources):
            self.spawn_food(self.rules.recovery_food_stock)

    # -- reporting ------------------------------------------------------

    def _compute_metrics(self) -> dict[str, float]:
        population = len(self.dwarves)
        if population:
            hunger = np.array([dwarf.hunger for dwarf in self.dwarves], dtype=float)
            mood = np.array([dwarf.mood for dwarf in self.dwarves], dtype=float)
            energy = np.array([dwarf.energy for dwarf in self.dwarves], dtype=float)
            fulfillment = np.array(
                [list(dwarf.fulfillment.to_dict().values()) for dwarf in self.dwarves],
                dtype=float,
            )
            mean_hunger = float(hunger.mean())
            max_hunger = float(hunger.max())
            mean_mood = float(mood.mean())
            mean_energy = float(energy.mean())
            mean_fulfillment = float(fulfillment.mean())
        else:
            mean_hunger = max_hunger = mean_mood = mean_energy = mean_fulfillment = 0.0

        states: dict[str, float] = {}
        for dwarf in self.dwarves:
            key = f"state_{dwarf.state.value}"
            states[key] = states.get(key, 0.0) + 1.0

        metrics = {
            "tick": float(self.tick),
            "population": float(population),
            "mean_hunger": mean_hunger,
            "max_hunger": max_hunger,
            "mean_mood": mean_mood,
            "mean_energy": mean_energy,
            "mean_fulfillment": mean_fulfillment,
            "food_sources": float(len(self.food_sources)),
            "food_stock": float(sum(source.stock for source in self.food_sources)),
            "hall_stock": float(sum(hall.stock for hall in self.halls)),
            "open_tasks": float(self.board.open_count()),
        }
        metrics.update({f"total_{key}": float(value) for key, value in self.totals.items()})
        metrics.update(states)
        return metrics

    def get_metrics(self) -> dict[str, float]:
        if not self._last_metrics:
            self._last_metrics = self._compute_metrics()
        return dict(self._last_metrics)

    def get_render_state(self) -> dict[str, Any]:
        """Return a JSON-serializable view of the whole colony."""
        return {
            "simulation": "dwarf_colony",
            "tick": int(self.tick),
            "width": int(self.terrain.width),
            "height": int(self.terrain.height),
            "dwarves": [dwarf.to_dict() for dwarf in self.dwarves],
            "food": [source.to_dict() for source in self.food_sources],
            "halls": [hall.to_dict() for hall in self.halls],
            "tasks": [task.to_dict() for task in self.board],
            "log": [entry.to_dict() for entry in self.event_log.tail(20)],
        }
