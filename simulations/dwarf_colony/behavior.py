"""Per-dwarf decision making.

Each tick a dwarf resolves to exactly one state, checked in priority order:

1. critical hunger overrides everything except survival work,
2. ordinary hunger wins over tasks of lower priority than food,
3. a pressing fulfillment need picks a matching task when the dwarf is free,
4. otherwise the current task continues or the best open job is taken,
5. and with nothing to do the dwarf idles.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING, Any

from simulations.dwarf_colony.agents import AgentState, Dwarf, EntityRef, Position, manhattan
from simulations.dwarf_colony.fallbacks import fallback_speech, fallback_thought
from simulations.dwarf_colony.needs import (
    NeedAxis,
    adjust_mood,
    is_critical,
    is_hungry,
    most_pressing_need,
    satisfy,
)
from simulations.dwarf_colony.personality import describe_mood, describe_personality
from simulations.dwarf_colony.structures import FoodSource, MeetingHall
from simulations.dwarf_colony.tasks import (
    NEED_TASKS,
    Task,
    TaskCategory,
    TaskKind,
    best_task,
    make_task,
    progress_task,
    target_position,
)
from simulations.dwarf_colony.text import TextArtifact, TextKind

if TYPE_CHECKING:
    from simulations.dwarf_colony.environment import ColonyEnvironment

CRITICAL_ENERGY_DRAIN = 0.5
CRITICAL_MOOD_DRAIN = -0.3
IDLE_MOOD_RECOVERY = 0.3
IDLE_TRANQUILITY = 0.05
IDLE_WANDER_CHANCE = 0.3
SOCIAL_PER_TICK = 0.15
GATHER_PER_TICK = 0.05
EXPLORE_PER_TICK = 0.05
REST_TRANQUILITY_PER_TICK = 0.05
PARTNER_AFFINITY_MIN = 2.0
PARTNER_AFFINITY_SPREAD = 1.0
DRAFT_ID_BASE = 10**9

_STATE_BY_CATEGORY = {
    TaskCategory.SOCIAL: AgentState.SOCIALIZING,
    TaskCategory.REST: AgentState.RESTING,
}

_STATE_THOUGHTS = {
    AgentState.CRITICAL: "I'm starving... I need food now!",
    AgentState.SEEKING_FOOD: "I should find something to eat soon.",
    AgentState.SOCIALIZING: "It would be nice to talk to someone.",
    AgentState.RESTING: "Maybe I should rest.",
}


def food_priority(dwarf: Dwarf, seek_threshold: float) -> float:
    """Priority of finding food; rises with hunger past the seek threshold."""
    return 60.0 + (dwarf.hunger - seek_threshold)


class DwarfBrain:
    """State machine driving every dwarf of one colony."""

    def __init__(self, world: "ColonyEnvironment") -> None:
        self.world = world

    @property
    def rng(self) -> random.Random:
        return self.world.behavior_rng

    def update(self, dwarf: Dwarf) -> AgentState:
        rules = self.world.rules
        previous = dwarf.state

        if is_critical(dwarf, rules):
            state = self._handle_critical(dwarf)
        elif is_hungry(dwarf, rules) and not self._busy_above(dwarf, food_priority(dwarf, rules.hunger_seek_threshold)):
            state = self._seek_food(dwarf)
        else:
            self._resume_queued(dwarf)
            if dwarf.current_task is None:
                need = most_pressing_need(dwarf)
                if need is not None:
                    chosen = self._choose_for_need(dwarf, need.axis)
                    if chosen is not None:
                        self._take(dwarf, chosen)
            state = self._work(dwarf)

        self._enter(dwarf, state, previous)
        return state

    # -- hunger ---------------------------------------------------------

    def _busy_above(self, dwarf: Dwarf, threshold: float) -> bool:
        task = dwarf.current_task
        return task is not None and not task.finished and task.priority > threshold

    def _handle_critical(self, dwarf: Dwarf) -> AgentState:
        task = dwarf.current_task
        if task is not None and task.category != TaskCategory.SURVIVAL:
            self._set_aside(dwarf)
        dwarf.energy = dwarf.energy - CRITICAL_ENERGY_DRAIN
        adjust_mood(dwarf, CRITICAL_MOOD_DRAIN)
        self._go_eat(dwarf)
        return AgentState.CRITICAL

    def _seek_food(self, dwarf: Dwarf) -> AgentState:
        task = dwarf.current_task
        if task is not None and task.category != TaskCategory.SURVIVAL:
            self._set_aside(dwarf)
        self._go_eat(dwarf)
        return AgentState.SEEKING_FOOD

    def _go_eat(self, dwarf: Dwarf) -> None:
        source = self._nearest_food(dwarf)
        if source is not None:
            if manhattan(dwarf.position, source.position) <= self.world.rules.food_reach:
                self.world.claim_food(dwarf, source)
            else:
                self._step_toward(dwarf, source.position)
            return
        hall = self._nearest_feast_hall(dwarf)
        if hall is not None:
            if manhattan(dwarf.position, hall.position) > 1:
                self._step_toward(dwarf, hall.position)
            return
        self._wander(dwarf)

    def _nearest_food(self, dwarf: Dwarf) -> FoodSource | None:
        sources = [source for source in self.world.food_sources if not source.depleted and source.stock > 0]
        if not sources:
            return None
        return min(sources, key=lambda source: (manhattan(dwarf.position, source.position), source.source_id))

    def _nearest_feast_hall(self, dwarf: Dwarf) -> MeetingHall | None:
        halls = [hall for hall in self.world.halls if hall.can_hold_feast(self.world.tick)]
        if not halls:
            return None
        return min(halls, key=lambda hall: (manhattan(dwarf.position, hall.position), hall.hall_id))

    # -- tasks ----------------------------------------------------------

    def _set_aside(self, dwarf: Dwarf) -> None:
        task = dwarf.current_task
        dwarf.current_task = None
        self._end_conversation(dwarf)
        if task is None or task.finished:
            return
        if task.personal:
            dwarf.task_queue.append(task)
        else:
            self.world.release_task(task)

    def _resume_queued(self, dwarf: Dwarf) -> None:
        if dwarf.current_task is not None and not dwarf.current_task.finished:
            return
        dwarf.current_task = None
        while dwarf.task_queue:
            task = dwarf.task_queue.popleft()
            if not task.finished:
                dwarf.current_task = task
                return

    def _take(self, dwarf: Dwarf, task: Task) -> None:
        if task.task_id >= DRAFT_ID_BASE:
            task.task_id = self.world.ids.next_id()
        task.assign(dwarf.dwarf_id)
        dwarf.current_task = task

    def _choose_for_need(self, dwarf: Dwarf, axis: NeedAxis) -> Task | None:
        kinds = NEED_TASKS[axis]
        candidates = list(self.world.board.pending(kinds))
        for offset, kind in enumerate(kinds):
            draft = self._personal_task(dwarf, kind, DRAFT_ID_BASE + offset)
            if draft is not None:
                candidates.append(draft)
        return best_task(dwarf, candidates, self.world.locate)

    def _personal_task(self, dwarf: Dwarf, kind: TaskKind, draft_id: int) -> Task | None:
        target: Position | EntityRef | None = None
        if kind == TaskKind.SOCIALIZE:
            partner = self._best_partner(dwarf)
            if partner is not None:
                target = EntityRef("dwarf", partner.dwarf_id)
        elif kind == TaskKind.GATHER:
            if self.world.halls:
                hall = min(self.world.halls, key=lambda h: (manhattan(dwarf.position, h.position), h.hall_id))
                target = EntityRef("hall", hall.hall_id)
        elif kind == TaskKind.EXPLORE:
            target = self.world.terrain.random_walkable(self.rng, self.world.rules.spawn_attempts)
        elif kind in {TaskKind.REST, TaskKind.CRAFT}:
            target = dwarf.position
        if target is None:
            return None
        return make_task(draft_id, kind, target, personal=True)

    def _best_partner(self, dwarf: Dwarf) -> Dwarf | None:
        best: tuple[float, int, Dwarf] | None = None
        for other in self.world.dwarves:
            if other.dwarf_id == dwarf.dwarf_id or other.state == AgentState.CRITICAL:
                continue
            score = -manhattan(dwarf.position, other.position) * 0.5
            score += dwarf.relationships.affinity(other.dwarf_id) * 0.3
            need = most_pressing_need(other)
            if need is not None and need.axis == NeedAxis.SOCIAL:
                score += 20.0
            if best is None or (-score, other.dwarf_id) < (-best[0], best[1]):
                best = (score, other.dwarf_id, other)
        return best[2] if best is not None else None

    def _work(self, dwarf: Dwarf) -> AgentState:
        task = dwarf.current_task
        if task is None:
            if dwarf.energy < self.world.rules.rest_energy_threshold:
                task = make_task(DRAFT_ID_BASE, TaskKind.REST, dwarf.position, personal=True)
            else:
                task = best_task(dwarf, self.world.board.pending(), self.world.locate)
            if task is None:
                return self._idle(dwarf)
            self._take(dwarf, task)
        return self._execute(dwarf, task)

    def _execute(self, dwarf: Dwarf, task: Task) -> AgentState:
        rules = self.world.rules
        state = _STATE_BY_CATEGORY.get(task.category, AgentState.WORKING)
        where = target_position(task, self.world.locate)
        if where is None:
            task.cancel()
            dwarf.current_task = None
            self._end_conversation(dwarf)
            return self._idle(dwarf)

        reach = rules.social_range if task.kind == TaskKind.SOCIALIZE else 1
        if task.kind in {TaskKind.EXPLORE, TaskKind.REST}:
            reach = 0
        if manhattan(dwarf.position, where) > reach:
            self._step_toward(dwarf, where)
            if state == AgentState.WORKING:
                dwarf.energy = dwarf.energy - rules.energy_drain_per_tick
            return state

        if task.kind == TaskKind.SOCIALIZE:
            if not self._converse(dwarf, task):
                return self._idle(dwarf)
            satisfy(dwarf, NeedAxis.SOCIAL, SOCIAL_PER_TICK)
        elif task.kind == TaskKind.GATHER:
            satisfy(dwarf, NeedAxis.SOCIAL, GATHER_PER_TICK)
        elif task.kind == TaskKind.REST:
            dwarf.energy = dwarf.energy + rules.rest_energy_gain
            satisfy(dwarf, NeedAxis.TRANQUILITY, REST_TRANQUILITY_PER_TICK)
        elif task.category == TaskCategory.EXPLORATION:
            satisfy(dwarf, NeedAxis.EXPLORATION, EXPLORE_PER_TICK)
        if state == AgentState.WORKING:
            dwarf.energy = dwarf.energy - rules.energy_drain_per_tick

        if progress_task(task, dwarf, rules.work_amount, self.world.learning_rng):
            self._complete(dwarf, task)
        return state

    def _complete(self, dwarf: Dwarf, task: Task) -> None:
        spec = task.spec
        if spec.fulfills is not None and spec.fulfill_multiplier > 0:
            satisfy(dwarf, spec.fulfills, spec.fulfill_multiplier)
        dwarf.current_task = None
        self._end_conversation(dwarf)
        self.world.on_task_completed(dwarf, task)

    # -- social ---------------------------------------------------------

    def _converse(self, dwarf: Dwarf, task: Task) -> bool:
        peer_ref = task.target
        peer = self.world.dwarf_by_id(peer_ref.entity_id) if isinstance(peer_ref, EntityRef) else None
        if (
            peer is None
            or peer.state == AgentState.CRITICAL
            or peer.conversation_partner not in (None, dwarf.dwarf_id)
        ):
            task.cancel()
            dwarf.current_task = None
            self._end_conversation(dwarf)
            return False
        if dwarf.conversation_partner == peer.dwarf_id:
            return True

        tick = self.world.tick
        line = fallback_speech(self.rng)
        delta = PARTNER_AFFINITY_MIN + self.rng.random() * PARTNER_AFFINITY_SPREAD
        dwarf.conversation_partner = peer.dwarf_id
        peer.conversation_partner = dwarf.dwarf_id
        dwarf.memory.remember_conversation(tick, peer.dwarf_id, f"Talked with {peer.display_name}: {line}")
        peer.memory.remember_conversation(tick, dwarf.dwarf_id, f"{dwarf.display_name} said: {line}")
        dwarf.relationships.record_interaction(peer.dwarf_id, delta, tick)
        peer.relationships.record_interaction(dwarf.dwarf_id, delta, tick)
        dwarf.last_interaction_tick = tick
        peer.last_interaction_tick = tick

        dwarf.speech = TextArtifact(kind=TextKind.SPEECH, fallback={"text": line})
        self.world.request_text(
            dwarf,
            dwarf.speech,
            {
                "name": dwarf.display_name,
                "personality": describe_personality(dwarf.personality),
                "listener": peer.display_name,
                "relationship": dwarf.relationships.describe(peer.dwarf_id),
            },
        )
        self.world.log(f"{dwarf.display_name} chats with {peer.display_name}.")
        return True

    def _end_conversation(self, dwarf: Dwarf) -> None:
        partner_id = dwarf.conversation_partner
        dwarf.conversation_partner = None
        if partner_id is None:
            return
        partner = self.world.dwarf_by_id(partner_id)
        if partner is not None and partner.conversation_partner == dwarf.dwarf_id:
            partner.conversation_partner = None

    # -- movement and idling -------------------------------------------

    def _step_toward(self, dwarf: Dwarf, target: Position) -> None:
        options = self.world.terrain.neighbours(dwarf.position)
        if not options:
            return
        here = manhattan(dwarf.position, target)
        closer = [option for option in options if manhattan(option, target) < here]
        if closer:
            dwarf.position = min(closer, key=lambda option: (manhattan(option, target), option[1], option[0]))
        else:
            dwarf.position = self.rng.choice(options)
        dwarf.visited.add(dwarf.position)

    def _wander(self, dwarf: Dwarf) -> None:
        options = self.world.terrain.neighbours(dwarf.position)
        if options:
            dwarf.position = self.rng.choice(options)
            dwarf.visited.add(dwarf.position)

    def _idle(self, dwarf: Dwarf) -> AgentState:
        adjust_mood(dwarf, IDLE_MOOD_RECOVERY)
        satisfy(dwarf, NeedAxis.TRANQUILITY, IDLE_TRANQUILITY)
        if self.rng.random() < IDLE_WANDER_CHANCE:
            self._wander(dwarf)
        return AgentState.IDLE

    # -- state bookkeeping ---------------------------------------------

    def _enter(self, dwarf: Dwarf, state: AgentState, previous: AgentState) -> None:
        dwarf.state = state
        if state == previous:
            return
        tick = self.world.tick
        if state == AgentState.CRITICAL:
            self.world.log(f"{dwarf.display_name} is starving!")
        if state == AgentState.WORKING and dwarf.current_task is not None:
            text = f"Time to get to {dwarf.current_task.describe()}."
        else:
            text = _STATE_THOUGHTS.get(state) or fallback_thought(dwarf, self.rng)
        dwarf.memory.remember_thought(tick, text)

        if tick - dwarf.last_thought_tick < self.world.rules.thought_cooldown:
            return
        dwarf.last_thought_tick = tick
        dwarf.thought = TextArtifact(kind=TextKind.THOUGHT, fallback={"text": text})
        self.world.request_text(dwarf, dwarf.thought, self._thought_context(dwarf))

    def _thought_context(self, dwarf: Dwarf) -> dict[str, Any]:
        task = dwarf.current_task
        return {
            "name": dwarf.display_name,
            "personality": describe_personality(dwarf.personality),
            "mood": describe_mood(dwarf.mood),
            "activity": task.describe() if task is not None else dwarf.state.value.replace("_", " "),
        }
