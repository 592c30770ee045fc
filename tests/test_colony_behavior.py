"""Scenario tests for per-dwarf decisions inside a live colony."""

from __future__ import annotations

import pytest

from core.deterministic_rng import DeterministicRNG
from simulations.dwarf_colony.agents import AgentState, Dwarf
from simulations.dwarf_colony.environment import ColonyEnvironment
from simulations.dwarf_colony.needs import Fulfillment
from simulations.dwarf_colony.personality import TRAIT_NAMES, Aspiration, Personality
from simulations.dwarf_colony.rules import ColonyRules
from simulations.dwarf_colony.skills import Skills
from simulations.dwarf_colony.tasks import TaskKind, TaskStatus, make_task


def _rules(**overrides: object) -> ColonyRules:
    defaults = {
        "map_width": 12,
        "map_height": 12,
        "initial_dwarves": 0,
        "initial_food_sources": 0,
        "initial_tasks": 0,
        "meeting_halls": 0,
        "food_respawn_chance": 0.0,
        "task_spawn_chance": 0.0,
        "hall_stock_regen": 0.0,
        "population_recovery": False,
    }
    defaults.update(overrides)
    return ColonyRules(**defaults)


def _colony(seed: int = 7, **overrides: object) -> ColonyEnvironment:
    env = ColonyEnvironment(rules=_rules(**overrides), rng=DeterministicRNG(seed))
    env.reset()
    return env


def _dwarf(env: ColonyEnvironment, position: tuple[int, int], **overrides: object) -> Dwarf:
    dwarf = Dwarf(
        dwarf_id=env.ids.next_id(),
        name=env.ids.next_name(),
        position=position,
        personality=Personality(**{name: 0.5 for name in TRAIT_NAMES}),
        aspiration=Aspiration.HERMIT,
        skills=Skills(),
        fulfillment=Fulfillment(100.0, 100.0, 100.0, 100.0),
    )
    for key, value in overrides.items():
        setattr(dwarf, key, value)
    return env.add_dwarf(dwarf)


def test_critical_hunger_abandons_work_and_eats() -> None:
    env = _colony()
    dwarf = _dwarf(env, (4, 5), hunger=90.0, state=AgentState.WORKING)
    food = env.spawn_food(5, position=(5, 5))
    job = env.post_job(TaskKind.DIG, (9, 9))
    job.assign(dwarf.dwarf_id)
    job.progress = 20.0
    dwarf.current_task = job

    env.step()

    assert dwarf.state == AgentState.CRITICAL
    assert dwarf.current_task is None
    assert job.status == TaskStatus.CANCELLED
    successors = env.board.pending([TaskKind.DIG])
    assert len(successors) == 1
    assert successors[0].progress == 20.0
    assert dwarf.hunger == pytest.approx(60.12)
    assert food.stock == 4
    assert any("is starving!" in entry.message for entry in env.event_log.entries())


def test_critical_hunger_beats_empty_fulfillment() -> None:
    env = _colony()
    empty = Fulfillment(0.0, 0.0, 0.0, 0.0)
    dwarf = _dwarf(env, (4, 5), hunger=90.0, fulfillment=empty)
    _dwarf(env, (4, 6), fulfillment=Fulfillment(0.0, 0.0, 0.0, 0.0))
    env.spawn_food(5, position=(5, 5))

    env.step()

    assert dwarf.state == AgentState.CRITICAL
    assert dwarf.conversation_partner is None
    assert dwarf.hunger == pytest.approx(60.12)


def test_hunger_preempts_low_priority_work() -> None:
    env = _colony()
    dwarf = _dwarf(env, (4, 5), hunger=60.0)
    env.spawn_food(5, position=(5, 5))
    job = env.post_job(TaskKind.SMOOTH, (9, 9))
    job.assign(dwarf.dwarf_id)
    dwarf.current_task = job

    env.step()

    assert dwarf.state == AgentState.SEEKING_FOOD
    assert job.status == TaskStatus.CANCELLED
    assert dwarf.hunger == pytest.approx(30.12)


def test_hunger_does_not_preempt_more_urgent_work() -> None:
    env = _colony()
    dwarf = _dwarf(env, (4, 5), hunger=56.0)
    env.spawn_food(5, position=(5, 5))
    job = env.board.post(make_task(env.ids.next_id(), TaskKind.FARM, (8, 5), priority=90.0))
    job.assign(dwarf.dwarf_id)
    dwarf.current_task = job

    env.step()

    assert dwarf.state == AgentState.WORKING
    assert dwarf.current_task is job
    assert dwarf.position == (5, 5)
    assert dwarf.hunger == pytest.approx(56.12)


def test_preempted_personal_task_is_queued_and_resumed() -> None:
    env = _colony()
    dwarf = _dwarf(env, (4, 5), hunger=60.0)
    env.spawn_food(5, position=(5, 5))
    craft = make_task(env.ids.next_id(), TaskKind.CRAFT, (4, 5), personal=True)
    craft.assign(dwarf.dwarf_id)
    dwarf.current_task = craft

    env.step()

    assert dwarf.state == AgentState.SEEKING_FOOD
    assert list(dwarf.task_queue) == [craft]
    assert craft.status == TaskStatus.PENDING

    env.step()

    assert dwarf.current_task is craft
    assert dwarf.state == AgentState.WORKING
    assert craft.progress > 0.0


def test_lonely_dwarves_start_a_conversation() -> None:
    env = _colony()
    lonely = Fulfillment(social=0.0, exploration=100.0, creativity=100.0, tranquility=100.0)
    first = _dwarf(env, (3, 5), fulfillment=lonely)
    second = _dwarf(env, (5, 5), fulfillment=Fulfillment(0.0, 100.0, 100.0, 100.0))

    env.step()

    assert first.state == AgentState.SOCIALIZING
    assert first.conversation_partner == second.dwarf_id
    assert second.conversation_partner == first.dwarf_id
    assert 2.0 <= first.relationships.affinity(second.dwarf_id) <= 3.0
    assert len(second.memory.conversations) == 1
    assert any("chats with" in entry.message for entry in env.event_log.entries())


def test_tired_dwarf_rests_in_place() -> None:
    env = _colony()
    dwarf = _dwarf(env, (5, 5), energy=10.0)

    env.step()

    assert dwarf.state == AgentState.RESTING
    assert dwarf.energy == pytest.approx(12.0)
    assert dwarf.position == (5, 5)


def test_content_dwarf_with_nothing_to_do_idles() -> None:
    env = _colony()
    dwarf = _dwarf(env, (5, 5), mood=50.0)

    env.step()

    assert dwarf.state == AgentState.IDLE
    assert dwarf.mood > 50.0
    assert dwarf.current_task is None


def test_idle_dwarf_takes_best_board_job() -> None:
    env = _colony()
    dwarf = _dwarf(env, (5, 5))
    far = env.post_job(TaskKind.HAUL, (10, 10))
    near = env.post_job(TaskKind.HAUL, (5, 6))

    env.step()

    assert dwarf.current_task is near
    assert near.assignee == dwarf.dwarf_id
    assert near.status == TaskStatus.ACTIVE
    assert far.assignee is None
