"""Tests for the task lifecycle, job board, and per-dwarf memory."""

from __future__ import annotations

import random

import pytest

from simulations.dwarf_colony.agents import Dwarf, EntityRef
from simulations.dwarf_colony.memory import MemoryLedger, RelationshipLedger
from simulations.dwarf_colony.personality import TRAIT_NAMES, Aspiration, Personality
from simulations.dwarf_colony.skills import Skills
from simulations.dwarf_colony.tasks import (
    JobBoard,
    TaskKind,
    TaskStateError,
    TaskStatus,
    best_task,
    make_task,
    progress_task,
    suitability,
    target_position,
)


def _dwarf(position: tuple[int, int] = (0, 0), aspiration: Aspiration = Aspiration.HERMIT) -> Dwarf:
    return Dwarf(
        dwarf_id=1,
        name="Urist",
        position=position,
        personality=Personality(**{name: 0.5 for name in TRAIT_NAMES}),
        aspiration=aspiration,
        skills=Skills(),
    )


def test_suitability_is_deterministic_and_bounded() -> None:
    dwarf = _dwarf(aspiration=Aspiration.MASTER_CRAFTSMAN)
    task = make_task(10, TaskKind.CRAFT, (4, 0))

    scores = {suitability(dwarf, task) for _ in range(5)}

    assert len(scores) == 1
    score = scores.pop()
    assert 0.0 <= score <= 100.0
    # base 50 + skill 9 + aspiration 20 + traits 12.5 - distance 2
    assert score == pytest.approx(89.5)


def test_suitability_penalizes_distance_up_to_a_cap() -> None:
    dwarf = _dwarf()
    near = make_task(1, TaskKind.HAUL, (1, 0))
    far = make_task(2, TaskKind.HAUL, (200, 0))

    assert suitability(dwarf, near) == pytest.approx(49.5)
    assert suitability(dwarf, far) == pytest.approx(30.0)


def test_best_task_breaks_ties_by_lowest_id() -> None:
    dwarf = _dwarf()
    tasks = [make_task(task_id, TaskKind.HAUL, (2, 2)) for task_id in (9, 4, 7)]

    assert best_task(dwarf, tasks).task_id == 4
    assert best_task(dwarf, []) is None


def test_progress_is_monotonic_and_completes_once() -> None:
    dwarf = _dwarf()
    task = make_task(1, TaskKind.DIG, (0, 0))
    rng = random.Random(3)

    seen = [task.progress]
    completions = 0
    for _ in range(40):
        if progress_task(task, dwarf, 10.0, rng):
            completions += 1
        seen.append(task.progress)

    assert seen == sorted(seen)
    assert completions == 1
    assert task.progress == 100.0
    assert task.status == TaskStatus.COMPLETED


def test_progress_rejects_negative_amount() -> None:
    with pytest.raises(ValueError, match="non-negative"):
        progress_task(make_task(1, TaskKind.DIG, (0, 0)), _dwarf(), -1.0, random.Random(0))


def test_finished_tasks_never_move_backwards() -> None:
    task = make_task(1, TaskKind.HAUL, (0, 0))
    task.activate()
    task.cancel()

    with pytest.raises(TaskStateError):
        task.activate()
    with pytest.raises(TaskStateError):
        task.assign(3)


def test_entity_targets_resolve_through_locator() -> None:
    task = make_task(1, TaskKind.SOCIALIZE, EntityRef("dwarf", 5))

    assert target_position(task, lambda ref: (3, 4) if ref.entity_id == 5 else None) == (3, 4)
    assert target_position(task, lambda ref: None) is None


def test_board_release_keeps_progress_and_compact_drops_finished() -> None:
    board = JobBoard()
    task = board.post(make_task(1, TaskKind.BUILD, (2, 2)))
    board.post(make_task(2, TaskKind.FARM, (3, 3)))
    task.assign(7)
    task.progress = 40.0

    successor = board.release(task, successor_id=3)

    assert task.status == TaskStatus.CANCELLED
    assert successor.assignee is None
    assert successor.progress == 40.0
    assert [item.task_id for item in board.pending()] == [2, 3]
    assert [item.task_id for item in board.pending([TaskKind.BUILD])] == [3]

    removed = board.compact()
    assert [item.task_id for item in removed] == [1]
    assert board.open_count() == 2


def test_memory_logs_evict_oldest_entries() -> None:
    memory = MemoryLedger()
    for tick in range(8):
        memory.remember_thought(tick, f"thought {tick}")
        memory.remember_conversation(tick, 2, f"chat {tick}")
    for tick in range(12):
        memory.remember_event(tick, f"event {tick}")

    assert len(memory.thoughts) == 5
    assert memory.thoughts[0].content == "thought 3"
    assert len(memory.conversations) == 3
    assert len(memory.events) == 10
    assert memory.recent_events(2) == ["event 10", "event 11"]


def test_relationships_default_neutral_and_clamp() -> None:
    ledger = RelationshipLedger()

    assert ledger.affinity(4) == 0.0
    assert 4 not in ledger
    for tick in range(60):
        ledger.record_interaction(4, 3.0, tick)

    assert ledger.affinity(4) == 100.0
    assert ledger.get(4).interactions == 60
    assert ledger.describe(4) == "They are good friends."
    ledger.record_interaction(9, -250.0, 1)
    assert ledger.affinity(9) == -100.0
    assert list(ledger) == [4, 9]
