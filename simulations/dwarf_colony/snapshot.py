"""Compact, plain-data views of dwarves and the colony for outside consumers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from simulations.dwarf_colony.agents import Dwarf
from simulations.dwarf_colony.needs import NeedAxis
from simulations.dwarf_colony.personality import dominant_traits

if TYPE_CHECKING:
    from simulations.dwarf_colony.environment import ColonyEnvironment

LOW_FULFILLMENT = 40.0


def snapshot_agent(dwarf: Dwarf) -> dict[str, Any]:
    """Return live values for one dwarf as fresh builtins (no shared containers)."""
    return {
        "id": dwarf.dwarf_id,
        "name": dwarf.display_name,
        "bio": dwarf.bio,
        "position": [int(dwarf.position[0]), int(dwarf.position[1])],
        "state": dwarf.state.value,
        "hunger": float(dwarf.hunger),
        "mood": float(dwarf.mood),
        "energy": float(dwarf.energy),
        "aspiration": dwarf.aspiration.value,
        "dominant_traits": dominant_traits(dwarf.personality),
        "fulfillment": {axis.value: dwarf.fulfillment.get(axis) for axis in NeedAxis},
        "task": dwarf.current_task.describe() if dwarf.current_task is not None else None,
        "current_thought": dwarf.current_thought,
        "recent_thoughts": dwarf.memory.recent_thoughts(3),
    }


def _needs_summary(dwarf: Dwarf) -> str:
    low = [axis.value for axis in NeedAxis if dwarf.fulfillment.get(axis) < LOW_FULFILLMENT]
    return ", ".join(f"low {name}" for name in low) if low else "content"


def snapshot_colony(world: "ColonyEnvironment") -> dict[str, Any]:
    dwarves = [snapshot_agent(dwarf) for dwarf in world.dwarves]
    return {
        "tick": int(world.tick),
        "population": len(dwarves),
        "food_sources": len(world.food_sources),
        "food_stock": sum(source.stock for source in world.food_sources),
        "halls": [hall.to_dict() for hall in world.halls],
        "dwarves": dwarves,
        "recent_log": [entry.message for entry in world.event_log.tail(5)],
    }


def describe_colony(world: "ColonyEnvironment", limit: int = 10) -> str:
    """Short text digest of the colony for an external assistant."""
    lines = [
        f"Tick {world.tick}: {len(world.dwarves)} dwarves, "
        f"{sum(source.stock for source in world.food_sources)} food in {len(world.food_sources)} sources."
    ]
    for dwarf in world.dwarves[:limit]:
        traits = "/".join(dominant_traits(dwarf.personality))
        line = (
            f"- {dwarf.display_name} [{dwarf.state.value}] hunger {dwarf.hunger:.0f}, mood {dwarf.mood:.0f}, "
            f"{traits}, {_needs_summary(dwarf)}"
        )
        if dwarf.current_thought:
            line += f' "{dwarf.current_thought}"'
        lines.append(line)
    if len(world.dwarves) > limit:
        lines.append(f"... and {len(world.dwarves) - limit} more.")
    recent = world.event_log.tail(3)
    if recent:
        lines.append("Recent: " + " ".join(entry.message for entry in recent))
    return "\n".join(lines)
