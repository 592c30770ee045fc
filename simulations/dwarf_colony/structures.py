"""Food sources and meeting halls, including communal feasts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from simulations.dwarf_colony.agents import Position, manhattan
from simulations.dwarf_colony.needs import NeedAxis, adjust_mood, satisfy

FEAST_MOOD_BONUS = 15.0
FEAST_SOCIAL_MULTIPLIER = 1.5
FEAST_MEMORY = "Attended a grand feast"


@dataclass
class FoodSource:
    source_id: int
    position: Position
    stock: int
    depleted: bool = False

    def take_one(self) -> bool:
        """Consume one serving; tags the source depleted when it runs out."""
        if self.depleted or self.stock <= 0:
            self.depleted = True
            return False
        self.stock -= 1
        if self.stock <= 0:
            self.depleted = True
        return True

    def restock(self, amount: int) -> None:
        self.stock += max(0, int(amount))
        self.depleted = self.stock <= 0

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.source_id, "x": self.position[0], "y": self.position[1], "stock": self.stock}


@dataclass
class MeetingHall:
    """Communal structure holding shared stock for feasts."""

    hall_id: int
    position: Position
    stock: float
    capacity: float
    feast_threshold: float = 30.0
    feast_cooldown: int = 200
    last_feast_tick: int = 0

    def can_hold_feast(self, tick: int) -> bool:
        return self.stock >= self.feast_threshold and tick - self.last_feast_tick > self.feast_cooldown

    def regenerate(self, amount: float) -> None:
        self.stock = min(self.capacity, self.stock + amount)

    def add_stock(self, amount: float) -> None:
        self.stock = min(self.capacity, self.stock + max(0.0, amount))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.hall_id,
            "x": self.position[0],
            "y": self.position[1],
            "stock": round(self.stock, 2),
            "last_feast_tick": self.last_feast_tick,
        }


def attendees(hall: MeetingHall, dwarves: Iterable[Any], radius: int) -> list[Any]:
    return [dwarf for dwarf in dwarves if manhattan(dwarf.position, hall.position) <= radius]


def hold_feast(hall: MeetingHall, guests: list[Any], tick: int, hunger_restore: float) -> bool:
    """Spend one feast's worth of stock on everyone present.

    Returns False, changing nothing, when the hall is not eligible.
    """
    if not hall.can_hold_feast(tick):
        return False
    hall.stock -= hall.feast_threshold
    hall.last_feast_tick = tick
    for guest in guests:
        guest.hunger = guest.hunger - hunger_restore
        satisfy(guest, NeedAxis.SOCIAL, FEAST_SOCIAL_MULTIPLIER)
        adjust_mood(guest, FEAST_MOOD_BONUS)
        guest.memory.remember_event(tick, FEAST_MEMORY)
    return True
