"""Static terrain queries: walkability and random walkable tiles."""

from __future__ import annotations

import random
from typing import Protocol, Sequence

from simulations.dwarf_colony.agents import Position
from simulations.dwarf_colony.rules import ColonyConfigurationError

WALL = "#"
FLOOR = "."


class Terrain(Protocol):
    width: int
    height: int

    def walkable(self, position: Position) -> bool:
        ...

    def random_walkable(self, rng: random.Random, attempts: int = 50) -> Position | None:
        ...

    def walkable_near(self, center: Position, rng: random.Random, spread: int = 5, attempts: int = 50) -> Position | None:
        ...

    def neighbours(self, position: Position) -> list[Position]:
        ...


class GridTerrain:
    """Rectangular grid of wall/floor tiles."""

    def __init__(self, rows: Sequence[str]) -> None:
        if not rows:
            raise ColonyConfigurationError("Terrain needs at least one row.")
        widths = {len(row) for row in rows}
        if len(widths) != 1 or 0 in widths:
            raise ColonyConfigurationError("Terrain rows must be non-empty and all the same width.")
        unknown = {char for row in rows for char in row} - {WALL, FLOOR}
        if unknown:
            raise ColonyConfigurationError(f"Unknown terrain tile(s): {sorted(unknown)}.")
        self.rows = tuple(rows)
        self.width = widths.pop()
        self.height = len(rows)
        self.floor_tiles: tuple[Position, ...] = tuple(
            (x, y) for y, row in enumerate(self.rows) for x, char in enumerate(row) if char == FLOOR
        )
        if not self.floor_tiles:
            raise ColonyConfigurationError("Terrain has no walkable tiles.")

    @classmethod
    def open_room(cls, width: int, height: int) -> "GridTerrain":
        """Floor everywhere, walled on the border when the room is big enough."""
        if width <= 0 or height <= 0:
            raise ColonyConfigurationError(f"Map dimensions must be positive, got {width}x{height}.")
        if width < 3 or height < 3:
            return cls([FLOOR * width] * height)
        inner = WALL + FLOOR * (width - 2) + WALL
        return cls([WALL * width] + [inner] * (height - 2) + [WALL * width])

    def walkable(self, position: Position) -> bool:
        x, y = position
        if not (0 <= x < self.width and 0 <= y < self.height):
            return False
        return self.rows[y][x] == FLOOR

    def random_walkable(self, rng: random.Random, attempts: int = 50) -> Position | None:
        for _ in range(max(1, attempts)):
            candidate = (rng.randrange(self.width), rng.randrange(self.height))
            if self.walkable(candidate):
                return candidate
        return None

    def walkable_near(self, center: Position, rng: random.Random, spread: int = 5, attempts: int = 50) -> Position | None:
        for _ in range(max(1, attempts)):
            candidate = (
                center[0] + rng.randint(-spread, spread),
                center[1] + rng.randint(-spread, spread),
            )
            if self.walkable(candidate):
                return candidate
        return None

    def neighbours(self, position: Position) -> list[Position]:
        x, y = position
        options = [(x + 1, y), (x - 1, y), (x, y + 1), (x, y - 1)]
        return [option for option in options if self.walkable(option)]
