"""Seeded, named random streams that never touch global random state."""

from __future__ import annotations

import hashlib
import random
from dataclasses import dataclass


@dataclass
class DeterministicRNG:
    """Hands out independent ``random.Random`` streams derived from one seed.

    Separate streams keep, for example, population rolls stable when behavior
    code starts drawing more numbers.
    """

    seed: int

    def __post_init__(self) -> None:
        self._streams: dict[str, random.Random] = {}

    def stream(self, name: str) -> random.Random:
        """Return independent deterministic stream by name."""
        if name not in self._streams:
            # sha256 rather than hash() so seeds match across processes
            digest = hashlib.sha256(f"{self.seed}:{name}".encode("utf-8")).digest()
            derived_seed = int.from_bytes(digest[:8], byteorder="big", signed=False) & 0xFFFFFFFF
            self._streams[name] = random.Random(derived_seed)
        return self._streams[name]
