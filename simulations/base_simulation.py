"""Base simulation plugin contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from core.deterministic_rng import DeterministicRNG


class Simulation(ABC):
    """Abstract simulation plugin interface.

    All simulation state must be instance-local. The core runtime talks to
    plugins only through this contract and calls ``step`` one whole tick at a
    time.
    """

    def __init__(self, params: dict[str, Any], rng: DeterministicRNG) -> None:
        """Store plugin parameters and RNG.

        Args:
            params: Plugin-specific validated parameters.
            rng: Deterministic RNG owned by the runtime; plugins draw named
                streams from it instead of touching global random state.
        """
        self.params = params
        self.rng = rng

    @abstractmethod
    def reset(self) -> None:
        """Initialize world state and agents."""

    @abstractmethod
    def step(self) -> None:
        """Advance the simulation by one tick."""

    @abstractmethod
    def get_metrics(self) -> dict[str, float]:
        """Return scalar metrics for logging."""

    @abstractmethod
    def get_render_state(self) -> dict[str, Any]:
        """Return JSON-serializable world state (data only)."""

    @abstractmethod
    def close(self) -> None:
        """Release plugin resources."""

    def drain_messages(self) -> list[dict[str, Any]]:
        """Return narrative messages produced since the last call.

        Plugins without a narrative log keep this default.
        """
        return []
