"""Core simulator that drives a plugin tick by tick without plugin-specific logic."""

from __future__ import annotations

import enum
import logging
import threading
from pathlib import Path
from typing import Any, Callable

from core.config_loader import load_config
from core.deterministic_rng import DeterministicRNG
from core.event_bus import SIM_MESSAGES, SIMULATION_END, TICK_END, EventBus
from core.plugin_registry import get_simulation_class
from data.logger import SimulationLogger

LOGGER = logging.getLogger(__name__)

TickHook = Callable[[int, dict[str, float]], None]


class SimulatorRuntimeError(RuntimeError):
    """Raised when a simulation plugin fails during setup or execution."""


class SimulatorState(str, enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class Simulator:
    """Plugin-driven simulator runtime.

    ``stop()`` may be called from any thread; it is honored only between
    ticks, so a plugin never observes a partially applied tick.
    """

    def __init__(
        self,
        config_path: str | Path,
        event_bus: EventBus | None = None,
        metrics_logger: SimulationLogger | None = None,
    ) -> None:
        config = load_config(config_path)
        self.config = config

        self.simulation_name = str(config["simulation"])
        self.simulation_config = dict(config["simulation_config"])
        self.run_config = dict(config["run_config"])
        self.logging_config = dict(config["logging_config"])

        self.seed = int(config["seed"])
        self.rng = DeterministicRNG(self.seed)
        self.event_bus = event_bus
        self.metrics_logger = metrics_logger
        self.run_id: str | None = None
        self.step_index = 0

        self._log_interval = max(1, int(self.logging_config.get("log_interval", 1)))
        self._state = SimulatorState.IDLE
        self._state_lock = threading.Lock()
        self._stop_event = threading.Event()

        simulation_class = get_simulation_class(self.simulation_name)
        try:
            self.sim = simulation_class(params=self.simulation_config, rng=self.rng)
        except Exception as exc:
            raise SimulatorRuntimeError(
                f"Failed to initialize simulation plugin '{self.simulation_name}': {exc}"
            ) from exc

    def control_state(self) -> str:
        with self._state_lock:
            return str(self._state.value)

    def stop(self) -> None:
        """Request a stop after the tick in progress, if any."""
        self._stop_event.set()
        with self._state_lock:
            self._state = SimulatorState.STOPPED

    def _publish(self, event_type: str, payload: Any) -> None:
        if self.event_bus is not None:
            self.event_bus.publish(event_type, payload)

    def _record(self, metrics: dict[str, float], final: bool) -> None:
        messages = self.sim.drain_messages()
        if messages:
            self._publish(SIM_MESSAGES, messages)
        if self.metrics_logger is None or self.run_id is None:
            return
        if self.step_index % self._log_interval == 0 or final:
            self.metrics_logger.log_metrics(self.run_id, self.step_index, metrics)
        if messages:
            self.metrics_logger.log_messages(self.run_id, messages)

    def run(self, steps: int | None = None, on_tick: TickHook | None = None) -> list[dict[str, float]]:
        """Reset the plugin and run up to ``steps`` ticks, collecting metrics."""
        total = int(self.run_config.get("steps", 0)) if steps is None else int(steps)
        metrics: list[dict[str, float]] = []
        self._stop_event.clear()
        with self._state_lock:
            self._state = SimulatorState.RUNNING

        if self.metrics_logger is not None:
            self.run_id = self.metrics_logger.start_run(
                simulation=self.simulation_name,
                config=self.config,
                seed=self.seed,
            )

        try:
            self.sim.reset()
            for step in range(total):
                if self._stop_event.is_set():
                    LOGGER.info("Stop requested; halting after tick %s.", self.step_index)
                    break
                self.step_index = step + 1
                self.sim.step()
                metric = self.sim.get_metrics()
                metrics.append(metric)
                self._record(metric, final=self.step_index == total)
                self._publish(TICK_END, {"step_index": self.step_index, "metrics": metric})
                if on_tick is not None:
                    on_tick(self.step_index, metric)
            if metrics and self.step_index % self._log_interval != 0 and self.step_index != total:
                self._record(metrics[-1], final=True)
        except Exception as exc:
            raise SimulatorRuntimeError(
                f"Simulation plugin '{self.simulation_name}' crashed during run: {exc}"
            ) from exc
        finally:
            with self._state_lock:
                if self._state != SimulatorState.STOPPED:
                    self._state = SimulatorState.IDLE
            try:
                self.sim.close()
            except Exception as exc:
                raise SimulatorRuntimeError(
                    f"Simulation plugin '{self.simulation_name}' failed during close: {exc}"
                ) from exc

        self._publish(SIMULATION_END, {"step_index": self.step_index, "run_id": self.run_id})
        return metrics
