"""Non-blocking fan-out of simulator lifecycle events to observers."""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from concurrent.futures import ThreadPoolExecutor
from threading import Lock, Semaphore
from typing import Any, Callable

LOGGER = logging.getLogger(__name__)

TICK_END = "tick_end"
SIM_MESSAGES = "sim_messages"
SIMULATION_END = "simulation_end"
TOPICS = frozenset({TICK_END, SIM_MESSAGES, SIMULATION_END})

Observer = Callable[[Any], None]


class EventBus:
    """Delivers ``tick_end``, ``sim_messages`` and ``simulation_end`` payloads off the tick thread.

    Observers run in a small worker pool. Once ``max_pending`` deliveries are
    in flight, further deliveries are dropped and counted per topic.
    """

    def __init__(self, max_workers: int = 4, max_pending: int = 2048) -> None:
        self._observers: dict[str, list[Observer]] = defaultdict(list)
        self._lock = Lock()
        self._pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="colony-observer")
        self._in_flight = Semaphore(max(1, int(max_pending)))
        self.dropped: Counter[str] = Counter()

    def subscribe(self, topic: str, observer: Observer) -> None:
        if topic not in TOPICS:
            raise ValueError(f"Unknown topic '{topic}'. Expected one of: {', '.join(sorted(TOPICS))}")
        with self._lock:
            self._observers[topic].append(observer)

    def publish(self, topic: str, payload: Any) -> None:
        with self._lock:
            observers = tuple(self._observers.get(topic, ()))
        for observer in observers:
            if not self._in_flight.acquire(blocking=False):
                self.dropped[topic] += 1
                continue
            self._pool.submit(self._deliver, topic, observer, payload).add_done_callback(
                lambda _done: self._in_flight.release()
            )

    def close(self) -> None:
        self._pool.shutdown(wait=True)

    @staticmethod
    def _deliver(topic: str, observer: Observer, payload: Any) -> None:
        try:
            observer(payload)
        except Exception:
            LOGGER.exception("Observer for '%s' failed; delivery skipped.", topic)
