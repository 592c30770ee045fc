"""Append-only colony narrative log."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Callable

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class LogEntry:
    tick: int
    message: str

    def to_dict(self) -> dict[str, object]:
        return {"tick": self.tick, "message": self.message}


Listener = Callable[[LogEntry], None]


class EventLog:
    """Chronological narrative entries; the oldest are dropped past ``capacity``."""

    def __init__(self, capacity: int = 500) -> None:
        self._entries: deque[LogEntry] = deque(maxlen=max(1, int(capacity)))
        self._listeners: list[Listener] = []
        self.total_appended = 0

    def __len__(self) -> int:
        return len(self._entries)

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def append(self, tick: int, message: str) -> LogEntry:
        if self._entries and tick < self._entries[-1].tick:
            raise ValueError(f"Log entries must be chronological: tick {tick} after {self._entries[-1].tick}.")
        entry = LogEntry(tick=int(tick), message=message)
        self._entries.append(entry)
        self.total_appended += 1
        LOGGER.debug("[tick %s] %s", tick, message)
        for listener in self._listeners:
            listener(entry)
        return entry

    def entries(self) -> list[LogEntry]:
        return list(self._entries)

    def since(self, tick: int) -> list[LogEntry]:
        return [entry for entry in self._entries if entry.tick >= tick]

    def tail(self, count: int = 10) -> list[LogEntry]:
        return list(self._entries)[-count:] if count > 0 else []

    def clear(self) -> None:
        self._entries.clear()
        self.total_appended = 0
