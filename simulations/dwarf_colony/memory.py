"""Bounded per-dwarf memories and sparse relationship tracking."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Any, Iterator

THOUGHT_CAPACITY = 5
CONVERSATION_CAPACITY = 3
EVENT_CAPACITY = 10

AFFINITY_MIN = -100.0
AFFINITY_MAX = 100.0


@dataclass(frozen=True)
class MemoryEntry:
    tick: int
    content: str
    peer_id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"tick": self.tick, "content": self.content}
        if self.peer_id is not None:
            payload["peer_id"] = self.peer_id
        return payload


class MemoryLedger:
    """Three FIFO logs; appending past capacity evicts the oldest entry."""

    def __init__(
        self,
        thought_capacity: int = THOUGHT_CAPACITY,
        conversation_capacity: int = CONVERSATION_CAPACITY,
        event_capacity: int = EVENT_CAPACITY,
    ) -> None:
        self.thoughts: deque[MemoryEntry] = deque(maxlen=thought_capacity)
        self.conversations: deque[MemoryEntry] = deque(maxlen=conversation_capacity)
        self.events: deque[MemoryEntry] = deque(maxlen=event_capacity)

    def remember_thought(self, tick: int, content: str) -> None:
        self.thoughts.append(MemoryEntry(tick=tick, content=content))

    def remember_conversation(self, tick: int, peer_id: int, content: str) -> None:
        self.conversations.append(MemoryEntry(tick=tick, content=content, peer_id=peer_id))

    def remember_event(self, tick: int, content: str) -> None:
        self.events.append(MemoryEntry(tick=tick, content=content))

    def recent_thoughts(self, count: int = 3) -> list[str]:
        return [entry.content for entry in list(self.thoughts)[-count:]]

    def recent_events(self, count: int = 3) -> list[str]:
        return [entry.content for entry in list(self.events)[-count:]]

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {
            "thoughts": [entry.to_dict() for entry in self.thoughts],
            "conversations": [entry.to_dict() for entry in self.conversations],
            "events": [entry.to_dict() for entry in self.events],
        }


@dataclass
class Relationship:
    affinity: float = 0.0
    interactions: int = 0
    last_tick: int = -1


class RelationshipLedger:
    """Per-peer affinity; absent peers read as neutral (0.0)."""

    def __init__(self) -> None:
        self._entries: dict[int, Relationship] = {}

    def __contains__(self, peer_id: object) -> bool:
        return peer_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._entries))

    def get(self, peer_id: int) -> Relationship | None:
        return self._entries.get(peer_id)

    def affinity(self, peer_id: int) -> float:
        entry = self._entries.get(peer_id)
        return entry.affinity if entry is not None else 0.0

    def record_interaction(self, peer_id: int, delta: float, tick: int) -> Relationship:
        entry = self._entries.setdefault(peer_id, Relationship())
        entry.affinity = max(AFFINITY_MIN, min(AFFINITY_MAX, entry.affinity + float(delta)))
        entry.interactions += 1
        entry.last_tick = tick
        return entry

    def describe(self, peer_id: int) -> str:
        entry = self._entries.get(peer_id)
        if entry is None:
            return "They don't know each other well."
        if entry.affinity > 50:
            return "They are good friends."
        if entry.affinity > 20:
            return "They get along well."
        if entry.affinity < -50:
            return "They don't like each other."
        if entry.affinity < -20:
            return "They have some tension."
        return "They are acquaintances."

    def to_dict(self) -> dict[str, dict[str, float]]:
        return {
            str(peer_id): {
                "affinity": round(entry.affinity, 2),
                "interactions": entry.interactions,
                "last_tick": entry.last_tick,
            }
            for peer_id, entry in sorted(self._entries.items())
        }
