"""Asynchronous generated-text channel for names, bios, thoughts, and speech.

Requests run on a worker pool. Results are applied only when the colony
polls the channel between ticks, so the simulation never blocks on a slow or
unreachable text service and always has fallback text to show.
"""

from __future__ import annotations

import enum
import json
import logging
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol

import requests

LOGGER = logging.getLogger(__name__)


class TextGenerationError(RuntimeError):
    """Raised when a text provider returns an unusable payload."""


class TextKind(str, enum.Enum):
    IDENTITY = "identity"
    THOUGHT = "thought"
    SPEECH = "speech"


class TextStatus(str, enum.Enum):
    FALLBACK = "fallback"
    PENDING = "pending"
    RESOLVED = "resolved"
    FAILED = "failed"


@dataclass
class TextArtifact:
    """Fallback text plus the state of its generated replacement."""

    kind: TextKind
    fallback: dict[str, str]
    status: TextStatus = TextStatus.FALLBACK
    generated: dict[str, str] = field(default_factory=dict)
    error: str | None = None

    def value(self, key: str) -> str:
        generated = self.generated.get(key)
        if generated:
            return generated
        return self.fallback.get(key, "")

    def mark_pending(self) -> None:
        self.status = TextStatus.PENDING
        self.error = None

    def resolve(self, payload: Mapping[str, str]) -> None:
        self.generated = {str(key): str(value).strip() for key, value in payload.items() if value}
        self.status = TextStatus.RESOLVED

    def fail(self, reason: str) -> None:
        self.error = reason
        self.status = TextStatus.FAILED


class TextProvider(Protocol):
    def generate(self, kind: TextKind, context: Mapping[str, Any]) -> dict[str, str]:
        ...


class StaticTextProvider:
    """Returns canned payloads per kind; raises for kinds it has none for."""

    def __init__(self, responses: Mapping[TextKind, Mapping[str, str]]) -> None:
        self.responses = {TextKind(kind): dict(payload) for kind, payload in responses.items()}
        self.calls: list[tuple[TextKind, dict[str, Any]]] = []

    def generate(self, kind: TextKind, context: Mapping[str, Any]) -> dict[str, str]:
        self.calls.append((kind, dict(context)))
        if kind not in self.responses:
            raise TextGenerationError(f"No canned response for '{kind.value}'.")
        return dict(self.responses[kind])


def build_prompt(kind: TextKind, context: Mapping[str, Any]) -> str:
    name = context.get("name", "a dwarf")
    personality = context.get("personality", "average")
    if kind is TextKind.IDENTITY:
        return (
            f"Invent a dwarf name and a one-sentence wry biography for a dwarf with a {personality} "
            "personality. Answer as JSON with keys \"name\" and \"bio\"."
        )
    if kind is TextKind.THOUGHT:
        return (
            f"You are {name}, a dwarf with a {personality} personality. You feel {context.get('mood', 'neutral')} "
            f"and are currently {context.get('activity', 'idle')}. Express a brief internal thought "
            "(1-2 sentences, first person). Answer as JSON with key \"text\"."
        )
    return (
        f"{name} ({personality}) wants to say something to {context.get('listener', 'a friend')}. "
        f"{context.get('relationship', '')} Write one short line of dialogue. Answer as JSON with key \"text\"."
    )


class OllamaTextProvider:
    """Text provider backed by an Ollama ``/api/generate`` endpoint."""

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "llama3.2",
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = float(timeout)
        self.session = session or requests.Session()

    def generate(self, kind: TextKind, context: Mapping[str, Any]) -> dict[str, str]:
        response = self.session.post(
            f"{self.base_url}/api/generate",
            json={
                "model": self.model,
                "prompt": build_prompt(kind, context),
                "format": "json",
                "stream": False,
                "options": {"temperature": 0.8, "top_p": 0.9, "num_predict": 120},
            },
            timeout=self.timeout,
        )
        response.raise_for_status()
        raw = response.json().get("response", "")
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise TextGenerationError(f"Ollama returned non-JSON text: {raw!r}") from exc
        if not isinstance(payload, dict):
            raise TextGenerationError(f"Ollama returned {type(payload).__name__}, expected an object.")
        return {str(key): str(value) for key, value in payload.items() if isinstance(value, (str, int, float))}


@dataclass(frozen=True)
class TextResult:
    owner_id: int
    artifact: TextArtifact


class TextChannel:
    """Fire-and-forget request queue polled at tick boundaries."""

    def __init__(self, provider: TextProvider, max_workers: int = 2) -> None:
        self.provider = provider
        self._executor = ThreadPoolExecutor(max_workers=max(1, int(max_workers)), thread_name_prefix="colony-text")
        self._inflight: list[tuple[int, TextArtifact, Future[dict[str, str]]]] = []

    @property
    def pending_count(self) -> int:
        return len(self._inflight)

    def request(self, owner_id: int, artifact: TextArtifact, context: Mapping[str, Any]) -> None:
        artifact.mark_pending()
        future = self._executor.submit(self.provider.generate, artifact.kind, dict(context))
        self._inflight.append((owner_id, artifact, future))

    def poll(self) -> list[TextResult]:
        """Apply every finished request to its artifact; never blocks."""
        finished: list[TextResult] = []
        still_running: list[tuple[int, TextArtifact, Future[dict[str, str]]]] = []
        for owner_id, artifact, future in self._inflight:
            if not future.done():
                still_running.append((owner_id, artifact, future))
                continue
            try:
                artifact.resolve(future.result())
            except Exception as exc:
                LOGGER.debug("Text request for %s (%s) failed: %s", owner_id, artifact.kind.value, exc)
                artifact.fail(str(exc))
            finished.append(TextResult(owner_id=owner_id, artifact=artifact))
        self._inflight = still_running
        return finished

    def wait(self, timeout: float | None = None) -> bool:
        """Block until in-flight requests finish; returns True when none remain running."""
        if not self._inflight:
            return True
        _, not_done = wait([future for _, _, future in self._inflight], timeout=timeout)
        return not not_done

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)
        for _, artifact, _ in self._inflight:
            artifact.fail("channel closed")
        self._inflight = []
