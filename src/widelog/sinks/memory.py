# src/widelog/sinks/memory.py
"""In-memory sink that keeps finished events for inspection."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any

from widelog.core.serialization import encode_event, shape_event

if TYPE_CHECKING:
    from widelog.contracts.values import JsonValue
    from widelog.core.event import FinishedEvent


class InMemorySink:
    """Collects finished events in a list.

    Useful in tests and for embedding applications that forward events
    themselves. ``max_events`` bounds memory by discarding the oldest events.

    Example:
        sink = InMemorySink()
        emitter = Emitter.builder("requests").add_sink(sink).build()
        with emitter.begin() as event:
            event.set("route", "/health")
        assert sink.records[0]["route"] == "/health"
    """

    _name = "memory"

    def __init__(self, max_events: int | None = None) -> None:
        if max_events is not None and max_events <= 0:
            raise ValueError(f"max_events must be positive, got {max_events}")
        self._max_events = max_events
        self._events: list[FinishedEvent] = []
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return self._name

    def write(self, event: FinishedEvent) -> None:
        with self._lock:
            self._events.append(event)
            if self._max_events is not None and len(self._events) > self._max_events:
                del self._events[0]

    @property
    def events(self) -> list[FinishedEvent]:
        """Snapshot of the captured events, in write order."""
        with self._lock:
            return list(self._events)

    @property
    def records(self) -> list[dict[str, JsonValue]]:
        """Captured events shaped as JSON-compatible dicts."""
        return [shape_event(event) for event in self.events]

    def lines(self) -> list[str]:
        """Captured events encoded as JSON lines."""
        return [encode_event(event) for event in self.events]

    def clear(self) -> None:
        with self._lock:
            self._events.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def close(self) -> None:
        """No-op: captured events stay readable after close."""

    def find(self, **fields: Any) -> list[FinishedEvent]:
        """Return captured events whose top-level fields match all of ``fields``."""
        return [
            event
            for event in self.events
            if all(key in event.fields and event.fields[key] == value for key, value in fields.items())
        ]
