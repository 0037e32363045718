# tests/fixtures.py
"""Reusable test doubles for emitter tests.

- RecordingSink: In-memory sink that records call order across sinks
- ExplodingSink: Sink that violates the no-raise contract
- FixedRandom: random.Random stand-in returning scripted draws
- make_finished_event: FinishedEvent built without an emitter
"""

from __future__ import annotations

import random
import uuid
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta
from typing import Any

from widelog import ErrorCause, FinishedEvent


class RecordingSink:
    """Sink that appends (name, sequence_id) to a shared call log."""

    def __init__(self, name: str, call_log: list[tuple[str, int]]) -> None:
        self._name = name
        self._call_log = call_log
        self.events: list[FinishedEvent] = []
        self.closed = 0

    @property
    def name(self) -> str:
        return self._name

    def write(self, event: FinishedEvent) -> None:
        self._call_log.append((self._name, event.sequence_id))
        self.events.append(event)

    def close(self) -> None:
        self.closed += 1


class ExplodingSink:
    """Sink whose write() and close() raise, simulating a broken custom sink."""

    def __init__(self, name: str = "exploding", error: Exception | None = None) -> None:
        self._name = name
        self._error = error if error is not None else OSError("disk full")
        self.write_attempts = 0

    @property
    def name(self) -> str:
        return self._name

    def write(self, event: FinishedEvent) -> None:
        self.write_attempts += 1
        raise self._error

    def close(self) -> None:
        raise RuntimeError("close failed")


class FixedRandom(random.Random):
    """Random source returning scripted values from random()."""

    def __init__(self, values: Iterable[float]) -> None:
        super().__init__(0)
        self._values = list(values)
        self.calls = 0

    def random(self) -> float:
        value = self._values[self.calls % len(self._values)]
        self.calls += 1
        return value


def raise_with_cause(outer: str, inner: str) -> Any:
    """Raise RuntimeError(outer) from ValueError(inner); return the caught error."""
    try:
        try:
            raise ValueError(inner)
        except ValueError as e:
            raise RuntimeError(outer) from e
    except RuntimeError as e:
        return e


def make_finished_event(
    fields: dict[str, Any] | None = None,
    *,
    error: tuple[ErrorCause, ...] = (),
    sequence_id: int = 0,
    emitter_name: str = "requests",
) -> FinishedEvent:
    """Build a FinishedEvent directly, without an emitter."""
    start = datetime(2025, 1, 1, tzinfo=UTC)
    return FinishedEvent(
        fields=fields or {},
        groups={},
        start_time=start,
        end_time=start + timedelta(milliseconds=10),
        error=error,
        emitter_name=emitter_name,
        sequence_id=sequence_id,
        instance_id=uuid.uuid4(),
    )
