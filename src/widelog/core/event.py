# src/widelog/core/event.py
"""Top-level wide events.

An Event is the root writer of one wide event. It carries the identity
assigned by its emitter (sequence id and random instance id) and, when it is
closed, freezes its tree into a FinishedEvent and hands that to the emitter
synchronously, before close() returns.

    with emitter.begin() as event:
        event.set("route", "/api/orders")
        with event.group("db") as db:
            db.set("rows", 3)
    # the event has reached every sink here
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from types import TracebackType
from typing import TYPE_CHECKING

from widelog.core.clock import DEFAULT_CLOCK, Clock
from widelog.core.group import EventGroup
from widelog.core.writer import EventWriter

if TYPE_CHECKING:
    from widelog.emitter import Emitter


@dataclass(frozen=True, slots=True, kw_only=True)
class FinishedEvent(EventGroup):
    """Frozen snapshot of a closed top-level event, with its identity.

    This is what filter functions and sinks receive.

    Attributes:
        emitter_name: Name of the emitter that produced the event
        sequence_id: Per-emitter counter value, starting at 0
        instance_id: Random 128-bit identifier
        event_type: Optional caller-supplied event type
    """

    emitter_name: str
    sequence_id: int
    instance_id: uuid.UUID
    event_type: str | None = None


class Event(EventWriter):
    """Root writer of a wide event, bound to the emitter that created it.

    Events are created by Emitter.begin(); the constructor is not part of
    the public API. Closing the event (explicitly or by leaving a ``with``
    block) emits it exactly once. An exception escaping the ``with`` block is
    recorded as the event's error, unless one was already recorded, and then
    propagates normally.
    """

    def __init__(
        self,
        emitter: Emitter,
        *,
        sequence_id: int,
        event_type: str | None = None,
        clock: Clock = DEFAULT_CLOCK,
    ) -> None:
        super().__init__(clock=clock)
        self._emitter = emitter
        self._sequence_id = sequence_id
        self._instance_id = uuid.uuid4()
        self._event_type = event_type
        self._finished: FinishedEvent | None = None

    @property
    def emitter(self) -> Emitter:
        return self._emitter

    @property
    def sequence_id(self) -> int:
        return self._sequence_id

    @property
    def instance_id(self) -> uuid.UUID:
        return self._instance_id

    @property
    def event_type(self) -> str | None:
        return self._event_type

    @property
    def finished(self) -> FinishedEvent | None:
        """The emitted snapshot, or None while the event is still open."""
        return self._finished

    def finish(self) -> FinishedEvent:
        """Freeze the tree and attach identity, without emitting."""
        group = self.to_group()
        return FinishedEvent(
            fields=group.fields,
            groups=group.groups,
            start_time=group.start_time,
            end_time=group.end_time,
            error=group.error,
            emitter_name=self._emitter.name,
            sequence_id=self._sequence_id,
            instance_id=self._instance_id,
            event_type=self._event_type,
        )

    def close(self) -> None:
        """Close the event and emit it. Later calls are no-ops."""
        if self._finished is not None:
            return
        self._finished = self.finish()
        self._emitter.emit(self._finished)

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        if exc_value is not None and not self.has_error:
            self.error(exc_value)
        self.close()
