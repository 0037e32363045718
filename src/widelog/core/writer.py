# src/widelog/core/writer.py
"""Mutable builder for one in-progress event node.

An EventWriter accumulates fields, child writers and at most one error for a
single node of a wide event. Its start time is taken when it is created and
its end time when it is first closed. ``to_group()`` freezes the writer (and
all of its children) into an immutable EventGroup.

Two usage shapes are supported for child groups, with identical timing
(start = first access, end = scope exit):

    # Scoped: closed when the block exits, including on exceptions
    with event.group("request") as request:
        request.set("method", "POST")

    # Callback: closed when the callback returns or raises
    event.group("response", lambda response: response.set("status", 200))

Thread Safety:
    Writers are NOT safe for concurrent mutation. One event tree belongs to
    one unit of work and must be mutated by one thread at a time.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime
from types import MappingProxyType, TracebackType
from typing import Any, Self, overload

from widelog.contracts.errors import FieldValueError
from widelog.contracts.values import JsonValue, copy_value, normalize_value
from widelog.core.clock import DEFAULT_CLOCK, Clock
from widelog.core.group import EventGroup, flatten_error_chain


class EventWriter:
    """Accumulates fields, child groups and an error for one event node.

    Example:
        >>> writer = EventWriter()
        >>> writer.set("user_id", 42).set("plan", "premium")
        >>> with writer.group("db") as db:
        ...     db.set("rows", 3)
        >>> snapshot = writer.to_group()
        >>> snapshot.group("db").fields["rows"]
        3
    """

    def __init__(self, *, clock: Clock = DEFAULT_CLOCK) -> None:
        self._clock = clock
        self._fields: dict[str, JsonValue] = {}
        self._children: dict[str, EventWriter] = {}
        self._start_time: datetime = clock.now()
        self._end_time: datetime | None = None
        self._error: BaseException | None = None

    # ------------------------------------------------------------------
    # Fields
    # ------------------------------------------------------------------

    def set(self, key: str, value: Any) -> Self:
        """Insert or overwrite a field.

        Args:
            key: Field name
            value: str, int, float, bool, None, or a nested list/mapping of those

        Returns:
            This writer, for chaining

        Raises:
            FieldValueError: If the key is not a str or the value is not JSON-compatible
        """
        if not isinstance(key, str):
            raise FieldValueError(repr(key), f"field names must be str, got {type(key).__name__}")
        self._fields[key] = normalize_value(value, path=key)
        return self

    def update(self, values: Mapping[str, Any] | None = None, /, **fields: Any) -> Self:
        """Set several fields at once (mapping entries first, then keywords)."""
        if values is not None:
            for key, value in values.items():
                self.set(key, value)
        for key, value in fields.items():
            self.set(key, value)
        return self

    @property
    def fields(self) -> Mapping[str, JsonValue]:
        """Read-only view of the fields recorded so far."""
        return MappingProxyType(self._fields)

    def get_field(self, path: str) -> JsonValue:
        """Look up a field by dotted path; None when absent."""
        current: JsonValue = self._fields
        for part in path.split("."):
            if not isinstance(current, dict) or part not in current:
                return None
            current = current[part]
        return current

    # ------------------------------------------------------------------
    # Groups
    # ------------------------------------------------------------------

    @overload
    def group(self, name: str) -> EventWriter: ...

    @overload
    def group(self, name: str, callback: Callable[[EventWriter], object]) -> Self: ...

    def group(self, name: str, callback: Callable[[EventWriter], object] | None = None) -> EventWriter:
        """Return the child writer called ``name``, creating it on first access.

        Repeated calls with the same name return the same child, so one
        logical sub-group can be filled in from several call sites.

        With a callback, the child is passed to it and closed when the
        callback returns or raises (the exception propagates), and this
        writer is returned for chaining.
        """
        if not isinstance(name, str):
            raise FieldValueError(repr(name), f"group names must be str, got {type(name).__name__}")
        child = self._children.get(name)
        if child is None:
            child = EventWriter(clock=self._clock)
            self._children[name] = child

        if callback is None:
            return child

        with child:
            callback(child)
        return self

    @property
    def groups(self) -> Mapping[str, EventWriter]:
        """Read-only view of the child writers, in first-access order."""
        return MappingProxyType(self._children)

    # ------------------------------------------------------------------
    # Error and lifecycle
    # ------------------------------------------------------------------

    def error(self, error: BaseException) -> Self:
        """Record an error for this node, replacing any earlier one.

        The error is captured as data (type and message of every level of its
        cause chain) when the writer is frozen. It is never re-raised.
        """
        if not isinstance(error, BaseException):
            raise TypeError(f"error() expects an exception, got {type(error).__name__}")
        self._error = error
        return self

    @property
    def recorded_error(self) -> BaseException | None:
        return self._error

    @property
    def has_error(self) -> bool:
        return self._error is not None

    @property
    def start_time(self) -> datetime:
        return self._start_time

    @property
    def end_time(self) -> datetime | None:
        """End time, or None while the writer is still open."""
        return self._end_time

    @property
    def is_closed(self) -> bool:
        return self._end_time is not None

    def close(self) -> None:
        """Record the end time. Only the first call has an effect."""
        self._mark_closed()

    def _mark_closed(self) -> None:
        # First close wins: re-closing must not extend a measured duration
        if self._end_time is None:
            self._end_time = self._clock.now()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Freezing
    # ------------------------------------------------------------------

    def to_group(self) -> EventGroup:
        """Freeze this writer and its children into an EventGroup.

        Children are frozen before their parent, and any writer that was
        never closed is closed now, so every node in the snapshot has an end
        time. Field values are copied; later mutation of the writer does not
        affect the snapshot.
        """
        groups = {name: child.to_group() for name, child in self._children.items()}
        self._mark_closed()
        assert self._end_time is not None
        return EventGroup(
            fields={key: copy_value(value) for key, value in self._fields.items()},
            groups=groups,
            start_time=self._start_time,
            end_time=self._end_time,
            error=flatten_error_chain(self._error) if self._error is not None else (),
        )
