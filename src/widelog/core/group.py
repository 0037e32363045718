# src/widelog/core/group.py
"""Immutable snapshots of completed event nodes.

An EventGroup is produced once, when an EventWriter is frozen, and never
changes afterwards. The tree has no back-edges: every child snapshot is
owned by exactly one parent.

Recorded errors are stored as a flattened cause chain (ErrorCause tuples)
rather than as live exception objects, so a snapshot holds no references to
frames or tracebacks and is safe to keep after the request has finished.
"""

from __future__ import annotations

import builtins
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from types import MappingProxyType

from widelog.contracts.values import JsonValue

# Upper bound on recorded cause levels. Cycles are detected separately;
# this only bounds pathological (very deep but acyclic) chains.
MAX_CAUSE_DEPTH = 64

_ZERO = timedelta(0)
_ONE_MS = timedelta(milliseconds=1)


@dataclass(frozen=True, slots=True)
class ErrorCause:
    """One level of a recorded error chain.

    Attributes:
        error_type: Qualified exception type name (``module.QualName``;
            builtins are reported without the module prefix)
        error_message: str(exception), or None when the exception has no message
    """

    error_type: str
    error_message: str | None

    @classmethod
    def from_exception(cls, error: BaseException) -> ErrorCause:
        error_class = type(error)
        if error_class.__module__ == builtins.__name__:
            type_name = error_class.__qualname__
        else:
            type_name = f"{error_class.__module__}.{error_class.__qualname__}"
        message = str(error)
        return cls(error_type=type_name, error_message=message or None)


def _next_cause(error: BaseException) -> BaseException | None:
    """Follow the same link Python's traceback printer follows."""
    if error.__cause__ is not None:
        return error.__cause__
    if error.__suppress_context__:
        return None
    return error.__context__


def flatten_error_chain(error: BaseException) -> tuple[ErrorCause, ...]:
    """Flatten an exception and its causes, outermost first.

    Traversal follows ``__cause__`` (explicit ``raise ... from``) and falls
    back to ``__context__`` unless it was suppressed. It stops at the root
    cause, at the first exception already visited (cyclic chains), or after
    MAX_CAUSE_DEPTH levels.

    Args:
        error: The outermost exception

    Returns:
        Tuple of ErrorCause, one per level, outermost first
    """
    causes: list[ErrorCause] = []
    seen: set[int] = set()
    current: BaseException | None = error
    while current is not None and len(causes) < MAX_CAUSE_DEPTH:
        if id(current) in seen:
            break
        seen.add(id(current))
        causes.append(ErrorCause.from_exception(current))
        current = _next_cause(current)
    return tuple(causes)


@dataclass(frozen=True, slots=True, kw_only=True)
class EventGroup:
    """Frozen snapshot of a completed event node.

    Attributes:
        fields: Field values, in insertion order
        groups: Child snapshots by group name, in first-access order
        start_time: When the node was opened (UTC)
        end_time: When the node was closed (UTC)
        error: Flattened cause chain, outermost first; empty if no error
    """

    fields: Mapping[str, JsonValue]
    groups: Mapping[str, EventGroup]
    start_time: datetime
    end_time: datetime
    error: tuple[ErrorCause, ...] = field(default=())

    def __post_init__(self) -> None:
        # Read-only views; the dicts themselves are private copies made at freeze time
        if not isinstance(self.fields, MappingProxyType):
            object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))
        if not isinstance(self.groups, MappingProxyType):
            object.__setattr__(self, "groups", MappingProxyType(dict(self.groups)))

    @property
    def duration(self) -> timedelta:
        """Elapsed time between start and end.

        Clamped at zero if the wall clock was stepped backwards while the
        node was open.
        """
        elapsed = self.end_time - self.start_time
        return elapsed if elapsed > _ZERO else _ZERO

    @property
    def duration_ms(self) -> int:
        """Duration in whole milliseconds (truncated)."""
        return self.duration // _ONE_MS

    @property
    def has_error(self) -> bool:
        return bool(self.error)

    def group(self, name: str) -> EventGroup | None:
        """Return the child snapshot called ``name``, or None."""
        return self.groups.get(name)

    def get_field(self, path: str) -> JsonValue:
        """Look up a field by dotted path.

        ``get_field("user.subscription")`` returns ``fields["user"]["subscription"]``.
        Returns None when a segment is missing or a non-mapping value is
        traversed; a stored JSON null is indistinguishable from a miss.
        """
        current: JsonValue = dict(self.fields)
        for part in path.split("."):
            if not isinstance(current, dict):
                return None
            if part not in current:
                return None
            current = current[part]
        return current

    def get_field_as_str(self, path: str) -> str | None:
        value = self.get_field(path)
        return value if isinstance(value, str) else None

    def get_field_as_number(self, path: str) -> int | float | None:
        value = self.get_field(path)
        if isinstance(value, bool):
            return None
        return value if isinstance(value, int | float) else None

    def get_field_as_bool(self, path: str) -> bool | None:
        value = self.get_field(path)
        return value if isinstance(value, bool) else None
