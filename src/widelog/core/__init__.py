# src/widelog/core/__init__.py
"""Core data model and supporting infrastructure.

- clock: Clock protocol, SystemClock, MockClock
- group: EventGroup and ErrorCause snapshots, error chain flattening
- writer: EventWriter mutable builder
- event: Event root writer and FinishedEvent snapshot
- serialization: JSON shaping and encoding
- config: Pydantic settings and YAML loading
- logging: structlog configuration for diagnostics
"""

from widelog.core.clock import DEFAULT_CLOCK, Clock, MockClock, SystemClock
from widelog.core.event import Event, FinishedEvent
from widelog.core.group import MAX_CAUSE_DEPTH, ErrorCause, EventGroup, flatten_error_chain
from widelog.core.serialization import encode_event, format_timestamp, shape_event, shape_group
from widelog.core.writer import EventWriter

__all__ = [
    "DEFAULT_CLOCK",
    "MAX_CAUSE_DEPTH",
    "Clock",
    "ErrorCause",
    "Event",
    "EventGroup",
    "EventWriter",
    "FinishedEvent",
    "MockClock",
    "SystemClock",
    "encode_event",
    "flatten_error_chain",
    "format_timestamp",
    "shape_event",
    "shape_group",
]
