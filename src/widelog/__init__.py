# src/widelog/__init__.py
"""
widelog: wide event logging.

Build one structured "wide event" per unit of work, attach fields and
nested groups as the work proceeds, and emit it as a single JSON line when
it closes, after an optional filter/sample decision.

Usage:
    from pathlib import Path

    from widelog import Emitter, FilterOutcome

    def keep_errors(emitter, event):
        return FilterOutcome.KEEP if event.has_error else FilterOutcome.SAMPLE

    emitter = Emitter.builder("requests", Path("logs")).sample_rate(0.05).filter(keep_errors).build()

    with emitter.begin() as event:
        event.set("route", "/api/orders")
        with event.group("db") as db:
            db.set("rows", 3)
"""

from widelog.builder import EmitterBuilder
from widelog.contracts import (
    EmitterConfigurationError,
    FieldValueError,
    FilterFunction,
    FilterOutcome,
    JsonValue,
    SinkConfigurationError,
    SinkProtocol,
    WideLogError,
    combine_least_restrictive,
    combine_most_restrictive,
    least_restrictive,
    most_restrictive,
)
from widelog.core import (
    ErrorCause,
    Event,
    EventGroup,
    EventWriter,
    FinishedEvent,
    MockClock,
    SystemClock,
    encode_event,
    shape_event,
)
from widelog.core.config import EmitterSettings, SinkSettings, load_settings
from widelog.emitter import Emitter
from widelog.factory import create_emitter
from widelog.filtering import EmitDecision
from widelog.sinks import ConsoleSink, FileSink, InMemorySink

__version__ = "0.1.0"

__all__ = [
    "ConsoleSink",
    "EmitDecision",
    "Emitter",
    "EmitterBuilder",
    "EmitterConfigurationError",
    "EmitterSettings",
    "ErrorCause",
    "Event",
    "EventGroup",
    "EventWriter",
    "FieldValueError",
    "FileSink",
    "FilterFunction",
    "FilterOutcome",
    "FinishedEvent",
    "InMemorySink",
    "JsonValue",
    "MockClock",
    "SinkConfigurationError",
    "SinkProtocol",
    "SinkSettings",
    "SystemClock",
    "WideLogError",
    "combine_least_restrictive",
    "combine_most_restrictive",
    "create_emitter",
    "encode_event",
    "least_restrictive",
    "load_settings",
    "most_restrictive",
    "shape_event",
]
