# src/widelog/contracts/__init__.py
"""Shared contracts for widelog.

This package is a LEAF MODULE: it holds enums, errors, value types and
protocols, and must not import from widelog.core or widelog.emitter at
runtime.

Import patterns:
    from widelog.contracts import FilterOutcome, JsonValue, SinkProtocol
"""

from widelog.contracts.enums import (
    FilterOutcome,
    combine_least_restrictive,
    combine_most_restrictive,
    least_restrictive,
    most_restrictive,
)
from widelog.contracts.errors import (
    EmitterConfigurationError,
    FieldValueError,
    SinkConfigurationError,
    WideLogError,
)
from widelog.contracts.protocols import FilterFunction, SinkProtocol
from widelog.contracts.values import JsonPrimitive, JsonValue, copy_value, normalize_value

__all__ = [
    "EmitterConfigurationError",
    "FieldValueError",
    "FilterFunction",
    "FilterOutcome",
    "JsonPrimitive",
    "JsonValue",
    "SinkConfigurationError",
    "SinkProtocol",
    "WideLogError",
    "combine_least_restrictive",
    "combine_most_restrictive",
    "copy_value",
    "least_restrictive",
    "most_restrictive",
    "normalize_value",
]
