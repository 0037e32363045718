# src/widelog/core/serialization.py
"""Shape finished events into JSON-compatible trees and encode them.

Output shape (one object per line, compact, UTF-8):

    {
      "<field>": ...,
      "<group name>": {<fields>, <groups>, "start_time", "end_time", "duration_ms", "error", ...},
      "start_time": "2025-01-01T12:00:00.123Z",
      "end_time": "2025-01-01T12:00:00.456Z",
      "duration_ms": 333,
      "error": true,
      "error_cause": [{"error_type": "ValueError", "error_message": "bad"}],
      "emitter_name": "requests",
      "event_type": "http_request",
      "local_id": 0,
      "id": "1b4e28ba-2fa1-11d2-883f-0016d3cca427"
    }

User fields are written first and reserved keys afterwards, so a user field
can never shadow a reserved key.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

from widelog.contracts.values import JsonValue, copy_value
from widelog.core.event import FinishedEvent
from widelog.core.group import ErrorCause, EventGroup

START_TIME_KEY = "start_time"
END_TIME_KEY = "end_time"
DURATION_KEY = "duration_ms"
ERROR_KEY = "error"
ERROR_CAUSE_KEY = "error_cause"
EMITTER_NAME_KEY = "emitter_name"
EVENT_TYPE_KEY = "event_type"
SEQUENCE_ID_KEY = "local_id"
INSTANCE_ID_KEY = "id"

RESERVED_KEYS: frozenset[str] = frozenset(
    {
        START_TIME_KEY,
        END_TIME_KEY,
        DURATION_KEY,
        ERROR_KEY,
        ERROR_CAUSE_KEY,
        EMITTER_NAME_KEY,
        EVENT_TYPE_KEY,
        SEQUENCE_ID_KEY,
        INSTANCE_ID_KEY,
    }
)


def format_timestamp(value: datetime) -> str:
    """Format an instant as ISO-8601 UTC with millisecond precision.

    Naive datetimes are interpreted as UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    value = value.astimezone(UTC)
    return f"{value:%Y-%m-%dT%H:%M:%S}.{value.microsecond // 1000:03d}Z"


def shape_error_cause(cause: ErrorCause) -> dict[str, JsonValue]:
    return {"error_type": cause.error_type, "error_message": cause.error_message}


def shape_group(group: EventGroup) -> dict[str, JsonValue]:
    """Recursively convert an EventGroup into a JSON-compatible dict."""
    data: dict[str, JsonValue] = {key: copy_value(value) for key, value in group.fields.items()}

    for name, child in group.groups.items():
        data[name] = shape_group(child)

    data[START_TIME_KEY] = format_timestamp(group.start_time)
    data[END_TIME_KEY] = format_timestamp(group.end_time)
    data[DURATION_KEY] = group.duration_ms

    if group.has_error:
        data[ERROR_KEY] = True
        data[ERROR_CAUSE_KEY] = [shape_error_cause(cause) for cause in group.error]
    else:
        data[ERROR_KEY] = False

    return data


def shape_event(event: FinishedEvent) -> dict[str, JsonValue]:
    """Shape a finished event, adding the top-level identity keys."""
    data = shape_group(event)
    data[EMITTER_NAME_KEY] = event.emitter_name
    if event.event_type is not None:
        data[EVENT_TYPE_KEY] = event.event_type
    data[SEQUENCE_ID_KEY] = event.sequence_id
    data[INSTANCE_ID_KEY] = str(event.instance_id)
    return data


def encode_json(data: Any) -> str:
    """Encode a JSON-compatible tree compactly (no spaces, no ASCII escaping)."""
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False, allow_nan=False)


def encode_event(event: FinishedEvent) -> str:
    """Encode a finished event as one JSON line (without the trailing newline)."""
    return encode_json(shape_event(event))
