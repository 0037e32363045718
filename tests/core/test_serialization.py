# tests/core/test_serialization.py
"""Tests for shaping finished events into JSON lines.

Tests cover:
- Reserved keys at every level, written after user fields
- Timestamp format (millisecond precision, Z suffix)
- error / error_cause shape
- Top-level identity keys
- Compact UTF-8 encoding
"""

import json
import uuid
from datetime import UTC, datetime, timedelta, timezone

import pytest

from widelog import ErrorCause, EventGroup, FinishedEvent
from widelog.core.serialization import (
    RESERVED_KEYS,
    encode_event,
    encode_json,
    format_timestamp,
    shape_event,
    shape_group,
)

T0 = datetime(2025, 1, 1, 12, 0, 0, 123456, tzinfo=UTC)
INSTANCE_ID = uuid.UUID("1b4e28ba-2fa1-11d2-883f-0016d3cca427")


def make_event(**overrides: object) -> FinishedEvent:
    values: dict = {
        "fields": {"route": "/api/orders"},
        "groups": {},
        "start_time": T0,
        "end_time": T0 + timedelta(milliseconds=333),
        "emitter_name": "requests",
        "sequence_id": 7,
        "instance_id": INSTANCE_ID,
    }
    values.update(overrides)
    return FinishedEvent(**values)


class TestFormatTimestamp:
    def test_millisecond_precision(self) -> None:
        assert format_timestamp(T0) == "2025-01-01T12:00:00.123Z"

    def test_converted_to_utc(self) -> None:
        plus_two = timezone(timedelta(hours=2))
        assert format_timestamp(datetime(2025, 1, 1, 14, 0, tzinfo=plus_two)) == "2025-01-01T12:00:00.000Z"

    def test_naive_treated_as_utc(self) -> None:
        assert format_timestamp(datetime(2025, 6, 1, 8, 30)) == "2025-06-01T08:30:00.000Z"


class TestShapeGroup:
    """Tests for per-node shaping."""

    def test_reserved_keys_present(self) -> None:
        group = EventGroup(fields={}, groups={}, start_time=T0, end_time=T0 + timedelta(seconds=1))
        data = shape_group(group)
        assert data == {
            "start_time": "2025-01-01T12:00:00.123Z",
            "end_time": "2025-01-01T12:00:01.123Z",
            "duration_ms": 1000,
            "error": False,
        }

    def test_user_fields_first(self) -> None:
        group = EventGroup(fields={"b": 1, "a": 2}, groups={}, start_time=T0, end_time=T0)
        assert list(shape_group(group))[:2] == ["b", "a"]

    def test_reserved_key_wins_over_user_field(self) -> None:
        group = EventGroup(fields={"duration_ms": "user value"}, groups={}, start_time=T0, end_time=T0)
        assert shape_group(group)["duration_ms"] == 0

    def test_child_groups_nested(self) -> None:
        child = EventGroup(fields={"rows": 3}, groups={}, start_time=T0, end_time=T0 + timedelta(milliseconds=5))
        parent = EventGroup(fields={}, groups={"db": child}, start_time=T0, end_time=T0 + timedelta(milliseconds=9))
        data = shape_group(parent)
        assert data["db"]["rows"] == 3
        assert data["db"]["duration_ms"] == 5
        assert data["db"]["error"] is False

    def test_error_cause(self) -> None:
        group = EventGroup(
            fields={},
            groups={},
            start_time=T0,
            end_time=T0,
            error=(ErrorCause("RuntimeError", "outer"), ErrorCause("ValueError", None)),
        )
        data = shape_group(group)
        assert data["error"] is True
        assert data["error_cause"] == [
            {"error_type": "RuntimeError", "error_message": "outer"},
            {"error_type": "ValueError", "error_message": None},
        ]

    def test_no_error_cause_without_error(self) -> None:
        group = EventGroup(fields={}, groups={}, start_time=T0, end_time=T0)
        assert "error_cause" not in shape_group(group)


class TestShapeEvent:
    def test_identity_keys(self) -> None:
        data = shape_event(make_event())
        assert data["emitter_name"] == "requests"
        assert data["local_id"] == 7
        assert data["id"] == "1b4e28ba-2fa1-11d2-883f-0016d3cca427"

    def test_event_type_only_when_set(self) -> None:
        assert "event_type" not in shape_event(make_event())
        assert shape_event(make_event(event_type="http_request"))["event_type"] == "http_request"

    def test_all_top_level_reserved_keys_last(self) -> None:
        data = shape_event(make_event(event_type="job"))
        keys = list(data)
        assert keys[0] == "route"
        assert set(keys[1:]) == RESERVED_KEYS - {"error_cause"}


class TestEncode:
    def test_single_compact_line(self) -> None:
        line = encode_event(make_event())
        assert "\n" not in line
        assert ", " not in line and ": " not in line
        assert json.loads(line)["route"] == "/api/orders"

    def test_non_ascii_not_escaped(self) -> None:
        line = encode_event(make_event(fields={"city": "Zürich"}))
        assert "Zürich" in line

    def test_nan_rejected(self) -> None:
        with pytest.raises(ValueError):
            encode_json({"x": float("nan")})

    def test_decoded_matches_shape(self) -> None:
        event = make_event(fields={"user": {"id": 42, "tags": ["a", "b"]}, "ok": True, "none": None})
        assert json.loads(encode_event(event)) == shape_event(event)
