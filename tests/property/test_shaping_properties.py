# tests/property/test_shaping_properties.py
"""Property-based tests for event shaping and encoding.

Whatever JSON-safe fields are recorded, the emitted line must:
- decode to the recorded values
- carry every reserved key exactly once, with the reserved value
- stay on one line
"""

import json
from datetime import timedelta
from typing import Any

from hypothesis import given
from hypothesis import strategies as st

from tests.property.conftest import field_maps, field_names, json_values
from tests.property.settings import STANDARD_SETTINGS
from widelog import Emitter, EventWriter, InMemorySink, MockClock
from widelog.core.serialization import RESERVED_KEYS


def emit_one(fields: dict[str, Any], elapsed_ms: int = 0) -> InMemorySink:
    clock = MockClock()
    sink = InMemorySink()
    emitter = Emitter("props", sinks=[sink], clock=clock)
    with emitter.begin() as event:
        event.update(fields)
        clock.advance(elapsed_ms / 1000)
    return sink


class TestEncodedLine:
    @given(fields=field_maps)
    @STANDARD_SETTINGS
    def test_user_fields_round_trip(self, fields: dict[str, Any]) -> None:
        user_fields = {k: v for k, v in fields.items() if k not in RESERVED_KEYS}
        sink = emit_one(user_fields)
        decoded = json.loads(sink.lines()[0])
        for key, value in user_fields.items():
            assert decoded[key] == value

    @given(fields=field_maps)
    @STANDARD_SETTINGS
    def test_single_line(self, fields: dict[str, Any]) -> None:
        sink = emit_one(fields)
        assert "\n" not in sink.lines()[0]

    @given(key=st.sampled_from(sorted(RESERVED_KEYS)), value=json_values)
    @STANDARD_SETTINGS
    def test_reserved_keys_cannot_be_shadowed(self, key: str, value: Any) -> None:
        sink = emit_one({key: value}, elapsed_ms=42)
        decoded = json.loads(sink.lines()[0])
        reserved = {
            "start_time": "2025-01-01T00:00:00.000Z",
            "end_time": "2025-01-01T00:00:00.042Z",
            "duration_ms": 42,
            "error": False,
            "emitter_name": "props",
            "local_id": 0,
            "id": str(sink.events[0].instance_id),
        }
        if key in reserved:
            assert decoded[key] == reserved[key]
        else:
            # event_type and error_cause are only written when the event has them
            assert decoded[key] == value

    @given(elapsed_ms=st.integers(min_value=0, max_value=10**7))
    @STANDARD_SETTINGS
    def test_duration_matches_clock(self, elapsed_ms: int) -> None:
        sink = emit_one({}, elapsed_ms=elapsed_ms)
        assert sink.records[0]["duration_ms"] == elapsed_ms


class TestWriterSemantics:
    @given(key=field_names, values=st.lists(json_values, min_size=1, max_size=5))
    @STANDARD_SETTINGS
    def test_last_write_wins(self, key: str, values: list[Any]) -> None:
        writer = EventWriter(clock=MockClock())
        for value in values:
            writer.set(key, value)
        assert writer.to_group().fields[key] == values[-1]

    @given(names=st.lists(field_names, min_size=1, max_size=6))
    @STANDARD_SETTINGS
    def test_group_access_idempotent(self, names: list[str]) -> None:
        writer = EventWriter(clock=MockClock())
        children = [writer.group(name) for name in names]
        for name, child in zip(names, children, strict=True):
            assert writer.group(name) is child
        assert list(writer.to_group().groups) == list(dict.fromkeys(names))

    @given(steps=st.lists(st.integers(min_value=0, max_value=1000), min_size=1, max_size=6))
    @STANDARD_SETTINGS
    def test_children_within_parent_interval(self, steps: list[int]) -> None:
        clock = MockClock()
        writer = EventWriter(clock=clock)
        for index, step in enumerate(steps):
            with writer.group(f"step{index}"):
                clock.advance(step / 1000)
        snapshot = writer.to_group()
        assert snapshot.duration == timedelta(milliseconds=sum(steps))
        for child in snapshot.groups.values():
            assert snapshot.start_time <= child.start_time <= child.end_time <= snapshot.end_time

