# tests/core/test_group.py
"""Tests for EventGroup snapshots and error chain flattening."""

from datetime import UTC, datetime, timedelta

import pytest

from tests.fixtures import raise_with_cause
from widelog import ErrorCause, EventGroup
from widelog.core.group import MAX_CAUSE_DEPTH, flatten_error_chain

T0 = datetime(2025, 1, 1, tzinfo=UTC)


def make_group(**overrides: object) -> EventGroup:
    values: dict = {
        "fields": {},
        "groups": {},
        "start_time": T0,
        "end_time": T0 + timedelta(milliseconds=250),
    }
    values.update(overrides)
    return EventGroup(**values)


class CustomError(Exception):
    pass


class TestErrorCause:
    def test_builtin_type_has_no_module_prefix(self) -> None:
        cause = ErrorCause.from_exception(KeyError("user"))
        assert cause.error_type == "KeyError"

    def test_custom_type_is_qualified(self) -> None:
        cause = ErrorCause.from_exception(CustomError("x"))
        assert cause.error_type == f"{__name__}.CustomError"

    def test_empty_message_is_none(self) -> None:
        assert ErrorCause.from_exception(RuntimeError()).error_message is None


class TestFlattenErrorChain:
    """Tests for cause chain traversal."""

    def test_single_exception(self) -> None:
        chain = flatten_error_chain(ValueError("bad"))
        assert chain == (ErrorCause("ValueError", "bad"),)

    def test_explicit_cause_outermost_first(self) -> None:
        error = raise_with_cause("outer", "inner")
        chain = flatten_error_chain(error)
        assert [c.error_message for c in chain] == ["outer", "inner"]
        assert [c.error_type for c in chain] == ["RuntimeError", "ValueError"]

    def test_implicit_context_followed(self) -> None:
        try:
            try:
                raise KeyError("missing")
            except KeyError:
                raise RuntimeError("while handling")  # noqa: B904
        except RuntimeError as e:
            error = e
        assert len(flatten_error_chain(error)) == 2

    def test_suppressed_context_not_followed(self) -> None:
        try:
            try:
                raise KeyError("missing")
            except KeyError:
                raise RuntimeError("clean") from None
        except RuntimeError as e:
            error = e
        assert flatten_error_chain(error) == (ErrorCause("RuntimeError", "clean"),)

    def test_cycle_terminates(self) -> None:
        """A self-referential chain is recorded once per distinct exception."""
        first = ValueError("a")
        second = RuntimeError("b")
        first.__cause__ = second
        second.__cause__ = first
        chain = flatten_error_chain(first)
        assert [c.error_message for c in chain] == ["a", "b"]

    def test_self_cause_terminates(self) -> None:
        error = ValueError("me")
        error.__cause__ = error
        assert len(flatten_error_chain(error)) == 1

    def test_depth_capped(self) -> None:
        root = ValueError("0")
        current = root
        for i in range(1, MAX_CAUSE_DEPTH + 10):
            outer = ValueError(str(i))
            outer.__cause__ = current
            current = outer
        assert len(flatten_error_chain(current)) == MAX_CAUSE_DEPTH


class TestDuration:
    def test_duration_ms(self) -> None:
        assert make_group().duration_ms == 250

    def test_duration_truncates_sub_millisecond(self) -> None:
        group = make_group(end_time=T0 + timedelta(microseconds=1999))
        assert group.duration_ms == 1

    def test_backwards_clock_clamped_to_zero(self) -> None:
        group = make_group(end_time=T0 - timedelta(seconds=5))
        assert group.duration == timedelta(0)
        assert group.duration_ms == 0


class TestSnapshot:
    def test_frozen(self) -> None:
        group = make_group()
        with pytest.raises(AttributeError):
            group.end_time = T0  # type: ignore[misc]

    def test_fields_read_only(self) -> None:
        group = make_group(fields={"a": 1})
        with pytest.raises(TypeError):
            group.fields["a"] = 2  # type: ignore[index]

    def test_has_error(self) -> None:
        assert not make_group().has_error
        assert make_group(error=(ErrorCause("ValueError", "x"),)).has_error

    def test_group_lookup(self) -> None:
        child = make_group(fields={"rows": 3})
        parent = make_group(groups={"db": child})
        assert parent.group("db") is child
        assert parent.group("cache") is None


class TestFieldLookup:
    """Tests for dotted-path field access."""

    @pytest.fixture
    def group(self) -> EventGroup:
        return make_group(
            fields={
                "user": {"subscription": "premium", "lifetime_value_cents": 4200, "active": True},
                "route": "/api/orders",
                "ratio": 0.5,
                "flag": False,
            }
        )

    def test_top_level(self, group: EventGroup) -> None:
        assert group.get_field("route") == "/api/orders"

    def test_nested(self, group: EventGroup) -> None:
        assert group.get_field("user.subscription") == "premium"

    def test_missing_returns_none(self, group: EventGroup) -> None:
        assert group.get_field("user.email") is None
        assert group.get_field("nope") is None

    def test_traversing_scalar_returns_none(self, group: EventGroup) -> None:
        assert group.get_field("route.length") is None

    def test_typed_accessors(self, group: EventGroup) -> None:
        assert group.get_field_as_str("user.subscription") == "premium"
        assert group.get_field_as_str("ratio") is None
        assert group.get_field_as_number("user.lifetime_value_cents") == 4200
        assert group.get_field_as_number("ratio") == 0.5
        assert group.get_field_as_bool("user.active") is True
        assert group.get_field_as_bool("flag") is False

    def test_number_accessor_excludes_bool(self, group: EventGroup) -> None:
        assert group.get_field_as_number("flag") is None
