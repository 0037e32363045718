# src/widelog/contracts/values.py
"""JSON value contract for event fields.

Field values attached to a wide event must be representable in JSON. This
module defines the closed ``JsonValue`` union and the single normalization
routine every ``set()`` call goes through.

Accepted kinds:
- str, int, float (finite only), bool, None
- list/tuple of accepted values (stored as list)
- Mapping with str keys and accepted values (stored as dict)

Anything else is a caller error and raises FieldValueError at set() time,
never during emission.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any, TypeAlias

from widelog.contracts.errors import FieldValueError

JsonPrimitive: TypeAlias = str | int | float | bool | None
JsonValue: TypeAlias = JsonPrimitive | list["JsonValue"] | dict[str, "JsonValue"]


def normalize_value(value: Any, *, path: str = "value") -> JsonValue:
    """Validate a field value and return an owned JSON-compatible copy.

    Containers are copied recursively so the caller can keep mutating its
    own list/dict without affecting the recorded field.

    Args:
        value: The value supplied by the caller
        path: Dotted location used in error messages

    Returns:
        A JSON-compatible value (lists and dicts are fresh copies)

    Raises:
        FieldValueError: If the value (or any nested value) is not JSON-compatible
    """
    # bool is checked with the other scalars; it is an int subclass
    if value is None or isinstance(value, str | bool | int):
        return value

    if isinstance(value, float):
        if not math.isfinite(value):
            raise FieldValueError(path, f"non-finite float {value!r} is not valid JSON")
        return value

    if isinstance(value, Mapping):
        result: dict[str, JsonValue] = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise FieldValueError(
                    path,
                    f"mapping keys must be str, got {type(key).__name__}",
                )
            result[key] = normalize_value(item, path=f"{path}.{key}")
        return result

    if isinstance(value, list | tuple):
        return [normalize_value(item, path=f"{path}[{index}]") for index, item in enumerate(value)]

    raise FieldValueError(path, f"unsupported type {type(value).__name__}")


def copy_value(value: JsonValue) -> JsonValue:
    """Deep-copy an already normalized value."""
    if isinstance(value, dict):
        return {key: copy_value(item) for key, item in value.items()}
    if isinstance(value, list):
        return [copy_value(item) for item in value]
    return value
