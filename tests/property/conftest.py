# tests/property/conftest.py
"""Shared Hypothesis strategies for property-based tests.

Strategy Categories:
- JSON-safe field values (what EventWriter.set() accepts)
- Field names and group names
- Filter outcomes and sample rates

Usage:
    from tests.property.conftest import json_values, outcomes
"""

from __future__ import annotations

from hypothesis import strategies as st

from widelog import FilterOutcome

# JSON-safe primitives (NaN/Infinity are rejected by set())
json_primitives = (
    st.none()
    | st.booleans()
    | st.integers(min_value=-(2**53 - 1), max_value=2**53 - 1)
    | st.floats(allow_nan=False, allow_infinity=False)
    | st.text(max_size=20)
)

json_values = st.recursive(
    json_primitives,
    lambda children: st.lists(children, max_size=4) | st.dictionaries(st.text(max_size=8), children, max_size=4),
    max_leaves=12,
)

field_names = st.text(min_size=1, max_size=12)

field_maps = st.dictionaries(field_names, json_values, max_size=6)

outcomes = st.sampled_from(list(FilterOutcome))

sample_rates = st.floats(min_value=0.0, max_value=1.0, allow_nan=False)
