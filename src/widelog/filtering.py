# src/widelog/filtering.py
"""Filter and sample decisions for finished events.

This module is the single source of truth for deciding whether a finished
event is persisted:

- The filter function (if any) classifies the event as KEEP, SAMPLE or DISCARD
- KEEP: always persisted, regardless of sample rate
- DISCARD: never persisted, regardless of sample rate
- SAMPLE: persisted iff a uniform draw r in [0, 1) satisfies r <= sample_rate

The boundary is inclusive: a sample rate of 1.0 keeps every SAMPLE event and
a rate of 0.0 keeps one only when the draw is exactly 0.0 (approximately
never).

A filter that raises, or returns something that is not a FilterOutcome,
fails open to KEEP: a buggy filter must not silently drop events.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import structlog

from widelog.contracts.enums import FilterOutcome
from widelog.contracts.errors import EmitterConfigurationError

if TYPE_CHECKING:
    from widelog.contracts.protocols import FilterFunction
    from widelog.core.event import FinishedEvent
    from widelog.emitter import Emitter

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class EmitDecision:
    """Result of running the filter/sample pipeline for one event.

    Attributes:
        outcome: Outcome returned by the filter (KEEP when none is configured
            or when the filter failed)
        kept: Whether the event was handed to the sinks
        filter_failed: True when the filter raised or returned an invalid value
    """

    outcome: FilterOutcome
    kept: bool
    filter_failed: bool = False


def validate_sample_rate(value: Any) -> float:
    """Validate a sample rate, returning it as a float.

    Raises:
        EmitterConfigurationError: If the value is not a real number in [0.0, 1.0]
    """
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise EmitterConfigurationError(
            "sample_rate",
            f"must be a number, got {type(value).__name__}",
        )
    rate = float(value)
    if math.isnan(rate) or rate < 0.0 or rate > 1.0:
        raise EmitterConfigurationError(
            "sample_rate",
            f"must be between 0.0 and 1.0, got {value!r}",
        )
    return rate


def classify(
    filter_function: FilterFunction | None,
    emitter: Emitter,
    event: FinishedEvent,
) -> tuple[FilterOutcome, bool]:
    """Run the filter function, failing open to KEEP.

    Returns:
        (outcome, filter_failed)
    """
    if filter_function is None:
        return FilterOutcome.KEEP, False

    try:
        outcome = filter_function(emitter, event)
    except Exception as e:
        logger.warning(
            "Wide event filter failed, keeping event",
            emitter=emitter.name,
            sequence_id=event.sequence_id,
            error_type=type(e).__name__,
            error=str(e),
        )
        return FilterOutcome.KEEP, True

    if not isinstance(outcome, FilterOutcome):
        logger.warning(
            "Wide event filter returned an invalid outcome, keeping event",
            emitter=emitter.name,
            sequence_id=event.sequence_id,
            returned_type=type(outcome).__name__,
        )
        return FilterOutcome.KEEP, True

    return outcome, False


def should_keep(outcome: FilterOutcome, sample_rate: float, draw: Callable[[], float]) -> bool:
    """Decide whether an event with the given outcome is persisted.

    ``draw`` is only called for SAMPLE outcomes, so KEEP/DISCARD never
    consume randomness.

    Example:
        >>> should_keep(FilterOutcome.KEEP, 0.0, draw=lambda: 0.5)
        True
        >>> should_keep(FilterOutcome.SAMPLE, 0.5, draw=lambda: 0.5)
        True
        >>> should_keep(FilterOutcome.SAMPLE, 0.5, draw=lambda: 0.75)
        False
    """
    match outcome:
        case FilterOutcome.DISCARD:
            return False
        case FilterOutcome.SAMPLE:
            return draw() <= sample_rate
        case _:
            return True
