# src/widelog/contracts/enums.py
"""Enumerations shared across widelog."""

from __future__ import annotations

from enum import StrEnum


class FilterOutcome(StrEnum):
    """Decision returned by a filter function for a finished event.

    Values:
        KEEP: Always persist the event
        SAMPLE: Persist with probability equal to the emitter's sample rate
        DISCARD: Never persist the event

    Outcomes are totally ordered by restrictiveness (KEEP < SAMPLE < DISCARD),
    which lets several independent filter stages be combined.
    """

    KEEP = "keep"
    SAMPLE = "sample"
    DISCARD = "discard"

    @property
    def restrictiveness(self) -> int:
        """Rank of this outcome: 0 for KEEP, 1 for SAMPLE, 2 for DISCARD."""
        return _RESTRICTIVENESS[self]

    def most_restrictive(self, other: FilterOutcome) -> FilterOutcome:
        """Return whichever outcome is closer to DISCARD."""
        return self if self.restrictiveness >= other.restrictiveness else other

    def least_restrictive(self, other: FilterOutcome) -> FilterOutcome:
        """Return whichever outcome is closer to KEEP."""
        return self if self.restrictiveness <= other.restrictiveness else other


_RESTRICTIVENESS: dict[FilterOutcome, int] = {
    FilterOutcome.KEEP: 0,
    FilterOutcome.SAMPLE: 1,
    FilterOutcome.DISCARD: 2,
}


def most_restrictive(a: FilterOutcome, b: FilterOutcome) -> FilterOutcome:
    """Combine two outcomes keeping the stricter one (DISCARD > SAMPLE > KEEP)."""
    return a.most_restrictive(b)


def least_restrictive(a: FilterOutcome, b: FilterOutcome) -> FilterOutcome:
    """Combine two outcomes keeping the looser one (KEEP > SAMPLE > DISCARD)."""
    return a.least_restrictive(b)


def combine_most_restrictive(*outcomes: FilterOutcome) -> FilterOutcome:
    """Fold outcomes with most_restrictive. KEEP is the identity for no input."""
    result = FilterOutcome.KEEP
    for outcome in outcomes:
        result = result.most_restrictive(outcome)
    return result


def combine_least_restrictive(*outcomes: FilterOutcome) -> FilterOutcome:
    """Fold outcomes with least_restrictive. DISCARD is the identity for no input."""
    result = FilterOutcome.DISCARD
    for outcome in outcomes:
        result = result.least_restrictive(outcome)
    return result
