# src/widelog/core/clock.py
"""Clock abstraction for testable event timing.

Writers stamp their start time at creation and their end time at close.
Both come from a Clock so that tests can control elapsed time exactly.

Production code uses SystemClock (the default).
Tests inject MockClock to control time advancement.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    """Abstract wall clock for event timestamps.

    Implementations:
    - SystemClock: Uses datetime.now(UTC) (production)
    - MockClock: Returns controllable times (testing)
    """

    def now(self) -> datetime:
        """Return the current instant as a timezone-aware UTC datetime."""
        ...


class SystemClock:
    """Production clock reading the system wall clock in UTC.

    The wall clock can be stepped backwards (NTP, manual adjustment). Event
    durations are therefore clamped at zero when computed, see EventGroup.
    """

    def now(self) -> datetime:
        """Return current UTC time."""
        return datetime.now(UTC)


class MockClock:
    """Controllable clock for deterministic testing.

    Example:
        clock = MockClock()
        emitter = Emitter.builder("requests").clock(clock).add_sink(sink).build()

        with emitter.begin() as event:
            clock.advance(0.25)

        assert sink.events[0].duration_ms == 250
    """

    def __init__(self, start: datetime | None = None) -> None:
        """Initialize mock clock at a given instant.

        Args:
            start: Initial instant (default 2025-01-01T00:00:00Z). Naive
                datetimes are interpreted as UTC.
        """
        if start is None:
            start = datetime(2025, 1, 1, tzinfo=UTC)
        elif start.tzinfo is None:
            start = start.replace(tzinfo=UTC)
        self._current = start

    def now(self) -> datetime:
        """Return current mock time."""
        return self._current

    def advance(self, seconds: float) -> None:
        """Advance mock time by specified seconds.

        Raises:
            ValueError: If seconds is negative.
        """
        if seconds < 0:
            raise ValueError(f"Cannot advance time by negative amount: {seconds}")
        self._current += timedelta(seconds=seconds)

    def set(self, value: datetime) -> None:
        """Set mock time to an absolute instant.

        Note:
            Unlike advance(), this can move time backwards, which is how tests
            simulate a wall-clock adjustment.
        """
        self._current = value if value.tzinfo is not None else value.replace(tzinfo=UTC)


# Default clock for production use
DEFAULT_CLOCK: Clock = SystemClock()
