# src/widelog/emitter.py
"""Emitter: the long-lived owner of wide event configuration.

An Emitter is explicitly constructed once (usually via EmitterBuilder) and
shared by every call site that produces wide events. It:
1. Hands out Events with per-emitter sequence ids (begin())
2. Runs the filter/sample decision when an Event is closed (emit())
3. Writes kept events to every sink, in registration order, with failure
   isolation (one sink failing never stops the next)
4. Tracks health metrics for monitoring

Thread Safety:
    One Emitter is shared across threads. Its mutable state is limited to
    the sequence counter, the random source used for sampling and the
    health metrics; each is guarded by its own lock. Sinks serialize their
    own writes.
"""

from __future__ import annotations

import itertools
import random
import threading
from collections.abc import Iterable, Mapping
from types import MappingProxyType, TracebackType
from typing import TYPE_CHECKING, Any, Self

import structlog

from widelog.contracts.enums import FilterOutcome
from widelog.contracts.values import JsonPrimitive
from widelog.core.clock import DEFAULT_CLOCK, Clock
from widelog.core.event import Event, FinishedEvent
from widelog.filtering import EmitDecision, classify, should_keep, validate_sample_rate

if TYPE_CHECKING:
    from pathlib import Path

    from widelog.builder import EmitterBuilder
    from widelog.contracts.protocols import FilterFunction, SinkProtocol

logger = structlog.get_logger(__name__)


class Emitter:
    """Creates wide events and routes finished ones to sinks.

    Emit pipeline, invoked once per closed Event:
    - outcome = filter_function(emitter, event), or KEEP when no filter is set
    - DISCARD: drop; SAMPLE: keep with probability sample_rate; KEEP: keep
    - kept events are written to every sink in order

    Example:
        >>> emitter = Emitter.builder("requests").add_sink(InMemorySink()).build()
        >>> with emitter.begin() as event:
        ...     event.set("route", "/health")
        >>> emitter.health_metrics["events_kept"]
        1
    """

    def __init__(
        self,
        name: str,
        *,
        parameters: Mapping[str, JsonPrimitive] | None = None,
        sample_rate: float = 1.0,
        filter_function: FilterFunction | None = None,
        sinks: Iterable[SinkProtocol] = (),
        clock: Clock = DEFAULT_CLOCK,
        random_source: random.Random | None = None,
    ) -> None:
        """Initialize the Emitter.

        Prefer EmitterBuilder, which validates each option as it is set.

        Args:
            name: Emitter name, emitted as ``emitter_name`` on every event
            parameters: Read-only values exposed to the filter function
            sample_rate: Probability in [0.0, 1.0] of keeping a SAMPLE event
            filter_function: Optional (emitter, event) -> FilterOutcome
            sinks: Output destinations, written in this order
            clock: Time source for event start/end times
            random_source: Random generator for sampling (seedable in tests)

        Raises:
            EmitterConfigurationError: If sample_rate is outside [0.0, 1.0]
        """
        self._name = name
        self._parameters: Mapping[str, JsonPrimitive] = MappingProxyType(dict(parameters or {}))
        self._sample_rate = validate_sample_rate(sample_rate)
        self._filter_function = filter_function
        self._sinks: tuple[SinkProtocol, ...] = tuple(sinks)
        self._clock = clock

        # Sequence ids: next(count) is not atomic across threads
        self._sequence = itertools.count()
        self._sequence_lock = threading.Lock()

        self._random = random_source if random_source is not None else random.Random()
        self._random_lock = threading.Lock()

        # Health metrics
        self._metrics_lock = threading.Lock()
        self._events_started = 0
        self._events_kept = 0
        self._events_discarded = 0
        self._events_sampled_out = 0
        self._events_dropped_after_close = 0
        self._filter_failures = 0
        self._sink_failures: dict[str, int] = {}

        self._closed = False

    @staticmethod
    def builder(name: str, logging_directory: Path | str | None = None) -> EmitterBuilder:
        """Start configuring an emitter. See EmitterBuilder."""
        from widelog.builder import EmitterBuilder

        return EmitterBuilder(name, logging_directory)

    # ------------------------------------------------------------------
    # Configuration (read-only)
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def parameters(self) -> Mapping[str, JsonPrimitive]:
        """Read-only parameter bag for filter functions."""
        return self._parameters

    @property
    def sample_rate(self) -> float:
        return self._sample_rate

    @property
    def filter_function(self) -> FilterFunction | None:
        return self._filter_function

    @property
    def sinks(self) -> tuple[SinkProtocol, ...]:
        return self._sinks

    @property
    def clock(self) -> Clock:
        return self._clock

    # ------------------------------------------------------------------
    # Event lifecycle
    # ------------------------------------------------------------------

    def begin(self, event_type: str | None = None) -> Event:
        """Open a new wide event.

        The event's start time is now; it is emitted when closed.

        Args:
            event_type: Optional type tag, emitted as ``event_type``
        """
        event = Event(
            self,
            sequence_id=self._next_sequence_id(),
            event_type=event_type,
            clock=self._clock,
        )
        with self._metrics_lock:
            self._events_started += 1
        return event

    def _next_sequence_id(self) -> int:
        with self._sequence_lock:
            return next(self._sequence)

    def _draw(self) -> float:
        with self._random_lock:
            return self._random.random()

    def emit(self, event: FinishedEvent) -> EmitDecision:
        """Run the filter/sample decision and write the event if kept.

        Called by Event.close(); never raises.

        Args:
            event: The finished event

        Returns:
            The decision taken for this event
        """
        outcome, filter_failed = classify(self._filter_function, self, event)
        kept = should_keep(outcome, self._sample_rate, self._draw)

        with self._metrics_lock:
            if filter_failed:
                self._filter_failures += 1
            if not kept:
                if outcome == FilterOutcome.DISCARD:
                    self._events_discarded += 1
                else:
                    self._events_sampled_out += 1
            elif self._closed:
                self._events_dropped_after_close += 1

        if kept and self._closed:
            logger.warning(
                "Wide event emitted after emitter close, dropping",
                emitter=self._name,
                sequence_id=event.sequence_id,
            )
            return EmitDecision(outcome=outcome, kept=False, filter_failed=filter_failed)

        if kept:
            self._dispatch_to_sinks(event)
            with self._metrics_lock:
                self._events_kept += 1

        return EmitDecision(outcome=outcome, kept=kept, filter_failed=filter_failed)

    def _dispatch_to_sinks(self, event: FinishedEvent) -> None:
        """Write to all sinks with failure isolation.

        Sinks must not raise. A sink that does is counted and reported, and
        the remaining sinks are still attempted.
        """
        for sink in self._sinks:
            try:
                sink.write(event)
            except Exception as e:
                sink_name = _sink_name(sink)
                with self._metrics_lock:
                    self._sink_failures[sink_name] = self._sink_failures.get(sink_name, 0) + 1
                logger.warning(
                    "Wide event sink failed",
                    emitter=self._name,
                    sink=sink_name,
                    sequence_id=event.sequence_id,
                    error=str(e),
                )

    # ------------------------------------------------------------------
    # Monitoring and shutdown
    # ------------------------------------------------------------------

    @property
    def health_metrics(self) -> dict[str, Any]:
        """Return a snapshot of emitter health metrics.

        - events_started: Events handed out by begin()
        - events_kept: Events written to the sinks
        - events_discarded: Events dropped by a DISCARD outcome
        - events_sampled_out: SAMPLE events not selected by sampling
        - events_dropped_after_close: Kept events that arrived after close()
        - filter_failures: Filter calls that raised or returned an invalid value
        - sink_failures: Per-sink count of writes that raised
        """
        with self._metrics_lock:
            return {
                "events_started": self._events_started,
                "events_kept": self._events_kept,
                "events_discarded": self._events_discarded,
                "events_sampled_out": self._events_sampled_out,
                "events_dropped_after_close": self._events_dropped_after_close,
                "filter_failures": self._filter_failures,
                "sink_failures": self._sink_failures.copy(),
            }

    @property
    def is_closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Close all sinks. Idempotent; close failures are logged, not raised."""
        if self._closed:
            return
        self._closed = True

        logger.info("Wide event emitter closing", emitter=self._name, **self.health_metrics)
        for sink in self._sinks:
            try:
                sink.close()
            except Exception as e:
                logger.warning(
                    "Wide event sink close failed",
                    emitter=self._name,
                    sink=_sink_name(sink),
                    error=str(e),
                )

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()


def _sink_name(sink: object) -> str:
    name = getattr(sink, "name", None)
    return name if isinstance(name, str) else type(sink).__name__
