# src/widelog/contracts/protocols.py
"""Protocol definitions for pluggable emitter behaviour.

Two seams are pluggable:
- Sinks: destinations that durably write or forward a finished event
- Filter functions: decide KEEP/SAMPLE/DISCARD for a finished event

Both are plain structural contracts; implementations are ordinary objects
or callables, not subclasses.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from widelog.contracts.enums import FilterOutcome
    from widelog.core.event import FinishedEvent
    from widelog.emitter import Emitter


@runtime_checkable
class SinkProtocol(Protocol):
    """Protocol for wide event sinks.

    Lifecycle:
        1. Construction: sink acquires its resources (open file, stream)
        2. Operation: write() called once per kept event
        3. Shutdown: close() called by Emitter.close()

    Error handling:
        - Construction MUST raise SinkConfigurationError on failure
        - write() MUST NOT raise - logging must never break the caller
        - close() MUST be idempotent - safe to call multiple times

    Thread Safety:
        write() may be called concurrently from many threads (one emitter
        shared across request handlers). A sink writing to one shared
        resource must serialize its own writes so lines never interleave.
    """

    @property
    def name(self) -> str:
        """Sink name, used in diagnostics and in settings (``plugin: file``)."""
        ...

    def write(self, event: FinishedEvent) -> None:
        """Write one finished event. Must not raise."""
        ...

    def close(self) -> None:
        """Release resources held by the sink. Must be idempotent."""
        ...


class FilterFunction(Protocol):
    """Callable deciding whether a finished event is persisted.

    Receives the emitter (for its ``parameters``) and the finished event.
    Should be pure; it may be called concurrently from many threads.
    """

    def __call__(self, emitter: Emitter, event: FinishedEvent) -> FilterOutcome: ...
