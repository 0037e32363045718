# src/widelog/builder.py
"""Fluent assembly of an Emitter.

Every option is validated when it is set, so an invalid configuration fails
at the call that introduced it and build() can never produce a
partially-valid emitter. Log files are only opened by build(); a builder
abandoned after a failed option holds no open file.

Example:
    emitter = (
        Emitter.builder("requests", Path("logs"))
        .parameter("long-events", 500)
        .sample_rate(0.1)
        .filter(keep_errors_and_slow_requests)
        .add_console_sink()
        .build()
    )
"""

from __future__ import annotations

import random
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any, Self

from widelog.contracts.errors import EmitterConfigurationError, SinkConfigurationError
from widelog.contracts.protocols import SinkProtocol
from widelog.contracts.values import JsonPrimitive
from widelog.core.clock import DEFAULT_CLOCK, Clock
from widelog.emitter import Emitter
from widelog.filtering import validate_sample_rate
from widelog.sinks.console import ConsoleSink
from widelog.sinks.file import FileSink

if TYPE_CHECKING:
    from widelog.contracts.protocols import FilterFunction


class EmitterBuilder:
    """Collects emitter options and produces an immutable Emitter.

    When ``logging_directory`` is given, a FileSink writing to
    ``<logging_directory>/<name>.log`` is registered first.

    File sinks are kept as paths until build(), which opens them in
    registration order. Directories are still created when the sink is
    added, so an unusable location fails at that call.
    """

    def __init__(self, name: str, logging_directory: Path | str | None = None) -> None:
        """Start a configuration.

        Raises:
            EmitterConfigurationError: If the name is empty or not a str
            SinkConfigurationError: If the default log directory cannot be created
        """
        if not isinstance(name, str) or not name:
            raise EmitterConfigurationError("name", f"must be a non-empty string, got {name!r}")
        self._name = name
        self._parameters: dict[str, JsonPrimitive] = {}
        self._sample_rate = 1.0
        self._filter_function: FilterFunction | None = None
        self._sinks: list[SinkProtocol | Path] = []
        self._clock: Clock = DEFAULT_CLOCK
        self._random_source: random.Random | None = None

        if logging_directory is not None:
            self.add_file_sink(Path(logging_directory) / f"{name}.log")

    def parameter(self, name: str, value: Any) -> Self:
        """Add a named parameter (str, int, float or bool) for filter functions."""
        if not isinstance(name, str) or not name:
            raise EmitterConfigurationError("parameters", f"parameter names must be non-empty strings, got {name!r}")
        if value is None or not isinstance(value, str | int | float | bool):
            raise EmitterConfigurationError(
                f"parameters.{name}",
                f"must be a str, int, float or bool, got {type(value).__name__}",
            )
        self._parameters[name] = value
        return self

    def parameters(self, values: Mapping[str, Any]) -> Self:
        """Add several parameters at once."""
        for name, value in values.items():
            self.parameter(name, value)
        return self

    def sample_rate(self, rate: float) -> Self:
        """Set the probability that a SAMPLE event is kept.

        Raises:
            EmitterConfigurationError: If rate is not in [0.0, 1.0]
        """
        self._sample_rate = validate_sample_rate(rate)
        return self

    def filter(self, filter_function: FilterFunction | None) -> Self:
        """Set the filter function (None removes it: every event is KEEP)."""
        if filter_function is not None and not callable(filter_function):
            raise EmitterConfigurationError(
                "filter",
                f"must be callable, got {type(filter_function).__name__}",
            )
        self._filter_function = filter_function
        return self

    def add_file_sink(self, path: Path | str) -> Self:
        """Append events to ``path`` once the emitter is built.

        Parent directories are created now; the file itself is opened by
        build().

        Raises:
            SinkConfigurationError: If the parent directory cannot be created
        """
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise SinkConfigurationError("file", f"Failed to create directory for {path}: {e}") from e
        self._sinks.append(path)
        return self

    def add_console_sink(self) -> Self:
        """Print events to stdout (errors to stderr)."""
        self._sinks.append(ConsoleSink())
        return self

    def add_sink(self, sink: SinkProtocol) -> Self:
        """Register a custom sink.

        Raises:
            EmitterConfigurationError: If the object does not implement SinkProtocol
        """
        if not isinstance(sink, SinkProtocol):
            raise EmitterConfigurationError(
                "sinks",
                f"{type(sink).__name__} does not implement SinkProtocol (name, write, close)",
            )
        self._sinks.append(sink)
        return self

    def clock(self, clock: Clock) -> Self:
        """Override the time source (tests use MockClock)."""
        self._clock = clock
        return self

    def random_source(self, rng: random.Random) -> Self:
        """Override the random generator used for sampling."""
        self._random_source = rng
        return self

    def build(self) -> Emitter:
        """Create the Emitter, opening its file sinks.

        Raises:
            SinkConfigurationError: If a log file cannot be opened; files
                already opened by this call are closed again
        """
        sinks: list[SinkProtocol] = []
        opened: list[FileSink] = []
        try:
            for entry in self._sinks:
                if isinstance(entry, Path):
                    file_sink = FileSink(entry)
                    opened.append(file_sink)
                    sinks.append(file_sink)
                else:
                    sinks.append(entry)
        except SinkConfigurationError:
            for file_sink in opened:
                file_sink.close()
            raise
        return Emitter(
            self._name,
            parameters=self._parameters,
            sample_rate=self._sample_rate,
            filter_function=self._filter_function,
            sinks=sinks,
            clock=self._clock,
            random_source=self._random_source,
        )
