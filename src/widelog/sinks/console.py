# src/widelog/sinks/console.py
"""Console sink for wide events.

Writes each kept event as one JSON line: events carrying an error go to the
error stream, all others to the output stream. Primarily used for local
development and container platforms that collect stdout/stderr.
"""

from __future__ import annotations

import sys
import threading
from typing import TYPE_CHECKING, Literal, TextIO, TypeGuard

from widelog.contracts.errors import SinkConfigurationError
from widelog.core.serialization import encode_event

if TYPE_CHECKING:
    from widelog.core.event import FinishedEvent


def _is_valid_stream_name(v: str) -> TypeGuard[Literal["stdout", "stderr"]]:
    return v in {"stdout", "stderr"}


class ConsoleSink:
    """Write events to stdout, or to stderr when they carry an error.

    Streams default to ``sys.stdout``/``sys.stderr`` looked up at write time,
    so output redirection (and pytest's capsys) is honoured.

    Configuration options:
        error_output: Stream for error-bearing events - "stderr" (default) or
            "stdout" to send everything to one stream

    Example configuration:
        sinks:
          - plugin: console
            options:
              error_output: stdout
    """

    _name = "console"

    _VALID_OUTPUTS: frozenset[str] = frozenset({"stdout", "stderr"})

    def __init__(
        self,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
        *,
        error_output: str = "stderr",
    ) -> None:
        """Initialize the sink.

        Raises:
            SinkConfigurationError: If error_output is not "stdout" or "stderr"
        """
        if not isinstance(error_output, str):
            raise SinkConfigurationError(
                self._name,
                f"'error_output' must be a string, got {type(error_output).__name__}",
            )
        if not _is_valid_stream_name(error_output):
            raise SinkConfigurationError(
                self._name,
                f"Invalid error_output '{error_output}'. Must be one of: {', '.join(sorted(self._VALID_OUTPUTS))}",
            )
        self._stdout = stdout
        self._stderr = stderr
        self._error_output: Literal["stdout", "stderr"] = error_output
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return self._name

    def _stream_for(self, event: FinishedEvent) -> TextIO:
        if event.has_error and self._error_output == "stderr":
            return self._stderr if self._stderr is not None else sys.stderr
        return self._stdout if self._stdout is not None else sys.stdout

    def write(self, event: FinishedEvent) -> None:
        """Print the event. Must not raise."""
        try:
            line = encode_event(event)
            stream = self._stream_for(event)
            with self._lock:
                stream.write(line + "\n")
                stream.flush()
        except (OSError, ValueError):
            pass

    def close(self) -> None:
        """No-op: the console sink does not own its streams."""
        pass
