# src/widelog/sinks/file.py
"""Append-only JSON lines file sink."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

import structlog

from widelog.contracts.errors import SinkConfigurationError
from widelog.core.serialization import encode_event

if TYPE_CHECKING:
    from widelog.core.event import FinishedEvent

logger = structlog.get_logger(__name__)


class FileSink:
    """Append each kept event to a file as one JSON line.

    The file is opened (and its parent directories created) at construction
    time, so an unwritable path is reported while the emitter is being
    configured rather than on the first event.

    Each write is one ``write(line + "\\n")`` followed by ``flush()`` under a
    lock, so concurrent events never interleave partial lines. Write
    failures (disk full, closed file) are dropped silently: a logging sink
    must never fail the request it is logging.

    Example configuration:
        sinks:
          - plugin: file
            options:
              path: ./logs/requests.log
    """

    _name = "file"

    def __init__(self, path: Path | str) -> None:
        """Open ``path`` for appending.

        Raises:
            SinkConfigurationError: If the directory or file cannot be created
        """
        self._path = Path(path)
        self._lock = threading.Lock()
        self._closed = False
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._stream: TextIO = self._path.open("a", encoding="utf-8")
        except OSError as e:
            raise SinkConfigurationError(
                self._name,
                f"Failed to open {self._path} for appending: {e}",
            ) from e
        logger.debug("File sink opened", path=str(self._path))

    @property
    def name(self) -> str:
        return self._name

    @property
    def path(self) -> Path:
        return self._path

    def write(self, event: FinishedEvent) -> None:
        """Append the event. Must not raise."""
        with self._lock:
            try:
                self._stream.write(encode_event(event) + "\n")
                self._stream.flush()
            except (OSError, ValueError):
                # Best-effort: the event is lost for this sink only
                pass

    def close(self) -> None:
        """Close the file. Safe to call multiple times."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._stream.close()
