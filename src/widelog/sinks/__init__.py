# src/widelog/sinks/__init__.py
"""Built-in wide event sinks.

Available sinks:
- FileSink: Append JSON lines to a file (name "file")
- ConsoleSink: Print JSON lines to stdout/stderr (name "console")
- InMemorySink: Keep events in memory for tests and embedding (name "memory")

Plugin registration:
    Sinks are registered via the widelog_get_sinks hook.
    BuiltinSinksPlugin in this module registers all built-in sinks.
"""

from widelog.contracts.protocols import SinkProtocol
from widelog.hookspecs import hookimpl
from widelog.sinks.console import ConsoleSink
from widelog.sinks.file import FileSink
from widelog.sinks.memory import InMemorySink


class BuiltinSinksPlugin:
    """Plugin that registers built-in sinks."""

    @hookimpl
    def widelog_get_sinks(self) -> list[type]:
        """Return built-in sink classes."""
        return [FileSink, ConsoleSink, InMemorySink]


__all__ = [
    "BuiltinSinksPlugin",
    "ConsoleSink",
    "FileSink",
    "InMemorySink",
    "SinkProtocol",
]
