# src/widelog/hookspecs.py
"""pluggy hook specifications for wide event sinks.

Sink plugins implement these hooks to register sink classes by name, so
that settings can refer to them (``sinks: [{plugin: my_sink, options: ...}]``).
create_emitter() calls these hooks to discover available sinks.

Usage (implementing a sink plugin):
    from widelog.hookspecs import hookimpl

    class MySinkPlugin:
        @hookimpl
        def widelog_get_sinks(self):
            return [MySink]
"""

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from widelog.contracts.protocols import SinkProtocol

PROJECT_NAME = "widelog"

# Hook specification marker
hookspec = pluggy.HookspecMarker(PROJECT_NAME)

# Hook implementation marker (for sink plugins to use)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class WideLogSinkSpec:
    """Hook specifications for sink plugins."""

    @hookspec
    def widelog_get_sinks(self) -> list[type["SinkProtocol"]]:  # type: ignore[empty-body]
        """Return sink classes.

        Each class must expose a class-level ``_name`` (the name used in
        settings) and accept its settings ``options`` as keyword arguments.

        Returns:
            List of sink classes (not instances) that implement SinkProtocol
        """
