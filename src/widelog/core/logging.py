# src/widelog/core/logging.py
"""Diagnostic logging for widelog.

widelog's own diagnostics (a filter that raised, a custom sink that broke
its no-raise contract, final emitter metrics on close) go through structlog
loggers named after their modules, all under the ``widelog`` namespace.
This is a side channel: wide events themselves are written by sinks, never
through these loggers.

configure_logging() is optional and only touches the ``widelog`` stdlib
logger. The root logger and any handlers the application installed are
left alone.
"""

import logging
import sys
from typing import Any, TextIO

import structlog
from structlog.stdlib import ProcessorFormatter

LOGGER_NAMESPACE = "widelog"

_SHARED_PROCESSORS: list[Any] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.StackInfoRenderer(),
]


def _is_widelog_handler(handler: logging.Handler) -> bool:
    return getattr(handler, "_widelog_diagnostics", False)


def configure_logging(
    *,
    json_output: bool = False,
    level: str = "INFO",
    stream: TextIO | None = None,
) -> logging.Handler:
    """Send widelog diagnostics to ``stream``.

    A single handler is attached to the ``widelog`` logger, with propagation
    to the root logger turned off so records are not printed twice. Calling
    it again replaces that handler. If the application has already
    configured structlog, its processor chain is kept; otherwise structlog is
    set up to hand records to stdlib logging, where ProcessorFormatter
    renders structlog and stdlib records alike.

    Args:
        json_output: One JSON object per line instead of console rendering.
        level: Minimum level for widelog diagnostics (DEBUG, INFO, WARNING, ERROR).
        stream: Destination stream (default sys.stderr, keeping diagnostics
            apart from a ConsoleSink writing events to stdout).

    Returns:
        The installed handler.
    """
    log_level = logging.getLevelNamesMapping()[level.upper()]

    if json_output:
        renderer: list[Any] = [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        renderer = [structlog.dev.ConsoleRenderer(colors=False)]

    if not structlog.is_configured():
        structlog.configure(
            processors=[*_SHARED_PROCESSORS, ProcessorFormatter.wrap_for_formatter],
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            # Caching disabled so tests can reconfigure
            cache_logger_on_first_use=False,
        )

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(
        ProcessorFormatter(
            processors=[ProcessorFormatter.remove_processors_meta, *renderer],
            foreign_pre_chain=_SHARED_PROCESSORS,
        )
    )
    handler._widelog_diagnostics = True  # type: ignore[attr-defined]

    namespace_logger = logging.getLogger(LOGGER_NAMESPACE)
    for previous in [h for h in namespace_logger.handlers if _is_widelog_handler(h)]:
        namespace_logger.removeHandler(previous)
    namespace_logger.addHandler(handler)
    namespace_logger.setLevel(log_level)
    namespace_logger.propagate = False
    return handler


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a bound logger inside the ``widelog`` namespace.

    Names outside the namespace are nested under it, so ``get_logger("myplugin")``
    logs as ``widelog.myplugin``.
    """
    if name != LOGGER_NAMESPACE and not name.startswith(f"{LOGGER_NAMESPACE}."):
        name = f"{LOGGER_NAMESPACE}.{name}"
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger
