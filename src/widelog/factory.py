# src/widelog/factory.py
"""Factory functions for creating an Emitter from settings.

This module provides the glue between configuration (EmitterSettings) and
the runtime Emitter. It handles:
1. Discovering sink classes via pluggy hooks
2. Instantiating the sinks named in settings
3. Assembling the Emitter through EmitterBuilder

Usage:
    from widelog.core.config import load_settings
    from widelog.factory import create_emitter

    settings = load_settings(Path("widelog.yaml"))
    emitter = create_emitter(settings, filter_function=my_filter)
"""

from __future__ import annotations

import random
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

import pluggy
import structlog

from widelog.builder import EmitterBuilder
from widelog.contracts.errors import EmitterConfigurationError, SinkConfigurationError
from widelog.contracts.protocols import SinkProtocol
from widelog.core.clock import Clock
from widelog.core.config import EmitterSettings
from widelog.emitter import Emitter
from widelog.hookspecs import PROJECT_NAME, WideLogSinkSpec
from widelog.sinks import BuiltinSinksPlugin

if TYPE_CHECKING:
    from widelog.contracts.protocols import FilterFunction

logger = structlog.get_logger(__name__)


def _resolve_sink_name(sink_class: Any) -> str:
    """Resolve a sink's registered name from its class-level ``_name``.

    Raises:
        EmitterConfigurationError: If the class has no usable ``_name``
    """
    class_name = getattr(sink_class, "__name__", repr(sink_class))
    name_hint = getattr(sink_class, "_name", None)
    if type(name_hint) is str and name_hint != "":
        return name_hint
    raise EmitterConfigurationError(
        "sink_plugins",
        f"Sink class {class_name} must define a non-empty string class attribute _name, got {name_hint!r}",
    )


def discover_sink_registry(sink_plugins: Iterable[Any] = ()) -> dict[str, type[SinkProtocol]]:
    """Discover sink classes via pluggy hooks.

    Registers built-in sinks plus any additional plugin objects, then calls
    ``widelog_get_sinks`` hooks to build the name->class registry.

    Args:
        sink_plugins: Additional plugin objects implementing ``widelog_get_sinks``

    Returns:
        Mapping of sink name to sink class

    Raises:
        EmitterConfigurationError: If plugin registration fails, a hook returns
            something other than an iterable of classes, or two sinks share a name
    """
    plugin_manager = pluggy.PluginManager(PROJECT_NAME)
    plugin_manager.add_hookspecs(WideLogSinkSpec)

    for plugin in [BuiltinSinksPlugin(), *list(sink_plugins)]:
        try:
            plugin_manager.register(plugin)
            plugin_manager.check_pending()
        except (pluggy.PluginValidationError, ValueError) as e:
            # PluginValidationError: hook spec mismatch
            # ValueError: plugin object or name already registered
            if isinstance(e, pluggy.PluginValidationError):
                plugin_manager.unregister(plugin=plugin)
            raise EmitterConfigurationError(
                "sink_plugins",
                f"Invalid sink plugin {type(plugin).__name__}: {e}",
            ) from e

    registry: dict[str, type[SinkProtocol]] = {}
    for hook_impl in plugin_manager.hook.widelog_get_sinks.get_hookimpls():
        plugin_name = type(hook_impl.plugin).__name__
        try:
            sink_classes = hook_impl.function()
        except Exception as e:
            raise EmitterConfigurationError(
                "sink_plugins",
                f"Sink plugin {plugin_name} failed in widelog_get_sinks: {e}",
            ) from e

        if sink_classes is None or type(sink_classes) in (str, bytes):
            raise EmitterConfigurationError(
                "sink_plugins",
                f"widelog_get_sinks in plugin {plugin_name} returned {type(sink_classes).__name__}; expected iterable of sink classes",
            )
        try:
            sink_iter = iter(sink_classes)
        except TypeError as e:
            raise EmitterConfigurationError(
                "sink_plugins",
                f"widelog_get_sinks in plugin {plugin_name} returned {type(sink_classes).__name__}; expected iterable of sink classes",
            ) from e

        for sink_class in sink_iter:
            sink_name = _resolve_sink_name(sink_class)
            if sink_name in registry:
                raise EmitterConfigurationError(
                    "sink_plugins",
                    f"Duplicate sink name '{sink_name}' discovered: {registry[sink_name].__name__} and {sink_class.__name__}",
                )
            registry[sink_name] = sink_class

    return registry


def _instantiate_sink(sink_name: str, sink_class: type[SinkProtocol], options: dict[str, Any]) -> SinkProtocol:
    try:
        sink = sink_class(**options)
    except EmitterConfigurationError:
        raise
    except (TypeError, ValueError, OSError) as e:
        raise SinkConfigurationError(sink_name, f"Failed to create sink: {e}") from e
    if not isinstance(sink, SinkProtocol):
        raise SinkConfigurationError(sink_name, f"{sink_class.__name__} does not implement SinkProtocol")
    return sink


def _close_sinks(sinks: list[SinkProtocol]) -> None:
    """Close sinks created for an emitter whose configuration failed."""
    for sink in sinks:
        try:
            sink.close()
        except Exception as e:
            logger.warning("sink_close_failed", sink=sink.name, error=str(e))


def create_emitter(
    settings: EmitterSettings,
    *,
    filter_function: FilterFunction | None = None,
    sink_plugins: Iterable[Any] = (),
    clock: Clock | None = None,
    random_source: random.Random | None = None,
) -> Emitter:
    """Create an Emitter from settings.

    Sink order: the default ``<logging_directory>/<name>.log`` file sink (if a
    directory is configured), then the console sink (if enabled), then the
    sinks listed in settings.

    Args:
        settings: Validated emitter settings
        filter_function: Optional filter (functions are not expressible in YAML)
        sink_plugins: Additional plugin objects providing ``widelog_get_sinks``
        clock: Optional time source override
        random_source: Optional random generator for sampling

    Returns:
        A ready-to-use Emitter

    Raises:
        EmitterConfigurationError: If sink discovery fails, an unknown sink is
            configured, or a sink cannot be created
    """
    sink_registry = discover_sink_registry(sink_plugins)

    builder = EmitterBuilder(settings.name, settings.logging_directory)
    builder.parameters(settings.parameters).sample_rate(settings.sample_rate).filter(filter_function)
    if settings.console:
        builder.add_console_sink()

    # Resolve every plugin name before any sink is created
    sink_classes: list[type[SinkProtocol]] = []
    for sink_settings in settings.sinks:
        try:
            sink_classes.append(sink_registry[sink_settings.plugin])
        except KeyError:
            raise EmitterConfigurationError(
                "sinks",
                f"Unknown sink '{sink_settings.plugin}'. Available sinks: {sorted(sink_registry.keys())}",
            ) from None

    if clock is not None:
        builder.clock(clock)
    if random_source is not None:
        builder.random_source(random_source)

    created: list[SinkProtocol] = []
    try:
        for sink_settings, sink_class in zip(settings.sinks, sink_classes, strict=True):
            sink = _instantiate_sink(sink_settings.plugin, sink_class, dict(sink_settings.options))
            created.append(sink)
            builder.add_sink(sink)
            logger.debug(
                "sink_configured",
                emitter=settings.name,
                sink=sink_settings.plugin,
                options_keys=list(sink_settings.options.keys()),
            )
        emitter = builder.build()
    except EmitterConfigurationError:
        _close_sinks(created)
        raise

    if not emitter.sinks:
        logger.warning(
            "emitter_without_sinks",
            emitter=settings.name,
            message="Emitter created with no sinks; events will be filtered and dropped",
        )
    return emitter
