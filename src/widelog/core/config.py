# src/widelog/core/config.py
"""Declarative emitter configuration.

Settings are validated with Pydantic and can be loaded from a YAML file with
environment variable overrides. They are turned into a running Emitter by
widelog.factory.create_emitter().

Example YAML:
    name: requests
    logging_directory: ./logs
    sample_rate: 0.1
    parameters:
      long-events: 500
      keep-at-startup: 100
    console: false
    sinks:
      - plugin: file
        options:
          path: ./logs/requests-errors.log
"""

import os
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, StrictBool, StrictFloat, StrictInt, StrictStr, ValidationError, field_validator

from widelog.contracts.errors import EmitterConfigurationError

ENV_PREFIX = "WIDELOG"

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")

ParameterValue = StrictBool | StrictInt | StrictFloat | StrictStr


class SinkSettings(BaseModel):
    """One additional sink, resolved by plugin name at emitter creation."""

    model_config = {"frozen": True, "extra": "forbid"}

    plugin: str = Field(min_length=1, description="Registered sink name (file, console, memory, ...)")
    options: dict[str, Any] = Field(
        default_factory=dict,
        description="Keyword arguments passed to the sink constructor",
    )


class EmitterSettings(BaseModel):
    """Emitter configuration.

    A FileSink at ``<logging_directory>/<name>.log`` is always created first
    when logging_directory is set; ``console`` adds a ConsoleSink; ``sinks``
    add further sinks in order.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    name: str = Field(min_length=1, description="Emitter name, emitted as emitter_name")
    logging_directory: Path | None = Field(
        default=None,
        description="Directory for the default <name>.log file sink",
    )
    sample_rate: float = Field(
        default=1.0,
        ge=0.0,
        le=1.0,
        description="Probability that a SAMPLE-classified event is kept",
    )
    parameters: dict[str, ParameterValue] = Field(
        default_factory=dict,
        description="Read-only values exposed to filter functions",
    )
    console: bool = Field(default=False, description="Also write events to stdout/stderr")
    sinks: tuple[SinkSettings, ...] = Field(default=(), description="Additional sinks, in write order")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        # The name doubles as the default log file name
        if "/" in v or "\\" in v:
            raise ValueError(f"emitter name must not contain path separators, got {v!r}")
        return v


def _expand_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively expand ${VAR} and ${VAR:-default} patterns in config values."""

    def _expand_string(value: str) -> str:
        def replacer(match: re.Match[str]) -> str:
            env_value = os.environ.get(match.group(1))
            if env_value is not None:
                return env_value
            if match.group(2) is not None:
                return match.group(2)
            # No env var and no default - keep original
            return match.group(0)

        return _ENV_VAR_PATTERN.sub(replacer, value)

    def _expand_value(value: Any) -> Any:
        if isinstance(value, str):
            return _expand_string(value)
        elif isinstance(value, dict):
            return {k: _expand_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [_expand_value(item) for item in value]
        else:
            return value

    return {k: _expand_value(v) for k, v in config.items()}


def _validation_error_to_config_error(error: ValidationError) -> EmitterConfigurationError:
    first = error.errors()[0]
    setting = ".".join(str(part) for part in first["loc"]) or "settings"
    return EmitterConfigurationError(setting, first["msg"])


def parse_settings(raw_config: dict[str, Any]) -> EmitterSettings:
    """Validate a raw configuration mapping.

    Raises:
        EmitterConfigurationError: If validation fails (chained from the
            pydantic ValidationError)
    """
    try:
        return EmitterSettings(**raw_config)
    except ValidationError as e:
        raise _validation_error_to_config_error(e) from e


def load_settings(config_path: Path) -> EmitterSettings:
    """Load settings from a YAML file with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (WIDELOG_*) - highest priority
    2. Config file
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: WIDELOG_SAMPLE_RATE=0.5, and
    WIDELOG_PARAMETERS__LONG_EVENTS for nested keys.

    Raises:
        FileNotFoundError: If the config file doesn't exist
        EmitterConfigurationError: If configuration fails validation
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix=ENV_PREFIX,
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    # Dynaconf returns uppercase top-level keys; Pydantic expects lowercase.
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k.lower(): v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}
    raw_config = _expand_env_vars(raw_config)

    return parse_settings(raw_config)
