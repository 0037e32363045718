# src/widelog/contracts/errors.py
"""Exceptions raised by widelog.

Only two situations surface an exception to the caller:
- Misconfiguration while assembling an emitter (EmitterConfigurationError)
- An unsupported field value passed to set() (FieldValueError)

Emission itself never raises: filter failures fail open and sink failures
are contained at the sink boundary.
"""


class WideLogError(Exception):
    """Base class for all widelog exceptions."""


class EmitterConfigurationError(WideLogError, ValueError):
    """Raised when an emitter configuration is invalid.

    Raised while the emitter is being configured (builder calls, settings
    validation, sink discovery), never while events are emitted.

    Attributes:
        setting: Name of the offending setting (e.g. "sample_rate")
        message: Human-readable error description
    """

    def __init__(self, setting: str, message: str) -> None:
        self.setting = setting
        self.message = message
        super().__init__(f"Invalid emitter setting '{setting}': {message}")


class SinkConfigurationError(EmitterConfigurationError):
    """Raised when a sink cannot be constructed (e.g. unwritable path).

    Attributes:
        sink_name: Registered name of the sink that failed
    """

    def __init__(self, sink_name: str, message: str) -> None:
        self.sink_name = sink_name
        super().__init__(f"sinks.{sink_name}", message)


class FieldValueError(WideLogError, TypeError):
    """Raised when a field value is not JSON-compatible.

    Attributes:
        path: Location of the offending value (field name, nested path)
        message: Human-readable error description
    """

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"Invalid field value at '{path}': {message}")
