import contextvars
from typing import FrozenSet, Literal

import msgspec

from syncpoint.logging.models import LogLevel, LogLevelName


LogOutput = Literal['stdout', 'stderr']


class LoggingSettings(msgspec.Struct, frozen=True):
    level: LogLevel = LogLevel.INFO
    output: LogOutput = 'stdout'
    directory: str | None = None
    disabled: FrozenSet[str] = frozenset()


_settings: contextvars.ContextVar[LoggingSettings] = contextvars.ContextVar(
    "_syncpoint_logging_settings",
    default=LoggingSettings(),
)


class LoggingConfig:
    """
    Logging settings shared by every Logger. They live in a context
    variable: tasks created after update() inherit the new values, and
    updates made inside a task stay local to it.
    """

    @property
    def settings(self) -> LoggingSettings:
        return _settings.get()

    def update(
        self,
        log_directory: str | None = None,
        log_level: LogLevelName | None = None,
        log_output: LogOutput | None = None,
    ):
        changes = {}

        if log_directory:
            changes["directory"] = log_directory

        if log_level:
            changes["level"] = LogLevel.to_level(log_level)

        if log_output:
            changes["output"] = log_output

        if changes:
            _settings.set(
                msgspec.structs.replace(_settings.get(), **changes)
            )

    def disable(self, logger_name: str):
        settings = _settings.get()
        _settings.set(
            msgspec.structs.replace(
                settings,
                disabled=settings.disabled | {logger_name},
            )
        )

    def enabled(self, logger_name: str, log_level: LogLevel) -> bool:
        settings = _settings.get()
        return (
            logger_name not in settings.disabled
            and log_level.severity >= settings.level.severity
        )

    @property
    def level(self) -> LogLevel:
        return _settings.get().level

    @property
    def output(self) -> LogOutput:
        return _settings.get().output

    @property
    def directory(self) -> str | None:
        return _settings.get().directory
