"""Log sinks: where faultline hands finished log lines.

A sink receives ``(severity, message, metadata)`` and is responsible for
transport. :class:`StructlogSink` is the default; :class:`RecordingSink`
keeps entries in memory.

Example:
    >>> sink = RecordingSink()
    >>> sink.emit(Severity.PROBLEM, "boom", {"user_id": 1})
    >>> sink.problems[0].message
    'boom'
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Final, Protocol, runtime_checkable

from faultline.core.logging import get_logger


class Severity(str, Enum):
    """How loudly a line should be logged."""

    PROBLEM = "problem"
    INFORMATIONAL = "informational"


@runtime_checkable
class LogSink(Protocol):
    """Anything that can take a finished log line."""

    def emit(self, severity: Severity, message: str, metadata: Mapping[str, Any]) -> None: ...


# Filled in by structlog itself, or the name of bind()'s own parameter
RESERVED_KEYS: Final = frozenset(
    {"self", "event", "log_level", "level", "logger", "timestamp", "exc_info", "stack_info"}
)


def _bindable(metadata: Mapping[Any, Any]) -> dict[str, Any]:
    bound: dict[str, Any] = {}
    for key, value in metadata.items():
        name = str(key)
        while name in RESERVED_KEYS or name in bound:
            name += "_"
        bound[name] = value
    return bound


class StructlogSink:
    """Logs through structlog: ``error`` for problems, ``info`` otherwise.

    Metadata is bound onto the logger as key/values. Non-string keys are
    converted with ``str()``, and keys structlog reserves for itself get a
    trailing underscore (``event`` becomes ``event_``).
    """

    def __init__(self, logger_name: str = "faultline", logger: Any = None):
        self.logger_name = logger_name
        self._logger = logger

    @property
    def logger(self) -> Any:
        # Resolved lazily so configure_logging() can run after construction
        if self._logger is None:
            return get_logger(self.logger_name)
        return self._logger

    def emit(self, severity: Severity, message: str, metadata: Mapping[str, Any]) -> None:
        bound = self.logger.bind(**_bindable(metadata))
        if severity is Severity.PROBLEM:
            bound.error(message)
        else:
            bound.info(message)

    def __repr__(self) -> str:
        return f"StructlogSink(logger_name={self.logger_name!r})"


@dataclass(frozen=True)
class LogEntry:
    severity: Severity
    message: str
    metadata: dict[str, Any]


@dataclass
class RecordingSink:
    """Keeps every emitted line in ``entries``."""

    entries: list[LogEntry] = field(default_factory=list)

    def emit(self, severity: Severity, message: str, metadata: Mapping[str, Any]) -> None:
        self.entries.append(LogEntry(severity, message, dict(metadata)))

    @property
    def problems(self) -> list[LogEntry]:
        return [e for e in self.entries if e.severity is Severity.PROBLEM]

    def clear(self) -> None:
        self.entries.clear()


__all__ = ["Severity", "LogSink", "RESERVED_KEYS", "StructlogSink", "LogEntry", "RecordingSink"]
