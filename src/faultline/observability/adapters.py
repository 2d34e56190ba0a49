"""
Log adapters: turn outcome details into a finished log line.

``Reporter.log`` derives the details of an outcome, then asks the configured
adapter for ``(severity, message, metadata)``. Returning ``None`` skips the
line.

Architecture:
    ::

        outcome ──► result_details ──► LogDetails ──► adapter.render ──► sink.emit
                                          │
                      stack at the log() call site, resolved to file:line

Adapters:
    ``plain``  ``[RESULT] app/users.py:42: Err('x')`` with chain metadata and
               the details as structured key/values
    ``json``   one JSON document per line, metadata left empty

Tags:
    logging, adapters, diagnostics, faultline

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from faultline.core.details import is_failure
from faultline.core.stacktrace import CallSiteResolver, StackEntry, format_file_line
from faultline.observability.serializers import JsonSerializer, Serializer
from faultline.observability.sinks import Severity

SOURCE = "faultline"

LogLine = tuple[Severity, str, dict[str, Any]]


@dataclass(frozen=True)
class LogDetails:
    """Everything an adapter needs to describe one ``log`` call."""

    outcome: Any
    details: dict[str, Any]
    stack: tuple[StackEntry, ...] = ()

    @property
    def severity(self) -> Severity:
        return Severity.PROBLEM if is_failure(self.details) else Severity.INFORMATIONAL


@runtime_checkable
class LogAdapter(Protocol):
    def render(self, log_details: LogDetails, resolver: CallSiteResolver) -> LogLine | None: ...


class PlainLogAdapter:
    """``[RESULT] <file:line>: <message>`` plus structured metadata."""

    name = "plain"

    def render(self, log_details: LogDetails, resolver: CallSiteResolver) -> LogLine:
        details = log_details.details
        location = format_file_line(resolver.resolve(log_details.stack))
        prefix = f"[RESULT] {location}: " if location else "[RESULT] "
        metadata = {**details.get("metadata", {}), "result_details": details}
        return log_details.severity, prefix + details["message"], metadata


class JsonLogAdapter:
    """One serialized document per line, nothing in metadata."""

    name = "json"

    def __init__(self, serializer: Serializer | None = None):
        self.serializer = serializer or JsonSerializer()

    def render(self, log_details: LogDetails, resolver: CallSiteResolver) -> LogLine:
        document = {
            "source": SOURCE,
            "stacktrace_line": format_file_line(resolver.resolve(log_details.stack)),
            "result_details": log_details.details,
        }
        return log_details.severity, self.serializer.encode(document), {}


def get_log_adapter(name: str, *, serializer: Serializer | None = None) -> LogAdapter:
    """Adapter for a settings name (``"plain"`` or ``"json"``)."""
    if name == PlainLogAdapter.name:
        return PlainLogAdapter()
    if name == JsonLogAdapter.name:
        return JsonLogAdapter(serializer)
    raise ValueError(f"Unknown log adapter: {name!r} (expected 'plain' or 'json')")


__all__ = [
    "LogLine",
    "LogDetails",
    "LogAdapter",
    "PlainLogAdapter",
    "JsonLogAdapter",
    "get_log_adapter",
]
