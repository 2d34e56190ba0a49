"""Observability package for faultline.

Key components:
- sinks: where log lines go (structlog by default)
- serializers: encoding for the JSON adapter
- adapters: outcome details to log lines
"""

from .adapters import (
    JsonLogAdapter,
    LogAdapter,
    LogDetails,
    PlainLogAdapter,
    get_log_adapter,
)
from .serializers import JsonSerializer, Serializer
from .sinks import LogEntry, LogSink, RecordingSink, Severity, StructlogSink

__all__ = [
    # Sinks
    "Severity",
    "LogSink",
    "StructlogSink",
    "RecordingSink",
    "LogEntry",
    # Serializers
    "Serializer",
    "JsonSerializer",
    # Adapters
    "LogDetails",
    "LogAdapter",
    "PlainLogAdapter",
    "JsonLogAdapter",
    "get_log_adapter",
]
