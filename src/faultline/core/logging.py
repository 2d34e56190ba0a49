"""
Structured logging setup for applications using faultline.

faultline emits through structlog (see
:class:`faultline.observability.sinks.StructlogSink`) and never configures
logging on import. Applications call :func:`configure_logging` once at
start-up, or keep whatever structlog configuration they already have.

Architecture:
    ::

        configure_logging(FaultlineSettings(log_level="INFO", logger_name="billing"))
              │
              ▼
        structlog processor chain:
          1. TimeStamper (iso)
          2. merge_contextvars
          3. add_log_level / add_logger_name
          4. add_service_metadata  (service = settings.logger_name)
          5. JSONRenderer (or ConsoleRenderer for dev)

        filtering bound logger at settings.log_level

Examples:
    >>> from faultline.core.logging import configure_logging, get_logger
    >>> from faultline.core.settings import FaultlineSettings
    >>> configure_logging(FaultlineSettings(log_level="WARNING"), json_format=True)
    >>> get_logger("billing").warning("invoice_failed", invoice_id=7)

Guardrails:
    - Auto-detects JSON vs console based on TTY
    - Service name stored globally (set once at startup)

Tags:
    logging, structlog, observability, json-logging, faultline

Doc-Types:
    - API Reference
    - Observability Guide
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from faultline.core.settings import FaultlineSettings, get_settings

# Set by configure_logging from settings.logger_name
_SERVICE_NAME = "faultline"


def _add_service_metadata(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add service-level metadata to all logs."""
    event_dict.setdefault("service", _SERVICE_NAME)
    return event_dict


def configure_logging(
    settings: FaultlineSettings | None = None,
    *,
    json_format: bool | None = None,
    add_timestamp: bool = True,
) -> None:
    """Configure structlog from faultline settings.

    Args:
        settings: Supplies ``log_level`` and ``logger_name`` (used as the
            ``service`` field). Defaults to :func:`get_settings`.
        json_format: True for JSON, False for console, None for auto (JSON if not tty)
        add_timestamp: Include ISO timestamp in logs
    """
    global _SERVICE_NAME
    settings = settings or get_settings()
    _SERVICE_NAME = settings.logger_name
    level = getattr(logging, settings.log_level)

    if json_format is None:
        json_format = not sys.stdout.isatty()

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _add_service_metadata,
    ]

    if add_timestamp:
        shared_processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        renderer: Processor = structlog.processors.JSONRenderer(default=str)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger (usually ``get_logger(__name__)``)."""
    return structlog.get_logger(name)


__all__ = ["configure_logging", "get_logger"]
