"""
Message and log facade.

Two things applications do with a failure once it reaches the edge:

- ``log(outcome)``: write it to the logs with its full context chain and the
  call site of the ``log`` call, then keep going with the same outcome
- ``user_message(reason)``: turn it into one sentence that is safe to show an
  end user. Strings are shown verbatim; anything else is logged under a
  random code and replaced by a generic message quoting that code

Manifesto:
    - **Log and continue:** ``log`` returns its argument, so it slots into pipelines
    - **Never leak internals:** Unknown reasons never reach the user verbatim
    - **Correlatable:** The code in the user message is in the log line too
    - **Injected collaborators:** Sink, adapter, serializer and resolver are
      constructor arguments; the module-level functions use a default instance

Architecture:
    ::

        ┌────────────────────────────────────────────────────────────┐
        │ Reporter(settings, sink, adapter, serializer, resolver)     │
        ├──────────────────────────────┬─────────────────────────────┤
        │ log(outcome, mode)           │ user_message(reason)        │
        │   validate (loose)           │   str ─────────► verbatim   │
        │   capture_stack              │   WrappedError ► terminal + │
        │   result_details             │                  trail      │
        │   adapter.render ──► sink    │   other ───────► code + sink│
        └──────────────────────────────┴─────────────────────────────┘

Examples:
    >>> import faultline
    >>> faultline.user_message("Email is already taken")
    'Email is already taken'
    >>> faultline.log(faultline.Ok(42))
    Ok(42)

Tags:
    logging, user-messages, facade, error-reporting, faultline

Doc-Types:
    - API Reference
    - Error Handling Tutorial
"""

from __future__ import annotations

import secrets
import string
from typing import Any, Final, Literal

from faultline.core.context import WrappedError
from faultline.core.details import is_failure, result_details
from faultline.core.errors import InvalidOutcomeShape
from faultline.core.result import Err, Ok, Outcome, validate
from faultline.core.settings import FaultlineSettings, get_settings
from faultline.core.shrink import ShrinkOptions, exception_message, render, shrink
from faultline.core.stacktrace import CallSiteResolver, capture_stack, set_default_resolver
from faultline.observability.adapters import LogAdapter, LogDetails, get_log_adapter
from faultline.observability.serializers import JsonSerializer, Serializer
from faultline.observability.sinks import LogSink, Severity, StructlogSink

LogMode = Literal["errors", "all"]
LOG_MODES: Final = ("errors", "all")

ERROR_CODE_ALPHABET: Final = string.ascii_uppercase + string.digits


class Reporter:
    """
    Logs outcomes and builds user-facing messages.

    Args:
        settings: Defaults to :func:`faultline.core.settings.get_settings`
        sink: Where log lines go, defaults to a ``StructlogSink``
        adapter: Builds log lines, defaults to ``settings.log_adapter``
        serializer: Used by the JSON adapter, defaults to ``JsonSerializer``
        resolver: Picks the call site, defaults to one for
            ``settings.owning_component``
    """

    def __init__(
        self,
        settings: FaultlineSettings | None = None,
        *,
        sink: LogSink | None = None,
        adapter: LogAdapter | None = None,
        serializer: Serializer | None = None,
        resolver: CallSiteResolver | None = None,
    ):
        self.settings = settings or get_settings()
        self.serializer = serializer or JsonSerializer()
        self.sink = sink or StructlogSink(self.settings.logger_name)
        self.adapter = adapter or get_log_adapter(self.settings.log_adapter, serializer=self.serializer)
        self.resolver = resolver or CallSiteResolver(self.settings.owning_component)
        self.shrink_options = ShrinkOptions(max_list_items=self.settings.max_list_items)

    def log(self, outcome: Outcome[Any, Any] | tuple[Any, ...], mode: LogMode = "errors") -> Any:
        """
        Log an outcome and return it unchanged.

        Failures log at ``Severity.PROBLEM``. Successes are skipped unless
        ``mode="all"``, in which case they log at ``Severity.INFORMATIONAL``.

        Raises:
            InvalidOutcomeShape: ``outcome`` is not an outcome or tagged tuple
            ValueError: ``mode`` is not ``"errors"`` or ``"all"``
        """
        validate(outcome, mode="loose", label="Result")
        if mode not in LOG_MODES:
            raise ValueError(f"mode must be either 'errors' or 'all' (got: {mode!r})")

        stack = capture_stack()
        details = result_details(outcome, self.shrink_options)
        if mode == "errors" and not is_failure(details):
            return outcome

        line = self.adapter.render(LogDetails(outcome, details, stack), self.resolver)
        if line is not None:
            self.sink.emit(*line)
        return outcome

    def user_message(self, reason: Any) -> str:
        """
        One sentence that is safe to show an end user.

        - ``str``: returned verbatim
        - ``WrappedError``: the terminal reason's message followed by
          ``" (happened while: a => b)"``. Frames with neither a label nor
          metadata are left out of the trail
        - ``Err``: its reason
        - anything else: logged under a random code, and the generic
          ``settings.user_message_template`` is returned

        Raises:
            InvalidOutcomeShape: ``reason`` is an ``Ok``
        """
        if isinstance(reason, str):
            return reason
        if isinstance(reason, Ok):
            raise InvalidOutcomeShape(reason, label="Failure")
        if isinstance(reason, Err):
            return self.user_message(reason.unwrap_err())
        if isinstance(reason, WrappedError):
            message = self.user_message(reason.reason)
            entries = [entry for entry in map(_trail_entry, reason.frames) if entry is not None]
            if not entries:
                return message
            return f"{message} (happened while: {' => '.join(entries)})"
        return self._generic_message(reason)

    def generate_error_code(self) -> str:
        length = self.settings.error_code_length
        return "".join(secrets.choice(ERROR_CODE_ALPHABET) for _ in range(length))

    def _generic_message(self, reason: Any) -> str:
        code = self.generate_error_code()
        message = (
            f"{code}: Could not generate user error message. "
            f"Error was: {render(reason, self.shrink_options)}"
        )
        if isinstance(reason, BaseException):
            message += f" (message: {exception_message(reason)})"
        self.sink.emit(
            Severity.PROBLEM,
            message,
            {"error_code": code, "reason": shrink(reason, self.shrink_options)},
        )
        return self.settings.user_message_template.replace("{code}", code)

    def __repr__(self) -> str:
        return f"Reporter(sink={self.sink!r}, adapter={type(self.adapter).__name__})"


def _trail_entry(frame: Any) -> str | None:
    description = frame.description
    if description is not None:
        return description
    if frame.metadata:
        return repr(dict(frame.metadata))
    return None


# =============================================================================
# DEFAULT INSTANCE
# =============================================================================


_default_reporter: Reporter | None = None


def configure(
    settings: FaultlineSettings | None = None,
    *,
    sink: LogSink | None = None,
    adapter: LogAdapter | None = None,
    serializer: Serializer | None = None,
    **overrides: Any,
) -> Reporter:
    """
    Build the default reporter, and make its resolver the process-wide default.

    Call once at start-up. Keyword overrides are applied on top of
    ``settings`` (or the environment) and validated.

    Example:
        >>> reporter = configure(owning_component="myapp", log_adapter="json")
    """
    global _default_reporter
    settings = settings or get_settings()
    if overrides:
        settings = FaultlineSettings(**{**settings.model_dump(), **overrides})
    reporter = Reporter(settings, sink=sink, adapter=adapter, serializer=serializer)
    set_default_resolver(reporter.resolver)
    _default_reporter = reporter
    return reporter


def get_reporter() -> Reporter:
    """The default reporter, created from the environment on first use."""
    global _default_reporter
    if _default_reporter is None:
        _default_reporter = Reporter()
    return _default_reporter


def reset() -> None:
    """Drop the default reporter and resolver (primarily for testing)."""
    global _default_reporter
    _default_reporter = None
    set_default_resolver(CallSiteResolver())


def log(outcome: Outcome[Any, Any] | tuple[Any, ...], mode: LogMode = "errors") -> Any:
    """:meth:`Reporter.log` on the default reporter."""
    return get_reporter().log(outcome, mode)


def user_message(reason: Any) -> str:
    """:meth:`Reporter.user_message` on the default reporter."""
    return get_reporter().user_message(reason)


__all__ = [
    "LogMode",
    "LOG_MODES",
    "Reporter",
    "configure",
    "get_reporter",
    "reset",
    "log",
    "user_message",
]
