"""
Structured error types for faultline.

Separates the two kinds of failure the library deals with. Programmer errors
(passing something that is not an outcome, a callback returning garbage) are
raised immediately and never turned into data. Expected application failures
travel through ``Err`` values and, once annotated, through ``WrappedError``
chains (see :mod:`faultline.core.context`).

Manifesto:
    - **Fail fast on misuse:** A malformed outcome is a bug, so it raises
    - **Failures are data:** Expected failures never raise, they are returned
    - **Categorised:** Every raised or wrapped failure is tagged with its
      bucket in result details, so log consumers can filter on it

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────┐
        │                    FaultlineError                         │
        │               (category, context)                         │
        ├──────────────────────────────────────────────────────────┤
        │  ProgrammingError  (always raised)                        │
        │       │                                                   │
        │  InvalidOutcomeShape   InvalidCallbackReturn   UnwrapError│
        └──────────────────────────────────────────────────────────┘

        WrappedError lives in faultline.core.context and is returned
        inside Err(...) instead of being raised.

Examples:
    >>> from faultline.core.result import validate
    >>> validate(123)
    Traceback (most recent call last):
    ...
    faultline.core.errors.InvalidOutcomeShape: Argument must be Ok(...) / Ok() / Err(...) / Err(), got: 123

Tags:
    error-handling, exception-hierarchy, programmer-errors, faultline

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Buckets used to classify errors seen by faultline.

    Attributes:
        INVALID_SHAPE: A value that is not an outcome reached a combinator
        INVALID_CALLBACK: A callback to a strict combinator returned a non-outcome
        UNWRAP: A failure was unwrapped as if it were a success
        WRAPPED: An annotated application failure (WrappedError)
        RAISED: An exception escaped user code inside a safe combinator
        UNKNOWN: Anything else
    """

    INVALID_SHAPE = "INVALID_SHAPE"
    INVALID_CALLBACK = "INVALID_CALLBACK"
    UNWRAP = "UNWRAP"

    WRAPPED = "WRAPPED"
    RAISED = "RAISED"

    UNKNOWN = "UNKNOWN"


class FaultlineError(Exception):
    """Base exception for all faultline errors.

    Subclasses set ``default_category``. ``context`` holds any extra key/value
    pairs that should travel with the error into structured logs.
    """

    default_category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = dict(context or {})

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        if self.context:
            result["context"] = dict(self.context)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# PROGRAMMER ERRORS (Always raised)
# =============================================================================


class ProgrammingError(FaultlineError):
    """Misuse of the library. Never converted into an ``Err`` value."""


class InvalidOutcomeShape(ProgrammingError):
    """A value that is not an outcome was given where one is required."""

    default_category = ErrorCategory.INVALID_SHAPE

    def __init__(self, value: Any, *, mode: str = "strict", label: str = "Argument"):
        if mode == "loose":
            expected = "Ok(...) / Ok() / Err(...) / Err() / ('ok', ...) / ('error', ...)"
        else:
            expected = "Ok(...) / Ok() / Err(...) / Err()"
        super().__init__(f"{label} must be {expected}, got: {value!r}")
        self.value = value
        self.mode = mode
        self.label = label


class InvalidCallbackReturn(ProgrammingError):
    """A callback given to a strict combinator returned something other than an outcome."""

    default_category = ErrorCategory.INVALID_CALLBACK

    def __init__(self, value: Any, *, combinator: str | None = None):
        where = f" (in {combinator})" if combinator else ""
        super().__init__(
            f"Callback return must be Ok(...) / Ok() / Err(...) / Err(){where}, got: {value!r}"
        )
        self.value = value
        self.combinator = combinator


class UnwrapError(ProgrammingError):
    """``Err.unwrap()`` was called on a failure whose reason is not an exception."""

    default_category = ErrorCategory.UNWRAP

    def __init__(self, reason: Any):
        super().__init__(f"Called unwrap on a failure: {reason!r}")
        self.reason = reason


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def categorize_error(error: BaseException) -> ErrorCategory:
    """Get the category of an error.

    Faultline errors report their own category. A ``WrappedError`` chain is
    ``RAISED`` when it ends in an exception escaping a callback, else
    ``WRAPPED``. Everything else is ``UNKNOWN``.
    """
    if isinstance(error, FaultlineError):
        return error.category
    # Imported here: context.py depends on this module
    from faultline.core.context import WrappedError

    if isinstance(error, WrappedError):
        return ErrorCategory.RAISED if error.raised else ErrorCategory.WRAPPED
    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "FaultlineError",
    "ProgrammingError",
    "InvalidOutcomeShape",
    "InvalidCallbackReturn",
    "UnwrapError",
    "categorize_error",
]
