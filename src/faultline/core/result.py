"""
Outcome envelope for consistent success/failure handling.

Provides the closed ``Outcome[T, E]`` type: exactly one of ``Ok()``,
``Ok(value)``, ``Err()`` or ``Err(reason)``. Functions return these instead
of raising for expected failures, and the combinators in
:mod:`faultline.core.combinators` compose them with short-circuiting.

Unlike a plain ``Result[T]`` that forces every failure to be an exception,
an ``Err`` reason may be anything: a string, an enum member, an exception, a
dict. A bare ``Ok()`` / ``Err()`` is a distinct shape, marked by the
``NOTHING`` sentinel, so "succeeded with None" and "succeeded" stay apart.

Manifesto:
    - **Closed shape:** Four shapes, nothing else. ``validate`` rejects the rest
    - **Explicit over Implicit:** Failures are values the caller must look at
    - **Absence is None at the edges:** Callbacks and collected lists always
      see ``None`` for a missing value or reason, never the sentinel
    - **Pattern matching:** ``match outcome: case Ok(value): ...`` just works

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                    Outcome[T, E]                              │
        │                    (Type Alias)                               │
        ├─────────────────┬─────────────────┬─────────────────────────┤
        │     Ok[T]       │     Err[E]      │     Utilities           │
        ├─────────────────┼─────────────────┼─────────────────────────┤
        │ • value         │ • reason        │ • validate()            │
        │ • map()         │ • map_err()     │ • coerce()              │
        │ • unwrap()      │ • or_else()     │ • is_ok() / is_err()    │
        │ • inspect()     │ • unwrap_err()  │ • NOTHING               │
        └─────────────────┴─────────────────┴─────────────────────────┘

Examples:
    >>> from faultline.core.result import Ok, Err
    >>> Ok(10).map(lambda x: x * 2)
    Ok(20)
    >>> Err("not_found").map(lambda x: x * 2)
    Err('not_found')
    >>> Ok().unwrap() is None
    True
    >>> match Err("db_timeout"):
    ...     case Ok(value):
    ...         print("got", value)
    ...     case Err(reason):
    ...         print("failed:", reason)
    failed: db_timeout

Guardrails:
    ❌ DON'T: Compare ``outcome.value`` against ``None`` to detect a bare Ok
    ✅ DO: Use ``has_value`` / ``has_reason``

    ❌ DON'T: Return tuples like ``("ok", x)`` from new code
    ✅ DO: Return ``Ok(x)``; tagged tuples are only accepted in loose mode

Tags:
    result-pattern, outcome, error-handling, functional-programming,
    monadic, faultline

Doc-Types:
    - API Reference
    - Error Handling Tutorial
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Final, Generic, Literal, TypeVar

from faultline.core.errors import InvalidOutcomeShape, UnwrapError


T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")
F = TypeVar("F")

ValidationMode = Literal["strict", "loose"]

# Tags accepted as the first element of a tuple in loose mode
OK_TAG: Final = "ok"
ERROR_TAG: Final = "error"


class _Nothing(Enum):
    NOTHING = "NOTHING"

    def __repr__(self) -> str:
        return "NOTHING"

    def __bool__(self) -> bool:
        return False


NOTHING: Final = _Nothing.NOTHING
"""Marks a bare ``Ok()`` / ``Err()``."""


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """
    Successful outcome, with or without a value.

    ``Ok()`` is a bare success; ``Ok(None)`` is a success whose value is
    ``None``. Both unwrap to ``None``; ``has_value`` tells them apart.

    Examples:
        >>> Ok(42).unwrap()
        42
        >>> Ok().has_value
        False
        >>> Ok(5).map(lambda x: x + 1)
        Ok(6)
    """

    value: T | _Nothing = NOTHING

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    @property
    def has_value(self) -> bool:
        return self.value is not NOTHING

    def unwrap(self) -> T | None:
        """Get the value (``None`` for a bare Ok)."""
        return None if self.value is NOTHING else self.value

    def unwrap_err(self) -> None:
        raise UnwrapError(self)

    def unwrap_or(self, default: Any) -> T | None:
        """Get value or default (always returns value for Ok)."""
        return self.unwrap()

    def unwrap_or_else(self, f: Callable[[Any], Any]) -> T | None:
        """Get value or call f with reason (always returns value for Ok)."""
        return self.unwrap()

    def map(self, f: Callable[[T | None], U]) -> Ok[U]:
        """Transform the value."""
        return Ok(f(self.unwrap()))

    def map_err(self, f: Callable[[Any], Any]) -> Ok[T]:
        """Transform reason if Err (no-op for Ok)."""
        return self

    def or_else(self, f: Callable[[Any], Any]) -> Ok[T]:
        """Return self if Ok, otherwise call f with reason."""
        return self

    def inspect(self, f: Callable[[T | None], None]) -> Ok[T]:
        """Call f with value for side effects, return self."""
        f(self.unwrap())
        return self

    def inspect_err(self, f: Callable[[Any], None]) -> Ok[T]:
        """Call f with reason for side effects (no-op for Ok)."""
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        if self.value is NOTHING:
            return {"ok": True}
        return {"ok": True, "value": self.value}

    def __repr__(self) -> str:
        if self.value is NOTHING:
            return "Ok()"
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """
    Failed outcome, with or without a reason.

    The reason can be any value. When it is a
    :class:`~faultline.core.context.WrappedError` the failure has been
    annotated with context frames.

    Examples:
        >>> Err("not_found").unwrap_err()
        'not_found'
        >>> Err().unwrap_err() is None
        True
        >>> Err("x").or_else(lambda reason: Ok("fallback"))
        Ok('fallback')
    """

    reason: E | _Nothing = NOTHING

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    @property
    def has_reason(self) -> bool:
        return self.reason is not NOTHING

    def unwrap(self) -> Any:
        """Raise the reason if it is an exception, otherwise ``UnwrapError``."""
        if isinstance(self.reason, BaseException):
            raise self.reason
        raise UnwrapError(self.unwrap_err())

    def unwrap_err(self) -> E | None:
        """Get the reason (``None`` for a bare Err)."""
        return None if self.reason is NOTHING else self.reason

    def unwrap_or(self, default: U) -> U:
        """Get default since this is Err."""
        return default

    def unwrap_or_else(self, f: Callable[[E | None], U]) -> U:
        """Call f with reason to get value."""
        return f(self.unwrap_err())

    def map(self, f: Callable[[Any], Any]) -> Err[E]:
        """No-op for Err."""
        return self

    def map_err(self, f: Callable[[E | None], F]) -> Err[F]:
        """Transform the reason."""
        return Err(f(self.unwrap_err()))

    def or_else(self, f: Callable[[E | None], Any]) -> Any:
        """Call f with reason to try recovery."""
        return f(self.unwrap_err())

    def inspect(self, f: Callable[[Any], None]) -> Err[E]:
        """No-op for Err."""
        return self

    def inspect_err(self, f: Callable[[E | None], None]) -> Err[E]:
        """Call f with reason for side effects, return self."""
        f(self.unwrap_err())
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        if self.reason is NOTHING:
            return {"ok": False}
        reason = self.reason
        if not isinstance(reason, BaseException):
            return {"ok": False, "reason": reason}
        if hasattr(reason, "to_dict"):
            return {"ok": False, "error": reason.to_dict()}
        return {
            "ok": False,
            "error": {"error_type": type(reason).__name__, "message": str(reason)},
        }

    def __repr__(self) -> str:
        if self.reason is NOTHING:
            return "Err()"
        return f"Err({self.reason!r})"


# Type alias for Outcome
Outcome = Ok[T] | Err[E]


# =============================================================================
# SHAPE CHECKS
# =============================================================================


def is_outcome(value: Any) -> bool:
    """True for ``Ok`` / ``Err`` instances."""
    return isinstance(value, (Ok, Err))


def is_tagged_tuple(value: Any) -> bool:
    """True for tuples tagged ``"ok"`` / ``"error"`` (loose-mode outcomes)."""
    return isinstance(value, tuple) and len(value) > 0 and value[0] in (OK_TAG, ERROR_TAG)


def validate(value: Any, mode: ValidationMode = "strict", label: str = "Argument") -> Any:
    """
    Check that ``value`` is an outcome, raising ``InvalidOutcomeShape`` if not.

    Strict mode accepts the four canonical shapes only. Loose mode also
    accepts any tuple whose first element is ``"ok"`` or ``"error"``, for
    interop with results that carry more than one payload element.

    Args:
        value: The value to check
        mode: ``"strict"`` or ``"loose"``
        label: Name used in the error message

    Returns:
        ``value`` unchanged

    Examples:
        >>> validate(Ok(1))
        Ok(1)
        >>> validate(("error", "timeout", 30), mode="loose")
        ('error', 'timeout', 30)
    """
    if mode not in ("strict", "loose"):
        raise ValueError(f"mode must be either 'strict' or 'loose' (got: {mode!r})")
    if is_outcome(value):
        return value
    if mode == "loose" and is_tagged_tuple(value):
        return value
    raise InvalidOutcomeShape(value, mode=mode, label=label)


def is_ok(outcome: Any) -> bool:
    """
    Check if an outcome is a success.

    Raises ``InvalidOutcomeShape`` for anything that is not an outcome.

    >>> is_ok(Ok()), is_ok(Ok(42)), is_ok(Err()), is_ok(Err("x"))
    (True, True, False, False)
    """
    return isinstance(validate(outcome), Ok)


def is_err(outcome: Any) -> bool:
    """
    Check if an outcome is a failure.

    Raises ``InvalidOutcomeShape`` for anything that is not an outcome.
    """
    return isinstance(validate(outcome), Err)


def coerce(value: Any) -> Outcome[Any, Any]:
    """Outcomes pass through; any other value becomes ``Ok(value)``."""
    if is_outcome(value):
        return value
    return Ok(value)


__all__ = [
    # Types
    "Outcome",
    "Ok",
    "Err",
    "NOTHING",
    "OK_TAG",
    "ERROR_TAG",
    "ValidationMode",
    # Shape checks
    "validate",
    "is_outcome",
    "is_tagged_tuple",
    "is_ok",
    "is_err",
    "coerce",
]
