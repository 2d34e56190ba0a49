"""
Combinators over outcomes.

Pipelines of outcome-returning steps, with short-circuiting on failure::

    chain(run(lambda: load(user_id)), validate_user)

Each combinator validates its outcome argument first and raises
``InvalidOutcomeShape`` for anything that is not ``Ok`` / ``Err``. The
``*_unsafe`` variants let exceptions from callbacks propagate; the safe ones
turn them into ``Err(WrappedError)`` whose frame names the callback and the
raise site. Programmer errors (``ProgrammingError``) are always re-raised.

Collection combinators take ``Ok(collection)``, a plain iterable, or an
``Err`` (returned untouched), and walk elements in iteration order.
Mappings are walked as ``(key, value)`` pairs.

Examples:
    >>> chain(Ok(2), lambda x: x * 10)
    Ok(20)
    >>> chain(Err("missing"), lambda x: x * 10)
    Err('missing')
    >>> map_all([1, 2, 3], lambda x: Ok(x + 1))
    Ok([2, 3, 4])
    >>> find_first_success([1, 2], lambda x: Err(f"no {x}"))
    Err(['no 1', 'no 2'])
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Callable

from faultline.core.context import WrappedError
from faultline.core.errors import InvalidCallbackReturn, InvalidOutcomeShape, ProgrammingError
from faultline.core.result import Err, Ok, Outcome, coerce, is_outcome, validate


def _call_safely(fn: Callable[..., Any], *args: Any) -> Outcome[Any, Any]:
    try:
        value = fn(*args)
    except ProgrammingError:
        raise
    except Exception as exc:
        return Err(WrappedError.from_raised(exc, fn))
    return coerce(value)


def _checked(value: Any, combinator: str) -> Outcome[Any, Any]:
    if not is_outcome(value):
        raise InvalidCallbackReturn(value, combinator=combinator)
    return value


def _elements(subject: Any) -> Err[Any] | Iterable[Any]:
    """The iterable to walk, or the ``Err`` to hand back untouched."""
    if isinstance(subject, Err):
        return subject
    collection = subject
    if isinstance(subject, Ok):
        if not subject.has_value:
            raise InvalidOutcomeShape(subject, label="Collection")
        collection = subject.value
    if isinstance(collection, (str, bytes, bytearray)) or not isinstance(collection, Iterable):
        raise InvalidOutcomeShape(subject, label="Collection")
    if isinstance(collection, Mapping):
        return collection.items()
    return collection


# =============================================================================
# SINGLE OUTCOMES
# =============================================================================


def run(fn: Callable[[], Any]) -> Outcome[Any, Any]:
    """
    Call ``fn()`` and coerce its return into an outcome.

    An exception escaping ``fn`` becomes ``Err(WrappedError)``.

    >>> run(lambda: 42)
    Ok(42)
    >>> run(lambda: 1 / 0).reason.raised
    True
    """
    return _call_safely(fn)


def run_unsafe(fn: Callable[[], Any]) -> Outcome[Any, Any]:
    """Like :func:`run`, but exceptions propagate."""
    return coerce(fn())


def chain(outcome: Outcome[Any, Any], fn: Callable[[Any], Any]) -> Outcome[Any, Any]:
    """
    Feed the value of an ``Ok`` into ``fn``; an ``Err`` is returned as-is.

    ``fn`` receives ``None`` for a bare ``Ok()``. Its return is coerced, and an
    exception escaping it becomes ``Err(WrappedError)``.
    """
    validate(outcome)
    if isinstance(outcome, Err):
        return outcome
    return _call_safely(fn, outcome.unwrap())


def chain_unsafe(outcome: Outcome[Any, Any], fn: Callable[[Any], Any]) -> Outcome[Any, Any]:
    """Like :func:`chain`, but exceptions propagate."""
    validate(outcome)
    if isinstance(outcome, Err):
        return outcome
    return coerce(fn(outcome.unwrap()))


def recover(outcome: Outcome[Any, Any], fn: Callable[[Any], Any]) -> Outcome[Any, Any]:
    """
    Give a failure a chance to turn into something else.

    ``fn`` receives the reason (``None`` for a bare ``Err()``). An outcome it
    returns is passed through; any other value becomes ``Err(value)``.

    >>> recover(Err("cache_miss"), lambda reason: Ok("default"))
    Ok('default')
    >>> recover(Err("x"), lambda reason: reason.upper())
    Err('X')
    """
    validate(outcome)
    if isinstance(outcome, Ok):
        return outcome
    result = fn(outcome.unwrap_err())
    if is_outcome(result):
        return result
    return Err(result)


# =============================================================================
# COLLECTIONS
# =============================================================================


def map_all(subject: Any, fn: Callable[[Any], Outcome[Any, Any]]) -> Outcome[list[Any], Any]:
    """
    Apply ``fn`` to every element, collecting values into ``Ok([...])``.

    Stops at the first ``Err`` and returns it; later elements are not
    evaluated.
    """
    elements = _elements(subject)
    if isinstance(elements, Err):
        return elements
    values = []
    for element in elements:
        result = _checked(fn(element), "map_all")
        if isinstance(result, Err):
            return result
        values.append(result.unwrap())
    return Ok(values)


def map_each(subject: Any, fn: Callable[[Any], Any]) -> Outcome[list[Outcome[Any, Any]], Any]:
    """
    Apply ``fn`` to every element without short-circuiting.

    Returns ``Ok`` of the per-element outcomes. Plain returns are coerced
    and exceptions become ``Err(WrappedError)``, as in :func:`chain`.

    >>> map_each([1, 0], lambda x: Ok(x) if x else Err("zero"))
    Ok([Ok(1), Err('zero')])
    """
    elements = _elements(subject)
    if isinstance(elements, Err):
        return elements
    return Ok([_call_safely(fn, element) for element in elements])


def find_first_success(subject: Any, fn: Callable[[Any], Outcome[Any, Any]]) -> Outcome[Any, list[Any]]:
    """
    Return the first ``Ok`` produced by ``fn``.

    When every element fails, returns ``Err`` of all reasons in input order
    (``None`` for a bare ``Err()``).
    """
    elements = _elements(subject)
    if isinstance(elements, Err):
        return elements
    reasons = []
    for element in elements:
        result = _checked(fn(element), "find_first_success")
        if isinstance(result, Ok):
            return result
        reasons.append(result.unwrap_err())
    return Err(reasons)


def all_succeed(subject: Any, fn: Callable[[Any], Outcome[Any, Any]]) -> Outcome[Any, Any]:
    """``Ok()`` when ``fn`` succeeds for every element, else the first ``Err``."""
    elements = _elements(subject)
    if isinstance(elements, Err):
        return elements
    for element in elements:
        result = _checked(fn(element), "all_succeed")
        if isinstance(result, Err):
            return result
    return Ok()


__all__ = [
    "run",
    "run_unsafe",
    "chain",
    "chain_unsafe",
    "recover",
    "map_all",
    "map_each",
    "find_first_success",
    "all_succeed",
]
