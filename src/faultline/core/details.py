"""Short message and structured details for an outcome, as handed to log adapters."""

from __future__ import annotations

from typing import Any

from faultline.core.context import WrappedError, render_message
from faultline.core.errors import categorize_error
from faultline.core.result import ERROR_TAG, Err, Ok
from faultline.core.shrink import (
    CONTEXTS_KEY,
    ShrinkOptions,
    exception_message,
    render,
    shrink,
    type_name,
)

SUCCESS = "success"
FAILURE = "failure"
RAISED = "raised"


def _raised_details(exc: BaseException, options: ShrinkOptions | None) -> dict[str, Any]:
    return {
        "kind": RAISED,
        "message": f"{type_name(exc)}: {exception_message(exc)}",
        "type": type_name(exc),
        "category": categorize_error(exc).value,
        "reason": shrink(exc, options),
    }


def _err_details(err: Err[Any], options: ShrinkOptions | None) -> dict[str, Any]:
    if not err.has_reason:
        return {"kind": FAILURE, "message": "Err()"}
    reason = err.reason
    message = f"Err({render(reason, options)})"
    if isinstance(reason, BaseException):
        message += f" (message: {exception_message(reason)})"
    return {"kind": FAILURE, "message": message, "reason": shrink(reason, options)}


def _chain_details(chain: WrappedError, options: ShrinkOptions | None) -> dict[str, Any]:
    terminal = chain.terminal
    if isinstance(terminal, Err):
        details = _err_details(terminal, options)
    else:
        details = _raised_details(terminal, options)

    metadata: dict[str, Any] = {}
    for frame in chain.frames:
        # Outermost first, so inner frames overwrite
        metadata.update(frame.metadata)
    details["metadata"] = metadata
    details["category"] = categorize_error(chain).value
    details["message"] = render_message(chain)
    details["contexts"] = shrink(chain, options)[CONTEXTS_KEY]
    return details


def _tuple_details(value: tuple[Any, ...], options: ShrinkOptions | None) -> dict[str, Any]:
    tag, *payload = value
    message = "(" + ", ".join([repr(tag), *(render(item, options) for item in payload)]) + ")"
    shrunk = [shrink(item, options) for item in payload]
    if tag == ERROR_TAG:
        return {"kind": FAILURE, "message": message, "reasons": shrunk}
    return {"kind": SUCCESS, "message": message, "values": shrunk}


def result_details(outcome: Any, options: ShrinkOptions | None = None) -> dict[str, Any]:
    """
    Describe an outcome for logs.

    Returns a dict with ``kind`` (``"success"``, ``"failure"`` or
    ``"raised"``) and a one-line ``message``, plus whichever of ``value``,
    ``reason``, ``type``, ``values``, ``reasons``, ``metadata``, ``contexts``
    and ``category`` apply. Payloads are shrunk. ``category`` is an
    :class:`~faultline.core.errors.ErrorCategory` value, present for chains
    and raised exceptions.

    >>> result_details(Ok(42))
    {'kind': 'success', 'message': 'Ok(42)', 'value': 42}
    >>> result_details(Err("x"))
    {'kind': 'failure', 'message': "Err('x')", 'reason': 'x'}
    """
    if isinstance(outcome, Ok):
        if not outcome.has_value:
            return {"kind": SUCCESS, "message": "Ok()"}
        return {
            "kind": SUCCESS,
            "message": f"Ok({render(outcome.value, options)})",
            "value": shrink(outcome.value, options),
        }
    if isinstance(outcome, Err):
        if isinstance(outcome.reason, WrappedError):
            return _chain_details(outcome.reason, options)
        return _err_details(outcome, options)
    if isinstance(outcome, WrappedError):
        return _chain_details(outcome, options)
    if isinstance(outcome, BaseException):
        return _raised_details(outcome, options)
    if isinstance(outcome, tuple) and outcome:
        return _tuple_details(outcome, options)
    raise TypeError(f"Cannot describe {outcome!r}")


def is_failure(details: dict[str, Any]) -> bool:
    return details["kind"] != SUCCESS


__all__ = ["SUCCESS", "FAILURE", "RAISED", "result_details", "is_failure"]
