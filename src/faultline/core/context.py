"""
Diagnostic context chains.

``annotate`` wraps a failure in a :class:`WrappedError` that records *what
was going on* (a label and metadata) and *where* (the resolved call site and
the captured stack). Annotating an already annotated failure adds another
frame on the outside, so by the time a failure reaches the top of the
program it carries a readable trail of everything it passed through.

Manifesto:
    - **Successes are untouched:** ``annotate(Ok(x), ...)`` is ``Ok(x)``
    - **Failures stay data:** The chain is returned inside ``Err``, never raised
    - **Outermost first:** Frames read top-down, the way a human explains it
    - **Bounded traversal:** Chains are walked with a loop, not recursion

Architecture:
    ::

        Err(WrappedError)                 outermost frame ("loading profile")
              │ inner
              ▼
        Err(WrappedError)                 inner frame ("fetching user")
              │ inner
              ▼
        Err("db_timeout")                 terminal reason
        (or a raised exception caught by run/chain)

Examples:
    >>> failure = annotate(Err("db_timeout"), "fetching user", {"user_id": 123})
    >>> unwrapped = unwrap_chain(failure)
    >>> [frame.label for frame in unwrapped.frames]
    ['fetching user']
    >>> unwrapped.reason
    'db_timeout'

Guardrails:
    ❌ DON'T: Raise a WrappedError to signal an expected failure
    ✅ DO: Return the ``Err`` that ``annotate`` gives you

    ❌ DON'T: Put secrets in metadata, it ends up in logs
    ✅ DO: Use identifying fields (``user_id``, ``order_id``)

Tags:
    context, diagnostics, error-chain, annotation, faultline

Doc-Types:
    - API Reference
    - Error Handling Tutorial
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Iterable, NamedTuple

from faultline.core.errors import ProgrammingError
from faultline.core.result import Err, Ok, Outcome, validate
from faultline.core.shrink import (
    CONTEXTS_KEY,
    ROOT_REASON_KEY,
    ShrinkOptions,
    describe_callable,
    exception_message,
    render,
    shrink,
    type_name,
)
from faultline.core.stacktrace import (
    CallSite,
    CallSiteResolver,
    StackEntry,
    capture_stack,
    format_file_line,
    get_default_resolver,
    stack_from_traceback,
)


@dataclass(frozen=True)
class ContextFrame:
    """
    One annotation step.

    Attributes:
        label: What was going on, e.g. ``"fetching user"``
        metadata: Read-only key/values attached to the step
        call_site: Location shown to humans (resolved from ``stack``)
        stack: Captured stack, innermost first
        callback: The function an exception escaped from, for frames
            created by the safe combinators
    """

    label: str | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)
    call_site: CallSite | None = None
    stack: tuple[StackEntry, ...] = ()
    callback: Callable[..., Any] | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.metadata, MappingProxyType):
            object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @property
    def description(self) -> str | None:
        """Label, else the callback description."""
        if self.label is not None:
            return self.label
        if self.callback is not None:
            return describe_callable(self.callback)
        return None

    def render_line(self) -> str:
        """``    [CONTEXT] <file:line>: <label> <metadata>`` with absent parts omitted."""
        parts = []
        location = format_file_line(self.call_site)
        if location:
            parts.append(f"{location}:")
        description = self.description
        if description is not None:
            parts.append(description)
        if self.metadata:
            parts.append(repr(dict(sorted(self.metadata.items()))))
        return " ".join(["    [CONTEXT]", *parts])


class WrappedError(Exception):
    """
    A failure annotated with a context frame.

    ``inner`` is either an ``Err`` (whose reason may be another
    ``WrappedError``) or the exception a safe combinator caught.

    Example:
        >>> chain = annotate(annotate(Err("timeout"), "a"), "b").reason
        >>> repr(chain)
        'WrappedError<<b => a | timeout>>'
    """

    def __init__(self, frame: ContextFrame, inner: Err[Any] | BaseException):
        super().__init__(frame, inner)
        self.frame = frame
        self.inner = inner

    @classmethod
    def from_raised(
        cls,
        exc: BaseException,
        callback: Callable[..., Any] | None = None,
        *,
        resolver: CallSiteResolver | None = None,
    ) -> WrappedError:
        """Wrap an exception that escaped ``callback``, pointing at its raise site."""
        stack = stack_from_traceback(exc.__traceback__)
        frame = ContextFrame(
            call_site=(resolver or get_default_resolver()).resolve(stack),
            stack=stack,
            callback=callback,
        )
        wrapped = cls(frame, exc)
        wrapped.__cause__ = exc
        return wrapped

    def _walk(self) -> tuple[tuple[ContextFrame, ...], Err[Any] | BaseException]:
        frames = []
        node: WrappedError = self
        while True:
            frames.append(node.frame)
            inner = node.inner
            if isinstance(inner, Err) and isinstance(inner.reason, WrappedError):
                node = inner.reason
            elif isinstance(inner, WrappedError):
                node = inner
            else:
                return tuple(frames), inner

    @property
    def frames(self) -> tuple[ContextFrame, ...]:
        """All frames, outermost first."""
        return self._walk()[0]

    @property
    def terminal(self) -> Err[Any] | BaseException:
        """The innermost ``Err`` or the raised exception."""
        return self._walk()[1]

    @property
    def raised(self) -> bool:
        """True when the chain ends in a raised exception."""
        return not isinstance(self.terminal, Err)

    @property
    def reason(self) -> Any:
        """Terminal payload: the ``Err`` reason (``None`` if bare) or the exception."""
        terminal = self.terminal
        if isinstance(terminal, Err):
            return terminal.unwrap_err()
        return terminal

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON encoders."""
        return {
            "message": terminal_message(self.terminal),
            "contexts": [
                {"label": frame.description, "metadata": dict(frame.metadata)}
                for frame in self.frames
            ],
        }

    def __shrink__(self, options: ShrinkOptions) -> dict[str, Any]:
        frames, terminal = self._walk()
        reason = terminal.unwrap_err() if isinstance(terminal, Err) else terminal
        contexts = []
        for frame in frames:
            context: dict[str, Any] = {
                "label": frame.description,
                "call_site": format_file_line(frame.call_site),
                "stacktrace": [entry.format() for entry in frame.stack],
                "metadata": {key: shrink(value, options) for key, value in frame.metadata.items()},
            }
            contexts.append(context)
        return {CONTEXTS_KEY: contexts, ROOT_REASON_KEY: shrink(reason, options)}

    def __str__(self) -> str:
        return render_message(self)

    def __repr__(self) -> str:
        frames, terminal = self._walk()
        labels = [d for d in (frame.description for frame in frames) if d is not None]
        message = terminal_message(terminal)
        if labels:
            return f"WrappedError<<{' => '.join(labels)} | {message}>>"
        return f"WrappedError<<{message}>>"


class Unwrapped(NamedTuple):
    """Frames (outermost first) and the terminal ``Err`` or raised exception."""

    frames: tuple[ContextFrame, ...]
    result: Err[Any] | BaseException

    @property
    def raised(self) -> bool:
        return not isinstance(self.result, Err)

    @property
    def reason(self) -> Any:
        if isinstance(self.result, Err):
            return self.result.unwrap_err()
        return self.result


# =============================================================================
# OPERATIONS
# =============================================================================


def _is_pairs(value: Any) -> bool:
    return isinstance(value, list) and all(
        isinstance(item, tuple) and len(item) == 2 for item in value
    )


def _normalize_metadata(metadata: Mapping[Any, Any] | Iterable[tuple[Any, Any]] | None) -> dict[str, Any]:
    if metadata is None:
        return {}
    items = metadata.items() if isinstance(metadata, Mapping) else metadata
    return {str(key): value for key, value in items}


def annotate(
    outcome: Outcome[Any, Any],
    label: Any = None,
    metadata: Mapping[Any, Any] | Iterable[tuple[Any, Any]] | None = None,
    *,
    resolver: CallSiteResolver | None = None,
) -> Outcome[Any, Any]:
    """
    Add a context frame to a failure; successes pass through unchanged.

    Args:
        outcome: ``Ok`` / ``Err`` (anything else raises ``InvalidOutcomeShape``)
        label: What was going on. A mapping or list of pairs in this position
            is taken as metadata.
        metadata: Key/values for the frame
        resolver: Call-site resolver, defaults to the process-wide one

    Returns:
        ``outcome`` itself for ``Ok``; ``Err(WrappedError)`` for ``Err``

    Examples:
        >>> annotate(Ok(5), "ignored")
        Ok(5)
        >>> annotate(Err("x"), {"order_id": 7}).reason.frame.metadata["order_id"]
        7
    """
    validate(outcome)
    if isinstance(outcome, Ok):
        return outcome

    if metadata is None and (isinstance(label, Mapping) or _is_pairs(label)):
        label, metadata = None, label
    if label is not None and not isinstance(label, str):
        label = str(label)
    if label == "":
        label = None

    stack = capture_stack(skip=1)
    frame = ContextFrame(
        label=label,
        metadata=_normalize_metadata(metadata),
        call_site=(resolver or get_default_resolver()).resolve(stack),
        stack=stack,
    )
    return Err(WrappedError(frame, outcome))


def _as_chain(chain: Any) -> WrappedError | Err[Any]:
    if isinstance(chain, WrappedError):
        return chain
    if isinstance(chain, Err):
        return chain.reason if isinstance(chain.reason, WrappedError) else chain
    raise ProgrammingError(f"Expected a WrappedError or Err(...), got: {chain!r}")


def unwrap_chain(chain: WrappedError | Err[Any]) -> Unwrapped:
    """
    Flatten a chain into its frames and terminal result.

    A plain ``Err`` (never annotated) unwraps to no frames and itself.
    """
    node = _as_chain(chain)
    if isinstance(node, Err):
        return Unwrapped((), node)
    frames, terminal = node._walk()
    return Unwrapped(frames, terminal)


def terminal_message(terminal: Err[Any] | BaseException) -> str:
    """Message of the innermost cause."""
    if isinstance(terminal, Err):
        if not terminal.has_reason:
            return "Err()"
        reason = terminal.reason
        if isinstance(reason, str):
            return reason
        if isinstance(reason, BaseException):
            return exception_message(reason)
        return render(reason)
    return f"{type_name(terminal)}: {exception_message(terminal)}"


def render_message(chain: WrappedError | Err[Any]) -> str:
    """
    Human-readable multi-line description of a chain.

    >>> print(render_message(annotate(Err("db_timeout"), "fetching user", {"user_id": 1}, resolver=CallSiteResolver("nowhere"))))  # doctest: +ELLIPSIS
    db_timeout
        [CONTEXT] ...: fetching user {'user_id': 1}
    """
    frames, result = unwrap_chain(chain)
    lines = [terminal_message(result)]
    lines.extend(frame.render_line() for frame in frames)
    return "\n".join(lines)


__all__ = [
    "ContextFrame",
    "WrappedError",
    "Unwrapped",
    "annotate",
    "unwrap_chain",
    "render_message",
    "terminal_message",
]
