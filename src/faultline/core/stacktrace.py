"""Call-site capture and resolution.

A captured stack is a tuple of :class:`StackEntry`, innermost call first.
:class:`CallSiteResolver` picks the one entry worth showing to a human: the
first entry outside faultline itself or, when an owning component is
configured, the first entry inside that component.

Example:
    >>> resolver = CallSiteResolver(owning_component="myapp")
    >>> stack = (
    ...     StackEntry("faultline.core.context", "annotate", "/src/faultline/core/context.py", 10),
    ...     StackEntry("somelib.http", "get", "/venv/somelib/http.py", 88),
    ...     StackEntry("myapp.users", "load", "/srv/myapp/users.py", 42),
    ... )
    >>> resolver.most_relevant_entry(stack).module
    'myapp.users'
    >>> CallSiteResolver().most_relevant_entry(stack).module
    'somelib.http'
"""

from __future__ import annotations

import inspect
import os
import traceback
from dataclasses import dataclass
from types import FrameType, TracebackType
from typing import Iterable

LIBRARY_PACKAGE = "faultline"


@dataclass(frozen=True, slots=True)
class StackEntry:
    """One captured call: module, function (qualified name), file and line."""

    module: str | None
    function: str
    file: str | None
    line: int | None

    @property
    def qualified_function(self) -> str:
        if self.module:
            return f"{self.module}.{self.function}"
        return self.function

    def format(self) -> str:
        """``file:line: module.function`` (location omitted when unknown)."""
        location = format_file_line(self)
        if location:
            return f"{location}: {self.qualified_function}"
        return self.qualified_function


@dataclass(frozen=True, slots=True)
class CallSite:
    """The resolved location shown next to a context frame."""

    file: str | None
    line: int | None = None

    @classmethod
    def from_entry(cls, entry: StackEntry) -> CallSite:
        return cls(file=entry.file, line=entry.line)

    def format(self) -> str | None:
        return format_file_line(self)


def display_path(file: str | None) -> str | None:
    """Shorten absolute paths under the working directory to relative ones."""
    if not file or not os.path.isabs(file):
        return file
    try:
        relative = os.path.relpath(file, os.getcwd())
    except ValueError:
        # Different drive on Windows
        return file
    if relative.startswith(os.pardir):
        return file
    return relative


def format_file_line(location: StackEntry | CallSite | None) -> str | None:
    """Format as ``<file>:<line>``, omitting the line when unknown.

    Returns ``None`` when there is no location or its file is unknown.
    """
    if location is None or not location.file:
        return None
    path = display_path(location.file)
    if location.line is None:
        return path
    return f"{path}:{location.line}"


def _entry(frame: FrameType, lineno: int | None) -> StackEntry:
    code = frame.f_code
    return StackEntry(
        module=frame.f_globals.get("__name__"),
        function=getattr(code, "co_qualname", code.co_name),
        file=code.co_filename or None,
        line=lineno,
    )


def capture_stack(skip: int = 0) -> tuple[StackEntry, ...]:
    """Capture the current call stack, innermost first.

    The first entry is the caller of ``capture_stack``; ``skip`` drops that
    many further entries.
    """
    frame = inspect.currentframe()
    try:
        start = frame.f_back if frame is not None else None
        for _ in range(skip):
            if start is None:
                break
            start = start.f_back
        if start is None:
            return ()
        return tuple(_entry(f, lineno) for f, lineno in traceback.walk_stack(start))
    finally:
        # Frames reference their locals; don't keep them alive
        del frame


def stack_from_traceback(tb: TracebackType | None) -> tuple[StackEntry, ...]:
    """Entries of an exception traceback, raise site first."""
    if tb is None:
        return ()
    entries = [_entry(frame, lineno) for frame, lineno in traceback.walk_tb(tb)]
    entries.reverse()
    return tuple(entries)


class CallSiteResolver:
    """Pick the most relevant entry of a captured stack.

    Args:
        owning_component: Module prefix of the application that owns the
            code (``"myapp"`` matches ``myapp`` and ``myapp.*``). When set,
            the first entry inside it wins over the first caller entry.
        library: Package whose own frames are skipped.
    """

    def __init__(self, owning_component: str | None = None, *, library: str = LIBRARY_PACKAGE):
        self.owning_component = owning_component or None
        self.library = library

    @staticmethod
    def _within(module: str | None, package: str) -> bool:
        return module is not None and (module == package or module.startswith(package + "."))

    def is_library_entry(self, entry: StackEntry) -> bool:
        return self._within(entry.module, self.library)

    def is_component_entry(self, entry: StackEntry) -> bool:
        return self.owning_component is not None and self._within(
            entry.module, self.owning_component
        )

    def most_relevant_entry(self, stack: Iterable[StackEntry]) -> StackEntry | None:
        entries = tuple(stack)
        if not entries:
            return None
        caller = next((e for e in entries if not self.is_library_entry(e)), entries[0])
        if self.owning_component is None:
            return caller
        return next((e for e in entries if self.is_component_entry(e)), caller)

    def resolve(self, stack: Iterable[StackEntry]) -> CallSite | None:
        entry = self.most_relevant_entry(stack)
        if entry is None:
            return None
        return CallSite.from_entry(entry)

    def __repr__(self) -> str:
        return f"CallSiteResolver(owning_component={self.owning_component!r})"


_default_resolver = CallSiteResolver()


def get_default_resolver() -> CallSiteResolver:
    """Resolver used when none is passed explicitly."""
    return _default_resolver


def set_default_resolver(resolver: CallSiteResolver) -> None:
    """Replace the process-wide default resolver (set once at start-up)."""
    global _default_resolver
    _default_resolver = resolver


__all__ = [
    "LIBRARY_PACKAGE",
    "StackEntry",
    "CallSite",
    "CallSiteResolver",
    "capture_stack",
    "stack_from_traceback",
    "display_path",
    "format_file_line",
    "get_default_resolver",
    "set_default_resolver",
]
