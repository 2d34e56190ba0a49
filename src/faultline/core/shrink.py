"""
Value shrinking and rendering for diagnostics.

Logs and user-facing reports need to say *which* thing failed without dumping
whole objects (and whatever secrets ride along in them). ``shrink`` reduces
an arbitrary value to a small, JSON-friendly projection that keeps the fields
most useful for debugging: identifying fields (``id``, ``name``, ``*_id``,
``*Id``, ``*ID``) and any nested structure that still has something left in
it after shrinking.

The same projection feeds both output paths: ``render`` turns it into the
human string used in log messages, and the structured-details path hands it
to a serializer.

Manifesto:
    - **Identify, don't dump:** Keep what tells you *which* record, drop the rest
    - **Predictable:** Same rules at every depth, identifying fields first
    - **Idempotent:** Shrinking a projection returns the same projection
    - **Extensible:** Types opt in with ``__describe_fields__`` or ``__shrink__``

Architecture:
    ::

        value ──► _shrink ──┬── primitive ─────────────► as-is
                            ├── __shrink__ hook ───────► type decides
                            ├── exception ─────────────► {__type__, __message__, fields...}
                            ├── record (dataclass, ────► {__type__, kept fields}
                            │   pydantic, namedtuple,
                            │   Describable, __dict__)
                            ├── mapping ───────────────► {kept entries}
                            ├── list / set ────────────► [items] | LIST_WITHOUT_ITEMS
                            ├── tuple ─────────────────► "repr"
                            └── callable ──────────────► "&module.name/arity"

Examples:
    >>> shrink({"id": 1, "name": "Alice", "age": 30})
    {'id': 1, 'name': 'Alice'}
    >>> shrink([("id", 7), ("email", "a@b.c")])
    {'id': 7}
    >>> shrink((1, 2))
    '(1, 2)'
    >>> render(ValueError("boom"))
    '#ValueError<...>'

Tags:
    shrinking, rendering, diagnostics, projection, faultline

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import dataclasses
import datetime
import functools
import inspect
import re
import uuid
from collections import deque
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from pathlib import PurePath
from typing import Any, Final, Protocol, runtime_checkable

from pydantic import BaseModel

from faultline.core.stacktrace import display_path

# Keys added by the shrinker itself
TYPE_KEY: Final = "__type__"
MESSAGE_KEY: Final = "__message__"
ROOT_REASON_KEY: Final = "__root_reason__"
CONTEXTS_KEY: Final = "__contexts__"

_DISCRIMINATOR_ORDER: Final = (TYPE_KEY, MESSAGE_KEY, ROOT_REASON_KEY, CONTEXTS_KEY)
_DISCRIMINATOR_KEYS = frozenset(_DISCRIMINATOR_ORDER)
# A mapping carrying one of these is already a full projection
_VERBATIM_KEYS = frozenset({MESSAGE_KEY, ROOT_REASON_KEY})

_IDENTIFYING_NAMES = frozenset({"id", "name"})
_ID_SUFFIX = re.compile(r"[a-z](_id|Id|ID)$")

_SCALARS = (
    str,
    int,
    float,
    complex,
    bool,
    type(None),
    Enum,
    Decimal,
    datetime.date,
    datetime.time,
    datetime.timedelta,
    uuid.UUID,
    PurePath,
)
_LIST_TYPES = (list, set, frozenset, deque)


class _ListWithoutItems(Enum):
    LIST_WITHOUT_ITEMS = "LIST_WITHOUT_ITEMS"

    def __repr__(self) -> str:
        return "LIST_WITHOUT_ITEMS"


LIST_WITHOUT_ITEMS: Final = _ListWithoutItems.LIST_WITHOUT_ITEMS
"""A list whose items all shrank to nothing. Dropped by the parent."""


@dataclass(frozen=True, slots=True)
class ShrinkOptions:
    """Tunable heuristics.

    Attributes:
        max_list_items: Longest list kept as-is. Longer lists keep
            ``max_list_items - 1`` items followed by a ``"... (N more)"`` marker.
    """

    max_list_items: int = 10

    def __post_init__(self) -> None:
        if self.max_list_items < 1:
            raise ValueError(f"max_list_items must be at least 1 (got: {self.max_list_items})")


DEFAULT_OPTIONS = ShrinkOptions()


@runtime_checkable
class Describable(Protocol):
    """Types implement this to choose which fields the shrinker sees."""

    def __describe_fields__(self) -> Mapping[str, Any]: ...


# =============================================================================
# NAMES
# =============================================================================


def type_name(value: Any) -> str:
    """``module.QualName`` for a value or class (bare name for builtins)."""
    cls = value if isinstance(value, type) else type(value)
    if cls.__module__ == "builtins":
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


def exception_message(exc: BaseException) -> str:
    """``str(exc)``, guarded against a broken ``__str__``."""
    try:
        return str(exc)
    except Exception:
        return f"<{type_name(exc)} str() failed>"


def _arity(fn: Any) -> int | str:
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        return "?"
    positional = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    return sum(1 for p in signature.parameters.values() if p.kind in positional)


def describe_callable(fn: Any) -> str:
    """
    Render a function for humans.

    Named functions become ``&module.qualname/arity``; lambdas become
    ``#Function<lambda/arity at file:line>``.

    >>> describe_callable(len)
    '&builtins.len/1'
    """
    target = fn.func if isinstance(fn, functools.partial) else fn
    name = getattr(target, "__qualname__", None) or getattr(target, "__name__", None)
    arity = _arity(fn)
    if not name or "<lambda>" in name:
        code = getattr(target, "__code__", None)
        location = ""
        if code is not None:
            location = f" at {display_path(code.co_filename)}:{code.co_firstlineno}"
        return f"#Function<lambda/{arity}{location}>"
    module = getattr(target, "__module__", None)
    owner = f"{module}." if module else ""
    return f"&{owner}{name}/{arity}"


def is_identifying(key: Any) -> bool:
    """True for ``id`` / ``name`` and ``*_id`` / ``*Id`` / ``*ID`` keys."""
    text = str(key)
    return text in _IDENTIFYING_NAMES or bool(_ID_SUFFIX.search(text))


# =============================================================================
# SHRINKING
# =============================================================================


def shrink(value: Any, options: ShrinkOptions | None = None) -> Any:
    """
    Reduce ``value`` to its diagnostically useful projection.

    Args:
        value: Anything (acyclic)
        options: Heuristic settings, defaults to ``ShrinkOptions()``

    Returns:
        Plain data: primitives, dicts, lists and strings

    Examples:
        >>> shrink({"user": {"id": 2, "email": "bob@example.com"}, "debug": True})
        {'user': {'id': 2}}
        >>> shrink([{"age": 30}, {"age": 31}])
        ['... (2 items omitted)']
    """
    result = _shrink(value, options or DEFAULT_OPTIONS)
    if result is LIST_WITHOUT_ITEMS:
        return [f"... ({len(value)} items omitted)"]
    return result


def _shrink(value: Any, opts: ShrinkOptions) -> Any:
    if isinstance(value, _SCALARS):
        return value
    if isinstance(value, (bytes, bytearray)):
        try:
            return bytes(value).decode("utf-8")
        except UnicodeDecodeError:
            return repr(value)
    hook = getattr(type(value), "__shrink__", None)
    if hook is not None:
        return hook(value, opts)
    if isinstance(value, BaseException):
        return _shrink_exception(value, opts)
    if isinstance(value, type):
        return type_name(value)
    if inspect.isroutine(value) or isinstance(value, functools.partial):
        return describe_callable(value)

    fields = _record_fields(value)
    if fields is not None:
        return _shrink_record(value, fields, opts)
    if isinstance(value, Mapping):
        return _shrink_mapping(value, opts)
    if isinstance(value, tuple):
        return repr(value)
    if isinstance(value, _LIST_TYPES):
        return _shrink_list(value, opts)

    attributes = _public_attributes(value)
    if attributes is not None:
        return _shrink_record(value, attributes, opts)
    return repr(value)


def _record_fields(value: Any) -> dict[str, Any] | None:
    if isinstance(value, Describable):
        return dict(value.__describe_fields__())
    if dataclasses.is_dataclass(value):
        return {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
    if isinstance(value, BaseModel):
        return {name: getattr(value, name) for name in type(value).model_fields}
    if isinstance(value, tuple) and hasattr(value, "_fields"):
        return dict(value._asdict())
    return None


def _public_attributes(value: Any) -> dict[str, Any] | None:
    if inspect.ismodule(value):
        return None
    attributes = getattr(value, "__dict__", None)
    if not isinstance(attributes, dict):
        return None
    return {k: v for k, v in attributes.items() if not k.startswith("_")}


def _rank(key: Any) -> tuple[int, int, str]:
    if key in _DISCRIMINATOR_ORDER:
        return (0, _DISCRIMINATOR_ORDER.index(key), "")
    if is_identifying(key):
        return (1, 0, str(key))
    return (2, 0, str(key))


def _ordered(entries: dict[Any, Any]) -> dict[Any, Any]:
    return dict(sorted(entries.items(), key=lambda item: _rank(item[0])))


def _is_nonempty_nested(value: Any) -> bool:
    return isinstance(value, (dict, list)) and len(value) > 0


def _json_key(key: Any) -> Any:
    """Keys a JSON encoder accepts stay as they are, others become ``str(key)``."""
    if isinstance(key, (str, int, float, bool, type(None))):
        return key
    return str(key)


def _filter_entries(entries: Mapping[Any, Any], opts: ShrinkOptions) -> dict[Any, Any]:
    kept: dict[Any, Any] = {}
    for key, raw in entries.items():
        value = _shrink(raw, opts)
        if value is LIST_WITHOUT_ITEMS:
            continue
        if key in _DISCRIMINATOR_KEYS or is_identifying(key) or _is_nonempty_nested(value):
            kept[_json_key(key)] = value
    return _ordered(kept)


def _shrink_record(value: Any, fields: Mapping[str, Any], opts: ShrinkOptions) -> dict[str, Any]:
    kept = _filter_entries(fields, opts)
    if not kept:
        return {}
    return {TYPE_KEY: type_name(value), **kept}


def _shrink_mapping(mapping: Mapping[Any, Any], opts: ShrinkOptions) -> dict[Any, Any]:
    if any(key in mapping for key in _VERBATIM_KEYS):
        return dict(mapping)
    return _filter_entries(mapping, opts)


def _shrink_exception(exc: BaseException, opts: ShrinkOptions) -> dict[str, Any]:
    projection: dict[str, Any] = {
        TYPE_KEY: type_name(exc),
        MESSAGE_KEY: exception_message(exc),
    }
    attributes = getattr(exc, "__dict__", None) or {}
    for key in sorted(attributes):
        if key == "message" or key.startswith("_"):
            continue
        value = _shrink(attributes[key], opts)
        projection[key] = [] if value is LIST_WITHOUT_ITEMS else value
    return projection


def _is_keyword_shaped(items: list[Any]) -> bool:
    keys = []
    for item in items:
        if not (isinstance(item, tuple) and len(item) == 2 and isinstance(item[0], str)):
            return False
        if hasattr(item, "_fields"):
            return False
        keys.append(item[0])
    return len(set(keys)) == len(keys)


def _is_uninteresting(value: Any) -> bool:
    return value is LIST_WITHOUT_ITEMS or (isinstance(value, (dict, list)) and not value)


def _shrink_list(values: Any, opts: ShrinkOptions) -> list[Any] | dict[Any, Any] | _ListWithoutItems:
    items = list(values)
    if not items:
        return []
    if _is_keyword_shaped(items):
        return _shrink_mapping(dict(items), opts)

    shrunk = [_shrink(item, opts) for item in items]
    if all(_is_uninteresting(item) for item in shrunk):
        return LIST_WITHOUT_ITEMS
    shrunk = [[] if item is LIST_WITHOUT_ITEMS else item for item in shrunk]

    if len(shrunk) > opts.max_list_items:
        keep = opts.max_list_items - 1
        return shrunk[:keep] + [f"... ({len(shrunk) - keep} more)"]
    return shrunk


# =============================================================================
# RENDERING
# =============================================================================


def render(value: Any, options: ShrinkOptions | None = None) -> str:
    """
    Human rendering of a value, built on its shrunk projection.

    Exceptions render as ``#TypeName<...>`` (their message is reported
    separately); types with their own ``__shrink__`` hook use their ``repr``.

    >>> render({"id": 1, "password": "hunter2"})
    "{'id': 1}"
    """
    if getattr(type(value), "__shrink__", None) is not None:
        return repr(value)
    if isinstance(value, BaseException):
        return f"#{type_name(value)}<...>"
    return repr(shrink(value, options))


__all__ = [
    "TYPE_KEY",
    "MESSAGE_KEY",
    "ROOT_REASON_KEY",
    "CONTEXTS_KEY",
    "LIST_WITHOUT_ITEMS",
    "ShrinkOptions",
    "DEFAULT_OPTIONS",
    "Describable",
    "shrink",
    "render",
    "type_name",
    "exception_message",
    "describe_callable",
    "is_identifying",
]
