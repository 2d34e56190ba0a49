"""Serializers used by the JSON log adapter."""

from __future__ import annotations

import json
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Serializer(Protocol):
    def encode(self, value: Any) -> str: ...


class JsonSerializer:
    """``json.dumps`` keeping insertion order; non-JSON values go through ``str``.

    >>> JsonSerializer().encode({"b": 1, "a": (1, 2)})
    '{"b": 1, "a": [1, 2]}'
    """

    def __init__(self, *, indent: int | None = None):
        self.indent = indent

    def encode(self, value: Any) -> str:
        return json.dumps(value, default=str, ensure_ascii=False, indent=self.indent)


__all__ = ["Serializer", "JsonSerializer"]
