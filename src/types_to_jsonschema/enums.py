"""Enumerated-value capability detection."""

from __future__ import annotations

import enum
import json
from collections.abc import Sequence
from typing import Any, Optional, Protocol

from pydantic_core import to_jsonable_python

from .json_types import JSONValue, canonical_json


class JSONEnum(Protocol):
    """A type that lists its legal values as raw JSON literals."""

    @classmethod
    def json_values(cls) -> Sequence[str]: ...


class StringEnum(Protocol):
    """A type that lists its legal values as plain strings."""

    @classmethod
    def string_values(cls) -> Sequence[str]: ...


def enum_values_of(target: Any) -> Optional[list[JSONValue]]:
    """Return the ordered legal values of an enum-like class.

    Args:
        target (Any): Class to inspect.

    Returns:
        Optional[list[JSONValue]]: Values in the order the type reports them,
            or ``None`` when the class is not enum-like.
    """
    if not isinstance(target, type):
        return None

    json_values = getattr(target, "json_values", None)
    if callable(json_values):
        return [json.loads(raw) for raw in json_values()]

    string_values = getattr(target, "string_values", None)
    if callable(string_values):
        return [str(value) for value in string_values()]

    if issubclass(target, enum.Enum):
        return [to_jsonable_python(member.value) for member in target]

    return None


def sort_enum_values(values: list[JSONValue]) -> list[JSONValue]:
    """Order literals by their canonical JSON text."""
    return sorted(values, key=canonical_json)
