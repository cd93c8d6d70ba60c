"""JSON-compatible typing aliases and value helpers shared across the project."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, Union

type JSONPrimitive = Union[str, int, float, bool, None]
type JSONValue = Union[JSONPrimitive, list[JSONValue], Mapping[str, JSONValue]]
type JSONObject = Mapping[str, JSONValue]
type MutableJSONObject = dict[str, JSONValue]


def clone_json(value: Any) -> Any:
    """Copy JSON-like values structurally."""
    if isinstance(value, dict):
        return {key: clone_json(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [clone_json(item) for item in value]
    return value


def canonical_json(value: Any) -> str:
    """Return a stable text encoding used to order JSON literals."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)
