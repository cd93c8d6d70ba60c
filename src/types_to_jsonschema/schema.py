"""Schema node model emitted by the walker."""

from __future__ import annotations

import enum
import json
from typing import Annotated, Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, model_serializer
from pydantic_core.core_schema import SerializerFunctionWrapHandler

from .json_types import clone_json
from .ref import Ref


class SchemaType(str, enum.Enum):
    """Values of the ``type`` keyword."""

    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    OBJECT = "object"
    ARRAY = "array"
    BOOLEAN = "boolean"
    NULL = "null"
    UNKNOWN = "unknown"


def _ref_path(ref: Ref) -> str:
    return ref.path


RefPath = Annotated[Ref, PlainSerializer(_ref_path, return_type=str)]

# Keys dropped from the output when empty, by alias and by attribute name.
_OMIT_EMPTY = {
    "anyOf",
    "any_of",
    "enum",
    "properties",
    "patternProperties",
    "pattern_properties",
    "required",
    "$defs",
    "defs",
}


class Schema(BaseModel):
    """One node of a JSON Schema tree.

    Unset keywords are ``None`` and are omitted from :meth:`to_dict` output,
    as are empty ``anyOf``/``enum``/``properties``/``required`` collections.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    description: Optional[str] = None
    default: Any = None
    example: Any = None
    examples: Optional[list[Any]] = None

    any_of: Optional[list[Schema]] = Field(default=None, alias="anyOf")
    ref: Optional[RefPath] = Field(default=None, alias="$ref")
    type: Optional[SchemaType] = None
    enum: Optional[list[Any]] = None
    properties: Optional[dict[str, Schema]] = None
    pattern_properties: Optional[dict[str, Schema]] = Field(
        default=None, alias="patternProperties"
    )
    format: Optional[str] = None

    maximum: Optional[Union[int, float]] = None
    minimum: Optional[Union[int, float]] = None

    max_length: Optional[int] = Field(default=None, alias="maxLength")
    min_length: Optional[int] = Field(default=None, alias="minLength")
    pattern: Optional[str] = None

    items: Optional[Schema] = None
    min_items: Optional[int] = Field(default=None, alias="minItems")
    max_items: Optional[int] = Field(default=None, alias="maxItems")

    required: Optional[list[str]] = None
    additional_properties: Optional[bool] = Field(default=None, alias="additionalProperties")

    defs: Optional[dict[str, Schema]] = Field(default=None, alias="$defs")

    @model_serializer(mode="wrap")
    def _omit_empty(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        return {
            key: value
            for key, value in data.items()
            if value is not None and not (key in _OMIT_EMPTY and not value)
        }

    def to_dict(self) -> dict[str, Any]:
        """Return the node as plain JSON data using JSON Schema keyword names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def __str__(self) -> str:
        return json.dumps(self.to_dict(), indent=2, sort_keys=True)

    def add_required(self, *names: str) -> None:
        """Append names to ``required`` unless already listed."""
        if self.required is None:
            self.required = []
        for name in names:
            if name not in self.required:
                self.required.append(name)

    def merge_props(self, other: Optional[Schema]) -> None:
        """Merge another object node's properties and required names into this one.

        Properties already present are kept.
        """
        if self.properties is None:
            self.properties = {}
        if other is None:
            return
        for name, prop in (other.properties or {}).items():
            self.properties.setdefault(name, prop)
        self.add_required(*(other.required or []))

    def assign(self, other: Schema) -> None:
        """Replace every keyword of this node with the keywords of ``other``."""
        for name in Schema.model_fields:
            setattr(self, name, getattr(other, name))

    def clone(self) -> Schema:
        """Return a deep structural copy of this node."""
        values = {name: _clone_value(getattr(self, name)) for name in Schema.model_fields}
        return Schema.model_construct(**values)

    def change_defs(self, defs: str) -> None:
        """Point every reference in this subtree at another definitions prefix."""
        if self.ref is not None:
            self.ref = self.ref.with_defs(defs)
        for child in self.children():
            child.change_defs(defs)

    def children(self) -> list[Schema]:
        """Direct child nodes, including embedded definitions."""
        nodes: list[Schema] = list(self.any_of or [])
        nodes.extend((self.properties or {}).values())
        nodes.extend((self.pattern_properties or {}).values())
        if self.items is not None:
            nodes.append(self.items)
        nodes.extend((self.defs or {}).values())
        return nodes


def _clone_value(value: Any) -> Any:
    if isinstance(value, Schema):
        return value.clone()
    if isinstance(value, list):
        return [_clone_value(item) for item in value]
    if isinstance(value, dict):
        return {key: _clone_value(item) for key, item in value.items()}
    return clone_json(value)
