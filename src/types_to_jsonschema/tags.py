"""Field metadata tags and how they layer onto derived schema nodes."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any, Optional, Union

from .json_types import JSONValue
from .schema import Schema, SchemaType
from .type_description import FieldDescription, LiteralError

logger = logging.getLogger(__name__)

TAG_JSON = "json"
TAG_DESCRIPTION = "description"
TAG_FORMAT = "format"
TAG_DEFAULT = "default"
TAG_EXAMPLE = "example"
TAG_EXAMPLES = "examples"
TAG_PATTERN = "pattern"
TAG_MIN = "min"
TAG_MAX = "max"

ITEM_PREFIX = "item-"


class TagError(RuntimeError):
    """Raised when a field tag holds a value that is invalid for the field type."""


@dataclass(frozen=True)
class JSONTag:
    """Parsed ``json`` tag: ``name,option,option``."""

    name: str = ""
    ignore: bool = False
    omitempty: bool = False
    string: bool = False


class Tags(Mapping[str, str]):
    """String-valued field metadata.

    Attach with ``Annotated[int, Tags(description="Port", min=1)]`` or pass the
    same keys through ``dataclasses.field(metadata=...)``. Keys that are not
    valid keyword names go in the positional mapping::

        Tags({"item-min": 0}, max=10)
    """

    def __init__(self, values: Optional[Mapping[str, Any]] = None, /, **tags: Any) -> None:
        merged = dict(values or {})
        merged.update(tags)
        self._tags = {key: tag_text(value) for key, value in merged.items()}

    def __getitem__(self, key: str) -> str:
        return self._tags[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._tags)

    def __len__(self) -> int:
        return len(self._tags)

    def __repr__(self) -> str:
        return f"Tags({self._tags!r})"


class _Embed:
    def __repr__(self) -> str:
        return "EMBED"


EMBED = _Embed()
"""``Annotated`` marker that flattens a struct field into its parent."""


def tag_text(value: Any) -> str:
    """Encode a metadata value as tag text; strings are kept verbatim."""
    if isinstance(value, str):
        return value
    return json.dumps(value, default=str)


def parse_json_tag(tags: Mapping[str, str]) -> Optional[JSONTag]:
    """Parse the ``json`` tag of a field, or return ``None`` when absent."""
    value = tags.get(TAG_JSON)
    if not value:
        return None
    if value == "-":
        return JSONTag(ignore=True)

    name, _, options_text = value.partition(",")
    options = set(options_text.split(",")) if options_text else set()
    return JSONTag(
        name=name,
        omitempty="omitempty" in options,
        string="string" in options,
    )


_MISSING = object()


def read_literal(field: FieldDescription, tag_name: str) -> Any:
    """Read a JSON literal tag as a value of the field type.

    The tag text is first parsed as JSON. If that is not a valid value it is
    retried as a quoted string, so plain string defaults can be written
    unquoted.

    Args:
        field (FieldDescription): Field carrying the tag.
        tag_name (str): Tag key to read.

    Returns:
        Any: The JSON value, or a private sentinel when the tag is absent.

    Raises:
        TagError: If neither reading is valid for the field type.
    """
    text = field.tags.get(tag_name)
    if not text:
        return _MISSING

    try:
        return field.type.parse_literal(text)
    except LiteralError as exc:
        try:
            return field.type.parse_literal(json.dumps(text))
        except LiteralError:
            raise TagError(f"value of {tag_name} tag is invalid json string: {exc}") from exc


def read_literal_list(field: FieldDescription, tag_name: str) -> Any:
    """Read a tag holding a JSON list of literals of the field type."""
    text = field.tags.get(tag_name)
    if not text:
        return _MISSING

    try:
        values = json.loads(text)
    except json.JSONDecodeError as exc:
        raise TagError(f"value of {tag_name} tag is invalid json string: {exc}") from exc
    if not isinstance(values, list):
        raise TagError(f"value of {tag_name} tag must be a json list, got {text!r}")

    parsed: list[JSONValue] = []
    for value in values:
        try:
            parsed.append(field.type.parse_literal(json.dumps(value)))
        except LiteralError as exc:
            raise TagError(f"value {value!r} in {tag_name} tag is invalid: {exc}") from exc
    return parsed


def apply_field_tags(
    node: Schema,
    field: FieldDescription,
    *,
    type_of: Callable[[Schema], Optional[SchemaType]],
) -> None:
    """Layer field-level metadata onto the node derived for a field.

    Args:
        node (Schema): Node returned for the field type; a ``$ref`` node is a
            per-field wrapper, so the shared definition is never touched.
        field (FieldDescription): Field whose tags are applied.
        type_of (Callable[[Schema], Optional[SchemaType]]): Returns the
            effective type of a node, following ``$ref`` to its definition.

    Raises:
        TagError: If a default or example tag is invalid for the field type.
    """
    tags = field.tags
    if tags.get(TAG_DESCRIPTION):
        node.description = tags[TAG_DESCRIPTION]
    if tags.get(TAG_FORMAT):
        node.format = tags[TAG_FORMAT]

    default = read_literal(field, TAG_DEFAULT)
    if default is not _MISSING:
        node.default = default
    example = read_literal(field, TAG_EXAMPLE)
    if example is not _MISSING:
        node.example = example
    examples = read_literal_list(field, TAG_EXAMPLES)
    if examples is not _MISSING:
        node.examples = examples

    target = _value_node(node)
    _apply_bounds(target, tags, schema_type=type_of(target), prefix="")
    if target.items is not None:
        _apply_bounds(target.items, tags, schema_type=type_of(target.items), prefix=ITEM_PREFIX)


def _value_node(node: Schema) -> Schema:
    """Return the non-null branch of a nullable wrapper, or the node itself."""
    if node.any_of and len(node.any_of) == 2 and node.any_of[1].type is SchemaType.NULL:
        return node.any_of[0]
    return node


def _apply_bounds(
    node: Schema,
    tags: Mapping[str, str],
    *,
    schema_type: Optional[SchemaType],
    prefix: str,
) -> None:
    low = tags.get(f"{prefix}{TAG_MIN}")
    high = tags.get(f"{prefix}{TAG_MAX}")

    if schema_type is SchemaType.STRING:
        pattern = tags.get(f"{prefix}{TAG_PATTERN}")
        if pattern:
            node.pattern = pattern
        node.min_length = _integer(low, fallback=node.min_length)
        node.max_length = _integer(high, fallback=node.max_length)
        return

    if schema_type is SchemaType.ARRAY:
        if node.min_items is None:
            node.min_items = _integer(low, fallback=None)
        if node.max_items is None:
            node.max_items = _integer(high, fallback=None)
        return

    if schema_type in (SchemaType.NUMBER, SchemaType.INTEGER) or node.ref is not None:
        node.minimum = _number(low, fallback=node.minimum)
        node.maximum = _number(high, fallback=node.maximum)


def _number(
    text: Optional[str],
    *,
    fallback: Optional[Union[int, float]],
) -> Optional[Union[int, float]]:
    if not text:
        return fallback
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        logger.debug("Ignoring non-numeric bound %r", text)
        return fallback


def _integer(text: Optional[str], *, fallback: Optional[int]) -> Optional[int]:
    value = _number(text, fallback=fallback)
    if value is None:
        return None
    return int(value)
