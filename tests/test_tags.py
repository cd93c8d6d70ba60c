"""Tests for field tag parsing."""

from __future__ import annotations

import pytest

from types_to_jsonschema.reflect import describe
from types_to_jsonschema.tags import (
    JSONTag,
    TagError,
    Tags,
    parse_json_tag,
    read_literal,
    read_literal_list,
)
from types_to_jsonschema.type_description import FieldDescription


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("", None),
        ("-", JSONTag(ignore=True)),
        ("name", JSONTag(name="name")),
        ("name,omitempty", JSONTag(name="name", omitempty=True)),
        (",omitempty,string", JSONTag(omitempty=True, string=True)),
    ],
)
def test_parse_json_tag(text: str, expected: JSONTag | None) -> None:
    """Name and options are split on commas; ``-`` ignores the field."""
    assert parse_json_tag({"json": text}) == expected


def test_tags_encode_non_string_values() -> None:
    """Values are kept as tag text: strings verbatim, the rest as JSON."""
    tags = Tags({"item-min": 0}, description="Port", default=[1, 2], flag=True)

    assert dict(tags) == {
        "item-min": "0",
        "description": "Port",
        "default": "[1, 2]",
        "flag": "true",
    }


def test_read_literal_retries_as_quoted_string() -> None:
    """Unquoted strings are accepted for string fields only."""
    text_field = FieldDescription("Name", describe(str), {"default": "bob"})
    number_field = FieldDescription("Count", describe(int), {"default": "bob"})

    assert read_literal(text_field, "default") == "bob"
    with pytest.raises(TagError, match="value of default tag is invalid json string"):
        read_literal(number_field, "default")


def test_read_literal_list() -> None:
    """Each listed value is validated by the field type."""
    field = FieldDescription("Sizes", describe(int), {"examples": "[1, 2]", "bad": "[1, \"x\"]"})

    assert read_literal_list(field, "examples") == [1, 2]
    with pytest.raises(TagError, match="bad"):
        read_literal_list(field, "bad")
    with pytest.raises(TagError, match="must be a json list"):
        read_literal_list(FieldDescription("Size", describe(int), {"examples": "1"}), "examples")
