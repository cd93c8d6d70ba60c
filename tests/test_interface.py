"""Tests for polymorphic interface expansion."""

from __future__ import annotations

from jsonschema import Draft202012Validator

from types_to_jsonschema import Interfaces, SchemaOptions, Schemas, describe

from .fixture_types import Circle, Drawing, Rectangle, Shape

MODULE = Shape.__module__


def test_interface_expands_to_sorted_any_of() -> None:
    """Implementations are listed by registration key, whatever the order they came in."""
    schemas = Schemas()
    shapes = schemas.define_interface(Shape)

    rectangle = shapes.define(Rectangle)
    assert shapes.add(Circle) is Circle

    assert rectangle.to_dict() == {"$ref": "#/$defs/Rectangle"}
    assert schemas.to_dict()["Shape"] == {
        "title": "Shape",
        "description": f"{MODULE}.Shape",
        "anyOf": [{"$ref": "#/$defs/Circle"}, {"$ref": "#/$defs/Rectangle"}],
    }


def test_shared_interfaces_collection() -> None:
    """A collection built up front expands interfaces met through fields."""
    interfaces = Interfaces()
    interfaces.add(describe(Shape), describe(Rectangle), describe(Circle))
    schemas = Schemas(interfaces=interfaces)

    schemas.define(Drawing)

    assert schemas.to_dict()["Drawing"]["properties"] == {
        "Main": {"$ref": "#/$defs/Shape"},
        "Backup": {"anyOf": [{"$ref": "#/$defs/Shape"}, {"type": "null"}]},
    }
    assert schemas.to_dict()["Shape"]["anyOf"] == [
        {"$ref": "#/$defs/Circle"},
        {"$ref": "#/$defs/Rectangle"},
    ]
    assert schemas.interfaces is interfaces


def test_interface_without_implementations_is_permissive() -> None:
    """A bare protocol accepts anything unless object strictness is configured."""
    permissive = Schemas()
    strict = Schemas(options=SchemaOptions(interface_type="object"))

    permissive.define(Shape)
    strict.define(Shape)

    assert "type" not in permissive.to_dict()["Shape"]
    assert strict.to_dict()["Shape"]["type"] == "object"


def test_standalone_interface_schema_validates_instances() -> None:
    """Extra properties are rejected by every alternative."""
    schemas = Schemas()
    shapes = schemas.define_interface(Shape)
    shapes.add(Circle)
    shapes.add(Rectangle)

    validator = Draft202012Validator(schemas.schema_of(Shape).to_dict())

    assert validator.is_valid({"Radius": 1.5})
    assert validator.is_valid({"Width": 1, "Height": 2})
    assert not validator.is_valid({"Radius": 1.5, "Width": 1})
    assert not validator.is_valid({"Width": 1})
