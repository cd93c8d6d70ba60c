"""Tests for identifier assignment and reference paths."""

from __future__ import annotations

from typing import Optional

from types_to_jsonschema.ref import DEFAULT_REF_PREFIX, Resolver
from types_to_jsonschema.reflect import describe
from types_to_jsonschema.type_description import Kind, TypeDescription

from .fixture_types import Box, Holder, Node, Shape


class _Named(TypeDescription):
    def __init__(self, namespace: str, name: str) -> None:
        self._namespace = namespace
        self._name = name

    @property
    def kind(self) -> Kind:
        return Kind.STRUCT

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def name(self) -> str:
        return self._name


def test_distinct_types_sharing_a_name_get_suffixes_in_first_seen_order() -> None:
    """The first type keeps the bare name; later ones get the next integer."""
    resolver = Resolver()

    first = resolver.resolve(_Named("pkg.a", "Node"))
    second = resolver.resolve(_Named("pkg.b", "Node"))
    third = resolver.resolve(_Named("pkg.c", "Node"))

    assert [first.id, second.id, third.id] == ["Node", "Node1", "Node2"]
    assert resolver.resolve(_Named("pkg.b", "Node")).id == "Node1"
    assert resolver.resolve(_Named("pkg.a", "Node")).id == "Node"


def test_same_namespace_and_name_share_hash() -> None:
    """Identity is derived from namespace plus name only."""
    resolver = Resolver()

    left = resolver.resolve(_Named("pkg", "Thing"))
    right = resolver.resolve(_Named("pkg", "Thing"))

    assert left == right
    assert left.hash != resolver.resolve(_Named("other", "Thing")).hash


def test_suffixed_id_skips_a_type_literally_named_like_the_suffix() -> None:
    """A real ``Node1`` type keeps its name and pushes the next ``Node`` further."""
    resolver = Resolver()

    resolver.resolve(_Named("pkg.a", "Node"))
    literal = resolver.resolve(_Named("pkg.x", "Node1"))
    duplicate = resolver.resolve(_Named("pkg.b", "Node"))

    assert literal.id == "Node1"
    assert duplicate.id == "Node2"


def test_nested_class_with_same_name_is_disambiguated() -> None:
    """Module-level and nested classes with one name get distinct identifiers."""
    resolver = Resolver()

    outer = resolver.resolve(describe(Node))
    nested = resolver.resolve(describe(Holder.Node))

    assert (outer.id, nested.id) == ("Node", "Node1")
    assert str(nested) == f"{Node.__module__}.Holder.Node"


def test_generic_arguments_are_trimmed_from_the_id() -> None:
    """``Box[int]`` and ``Box[str]`` share the base name ``Box``."""
    resolver = Resolver()

    ints = resolver.resolve(describe(Box[int]))
    strs = resolver.resolve(describe(Box[str]))

    assert (ints.id, strs.id) == ("Box", "Box1")
    assert (ints.name, strs.name) == ("Box[int]", "Box[str]")


def test_anonymous_types_are_not_unique() -> None:
    """Builtins and unnamed shapes never get their own definition."""
    resolver = Resolver()

    assert not resolver.resolve(describe(int)).unique
    assert not resolver.resolve(describe(list[Node])).unique
    assert resolver.resolve(describe(Node)).unique


def test_ref_path_uses_prefix() -> None:
    """Paths join the prefix and the identifier; an empty prefix means the default."""
    assert Resolver().resolve(describe(Node)).path == "#/$defs/Node"
    assert Resolver("").ref_prefix == DEFAULT_REF_PREFIX

    custom = Resolver("#/components/schemas").resolve(describe(Node))

    assert custom.path == "#/components/schemas/Node"
    assert custom.with_defs("#/$defs").path == "#/$defs/Node"


def test_pointer_to_interface_resolves_to_the_interface() -> None:
    """An optional protocol is identified as the protocol when asked to look through it."""
    resolver = Resolver()

    direct = resolver.resolve(describe(Shape))
    through_pointer = resolver.resolve(describe(Optional[Shape]), indirect=True)

    assert through_pointer == direct
    assert not resolver.resolve(describe(Optional[Shape])).unique
