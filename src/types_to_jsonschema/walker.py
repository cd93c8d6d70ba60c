"""Recursive derivation of schema nodes from type descriptions."""

from __future__ import annotations

import logging
from typing import Optional

from .config import SchemaOptions
from .enums import sort_enum_values
from .json_types import JSONValue
from .ref import Ref, Resolver
from .registry import PolymorphismGroup, Registry
from .schema import Schema, SchemaType
from .tags import TagError, apply_field_tags, parse_json_tag
from .type_description import FieldDescription, Kind, TypeDescription, indirect

logger = logging.getLogger(__name__)

_PRIMITIVE_TYPES = {
    Kind.BOOL: SchemaType.BOOLEAN,
    Kind.STRING: SchemaType.STRING,
    Kind.INTEGER: SchemaType.INTEGER,
    Kind.NUMBER: SchemaType.NUMBER,
    Kind.NULL: SchemaType.NULL,
}


class FieldDefinitionError(RuntimeError):
    """Raised when the metadata of a struct field is invalid for the field type."""

    def __init__(self, field_name: str, message: str) -> None:
        super().__init__(f"fail to load tag on field {field_name}: {message}")
        self.field_name = field_name


class TypeWalker:
    """Derive schema nodes and fill the shared definition table.

    Every named type gets its table slot before its contents are derived, so a
    type that refers back to itself finds the slot and receives a ``$ref``.
    """

    def __init__(
        self,
        *,
        table: dict[str, Schema],
        resolver: Resolver,
        registry: Registry,
        options: SchemaOptions,
    ) -> None:
        self.table = table
        self.resolver = resolver
        self.registry = registry
        self.options = options

    def derive(self, description: TypeDescription) -> Schema:
        """Derive the node for a type.

        Args:
            description (TypeDescription): Type to derive.

        Returns:
            Schema: A ``$ref`` node for named types, otherwise the inline node.

        Raises:
            FieldDefinitionError: If a field tag of a nested struct is invalid.
        """
        ref = self.resolver.resolve(description)
        if ref.unique and ref.id in self.table:
            return Schema(ref=ref)

        node = Schema()
        if ref.unique:
            self.table[ref.id] = node

        if ref.package:
            node.title = description.name
            node.description = str(ref)

        handler = self.registry.handler(description)
        if handler is not None:
            node.assign(handler().clone())
            return self._finish(ref, node)

        values = description.enum_values()
        if values is not None:
            self._derive_enum(description, node, values)
        else:
            group = self.registry.group(description)
            if group is not None:
                self._derive_group(group, node)
            else:
                self._derive_kind(description, node)

        hijack = self.registry.hijack(description)
        if hijack is not None:
            hijack(node)
        return self._finish(ref, node)

    def define_field(self, field: FieldDescription) -> Optional[Schema]:
        """Derive the object fragment contributed by one struct field.

        Returns:
            Optional[Schema]: A node holding ``properties`` and ``required`` to
                merge into the parent, or ``None`` for skipped fields.

        Raises:
            FieldDefinitionError: If the field's default or example tag is invalid.
        """
        if not field.exported:
            return None

        tag = parse_json_tag(field.tags)
        if tag is not None and tag.ignore:
            return None

        fragment = Schema(properties={})
        target = indirect(field.type)
        if field.embedded and (tag is None or not tag.name) and target.kind is Kind.STRUCT:
            for embedded in target.fields():
                fragment.merge_props(self.define_field(embedded))
            return fragment

        prop = self.derive(field.type)
        try:
            apply_field_tags(prop, field, type_of=self.effective_type)
        except TagError as exc:
            raise FieldDefinitionError(field.name, str(exc)) from exc

        name = field.name
        if tag is not None:
            name = tag.name or name
            if tag.string:
                prop.type = SchemaType.STRING

        fragment.properties[name] = prop
        if tag is None or not tag.omitempty:
            fragment.add_required(name)
        return fragment

    def effective_type(self, node: Schema) -> Optional[SchemaType]:
        """Type of a node, read from the referenced definition for ``$ref`` nodes."""
        if node.ref is None:
            return node.type
        definition = self.table.get(node.ref.id)
        return definition.type if definition is not None else None

    def _finish(self, ref: Ref, node: Schema) -> Schema:
        if ref.unique:
            return Schema(ref=ref)
        return node

    def _primitive(self, kind: Kind) -> Optional[SchemaType]:
        if kind is Kind.INTEGER and self.options.numbers == "number":
            return SchemaType.NUMBER
        return _PRIMITIVE_TYPES.get(kind)

    def _derive_enum(
        self,
        description: TypeDescription,
        node: Schema,
        values: list[JSONValue],
    ) -> None:
        if self.options.sort_enum_values:
            values = sort_enum_values(values)
        node.enum = list(values)
        node.type = self._primitive(description.kind)

    def _derive_group(self, group: PolymorphismGroup, node: Schema) -> None:
        node.type = None
        node.any_of = [self.derive(implementation) for implementation in group.implementations()]

    def _derive_kind(self, description: TypeDescription, node: Schema) -> None:
        kind = description.kind

        if kind in _PRIMITIVE_TYPES:
            node.type = self._primitive(kind)

        elif kind is Kind.SLICE:
            node.type = SchemaType.ARRAY
            node.items = self.derive(description.elem())

        elif kind is Kind.ARRAY:
            node.type = SchemaType.ARRAY
            node.items = self.derive(description.elem())
            node.min_items = description.length
            node.max_items = description.length

        elif kind is Kind.MAP:
            node.type = SchemaType.OBJECT
            node.pattern_properties = {"": self.derive(description.elem())}

        elif kind is Kind.STRUCT:
            node.type = SchemaType.OBJECT
            node.additional_properties = False
            node.merge_props(None)
            for field in description.fields():
                node.merge_props(self.define_field(field))

        elif kind is Kind.POINTER:
            node.any_of = [self.derive(description.elem()), Schema(type=SchemaType.NULL)]

        elif kind is Kind.UNION:
            node.any_of = [self.derive(variant) for variant in description.variants()]

        elif kind is Kind.INTERFACE:
            if self.options.interface_type == "object":
                node.type = SchemaType.OBJECT

        else:
            logger.warning("Type %s has no JSON Schema mapping; marking it unknown", description.key)
            node.type = SchemaType.UNKNOWN
