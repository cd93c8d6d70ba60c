"""Abstract type descriptions consumed by the schema walker."""

from __future__ import annotations

import abc
import enum
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Optional

from .json_types import JSONValue


class Kind(str, enum.Enum):
    """Structural kinds a type description can have."""

    BOOL = "bool"
    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    NULL = "null"
    SLICE = "slice"
    ARRAY = "array"
    MAP = "map"
    STRUCT = "struct"
    POINTER = "pointer"
    INTERFACE = "interface"
    UNION = "union"
    UNKNOWN = "unknown"


class LiteralError(ValueError):
    """Raised when a literal cannot be parsed as a value of a described type."""


class AnnotationResolutionError(RuntimeError):
    """Raised when the annotations of a class cannot be resolved to types."""


class TypeDescription(abc.ABC):
    """Read-only view of a type's structural shape.

    Only ``kind``, ``namespace`` and ``name`` are mandatory. The other members
    are consulted by the walker depending on the kind:

    - ``elem`` for slice, array, map and pointer kinds.
    - ``length`` for the array kind.
    - ``fields`` for the struct kind.
    - ``variants`` for the union kind.
    - ``enum_values`` for every kind; ``None`` means the type is not an enum.
    """

    @property
    @abc.abstractmethod
    def kind(self) -> Kind:
        """Structural kind."""

    @property
    @abc.abstractmethod
    def namespace(self) -> str:
        """Module or package path, empty for builtin and anonymous types."""

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Bare name, empty for anonymous types."""

    @property
    def qualname(self) -> str:
        """Name qualified by its enclosing scopes inside the namespace."""
        return self.name

    @property
    def key(self) -> str:
        """Stable key used for registrations and for ordering implementations."""
        return f"{self.namespace}.{self.qualname}"

    @property
    def length(self) -> Optional[int]:
        return None

    def elem(self) -> TypeDescription:
        raise TypeError(f"{self.kind.value} type {self.key} has no element type")

    def fields(self) -> Sequence[FieldDescription]:
        return ()

    def variants(self) -> Sequence[TypeDescription]:
        return ()

    def enum_values(self) -> Optional[list[JSONValue]]:
        return None

    def parse_literal(self, text: str) -> JSONValue:
        """Parse a JSON literal as a value of this type and return its JSON form.

        Args:
            text (str): JSON-encoded literal.

        Returns:
            JSONValue: The literal re-encoded as plain JSON data.

        Raises:
            LiteralError: If the literal is not valid for this type.
        """
        raise LiteralError(f"{self.key} does not accept literals")


@dataclass(frozen=True)
class FieldDescription:
    """One declared field of a struct type."""

    name: str
    type: TypeDescription
    tags: Mapping[str, str] = field(default_factory=dict)
    embedded: bool = False

    @property
    def exported(self) -> bool:
        return not self.name.startswith("_")


def indirect(description: TypeDescription) -> TypeDescription:
    """Return the pointee of a pointer description, or the description itself."""
    if description.kind is Kind.POINTER:
        return description.elem()
    return description
