"""Schema set: definition table, extension points and derivation entry points."""

from __future__ import annotations

import datetime
import json
import logging
import pathlib
import threading
import uuid
from collections.abc import Callable
from typing import Any, Optional, TypeVar

from pydantic_core import to_jsonable_python

from .config import SchemaOptions
from .ref import DEFAULT_REF_PREFIX, Ref, Resolver
from .reflect import describe
from .registry import Handler, Hijack, Interfaces, PolymorphismGroup, Registry
from .schema import Schema, SchemaType
from .type_description import AnnotationResolutionError
from .walker import FieldDefinitionError, TypeWalker

logger = logging.getLogger(__name__)

T = TypeVar("T")

_DATETIME_FORMATS: tuple[tuple[type, str], ...] = (
    (datetime.datetime, "date-time"),
    (datetime.date, "date"),
    (datetime.time, "time"),
    (datetime.timedelta, "duration"),
)
_PATH_TYPES = (pathlib.Path, pathlib.PurePath, pathlib.PurePosixPath, pathlib.PureWindowsPath)


class UndefinedSchemaError(RuntimeError):
    """Raised when an operation needs a table entry that does not exist."""


class Schemas:
    """A set of named schema definitions derived from Python types.

    Definitions accumulate as types are defined, directly or through the fields
    of other types, and live as long as the set. Every ``$ref`` emitted by the
    set is ``<ref_prefix>/<id>``.

    Public methods hold one re-entrant lock, so handlers may call back into the
    set while it is deriving.
    """

    def __init__(
        self,
        ref_prefix: Optional[str] = None,
        *,
        options: Optional[SchemaOptions] = None,
        interfaces: Optional[Interfaces] = None,
    ) -> None:
        self.options = options if options is not None else SchemaOptions()
        self._table: dict[str, Schema] = {}
        self._resolver = Resolver(ref_prefix or self.options.ref_prefix)
        self._registry = Registry(interfaces)
        self._walker = TypeWalker(
            table=self._table,
            resolver=self._resolver,
            registry=self._registry,
            options=self.options,
        )
        self._lock = threading.RLock()

        for name in self.options.hijack:
            getattr(self, f"hijack_{name}")()

    @property
    def ref_prefix(self) -> str:
        return self._resolver.ref_prefix

    @property
    def interfaces(self) -> Interfaces:
        return self._registry.interfaces

    def ref(self, target: Any) -> Ref:
        """Return the identifier of a type; a pointer to an interface resolves to the interface."""
        with self._lock:
            return self._resolver.resolve(describe(target), indirect=True)

    def define(self, target: Any) -> Schema:
        """Derive the schema of a type and register every named type it reaches.

        Definitions added by a call that raises are removed.

        Args:
            target (Any): Annotation or :class:`TypeDescription` to define.

        Returns:
            Schema: ``$ref`` node for named types, inline node otherwise.

        Raises:
            FieldDefinitionError: If a field tag is invalid for the field type.
            AnnotationResolutionError: If a class annotation names an unknown type.
        """
        with self._lock:
            before = set(self._table)
            try:
                return self._walker.derive(describe(target))
            except (FieldDefinitionError, AnnotationResolutionError):
                for added in [key for key in self._table if key not in before]:
                    del self._table[added]
                raise

    def peek(self, target: Any) -> Optional[Schema]:
        """Return the registered node of a type or of a ``$ref`` node without deriving anything.

        An inline node (no ``$ref``) is returned as is.
        """
        with self._lock:
            if isinstance(target, Schema):
                if target.ref is None:
                    return target
                return self._table.get(target.ref.id)

            ref = self.ref(target)
            if not ref.unique:
                return None
            return self._table.get(ref.id)

    def set_schema(self, target: Any, node: Schema) -> None:
        """Replace the definition of a type, keeping its title and description."""
        with self._lock:
            self.define(target)
            existing = self._require(target)
            title, description = existing.title, existing.description
            existing.assign(node.clone())
            existing.title = title
            existing.description = description

    def set_description(self, target: Any, description: str) -> None:
        with self._lock:
            self.define(target)
            self._require(target).description = description

    def handle(self, target: Any, handler: Handler) -> None:
        """Register a function whose node fully replaces the derived one.

        The node is stored as the definition of a named type, so ``define``
        still returns a ``$ref`` to it; unnamed types get the node inline.
        """
        with self._lock:
            self._registry.set_handler(describe(target), handler)

    def hijack(self, target: Any, hijack: Hijack) -> None:
        """Register a function that adjusts the node after default derivation."""
        with self._lock:
            self._registry.set_hijack(describe(target), hijack)

    def define_interface(self, interface: Any) -> Interface:
        """Register an interface type whose schema is the ``anyOf`` of its implementations."""
        with self._lock:
            description = describe(interface)
            group = self._registry.interfaces.group(description)
            self.define(description)
            return Interface(self, group)

    def any_of(self, *targets: Any) -> Schema:
        """Return an inline node accepting any of the given types."""
        with self._lock:
            return Schema(any_of=[self.define(target) for target in targets])

    def const(self, value: Any, target: Any = None) -> Schema:
        """Return the node of ``target`` (default: the value's type) pinned to one value."""
        with self._lock:
            node = self.define(type(value) if target is None else target)
            node.enum = [to_jsonable_python(value)]
            return node

    def to_standalone(self, node: Schema) -> Schema:
        """Return a self-contained copy of ``node`` that embeds every definition.

        The copy and its ``$defs`` share nothing with the live table, and every
        reference in them uses the ``#/$defs`` prefix.
        """
        with self._lock:
            standalone = node.clone()
            standalone.defs = {key: value.clone() for key, value in self._table.items()}
            standalone.change_defs(DEFAULT_REF_PREFIX)
            return standalone

    def schema_of(self, target: Any) -> Schema:
        """Define a type and return its standalone schema."""
        with self._lock:
            return self.to_standalone(self.define(target))

    def json(self) -> dict[str, Schema]:
        """Live definition table keyed by identifier."""
        return dict(self._table)

    def to_dict(self) -> dict[str, Any]:
        with self._lock:
            return {key: self._table[key].to_dict() for key in sorted(self._table)}

    def __str__(self) -> str:
        return json.dumps(self.to_dict(), indent=2, sort_keys=True)

    def __len__(self) -> int:
        return len(self._table)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._table

    def hijack_datetime(self) -> None:
        """Render ``datetime`` types as formatted strings."""
        for target, fmt in _DATETIME_FORMATS:
            self.hijack(target, _as_string(fmt))

    def hijack_uuid(self) -> None:
        self.hijack(uuid.UUID, _as_string("uuid"))

    def hijack_path(self) -> None:
        for target in _PATH_TYPES:
            self.hijack(target, _as_string(None))

    def _require(self, target: Any) -> Schema:
        node = self.peek(target)
        if node is None:
            raise UndefinedSchemaError(f"{target!r} has no definition in this schema set")
        return node


class Interface:
    """Handle for registering implementations of an interface type."""

    def __init__(self, schemas: Schemas, group: PolymorphismGroup) -> None:
        self.schemas = schemas
        self.group = group

    def add(self, implementation: T) -> T:
        """Register an implementation; usable as a class decorator."""
        with self.schemas._lock:
            self.schemas.interfaces.add(self.group.interface, describe(implementation))
            self._refresh()
        return implementation

    def define(self, implementation: Any) -> Schema:
        """Register an implementation and return its schema."""
        with self.schemas._lock:
            self.add(implementation)
            return self.schemas.define(implementation)

    def _refresh(self) -> None:
        node = self.schemas.peek(self.group.interface)
        if node is None:
            return
        node.type = None
        node.any_of = [
            self.schemas.define(implementation) for implementation in self.group.implementations()
        ]


def _as_string(fmt: Optional[str]) -> Callable[[Schema], None]:
    def hijack(node: Schema) -> None:
        node.type = SchemaType.STRING
        node.format = fmt
        node.properties = None
        node.required = None
        node.additional_properties = None

    return hijack
