"""Describe Python annotations as structural type descriptions."""

from __future__ import annotations

import collections
import collections.abc
import copy
import dataclasses
import inspect
import json
import logging
import numbers
import types
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import (
    Annotated,
    Any,
    ClassVar,
    Literal,
    NewType,
    NotRequired,
    Optional,
    Required,
    TypeAliasType,
    TypeVar,
    Union,
    get_args,
    get_origin,
    get_type_hints,
    is_typeddict,
)

import annotated_types
from pydantic import BaseModel, TypeAdapter, ValidationError
from pydantic.errors import PydanticUndefinedAnnotation, PydanticUserError
from pydantic.fields import FieldInfo
from pydantic_core import PydanticUndefined, to_jsonable_python

from .enums import enum_values_of
from .json_types import JSONValue
from .tags import EMBED, TAG_DEFAULT, TAG_DESCRIPTION, TAG_EXAMPLES, TAG_JSON, tag_text
from .type_description import (
    AnnotationResolutionError,
    FieldDescription,
    Kind,
    LiteralError,
    TypeDescription,
)

logger = logging.getLogger(__name__)

_SEQUENCE_ORIGINS = {
    list,
    set,
    frozenset,
    collections.deque,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Set,
    collections.abc.MutableSet,
    collections.abc.Collection,
    collections.abc.Iterable,
}
_MAPPING_ORIGINS = {
    dict,
    collections.OrderedDict,
    collections.defaultdict,
    collections.abc.Mapping,
    collections.abc.MutableMapping,
}

_LIMIT_TAGS: tuple[tuple[type, str, str], ...] = (
    (annotated_types.Ge, "ge", "min"),
    (annotated_types.Le, "le", "max"),
    (annotated_types.MinLen, "min_length", "min"),
    (annotated_types.MaxLen, "max_length", "max"),
)


class PythonType(TypeDescription):
    """Type description backed by a Python annotation.

    Element types, fields, variants and enum values are produced lazily so
    that self-referential annotations can be described.
    """

    def __init__(
        self,
        target: Any,
        kind: Kind,
        *,
        namespace: str = "",
        name: str = "",
        qualname: str = "",
        length: Optional[int] = None,
        elem: Optional[Callable[[], TypeDescription]] = None,
        fields: Optional[Callable[[], Sequence[FieldDescription]]] = None,
        variants: Optional[Callable[[], Sequence[TypeDescription]]] = None,
        enum: Optional[Callable[[], list[JSONValue]]] = None,
    ) -> None:
        self.target = target
        self._kind = kind
        self._namespace = namespace
        self._name = name
        self._qualname = qualname or name
        self._length = length
        self._elem = elem
        self._fields = fields
        self._variants = variants
        self._enum = enum

    @property
    def kind(self) -> Kind:
        return self._kind

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def name(self) -> str:
        return self._name

    @property
    def qualname(self) -> str:
        return self._qualname

    @property
    def key(self) -> str:
        if self._namespace:
            return f"{self._namespace}.{self._qualname}"
        return f"{self._kind.value}:{self.target!r}"

    @property
    def length(self) -> Optional[int]:
        return self._length

    def elem(self) -> TypeDescription:
        if self._elem is None:
            return super().elem()
        return self._elem()

    def fields(self) -> Sequence[FieldDescription]:
        if self._fields is None:
            return ()
        return self._fields()

    def variants(self) -> Sequence[TypeDescription]:
        if self._variants is None:
            return ()
        return self._variants()

    def enum_values(self) -> Optional[list[JSONValue]]:
        if self._enum is None:
            return None
        return self._enum()

    def parse_literal(self, text: str) -> JSONValue:
        adapter = _type_adapter(self.target)
        try:
            value = adapter.validate_json(text)
        except ValidationError as exc:
            raise LiteralError(str(exc)) from exc
        return adapter.dump_python(value, mode="json")

    def renamed(self, target: Any, *, namespace: str, name: str, qualname: str) -> PythonType:
        """Return a copy of this description that carries another type's identity."""
        renamed = copy.copy(self)
        renamed.target = target
        renamed._namespace = namespace
        renamed._name = name
        renamed._qualname = qualname or name
        return renamed

    def __repr__(self) -> str:
        return f"PythonType({self.key!r}, kind={self._kind.value})"


def describe(target: Any) -> TypeDescription:
    """Describe a Python annotation.

    Args:
        target (Any): A class, typing construct, or an existing description.

    Returns:
        TypeDescription: Structural description of ``target``.
    """
    if isinstance(target, TypeDescription):
        return target

    target = _strip_annotated(target)

    if target is None or target is types.NoneType:
        return PythonType(None, Kind.NULL)
    if target is Any or target is object:
        return PythonType(target, Kind.INTERFACE)
    if isinstance(target, TypeVar):
        if target.__bound__ is not None:
            return describe(target.__bound__)
        return PythonType(target, Kind.INTERFACE)
    if isinstance(target, NewType):
        return _named(describe(target.__supertype__), target)
    if isinstance(target, TypeAliasType):
        return _named(describe(target.__value__), target)

    origin = get_origin(target)
    if origin is Literal:
        values = [to_jsonable_python(value) for value in get_args(target)]
        return PythonType(target, _literal_kind(values), enum=lambda: list(values))
    if origin is Union or isinstance(target, types.UnionType):
        return _describe_union(target)
    if origin is not None:
        return _describe_generic(target, origin, get_args(target))
    if isinstance(target, type):
        return _describe_class(target, target)

    logger.debug("No structural mapping for %r", target)
    return PythonType(target, Kind.UNKNOWN)


def _describe_union(target: Any) -> TypeDescription:
    members = get_args(target)
    present = [member for member in members if member not in (None, types.NoneType)]
    if len(present) == len(members):
        return PythonType(target, Kind.UNION, variants=lambda: [describe(m) for m in members])
    if not present:
        return PythonType(None, Kind.NULL)

    pointee = present[0] if len(present) == 1 else Union[tuple(present)]
    return PythonType(target, Kind.POINTER, elem=lambda: describe(pointee))


def _describe_generic(target: Any, origin: Any, args: tuple[Any, ...]) -> TypeDescription:
    if origin in _SEQUENCE_ORIGINS:
        item = args[0] if args else Any
        return PythonType(target, Kind.SLICE, elem=lambda: describe(item))

    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return PythonType(target, Kind.SLICE, elem=lambda: describe(args[0]))
        if not args:
            return PythonType(target, Kind.ARRAY, length=0, elem=lambda: describe(Any))
        item = args[0] if len(set(args)) == 1 else Union[args]
        return PythonType(target, Kind.ARRAY, length=len(args), elem=lambda: describe(item))

    if origin in _MAPPING_ORIGINS:
        value = args[1] if len(args) == 2 else Any
        return PythonType(target, Kind.MAP, elem=lambda: describe(value))
    if origin is collections.Counter:
        return PythonType(target, Kind.MAP, elem=lambda: describe(int))

    if isinstance(origin, TypeAliasType):
        mapping = dict(zip(origin.__type_params__, args))
        value = _substitute(origin.__value__, mapping)
        return _named(describe(value), origin, args=args, target=target)

    if isinstance(origin, type) and origin not in (type, collections.abc.Callable):
        return _describe_class(origin, target, args=args)

    logger.debug("No structural mapping for %r", target)
    return PythonType(target, Kind.UNKNOWN)


def _describe_class(cls: type, target: Any, *, args: tuple[Any, ...] = ()) -> TypeDescription:
    namespace = "" if cls.__module__ == "builtins" else cls.__module__
    suffix = _arguments_suffix(args)
    identity = {
        "namespace": namespace,
        "name": f"{cls.__name__}{suffix}",
        "qualname": f"{cls.__qualname__}{suffix}",
    }

    values = enum_values_of(cls)
    if values is not None:
        return PythonType(target, _literal_kind(values), enum=lambda: list(values), **identity)

    kind = _class_kind(cls)
    if kind is Kind.STRUCT:
        mapping = _type_var_map(cls, args)
        return PythonType(target, kind, fields=lambda: _struct_fields(cls, mapping), **identity)
    if kind in (Kind.SLICE, Kind.MAP):
        return PythonType(target, kind, elem=lambda: describe(Any), **identity)
    return PythonType(target, kind, **identity)


def _class_kind(cls: type) -> Kind:
    if cls is object:
        return Kind.INTERFACE
    if cls is types.NoneType:
        return Kind.NULL
    if issubclass(cls, bool):
        return Kind.BOOL
    if issubclass(cls, (str, bytes, bytearray)):
        return Kind.STRING
    if issubclass(cls, int):
        return Kind.INTEGER
    if issubclass(cls, numbers.Number):
        return Kind.NUMBER
    if dataclasses.is_dataclass(cls) or issubclass(cls, BaseModel) or is_typeddict(cls):
        return Kind.STRUCT
    if issubclass(cls, tuple) and hasattr(cls, "_fields"):
        return Kind.STRUCT
    if getattr(cls, "_is_protocol", False) or inspect.isabstract(cls):
        return Kind.INTERFACE
    if issubclass(cls, collections.abc.Mapping):
        return Kind.MAP
    if issubclass(cls, (list, tuple, set, frozenset)):
        return Kind.SLICE
    return Kind.STRUCT


def _named(
    base: TypeDescription,
    alias: Any,
    *,
    args: tuple[Any, ...] = (),
    target: Any = None,
) -> TypeDescription:
    if not isinstance(base, PythonType):
        return base
    module = getattr(alias, "__module__", "") or ""
    name = alias.__name__
    qualname = getattr(alias, "__qualname__", name)
    suffix = _arguments_suffix(args)
    return base.renamed(
        alias if target is None else target,
        namespace="" if module == "builtins" else module,
        name=f"{name}{suffix}",
        qualname=f"{qualname}{suffix}",
    )


def _struct_fields(cls: type, mapping: Mapping[Any, Any]) -> list[FieldDescription]:
    if issubclass(cls, BaseModel):
        return [
            _pydantic_field(name, info, mapping)
            for name, info in cls.model_fields.items()
        ]

    hints = _type_hints(cls)
    if dataclasses.is_dataclass(cls):
        return [
            _field(item.name, hints.get(item.name, item.type), mapping, tags=item.metadata)
            for item in dataclasses.fields(cls)
        ]

    optional_keys: frozenset[str] = getattr(cls, "__optional_keys__", frozenset())
    result: list[FieldDescription] = []
    for name, annotation in hints.items():
        if annotation is ClassVar or get_origin(annotation) is ClassVar:
            continue
        optional = name in optional_keys or get_origin(annotation) is NotRequired
        tags = {TAG_JSON: f"{name},omitempty"} if optional else {}
        result.append(_field(name, annotation, mapping, tags=tags))
    return result


def _field(
    name: str,
    annotation: Any,
    mapping: Mapping[Any, Any],
    *,
    tags: Mapping[Any, Any],
) -> FieldDescription:
    annotation = _substitute(annotation, mapping)
    field_tags = {key: tag_text(value) for key, value in tags.items() if isinstance(key, str)}
    embedded = _metadata_tags(_annotated_metadata(annotation), field_tags)
    return FieldDescription(
        name=name,
        type=describe(annotation),
        tags=field_tags,
        embedded=embedded,
    )


def _pydantic_field(name: str, info: FieldInfo, mapping: Mapping[Any, Any]) -> FieldDescription:
    tags: dict[str, Any] = {}
    if info.exclude:
        tags[TAG_JSON] = "-"
    elif info.alias or not info.is_required():
        tags[TAG_JSON] = (info.alias or name) + ("" if info.is_required() else ",omitempty")
    if info.description:
        tags[TAG_DESCRIPTION] = info.description
    if info.examples:
        tags[TAG_EXAMPLES] = to_jsonable_python(info.examples, fallback=str)
    if info.default is not PydanticUndefined and info.default_factory is None:
        tags[TAG_DEFAULT] = json.dumps(to_jsonable_python(info.default, fallback=str))
    if isinstance(info.json_schema_extra, dict):
        tags.update(info.json_schema_extra)

    described = _field(name, info.annotation, mapping, tags=tags)
    field_tags = dict(described.tags)
    embedded = _metadata_tags(info.metadata, field_tags) or described.embedded
    return dataclasses.replace(described, tags=field_tags, embedded=embedded)


def _metadata_tags(metadata: Iterable[Any], tags: dict[str, str]) -> bool:
    """Fold ``Annotated`` metadata into ``tags``; return whether the field is embedded."""
    embedded = False
    for item in metadata:
        if item is EMBED:
            embedded = True
        elif isinstance(item, Mapping):
            tags.update({key: tag_text(value) for key, value in item.items()})
        else:
            for limit_type, attribute, tag_name in _LIMIT_TAGS:
                if isinstance(item, limit_type):
                    tags[tag_name] = tag_text(getattr(item, attribute))
    return embedded


def _annotated_metadata(annotation: Any) -> list[Any]:
    metadata: list[Any] = []
    while True:
        origin = get_origin(annotation)
        if origin is Annotated:
            metadata.extend(annotation.__metadata__)
            annotation = annotation.__origin__
        elif origin in (Required, NotRequired):
            annotation = get_args(annotation)[0]
        else:
            return metadata


def _strip_annotated(annotation: Any) -> Any:
    while True:
        origin = get_origin(annotation)
        if origin is Annotated:
            annotation = annotation.__origin__
        elif origin in (Required, NotRequired):
            annotation = get_args(annotation)[0]
        else:
            return annotation


def _type_hints(cls: type) -> dict[str, Any]:
    try:
        return get_type_hints(cls, localns={cls.__name__: cls}, include_extras=True)
    except NameError as exc:
        raise AnnotationResolutionError(
            f"Cannot resolve the annotations of {cls.__module__}.{cls.__qualname__}: {exc}"
        ) from exc


def _type_var_map(cls: type, args: tuple[Any, ...]) -> dict[Any, Any]:
    parameters = getattr(cls, "__parameters__", ())
    return dict(zip(parameters, args))


def _substitute(annotation: Any, mapping: Mapping[Any, Any]) -> Any:
    if not mapping:
        return annotation
    if isinstance(annotation, TypeVar):
        return mapping.get(annotation, annotation)
    parameters = getattr(annotation, "__parameters__", ())
    if parameters:
        return annotation[tuple(mapping.get(parameter, parameter) for parameter in parameters)]
    return annotation


def _arguments_suffix(args: tuple[Any, ...]) -> str:
    if not args:
        return ""
    return f"[{', '.join(_type_name(arg) for arg in args)}]"


def _type_name(annotation: Any) -> str:
    if isinstance(annotation, type) and get_origin(annotation) is None:
        return annotation.__name__
    return repr(annotation).removeprefix("typing.")


def _literal_kind(values: list[JSONValue]) -> Kind:
    if not values:
        return Kind.INTERFACE
    if all(isinstance(value, bool) for value in values):
        return Kind.BOOL
    if any(isinstance(value, bool) for value in values):
        return Kind.INTERFACE
    if all(isinstance(value, str) for value in values):
        return Kind.STRING
    if all(isinstance(value, int) for value in values):
        return Kind.INTEGER
    if all(isinstance(value, (int, float)) for value in values):
        return Kind.NUMBER
    return Kind.INTERFACE


def _type_adapter(target: Any) -> TypeAdapter[Any]:
    try:
        return TypeAdapter(target)
    except (PydanticUserError, PydanticUndefinedAnnotation) as exc:
        logger.debug("No validator for %r (%s); accepting any JSON literal", target, exc)
        return TypeAdapter(Any)


__all__ = ["PythonType", "describe"]
