"""Derive JSON Schema definitions from Python type declarations."""

from __future__ import annotations

from .cli import main
from .config import ConfigLoadError, ExportConfig, SchemaOptions, load_config
from .enums import JSONEnum, StringEnum
from .export import ExportError, ExportRun, run_export
from .ref import DEFAULT_REF_PREFIX, Ref, Resolver
from .reflect import PythonType, describe
from .registry import Interfaces
from .schema import Schema, SchemaType
from .schemas import Interface, Schemas, UndefinedSchemaError
from .tags import EMBED, TagError, Tags
from .type_description import (
    AnnotationResolutionError,
    FieldDescription,
    Kind,
    LiteralError,
    TypeDescription,
)
from .walker import FieldDefinitionError

__all__ = [
    "AnnotationResolutionError",
    "ConfigLoadError",
    "DEFAULT_REF_PREFIX",
    "EMBED",
    "ExportConfig",
    "ExportError",
    "ExportRun",
    "FieldDefinitionError",
    "FieldDescription",
    "Interface",
    "Interfaces",
    "JSONEnum",
    "Kind",
    "LiteralError",
    "PythonType",
    "Ref",
    "Resolver",
    "Schema",
    "SchemaOptions",
    "SchemaType",
    "Schemas",
    "StringEnum",
    "TagError",
    "Tags",
    "TypeDescription",
    "UndefinedSchemaError",
    "describe",
    "load_config",
    "main",
    "run_export",
]
