"""Documents built from a schema set, their checks and their rendering."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from jsonschema.exceptions import SchemaError
from jsonschema.validators import Draft202012Validator, validator_for
from openapi_python_client.schema import OpenAPI
from pydantic import ValidationError

from .config import ExportConfig
from .json_types import JSONObject, MutableJSONObject, clone_json
from .schema import Schema, SchemaType
from .schemas import Schemas
from .type_description import AnnotationResolutionError
from .walker import FieldDefinitionError

logger = logging.getLogger(__name__)

DRAFT_2020_12 = "https://json-schema.org/draft/2020-12/schema"
OPENAPI_VERSION = "3.1.0"
COMPONENTS_PREFIX = "#/components/schemas"


class ExportError(RuntimeError):
    """Raised when a document cannot be built, checked or written."""


@dataclass(frozen=True)
class ExportRun:
    """Rendered document plus the warnings collected while building it."""

    document: JSONObject
    text: str
    warnings: tuple[str, ...]


def run_export(*, targets: Sequence[Any], config: ExportConfig) -> ExportRun:
    """Define ``targets`` and build the configured document.

    Args:
        targets (Sequence[Any]): Types to define, in order.
        config (ExportConfig): Document kind, format and derivation options.

    Returns:
        ExportRun: The document, its rendered text and unmapped-type warnings.
    """
    schemas = Schemas(options=config.options)
    try:
        roots = [schemas.define(target) for target in targets]
    except (FieldDefinitionError, AnnotationResolutionError) as exc:
        raise ExportError(str(exc)) from exc

    if config.openapi:
        document = openapi_document(schemas, title=config.title, version=config.version)
    elif config.standalone:
        if len(roots) != 1:
            raise ExportError(f"A standalone document needs exactly one target, got {len(roots)}")
        document = standalone_document(schemas, roots[0])
    else:
        document = definitions_document(schemas)

    if config.check:
        check_document(document)

    return ExportRun(
        document=document,
        text=render(document, output_format=config.output_format),
        warnings=tuple(unknown_type_warnings(schemas)),
    )


def definitions_document(schemas: Schemas) -> MutableJSONObject:
    """Every definition of the set under ``$defs``."""
    return {"$schema": DRAFT_2020_12, "$defs": schemas.to_dict()}


def standalone_document(schemas: Schemas, node: Schema) -> MutableJSONObject:
    """A self-contained document for one node of the set."""
    document: MutableJSONObject = {"$schema": DRAFT_2020_12}
    document.update(schemas.to_standalone(node).to_dict())
    return document


def openapi_document(schemas: Schemas, *, title: str, version: str) -> MutableJSONObject:
    """An OpenAPI 3.1 document carrying the definitions as component schemas.

    Args:
        schemas (Schemas): Set whose definitions are exported.
        title (str): ``info.title`` of the document.
        version (str): ``info.version`` of the document.

    Returns:
        MutableJSONObject: The validated OpenAPI document.
    """
    components: MutableJSONObject = {}
    for key, node in sorted(schemas.json().items()):
        component = node.clone()
        component.change_defs(COMPONENTS_PREFIX)
        components[key] = component.to_dict()

    document: MutableJSONObject = {
        "openapi": OPENAPI_VERSION,
        "info": {"title": title, "version": version},
        "paths": {},
        "components": {"schemas": components},
    }
    try:
        OpenAPI.model_validate(document)
    except ValidationError as exc:
        raise ExportError(f"OpenAPI document validation failed: {exc}") from exc
    return document


def check_document(document: JSONObject) -> None:
    """Check a document against its JSON Schema meta-schema."""
    if "openapi" in document:
        components = document.get("components") or {}
        targets = list((components.get("schemas") or {}).values())
    else:
        targets = [document]

    for target in targets:
        validator = validator_for(target, default=Draft202012Validator)
        try:
            validator.check_schema(target)
        except SchemaError as exc:
            raise ExportError(f"Generated schema is invalid: {exc.message}") from exc


def render(document: JSONObject, *, output_format: Literal["json", "yaml"] = "json") -> str:
    """Render a document as JSON with sorted keys, or as YAML."""
    if output_format == "yaml":
        return yaml.safe_dump(clone_json(document), sort_keys=True, allow_unicode=True)
    return json.dumps(document, indent=2, sort_keys=True) + "\n"


def write_output(text: str, path: Optional[Path]) -> None:
    """Write rendered text to ``path``, or to stdout when no path is given."""
    if path is None:
        print(text, end="")
        return
    try:
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise ExportError(f"Failed to write file {path}: {exc}") from exc


def unknown_type_warnings(schemas: Schemas) -> list[str]:
    """Name every definition that contains a node of the ``unknown`` type."""
    return [
        f"Definition {key} contains a type without a JSON Schema mapping"
        for key, node in sorted(schemas.json().items())
        if _has_unknown(node)
    ]


def _has_unknown(node: Schema) -> bool:
    if node.type is SchemaType.UNKNOWN:
        return True
    return any(_has_unknown(child) for child in node.children())

