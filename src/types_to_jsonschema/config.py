"""Derivation options and export configuration files."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .json_types import JSONValue

type HijackName = Literal["datetime", "uuid", "path"]


class ConfigLoadError(RuntimeError):
    """Raised when a configuration file cannot be loaded."""


class SchemaOptions(BaseModel):
    """Policy knobs of one schema set."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    ref_prefix: str = "#/$defs"
    interface_type: Literal["any", "object"] = "any"
    numbers: Literal["split", "number"] = "split"
    sort_enum_values: bool = False
    hijack: tuple[HijackName, ...] = ()


class ExportConfig(BaseModel):
    """Settings of one export run."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    targets: tuple[str, ...] = ()
    output_format: Literal["json", "yaml"] = "json"
    standalone: bool = False
    openapi: bool = False
    title: str = "Schemas"
    version: str = "0.0.0"
    check: bool = False
    options: SchemaOptions = Field(default_factory=SchemaOptions)


def load_config(path: Path) -> ExportConfig:
    """Load an export configuration from YAML.

    Args:
        path (Path): YAML file to read.

    Returns:
        ExportConfig: Validated configuration; an empty file gives the defaults.
    """
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle)
    except OSError as exc:
        raise ConfigLoadError(f"Failed to read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigLoadError(f"Failed to parse YAML in {path}: {exc}") from exc

    payload_value: JSONValue = {} if payload is None else payload
    if not isinstance(payload_value, dict):
        raise ConfigLoadError(
            f"Config document must deserialize to a mapping, got {type(payload_value)!r}"
        )

    try:
        return ExportConfig.model_validate(payload_value)
    except ValidationError as exc:
        raise ConfigLoadError(f"Config validation failed for {path}: {exc}") from exc
