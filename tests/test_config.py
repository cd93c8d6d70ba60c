"""Tests for export configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from types_to_jsonschema.config import ConfigLoadError, ExportConfig, SchemaOptions, load_config


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "export.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_load_config(tmp_path: Path) -> None:
    """Nested options are validated into option models."""
    path = _write(
        tmp_path,
        """
targets:
  - tests.fixture_types:Node
output_format: yaml
standalone: true
options:
  ref_prefix: "#/components/schemas"
  interface_type: object
  numbers: number
  sort_enum_values: true
  hijack: [datetime, uuid]
""",
    )

    config = load_config(path)

    assert config.targets == ("tests.fixture_types:Node",)
    assert config.output_format == "yaml"
    assert config.standalone
    assert config.options == SchemaOptions(
        ref_prefix="#/components/schemas",
        interface_type="object",
        numbers="number",
        sort_enum_values=True,
        hijack=("datetime", "uuid"),
    )


def test_empty_file_gives_defaults(tmp_path: Path) -> None:
    """An empty document is an empty mapping."""
    assert load_config(_write(tmp_path, "")) == ExportConfig()


@pytest.mark.parametrize(
    ("text", "message"),
    [
        ("targets: [unclosed", "Failed to parse YAML"),
        ("- a\n- b\n", "must deserialize to a mapping"),
        ("unexpected: 1\n", "validation failed"),
        ("options:\n  numbers: float\n", "validation failed"),
    ],
)
def test_invalid_config(tmp_path: Path, text: str, message: str) -> None:
    """Parse, shape and validation failures raise a load error."""
    with pytest.raises(ConfigLoadError, match=message):
        load_config(_write(tmp_path, text))


def test_missing_config_file(tmp_path: Path) -> None:
    """Unreadable files raise a load error."""
    with pytest.raises(ConfigLoadError, match="Failed to read config file"):
        load_config(tmp_path / "absent.yaml")
