"""Command line interface for exporting JSON Schema definitions of Python types."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys
from typing import Any

from .config import ConfigLoadError, ExportConfig, load_config
from .export import ExportError, run_export, write_output
from .module_loading import TargetLoadError, load_target


class CLIError(RuntimeError):
    """Raised when CLI execution fails."""


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser."""
    parser = argparse.ArgumentParser(
        prog="types-to-jsonschema",
        description="Export JSON Schema definitions derived from Python types",
    )
    parser.add_argument(
        "targets",
        nargs="*",
        metavar="TARGET",
        help="Type to export, as package.module:Name or path/to/file.py:Name",
    )
    parser.add_argument("--config", help="Path to a YAML export configuration")
    parser.add_argument("--prefix", help="Prefix of every $ref path (default: #/$defs)")
    parser.add_argument("--format", choices=("json", "yaml"), help="Output format")
    parser.add_argument(
        "--standalone",
        action="store_true",
        help="Emit one self-contained schema for a single target",
    )
    parser.add_argument(
        "--openapi",
        action="store_true",
        help="Emit an OpenAPI 3.1 document with the definitions as component schemas",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Check the emitted schemas against the JSON Schema meta-schema",
    )
    parser.add_argument("--output", help="Output file (default: stdout)")
    parser.add_argument("--verbose", action="store_true", help="Log derivation details")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run CLI and return process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        config = _resolve_config(args)
        targets = [load_target(reference) for reference in config.targets]
        run = run_export(targets=targets, config=config)
        write_output(run.text, Path(args.output) if args.output else None)
    except (ConfigLoadError, TargetLoadError, ExportError, CLIError) as exc:
        parser.error(str(exc))
        return 2

    for warning in run.warnings:
        print(f"Warning: {warning}", file=sys.stderr)

    return 0


def _resolve_config(args: argparse.Namespace) -> ExportConfig:
    config = load_config(Path(args.config)) if args.config else ExportConfig()

    updates: dict[str, Any] = {}
    if args.targets:
        updates["targets"] = tuple(args.targets)
    if args.format:
        updates["output_format"] = args.format
    if args.standalone:
        updates["standalone"] = True
    if args.openapi:
        updates["openapi"] = True
    if args.check:
        updates["check"] = True
    if args.prefix:
        updates["options"] = config.options.model_copy(update={"ref_prefix": args.prefix})
    config = config.model_copy(update=updates)

    if not config.targets:
        raise CLIError("No targets given on the command line or in the config file")
    if config.standalone and config.openapi:
        raise CLIError("--standalone and --openapi cannot be combined")
    return config


if __name__ == "__main__":
    raise SystemExit(main())
