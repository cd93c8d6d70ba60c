"""Helpers for importing the types named on the command line."""

from __future__ import annotations

import hashlib
import importlib
import importlib.util
from pathlib import Path
import sys
from types import ModuleType
from typing import Any


class TargetLoadError(RuntimeError):
    """Raised when a ``module:Name`` target cannot be imported."""


def load_module_from_path(*, module_name: str, module_path: Path) -> ModuleType:
    """Load a module from file path and register it in ``sys.modules``.

    Registration lets annotations that refer to the module's own types resolve.

    Args:
        module_name (str): Import name for the module.
        module_path (Path): File system path to the Python module.

    Returns:
        ModuleType: Imported Python module object.
    """
    spec = importlib.util.spec_from_file_location(module_name, module_path)
    if spec is None or spec.loader is None:
        raise TargetLoadError(f"Unable to import module from: {module_path}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception:
        sys.modules.pop(module_name, None)
        raise
    return module


def load_target(reference: str) -> Any:
    """Resolve ``package.module:Name`` or ``path/to/file.py:Name`` to the named object.

    The name may be dotted to reach nested classes (``module:Outer.Inner``).
    """
    module_text, separator, attribute_path = reference.rpartition(":")
    if not separator or not module_text or not attribute_path:
        raise TargetLoadError(f"Target must look like 'module:Name', got {reference!r}")

    module = _load_module(module_text)
    value: Any = module
    for attribute in attribute_path.split("."):
        try:
            value = getattr(value, attribute)
        except AttributeError as exc:
            raise TargetLoadError(f"{module_text} has no attribute {attribute_path!r}") from exc
    return value


def _load_module(module_text: str) -> ModuleType:
    if module_text.endswith(".py"):
        module_path = Path(module_text).resolve()
        if not module_path.is_file():
            raise TargetLoadError(f"Module file not found: {module_text}")
        digest = hashlib.md5(str(module_path).encode("utf-8")).hexdigest()[:8]
        module_name = f"{module_path.stem}_{digest}"
        existing = sys.modules.get(module_name)
        if existing is not None:
            return existing
        try:
            return load_module_from_path(module_name=module_name, module_path=module_path)
        except (OSError, SyntaxError, ImportError) as exc:
            raise TargetLoadError(f"Failed to import {module_text}: {exc}") from exc

    try:
        return importlib.import_module(module_text)
    except ImportError as exc:
        raise TargetLoadError(f"Failed to import {module_text}: {exc}") from exc
