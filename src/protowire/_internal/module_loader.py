from __future__ import annotations

import hashlib
import importlib
import importlib.util
import logging
import sys
from pathlib import Path
from types import ModuleType
from typing import Any

from protowire.exceptions import ModuleLoadError

logger = logging.getLogger(__name__)

EXPORT_SEPARATOR = "->"
"""Separates a module path from the name of the export to load."""

_FILE_MODULE_PREFIX = "protowire_modules"
_PATH_SEPARATORS = ("/", "\\")


class ModuleLoader:
    """Load constructible values from module references.

    A reference is either ``"module"`` or ``"module->exportName"`` where the
    module part is a dotted import path (``"collections"``) or a path to a
    Python source file (``"/app/models/User.py"``). Without an export name
    the loaded value is the module attribute named after the module's last
    segment, falling back to the module itself. Non-string references are
    already-loaded values and are returned unchanged.

    Values are cached by raw reference; source files are executed once per
    absolute path.
    """

    def __init__(self) -> None:
        self._values: dict[Any, Any] = {}
        self._file_modules: dict[Path, ModuleType] = {}

    def load(self, reference: Any) -> Any:
        """Load the value for a module reference, using the cache when possible.

        Args:
            reference: Module reference string or constructible object.

        Raises:
            ModuleLoadError: If the module cannot be imported or the export is missing.

        """
        if reference in self._values:
            return self._values[reference]

        if isinstance(reference, str):
            value = self._load_reference(reference)
        else:
            value = reference
        self._values[reference] = value
        return value

    def is_loaded(self, reference: Any) -> bool:
        """Return whether a reference is already cached.

        Args:
            reference: Module reference string or constructible object.

        """
        return reference in self._values

    def _load_reference(self, reference: str) -> Any:
        module_path, separator, export_name = reference.partition(EXPORT_SEPARATOR)
        module_path = module_path.strip()
        module = self._load_module(reference, module_path)
        if separator:
            export_name = export_name.strip()
            try:
                return getattr(module, export_name)
            except AttributeError as error:
                reason = f"module has no export named '{export_name}'"
                raise ModuleLoadError(reference, reason) from error
        return getattr(module, _default_export_name(module_path), module)

    def _load_module(self, reference: str, module_path: str) -> ModuleType:
        if _is_file_path(module_path):
            return self._load_file_module(reference, Path(module_path))
        logger.debug("Importing module '%s' for reference '%s'", module_path, reference)
        try:
            return importlib.import_module(module_path)
        except ImportError as error:
            raise ModuleLoadError(reference, str(error)) from error

    def _load_file_module(self, reference: str, path: Path) -> ModuleType:
        path = path.resolve()
        if cached := self._file_modules.get(path):
            return cached
        if not path.is_file():
            raise ModuleLoadError(reference, f"file '{path}' does not exist")

        module_name = _file_module_name(path)
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise ModuleLoadError(reference, f"file '{path}' is not a Python module")

        logger.debug("Executing module file '%s' as '%s'", path, module_name)
        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as error:
            sys.modules.pop(module_name, None)
            raise ModuleLoadError(reference, repr(error)) from error
        self._file_modules[path] = module
        return module


def _is_file_path(module_path: str) -> bool:
    return module_path.endswith(".py") or any(sep in module_path for sep in _PATH_SEPARATORS)


def _default_export_name(module_path: str) -> str:
    if _is_file_path(module_path):
        return Path(module_path).stem
    return module_path.rpartition(".")[2]


def _file_module_name(path: Path) -> str:
    digest = hashlib.sha1(str(path).encode(), usedforsecurity=False).hexdigest()[:12]
    return f"{_FILE_MODULE_PREFIX}.{path.stem}_{digest}"


__all__ = ["EXPORT_SEPARATOR", "ModuleLoader"]
