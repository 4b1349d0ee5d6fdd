from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from protowire._internal.settings import ContainerSettings
from protowire._internal.store import ConfigurationStore
from protowire.exceptions import ConfigurationFileError

logger = logging.getLogger(__name__)

_PATH_PATTERN = re.compile(r"[/\\:]")


class ConfigurationScanner:
    """Populate a configuration store from the directories in the settings.

    Every ``*.py`` source file found below a directory is registered under its
    file stem (``models/User.py`` becomes proto ``User``). Then every
    ``<ioc_json_name>.json`` file is loaded and its entries are merged into the
    store, so JSON definitions extend or override the scanned ones.
    """

    def __init__(self, settings: ContainerSettings) -> None:
        self._settings = settings

    def populate(self, store: ConfigurationStore) -> None:
        """Register source files, then merge configuration files, into ``store``.

        Args:
            store: Store receiving the definitions.

        Raises:
            ConfigurationFileError: If a configuration file cannot be read or parsed.
            InvalidProtoDefinitionError: If a configuration entry is not a valid definition.

        """
        directories = self._settings.resolved_dirs()
        for directory in directories:
            self._add_source_files(store, directory)
        for directory in directories:
            self._load_config_files(store, directory)

    def _add_source_files(self, store: ConfigurationStore, directory: Path) -> None:
        count = 0
        for path in sorted(directory.rglob("*.py")):
            if path.name.startswith("__"):
                continue
            definition: dict[str, Any] = {"module": str(path.resolve())}
            if self._settings.inject_app_context:
                definition["injectAppContext"] = True
            store.add(path.stem, definition)
            count += 1
        logger.debug("Registered %d source file(s) from '%s'", count, directory)

    def _load_config_files(self, store: ConfigurationStore, directory: Path) -> None:
        for path in sorted(directory.rglob(f"{self._settings.ioc_json_name}.json")):
            logger.debug("Loading configuration file '%s'", path)
            for proto_id, definition in self._read_config_file(path).items():
                if not isinstance(definition, Mapping) or "module" not in definition:
                    continue
                module = _normalize_module(definition["module"], path.parent)
                store.add(proto_id, {**definition, "module": module})

    def _read_config_file(self, path: Path) -> dict[str, Any]:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as error:
            raise ConfigurationFileError(path, str(error)) from error
        if not isinstance(data, dict):
            raise ConfigurationFileError(path, "top-level value must be an object")
        return data


def _normalize_module(module: Any, base_dir: Path) -> Any:
    if isinstance(module, str) and _PATH_PATTERN.search(module):
        return str((base_dir / module).resolve())
    return module


__all__ = ["ConfigurationScanner"]
