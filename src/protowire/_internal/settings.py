from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ContainerSettings(BaseSettings):
    """Configure how a ``Container`` discovers and builds protos.

    Values can be passed as keyword arguments or read from ``PROTOWIRE_*``
    environment variables, for example ``PROTOWIRE_DIRS='["app/services"]'``
    and ``PROTOWIRE_INJECT_APP_CONTEXT=true``.
    """

    model_config = SettingsConfigDict(env_prefix="PROTOWIRE_", extra="ignore")

    dirs: list[Path] = Field(default_factory=list)
    """Directories scanned for source files and ``ioc.json`` files."""
    exec_dir: Path | None = None
    """Base directory that relative ``dirs`` are resolved against."""
    inject_app_context: bool = False
    """Attach the container to constructed instances unless a proto opts out."""
    ioc_json_name: str = "ioc"
    """File name, without ``.json``, of the configuration files to load."""

    @field_validator("dirs", mode="before")
    @classmethod
    def _wrap_single_dir(cls, value: Any) -> Any:
        if isinstance(value, str | Path):
            return [value]
        return value

    def resolved_dirs(self) -> list[Path]:
        """Return ``dirs`` made absolute against ``exec_dir`` when it is set."""
        if self.exec_dir is None:
            return list(self.dirs)
        return [(self.exec_dir / directory).resolve() for directory in self.dirs]


__all__ = ["ContainerSettings"]
