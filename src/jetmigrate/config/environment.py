"""Environment-driven configuration overrides (``JETMIGRATE_*`` variables)."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["EnvironmentSettings", "load_environment_settings", "build_env_override_mapping"]

# Settings attribute -> path inside the merged configuration payload.
_ENV_OVERRIDE_PATHS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("threads", ("threads",)),
    ("quiet", ("quiet",)),
    ("root", ("root",)),
    ("mappings_dir", ("mappings_dir",)),
    ("log_level", ("logging", "level")),
    ("log_format", ("logging", "format")),
)


class EnvironmentSettings(BaseSettings):
    """Typed view of jetmigrate environment variables."""

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    threads: int | None = Field(default=None, alias="JETMIGRATE_THREADS")
    quiet: bool | None = Field(default=None, alias="JETMIGRATE_QUIET")
    root: Path | None = Field(default=None, alias="JETMIGRATE_ROOT")
    mappings_dir: Path | None = Field(default=None, alias="JETMIGRATE_MAPPINGS_DIR")
    log_level: str | None = Field(default=None, alias="JETMIGRATE_LOG_LEVEL")
    log_format: str | None = Field(default=None, alias="JETMIGRATE_LOG_FORMAT")


def load_environment_settings() -> EnvironmentSettings:
    """Read ``JETMIGRATE_*`` variables from the process environment."""

    return EnvironmentSettings()


def build_env_override_mapping(settings: EnvironmentSettings) -> dict[str, Any]:
    """Return nested overrides for every variable that is set."""

    overrides: dict[str, Any] = {}
    for attr, config_path in _ENV_OVERRIDE_PATHS:
        value = getattr(settings, attr)
        if value is None:
            continue
        node = overrides
        for key in config_path[:-1]:
            node = node.setdefault(key, {})
        node[config_path[-1]] = value
    return overrides
