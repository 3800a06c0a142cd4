"""Configuration models for a migration run."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator

from jetmigrate.core.logging import LogFormat

__all__ = ["LoggingConfig", "MigrateConfig"]

_LOG_LEVELS: frozenset[str] = frozenset({"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"})


class LoggingConfig(BaseModel):
    """Structured logging configuration."""

    model_config = ConfigDict(extra="forbid")

    level: str = Field(default="WARNING", description="Log level for UnifiedLogger.")
    format: LogFormat = Field(
        default=LogFormat.KEY_VALUE,
        description="Log format (json, key_value).",
    )

    @field_validator("level")
    @classmethod
    def _normalise_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in _LOG_LEVELS:
            allowed = ", ".join(sorted(_LOG_LEVELS))
            msg = f"log level must be one of: {allowed}"
            raise ValueError(msg)
        return normalized


class MigrateConfig(BaseModel):
    """Fully merged settings for one run."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    threads: PositiveInt | None = Field(
        default=None,
        description="Maximum worker threads; capped by the logical CPU count.",
    )
    quiet: bool = Field(default=False, description="Silence the report on stdout.")
    root: Path = Field(
        default=Path("."),
        description="Repository root; `git ls-files` runs there and paths are relative to it.",
    )
    mappings_dir: Path | None = Field(
        default=None,
        description="Directory with mapping CSV files replacing the bundled ones.",
    )
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("root", "mappings_dir")
    @classmethod
    def _expand_path(cls, value: Path | None) -> Path | None:
        if value is None:
            return None
        return value.expanduser()
