"""Common domain-specific exceptions for jetmigrate."""

from __future__ import annotations

from pathlib import Path

__all__ = [
    "JetMigrateError",
    "MappingDataError",
    "FileListingError",
    "ConfigError",
]


class JetMigrateError(Exception):
    """Base class for jetmigrate domain errors."""


class MappingDataError(JetMigrateError):
    """Mapping data is missing, malformed or contains an invalid pattern.

    Raised while building the pattern tables; the run cannot start.
    """

    def __init__(self, message: str, *, source: Path | str | None = None, row: int | None = None) -> None:
        self.source = str(source) if source is not None else None
        self.row = row
        location = ""
        if self.source is not None:
            location = f" ({self.source}" + (f", row {row})" if row is not None else ")")
        super().__init__(f"{message}{location}")


class FileListingError(JetMigrateError):
    """The tracked-file listing could not be obtained."""


class ConfigError(JetMigrateError):
    """Configuration file or environment values are invalid."""
