"""Fatal CLI errors: stable codes, one stderr line and a structured record."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NoReturn, Protocol

import typer

from jetmigrate.core.errors import ConfigError, FileListingError, JetMigrateError, MappingDataError
from jetmigrate.core.logging import LogEvents, UnifiedLogger

__all__ = [
    "CliFailure",
    "INTERNAL_ERROR",
    "CONFIG_ERROR",
    "LISTING_ERROR",
    "EXIT_FAILURE",
    "failure_for",
    "fail",
]

EXIT_FAILURE = 1


@dataclass(frozen=True)
class CliFailure:
    """An error code and the label recorded next to it in the log."""

    code: str
    label: str

    def render(self, message: str) -> str:
        return f"[jetmigrate] ERROR {self.code}: {message}"


INTERNAL_ERROR = CliFailure("E001", "internal_error")
CONFIG_ERROR = CliFailure("E002", "configuration_error")
LISTING_ERROR = CliFailure("E003", "file_listing_error")

_FAILURES_BY_ERROR: tuple[tuple[type[JetMigrateError], CliFailure], ...] = (
    (ConfigError, CONFIG_ERROR),
    (MappingDataError, CONFIG_ERROR),
    (FileListingError, LISTING_ERROR),
)


class _ErrorLogger(Protocol):
    def error(self, _event: Any, /, **context: Any) -> Any: ...


def failure_for(exc: Exception) -> CliFailure:
    """Return the failure a raised exception is reported as."""

    for error_type, failure in _FAILURES_BY_ERROR:
        if isinstance(exc, error_type):
            return failure
    return INTERNAL_ERROR


def fail(
    failure: CliFailure,
    message: str,
    *,
    logger: _ErrorLogger | None = None,
    cause: BaseException | None = None,
    **context: Any,
) -> NoReturn:
    """Log ``cli.run.error``, print the error line on stderr and exit with status 1."""

    log = logger or UnifiedLogger.get(__name__)
    log.error(
        LogEvents.CLI_RUN_ERROR,
        error_code=failure.code,
        error_label=failure.label,
        error_message=message,
        **context,
    )
    typer.echo(failure.render(message), err=True)
    raise typer.Exit(code=EXIT_FAILURE) from cause
