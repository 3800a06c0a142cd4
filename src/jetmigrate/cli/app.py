"""CLI command ``jetmigrate``."""

from __future__ import annotations

import uuid
from pathlib import Path
from typing import Any

import typer
from structlog.stdlib import BoundLogger

from jetmigrate.cli.report import ConsoleReporter
from jetmigrate.config import load_config
from jetmigrate.core.errors import JetMigrateError
from jetmigrate.core.logging import LogConfig, LogEvents, LogFormat, UnifiedLogger
from jetmigrate.core.runtime import INTERNAL_ERROR, fail, failure_for
from jetmigrate.runner import run_migration

__all__ = ["MigrateCommand", "app", "main", "run"]

# Used until the configuration, and with it the requested level, is known.
_BOOTSTRAP_LOG_CONFIG = LogConfig(level="WARNING", format=LogFormat.KEY_VALUE)


class MigrateCommand:
    """Load the layered configuration, run the migration and print the report."""

    def __init__(self, *, logger: BoundLogger | None = None) -> None:
        self.logger = logger or UnifiedLogger.get(__name__)

    def __call__(self, *, config_path: Path | None, cli_overrides: dict[str, Any]) -> None:
        try:
            self._run(config_path, cli_overrides)
        except (typer.Exit, typer.BadParameter):
            raise
        except JetMigrateError as exc:
            fail(
                failure_for(exc),
                str(exc),
                logger=self.logger,
                cause=exc,
                exception_type=exc.__class__.__name__,
            )
        except Exception as exc:  # noqa: BLE001 - any other failure is an internal error
            fail(
                INTERNAL_ERROR,
                f"Unhandled CLI exception: {exc}",
                logger=self.logger,
                cause=exc,
                exception_type=exc.__class__.__name__,
                exc_info=True,
            )

    def _run(self, config_path: Path | None, cli_overrides: dict[str, Any]) -> None:
        self.logger.info(LogEvents.CLI_RUN_START, config=str(config_path) if config_path else None)
        settings = load_config(config_path, cli_overrides=cli_overrides)
        UnifiedLogger.configure(LogConfig(level=settings.logging.level, format=settings.logging.format))
        self.logger.debug(LogEvents.CONFIG_LOAD_FINISH, **settings.model_dump(mode="json"))

        reporter = ConsoleReporter(quiet=settings.quiet)
        summary = run_migration(settings, reporter=reporter)
        reporter.on_finish(summary)
        self.logger.info(
            LogEvents.CLI_RUN_FINISH,
            replacements=summary.replacements,
            files_failed=summary.files_failed,
        )


def main(
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Silences all output to stdout.",
    ),
    threads: int | None = typer.Option(
        None,
        "--threads",
        min=1,
        help="Max number of threads to execute with (capped by the CPU count).",
    ),
    root: Path | None = typer.Option(
        None,
        "--root",
        help="Repository to migrate (defaults to the current directory).",
        exists=True,
        file_okay=False,
        dir_okay=True,
        readable=True,
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        help="YAML file with run settings.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    mappings_dir: Path | None = typer.Option(
        None,
        "--mappings-dir",
        help=(
            "Directory with mapping CSV files replacing the bundled ones. The bundled "
            "tables cover common classes only; point this at the full published "
            "AndroidX mapping CSVs for a complete migration."
        ),
        exists=True,
        file_okay=False,
        dir_okay=True,
        readable=True,
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        help="Log level for diagnostics on stderr (DEBUG, INFO, WARNING, ERROR, CRITICAL).",
    ),
    log_format: LogFormat | None = typer.Option(
        None,
        "--log-format",
        help="Diagnostics format.",
        case_sensitive=False,
    ),
) -> None:
    """Migrate support library references in the tracked files to AndroidX."""

    UnifiedLogger.configure(_BOOTSTRAP_LOG_CONFIG)
    with UnifiedLogger.scoped(run_id=uuid.uuid4().hex, component="cli"):
        MigrateCommand()(
            config_path=config,
            cli_overrides={
                "threads": threads,
                # Only an explicit flag overrides lower layers.
                "quiet": True if quiet else None,
                "root": root,
                "mappings_dir": mappings_dir,
                "logging.level": log_level,
                "logging.format": log_format.value if log_format is not None else None,
            },
        )


app = typer.Typer(
    name="jetmigrate",
    help="Migrate an Android project from the Support Library to AndroidX.",
    add_completion=False,
)
app.command()(main)


def run() -> None:
    """Execute the Typer application."""

    app()


if __name__ == "__main__":
    run()
