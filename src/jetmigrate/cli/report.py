"""Console rendering of migration progress and results."""

from __future__ import annotations

import typer

from jetmigrate.finder import MIGRATABLE_SUFFIXES, FinderInfo
from jetmigrate.processor import MatchResult
from jetmigrate.runner import RunSummary
from jetmigrate.workers import FileFailure, FileOutcome

__all__ = ["ConsoleReporter", "format_summary"]

_ARTIFACT_COLUMN_WIDTH = 60


def format_summary(summary: RunSummary) -> str:
    return (
        f"Replaced {summary.replacements} occurrence(s) in "
        f"{summary.files_changed} file(s) in {summary.duration:.2f}s!"
    )


class ConsoleReporter:
    """Progress lines go to stdout; anything needing attention goes to stderr.

    ``quiet`` silences stdout only, so manual follow-ups are never hidden.
    """

    def __init__(self, *, quiet: bool = False) -> None:
        self.quiet = quiet

    def _out(self, message: str) -> None:
        if not self.quiet:
            typer.echo(message)

    def on_start(self, thread_count: int) -> None:
        self._out(f"Starting with {thread_count} threads...")

    def on_files_found(self, info: FinderInfo) -> None:
        self._out(f"Found {info.total_files_found} files ({', '.join(MIGRATABLE_SUFFIXES)})...")

    def on_result(self, outcome: FileOutcome) -> None:
        if isinstance(outcome, FileFailure):
            typer.echo(outcome.message, err=True)
            return
        if isinstance(outcome, MatchResult):
            self._report_manual_updates(outcome)

    def _report_manual_updates(self, result: MatchResult) -> None:
        if result.wildcard_imports:
            typer.echo(
                f"Found {len(result.wildcard_imports)} star import(s) that must be updated in {result.path}:",
                err=True,
            )
            for line in result.wildcard_imports:
                typer.echo(f"  * {line.strip()}", err=True)
        if result.artifacts_found:
            typer.echo(
                f"Found {len(result.artifacts_found)} artifact(s) that must be updated in {result.path}:",
                err=True,
            )
            for mapping in result.artifacts_found:
                typer.echo(
                    f"  * {mapping.key:<{_ARTIFACT_COLUMN_WIDTH}}=> {mapping.replacement}",
                    err=True,
                )

    def on_finish(self, summary: RunSummary) -> None:
        if summary.files_failed:
            typer.echo(f"Failed to process {summary.files_failed} file(s).", err=True)
        self._out(format_summary(summary))
