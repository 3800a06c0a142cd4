"""Orchestration of a migration run.

``run_migration`` loads the pattern tables, starts one matcher per thread,
feeds them through the :class:`~jetmigrate.finder.Finder` and aggregates the
outcomes as they arrive. Reporting is delegated to an optional
:class:`ResultReporter` so the CLI decides how results are rendered.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from functools import partial
from typing import Protocol

from structlog.contextvars import get_contextvars

from jetmigrate.config.models import MigrateConfig
from jetmigrate.core.errors import MappingDataError
from jetmigrate.core.git import FileLister, git_ls
from jetmigrate.core.logging import LogEvents, UnifiedLogger, emit
from jetmigrate.finder import Finder, FinderInfo
from jetmigrate.mappings import PatternTables, load_tables
from jetmigrate.matcher import LineMatcher
from jetmigrate.processor import FileProcessor, MatchResult
from jetmigrate.workers import FileFailure, FileOutcome, MatcherPool, resolve_thread_count

__all__ = ["RunSummary", "ResultReporter", "run_migration"]


@dataclass(frozen=True, slots=True)
class RunSummary:
    """Aggregate computed by the consumer of the result stream."""

    thread_count: int
    files_found: int
    files_changed: int
    replacements: int
    files_failed: int
    duration: float


class ResultReporter(Protocol):
    def on_start(self, thread_count: int) -> None: ...

    def on_files_found(self, info: FinderInfo) -> None: ...

    def on_result(self, outcome: FileOutcome) -> None: ...


def run_migration(
    config: MigrateConfig,
    *,
    tables: PatternTables | None = None,
    file_lister: FileLister | None = None,
    reporter: ResultReporter | None = None,
) -> RunSummary:
    """Run the full discovery, dispatch, match and replace pipeline.

    :raises MappingDataError: when the mapping tables cannot be built.
    :raises FileListingError: when candidate files cannot be listed.
    """

    start = time.perf_counter()
    log = UnifiedLogger.get(__name__)
    # A caller that already bound a run_id (the CLI) keeps it.
    run_id = get_contextvars().get("run_id") or uuid.uuid4().hex
    with UnifiedLogger.scoped(run_id=run_id, component="runner"):
        try:
            pattern_tables = tables or load_tables(config.mappings_dir)
        except MappingDataError as exc:
            log.error(LogEvents.MAPPINGS_LOAD_ERROR, error=str(exc), source=exc.source, row=exc.row)
            raise
        log.debug(
            LogEvents.MAPPINGS_LOAD_FINISH,
            **{table.category.value: len(table) for table in (*pattern_tables.class_tables, pattern_tables.artifact)},
        )

        thread_count = resolve_thread_count(config.threads)
        log.info(LogEvents.MIGRATE_RUN_START, threads=thread_count, root=str(config.root))
        if reporter is not None:
            reporter.on_start(thread_count)

        processor = FileProcessor(LineMatcher(pattern_tables), root=config.root)
        pool = MatcherPool(processor, thread_count)
        pool.start()
        finder = Finder(file_lister or partial(git_ls, config.root))
        try:
            info = finder.find_paths(pool.inboxes)
        except Exception:
            log.error(LogEvents.FINDER_LISTING_ERROR, exc_info=True)
            raise
        finally:
            pool.close()
        log.info(
            LogEvents.FINDER_DISPATCH_FINISH,
            files_found=info.total_files_found,
            files_per_matcher=list(info.num_files_per_matcher),
        )
        if reporter is not None:
            reporter.on_files_found(info)

        files_changed = 0
        replacements = 0
        files_failed = 0
        for outcome in pool.results():
            if isinstance(outcome, FileFailure):
                files_failed += 1
            elif isinstance(outcome, MatchResult) and outcome.changed:
                files_changed += 1
                replacements += outcome.matches_found
            if reporter is not None:
                reporter.on_result(outcome)

        summary = RunSummary(
            thread_count=thread_count,
            files_found=info.total_files_found,
            files_changed=files_changed,
            replacements=replacements,
            files_failed=files_failed,
            duration=time.perf_counter() - start,
        )
        emit(
            log,
            LogEvents.MIGRATE_RUN_FINISH,
            files_changed=summary.files_changed,
            replacements=summary.replacements,
            files_failed=summary.files_failed,
            duration_s=round(summary.duration, 3),
        )
        return summary
