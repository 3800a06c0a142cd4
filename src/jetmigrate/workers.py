"""Worker threads that run the file processor over their own inbox.

Termination is explicit. The dispatcher closes every inbox with a sentinel
once all paths have been handed out; each worker drains its inbox, stops at
the sentinel and always posts a :class:`WorkerFinished` signal on the shared
result queue. The consumer stops after one signal per worker, so no queue
handle lifetime is involved in deciding when the run is over.
"""

from __future__ import annotations

import contextvars
import os
import queue
import threading
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final, TypeAlias

from jetmigrate.core.logging import LogEvents, UnifiedLogger
from jetmigrate.processor import FileProcessor, MatchResult

__all__ = [
    "FileFailure",
    "FileOutcome",
    "WorkerFinished",
    "Matcher",
    "MatcherPool",
    "resolve_thread_count",
]


class _Close:
    """Marker put on an inbox after the last path."""

    def __repr__(self) -> str:
        return "<close>"


CLOSE: Final[_Close] = _Close()


@dataclass(frozen=True, slots=True)
class FileFailure:
    """A file whose processing raised; the worker moves on to its next path."""

    matcher_id: int
    path: Path
    error: Exception

    @property
    def message(self) -> str:
        return f"{self.path}: {self.error}"


@dataclass(frozen=True, slots=True)
class WorkerFinished:
    """Terminal signal posted exactly once by every worker."""

    matcher_id: int


FileOutcome: TypeAlias = MatchResult | FileFailure
_Message: TypeAlias = MatchResult | FileFailure | WorkerFinished


def resolve_thread_count(requested: int | None = None) -> int:
    """Return the worker count: ``requested`` capped by the logical CPU count."""

    available = os.cpu_count() or 1
    if requested is None:
        return available
    if requested < 1:
        raise ValueError(f"Thread count must be positive, got {requested}")
    return min(requested, available)


class Matcher:
    """One worker: processes the paths of its inbox in arrival order."""

    def __init__(self, matcher_id: int, processor: FileProcessor, results: queue.Queue[_Message]) -> None:
        self.id = matcher_id
        self._processor = processor
        self._results = results

    def run(self, inbox: queue.Queue[Path | _Close]) -> None:
        """Process paths until the inbox is closed, then post :class:`WorkerFinished`."""

        log = UnifiedLogger.get(__name__)
        with UnifiedLogger.scoped(component="matcher", matcher_id=self.id):
            log.debug(LogEvents.WORKER_THREAD_START)
            try:
                while True:
                    item = inbox.get()
                    if item is CLOSE:
                        break
                    self._results.put(self._search_and_replace(item))
            except Exception:
                log.exception(LogEvents.WORKER_THREAD_CRASH)
                raise
            finally:
                self._results.put(WorkerFinished(self.id))
                log.debug(LogEvents.WORKER_THREAD_STOP)

    def _search_and_replace(self, path: Path) -> FileOutcome:
        try:
            return self._processor.process(path, matcher_id=self.id)
        except (OSError, UnicodeDecodeError) as exc:
            UnifiedLogger.get(__name__).warning(
                LogEvents.WORKER_FILE_FAILED,
                path=str(path),
                error=str(exc),
                exception_type=exc.__class__.__name__,
            )
            return FileFailure(matcher_id=self.id, path=path, error=exc)
        except Exception as exc:  # noqa: BLE001 - a broken file must not stop the remaining inbox
            UnifiedLogger.get(__name__).error(
                LogEvents.WORKER_FILE_FAILED,
                path=str(path),
                error=str(exc),
                exception_type=exc.__class__.__name__,
                exc_info=True,
            )
            return FileFailure(matcher_id=self.id, path=path, error=exc)


class MatcherPool:
    """A fixed set of :class:`Matcher` threads sharing one result queue."""

    def __init__(self, processor: FileProcessor, size: int) -> None:
        if size < 1:
            raise ValueError(f"Pool size must be positive, got {size}")
        self._results: queue.Queue[_Message] = queue.Queue()
        self._inboxes: tuple[queue.Queue[Path | _Close], ...] = tuple(queue.Queue() for _ in range(size))
        self._threads: list[threading.Thread] = []
        self._processor = processor
        self._closed = False

    @property
    def size(self) -> int:
        return len(self._inboxes)

    @property
    def inboxes(self) -> Sequence[queue.Queue[Path | _Close]]:
        return self._inboxes

    def start(self) -> None:
        for matcher_id, inbox in enumerate(self._inboxes):
            matcher = Matcher(matcher_id, self._processor, self._results)
            # Copy the context so matchers log with the coordinator's run_id.
            thread = threading.Thread(
                target=contextvars.copy_context().run,
                args=(matcher.run, inbox),
                name=f"matcher-{matcher_id}",
                daemon=True,
            )
            thread.start()
            self._threads.append(thread)

    def close(self) -> None:
        """Signal every worker that no more paths will arrive."""

        if self._closed:
            return
        self._closed = True
        for inbox in self._inboxes:
            inbox.put(CLOSE)

    def results(self) -> Iterator[FileOutcome]:
        """Yield outcomes as they complete until every worker has finished.

        Only valid after :meth:`close`; the workers would never stop otherwise.
        """

        if not self._closed:
            raise RuntimeError("MatcherPool.results() requires close() to be called first")
        remaining = len(self._threads)
        while remaining:
            message = self._results.get()
            if isinstance(message, WorkerFinished):
                remaining -= 1
                continue
            yield message
        for thread in self._threads:
            thread.join()
