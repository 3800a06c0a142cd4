"""Поиск файлов-кандидатов и их распределение по очередям обработчиков."""

from __future__ import annotations

import queue
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final

from jetmigrate.core.git import FileLister, git_ls

__all__ = ["MIGRATABLE_SUFFIXES", "FinderInfo", "Finder", "is_migratable"]

MIGRATABLE_SUFFIXES: Final[tuple[str, ...]] = (".gradle", ".java", ".kt", ".kts", ".pro", ".xml")
"""Non-binary files that can reference support library names."""


@dataclass(frozen=True, slots=True)
class FinderInfo:
    total_files_found: int
    num_files_per_matcher: tuple[int, ...]


def is_migratable(path: Path) -> bool:
    return path.suffix in MIGRATABLE_SUFFIXES


class Finder:
    """Enumerate candidate files and share them round-robin across matchers."""

    def __init__(self, file_lister: FileLister | None = None) -> None:
        self._file_lister = file_lister or git_ls

    def candidates(self) -> Iterable[Path]:
        return (path for path in self._file_lister() if is_migratable(path))

    def find_paths(self, matcher_inboxes: Sequence[queue.Queue[Any]]) -> FinderInfo:
        """Put every candidate path on an inbox; path ``i`` goes to inbox ``i % N``.

        The inboxes are not closed here; the owner of the pool does that, also
        when listing fails.
        """

        if not matcher_inboxes:
            raise ValueError("At least one matcher inbox is required")
        files_per_matcher = [0] * len(matcher_inboxes)
        files_found = 0
        for files_found, path in enumerate(self.candidates(), start=1):
            matcher = (files_found - 1) % len(matcher_inboxes)
            matcher_inboxes[matcher].put(path)
            files_per_matcher[matcher] += 1
        return FinderInfo(
            total_files_found=files_found,
            num_files_per_matcher=tuple(files_per_matcher),
        )
