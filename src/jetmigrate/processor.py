"""Поиск и замена устаревших имён пакетов в одном файле."""

from __future__ import annotations

import mmap
import os
import stat
import tempfile
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from jetmigrate.core.logging import LogEvents, UnifiedLogger
from jetmigrate.mappings import Mapping
from jetmigrate.matcher import LineMatcher

__all__ = ["MatchResult", "FileProcessor", "should_check_artifacts"]

_ARTIFACT_EXCLUDED_SUFFIXES: Final[frozenset[str]] = frozenset({".xml", ".pro"})
_BUILD_LOGIC_DIR: Final[str] = "buildSrc"


@dataclass(frozen=True, slots=True)
class MatchResult:
    """Summary of one processed file."""

    matcher_id: int
    path: Path
    matches_found: int
    artifacts_found: tuple[Mapping, ...] = ()
    wildcard_imports: tuple[str, ...] = ()

    @property
    def changed(self) -> bool:
        return self.matches_found > 0


def should_check_artifacts(path: Path) -> bool:
    """Return whether ``path`` may declare build dependencies.

    Artifacts are assumed to live in ``buildSrc``, in a top level file of the
    project or one level down for a module's build file. ``path`` is relative
    to the repository root.
    """

    if not path.suffix or path.suffix in _ARTIFACT_EXCLUDED_SUFFIXES:
        return False
    parts = path.parts
    return (bool(parts) and parts[0] == _BUILD_LOGIC_DIR) or len(parts) <= 2


def _split_lines(text: str) -> Iterator[tuple[str, str]]:
    """Yield ``(line, terminator)`` pairs; the terminator is ``\\n``, ``\\r\\n`` or empty."""

    start = 0
    length = len(text)
    while start < length:
        end = text.find("\n", start)
        if end == -1:
            yield text[start:], ""
            return
        if end > start and text[end - 1] == "\r":
            yield text[start : end - 1], "\r\n"
        else:
            yield text[start:end], "\n"
        start = end + 1


def _read_text(path: Path) -> str:
    with path.open("rb") as handle:
        if os.fstat(handle.fileno()).st_size == 0:
            return ""
        with mmap.mmap(handle.fileno(), 0, access=mmap.ACCESS_READ) as mapped:
            with memoryview(mapped) as view:
                return str(view, "utf-8")


def _atomic_replace(path: Path, payload: bytes) -> None:
    """Write ``payload`` to a sibling temp file and move it over ``path``."""

    real_path = path.resolve(strict=True)
    mode = stat.S_IMODE(os.stat(real_path).st_mode)
    handle = tempfile.NamedTemporaryFile(
        "wb",
        dir=real_path.parent,
        prefix=f".{real_path.name}.",
        suffix=".tmp",
        delete=False,
    )
    tmp_path = Path(handle.name)
    try:
        with handle:
            handle.write(payload)
            handle.flush()
            os.fsync(handle.fileno())
        os.chmod(tmp_path, mode)
        os.replace(tmp_path, real_path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


class FileProcessor:
    """Find and replace migrated package names within a single file.

    The file is memory mapped since most source files are small and the
    common case is that nothing matches. Updated lines are collected in
    memory; only when at least one replacement happened is a temporary file
    written next to the original and moved over it, keeping the original
    permission bits. Files without replacements are never opened for writing.
    """

    def __init__(self, matcher: LineMatcher, *, root: Path | None = None) -> None:
        self._matcher = matcher
        self._root = root

    def _locate(self, path: Path) -> Path:
        if self._root is None or path.is_absolute():
            return path
        return self._root / path

    def process(self, path: Path, *, matcher_id: int = 0) -> MatchResult:
        """Scan ``path`` and rewrite it in place when anything matched.

        :raises OSError: when the file cannot be read, mapped or replaced.
        :raises UnicodeDecodeError: when the content is not UTF-8 text.
        """

        location = self._locate(path)
        source = _read_text(location)
        check_artifact = should_check_artifacts(path)

        output: list[str] = []
        replacements = 0
        artifacts: dict[str, Mapping] = {}
        wildcard_imports: list[str] = []
        for line, terminator in _split_lines(source):
            result = self._matcher.match_line(line)
            if result.matched:
                replacements += 1
            elif result.wildcard:
                wildcard_imports.append(line)
            elif check_artifact:
                # An artifact declaration practically never shares a line with a class name.
                artifact = self._matcher.match_artifact(line)
                if artifact is not None:
                    artifacts.setdefault(artifact.key, artifact)
            output.append(result.line)
            output.append(terminator)

        if replacements:
            _atomic_replace(location, "".join(output).encode("utf-8"))
            UnifiedLogger.get(__name__).debug(
                LogEvents.WORKER_FILE_REWRITTEN,
                path=str(path),
                replacements=replacements,
            )

        return MatchResult(
            matcher_id=matcher_id,
            path=path,
            matches_found=replacements,
            artifacts_found=tuple(artifacts.values()),
            wildcard_imports=tuple(wildcard_imports),
        )
