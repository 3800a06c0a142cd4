"""Shared fixtures for jetmigrate tests."""

from __future__ import annotations

import os
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from jetmigrate.core.logging import LogConfig, LogFormat, UnifiedLogger
from jetmigrate.mappings import PatternTables, load_tables
from jetmigrate.matcher import LineMatcher
from jetmigrate.processor import FileProcessor


@pytest.fixture(autouse=True)
def reset_logger() -> Generator[None, None, None]:
    """Give every test a fresh handler bound to the current stderr."""

    UnifiedLogger.configure(LogConfig(level="WARNING", format=LogFormat.KEY_VALUE))
    UnifiedLogger.reset()
    yield
    UnifiedLogger.reset()


@pytest.fixture(scope="session")
def tables() -> PatternTables:
    return load_tables()


@pytest.fixture(scope="session")
def matcher(tables: PatternTables) -> LineMatcher:
    return LineMatcher(tables)


@pytest.fixture()
def processor(matcher: LineMatcher, tmp_path: Path) -> FileProcessor:
    return FileProcessor(matcher, root=tmp_path)


@pytest.fixture()
def write_file(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write ``content`` under ``tmp_path`` and return the relative path."""

    def _write(relative: str, content: str) -> Path:
        target = tmp_path / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content.encode("utf-8"))
        return Path(relative)

    return _write


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep ``JETMIGRATE_*`` variables of the calling shell out of the tests."""

    for name in list(os.environ):
        if name.startswith("JETMIGRATE_"):
            monkeypatch.delenv(name, raising=False)
