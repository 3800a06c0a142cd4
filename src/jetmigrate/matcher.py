"""Line level matching against the pattern tables."""

from __future__ import annotations

from typing import NamedTuple

from jetmigrate.mappings import WILDCARD_IMPORT_PATTERN, CategoryTable, Mapping, PatternTables

__all__ = ["LineMatch", "LineMatcher"]


class LineMatch(NamedTuple):
    """Outcome of matching a single line."""

    line: str
    matched: bool
    wildcard: bool


class LineMatcher:
    """Apply the class tables and the artifact table to individual lines.

    The matcher holds no mutable state, so a single instance may be shared by
    every worker thread.
    """

    def __init__(self, tables: PatternTables) -> None:
        self._tables = tables
        self._class_tables = tables.class_tables

    def match_line(self, line: str) -> LineMatch:
        """Return the line with AndroidX names, whether it changed and whether it is a star import.

        The first table whose heuristics accept the line owns it; later tables
        are not consulted even if the owner holds no matching mapping.
        """

        for table in self._class_tables:
            if table.admits(line):
                return self._match_with_table(line, table)
        return LineMatch(line, False, False)

    @staticmethod
    def _match_with_table(line: str, table: CategoryTable) -> LineMatch:
        # A star import passes the namespace gate but maps to no single class.
        if WILDCARD_IMPORT_PATTERN.search(line):
            return LineMatch(line, False, True)

        for mapping in table:
            # More than one deprecated name on a line is rare; stop at the first.
            rewritten = mapping.rewrite(line)
            if rewritten is not None:
                return LineMatch(rewritten, True, False)
        return LineMatch(line, False, False)

    def match_artifact(self, line: str) -> Mapping | None:
        """Return the artifact mapping referenced by ``line``, if any."""

        table = self._tables.artifact
        if not table.admits(line):
            return None
        for mapping in table:
            if mapping.pattern.search(line):
                return mapping
        return None
