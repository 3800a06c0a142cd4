"""Pattern tables mapping deprecated support-library names to AndroidX.

The mapping data is separated by the first difference in the package names:
``android.support``, ``android.databinding`` and ``android.arch``. Searching
only the table whose namespace prefix is present on a line keeps the number of
regular expressions evaluated per line small; the support table holds most of
the mappings and is hit most often.

Build artifact coordinates live in a fourth table. They are reported, never
rewritten, because updating a dependency involves more than a find and
replace.

Each table carries two cheap heuristics evaluated before any of its patterns:

* ``min_length`` - the length of the shortest pattern. A (stripped) line
  shorter than that cannot contain a match.
* ``boundaries`` - the namespace prefix preceded by a character that can
  legitimately start a fully-qualified name. This rejects lines such as
  ``import com.example.android.support;``.
"""

from __future__ import annotations

import csv
import io
import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
from importlib.resources import files
from pathlib import Path
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from jetmigrate.core.errors import MappingDataError

__all__ = [
    "Category",
    "Mapping",
    "CategoryTable",
    "PatternTables",
    "CLASS_CATEGORY_ORDER",
    "WILDCARD_IMPORT_PATTERN",
    "load_category",
    "load_tables",
]


class Category(str, Enum):
    """Partitions of the mapping data."""

    SUPPORT = "support"
    DATABINDING = "databinding"
    ARCH = "arch"
    ARTIFACT = "artifact"


CLASS_CATEGORY_ORDER: Final[tuple[Category, ...]] = (
    Category.SUPPORT,
    Category.ARCH,
    Category.DATABINDING,
)
"""Evaluation order of the class tables; the first accepting table owns the line."""

# Known boundaries in front of a fully-qualified name:
# - " ": start of a new word
# - "<" and "/": xml start and end tags
# - '"' and "'": strings and dependency declarations
# - ":" and "@": annotations, including kotlin use-site targets
# - ";": lint baseline files encoding "<" or ">"
# - "(": full path as a function parameter
# - "[": kdoc link
_NAME_BOUNDARY: Final[str] = r"""[ </"@:\[';(]"""

WILDCARD_IMPORT_PATTERN: Final[re.Pattern[str]] = re.compile(r"\.\*;?")
"""Star imports and proguard glob statements, e.g. ``-dontwarn a.b.**``."""


@dataclass(frozen=True, slots=True)
class _CategorySource:
    filename: str
    pattern_column: str
    replacement_column: str
    boundaries: tuple[str, ...]


_CLASS_PATTERN_COLUMN: Final[str] = "Support Library class"
_CLASS_REPLACEMENT_COLUMN: Final[str] = "Android X class"

_SOURCES: Final[dict[Category, _CategorySource]] = {
    Category.SUPPORT: _CategorySource(
        "android_support_mappings.csv",
        _CLASS_PATTERN_COLUMN,
        _CLASS_REPLACEMENT_COLUMN,
        (_NAME_BOUNDARY + r"android\.support",),
    ),
    Category.DATABINDING: _CategorySource(
        "android_databinding_mappings.csv",
        _CLASS_PATTERN_COLUMN,
        _CLASS_REPLACEMENT_COLUMN,
        (_NAME_BOUNDARY + r"android\.databinding",),
    ),
    Category.ARCH: _CategorySource(
        "android_arch_mappings.csv",
        _CLASS_PATTERN_COLUMN,
        _CLASS_REPLACEMENT_COLUMN,
        (_NAME_BOUNDARY + r"android\.arch",),
    ),
    Category.ARTIFACT: _CategorySource(
        "android_artifact_mappings.csv",
        "Old build artifact",
        "AndroidX build artifact",
        (
            r"""["']com\.android\.support[a-z.]*:""",
            r"""["']android\.arch[a-z.]*:""",
        ),
    ),
}


@dataclass(frozen=True, slots=True)
class Mapping:
    """A deprecated name pattern and its literal replacement."""

    pattern: re.Pattern[str]
    replacement: str

    @property
    def key(self) -> str:
        """Pattern text; identifies the mapping within its category."""

        return self.pattern.pattern

    def rewrite(self, line: str) -> str | None:
        """Return ``line`` with the first occurrence replaced, or ``None`` when absent."""

        found = self.pattern.search(line)
        if found is None:
            return None
        return f"{line[: found.start()]}{self.replacement}{line[found.end():]}"


@dataclass(frozen=True, slots=True)
class CategoryTable:
    """Mappings of one category, longest pattern first, plus gating heuristics."""

    category: Category
    mappings: tuple[Mapping, ...]
    min_length: int
    boundaries: tuple[re.Pattern[str], ...]

    def admits(self, line: str) -> bool:
        """Return whether the table is worth scanning for ``line``."""

        if len(line.strip()) < self.min_length:
            return False
        return any(boundary.search(line) for boundary in self.boundaries)

    def __iter__(self) -> Iterator[Mapping]:
        return iter(self.mappings)

    def __len__(self) -> int:
        return len(self.mappings)


@dataclass(frozen=True, slots=True)
class PatternTables:
    """All tables, built once per process and shared read-only by the workers."""

    support: CategoryTable
    databinding: CategoryTable
    arch: CategoryTable
    artifact: CategoryTable

    def table(self, category: Category) -> CategoryTable:
        return getattr(self, category.value)

    @property
    def class_tables(self) -> tuple[CategoryTable, ...]:
        """Class tables in evaluation order."""

        return tuple(self.table(category) for category in CLASS_CATEGORY_ORDER)


class _MappingRow(BaseModel):
    """One validated row of a mapping CSV file."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    pattern: str = Field(min_length=1)
    replacement: str = Field(min_length=1)

    @field_validator("pattern")
    @classmethod
    def _pattern_compiles(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as exc:
            msg = f"invalid regular expression {value!r}: {exc}"
            raise ValueError(msg) from exc
        return value


def _read_source(source: _CategorySource, data_dir: Path | None) -> tuple[str, str]:
    if data_dir is not None:
        path = Path(data_dir) / source.filename
        location = str(path)
        try:
            return path.read_text(encoding="utf-8"), location
        except (OSError, UnicodeDecodeError) as exc:
            raise MappingDataError(f"Unable to read mapping data: {exc}", source=location) from exc

    resource = files("jetmigrate") / "data" / source.filename
    location = f"jetmigrate/data/{source.filename}"
    try:
        return resource.read_text(encoding="utf-8"), location
    except (OSError, UnicodeDecodeError) as exc:
        raise MappingDataError(f"Unable to read bundled mapping data: {exc}", source=location) from exc


def _parse_rows(text: str, source: _CategorySource, location: str) -> list[Mapping]:
    reader = csv.DictReader(io.StringIO(text))
    mappings: list[Mapping] = []
    seen: set[str] = set()
    try:
        header: Sequence[str] = reader.fieldnames or ()
        for column in (source.pattern_column, source.replacement_column):
            if column not in header:
                raise MappingDataError(f"Missing column {column!r}", source=location)
        for row in reader:
            row_number = reader.line_num
            try:
                record = _MappingRow(
                    pattern=row.get(source.pattern_column),
                    replacement=row.get(source.replacement_column),
                )
            except ValidationError as exc:
                detail = "; ".join(error["msg"] for error in exc.errors())
                raise MappingDataError(f"Malformed mapping: {detail}", source=location, row=row_number) from exc
            if record.pattern in seen:
                raise MappingDataError(
                    f"Duplicate pattern {record.pattern!r}", source=location, row=row_number
                )
            seen.add(record.pattern)
            mappings.append(Mapping(re.compile(record.pattern), record.replacement))
    except csv.Error as exc:
        raise MappingDataError(f"Unreadable CSV: {exc}", source=location) from exc

    if not mappings:
        raise MappingDataError("Mapping table is empty", source=location)
    return mappings


def load_category(category: Category, data_dir: Path | None = None) -> CategoryTable:
    """Load, validate and sort the mappings of ``category``.

    Mappings are ordered longest pattern first. That prevents collisions and
    false mappings for names that share a prefix, such as ``Toolbar`` and
    ``ToolbarWidgetWrapper``: evaluating the longer pattern first is cheaper
    than giving every pattern explicit word boundaries.

    :raises MappingDataError: when the data is missing or malformed.
    """

    source = _SOURCES[category]
    text, location = _read_source(source, data_dir)
    mappings = _parse_rows(text, source, location)
    mappings.sort(key=lambda mapping: len(mapping.key), reverse=True)
    return CategoryTable(
        category=category,
        mappings=tuple(mappings),
        min_length=len(mappings[-1].key),
        boundaries=tuple(re.compile(boundary) for boundary in source.boundaries),
    )


def load_tables(data_dir: Path | None = None) -> PatternTables:
    """Build every category table; ``data_dir`` overrides the bundled CSV files."""

    return PatternTables(**{category.value: load_category(category, data_dir) for category in Category})
