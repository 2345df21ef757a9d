"""
Query-by-example.

A sample (a DTO or an unsaved record) describes the rows to match. Fields
left at ``None`` are ignored unless the matcher includes nulls; string
fields are compared according to the matcher's ``string_matcher``.

Usage:
    matcher = ExampleMatcher.matching().with_string_matcher(
        StringMatcher.CONTAINING
    ).with_ignore_case()
    example = Example.of(ReptileDto(species="python"), matcher)
    page = repository.find_page_by_example(example, PageRequest.of(0, 20))
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from typing import Any

from sqlalchemy import ColumnElement, Enum, String, Text, func
from sqlalchemy import inspect as sa_inspect


def _is_text(column_type: Any, value: Any) -> bool:
    # Enum columns are String subclasses but compare by equality
    return (
        isinstance(column_type, (String, Text))
        and not isinstance(column_type, Enum)
        and isinstance(value, str)
        and not isinstance(value, enum.Enum)
    )


class StringMatcher(str, enum.Enum):
    EXACT = "EXACT"
    STARTING = "STARTING"
    ENDING = "ENDING"
    CONTAINING = "CONTAINING"


@dataclass(frozen=True)
class ExampleMatcher:
    """Immutable matching configuration; ``with_*`` methods return copies."""

    ignored_paths: frozenset[str] = field(default_factory=frozenset)
    include_nulls: bool = False
    string_matcher: StringMatcher = StringMatcher.EXACT
    ignore_case: bool = False

    @classmethod
    def matching(cls) -> ExampleMatcher:
        return cls()

    def with_ignore_paths(self, *paths: str) -> ExampleMatcher:
        return replace(self, ignored_paths=self.ignored_paths | frozenset(paths))

    def with_include_nulls(self) -> ExampleMatcher:
        return replace(self, include_nulls=True)

    def with_string_matcher(self, string_matcher: StringMatcher) -> ExampleMatcher:
        return replace(self, string_matcher=string_matcher)

    def with_ignore_case(self) -> ExampleMatcher:
        return replace(self, ignore_case=True)


@dataclass(frozen=True)
class Example:
    sample: Any
    matcher: ExampleMatcher = field(default_factory=ExampleMatcher)

    @classmethod
    def of(cls, sample: Any, matcher: ExampleMatcher | None = None) -> Example:
        return cls(sample=sample, matcher=matcher or ExampleMatcher())

    def criteria(self, model: type[Any]) -> list[ColumnElement[bool]]:
        """Build WHERE clauses for ``model`` from the sample's column values."""
        clauses: list[ColumnElement[bool]] = []
        for attr in sa_inspect(model).column_attrs:
            name = attr.key
            # Deferred columns are not loaded on a transient sample
            if name in self.matcher.ignored_paths or attr.deferred:
                continue
            value = getattr(self.sample, name, None)
            column = getattr(model, name)

            if value is None:
                if self.matcher.include_nulls:
                    clauses.append(column.is_(None))
                continue

            if _is_text(attr.columns[0].type, value):
                clauses.append(self._match_string(column, value))
            else:
                clauses.append(column == value)
        return clauses

    def _match_string(self, column: Any, value: str) -> ColumnElement[bool]:
        if self.matcher.ignore_case:
            column = func.lower(column)
            value = value.lower()

        mode = self.matcher.string_matcher
        if mode is StringMatcher.EXACT:
            return column == value
        if mode is StringMatcher.STARTING:
            return column.startswith(value, autoescape=True)
        if mode is StringMatcher.ENDING:
            return column.endswith(value, autoescape=True)
        return column.contains(value, autoescape=True)
