"""Paginated reads over raw sources.

``SourceReader.fetch_all`` is the only I/O primitive used by the weekly
performance aggregators. It pages through a source in fixed windows and
stops at the first short page. A failing page is logged and the rows
accumulated so far are returned; the failure is remembered on the reader
so callers can report the read as degraded.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from django.conf import settings
from django.db import DatabaseError

from sources.schemas import get_schema

logger = logging.getLogger("venueops")

OPERATORS = {
    "gte": "__gte",
    "lte": "__lte",
    "eq": "",
    "in": "__in",
}


@dataclass(frozen=True)
class Predicate:
    column: str
    op: str
    value: object

    def lookup(self) -> tuple[str, object]:
        try:
            suffix = OPERATORS[self.op]
        except KeyError:
            raise ValueError(f"Unsupported predicate operator {self.op!r}.") from None
        value = self.value
        if self.op == "in":
            value = list(value)
        return f"{self.column}{suffix}", value


def gte(column, value):
    return Predicate(column, "gte", value)


def lte(column, value):
    return Predicate(column, "lte", value)


def eq(column, value):
    return Predicate(column, "eq", value)


def in_(column, values):
    return Predicate(column, "in", tuple(values))


@dataclass
class ReadFailure:
    source: str
    page: int
    reason: str

    def __str__(self):
        return f"{self.source}: page {self.page} {self.reason}"


@dataclass
class SourceReader:
    page_size: int = 0
    max_pages: int = 0
    failures: list = field(default_factory=list)

    def __post_init__(self):
        if not self.page_size:
            self.page_size = int(getattr(settings, "PERFORMANCE_PAGE_SIZE", 1000))
        if not self.max_pages:
            self.max_pages = int(getattr(settings, "PERFORMANCE_MAX_PAGES", 1000))

    @property
    def degraded(self) -> bool:
        return bool(self.failures)

    def fetch_all(self, source: str, columns: Iterable[str], predicates: Iterable[Predicate] = ()) -> list[dict]:
        """Return every row of ``source`` matching all ``predicates``."""
        schema = get_schema(source)
        columns = list(columns)
        for column in columns:
            if column not in schema.columns:
                raise ValueError(f"Unknown column {column!r} for source {source!r}.")

        filters = {}
        for predicate in predicates:
            if predicate.column not in schema.columns:
                raise ValueError(f"Unknown column {predicate.column!r} for source {source!r}.")
            key, value = predicate.lookup()
            filters[key] = value

        queryset = schema.model.objects.filter(**filters).order_by("pk").values(*columns)

        rows = []
        page = 0
        while True:
            offset = page * self.page_size
            try:
                window = list(queryset[offset:offset + self.page_size])
            except DatabaseError as exc:
                logger.warning(
                    "Read of %s failed on page %s after %s rows: %s",
                    source,
                    page,
                    len(rows),
                    exc,
                )
                self.failures.append(ReadFailure(source, page, f"failed ({exc.__class__.__name__})"))
                break
            rows.extend(schema.coerce_row(raw) for raw in window)
            page += 1
            if len(window) < self.page_size:
                break
            if page >= self.max_pages:
                logger.warning("Read of %s truncated at %s pages.", source, page)
                self.failures.append(ReadFailure(source, page, "truncated"))
                break

        if not rows:
            logger.debug("Read of %s returned no rows for %s.", source, filters)
        return rows
