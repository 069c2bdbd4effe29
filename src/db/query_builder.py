"""
Query builder — applies filter clauses and search extensions to a SELECT.

Clauses arrive from the filter engine already prepared (see
``prepare_clauses``) and are AND-combined.  The only OR logic lives in
the free-text search group and the grouped LIKE clauses of listings.
Values are bound as untyped literals so the database, not the driver,
decides how a query-string value compares against a column.
"""
from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any

from sqlalchemy import JSON, Boolean, String, Table, and_, cast, literal, or_
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql import Select
from sqlalchemy.sql.elements import ColumnElement

from src.filters.engine import Clause
from src.core.logging import get_logger

logger = get_logger(__name__)

# Operator symbol -> SQLAlchemy column method
_COMPARATORS = {
    "=": "__eq__",
    "!=": "__ne__",
    "<": "__lt__",
    "<=": "__le__",
    ">": "__gt__",
    ">=": "__ge__",
    "LIKE": "like",
    "IN": "in_",
    "NOT IN": "not_in",
}


def _bind(value: Any) -> Any:
    # None stays raw so = / != render IS NULL / IS NOT NULL
    return value if value is None else literal(value)


def _column(table: Table, name: str) -> ColumnElement:
    try:
        return table.c[name]
    except KeyError:
        raise ValueError(f"Table '{table.name}' has no column '{name}'") from None


def _text_of(column: ColumnElement) -> ColumnElement:
    """JSON columns are matched against their serialised text."""
    if isinstance(column.type, JSON):
        return cast(column, String)
    return column


def clause_predicate(table: Table, clause: Clause) -> ColumnElement:
    """Translate one prepared clause into a SQLAlchemy predicate."""
    column_name, symbol, value = clause
    column = _column(table, column_name)

    if symbol == "BETWEEN":
        low, high = value
        return column.between(_bind(low), _bind(high))
    if symbol == "NOT BETWEEN":
        low, high = value
        return ~column.between(_bind(low), _bind(high))
    if symbol in ("IN", "NOT IN"):
        return getattr(column, _COMPARATORS[symbol])([_bind(v) for v in value])
    if symbol == "LIKE":
        return _text_of(column).like(_bind(value))

    method = _COMPARATORS.get(symbol)
    if method is None:
        raise ValueError(f"Unsupported operator symbol '{symbol}'")
    return getattr(column, method)(_bind(value))


def apply_clauses(stmt: Select, table: Table, clauses: Iterable[Clause]) -> Select:
    """AND every clause onto *stmt*."""
    predicates = [clause_predicate(table, c) for c in clauses]
    if predicates:
        stmt = stmt.where(and_(*predicates))
        logger.debug("Applied %d clause(s) to %s", len(predicates), table.name)
    return stmt


def split_grouped_likes(
    clauses: Iterable[Clause],
    columns: Iterable[str],
) -> tuple[list[Clause], list[Clause]]:
    """Separate LIKE clauses on *columns* (OR-grouped) from the rest (AND)."""
    grouped_columns = set(columns)
    grouped: list[Clause] = []
    others: list[Clause] = []
    for clause in clauses:
        if clause.column in grouped_columns and clause.operator == "LIKE":
            grouped.append(clause)
        else:
            others.append(clause)
    return grouped, others


def apply_or_group(stmt: Select, table: Table, clauses: Iterable[Clause]) -> Select:
    """OR the given clauses together as a single AND-ed group."""
    predicates = [clause_predicate(table, c) for c in clauses]
    if predicates:
        stmt = stmt.where(or_(*predicates))
    return stmt


# ── JSON array membership ────────────────────────────────

class JsonContains(ColumnElement):
    """Exact element test on a JSON array column, compiled per dialect."""

    inherit_cache = False
    type = Boolean()

    def __init__(self, column: ColumnElement, item: Any):
        self.column = column
        self.item = item


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


@compiles(JsonContains)
def _json_contains_text(element, compiler, **kw):
    pattern = f"%{_escape_like(json.dumps(element.item))}%"
    predicate = cast(element.column, String).like(literal(pattern), escape="\\")
    return compiler.process(predicate, **kw)


@compiles(JsonContains, "sqlite")
def _json_contains_sqlite(element, compiler, **kw):
    column = compiler.process(element.column, **kw)
    item = compiler.process(literal(element.item), **kw)
    return f"EXISTS (SELECT 1 FROM json_each({column}) WHERE json_each.value = {item})"


@compiles(JsonContains, "postgresql")
def _json_contains_postgresql(element, compiler, **kw):
    column = compiler.process(element.column, **kw)
    item = compiler.process(literal(json.dumps([element.item])), **kw)
    return f"(CAST({column} AS JSONB) @> CAST({item} AS JSONB))"


def json_contains(column: ColumnElement, item: Any) -> ColumnElement:
    """True when the JSON array in *column* holds *item* as an element."""
    return JsonContains(column, item)


def apply_search(
    stmt: Select,
    table: Table,
    term: str,
    columns: Iterable[str],
    json_columns: Iterable[str] = (),
) -> Select:
    """Free-text search: OR of substring matches across *columns*.

    JSON array columns match when they contain *term* as an element.
    """
    pattern = f"%{term}%"
    predicates = [_text_of(_column(table, c)).like(literal(pattern)) for c in columns]
    predicates += [json_contains(_column(table, c), term) for c in json_columns]
    if predicates:
        stmt = stmt.where(or_(*predicates))
    return stmt


def apply_json_contains(stmt: Select, table: Table, column: str, items: Iterable[str]) -> Select:
    """Require every non-blank item to be present in the JSON array *column*."""
    col = _column(table, column)
    for item in items:
        item = item.strip()
        if item:
            stmt = stmt.where(json_contains(col, item))
    return stmt
