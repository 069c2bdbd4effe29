"""
Read-only query executor and paginator.

All search queries run through `execute_readonly` / `fetch_page`, which:
  1. Open a read-only connection (see `readonly_connection`)
  2. Apply a per-query statement timeout on Postgres
  3. Convert Decimal/date/datetime to JSON-safe Python types
"""
from __future__ import annotations

import decimal
import datetime
import math
import sys
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import func, select, text
from sqlalchemy.engine import Connection
from sqlalchemy.sql import Select

from src.db.connection import readonly_connection
from src.core.config import get_settings
from src.core.logging import get_logger

logger = get_logger(__name__)


def _serialise_value(val: Any) -> Any:
    """Convert DB types to JSON-serialisable Python types."""
    if isinstance(val, decimal.Decimal):
        return float(val)
    if isinstance(val, (datetime.date, datetime.datetime)):
        return val.isoformat()
    if isinstance(val, datetime.timedelta):
        return str(val)
    return val


def _set_timeout(conn: Connection, timeout_ms: int) -> None:
    if conn.dialect.name == "postgresql":
        conn.execute(text(f"SET LOCAL statement_timeout = {int(timeout_ms)}"))


def _rows(conn: Connection, stmt: Select) -> list[dict[str, Any]]:
    result = conn.execute(stmt)
    columns = list(result.keys())
    return [
        {col: _serialise_value(val) for col, val in zip(columns, row)}
        for row in result.fetchall()
    ]


def execute_readonly(stmt: Select, timeout_ms: int | None = None) -> list[dict[str, Any]]:
    """Execute a SELECT and return rows as serialisable dicts."""
    if timeout_ms is None:
        timeout_ms = get_settings().query_timeout_ms

    with readonly_connection() as conn:
        _set_timeout(conn, timeout_ms)
        rows = _rows(conn, stmt)

    logger.info("Returned %d rows", len(rows))
    return rows


# ── Pagination ───────────────────────────────────────────

@dataclass
class Page:
    """One slice of a result set plus the numbers a client pages with."""

    rows: list[dict[str, Any]] = field(default_factory=list)
    total: int = 0
    page: int = 1
    per_page: int = 15

    @property
    def last_page(self) -> int:
        return max(1, math.ceil(self.total / self.per_page))

    @property
    def first_item(self) -> int | None:
        return (self.page - 1) * self.per_page + 1 if self.rows else None

    @property
    def last_item(self) -> int | None:
        return (self.page - 1) * self.per_page + len(self.rows) if self.rows else None

    def meta(self) -> dict[str, Any]:
        return {
            "current_page": self.page,
            "per_page": self.per_page,
            "total": self.total,
            "last_page": self.last_page,
            "from": self.first_item,
            "to": self.last_item,
        }


def fetch_page(
    stmt: Select,
    page: int = 1,
    per_page: int = 15,
    timeout_ms: int | None = None,
) -> Page:
    """Count the full result of *stmt*, then fetch the requested slice."""
    if timeout_ms is None:
        timeout_ms = get_settings().query_timeout_ms
    per_page = max(1, per_page)
    # OFFSET must fit a signed 64-bit integer
    page = min(max(1, page), sys.maxsize // per_page)

    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    sliced = stmt.limit(per_page).offset((page - 1) * per_page)

    with readonly_connection() as conn:
        _set_timeout(conn, timeout_ms)
        total = conn.execute(count_stmt).scalar_one()
        rows = _rows(conn, sliced)

    logger.info("Page %d/%d: %d of %d rows", page, max(1, math.ceil(total / per_page)), len(rows), total)
    return Page(rows=rows, total=total, page=page, per_page=per_page)
