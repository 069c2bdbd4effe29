"""
Search audit log -- records every resource search: query, clause count,
result size and latency.

The table is created automatically on first use via `ensure_log_table()`.
"""
from __future__ import annotations

import json
from typing import Any

from src.db.connection import get_engine
from src.db.models import metadata, search_logs
from src.core.logging import get_logger

logger = get_logger(__name__)


def ensure_log_table() -> None:
    """Create the search log table if it doesn't exist."""
    engine = get_engine()
    metadata.create_all(engine, tables=[search_logs], checkfirst=True)
    logger.info("Search log table '%s' ensured", search_logs.name)


def log_search(
    resource: str,
    query: dict[str, Any],
    clause_count: int,
    row_count: int,
    total: int,
    latency_ms: int,
) -> None:
    """Insert one row into the search log table.

    Failures are logged and swallowed: the audit trail must never fail a
    search.
    """
    params = {
        "resource": resource,
        "query": json.dumps(query, default=str),
        "clause_count": clause_count,
        "row_count": row_count,
        "total": total,
        "latency_ms": latency_ms,
    }

    try:
        with get_engine().begin() as conn:
            conn.execute(search_logs.insert(), params)
        logger.debug("Search logged: resource=%s clauses=%d", resource, clause_count)
    except Exception:
        logger.exception("Failed to log search -- continuing without logging")
