"""SQLAlchemy engine & connection helpers.

Single shared engine with connection pooling.  All search queries run
through `readonly_connection`, which puts the transaction in read-only
mode before executing.  SQLite connections get the trigonometric
functions the haversine distance expression needs.
"""
from __future__ import annotations

import math
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine

from src.core.config import get_settings
from src.core.logging import get_logger

logger = get_logger(__name__)

_engine: Engine | None = None

_SQLITE_FUNCTIONS = {
    "radians": (1, math.radians),
    "sin": (1, math.sin),
    "cos": (1, math.cos),
    "asin": (1, math.asin),
    "sqrt": (1, math.sqrt),
    "power": (2, math.pow),
    "least": (2, min),
}


def _null_safe(fn):
    def wrapper(*args):
        if any(a is None for a in args):
            return None
        return fn(*args)
    return wrapper


def _register_sqlite_functions(dbapi_conn, _record) -> None:
    for name, (n_args, fn) in _SQLITE_FUNCTIONS.items():
        dbapi_conn.create_function(name, n_args, _null_safe(fn), deterministic=True)


def create_db_engine(url: str) -> Engine:
    """Create an engine for *url*, wiring SQLite math functions when needed."""
    if url.startswith("sqlite"):
        engine = create_engine(url, echo=False, connect_args={"check_same_thread": False})
        event.listen(engine, "connect", _register_sqlite_functions)
    else:
        engine = create_engine(
            url,
            pool_pre_ping=True,
            pool_size=5,
            max_overflow=10,
            echo=False,
        )
    return engine


def get_engine() -> Engine:
    """Return the shared SQLAlchemy engine (lazy-created, cached)."""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_db_engine(settings.database_url)
        logger.info("DB engine created  dialect=%s", _engine.dialect.name)
    return _engine


def dispose_engine() -> None:
    """Drop the shared engine so the next call picks up fresh settings."""
    global _engine
    if _engine is not None:
        _engine.dispose()
        _engine = None


@contextmanager
def readonly_connection() -> Generator:
    """Yield a connection that cannot write.

    Postgres gets a READ ONLY transaction; SQLite gets ``query_only`` for
    the lifetime of the checkout.  The connection is returned to the pool
    on exit.
    """
    engine = get_engine()
    conn = engine.connect()
    is_sqlite = engine.dialect.name == "sqlite"
    try:
        if is_sqlite:
            conn.exec_driver_sql("PRAGMA query_only = ON")
        else:
            conn.execute(text("SET TRANSACTION READ ONLY"))
        yield conn
    finally:
        if is_sqlite:
            conn.rollback()
            conn.exec_driver_sql("PRAGMA query_only = OFF")
        conn.close()
