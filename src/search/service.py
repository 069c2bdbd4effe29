"""
Search service -- orchestrates parse -> (validate) -> filter -> search -> geo -> paginate -> log.

One call per resource search.  The structured filters come from the
resource's FilterSpec through the filter engine; free-text search, the
haversine radius, JSON-array containment and price aliases are layered
on top as fixed query augmentations declared per resource in
``src/filters/resources.yml``.

When ``filter_strict_mode`` is on, requests the engine would silently
trim are rejected instead and no query runs.
"""
from __future__ import annotations

import time
from collections.abc import Mapping
from typing import Any

from sqlalchemy import select
from sqlalchemy.sql import Select

from src.core.config import get_settings
from src.core.utils import to_float
from src.db.executor import Page, execute_readonly, fetch_page
from src.db.models import get_table
from src.db.query_builder import (
    apply_clauses,
    apply_json_contains,
    apply_or_group,
    apply_search,
    split_grouped_likes,
)
from src.db.search_log import ensure_log_table, log_search
from src.filters.engine import Clause, parse_query, prepare_clauses, transform
from src.filters.registry import ResourceDefinition, get_resource
from src.filters.validator import validate_query
from src.search.geo import distance_expression
from src.core.logging import get_logger

logger = get_logger(__name__)

_log_table_ready = False


class SearchResult:
    def __init__(
        self,
        resource: str,
        page: Page,
        clauses: list[Clause],
        validation_errors: list[str] | None = None,
        latency_ms: int = 0,
    ):
        self.resource = resource
        self.page = page
        self.clauses = clauses
        self.validation_errors = validation_errors or []
        self.latency_ms = latency_ms

    @property
    def success(self) -> bool:
        return not self.validation_errors

    @property
    def rows(self) -> list[dict[str, Any]]:
        return self.page.rows


# ── Request helpers ──────────────────────────────────────

def _search_term(params: Mapping[str, Any]) -> str | None:
    term = params.get("search")
    if isinstance(term, str) and term.strip():
        return term
    return None


def _geo_origin(resource: ResourceDefinition, params: Mapping[str, Any]) -> tuple[float, float, float] | None:
    if resource.geo is None:
        return None
    if not all(k in params for k in ("lat", "lng", "radius")):
        return None
    lat, lng, radius = (to_float(params[k]) for k in ("lat", "lng", "radius"))
    if lat is None or lng is None or radius is None:
        logger.info("Ignoring non-numeric location search lat=%r lng=%r radius=%r",
                    params["lat"], params["lng"], params["radius"])
        return None
    return lat, lng, radius


def _items(value: Any) -> list[str]:
    if isinstance(value, Mapping):
        value = list(value.values())
    if isinstance(value, list):
        return [v for v in value if isinstance(v, str)]
    if isinstance(value, str):
        return value.split(",")
    return []


def _page_numbers(resource: ResourceDefinition, params: Mapping[str, Any]) -> tuple[int, int]:
    settings = get_settings()
    default = resource.default_per_page or settings.default_per_page

    def _int(key: str, fallback: int) -> int:
        number = to_float(params.get(key))
        return int(number) if number is not None and number >= 1 else fallback

    per_page = min(_int("per_page", default), settings.max_per_page)
    return _int("page", 1), per_page


# ── Query assembly ───────────────────────────────────────

def build_search(resource: ResourceDefinition, params: Mapping[str, Any]) -> tuple[Select, list[Clause]]:
    """Return the SELECT for *params* and the structured clauses applied to it."""
    table = get_table(resource.table)
    stmt = select(table)

    # 1. Free-text search (OR group)
    term = _search_term(params)
    if term is not None:
        stmt = apply_search(stmt, table, term, resource.search_columns, resource.search_json_columns)

    # 2. Location radius, nearest first
    origin = _geo_origin(resource, params)
    if origin is not None:
        lat, lng, radius = origin
        distance = distance_expression(
            table.c[resource.geo.lat_column], table.c[resource.geo.lng_column], lat, lng,
        )
        labelled = distance.label("distance")
        stmt = stmt.add_columns(labelled).where(distance < radius).order_by(labelled)

    # 3. Structured filters (AND), with grouped LIKEs OR-ed together
    clauses = prepare_clauses(transform(resource.filter_spec, params))
    grouped, others = split_grouped_likes(clauses, resource.grouped_like_columns)
    stmt = apply_clauses(stmt, table, others)
    stmt = apply_or_group(stmt, table, grouped)

    # 4. JSON array containment (every item required)
    for param, column in resource.json_contains.items():
        if param in params:
            stmt = apply_json_contains(stmt, table, column, _items(params[param]))

    # 5. Price aliases
    aliases = resource.price_aliases
    if aliases is not None:
        column = table.c[aliases.column]
        low = to_float(params.get(aliases.min_param))
        high = to_float(params.get(aliases.max_param))
        if low is not None:
            stmt = stmt.where(column >= low)
        if high is not None:
            stmt = stmt.where(column <= high)

    stmt = stmt.order_by(table.c.id)
    return stmt, clauses


# ── Audit ────────────────────────────────────────────────

def _audit(resource: str, params: Mapping[str, Any], clauses: list[Clause], page: Page, latency_ms: int) -> None:
    global _log_table_ready
    if not get_settings().search_log_enabled:
        return
    if not _log_table_ready:
        try:
            ensure_log_table()
            _log_table_ready = True
        except Exception:
            logger.warning("Could not ensure search log table -- skipping audit")
            return
    log_search(
        resource=resource,
        query=dict(params),
        clause_count=len(clauses),
        row_count=len(page.rows),
        total=page.total,
        latency_ms=latency_ms,
    )


# ── Public API ───────────────────────────────────────────

def search(
    resource_name: str,
    params: Mapping[str, Any] | None = None,
    query_items: list[tuple[str, str]] | None = None,
    strict: bool | None = None,
) -> SearchResult:
    """Run one resource search.

    Parameters
    ----------
    resource_name : str
        A resource declared in the filter registry ("properties", "listings").
    params : Mapping, optional
        Nested query mapping (``{"price": {"gte": "10"}}``).
    query_items : list of (key, value), optional
        Raw query-string pairs; parsed with ``parse_query`` when *params*
        is not given.
    strict : bool, optional
        Reject unknown parameters and malformed ranges instead of skipping
        them.  Defaults to the ``filter_strict_mode`` setting.
    """
    t0 = time.perf_counter()
    resource = get_resource(resource_name)
    if params is None:
        params = parse_query(query_items or [])
    if strict is None:
        strict = get_settings().filter_strict_mode

    logger.info("Search | resource=%s | params=%s | strict=%s", resource_name, dict(params), strict)
    page_number, per_page = _page_numbers(resource, params)

    if strict:
        errors = validate_query(resource, params)
        if errors:
            logger.info("Search rejected: %s", "; ".join(errors))
            return SearchResult(
                resource=resource_name,
                page=Page(page=page_number, per_page=per_page),
                clauses=[],
                validation_errors=errors,
                latency_ms=int((time.perf_counter() - t0) * 1000),
            )

    stmt, clauses = build_search(resource, params)
    page = fetch_page(stmt, page_number, per_page)
    latency = int((time.perf_counter() - t0) * 1000)

    # Audit failures never fail the search
    _audit(resource_name, params, clauses, page, latency)

    return SearchResult(resource=resource_name, page=page, clauses=clauses, latency_ms=latency)


def get_by_id(resource_name: str, record_id: str) -> dict[str, Any] | None:
    """Fetch a single record of *resource_name*, or None."""
    table = get_table(get_resource(resource_name).table)
    rows = execute_readonly(select(table).where(table.c.id == record_id).limit(1))
    return rows[0] if rows else None
