"""
Loads, parses, and caches the filterable-resource declarations from YAML.

Each resource entry is the single source of truth for:
  - the FilterSpec (parameter -> allowed operators) and its column map
  - the free-text search columns
  - geo columns, JSON-array containment params and price aliases
  - the non-filter query keys the endpoint consumes itself
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from functools import lru_cache
from typing import Any

import yaml

from src.filters.engine import FilterSpec
from src.core.logging import get_logger

logger = get_logger(__name__)

_RESOURCES_PATH = Path(__file__).resolve().parent / "resources.yml"


# ── Typed domain objects ─────────────────────────────────

@dataclass(frozen=True)
class GeoColumns:
    lat_column: str
    lng_column: str


@dataclass(frozen=True)
class PriceAliases:
    column: str
    min_param: str
    max_param: str


@dataclass(frozen=True)
class ResourceDefinition:
    name: str
    table: str
    filter_spec: FilterSpec
    default_per_page: int | None = None
    search_columns: tuple[str, ...] = ()
    search_json_columns: tuple[str, ...] = ()
    grouped_like_columns: tuple[str, ...] = ()
    json_contains: dict[str, str] = field(default_factory=dict)
    reserved_params: tuple[str, ...] = ()
    geo: GeoColumns | None = None
    price_aliases: PriceAliases | None = None


@dataclass
class FilterRegistry:
    """All filterable resources, keyed by name."""

    version: int
    resources: dict[str, ResourceDefinition]

    def resource(self, name: str) -> ResourceDefinition | None:
        return self.resources.get(name)

    def get_resource_names(self) -> list[str]:
        return list(self.resources.keys())

    def catalog(self) -> list[dict[str, Any]]:
        """Return every resource's params and operators (for API responses)."""
        result = []
        for r in self.resources.values():
            result.append({
                "resource": r.name,
                "params": {
                    param: [op.value for op in ops]
                    for param, ops in r.filter_spec.params.items()
                },
                "column_map": dict(r.filter_spec.column_map),
                "search_columns": list(r.search_columns) + list(r.search_json_columns),
                "reserved_params": list(r.reserved_params),
            })
        return result


# ── Parsing ──────────────────────────────────────────────

def _parse_resource(raw: dict[str, Any]) -> ResourceDefinition:
    name = raw["name"]
    spec = FilterSpec.from_mapping(
        name,
        raw.get("params") or {},
        raw.get("column_map") or {},
    )
    geo_raw = raw.get("geo")
    price_raw = raw.get("price_aliases")
    return ResourceDefinition(
        name=name,
        table=raw.get("table", name),
        filter_spec=spec,
        default_per_page=raw.get("default_per_page"),
        search_columns=tuple(raw.get("search_columns") or ()),
        search_json_columns=tuple(raw.get("search_json_columns") or ()),
        grouped_like_columns=tuple(raw.get("grouped_like_columns") or ()),
        json_contains=dict(raw.get("json_contains") or {}),
        reserved_params=tuple(raw.get("reserved_params") or ()),
        geo=GeoColumns(**geo_raw) if geo_raw else None,
        price_aliases=PriceAliases(**price_raw) if price_raw else None,
    )


def _parse_registry(raw_yaml: dict[str, Any]) -> FilterRegistry:
    resources = {r["name"]: _parse_resource(r) for r in raw_yaml.get("resources", [])}
    return FilterRegistry(version=raw_yaml.get("version", 1), resources=resources)


# ── Public API ───────────────────────────────────────────

@lru_cache
def load_filter_registry() -> FilterRegistry:
    """Load and cache the resource declarations from YAML."""
    with open(_RESOURCES_PATH) as f:
        raw = yaml.safe_load(f)
    registry = _parse_registry(raw)
    logger.info("Filter registry loaded: %s", ", ".join(registry.get_resource_names()))
    return registry


def get_resource(name: str) -> ResourceDefinition:
    resource = load_filter_registry().resource(name)
    if resource is None:
        raise KeyError(f"Unknown filterable resource '{name}'")
    return resource


def get_filter_spec(name: str) -> FilterSpec:
    return get_resource(name).filter_spec
