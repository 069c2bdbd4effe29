"""
GET /filters, GET /filters/{resource}, GET /operators -- filter metadata endpoints.
"""
from __future__ import annotations

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from src.filters.operators import OPERATOR_SYMBOLS
from src.filters.registry import load_filter_registry

router = APIRouter()



class ResourceFilters(BaseModel):
    resource: str
    params: dict[str, list[str]]
    column_map: dict[str, str]
    search_columns: list[str]
    reserved_params: list[str]


class CatalogResponse(BaseModel):
    resources: list[ResourceFilters]
    operators: dict[str, str]



@router.get("/operators")
def list_operators() -> dict:
    """Return the operator vocabulary: key -> SQL symbol."""
    return {"operators": {op.value: symbol for op, symbol in OPERATOR_SYMBOLS.items()}}


@router.get("/filters", response_model=CatalogResponse)
def full_catalog() -> CatalogResponse:
    """Return every filterable resource with its parameters and operators."""
    registry = load_filter_registry()
    return CatalogResponse(
        resources=[ResourceFilters(**r) for r in registry.catalog()],
        operators={op.value: symbol for op, symbol in OPERATOR_SYMBOLS.items()},
    )


@router.get("/filters/{resource}", response_model=ResourceFilters)
def resource_filters(resource: str) -> ResourceFilters:
    """Return one resource's filter declaration."""
    for entry in load_filter_registry().catalog():
        if entry["resource"] == resource:
            return ResourceFilters(**entry)
    raise HTTPException(status_code=404, detail=f"Unknown resource '{resource}'")
