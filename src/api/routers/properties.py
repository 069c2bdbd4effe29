"""
GET /properties, GET /properties/{id} -- property search endpoints.

Query parameters:
  - structured filters, ``field[op]=value`` (see GET /filters/properties)
  - ``search``: substring match on name, description or address
  - ``lat`` + ``lng`` + ``radius``: within *radius* km, nearest first
  - ``page`` / ``per_page``
"""
from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from src.api.collection import collection_response
from src.api.schemas import CollectionResponse, PropertyItem
from src.search.service import get_by_id

router = APIRouter()


@router.get(
    "",
    response_model=CollectionResponse[PropertyItem],
    response_model_exclude_unset=True,
)
def list_properties(request: Request):
    return collection_response("properties", request, PropertyItem)


@router.get("/{property_id}", response_model=PropertyItem, response_model_exclude_unset=True)
def show_property(property_id: str):
    row = get_by_id("properties", property_id)
    if row is None:
        raise HTTPException(status_code=404, detail=f"Property '{property_id}' not found")
    return PropertyItem(**row)
