"""
GET /listings, GET /listings/{id} -- listing search endpoints.

Query parameters:
  - structured filters, ``field[op]=value`` (see GET /filters/listings);
    LIKE filters on name, description and tags match if any of them does
  - ``search``: substring match on name or description, or an exact tag
  - ``amenities`` / ``house_rules`` / ``accessibility``: comma lists, all required
  - ``minPrice`` / ``maxPrice``: nightly price bounds
  - ``page`` / ``per_page`` (default 10)
"""
from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from src.api.collection import collection_response
from src.api.schemas import CollectionResponse, ListingItem
from src.search.service import get_by_id

router = APIRouter()


@router.get(
    "",
    response_model=CollectionResponse[ListingItem],
    response_model_exclude_unset=True,
)
def list_listings(request: Request):
    return collection_response("listings", request, ListingItem)


@router.get("/{listing_id}", response_model=ListingItem, response_model_exclude_unset=True)
def show_listing(listing_id: str):
    row = get_by_id("listings", listing_id)
    if row is None:
        raise HTTPException(status_code=404, detail=f"Listing '{listing_id}' not found")
    return ListingItem(**row)
