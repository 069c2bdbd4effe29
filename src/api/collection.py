"""
Shared handler for the paginated, filterable collection endpoints.
"""
from __future__ import annotations

from fastapi import HTTPException, Request
from pydantic import BaseModel

from src.api.schemas import CollectionResponse, PageMeta
from src.search.service import search
from src.core.logging import get_logger

logger = get_logger(__name__)


def collection_response(resource: str, request: Request, item_model: type[BaseModel]) -> CollectionResponse:
    """Run a search from the raw query string and shape the paginated response."""
    try:
        result = search(resource, query_items=request.query_params.multi_items())
    except Exception as exc:
        logger.exception("Search on %s failed", resource)
        raise HTTPException(status_code=500, detail=str(exc))

    if not result.success:
        raise HTTPException(status_code=400, detail={"errors": result.validation_errors})

    return CollectionResponse[item_model](
        data=[item_model(**row) for row in result.rows],
        meta=PageMeta(**result.page.meta()),
    )
