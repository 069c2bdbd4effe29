"""
Response models shared by the resource routers.
"""
from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

Item = TypeVar("Item", bound=BaseModel)


class PageMeta(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_page: int
    per_page: int
    total: int
    last_page: int
    from_: int | None = Field(None, alias="from")
    to: int | None = None


class CollectionResponse(BaseModel, Generic[Item]):
    data: list[Item]
    meta: PageMeta


class PropertyItem(BaseModel):
    id: str
    host_id: str | None = None
    name: str
    description: str | None = None
    address: str | None = None
    lat: float | None = None
    lng: float | None = None
    avatar: str | None = None
    cover_image: str | None = None
    phone: str | None = None
    hours: Any = None
    category: str | None = None
    verified: bool = False
    distance: float | None = None
    created_at: str | None = None
    updated_at: str | None = None


class ListingItem(BaseModel):
    id: str
    property_id: str | None = None
    name: str
    description: str | None = None
    price_per_night: float | None = None
    max_guests: int | None = None
    bedrooms: int | None = None
    beds: int | None = None
    bathrooms: float | None = None
    images: list[str] | None = None
    category: str | None = None
    amenities: list[str] | None = None
    house_rules: list[str] | None = None
    accessibility_features: list[str] | None = None
    tags: list[str] | None = None
    is_active: bool = True
    instant_book: bool = False
    self_check_in: bool = False
    allows_pets: bool = False
    created_at: str | None = None
    updated_at: str | None = None
