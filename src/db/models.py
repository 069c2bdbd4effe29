"""
Table definitions for the searchable resources and the search audit log.

Tables are SQLAlchemy Core objects so the query builder can compose
``select()`` statements against them directly.
"""
from __future__ import annotations

import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
)

metadata = MetaData()


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


properties = Table(
    "properties",
    metadata,
    Column("id", String(26), primary_key=True),
    Column("host_id", String(26), index=True),
    Column("name", String(255), nullable=False),
    Column("description", Text),
    Column("address", String(255)),
    Column("lat", Float),
    Column("lng", Float),
    Column("avatar", String(255)),
    Column("cover_image", String(255)),
    Column("phone", String(40)),
    Column("hours", JSON),
    Column("category", String(60), index=True),
    Column("verified", Boolean, nullable=False, default=False),
    Column("created_at", DateTime(timezone=True), default=_utcnow),
    Column("updated_at", DateTime(timezone=True), default=_utcnow, onupdate=_utcnow),
)

listings = Table(
    "listings",
    metadata,
    Column("id", String(26), primary_key=True),
    Column("property_id", String(26), ForeignKey("properties.id"), index=True),
    Column("name", String(255), nullable=False),
    Column("description", Text),
    Column("price_per_night", Numeric(10, 2, asdecimal=False)),
    Column("images", JSON),
    Column("category", String(60), index=True),
    Column("max_guests", Integer),
    Column("bedrooms", Integer),
    Column("beds", Integer),
    Column("bathrooms", Numeric(3, 1, asdecimal=False)),
    Column("amenities", JSON),
    Column("house_rules", JSON),
    Column("accessibility_features", JSON),
    Column("tags", JSON),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("instant_book", Boolean, nullable=False, default=False),
    Column("self_check_in", Boolean, nullable=False, default=False),
    Column("allows_pets", Boolean, nullable=False, default=False),
    Column("created_at", DateTime(timezone=True), default=_utcnow),
    Column("updated_at", DateTime(timezone=True), default=_utcnow, onupdate=_utcnow),
)

search_logs = Table(
    "search_logs",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("resource", String(60), nullable=False),
    Column("query", Text),  # JSON object
    Column("clause_count", Integer),
    Column("row_count", Integer),
    Column("total", Integer),
    Column("latency_ms", Integer),
    Column("created_at", DateTime(timezone=True), nullable=False, default=_utcnow),
)

TABLES = {
    "properties": properties,
    "listings": listings,
}


def get_table(name: str) -> Table:
    return TABLES[name]
