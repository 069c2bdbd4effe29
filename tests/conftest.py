"""
Shared fixtures -- a throwaway SQLite database with a handful of known
properties and listings.

The database URL is set before any ``src`` module is imported so the
cached settings and engine pick it up.
"""
from __future__ import annotations

import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="stays-test-")
os.environ["DB_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["FILTER_STRICT_MODE"] = "false"
os.environ["SEARCH_LOG_ENABLED"] = "true"

import pytest
from sqlalchemy import delete

from src.core.config import get_settings
from src.db.connection import dispose_engine, get_engine
from src.db.models import listings, metadata, properties, search_logs

PROPERTIES = [
    {
        "id": "P1", "host_id": "H1", "name": "Ocean Breeze House",
        "description": "Sea view rooms", "address": "1 Beach Road, Lagos",
        "lat": 0.5, "lng": 0.0, "category": "hotel", "verified": True,
        "hours": {"check_in": "14:00"},
    },
    {
        "id": "P2", "host_id": "H2", "name": "Mountain Lodge",
        "description": "Quiet cabins", "address": "Hill Street, Accra",
        "lat": 5.0, "lng": 0.0, "category": "villa", "verified": False,
    },
    {
        "id": "P3", "host_id": "H1", "name": "Center Inn",
        "description": "Downtown city flat", "address": "9 Market Square, Lagos",
        "lat": 0.1, "lng": 0.1, "category": "apartment", "verified": True,
    },
    {
        "id": "P4", "host_id": "H3", "name": "Nowhere Hut",
        "description": None, "address": None,
        "lat": None, "lng": None, "category": "guesthouse", "verified": False,
    },
]

LISTINGS = [
    {
        "id": "L1", "property_id": "P1", "name": "Sunset Suite",
        "description": "Ocean facing suite", "price_per_night": 150.0,
        "category": "villa", "max_guests": 4, "bedrooms": 2, "beds": 2, "bathrooms": 1.5,
        "amenities": ["wifi", "pool"], "house_rules": ["no_smoking"],
        "accessibility_features": ["elevator"], "tags": ["beachfront", "romantic"],
        "is_active": True, "instant_book": True,
    },
    {
        "id": "L2", "property_id": "P1", "name": "Garden Room",
        "description": "Ground floor room by the garden", "price_per_night": 80.0,
        "category": "room", "max_guests": 2, "bedrooms": 1, "beds": 1, "bathrooms": 1.0,
        "amenities": ["wifi"], "house_rules": [], "accessibility_features": [],
        "tags": ["budget"], "is_active": True, "instant_book": False,
    },
    {
        "id": "L3", "property_id": "P2", "name": "Villa Grande",
        "description": "Whole villa with pool", "price_per_night": 450.0,
        "category": "villa", "max_guests": 8, "bedrooms": 4, "beds": 5, "bathrooms": 3.0,
        "amenities": ["wifi", "pool", "parking"], "house_rules": ["no_parties"],
        "accessibility_features": [], "tags": ["luxury", "family"],
        "is_active": True, "instant_book": True,
    },
    {
        "id": "L4", "property_id": "P3", "name": "City Studio",
        "description": "Compact studio downtown", "price_per_night": 200.0,
        "category": "studio", "max_guests": 2, "bedrooms": 1, "beds": 1, "bathrooms": 1.0,
        "amenities": ["kitchen", "wifi"], "house_rules": [], "accessibility_features": [],
        "tags": ["business"], "is_active": False, "instant_book": False,
    },
    {
        "id": "L5", "property_id": "P3", "name": "Budget Bunk",
        "description": None, "price_per_night": 40.0,
        "category": "room", "max_guests": 1, "bedrooms": 1, "beds": 1, "bathrooms": 1.0,
        "amenities": [], "house_rules": [], "accessibility_features": [],
        "tags": ["budget"], "is_active": True, "instant_book": False,
    },
]


@pytest.fixture(scope="session", autouse=True)
def seeded_db():
    """Create the schema and load the known rows once per test session."""
    get_settings.cache_clear()
    dispose_engine()
    engine = get_engine()
    metadata.create_all(engine)
    with engine.begin() as conn:
        conn.execute(delete(listings))
        conn.execute(delete(properties))
        for row in PROPERTIES:
            conn.execute(properties.insert().values(**row))
        for row in LISTINGS:
            conn.execute(listings.insert().values(**row))
    yield engine
    dispose_engine()


@pytest.fixture
def clean_search_log(seeded_db):
    """Empty the audit table before a test that inspects it."""
    metadata.create_all(seeded_db, tables=[search_logs])
    with seeded_db.begin() as conn:
        conn.execute(delete(search_logs))
    return seeded_db


@pytest.fixture(scope="session")
def seed_rows():
    """The known (properties, listings) rows, for tests that load them elsewhere."""
    return PROPERTIES, LISTINGS
