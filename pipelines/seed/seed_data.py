"""
Seed data generator — creates demo properties and listings.

Generates:
  - ~300 properties scattered around a handful of cities
  - 1-6 listings per property

Tables are created if missing and emptied before inserting.
Run:  python -m pipelines.seed.seed_data
"""
from __future__ import annotations

import random
import string
from datetime import datetime, timedelta, timezone

from faker import Faker
from sqlalchemy import delete

from src.core.config import get_settings
from src.db.connection import create_db_engine
from src.db.models import listings, metadata, properties

fake = Faker()
Faker.seed(42)
random.seed(42)

# ── Tunables ─────────────────────────────────────────────
NUM_PROPERTIES = 300
MAX_LISTINGS_PER_PROPERTY = 6
SCATTER_DEGREES = 0.25  # ~28 km around each city centre

CITIES = {
    "Lagos": (6.5244, 3.3792),
    "Accra": (5.6037, -0.1870),
    "Nairobi": (-1.2921, 36.8219),
    "Cape Town": (-33.9249, 18.4241),
    "Lisbon": (38.7223, -9.1393),
}
PROPERTY_CATEGORIES = ["hotel", "apartment", "villa", "guesthouse", "resort"]
LISTING_CATEGORIES = ["room", "suite", "villa", "studio", "entire_home"]
AMENITIES = ["wifi", "pool", "parking", "air_conditioning", "kitchen", "gym", "tv", "washer"]
HOUSE_RULES = ["no_smoking", "no_parties", "quiet_hours", "no_pets"]
ACCESSIBILITY = ["step_free_access", "wide_doorways", "accessible_bathroom", "elevator"]
TAGS = ["beachfront", "city_view", "family", "business", "romantic", "budget", "luxury"]

DATE_START = datetime(2025, 1, 1, tzinfo=timezone.utc)


def _ulid_like() -> str:
    return "".join(random.choices(string.digits + string.ascii_uppercase, k=26))


def _rand_ts() -> datetime:
    return DATE_START + timedelta(days=random.randint(0, 300), minutes=random.randint(0, 1439))


# ── Generators ───────────────────────────────────────────

def gen_properties() -> list[dict]:
    rows = []
    for _ in range(NUM_PROPERTIES):
        city, (lat, lng) = random.choice(list(CITIES.items()))
        created = _rand_ts()
        rows.append({
            "id": _ulid_like(),
            "host_id": _ulid_like(),
            "name": f"{fake.last_name()} {random.choice(['House', 'Lodge', 'Suites', 'Residence', 'Inn'])}",
            "description": fake.paragraph(nb_sentences=3),
            "address": f"{fake.street_address()}, {city}",
            "lat": round(lat + random.uniform(-SCATTER_DEGREES, SCATTER_DEGREES), 7),
            "lng": round(lng + random.uniform(-SCATTER_DEGREES, SCATTER_DEGREES), 7),
            "phone": fake.phone_number(),
            "hours": {"check_in": "14:00", "check_out": "11:00"},
            "category": random.choice(PROPERTY_CATEGORIES),
            "verified": random.random() < 0.7,
            "created_at": created,
            "updated_at": created,
        })
    return rows


def gen_listings(props: list[dict]) -> list[dict]:
    rows = []
    for prop in props:
        for _ in range(random.randint(1, MAX_LISTINGS_PER_PROPERTY)):
            bedrooms = random.randint(1, 5)
            created = _rand_ts()
            rows.append({
                "id": _ulid_like(),
                "property_id": prop["id"],
                "name": f"{fake.color_name()} {random.choice(['Room', 'Suite', 'Studio', 'Villa'])}",
                "description": fake.sentence(nb_words=12),
                "price_per_night": round(random.uniform(25.0, 900.0), 2),
                "images": [fake.image_url() for _ in range(random.randint(1, 4))],
                "category": random.choice(LISTING_CATEGORIES),
                "max_guests": bedrooms * 2,
                "bedrooms": bedrooms,
                "beds": bedrooms + random.randint(0, 2),
                "bathrooms": random.choice([1.0, 1.5, 2.0, 2.5, 3.0]),
                "amenities": random.sample(AMENITIES, random.randint(2, 6)),
                "house_rules": random.sample(HOUSE_RULES, random.randint(0, 3)),
                "accessibility_features": random.sample(ACCESSIBILITY, random.randint(0, 2)),
                "tags": random.sample(TAGS, random.randint(1, 3)),
                "is_active": random.random() < 0.9,
                "instant_book": random.random() < 0.5,
                "self_check_in": random.random() < 0.4,
                "allows_pets": random.random() < 0.3,
                "created_at": created,
                "updated_at": created,
            })
    return rows


# ── Bulk insert helper ───────────────────────────────────

def _bulk_insert(engine, table, rows: list[dict], batch_size: int = 500):
    """Insert rows into *table* in batches."""
    if not rows:
        return
    with engine.begin() as conn:
        for i in range(0, len(rows), batch_size):
            conn.execute(table.insert(), rows[i : i + batch_size])
    print(f"  ✓ {table.name}: {len(rows):,} rows")


# ── Main ─────────────────────────────────────────────────

def main():
    print("═══ Seed Data Generator ═══")
    engine = create_db_engine(get_settings().database_url)
    metadata.create_all(engine)

    # Empty existing data for idempotency
    print("Clearing tables …")
    with engine.begin() as conn:
        conn.execute(delete(listings))
        conn.execute(delete(properties))

    print("Generating data …")
    props = gen_properties()
    items = gen_listings(props)

    print("Inserting …")
    _bulk_insert(engine, properties, props)
    _bulk_insert(engine, listings, items)

    print(f"\nDone — seeded {len(props):,} properties, {len(items):,} listings.")


if __name__ == "__main__":
    main()
