"""
Unit tests -- haversine distance, in Python and as SQL.
"""
import math

import pytest
from sqlalchemy import Column, Float, Integer, MetaData, Table, select

from src.db.connection import create_db_engine
from src.search.geo import EARTH_RADIUS_KM, distance_expression, haversine_km


def test_zero_distance():
    assert haversine_km(12.5, -3.2, 12.5, -3.2) == 0.0


def test_half_degree_latitude():
    # 0.5 degree of arc on a 6371 km sphere
    expected = EARTH_RADIUS_KM * math.radians(0.5)
    assert haversine_km(0, 0, 0.5, 0) == pytest.approx(expected)
    assert haversine_km(0, 0, 0.5, 0) == pytest.approx(55.6, abs=0.1)


def test_five_degrees_latitude():
    assert haversine_km(0, 0, 5, 0) == pytest.approx(556.0, abs=0.5)


def test_symmetric():
    a = haversine_km(6.52, 3.38, 5.60, -0.19)
    b = haversine_km(5.60, -0.19, 6.52, 3.38)
    assert a == pytest.approx(b)


def test_antipodes():
    assert haversine_km(0, 0, 0, 180) == pytest.approx(math.pi * EARTH_RADIUS_KM)


@pytest.fixture
def points_engine():
    engine = create_db_engine("sqlite://")
    md = MetaData()
    points = Table(
        "points", md,
        Column("id", Integer, primary_key=True),
        Column("lat", Float),
        Column("lng", Float),
    )
    md.create_all(engine)
    with engine.begin() as conn:
        conn.execute(points.insert(), [
            {"id": 1, "lat": 5.0, "lng": 0.0},
            {"id": 2, "lat": 0.5, "lng": 0.0},
            {"id": 3, "lat": 0.1, "lng": 0.1},
            {"id": 4, "lat": None, "lng": None},
        ])
    yield engine, points
    engine.dispose()


def test_sql_matches_python(points_engine):
    engine, points = points_engine
    distance = distance_expression(points.c.lat, points.c.lng, 0.0, 0.0).label("distance")
    with engine.connect() as conn:
        rows = conn.execute(select(points.c.id, points.c.lat, points.c.lng, distance)).all()
    for row in rows:
        if row.lat is None:
            assert row.distance is None
        else:
            assert row.distance == pytest.approx(haversine_km(0.0, 0.0, row.lat, row.lng))


def test_sql_radius_filter_and_order(points_engine):
    engine, points = points_engine
    distance = distance_expression(points.c.lat, points.c.lng, 0.0, 0.0)
    labelled = distance.label("distance")
    stmt = select(points.c.id, labelled).where(distance < 100).order_by(labelled)
    with engine.connect() as conn:
        rows = conn.execute(stmt).all()
    assert [r.id for r in rows] == [3, 2]
    assert rows[0].distance < rows[1].distance


def test_sql_antipodal_point(points_engine):
    engine, points = points_engine
    # (-5, 180) is exactly opposite row 1 at (5, 0)
    distance = distance_expression(points.c.lat, points.c.lng, -5.0, 180.0).label("distance")
    with engine.connect() as conn:
        row = conn.execute(select(distance).where(points.c.id == 1)).one()
    assert row.distance == pytest.approx(math.pi * EARTH_RADIUS_KM)


def test_sql_clamps_before_asin():
    sql = str(distance_expression(Column("lat", Float), Column("lng", Float), 0.0, 0.0))
    assert "least(" in sql
