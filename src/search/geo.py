"""
Great-circle distance for location search.

``distance_expression`` builds the haversine formula as an SQL expression
over a table's latitude/longitude columns, so the database computes
``distance`` per row.  ``haversine_km`` is the same formula in Python.
"""
from __future__ import annotations

import math

from sqlalchemy import Float, func, literal
from sqlalchemy.sql.elements import ColumnElement

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Distance in kilometres between two (lat, lng) points in degrees."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = phi2 - phi1
    d_lambda = math.radians(lng2) - math.radians(lng1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(min(1.0, a)))


def distance_expression(
    lat_column: ColumnElement,
    lng_column: ColumnElement,
    lat: float,
    lng: float,
) -> ColumnElement:
    """Haversine distance (km) from (*lat*, *lng*) to each row, as SQL."""
    origin_lat = func.radians(literal(lat, Float), type_=Float)
    origin_lng = func.radians(literal(lng, Float), type_=Float)
    row_lat = func.radians(lat_column, type_=Float)
    row_lng = func.radians(lng_column, type_=Float)

    half_d_lat = func.sin((row_lat - origin_lat) / 2, type_=Float)
    half_d_lng = func.sin((row_lng - origin_lng) / 2, type_=Float)
    a = (
        func.power(half_d_lat, 2, type_=Float)
        + func.cos(origin_lat, type_=Float)
        * func.cos(row_lat, type_=Float)
        * func.power(half_d_lng, 2, type_=Float)
    )
    # rounding near antipodes can push a past 1
    a = func.least(a, 1.0, type_=Float)
    return 2 * EARTH_RADIUS_KM * func.asin(func.sqrt(a, type_=Float), type_=Float)
