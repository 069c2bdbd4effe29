"""
Unit tests -- strict validation of search requests.
"""
import pytest

from src.filters.registry import ResourceDefinition, get_resource
from src.filters.validator import validate_query


@pytest.fixture(scope="module")
def properties() -> ResourceDefinition:
    return get_resource("properties")


@pytest.fixture(scope="module")
def listings() -> ResourceDefinition:
    return get_resource("listings")


def test_valid_request_no_errors(properties):
    params = {
        "name": {"like": "ocean"},
        "lat": {"gte": "0"},
        "search": "sea",
        "page": "2",
    }
    assert validate_query(properties, params) == []


def test_empty_request_no_errors(listings):
    assert validate_query(listings, {}) == []


def test_unknown_param(listings):
    errors = validate_query(listings, {"colour": {"eq": "red"}})
    assert len(errors) == 1
    assert "colour" in errors[0]


def test_param_without_operator(listings):
    errors = validate_query(listings, {"category": "villa"})
    assert any("needs an operator" in e for e in errors)


def test_operator_not_allowed(listings):
    errors = validate_query(listings, {"category": {"like": "vil"}})
    assert any("'like' is not allowed" in e for e in errors)


def test_operator_not_in_vocabulary(listings):
    errors = validate_query(listings, {"category": {"approx": "vil"}})
    assert any("not a recognised operator" in e for e in errors)


def test_between_needs_two_values(listings):
    errors = validate_query(listings, {"price_per_night": {"btw": "150"}})
    assert any("exactly two" in e for e in errors)
    assert validate_query(listings, {"price_per_night": {"btw": "100,200"}}) == []
    assert validate_query(listings, {"price_per_night": {"not_btw": ["1", "2"]}}) == []


def test_reserved_listing_params(listings):
    params = {"amenities": "wifi,pool", "minPrice": "10", "maxPrice": "90", "per_page": "5"}
    assert validate_query(listings, params) == []


def test_geo_all_or_nothing(properties):
    errors = validate_query(properties, {"lat": "0", "lng": "0"})
    assert any("missing: radius" in e for e in errors)


def test_geo_must_be_numeric(properties):
    errors = validate_query(properties, {"lat": "north", "lng": "0", "radius": "10"})
    assert any("'lat' must be a number" in e for e in errors)


def test_geo_valid(properties):
    assert validate_query(properties, {"lat": "0", "lng": "0", "radius": "100"}) == []


def test_geo_not_checked_for_listings(listings):
    errors = validate_query(listings, {"lat": "0"})
    assert len(errors) == 1
    assert "Unknown filter parameter 'lat'" in errors[0]


def test_multiple_errors_at_once(listings):
    params = {
        "colour": {"eq": "red"},
        "category": {"like": "x"},
        "price_per_night": {"btw": "1,2,3"},
    }
    assert len(validate_query(listings, params)) == 3
