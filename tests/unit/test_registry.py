"""
Unit tests -- filter registry: YAML parsing and lookups.
"""
import pytest

from src.filters.engine import FilterSpec, FilterSpecError
from src.filters.operators import Operator
from src.filters.registry import (
    FilterRegistry,
    ResourceDefinition,
    _parse_registry,
    get_filter_spec,
    get_resource,
    load_filter_registry,
)


def test_loads_without_error():
    registry = load_filter_registry()
    assert isinstance(registry, FilterRegistry)
    assert registry.version == 1
    assert registry.get_resource_names() == ["properties", "listings"]


def test_registry_is_cached():
    assert load_filter_registry() is load_filter_registry()


def test_property_params():
    spec = get_filter_spec("properties")
    assert isinstance(spec, FilterSpec)
    assert spec.params["name"] == (Operator.EQ, Operator.LIKE)
    assert spec.params["verified"] == (Operator.EQ,)
    assert Operator.BTW in spec.params["lat"]
    assert set(spec.params) == {
        "name", "host_id", "description", "address", "lat", "lng",
        "phone", "hours", "category", "verified",
    }


def test_listing_params():
    spec = get_filter_spec("listings")
    assert Operator.NOT_IN in spec.params["price_per_night"]
    assert spec.params["tags"] == (Operator.EQ, Operator.LIKE)
    assert spec.params["property_id"] == (Operator.EQ,)


def test_property_extensions():
    r = get_resource("properties")
    assert isinstance(r, ResourceDefinition)
    assert r.search_columns == ("name", "description", "address")
    assert r.geo is not None and r.geo.lat_column == "lat"
    assert r.default_per_page == 15
    assert "radius" in r.reserved_params


def test_listing_extensions():
    r = get_resource("listings")
    assert r.json_contains["accessibility"] == "accessibility_features"
    assert r.grouped_like_columns == ("name", "description", "tags")
    assert r.price_aliases.min_param == "minPrice"
    assert r.geo is None
    assert r.default_per_page == 10


def test_unknown_resource():
    with pytest.raises(KeyError):
        get_resource("bookings")


def test_catalog_shape():
    catalog = load_filter_registry().catalog()
    props = next(c for c in catalog if c["resource"] == "properties")
    assert props["params"]["name"] == ["eq", "like"]
    assert props["search_columns"] == ["name", "description", "address"]


def test_parse_rejects_unknown_operator():
    raw = {"resources": [{"name": "things", "params": {"size": ["eq", "approx"]}}]}
    with pytest.raises(FilterSpecError):
        _parse_registry(raw)


def test_parse_defaults():
    registry = _parse_registry({"resources": [{"name": "things", "params": {"size": ["eq"]}}]})
    r = registry.resource("things")
    assert r.table == "things"
    assert r.filter_spec.column_for("size") == "size"
    assert r.search_columns == ()
    assert r.geo is None
