import pytest

from models import Bounds, Viewport
from services.bbox_builder import bounds_from_viewport, expand_bounds


def test_expand_bounds_basic():
    bounds = Bounds(min_lat=40.34, min_lng=-74.67, max_lat=40.36, max_lng=-74.65)
    expanded = expand_bounds(bounds)
    assert expanded.min_lat == pytest.approx(40.33)
    assert expanded.max_lat == pytest.approx(40.37)
    assert expanded.min_lng == pytest.approx(-74.68)
    assert expanded.max_lng == pytest.approx(-74.64)
    # original rectangle must lie within the expanded one
    assert expanded.contains(bounds.min_lat, bounds.min_lng)
    assert expanded.contains(bounds.max_lat, bounds.max_lng)


def test_expand_bounds_custom_buffer():
    bounds = Bounds(min_lat=0.0, min_lng=0.0, max_lat=1.0, max_lng=1.0)
    expanded = expand_bounds(bounds, buffer=0.5)
    assert (expanded.min_lat, expanded.min_lng, expanded.max_lat, expanded.max_lng) == (-0.5, -0.5, 1.5, 1.5)


def test_bounds_from_viewport_is_centered():
    vp = Viewport(latitude=40.3573, longitude=-74.6553, zoom=12)
    b = bounds_from_viewport(vp)
    assert b.min_lat < vp.latitude < b.max_lat
    assert b.min_lng < vp.longitude < b.max_lng
    assert b.max_lat - b.min_lat == pytest.approx(0.02)
    assert b.max_lng - b.min_lng == pytest.approx(0.02)
