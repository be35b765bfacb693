"""Unit tests for the containment classifier."""

import pytest
from app.services.containment import Bounds, is_inside

BOX = Bounds(sw_lat=10, sw_lng=10, ne_lat=20, ne_lng=20)


class TestUnsetBoundary:
    @pytest.mark.parametrize("lat,lng", [(0, 0), (89.9, 179.9), (-89.9, -179.9), (15, 15)])
    def test_no_boundary_means_inside(self, lat, lng):
        assert is_inside(lat, lng, None) is True

    @pytest.mark.parametrize("bounds", [
        Bounds(None, 10, 20, 20),
        Bounds(10, None, 20, 20),
        Bounds(10, 10, None, 20),
        Bounds(10, 10, 20, None),
    ])
    def test_partially_set_boundary_is_unset(self, bounds):
        assert bounds.is_set is False
        assert is_inside(-50, 150, bounds) is True


class TestRectangle:
    def test_center_inside(self):
        assert is_inside(15, 15, BOX) is True

    def test_south_of_box(self):
        assert is_inside(9, 15, BOX) is False

    def test_east_of_box(self):
        assert is_inside(15, 21, BOX) is False

    def test_edges_inclusive(self):
        assert is_inside(10, 10, BOX) is True
        assert is_inside(20, 20, BOX) is True
        assert is_inside(10, 20, BOX) is True

    def test_zero_bounds_are_real_bounds(self):
        equator_box = Bounds(sw_lat=0, sw_lng=0, ne_lat=1, ne_lng=1)
        assert equator_box.is_set is True
        assert is_inside(-0.5, 0.5, equator_box) is False
