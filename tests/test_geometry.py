"""Tests for railchain/geo/geometry.py primitives."""
import pytest

from railchain.core.errors import InvalidInput, SplitError
from railchain.geo.geometry import (
    bearing_deg,
    coordinate_key,
    coordinates_to_wkt,
    haversine_m,
    is_valid_split,
    nearest_segment,
    polyline_length_m,
    split_at,
    turn_angle_deg,
)


class TestHaversine:
    def test_zero_for_same_point(self):
        assert haversine_m((10.0, 50.0), (10.0, 50.0)) == 0.0

    def test_one_degree_of_latitude(self):
        assert haversine_m((0.0, 0.0), (0.0, 1.0)) == pytest.approx(111_195, rel=1e-3)

    def test_symmetric(self):
        a, b = (-0.1276, 51.5072), (-3.1883, 55.9533)
        assert haversine_m(a, b) == pytest.approx(haversine_m(b, a))


class TestBearing:
    @pytest.mark.parametrize(
        "b, expected",
        [((0.0, 1.0), 0.0), ((1.0, 0.0), 90.0), ((0.0, -1.0), 180.0), ((-1.0, 0.0), 270.0)],
    )
    def test_cardinal_directions(self, b, expected):
        assert bearing_deg((0.0, 0.0), b) == pytest.approx(expected)

    def test_turn_angle_wraps(self):
        assert turn_angle_deg(350.0, 10.0) == pytest.approx(20.0)
        assert turn_angle_deg(90.0, 270.0) == pytest.approx(180.0)


def test_coordinate_key_rounds_to_seven_decimals():
    assert coordinate_key((1.000000049, 2.0)) == coordinate_key((1.0, 2.000000001))
    assert coordinate_key((1.0000001, 2.0)) != coordinate_key((1.0, 2.0))


def test_length_and_wkt():
    coords = [(0.0, 0.0), (0.0, 1.0), (0.0, 2.0)]
    assert polyline_length_m(coords) == pytest.approx(2 * haversine_m((0, 0), (0, 1)))
    assert polyline_length_m(coords[:1]) == 0.0
    assert coordinates_to_wkt([(1.5, 2.0), (3.0, 4.25)]) == "LINESTRING(1.5 2.0,3.0 4.25)"


class TestNearestSegment:
    def test_picks_closest_pair(self):
        line = [(0.0, 0.0), (0.01, 0.0), (0.01, 0.01)]
        idx, p = nearest_segment(line, (0.0102, 0.006))
        assert idx == 1
        assert p == pytest.approx((0.01, 0.006))

    def test_tie_goes_to_earliest_pair(self):
        # Query exactly at the shared vertex is equidistant to both pairs.
        line = [(0.0, 0.0), (0.01, 0.0), (0.02, 0.0)]
        idx, _ = nearest_segment(line, (0.01, 0.0))
        assert idx == 0

    def test_rejects_single_point(self):
        with pytest.raises(InvalidInput):
            nearest_segment([(0.0, 0.0)], (0.0, 0.0))


class TestSplitAt:
    def test_both_halves_share_point(self):
        left, right = split_at([(0, 0), (1, 0), (2, 0)], 1, (1.5, 0))
        assert left == ((0.0, 0.0), (1.0, 0.0), (1.5, 0.0))
        assert right == ((1.5, 0.0), (2.0, 0.0))

    @pytest.mark.parametrize("index", [-1, 2, 5])
    def test_invalid_index(self, index):
        with pytest.raises(SplitError):
            split_at([(0, 0), (1, 0), (2, 0)], index, (0.5, 0))


def test_is_valid_split_threshold():
    a, b = (0.0, 0.0), (0.001, 0.0)  # ~111 m apart
    assert is_valid_split((0.0005, 0.0), a, b)
    assert not is_valid_split((0.00005, 0.0), a, b)  # ~5.6 m from a
    assert is_valid_split((0.00005, 0.0), a, b, min_distance_m=5.0)
