"""
Unit tests for distance, ETA and fare calculations
"""

import math
import pytest

from geo_utils import Coordinates, distance, eta, fare, trip_quote

BANGALORE = Coordinates(12.9716, 77.5946)
CHENNAI = Coordinates(13.0827, 80.2707)


class TestCoordinates:

    def test_accepts_valid_values(self):
        point = Coordinates(12.97, 77.59)
        assert point.latitude == 12.97
        assert point.longitude == 77.59

    @pytest.mark.parametrize('latitude,longitude', [
        (math.nan, 77.0),
        (12.0, math.inf),
        (91.0, 0.0),
        (0.0, -180.5),
    ])
    def test_rejects_invalid_values(self, latitude, longitude):
        with pytest.raises(ValueError):
            Coordinates(latitude, longitude)

    def test_rejects_non_numbers(self):
        with pytest.raises(ValueError):
            Coordinates('12.9', 77.5)
        with pytest.raises(ValueError):
            Coordinates(True, 77.5)

    def test_parse_from_strings(self):
        assert Coordinates.parse('12.5', '77.25') == Coordinates(12.5, 77.25)

    def test_parse_unparseable_text(self):
        with pytest.raises(ValueError):
            Coordinates.parse('north', '77.25')
        with pytest.raises(ValueError):
            Coordinates.parse(None, '77.25')


class TestDistance:

    def test_same_point_is_zero(self):
        assert distance(BANGALORE, BANGALORE) == 0.0

    def test_symmetric(self):
        assert distance(BANGALORE, CHENNAI) == distance(CHENNAI, BANGALORE)

    def test_one_degree_along_equator(self):
        assert distance(Coordinates(0, 0), Coordinates(0, 1)) == 111.19

    def test_one_degree_along_meridian(self):
        assert distance(Coordinates(0, 0), Coordinates(1, 0)) == 111.19

    def test_rounded_to_two_decimals(self):
        km = distance(BANGALORE, CHENNAI)
        assert km == round(km, 2)
        assert 280 < km < 300


class TestEta:

    def test_one_hour_at_average_speed(self):
        assert eta(40) == 60

    def test_zero_distance(self):
        assert eta(0) == 0

    def test_halves_round_up(self):
        assert eta(5) == 8    # 7.5 minutes
        assert eta(15) == 23  # 22.5 minutes

    def test_rounds_down_below_half(self):
        assert eta(0.25) == 0  # 0.375 minutes


class TestFare:

    def test_base_fare_only(self):
        assert fare(0) == "50.00"

    def test_per_km_rate(self):
        assert fare(5.0) == "100.00"
        assert fare(12.5) == "175.00"

    def test_two_decimals(self):
        assert fare(111.19) == "1161.90"


def test_trip_quote_bundles_values():
    quote = trip_quote(Coordinates(0, 0), Coordinates(0, 1))
    assert quote == {'distance_km': 111.19, 'eta_minutes': 167, 'fare': '1161.90'}
