"""
Tests for geocoding, trip tracking and UPI payment links
"""

from unittest.mock import Mock

import pytest
import requests

from geo_utils import Coordinates
from rideshare_client import (NominatimGeocoder, GeocodingError, TripTracker, TripState,
                              TripStateError, build_upi_link, is_valid_upi_id)
from rideshare_client.payment import format_amount


def geocoder_with(payload=None, error=None):
    session = Mock()
    session.headers = {}
    response = Mock()
    response.raise_for_status.return_value = None
    response.json.return_value = payload
    if error:
        session.get.side_effect = error
    else:
        session.get.return_value = response
    return NominatimGeocoder(base_url='https://nominatim.test/', session=session), session


class TestNominatimGeocoder:

    def test_geocode(self):
        geocoder, session = geocoder_with([{'lat': '12.9716', 'lon': '77.5946'}])

        assert geocoder.geocode('MG Road, Bangalore') == Coordinates(12.9716, 77.5946)
        args, kwargs = session.get.call_args
        assert args == ('https://nominatim.test/search',)
        assert kwargs['params']['q'] == 'MG Road, Bangalore'
        assert session.headers['User-Agent']

    def test_no_results(self):
        geocoder, _ = geocoder_with([])
        with pytest.raises(GeocodingError):
            geocoder.geocode('Atlantis')

    def test_unparseable_coordinates(self):
        geocoder, _ = geocoder_with([{'lat': 'NaN?', 'lon': '77.5'}])
        with pytest.raises(GeocodingError):
            geocoder.geocode('Somewhere')

    def test_empty_query(self):
        geocoder, session = geocoder_with([])
        with pytest.raises(GeocodingError):
            geocoder.geocode('   ')
        session.get.assert_not_called()

    def test_network_failure(self):
        geocoder, _ = geocoder_with(error=requests.exceptions.ConnectionError('offline'))
        with pytest.raises(GeocodingError):
            geocoder.geocode('MG Road')

    def test_reverse(self):
        geocoder, session = geocoder_with({'display_name': 'MG Road, Bengaluru, Karnataka'})

        assert geocoder.reverse(Coordinates(12.97, 77.6)) == 'MG Road, Bengaluru, Karnataka'
        assert session.get.call_args.kwargs['params']['lat'] == 12.97

    def test_reverse_not_found(self):
        geocoder, _ = geocoder_with({'error': 'Unable to geocode'})
        with pytest.raises(GeocodingError):
            geocoder.reverse(Coordinates(0, 0))


class TestTripTracker:

    def tracker(self, **kwargs):
        return TripTracker(2, 'ravi', Coordinates(0, 0), Coordinates(0, 1), **kwargs)

    def test_quote(self):
        trip = self.tracker()

        assert trip.trip_distance == 111.19
        assert trip.eta_minutes == 167
        assert trip.fare == '1161.90'
        assert trip.distance_to_pickup is None

    def test_summary_matches_quote(self):
        trip = self.tracker()

        summary = trip.summary()

        assert trip.quote == {'distance_km': 111.19, 'eta_minutes': 167, 'fare': '1161.90'}
        assert summary == {
            'progress_id': 2, 'state': 'on progress', 'distance_to_pickup_km': None,
            'trip_distance_km': 111.19, 'eta_minutes': 167, 'fare': '1161.90',
        }

    def test_driver_distance(self):
        trip = self.tracker()
        trip.update_driver_location(Coordinates(1, 0))
        assert trip.distance_to_pickup == 111.19
        assert trip.summary()['distance_to_pickup_km'] == 111.19

    def test_from_locations(self):
        geocoder = Mock()
        geocoder.geocode.side_effect = [Coordinates(0, 0), Coordinates(0, 1)]

        trip = TripTracker.from_locations(geocoder, 2, 'ravi', 'MG Road', 'Indiranagar')

        assert trip.trip_distance == 111.19
        assert [c.args[0] for c in geocoder.geocode.call_args_list] == ['MG Road', 'Indiranagar']

    def test_mark_reached(self):
        api = Mock()
        api.complete_ride.return_value = {'id': 2, 'progress': 'completed'}
        trip = self.tracker()

        trip.mark_reached(api)

        api.complete_ride.assert_called_once_with('ravi', 2)
        assert trip.state is TripState.COMPLETED

    def test_mark_reached_twice(self):
        api = Mock()
        api.complete_ride.return_value = {'id': 2, 'progress': 'completed'}
        trip = self.tracker()
        trip.mark_reached(api)

        with pytest.raises(TripStateError):
            trip.mark_reached(api)
        assert api.complete_ride.call_count == 1

    def test_failed_completion_keeps_state(self):
        api = Mock()
        api.complete_ride.side_effect = RuntimeError('offline')
        trip = self.tracker()

        with pytest.raises(RuntimeError):
            trip.mark_reached(api)
        assert trip.state is TripState.ON_PROGRESS


class TestUpiLink:

    def test_link(self):
        assert build_upi_link('ravi@okaxis', 'Ravi Kumar', '161.9') == \
            'upi://pay?pa=ravi%40okaxis&pn=Ravi%20Kumar&am=161.90&cu=INR'

    def test_note(self):
        link = build_upi_link('ravi@okaxis', 'Ravi', 100, note='Trip 2')
        assert link.endswith('&tn=Trip%202')

    @pytest.mark.parametrize('upi_id', ['', 'ravi', 'ravi@', '@okaxis', 'ravi kumar@okaxis'])
    def test_invalid_upi_ids(self, upi_id):
        assert is_valid_upi_id(upi_id) is False
        with pytest.raises(ValueError):
            build_upi_link(upi_id, 'Ravi', 100)

    @pytest.mark.parametrize('amount', [0, -5, 'free', 'NaN'])
    def test_invalid_amounts(self, amount):
        with pytest.raises(ValueError):
            format_amount(amount)

    def test_amount_rounding(self):
        assert format_amount('99.995') == '100.00'
        assert format_amount(50) == '50.00'
